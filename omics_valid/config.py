"""
Configuration management for the Omics Valid system.

This module provides configuration classes and utilities for managing
logging, FASTQ checking, and input parsing parameters.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Optional, Union, get_type_hints
import json


@dataclass
class LoggingConfig:
    """Logging system configuration."""
    level: str = "WARNING"
    format: str = "text"
    log_file: Optional[str] = None
    max_file_size_mb: int = 100
    backup_count: int = 5
    structured: bool = True


@dataclass
class FastqConfig:
    """FASTQ integrity checking configuration for RNA manifests."""
    enabled: bool = True
    base_dir: Optional[str] = None  # relative R1/R2 paths resolve here, default: cwd
    max_records: Optional[int] = None  # None scans whole files


@dataclass
class InputConfig:
    """Input file parsing configuration."""
    encoding: str = "utf-8"
    delimiter: str = ","
    rna_delimiter: str = "\t"


@dataclass
class RulesConfig:
    """Per-format rule tuning."""
    allow_accession_version: bool = False  # accept Q00496.2 style accessions


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _coerce(name: str, value: Any, expected: Any) -> Any:
    """
    Convert a raw configuration value to the type of its field.

    Environment variables are always strings and JSON files may quote numbers,
    so numeric and boolean strings are converted. Anything else of the wrong
    type raises ValueError naming ``name``, the variable or ``section.key``
    the value came from.
    """
    optional = False
    if getattr(expected, "__origin__", None) is Union:
        expected = next(arg for arg in expected.__args__ if arg is not type(None))
        optional = True

    if value is None:
        if optional:
            return None
    elif expected is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
    elif expected is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            return int(value.strip())
    elif expected is str:
        if isinstance(value, str):
            return value

    raise ValueError(f"Invalid value for {name}: {value!r}")


# Environment variable -> (section, field)
ENV_VARIABLES = {
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FILE": ("logging", "log_file"),
    "LOG_FORMAT": ("logging", "format"),
    "FASTQ_CHECK": ("fastq", "enabled"),
    "FASTQ_BASE_DIR": ("fastq", "base_dir"),
    "FASTQ_MAX_RECORDS": ("fastq", "max_records"),
    "INPUT_ENCODING": ("input", "encoding"),
    "ACCESSION_ALLOW_VERSION": ("rules", "allow_accession_version"),
}


@dataclass
class SystemConfig:
    """Main system configuration combining all subsystem configs."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    fastq: FastqConfig = field(default_factory=FastqConfig)
    input: InputConfig = field(default_factory=InputConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)

    def _update(self, section_name: str, key: str, value: Any, source: str) -> None:
        section = getattr(self, section_name)
        expected = get_type_hints(type(section))[key]
        setattr(section, key, _coerce(source, value, expected))

    def validate(self) -> None:
        """Reject values of the right type that no run could use."""
        if self.logging.level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Invalid value for logging.level: {self.logging.level!r}")
        if self.fastq.max_records is not None and self.fastq.max_records < 1:
            raise ValueError(f"Invalid value for fastq.max_records: {self.fastq.max_records!r}")

    @classmethod
    def from_env(cls) -> "SystemConfig":
        """
        Create configuration from environment variables.

        Raises:
            ValueError: If a variable cannot be converted to its field's type
        """
        config = cls()

        for variable, (section_name, key) in ENV_VARIABLES.items():
            value = os.getenv(variable)
            if value:
                config._update(section_name, key, value, variable)

        config.validate()
        return config

    @classmethod
    def from_file(cls, config_path: str) -> "SystemConfig":
        """
        Load configuration from JSON file.

        Unknown sections and keys are ignored.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the file is not JSON or a value has the wrong type
        """
        with open(config_path, 'r') as f:
            config_data = json.load(f)

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a JSON object")

        config = cls()

        for section_name in ("logging", "fastq", "input", "rules"):
            section_data = config_data.get(section_name)
            if section_data is None:
                continue
            if not isinstance(section_data, dict):
                raise ValueError(f"Invalid value for {section_name}: expected an object")
            for key, value in section_data.items():
                if hasattr(getattr(config, section_name), key):
                    config._update(section_name, key, value, f"{section_name}.{key}")

        config.validate()
        return config

    def to_file(self, config_path: str) -> None:
        """Save configuration to JSON file."""
        config_data = {
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "log_file": self.logging.log_file,
                "max_file_size_mb": self.logging.max_file_size_mb,
                "backup_count": self.logging.backup_count,
                "structured": self.logging.structured
            },
            "fastq": {
                "enabled": self.fastq.enabled,
                "base_dir": self.fastq.base_dir,
                "max_records": self.fastq.max_records
            },
            "input": {
                "encoding": self.input.encoding,
                "delimiter": self.input.delimiter,
                "rna_delimiter": self.input.rna_delimiter
            },
            "rules": {
                "allow_accession_version": self.rules.allow_accession_version
            }
        }

        with open(config_path, 'w') as f:
            json.dump(config_data, f, indent=2)


# Global configuration instance
_config: Optional[SystemConfig] = None


def get_config() -> SystemConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = SystemConfig.from_env()
    return _config


def set_config(config: Optional[SystemConfig]) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def load_config_from_file(config_path: str) -> SystemConfig:
    """Load and set configuration from file."""
    config = SystemConfig.from_file(config_path)
    set_config(config)
    return config
