"""
Pytest configuration and shared fixtures for the test suite.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

import pytest

from omics_valid.config import SystemConfig, FastqConfig, LoggingConfig, set_config
from omics_valid.errors import set_error_handler
from omics_valid.logging_config import ContextualFormatter, JSONFormatter
from omics_valid.validation.metabolites import IdentifierSetModel


@pytest.fixture(scope="session")
def test_data_dir():
    """Get the test data directory path."""
    return Path(__file__).parent / "data"


@pytest.fixture
def temp_config_file():
    """Create a temporary configuration file for testing."""
    config_data = {
        "logging": {
            "level": "DEBUG",
            "format": "json"
        },
        "fastq": {
            "enabled": False,
            "max_records": 10
        },
        "input": {
            "encoding": "latin-1"
        },
        "rules": {
            "allow_accession_version": True
        }
    }

    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump(config_data, f)
        temp_file = f.name

    yield temp_file

    # Cleanup
    os.unlink(temp_file)


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up mock environment variables for testing."""
    env_vars = {
        "LOG_LEVEL": "DEBUG",
        "LOG_FORMAT": "json",
        "FASTQ_CHECK": "false",
        "FASTQ_BASE_DIR": "/data/reads",
        "FASTQ_MAX_RECORDS": "1000",
        "INPUT_ENCODING": "latin-1",
        "ACCESSION_ALLOW_VERSION": "true"
    }

    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)

    return env_vars


@pytest.fixture
def test_config(test_data_dir):
    """Configuration resolving FASTQ paths against the test data directory."""
    return SystemConfig(
        logging=LoggingConfig(level="WARNING"),
        fastq=FastqConfig(enabled=True, base_dir=str(test_data_dir))
    )


@pytest.fixture
def met_model():
    """Small in-memory metabolite model."""
    return IdentifierSetModel(["glc__D", "acon_C", "MNXM83", "cpd00067"], source="fixture")


@pytest.fixture
def read_lines():
    """Read a test file the way the command line does, keeping line endings."""
    def _read(path):
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return f.readlines()
    return _read


@pytest.fixture(autouse=True)
def setup_test_config():
    """Automatically set up test configuration for all tests."""
    test_config = SystemConfig()
    set_config(test_config)

    root_logger = logging.getLogger()
    saved_level = root_logger.level

    yield test_config

    # Cleanup - reset to None
    set_config(None)
    set_error_handler(None)

    # Drop handlers installed by setup_logging() so they do not leak into other tests
    for handler in list(root_logger.handlers):
        if isinstance(handler.formatter, (JSONFormatter, ContextualFormatter)):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(saved_level)
