"""
Command-line interface for the Omics Valid system.

Validates one omics file (or stdin) and prints one line per invalid record.
Silence means the file is valid. Exit codes: 0 valid, 1 invalid records
found, 2 the run could not start (bad configuration, missing model,
unreadable input).
"""

import sys
from pathlib import Path
from typing import Iterator, Optional

import click

from . import __version__
from .config import SystemConfig, load_config_from_file
from .errors import (
    ConfigurationError,
    InputError,
    OmicsValidError,
    create_error_context,
    handle_error,
)
from .logging_config import setup_logging
from .models.records import OmicsFormat

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_SETUP_FAILURE = 2


def _read_lines(file: Optional[Path], encoding: str) -> Iterator[str]:
    """Yield the lines of a file, or of stdin when no file is given."""
    context = create_error_context("read_input", file_path=str(file) if file else "<stdin>")
    try:
        if file is None:
            yield from click.get_text_stream('stdin', encoding=encoding)
        else:
            with open(file, 'r', encoding=encoding, newline='') as f:
                yield from f
    except UnicodeDecodeError as e:
        raise InputError(f"Input is not valid {encoding} text: {e}", context=context, original_exception=e) from e
    except OSError as e:
        raise InputError(f"Cannot read input file: {e}", context=context, original_exception=e) from e


def _load_config(config_path: Optional[str]) -> SystemConfig:
    source = config_path or "environment"
    try:
        if not config_path:
            return SystemConfig.from_env()
        return load_config_from_file(config_path)
    except (OSError, ValueError) as e:
        raise ConfigurationError(
            f"Cannot load configuration from {source}: {e}",
            context=create_error_context("load_config", file_path=config_path),
            original_exception=e
        ) from e


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.argument('file', required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.option('--format', '-f', 'omics_format', type=click.Choice([f.value for f in OmicsFormat]),
              default=OmicsFormat.TIDY_PROT.value, show_default=True,
              help='Format of the omics file')
@click.option('--model', '-m', 'model_path', type=click.Path(dir_okay=False, path_type=Path),
              help='SBML model (.xml/.sbml) or identifier list used to verify metabolites')
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--fastq-base-dir', type=click.Path(file_okay=False),
              help='Directory relative FASTQ paths of RNA manifests are resolved against')
@click.option('--no-fastq', is_flag=True,
              help='Skip FASTQ file checks for RNA manifests')
@click.option('--json', 'as_json', is_flag=True,
              help='Print the full result as JSON')
@click.option('--verbose', '-v', is_flag=True,
              help='Enable verbose logging')
@click.version_option(__version__, '--version', prog_name='omics-valid')
def main(file, omics_format, model_path, config, fastq_base_dir, no_fastq, as_json, verbose):
    """Omics Valid - validate proteomics, metabolomics and RNA-seq files.

    FILE is the omics file to validate; standard input is read when omitted.
    """
    from .validation import Reporter, Validator, load_model

    try:
        system_config = _load_config(config)
    except ConfigurationError as e:
        click.echo(f"error: {e.message}", err=True)
        sys.exit(EXIT_SETUP_FAILURE)

    if verbose:
        system_config.logging.level = "DEBUG"
    if fastq_base_dir:
        system_config.fastq.base_dir = fastq_base_dir
    if no_fastq:
        system_config.fastq.enabled = False

    setup_logging(system_config.logging)

    omics_format = OmicsFormat(omics_format)
    try:
        model = None
        if omics_format == OmicsFormat.MET:
            if model_path is None:
                raise ConfigurationError(
                    "Validating metabolomics requires a model, pass one with --model",
                    context=create_error_context("validate", omics_format=omics_format.value)
                )
            model = load_model(model_path, encoding=system_config.input.encoding)

        validator = Validator(system_config)
        run = validator.run(omics_format, _read_lines(file, system_config.input.encoding), model=model)

    except OmicsValidError as e:
        handle_error(e, e.context)
        click.echo(f"error: {e.message}", err=True)
        sys.exit(EXIT_SETUP_FAILURE)

    reporter = Reporter()
    if as_json:
        click.echo(reporter.render_json(run))
    else:
        for line in reporter.render_all(run.reports):
            click.echo(line)

    sys.exit(EXIT_VALID if run.passed else EXIT_INVALID)


if __name__ == '__main__':
    main()
