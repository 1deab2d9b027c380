"""
Tests for the command-line interface.
"""

import json

import pytest
from click.testing import CliRunner

from omics_valid import __version__
from omics_valid.cli import EXIT_INVALID, EXIT_SETUP_FAILURE, EXIT_VALID, main


@pytest.fixture
def runner(monkeypatch):
    """CLI runner with logging quiet enough to keep output to the report."""
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    for name in ("FASTQ_CHECK", "FASTQ_BASE_DIR", "FASTQ_MAX_RECORDS", "INPUT_ENCODING", "ACCESSION_ALLOW_VERSION"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


class TestProteomicsCommands:
    """prot and tidy_prot invocations."""

    def test_invalid_prot_file(self, runner, test_data_dir):
        result = runner.invoke(main, [str(test_data_dir / "uni.csv"), "--format", "prot"])

        assert result.exit_code == EXIT_INVALID
        assert result.output == "1 lines[4]: E0X97 invalid Uniprot ID\n"

    def test_valid_file_is_silent(self, runner, test_data_dir):
        """tidy_prot is the default format."""
        result = runner.invoke(main, [str(test_data_dir / "uni_tidy.csv")])

        assert result.exit_code == EXIT_VALID
        assert result.output == ""

    def test_reads_stdin(self, runner):
        result = runner.invoke(main, ["-f", "prot"], input="Q00496,1\nE0X97,2\n")

        assert result.exit_code == EXIT_INVALID
        assert result.output == "1 lines[2]: E0X97 invalid Uniprot ID\n"

    def test_json_output(self, runner, test_data_dir):
        result = runner.invoke(main, [str(test_data_dir / "uni.csv"), "-f", "prot", "--json"])
        data = json.loads(result.output)

        assert result.exit_code == EXIT_INVALID
        assert data["lines_processed"] == 5
        assert data["reports"][0]["line"] == 4

    def test_config_file_enables_versions(self, runner, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"logging": {"level": "ERROR"}, "rules": {"allow_accession_version": True}}))

        result = runner.invoke(main, ["-f", "prot", "-c", str(config_path)], input="Q00496.2,1\n")

        assert result.exit_code == EXIT_VALID

    def test_verbose_run(self, runner, test_data_dir):
        result = runner.invoke(main, [str(test_data_dir / "uni_tidy.csv"), "-v"])
        assert result.exit_code == EXIT_VALID


class TestMetaboliteCommands:
    """met invocations."""

    def test_unknown_metabolite(self, runner, test_data_dir):
        result = runner.invoke(main, [
            str(test_data_dir / "met_tidy.csv"), "-f", "met", "-m", str(test_data_dir / "model_ids.txt")
        ])

        assert result.exit_code == EXIT_INVALID
        assert result.output == "1 lines[3]: clearly_not_a_metabolite not in model!\n"

    def test_model_required(self, runner, test_data_dir):
        result = runner.invoke(main, [str(test_data_dir / "met_tidy.csv"), "-f", "met"])

        assert result.exit_code == EXIT_SETUP_FAILURE
        assert "error: Validating metabolomics requires a model" in result.output

    def test_missing_model_file(self, runner, test_data_dir, tmp_path):
        result = runner.invoke(main, [
            str(test_data_dir / "met_tidy.csv"), "-f", "met", "-m", str(tmp_path / "absent.txt")
        ])

        assert result.exit_code == EXIT_SETUP_FAILURE
        assert "error: Could not read identifier list" in result.output


class TestRnaCommands:
    """rna invocations."""

    def test_manifest(self, runner, test_data_dir):
        result = runner.invoke(main, [
            str(test_data_dir / "rna.tsv"), "-f", "rna", "--fastq-base-dir", str(test_data_dir)
        ])

        assert result.exit_code == EXIT_INVALID
        assert result.output.splitlines() == [
            "1 lines[4]: reads/missing_R1.fastq: Declared FASTQ path does not exist!;\t"
            "Inconsistent experiment: R1 and R2 did not match the LibraryLayout! "
            "(assuming local data since field 'Run' is empty)",
            "2 lines[5]: reads/truncated.fastq: failure reading FASTQ! "
            "record 2: truncated record, expected 4 lines but found 2",
        ]

    def test_manifest_without_fastq_checks(self, runner, test_data_dir):
        result = runner.invoke(main, [str(test_data_dir / "rna.tsv"), "-f", "rna", "--no-fastq"])

        assert result.exit_code == EXIT_INVALID
        assert len(result.output.splitlines()) == 1
        assert result.output.startswith("1 lines[4]: Inconsistent experiment")


class TestSetupFailures:
    """Failures that stop a run before any report."""

    def test_missing_input_file(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path / "absent.csv"), "-f", "prot"])

        assert result.exit_code == EXIT_SETUP_FAILURE
        assert "error: Cannot read input file" in result.output

    def test_broken_config_file(self, runner, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text("{not json")

        result = runner.invoke(main, ["-c", str(config_path)], input="")

        assert result.exit_code == EXIT_SETUP_FAILURE
        assert "error: Cannot load configuration from" in result.output

    def test_mistyped_config_value(self, runner, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"fastq": {"max_records": "lots"}}))

        result = runner.invoke(main, ["-f", "prot", "-c", str(config_path)], input="Q00496,1\n")

        assert result.exit_code == EXIT_SETUP_FAILURE
        assert "Invalid value for fastq.max_records: 'lots'" in result.output

    def test_mistyped_environment_value(self, runner, monkeypatch):
        monkeypatch.setenv("FASTQ_MAX_RECORDS", "lots")

        result = runner.invoke(main, ["-f", "prot"], input="Q00496,1\n")

        assert result.exit_code == EXIT_SETUP_FAILURE
        assert "error: Cannot load configuration from environment" in result.output
        assert "FASTQ_MAX_RECORDS" in result.output
        assert "Traceback" not in result.output

    def test_unknown_log_level(self, runner, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        result = runner.invoke(main, ["-f", "prot"], input="Q00496,1\n")

        assert result.exit_code == EXIT_SETUP_FAILURE
        assert "Invalid value for logging.level: 'LOUD'" in result.output

    def test_unknown_format(self, runner):
        result = runner.invoke(main, ["-f", "flux"], input="")
        assert result.exit_code == 2

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output
