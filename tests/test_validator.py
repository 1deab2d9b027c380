"""
End-to-end tests of the validation orchestrator on the sample files.
"""

import pytest
from hypothesis import given, strategies as st

from omics_valid.config import SystemConfig, set_config
from omics_valid.errors import ConfigurationError
from omics_valid.models.records import OmicsFormat
from omics_valid.models.validation import ErrorKind
from omics_valid.validation.metabolites import IdentifierSetModel
from omics_valid.validation.validator import Validator, validate


def _kinds(report):
    return [error.kind for error in report.errors]


class TestProteomicsFiles:
    """Validation of prot and tidy_prot files."""

    def test_single_invalid_accession(self, test_data_dir, read_lines):
        """A five-row prot file with one bad accession on line 4."""
        reports = validate("prot", read_lines(test_data_dir / "uni.csv"))

        assert len(reports) == 1
        assert reports[0].line_number == 4
        assert _kinds(reports[0]) == [ErrorKind.INVALID_IDENTIFIER]
        assert reports[0].errors[0].detail == "E0X97"

    def test_valid_tidy_file_is_silent(self, test_data_dir, read_lines):
        """Header plus valid rows produce no report."""
        assert validate(OmicsFormat.TIDY_PROT, read_lines(test_data_dir / "uni_tidy.csv")) == []

    def test_tidy_row_with_two_errors(self):
        """Both violations of a line end up in one report, in rule order."""
        reports = validate("tidy_prot", ["uniprot,sample,value\n", "not_an_id,,1\n"])

        assert len(reports) == 1
        assert reports[0].line_number == 1
        assert _kinds(reports[0]) == [ErrorKind.INVALID_IDENTIFIER, ErrorKind.EMPTY_SAMPLE_NAME]

    def test_tidy_file_without_header(self):
        """The first line counts as data when it does not name the columns."""
        reports = validate("tidy_prot", ["Q00496,s1,1\n", "bad,s1,2\n"])
        assert [r.line_number for r in reports] == [2]

    def test_bad_first_row_is_not_taken_for_a_header(self):
        """A headerless file whose first value is not a number reports that row."""
        reports = validate("tidy_prot", ["E0X97,s1,abc\n", "Q00496,s1,1\n"])

        assert [r.line_number for r in reports] == [1]
        assert _kinds(reports[0]) == [ErrorKind.MALFORMED_RECORD]

    def test_bigg_id_header_is_consumed(self, met_model):
        reports = validate("met", ["bigg_id,sample,value\n", "glc__D,SIM1,1\n", "nope,SIM1,2\n"], model=met_model)

        assert [r.line_number for r in reports] == [2]
        assert _kinds(reports[0]) == [ErrorKind.IDENTIFIER_NOT_IN_MODEL]

    def test_malformed_line_does_not_stop_the_run(self):
        """A line that cannot be parsed only condemns itself."""
        lines = ["uniprot,sample,value", "Q00496,s1", "E0X97,s1,3", "Q00496,s1,oops", "Q00496,s1,4"]
        reports = validate("tidy_prot", lines)

        assert [r.line_number for r in reports] == [1, 2, 3]
        assert _kinds(reports[0]) == [ErrorKind.MALFORMED_RECORD]
        assert reports[0].errors[0].message == "malformed record: expected 3 fields, found 2"
        assert _kinds(reports[1]) == [ErrorKind.INVALID_IDENTIFIER]
        assert _kinds(reports[2]) == [ErrorKind.MALFORMED_RECORD]

    def test_blank_lines_and_bom_are_ignored(self):
        lines = ["\ufeffQ00496,1,2\r\n", "\r\n", "   \n", "E0X97,1,2\r\n"]
        reports = validate("prot", lines)

        assert [r.line_number for r in reports] == [2]
        assert reports[0].errors[0].detail == "E0X97"

    def test_empty_input(self):
        assert validate("prot", []) == []


class TestMetaboliteFiles:
    """Validation of met files against a model."""

    def test_unknown_metabolite(self, test_data_dir, read_lines, met_model):
        reports = validate("met", read_lines(test_data_dir / "met_tidy.csv"), model=met_model)

        assert len(reports) == 1
        assert reports[0].line_number == 3
        assert reports[0].errors[0].message == "clearly_not_a_metabolite not in model!"

    def test_other_namespace_is_flagged_too(self, test_data_dir, read_lines):
        """Matching is exact, equivalent identifiers of other namespaces do not count."""
        model = IdentifierSetModel(["glc__D", "acon_C", "MNXM83"])
        reports = validate("met", read_lines(test_data_dir / "met_tidy.csv"), model=model)

        assert [r.line_number for r in reports] == [3, 5]
        assert reports[1].errors[0].detail == "cpd00067"

    def test_met_without_model_fails_before_reading(self):
        """The model check happens before any line is consumed."""
        consumed = []

        def lines():
            for line in ["met_id,sample,value", "glc__D,SIM1,1"]:
                consumed.append(line)
                yield line

        with pytest.raises(ConfigurationError):
            Validator(SystemConfig()).run("met", lines())

        assert consumed == []


class TestRnaManifests:
    """Validation of RNA-seq manifests with FASTQ checks."""

    def test_manifest(self, test_data_dir, read_lines, test_config):
        reports = validate("rna", read_lines(test_data_dir / "rna.tsv"), config=test_config)

        assert [r.line_number for r in reports] == [4, 5]
        assert _kinds(reports[0]) == [ErrorKind.FASTQ_PATH_MISSING, ErrorKind.LIBRARY_LAYOUT_MISMATCH]
        assert reports[0].errors[0].detail == "reads/missing_R1.fastq"
        assert _kinds(reports[1]) == [ErrorKind.FASTQ_MALFORMED]
        assert reports[1].errors[0].reason == "record 2: truncated record, expected 4 lines but found 2"

    def test_single_layout_with_missing_file(self, test_config):
        """A consistent single layout only reports the missing file."""
        lines = [
            "Experiment\tLibraryLayout\tPlatform\tRun\tR1\tR2",
            "exp1\tSingle\tILLUMINA\t\treads/nowhere.fastq\t",
        ]
        reports = validate("rna", lines, config=test_config)

        assert len(reports) == 1
        assert _kinds(reports[0]) == [ErrorKind.FASTQ_PATH_MISSING]

    def test_home_relative_path_is_reported(self, test_config):
        """A ``~user`` path that does not exist is one finding, not a crash."""
        lines = [
            "Experiment\tLibraryLayout\tPlatform\tRun\tR1\tR2",
            "exp1\tSINGLE\tILLUMINA\t\t~nosuchuser/r1.fastq\t",
            "exp2\tSINGLE\tILLUMINA\t\treads/sample_R1.fastq\t",
        ]
        reports = validate("rna", lines, config=test_config)

        assert [r.line_number for r in reports] == [1]
        assert _kinds(reports[0]) == [ErrorKind.FASTQ_PATH_MISSING]
        assert reports[0].errors[0].detail == "~nosuchuser/r1.fastq"

    def test_manifest_without_fastq_checks(self, test_data_dir, read_lines, test_config):
        test_config.fastq.enabled = False
        reports = validate("rna", read_lines(test_data_dir / "rna.tsv"), config=test_config)

        assert [r.line_number for r in reports] == [4]
        assert _kinds(reports[0]) == [ErrorKind.LIBRARY_LAYOUT_MISMATCH]

    def test_header_missing_column(self, test_config):
        lines = [
            "Experiment\tLibraryLayout\tRun\tR1\tR2",
            "exp1\tSINGLE\t\treads/sample_R1.fastq\t",
            "exp2\tSINGLE\t\treads/sample_R1.fastq\t",
        ]
        reports = validate("rna", lines, config=test_config)

        assert [r.line_number for r in reports] == [1, 2]
        assert reports[0].errors[0].detail == "missing column(s) Platform in header"


class TestValidationRun:
    """Properties of a complete run."""

    def test_run_summary(self, test_data_dir, read_lines):
        run = Validator().run("prot", read_lines(test_data_dir / "uni.csv"))

        assert run.format == OmicsFormat.PROT
        assert run.lines_processed == 5
        assert not run.passed
        assert run.error_count == 1

    def test_uses_global_config(self):
        config = SystemConfig()
        config.rules.allow_accession_version = True
        set_config(config)

        assert validate("prot", ["Q00496.1,1"]) == []

    def test_runs_are_repeatable(self, test_data_dir, read_lines, test_config):
        lines = read_lines(test_data_dir / "rna.tsv")
        first = validate("rna", lines, config=test_config)
        second = validate("rna", lines, config=test_config)

        assert first == second

    def test_summary_is_logged(self, caplog):
        with caplog.at_level("INFO"):
            validate("prot", ["Q00496,1", "E0X97,2"])

        assert any(
            "Validation of prot finished: 2 lines, 1 invalid (1 errors)" in record.message
            for record in caplog.records
        )

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            validate("flux", ["a,b"])

    @given(st.lists(st.sampled_from(["Q00496,1", "E0X97,1", "", "x,y,z", "A0A023GPI8"]), max_size=30))
    def test_reports_are_strictly_increasing(self, lines):
        """Line numbers of reports are unique and ordered."""
        numbers = [report.line_number for report in validate("prot", lines, config=SystemConfig())]

        assert numbers == sorted(set(numbers))
        assert all(number >= 1 for number in numbers)
