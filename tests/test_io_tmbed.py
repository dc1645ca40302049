"""Tests for TMbed prediction file reading."""

import logging

import pytest

from receptorscan.io.tmbed import (
    LengthMismatchError,
    TopologyRecord,
    check_topology_length,
    iter_tmbed_records,
    read_tmbed_predictions,
)


class TestIterTMbedRecords:
    """Tests for raw record iteration."""

    def test_single_line_records(self, tmp_path):
        """Each record has a header, a sequence and a prediction line."""
        path = tmp_path / "test.pred"
        path.write_text(">P1 some description\nMKTAYIAK\nSSSShhhh\n>P2\nMKV\niii\n")

        records = list(iter_tmbed_records(path))

        assert [record.protein_id for record in records] == ["P1", "P2"]
        assert records[0].sequence == "MKTAYIAK"
        assert records[0].topology == "SSSShhhh"
        assert len(records[0].topology) == len(records[0].sequence) == 8

    def test_wrapped_records(self, tmp_path):
        """Wrapped sequence lines are followed by wrapped prediction lines."""
        path = tmp_path / "wrapped.pred"
        path.write_text(">P1\nMKTA\nYIAK\nSSSS\nhhhh\n")

        (record,) = iter_tmbed_records(path)

        assert record.sequence == "MKTAYIAK"
        assert record.topology == "SSSShhhh"

    def test_blank_lines_ignored(self, tmp_path):
        """Blank lines between records are skipped."""
        path = tmp_path / "blank.pred"
        path.write_text("\n>P1\nMK\nhh\n\n\n>P2\nMK\noo\n")
        assert len(list(iter_tmbed_records(path))) == 2

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            list(iter_tmbed_records(tmp_path / "missing.pred"))


class TestReadTMbedPredictions:
    """Tests for validated reading."""

    def test_reads_all_valid(self, rlk_pred):
        """Consistent records are keyed by protein ID in file order."""
        records = read_tmbed_predictions(rlk_pred)
        assert list(records) == ["RLK1", "RLK2", "RVR1", "SOL1"]
        assert records["RLK1"].topology.startswith("SSSSS")

    def test_inconsistent_record_dropped(self, tmp_path, caplog):
        """Records whose halves differ in length are skipped with a warning."""
        path = tmp_path / "bad.pred"
        path.write_text(">GOOD\nMKV\nhhh\n>BAD\nMKV\nhh\n")

        with caplog.at_level(logging.WARNING):
            records = read_tmbed_predictions(path)

        assert list(records) == ["GOOD"]
        assert "BAD" in caplog.text

    def test_duplicate_keeps_last(self, tmp_path):
        """A repeated protein ID keeps the later record."""
        path = tmp_path / "dup.pred"
        path.write_text(">P1\nMK\noo\n>P1\nMK\nhh\n")
        assert read_tmbed_predictions(path)["P1"].topology == "hh"


class TestLengthCheck:
    """Tests for topology length validation."""

    def test_matching_lengths(self):
        """Equal lengths pass silently."""
        check_topology_length("P1", "hhoo", 4)

    def test_mismatch_raises(self):
        """Different lengths raise LengthMismatchError with details."""
        with pytest.raises(LengthMismatchError) as exc_info:
            check_topology_length("P1", "hho", 4)
        assert exc_info.value.protein_id == "P1"
        assert exc_info.value.topology_length == 3
        assert exc_info.value.sequence_length == 4

    def test_record_validate(self):
        """TopologyRecord.validate checks its own halves."""
        with pytest.raises(ValueError):
            TopologyRecord("P1", "MKV", "hh").validate()
