"""
Tests for CLI main commands
"""

import json
from unittest import mock

import pytest
from click.testing import CliRunner

from kvscan.cli.main import cli
from kvscan.stores import LMDBStore


@pytest.fixture
def runner():
    return CliRunner()


class TestScanCommand:
    """Test scan command"""

    def test_scan_basic(self, runner, abcde_lmdb):
        """Test text output of every record"""
        result = runner.invoke(cli, ["scan", str(abcde_lmdb), "-q"])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["a : a", "b : b", "c : c", "d : d", "e : e"]

    def test_scan_bounds(self, runner, abcde_lmdb):
        result = runner.invoke(cli, ["scan", str(abcde_lmdb), "--gte", "b", "--lt", "e", "-L", "-q"])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["b : b", "c : c", "d : d"]

    def test_scan_reverse_limit(self, runner, abcde_lmdb):
        result = runner.invoke(cli, ["scan", str(abcde_lmdb), "-r", "-l", "2", "-q"])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["e : e", "d : d"]

    def test_scan_json(self, runner, abcde_lmdb):
        """Test JSON lines carry exactly the enabled fields"""
        result = runner.invoke(cli, ["scan", str(abcde_lmdb), "-j", "-X", "-q"])

        assert result.exit_code == 0
        parsed = [json.loads(line) for line in result.output.splitlines()]
        assert parsed[0] == {"key": "a"}
        assert all(set(record) == {"key"} for record in parsed)

    def test_scan_format_option(self, runner, abcde_lmdb):
        result = runner.invoke(cli, ["scan", str(abcde_lmdb), "--format", "json", "-l", "1", "-q"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {"key": "a", "value": "a"}

    def test_scan_values_only(self, runner, make_lmdb):
        path = make_lmdb({"k1": "v1", "k2": "v2"})

        result = runner.invoke(cli, ["scan", str(path), "-x", "-q"])

        assert result.output.splitlines() == ["v1", "v2"]

    def test_value_filter_with_values_excluded(self, runner, make_lmdb):
        path = make_lmdb({"a": "red", "b": "blue", "c": "red"})

        result = runner.invoke(cli, ["scan", str(path), "-X", "-v", "red", "-j", "-q"])

        assert result.exit_code == 0
        assert [json.loads(line) for line in result.output.splitlines()] == [
            {"key": "a"},
            {"key": "c"},
        ]

    def test_scan_status_output(self, runner, abcde_lmdb):
        """Test status lines appear without --quiet"""
        result = runner.invoke(cli, ["scan", str(abcde_lmdb), "--no-color"])

        assert result.exit_code == 0
        assert "Streaming from db:" in result.output
        assert "Read stream options:" in result.output
        assert "Read 5 records in" in result.output
        assert "Database closed." in result.output

    def test_scan_hex_keys(self, runner, make_lmdb):
        path = make_lmdb({b"\x00\x01": "low", b"\xff": "high"})

        result = runner.invoke(
            cli, ["scan", str(path), "-e", "hex", "--gt", "0001", "-q"]
        )

        assert result.exit_code == 0
        assert result.output.splitlines() == ["ff : high"]

    def test_scan_no_match_exits_zero(self, runner, abcde_lmdb):
        result = runner.invoke(cli, ["scan", str(abcde_lmdb), "-k", "zzz", "-q"])

        assert result.exit_code == 0
        assert result.output == ""


class TestCountCommand:
    """Test count command"""

    def test_count_all(self, runner, abcde_lmdb):
        result = runner.invoke(cli, ["count", str(abcde_lmdb), "-q"])

        assert result.exit_code == 0
        assert "Counted 5 records in" in result.output
        assert "All records counted." in result.output

    def test_count_with_key_filter(self, runner, abcde_lmdb):
        """Test filtering alone keeps the complete-coverage claim"""
        result = runner.invoke(cli, ["count", str(abcde_lmdb), "-k", "^c$", "-q"])

        assert result.exit_code == 0
        assert "Counted 1 records" in result.output
        assert "All records counted." in result.output
        assert "may not include all records" not in result.output

    def test_count_with_bound(self, runner, abcde_lmdb):
        result = runner.invoke(cli, ["count", str(abcde_lmdb), "--gt", "b", "-q"])

        assert result.exit_code == 0
        assert "Counted 3 records" in result.output
        assert "Limited count; may not include all records." in result.output

    def test_count_with_limit(self, runner, abcde_lmdb):
        result = runner.invoke(cli, ["count", str(abcde_lmdb), "-l", "2", "-q"])

        assert "Counted 2 records" in result.output
        assert "Limited count" in result.output

    def test_count_status_output(self, runner, abcde_lmdb):
        result = runner.invoke(cli, ["count", str(abcde_lmdb)])

        assert result.exit_code == 0
        assert "Counting records in db:" in result.output


class TestErrors:
    """Test failure exit codes and messages"""

    def test_missing_path_argument(self, runner):
        result = runner.invoke(cli, ["scan"])

        assert result.exit_code == 2

    def test_two_paths(self, runner, abcde_lmdb):
        result = runner.invoke(cli, ["scan", str(abcde_lmdb), str(abcde_lmdb)])

        assert result.exit_code == 2

    def test_missing_store(self, runner, tmp_path):
        result = runner.invoke(cli, ["scan", str(tmp_path / "missing.lmdb")])

        assert result.exit_code == 1
        assert "Error opening database" in result.output

    def test_invalid_filter_never_opens_store(self, runner, abcde_lmdb):
        """Test a bad regex exits before the store is opened"""
        with mock.patch.object(LMDBStore, "open") as opened, \
                mock.patch.object(LMDBStore, "close") as closed:
            result = runner.invoke(cli, ["scan", str(abcde_lmdb), "-k", "[bad"])

        assert result.exit_code == 1
        assert "Invalid key filter" in result.output
        opened.assert_not_called()
        closed.assert_not_called()

    def test_invalid_limit(self, runner, abcde_lmdb):
        result = runner.invoke(cli, ["scan", str(abcde_lmdb), "-l", "0"])

        assert result.exit_code == 1
        assert "limit must be a positive integer" in result.output

    def test_exclude_both(self, runner, abcde_lmdb):
        result = runner.invoke(cli, ["scan", str(abcde_lmdb), "-x", "-X"])

        assert result.exit_code == 1
        assert "Cannot exclude both keys and values" in result.output

    def test_stream_error(self, runner, make_lmdb):
        """Test a decoding failure mid-scan exits non-zero with partial stats"""
        path = make_lmdb({"a": "ok", "b": b"\xff\xfe"})

        result = runner.invoke(cli, ["scan", str(path), "-q"])

        assert result.exit_code == 1
        assert "a : ok" in result.output
        assert "Error streaming from database" in result.output
        assert "Partial results: 2 records read, 1 emitted" in result.output

    def test_close_error_keeps_exit_code(self, runner, abcde_lmdb):
        """Test a close failure is reported but the scan still succeeds"""
        original_close = LMDBStore.close

        def failing_close(self):
            original_close(self)
            raise OSError("cannot release lock")

        with mock.patch.object(LMDBStore, "close", failing_close):
            result = runner.invoke(cli, ["scan", str(abcde_lmdb), "-q"])

        assert result.exit_code == 0
        assert "Error closing database" in result.output
        assert "Database closed." not in result.output

    def test_debug_reraises(self, runner, tmp_path):
        result = runner.invoke(cli, ["--debug", "scan", str(tmp_path / "missing.lmdb")])

        assert result.exit_code == 1
        assert result.exception is not None
        assert type(result.exception).__name__ == "StoreOpenError"


class TestVersion:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output
