"""
Tests for the generate CLI command.

Tests `fleetid generate` output formats, node selection and partition
targeting.
"""

import json
from unittest.mock import patch

from typer.testing import CliRunner

from fleetid.cli import app
from fleetid.core.ids import HashCodeKeyPartitioner, SecureRandomSource, SystemClock, parse_id

runner = CliRunner()


class TestGenerateCommand:
    """Test the generate command functionality."""

    def test_generate_single_id(self, mock_time_ms) -> None:
        """Test the pinned example id for node 7."""
        with (
            patch.object(SystemClock, "now_ms", return_value=mock_time_ms),
            patch.object(SecureRandomSource, "randbelow", return_value=5),
        ):
            result = runner.invoke(app, ["generate", "--prefix", "TEST", "--node", "7"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "TEST2401151030001230007005"

    def test_generate_count(self) -> None:
        """Test that --count emits that many distinct ids."""
        result = runner.invoke(app, ["generate", "--prefix", "ORD", "--node", "3", "--count", "3"])

        assert result.exit_code == 0
        lines = result.stdout.split()
        assert len(lines) == 3
        assert len(set(lines)) == 3
        for line in lines:
            identifier = parse_id(line)
            assert identifier is not None
            assert identifier.prefix == "ORD"
            assert identifier.node == 3

    def test_generate_uses_env_node(self, monkeypatch) -> None:
        """Test that FLEETID_NODE is used when --node is not given."""
        monkeypatch.setenv("FLEETID_NODE", "42")

        result = runner.invoke(app, ["generate"])

        assert result.exit_code == 0
        assert parse_id(result.stdout.strip()).node == 42

    def test_generate_json(self) -> None:
        """Test JSON output."""
        result = runner.invoke(app, ["generate", "--node", "9", "--count", "2", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert len(payload) == 2
        assert {item["node"] for item in payload} == {9}
        assert all("generated_at" in item and "exponent" in item for item in payload)

    def test_generate_partition(self) -> None:
        """Test that every id lands in the requested partition."""
        result = runner.invoke(
            app, ["generate", "--node", "1", "--count", "5", "--partition", "1/4"]
        )

        assert result.exit_code == 0
        partitioner = HashCodeKeyPartitioner(4)
        lines = result.stdout.split()
        assert len(lines) == 5
        assert all(partitioner.partition(line) == 1 for line in lines)

    def test_generate_invalid_partition_format(self) -> None:
        result = runner.invoke(app, ["generate", "--partition", "abc"])
        assert result.exit_code == 2

    def test_generate_partition_out_of_range(self) -> None:
        result = runner.invoke(app, ["generate", "--partition", "4/4"])
        assert result.exit_code == 2

    def test_generate_invalid_node(self) -> None:
        """Test that an out-of-range node is reported."""
        result = runner.invoke(app, ["generate", "--node", "10000"])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_generate_invalid_config(self, isolated_fleetid) -> None:
        """Test that a broken project config is reported."""
        (isolated_fleetid / ".fleetid.json").write_text("{broken")

        result = runner.invoke(app, ["generate"])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_generate_zero_count_rejected(self) -> None:
        result = runner.invoke(app, ["generate", "--count", "0"])
        assert result.exit_code == 2
