# tests/test_cli.py
"""Tests for the phenoattr CLI."""

import json

import pytest
from click.testing import CliRunner


@pytest.fixture
def tagged_file(tmp_path):
    document = {
        "map": {
            "color": [{"string": "red"}, {"string": "blue"}],
            "count": [{"int32": 3}],
            "tissue": [{"ontology_class": {"id": "UBERON:0002107", "label": "liver"}}],
            "note": [{"null": None}],
            "nested": [{"list": [{"list": []}]}],
        }
    }
    path = tmp_path / "sample.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path, document


class TestCLISkeleton:

    def test_cli_group_exists(self):
        """The top-level group lists its commands."""
        from phenoattr.cli import cli
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "encode" in result.output

    @pytest.mark.parametrize("command", ["encode", "decode", "inspect", "config"])
    def test_command_registered(self, command):
        """Each command answers --help."""
        from phenoattr.cli import cli
        runner = CliRunner()
        result = runner.invoke(cli, [command, "--help"])
        assert result.exit_code == 0

    def test_version_flag(self):
        """--version prints the package version."""
        from phenoattr import __version__
        from phenoattr.cli import cli
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestEncodeDecode:

    def test_round_trip_json(self, tmp_path, tagged_file):
        """Tagged JSON survives encode then decode --json."""
        from phenoattr.cli import cli

        source, document = tagged_file
        output = tmp_path / "sample.bin"
        runner = CliRunner()
        result = runner.invoke(cli, ["encode", str(source), "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert output.read_bytes()[:2] == b"\x01\x0c"

        result = runner.invoke(cli, ["decode", str(output), "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == document

    def test_json_output_is_strict_for_non_finite_doubles(self, tmp_path):
        """decode --json spells NaN and the infinities as strings."""
        from phenoattr.attributes import AttributeCodec, AttributeValue
        from phenoattr.cli import cli

        def reject_constant(name):
            raise ValueError(f"non-standard JSON constant {name}")

        data = AttributeCodec().encode(
            AttributeValue.of_list([AttributeValue.of_double(float("inf")), AttributeValue.of_double(float("nan"))])
        )
        source = tmp_path / "special.bin"
        source.write_bytes(data)
        result = CliRunner().invoke(cli, ["decode", str(source), "--json"])
        assert result.exit_code == 0, result.output
        parsed = json.loads(result.output, parse_constant=reject_constant)
        assert parsed == {"list": [{"double": "Infinity"}, {"double": "NaN"}]}

    def test_decode_tree_view(self, tmp_path, tagged_file):
        """The default decode view renders a Rich tree."""
        from phenoattr.cli import cli

        source, _ = tagged_file
        output = tmp_path / "sample.bin"
        runner = CliRunner()
        runner.invoke(cli, ["encode", str(source), "-o", str(output)])
        result = runner.invoke(cli, ["decode", str(output)])
        assert result.exit_code == 0
        assert "UBERON:0002107" in result.output
        assert "color" in result.output

    def test_plain_input_and_output(self, tmp_path):
        """--plain reads and writes untagged JSON."""
        from phenoattr.cli import cli

        source = tmp_path / "plain.json"
        source.write_text(json.dumps({"a": [1, "x", None], "b": [{"c": [True]}]}), encoding="utf-8")
        output = tmp_path / "plain.bin"
        runner = CliRunner()
        result = runner.invoke(cli, ["encode", str(source), "--plain", "-o", str(output)])
        assert result.exit_code == 0, result.output
        result = runner.invoke(cli, ["decode", str(output), "--plain"])
        assert json.loads(result.output) == {"a": [1, "x", None], "b": [{"c": [True]}]}

    def test_inspect(self, tmp_path, tagged_file):
        """inspect prints a shape summary."""
        from phenoattr.cli import cli

        source, _ = tagged_file
        output = tmp_path / "sample.bin"
        runner = CliRunner()
        runner.invoke(cli, ["encode", str(source), "-o", str(output)])
        result = runner.invoke(cli, ["inspect", str(output)])
        assert result.exit_code == 0
        assert "SHAPE" in result.output
        assert "ontology_class" in result.output


class TestRejectedInput:

    def test_invalid_json(self, tmp_path):
        """Unparseable JSON exits with a readable error."""
        from phenoattr.cli import cli

        source = tmp_path / "bad.json"
        source.write_text("{not json", encoding="utf-8")
        result = CliRunner().invoke(cli, ["encode", str(source), "-o", str(tmp_path / "out.bin")])
        assert result.exit_code == 1
        assert "invalid JSON" in result.output

    def test_double_out_of_range(self, tmp_path):
        """A double too large for float is reported, not raised."""
        from phenoattr.cli import cli

        source = tmp_path / "huge.json"
        source.write_text('{"double": ' + "9" * 400 + "}", encoding="utf-8")
        result = CliRunner().invoke(cli, ["encode", str(source), "-o", str(tmp_path / "out.bin")])
        assert result.exit_code == 1
        assert "does not fit in double" in result.output
        assert not isinstance(result.exception, OverflowError)

    def test_unknown_tagged_kind(self, tmp_path):
        """An unknown tagged kind is reported by name."""
        from phenoattr.cli import cli

        source = tmp_path / "bad.json"
        source.write_text(json.dumps({"decimal": "1.0"}), encoding="utf-8")
        result = CliRunner().invoke(cli, ["encode", str(source), "-o", str(tmp_path / "out.bin")])
        assert result.exit_code == 1
        assert "unknown variant" in result.output

    def test_corrupt_binary(self, tmp_path):
        """A corrupt binary names the offending file."""
        from phenoattr.cli import cli

        source = tmp_path / "bad.bin"
        source.write_bytes(b"\x01\x63")
        result = CliRunner().invoke(cli, ["decode", str(source)])
        assert result.exit_code == 1
        assert "bad.bin" in result.output

    def test_depth_override(self, tmp_path):
        """--max-depth tightens the decode limit."""
        from phenoattr.cli import cli

        source = tmp_path / "deep.json"
        document = {"int32": 0}
        for _ in range(5):
            document = {"list": [document]}
        source.write_text(json.dumps(document), encoding="utf-8")
        output = tmp_path / "deep.bin"
        runner = CliRunner()
        assert runner.invoke(cli, ["encode", str(source), "-o", str(output)]).exit_code == 0
        result = runner.invoke(cli, ["decode", str(output), "--max-depth", "4"])
        assert result.exit_code == 1
        assert "depth" in result.output


class TestConfigCommand:

    def test_config_show(self):
        """config show lists limits and paths."""
        from phenoattr.cli import cli
        result = CliRunner().invoke(cli, ["config", "show"])
        assert result.exit_code == 0
        assert "max_depth" in result.output
        assert "log_dir" in result.output
