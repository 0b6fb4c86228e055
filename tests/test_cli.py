"""Tests for the mosaic command line."""

import json

import pytest

from mosaic.cli.commands.compose import STRICT_EXIT_CODE
from mosaic.cli.main import create_parser, main
from tests.conftest import write_fragment


@pytest.fixture
def library(fragments_dir):
    write_fragment(fragments_dir, "root", "Hi {{ $name }}\n{{ other }}")
    write_fragment(fragments_dir, "other", "nested", fragment_id="other-id")
    return fragments_dir


class TestParser:

    def test_compose_arguments(self):
        args = create_parser().parse_args([
            "compose", "#intro", "--root", "docs", "--var", "a=1", "--var", "b=2", "--strict"
        ])

        assert args.command == "compose"
        assert args.selector == "#intro"
        assert args.var == ["a=1", "b=2"]
        assert args.strict is True
        assert args.log_level == "warn"

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "compose" in capsys.readouterr().out


class TestComposeCommand:

    def test_compose_to_stdout(self, library, capsys):
        exit_code = main(["compose", "root", "--root", str(library), "--var", "name=World"])

        assert exit_code == 0
        assert capsys.readouterr().out == "Hi World\nnested"

    def test_compose_by_id(self, library, capsys):
        assert main(["compose", "#other-id", "--root", str(library)]) == 0
        assert capsys.readouterr().out == "nested"

    def test_compose_to_file(self, library, tmp_path, capsys):
        output = tmp_path / "out" / "result.md"

        exit_code = main([
            "compose", "root", "--root", str(library), "--var", "name=File", "--output", str(output)
        ])

        assert exit_code == 0
        assert output.read_text() == "Hi File\nnested"
        assert capsys.readouterr().out == ""

    def test_vars_file(self, library, tmp_path, capsys):
        vars_file = tmp_path / "vars.json"
        vars_file.write_text(json.dumps({"name": "Json"}))

        assert main(["compose", "root", "--root", str(library), "--vars-file", str(vars_file)]) == 0
        assert capsys.readouterr().out == "Hi Json\nnested"

    def test_var_wins_over_vars_file(self, library, tmp_path, capsys):
        vars_file = tmp_path / "vars.yaml"
        vars_file.write_text("name: Yaml\n")

        exit_code = main([
            "compose", "root", "--root", str(library),
            "--vars-file", str(vars_file), "--var", "name=Flag"
        ])

        assert exit_code == 0
        assert capsys.readouterr().out == "Hi Flag\nnested"

    def test_config_file(self, library, tmp_path, capsys):
        config_file = tmp_path / "mosaic.yaml"
        config_file.write_text(
            f"root: {library.name}\n"
            "variables:\n  name: Config\n"
            "overrides:\n  '#other-id':\n    name: unused\n"
        )

        assert main(["compose", "root", "--config", str(config_file)]) == 0
        assert capsys.readouterr().out == "Hi Config\nnested"

    def test_invalid_config_exits_2(self, library, tmp_path):
        config_file = tmp_path / "mosaic.yaml"
        config_file.write_text("variables:\n  flag: false\n")

        assert main(["compose", "root", "--root", str(library), "--config", str(config_file)]) == 2

    def test_missing_config_file_exits_1(self, library, tmp_path):
        missing = tmp_path / "absent.yaml"

        assert main(["compose", "root", "--root", str(library), "--config", str(missing)]) == 1

    def test_invalid_selector_exits_2(self, library, capsys):
        assert main(["compose", "no spaces!", "--root", str(library)]) == 2
        assert capsys.readouterr().out == ""

    def test_missing_root_exits_2(self, tmp_path):
        assert main(["compose", "root", "--root", str(tmp_path / "missing")]) == 2

    def test_bad_var_format_exits_1(self, library):
        assert main(["compose", "root", "--root", str(library), "--var", "novalue"]) == 1

    def test_missing_vars_file_exits_1(self, library, tmp_path):
        missing = tmp_path / "missing.json"

        assert main(["compose", "root", "--root", str(library), "--vars-file", str(missing)]) == 1

    def test_strict_mode(self, fragments_dir, capsys):
        write_fragment(fragments_dir, "page", "text{{ gone }}")

        assert main(["compose", "page", "--root", str(fragments_dir)]) == 0
        assert capsys.readouterr().out == "text"

        assert main(["compose", "page", "--root", str(fragments_dir), "--strict"]) == STRICT_EXIT_CODE
        assert capsys.readouterr().out == "text"

    def test_strict_mode_clean_composition(self, library, capsys):
        exit_code = main(["compose", "root", "--root", str(library), "--var", "name=x", "--strict"])

        assert exit_code == 0
