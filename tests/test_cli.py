"""
Tests for fsv/cli.py

Tests the CLI interface including:
- Argument parser structure
- Predicate resolution
- Each command in plain and json output
- Error handling and exit codes
"""
import io
import json
from unittest.mock import patch

import pytest

from fsv import cli
from fsv.config import get_config
from fsv.predicates import CharsPredicate, CompoundPredicate
from fsv.registry import PredicateNotFoundError, PredicateRegistry


def run(capsys, *argv):
    cli.main(list(argv))
    return capsys.readouterr().out


class TestArgumentParser:
    """Test parser structure."""

    def test_commands_registered(self):
        parser = cli.build_parser()
        args = parser.parse_args(["show", "text"])
        assert args.func is cli.cmd_show
        assert args.predicate is None

    def test_repeatable_predicates(self):
        parser = cli.build_parser()
        args = parser.parse_args(["show", "text", "-p", "vowels", "-p", "keep:ab"])
        assert args.predicate == ["vowels", "keep:ab"]

    def test_compose_requires_predicate(self):
        parser = cli.build_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["compose", "text"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestPredicateResolution:
    """Test predicate specs."""

    def test_keep_and_drop_literals(self):
        registry = PredicateRegistry()
        assert cli.resolve_predicate(registry, "keep:ab") == CharsPredicate("ab", "any")
        assert cli.resolve_predicate(registry, "drop:ab") == CharsPredicate("ab", "none")

    def test_named(self):
        registry = PredicateRegistry()
        assert cli.resolve_predicate(registry, "vowels") is registry.get("vowels")

    def test_unknown_name(self):
        with pytest.raises(PredicateNotFoundError):
            cli.resolve_predicate(PredicateRegistry(), "missing")

    def test_several_are_anded(self):
        predicate = cli.resolve_predicates(PredicateRegistry(), ["letters", "drop:x"])
        assert isinstance(predicate, CompoundPredicate)
        assert predicate.operator == "all"

    def test_default(self):
        registry = PredicateRegistry()
        assert cli.resolve_predicates(registry, None) is None
        assert cli.resolve_predicates(registry, None, "digits") is registry.get("digits")


class TestCommands:
    """Test commands end to end."""

    def test_show(self, isolated_env, capsys):
        assert run(capsys, "show", "Malamute", "-p", "vowels") == "aaue\n"

    def test_show_stdin(self, isolated_env, capsys):
        with patch("sys.stdin", io.StringIO("some text\n")):
            out = run(capsys, "show", "-", "-p", "non_space")
        assert out == "sometext\n"

    def test_show_json(self, isolated_env, capsys):
        out = run(capsys, "-o", "json", "show", "bob", "-p", "keep:b")
        assert json.loads(out) == ["bb"]

    def test_show_table(self, isolated_env, capsys):
        out = run(capsys, "-o", "table", "show", "bob", "-p", "keep:b")
        assert "bb" in out

    def test_size(self, isolated_env, capsys):
        assert run(capsys, "size", "Cat!", "-p", "keep:!") == "1\n"

    def test_size_json(self, isolated_env, capsys):
        out = run(capsys, "-o", "json", "size", "Cat!", "-p", "keep:!")
        assert json.loads(out) == {"size": 1, "raw_size": 4}

    def test_at(self, isolated_env, capsys):
        assert run(capsys, "at", "Malamute", "2", "-p", "vowels") == "u\n"

    def test_at_out_of_range(self, isolated_env, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["at", "Malamute", "4", "-p", "vowels"])
        assert exc_info.value.code == 1
        assert "invalid index" in capsys.readouterr().out

    def test_split(self, isolated_env, capsys):
        out = run(capsys, "-o", "json", "split", "0xDEADBEEF / 0xdeadbeef", " / ",
                  "-p", "keep:ABCDEFabcdef /")
        assert json.loads(out) == ["DEADBEEF", "deadbeef"]

    def test_split_token_predicate(self, isolated_env, capsys):
        out = run(capsys, "-o", "json", "split", "blahblah", "my light",
                  "-p", "keep:blh", "--token-predicate", "keep:l")
        assert json.loads(out) == ["b", "hb", "h"]

    def test_split_plain(self, isolated_env, capsys):
        assert run(capsys, "split", "xax", "x") == "\na\n\n"

    def test_substr(self, isolated_env, capsys):
        out = run(capsys, "substr", "c / c++", "--pos", "0", "--count", "3", "-p", "keep:c+/")
        assert out == "c/c\n"

    def test_substr_rest(self, isolated_env, capsys):
        assert run(capsys, "substr", "Siberian Husky", "--pos", "9") == "Husky\n"

    def test_compose(self, isolated_env, capsys):
        out = run(capsys, "compose", "you think so?", "-p", "keep:you", "-p", "keep:uvwxyz")
        assert out == "yu\n"

    def test_default_predicate_from_config(self, isolated_env, capsys):
        from pathlib import Path
        Path("fsv.toml").write_text('default_predicate = "digits"\n')
        assert run(capsys, "show", "a1b2") == "12\n"

    def test_predicates_file(self, isolated_env, capsys, predicates_yaml):
        out = run(capsys, "--predicates", str(predicates_yaml), "show", "c / c++", "-p", "languages")
        assert out == "c/c++\n"

    def test_predicates_list_json(self, isolated_env, capsys, predicates_yaml):
        out = run(capsys, "-o", "json", "--predicates", str(predicates_yaml), "predicates", "list")
        names = {entry["name"] for entry in json.loads(out)}
        assert {"vowels", "languages", "hexdigits"} <= names

    def test_predicates_list_table(self, isolated_env, capsys):
        out = run(capsys, "predicates", "list")
        assert "vowels" in out

    def test_predicates_info(self, isolated_env, capsys):
        out = run(capsys, "-o", "json", "predicates", "info", "vowels")
        details = json.loads(out)
        assert details["expression"] == "class:vowel"
        assert details["builtin"] is True

    def test_unknown_predicate(self, isolated_env, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["show", "text", "-p", "nope"])
        assert exc_info.value.code == 1
        assert "Predicate not found" in capsys.readouterr().out

    def test_config_get(self, isolated_env, capsys):
        assert run(capsys, "config", "get", "output_format") == "plain\n"

    def test_config_set(self, isolated_env, capsys, tmp_path):
        target = tmp_path / "saved.toml"
        run(capsys, "config", "set", "max_display", "9", "--file", str(target))
        assert "max_display = 9" in target.read_text()
        assert get_config().max_display == 9

    def test_config_show(self, isolated_env, capsys):
        out = run(capsys, "config", "show")
        assert "output_format" in out

    def test_config_unknown_key(self, isolated_env, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["config", "get", "nope"])
        assert exc_info.value.code == 1

    def test_unknown_default_predicate(self, isolated_env, capsys):
        """A default_predicate that names nothing fails before reading text."""
        from pathlib import Path
        Path("fsv.toml").write_text('default_predicate = "nope"\n')
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["show", "a1b2"])
        assert exc_info.value.code == 1
        assert "nope" in capsys.readouterr().out

    def test_invalid_config_file(self, isolated_env, capsys):
        from pathlib import Path
        Path("fsv.toml").write_text('output_format = "xml"\n')
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["show", "abc"])
        assert exc_info.value.code == 1
        assert "Config error" in capsys.readouterr().out

    def test_config_set_rejects_invalid_value(self, isolated_env, capsys, tmp_path):
        target = tmp_path / "saved.toml"
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["config", "set", "output_format", "xml", "--file", str(target)])
        assert exc_info.value.code == 1
        assert not target.exists()
