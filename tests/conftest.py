import os

import pytest

import fsv.config


@pytest.fixture
def counting_predicate():
    """A predicate that records every character it is asked about."""
    calls = []

    def predicate(char):
        calls.append(char)
        return True

    predicate.calls = calls
    return predicate


@pytest.fixture
def predicates_yaml(tmp_path):
    """A YAML file with a few predicate definitions."""
    path = tmp_path / "predicates.yaml"
    path.write_text(
        "hexdigits:\n"
        "  description: Hexadecimal digits\n"
        "  class: hex\n"
        "no_space:\n"
        "  drop: \" \\t\"\n"
        "lower_vowel:\n"
        "  all:\n"
        "    - class: vowel\n"
        "    - class: lower\n"
        "languages:\n"
        "  keep: \"c+/\"\n"
        "id_chars:\n"
        "  any:\n"
        "    - ref: letters\n"
        "    - range: [\"0\", \"9\"]\n"
        "    - keep: \"_\"\n"
    )
    return path


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Run with an empty home and working directory and no FSV_* variables."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for key in list(os.environ):
        if key.startswith("FSV_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(fsv.config, "_config", None)
    return tmp_path
