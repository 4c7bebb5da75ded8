"""Tests for FileSyncCompleter."""

import pytest
from prompt_toolkit.document import Document

from cli.completer import FileSyncCompleter
from cli.constants import COMMANDS


@pytest.fixture
def completer():
    """Create a FileSyncCompleter instance."""
    return FileSyncCompleter()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """
    Run the test from a directory holding a few local files.
    """
    (tmp_path / "document.txt").write_text("content")
    (tmp_path / "data.csv").write_text("content")
    (tmp_path / "photos").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


def get_completions_list(completer, text):
    """Helper to get list of completion texts from completer."""
    doc = Document(text, len(text))
    return [c.text for c in completer.get_completions(doc, None)]


def get_completions_display(completer, text):
    """Helper to get list of completion display texts from completer."""
    doc = Document(text, len(text))
    return [c.display_text for c in completer.get_completions(doc, None)]


class TestCommandCompletion:
    """Tests for command name completion."""

    def test_empty_input_shows_all_commands(self, completer):
        completions = get_completions_list(completer, "")
        assert completions == COMMANDS

    def test_partial_command_filters(self, completer):
        assert get_completions_list(completer, "do") == ["download"]
        assert sorted(get_completions_list(completer, "l")) == ["list", "login", "logout"]

    def test_case_insensitive(self, completer):
        assert get_completions_list(completer, "UP") == ["upload"]


class TestUploadPathCompletion:
    """Tests for local path completion after 'upload'."""

    def test_lists_local_entries(self, completer, workdir):
        displays = get_completions_display(completer, "upload ")

        assert "document.txt" in displays
        assert "data.csv" in displays
        assert "photos/" in displays

    def test_filters_by_prefix(self, completer, workdir):
        assert get_completions_display(completer, "upload do") == ["document.txt"]
        assert get_completions_list(completer, "upload do") == ["cument.txt"]

    def test_completes_later_arguments(self, completer, workdir):
        assert get_completions_display(completer, "upload document.txt da") == ["data.csv"]

    def test_other_commands_get_no_paths(self, completer, workdir):
        assert get_completions_list(completer, "delete ") == []
        assert get_completions_list(completer, "download do") == []
