"""Tests for config file parsing."""

import logging

import pytest

from anynote.config import Config, load_config


@pytest.fixture
def write_conf(tmp_path):
    def _write(text: str):
        path = tmp_path / "anynote.conf"
        path.write_text(text)
        return path

    return _write


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "missing.conf") == Config()

    def test_parses_values(self, write_conf):
        config = load_config(
            write_conf(
                "# anynote settings\n"
                "DATA_DIR = ~/notes-data\n"
                "NOTE_SORT_BY = title\n"
                "NOTE_SORT_ORDER = asc\n"
                "TASK_SORT_BY = updatedAt\n"
                "RECENT_DAYS = 14\n"
                "TOP_TAGS = 3\n"
            )
        )
        assert config.data_dir == "~/notes-data"
        assert config.note_sort_by == "title"
        assert config.note_sort_order == "asc"
        assert config.task_sort_by == "updatedAt"
        assert config.task_sort_order == "desc"
        assert config.recent_days == 14
        assert config.top_tags == 3

    def test_quotes_and_inline_comments(self, write_conf):
        config = load_config(
            write_conf(
                'DATA_DIR = "/srv/my notes" # shared disk\n'
                "NOTE_SORT_BY = createdAt # newest edits\n"
            )
        )
        assert config.data_dir == "/srv/my notes"
        assert config.note_sort_by == "createdAt"

    def test_invalid_values_keep_defaults(self, write_conf, caplog):
        with caplog.at_level(logging.WARNING):
            config = load_config(
                write_conf("NOTE_SORT_BY = priority\nRECENT_DAYS = -1\nTOP_TAGS = many\nCOLOR = red\n")
            )
        assert config.note_sort_by == "updatedAt"
        assert config.recent_days == 7
        assert config.top_tags == 5
        assert "NOTE_SORT_BY" in caplog.text
        assert "Unknown config key COLOR" in caplog.text

    def test_skips_lines_without_equals(self, write_conf):
        assert load_config(write_conf("just words\n\n")) == Config()

    def test_data_path_expands_user(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert Config(data_dir="~/d").data_path == tmp_path / "d"
