"""Tests for console and file-system helpers (crudgen.utils)."""

from __future__ import annotations

import logging

import pytest

from crudgen import utils

pytestmark = pytest.mark.unit


class TestEnsureDir:
    def test_creates_nested(self, tmp_path):
        target = tmp_path / "a" / "b"
        assert utils.ensure_dir(target) == target
        assert target.is_dir()

    def test_existing_is_fine(self, tmp_path):
        utils.ensure_dir(tmp_path)
        assert tmp_path.is_dir()


class TestRelativeToRoot:
    def test_inside_root(self, tmp_path):
        path = tmp_path / "app" / "Models" / "Project.php"
        assert utils.relative_to_root(path, tmp_path) == str(path.relative_to(tmp_path))

    def test_outside_root(self, tmp_path):
        other = tmp_path.parent / "elsewhere.php"
        assert utils.relative_to_root(other, tmp_path) == str(other)


class TestConfigureLogging:
    def test_verbose_sets_debug(self):
        utils.configure_logging(verbose=True)
        logger = logging.getLogger("crudgen")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_quiet_sets_warning_and_does_not_stack_handlers(self):
        utils.configure_logging()
        utils.configure_logging()
        logger = logging.getLogger("crudgen")
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1


class TestPrinters:
    def test_messages_with_brackets_are_printed_literally(self, capsys):
        utils.print_error("marker 'return [' not found")
        utils.print_warning("[x] literal")
        out = capsys.readouterr().out
        assert "return [" in out
        assert "[x] literal" in out

    def test_summary_table(self, capsys):
        utils.print_summary_table({"1.": "app/Models/Project.php"}, title="Artifacts")
        out = capsys.readouterr().out
        assert "Artifacts" in out
        assert "Project.php" in out
