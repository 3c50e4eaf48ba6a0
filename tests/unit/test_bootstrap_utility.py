"""Unit tests for installing the operator entry-point into a shared volume."""

import stat
from unittest.mock import patch

import pytest

from postgres_operator.errors import BootstrapError
from postgres_operator.utils.bootstrap import bootstrap_into


class TestBootstrapInto:
    """Test cases for bootstrap_into."""

    def test_copy_is_executable(self, tmp_path):
        source = tmp_path / "manager"
        source.write_bytes(b"#!/bin/sh\necho manager\n")
        target = tmp_path / "controller" / "manager"
        target.parent.mkdir()

        result = bootstrap_into(source, target)

        assert result == target
        assert target.read_bytes() == source.read_bytes()
        assert stat.S_IMODE(target.stat().st_mode) == 0o755

    def test_existing_target_is_replaced(self, tmp_path):
        source = tmp_path / "manager"
        source.write_text("new")
        target = tmp_path / "installed"
        target.write_text("old")

        bootstrap_into(str(source), str(target))

        assert target.read_text() == "new"

    def test_missing_source(self, tmp_path):
        with pytest.raises(BootstrapError) as exc_info:
            bootstrap_into(tmp_path / "missing", tmp_path / "target")

        assert isinstance(exc_info.value.cause, OSError)
        assert exc_info.value.retryable is False

    def test_missing_target_directory(self, tmp_path):
        source = tmp_path / "manager"
        source.write_text("manager")

        with pytest.raises(BootstrapError):
            bootstrap_into(source, tmp_path / "absent" / "manager")

    def test_chmod_failure(self, tmp_path):
        source = tmp_path / "manager"
        source.write_text("manager")

        with patch("pathlib.Path.chmod", side_effect=PermissionError("denied")):
            with pytest.raises(BootstrapError, match="Cannot set permissions"):
                bootstrap_into(source, tmp_path / "target")
