"""
Tests for the secure subprocess wrapper.
"""

import os
import stat
import subprocess
from unittest.mock import patch, Mock

import pytest

from arch_updates_bar.utils.subprocess_wrapper import SecureSubprocess


@pytest.fixture(autouse=True)
def clear_command_cache():
    SecureSubprocess.clear_cache()
    yield
    SecureSubprocess.clear_cache()


@pytest.fixture
def fake_checkupdates(tmp_path, monkeypatch):
    script = tmp_path / "checkupdates"
    script.write_text("#!/bin/sh\nexit 2\n")
    script.chmod(stat.S_IRWXU)
    monkeypatch.setenv("PATH", str(tmp_path))
    # tmp may be mounted noexec, where access(X_OK) fails regardless of mode bits
    real_access = os.access
    monkeypatch.setattr(
        "arch_updates_bar.utils.subprocess_wrapper.os.access",
        lambda path, mode, **kwargs: str(path) == str(script) or real_access(path, mode, **kwargs),
    )
    return script


class TestValidation:
    """Command whitelisting."""

    def test_allows_checkupdates(self):
        assert SecureSubprocess.validate_command(["checkupdates"]) is True

    def test_rejects_unknown_command(self):
        with pytest.raises(ValueError):
            SecureSubprocess.validate_command(["rm", "-rf", "/"])

    def test_rejects_empty_command(self):
        with pytest.raises(ValueError):
            SecureSubprocess.validate_command([])

    def test_sanitize_package_name(self):
        assert SecureSubprocess.sanitize_package_name("lib32-glibc") == "lib32-glibc"
        assert SecureSubprocess.sanitize_package_name("gtk2+extra") == "gtk2+extra"
        with pytest.raises(ValueError):
            SecureSubprocess.sanitize_package_name("../etc/passwd")
        with pytest.raises(ValueError):
            SecureSubprocess.sanitize_package_name("a" * 300)


class TestCommandLookup:
    """PATH resolution."""

    def test_finds_executable(self, fake_checkupdates):
        assert SecureSubprocess.check_command_exists("checkupdates") is True

    def test_rejects_world_writable(self, fake_checkupdates):
        fake_checkupdates.chmod(0o777)
        with patch.object(SecureSubprocess, 'STANDARD_PATHS', []):
            assert SecureSubprocess.check_command_exists("checkupdates") is False

    def test_missing_command(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PATH", str(tmp_path))
        with patch.object(SecureSubprocess, 'STANDARD_PATHS', []):
            assert SecureSubprocess.check_command_exists("checkupdates") is False


class TestRun:
    """Command execution."""

    @patch('arch_updates_bar.utils.subprocess_wrapper.subprocess.run')
    def test_run_uses_resolved_path_and_c_locale(self, mock_run, fake_checkupdates):
        mock_run.return_value = Mock(returncode=0)

        SecureSubprocess.run(["checkupdates"], timeout=5)

        args, kwargs = mock_run.call_args
        assert args[0] == [str(fake_checkupdates)]
        assert kwargs["env"]["LC_ALL"] == "C"
        assert kwargs["timeout"] == 5
        assert "shell" not in kwargs

    def test_run_missing_command_raises(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PATH", str(tmp_path))
        with patch.object(SecureSubprocess, 'STANDARD_PATHS', []):
            with pytest.raises(FileNotFoundError):
                SecureSubprocess.run(["checkupdates"])

    @patch('arch_updates_bar.utils.subprocess_wrapper.subprocess.run')
    def test_timeout_propagates(self, mock_run, fake_checkupdates):
        mock_run.side_effect = subprocess.TimeoutExpired(["checkupdates"], 1)
        with pytest.raises(subprocess.TimeoutExpired):
            SecureSubprocess.run(["checkupdates"], timeout=1)

