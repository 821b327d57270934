"""Tests for privilege escalation and result plotting."""

import pytest

from nvidia_oc.utils import plotting, privileges


class ProcessReplaced(Exception):
    """Raised by the fake execvp, which (like the real one) must not return."""


class TestEscalatePermissions:
    """Tests for escalate_permissions."""

    @pytest.fixture
    def not_root(self, monkeypatch):
        monkeypatch.setattr(privileges, "running_as_root", lambda: False)
        monkeypatch.setattr(privileges.sys, "argv", ["nvidia-oc", "set", "-i", "0", "-p", "200000"])

    def test_noop_as_root(self, monkeypatch):
        monkeypatch.setattr(privileges, "running_as_root", lambda: True)
        monkeypatch.setattr(privileges.shutil, "which", lambda tool: pytest.fail("should not look for tools"))

        privileges.escalate_permissions()

    def test_reexecs_with_first_available_tool(self, monkeypatch, not_root):
        available = {"doas": "/usr/bin/doas", "pkexec": "/usr/bin/pkexec"}
        monkeypatch.setattr(privileges.shutil, "which", available.get)

        def fake_execvp(path, args):
            raise ProcessReplaced(path, args)

        monkeypatch.setattr(privileges.os, "execvp", fake_execvp)

        with pytest.raises(ProcessReplaced) as excinfo:
            privileges.escalate_permissions()

        path, args = excinfo.value.args
        assert path == "/usr/bin/doas"
        assert args[0] == "/usr/bin/doas"
        assert args[2:] == ["-m", "nvidia_oc", "set", "-i", "0", "-p", "200000"]

    def test_no_tool_available(self, monkeypatch, not_root):
        monkeypatch.setattr(privileges.shutil, "which", lambda tool: None)

        with pytest.raises(PermissionError, match="Please install sudo, doas or pkexec"):
            privileges.escalate_permissions()


class TestPlotResults:
    """Tests for plot_results."""

    def test_writes_html(self, tmp_path):
        rows = [
            {
                "power_limit_w": limit,
                "freq_offset": -100,
                "mem_offset": 0,
                "min_clock": 0,
                "max_clock": 2_100,
                "score": score,
                "avg_power_w": limit - 1.5,
            }
            for limit, score in ((145, 1000.0), (140, 990.0), (135, 950.0))
        ]

        path = plotting.plot_results(rows, tmp_path / "plots" / "results.html")

        assert path.exists()
        assert "Power Limit Search Results" in path.read_text()
