"""Tests for stability probes."""

import subprocess
import sys

import pytest

from nvidia_oc.configs.default import ProbeConfig
from nvidia_oc.core.types import ProbeResult
from nvidia_oc.device.simulated import SimulatedDevice
from nvidia_oc.tuning import probe as probe_module
from nvidia_oc.tuning.probe import CommandProbe, ScriptedProbe


def python_command(code: str) -> list[str]:
    return [sys.executable, "-c", code]


@pytest.fixture
def drawing_device(baseline) -> SimulatedDevice:
    """Device that reports a constant 200 W draw."""
    return SimulatedDevice(baseline, power_draw_mw=200_000)


class TestParseScore:
    """Tests for CommandProbe.parse_score."""

    def test_uses_last_pattern_match(self):
        probe = CommandProbe("bench")
        output = "warmup score: 10\nrun 1 of 3\nScore = 4321.5\n"

        assert probe.parse_score(output) == 4321.5

    def test_falls_back_to_last_number(self):
        probe = CommandProbe("bench")

        assert probe.parse_score("FPS: 143\nfinal 98.6\n") == 98.6

    def test_custom_pattern(self):
        probe = CommandProbe("bench", score_pattern=r"fps\s+(\d+)")

        assert probe.parse_score("fps 60\nfps 75\nmin 40\n") == 75.0

    def test_no_number(self):
        assert CommandProbe("bench").parse_score("done\n") is None


class TestCommandProbe:
    """Tests for running the benchmark process."""

    def test_successful_run(self, drawing_device):
        """Score comes from stdout, average power from the sampled draw."""
        probe = CommandProbe(
            python_command("import time; time.sleep(0.2); print('score: 1234.5')"),
            sample_interval_s=0.01,
        )

        result = probe(drawing_device)

        assert result == ProbeResult(score=1234.5, avg_power=200.0)

    def test_nonzero_exit_is_unstable(self, drawing_device):
        probe = CommandProbe(python_command("print('score: 1'); raise SystemExit(3)"), sample_interval_s=0.01)

        assert probe(drawing_device) is None

    def test_timeout_is_unstable(self, drawing_device):
        """A hung benchmark is killed and reported as instability."""
        probe = CommandProbe(
            python_command("import time; time.sleep(30)"),
            timeout_s=0.3,
            sample_interval_s=0.05,
        )

        assert probe(drawing_device) is None

    @pytest.mark.parametrize("error", [RuntimeError("power sensor lost"), KeyboardInterrupt()])
    def test_benchmark_killed_when_sampling_raises(self, baseline, monkeypatch, error):
        """An error while waiting propagates, but only after the benchmark process is gone."""
        started = []
        real_popen = subprocess.Popen

        def recording_popen(*args, **kwargs):
            process = real_popen(*args, **kwargs)
            started.append(process)
            return process

        monkeypatch.setattr(probe_module.subprocess, "Popen", recording_popen)

        class FailingSensorDevice(SimulatedDevice):
            def power_usage(self):
                raise error

        probe = CommandProbe(python_command("import time; time.sleep(30)"), sample_interval_s=0.01)

        with pytest.raises(type(error)):
            probe(FailingSensorDevice(baseline))

        assert len(started) == 1
        assert started[0].returncode is not None

    def test_missing_score_is_unstable(self, drawing_device):
        probe = CommandProbe(python_command("print('done')"), sample_interval_s=0.01)

        assert probe(drawing_device) is None

    def test_stderr_is_captured(self, drawing_device):
        probe = CommandProbe(python_command("import sys; sys.stderr.write('score: 7\\n')"), sample_interval_s=0.01)

        result = probe(drawing_device)

        assert result is not None
        assert result.score == 7.0

    def test_missing_executable_raises(self, drawing_device):
        """A command that cannot start is a setup error, not instability."""
        probe = CommandProbe(["/nonexistent/benchmark-binary"])

        with pytest.raises(FileNotFoundError):
            probe(drawing_device)

    def test_from_config(self):
        config = ProbeConfig(command="bench --duration 300", timeout_s=400.0, sample_interval_s=2.0)

        probe = CommandProbe.from_config(config)

        assert probe.args == ["bench", "--duration", "300"]
        assert probe.timeout_s == 400.0
        assert probe.sample_interval_s == 2.0

    def test_from_config_requires_command(self):
        with pytest.raises(ValueError, match="No benchmark command"):
            CommandProbe.from_config(ProbeConfig())

    def test_empty_command_rejected(self):
        with pytest.raises(ValueError):
            CommandProbe("")


class TestScriptedProbe:
    """Tests for ScriptedProbe."""

    def test_replays_outcomes_then_default(self, drawing_device):
        result = ProbeResult(score=5.0, avg_power=150.0)
        probe = ScriptedProbe([result, None, 9.0], default=None)

        assert probe(drawing_device) == result
        assert probe(drawing_device) is None
        assert probe(drawing_device) == ProbeResult(score=9.0, avg_power=200.0)
        assert probe(drawing_device) is None
        assert probe.calls == 4
