"""Stability probes: decide whether the currently applied configuration is usable."""

from __future__ import annotations

import logging
import re
import shlex
import subprocess
import tempfile
import time
from typing import Iterable, Optional, Protocol, Sequence, Union

import numpy as np

from nvidia_oc.configs.default import DEFAULT_SCORE_PATTERN, ProbeConfig
from nvidia_oc.core.types import ProbeResult
from nvidia_oc.device.base import DeviceControl

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


class StabilityProbe(Protocol):
    """Runs a workload on the configured device.

    Returns the score and average power, or None when the device became
    unstable. Raising InstabilityDetected is treated the same as None.
    """

    def __call__(self, device: DeviceControl) -> Optional[ProbeResult]: ...


class CommandProbe:
    """Probe that runs an external benchmark command.

    The command counts as unstable when it exits non-zero, runs longer than
    `timeout_s` (it is killed), or prints no score. While it runs, the device
    power draw is sampled every `sample_interval_s` seconds.

    Example:
        >>> probe = CommandProbe("glmark2 --off-screen", timeout_s=300)
        >>> result = probe(device)
    """

    def __init__(
        self,
        command: Union[str, Sequence[str]],
        timeout_s: float = 300.0,
        sample_interval_s: float = 1.0,
        score_pattern: str = DEFAULT_SCORE_PATTERN,
    ) -> None:
        self.args = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.args:
            raise ValueError("Benchmark command must not be empty")
        self.timeout_s = timeout_s
        self.sample_interval_s = sample_interval_s
        self.score_pattern = re.compile(score_pattern, re.IGNORECASE)

    @classmethod
    def from_config(cls, config: ProbeConfig) -> "CommandProbe":
        if not config.command:
            raise ValueError("No benchmark command configured")
        return cls(
            config.command,
            timeout_s=config.timeout_s,
            sample_interval_s=config.sample_interval_s,
            score_pattern=config.score_pattern,
        )

    def parse_score(self, output: str) -> Optional[float]:
        """Score from benchmark output.

        Uses the last match of `score_pattern`; falls back to the last number
        printed when the pattern never matches.
        """
        matches = self.score_pattern.findall(output)
        candidates = matches if matches else _NUMBER.findall(output)
        if not candidates:
            return None

        value = candidates[-1]
        if isinstance(value, tuple):
            value = value[0]
        try:
            return float(value)
        except ValueError:
            return None

    def __call__(self, device: DeviceControl) -> Optional[ProbeResult]:
        samples: list[int] = []

        with tempfile.TemporaryFile(mode="w+") as output:
            process = subprocess.Popen(self.args, stdout=output, stderr=subprocess.STDOUT)
            start = time.monotonic()

            try:
                while process.poll() is None:
                    if time.monotonic() - start > self.timeout_s:
                        logger.warning(f"Benchmark exceeded {self.timeout_s:.0f}s and was killed")
                        return None

                    power = device.power_usage()
                    if power is not None:
                        samples.append(power)
                    time.sleep(self.sample_interval_s)
            finally:
                # Never leave the workload running, however the wait ended
                if process.poll() is None:
                    process.kill()
                    process.wait()

            output.seek(0)
            text = output.read()

        if process.returncode != 0:
            logger.warning(f"Benchmark exited with code {process.returncode}")
            return None

        score = self.parse_score(text)
        if score is None:
            logger.warning("Benchmark printed no score")
            return None

        avg_power = float(np.mean(samples)) / 1000.0 if samples else 0.0
        logger.debug(f"Benchmark score {score:.0f}, {len(samples)} power samples, avg {avg_power:.2f}W")
        return ProbeResult(score=score, avg_power=avg_power)


class ScriptedProbe:
    """Probe that replays a fixed sequence of outcomes.

    Each outcome is a ProbeResult, a plain score (average power then comes from
    the device's reported draw), or None for instability. Once the script is
    used up, `default` is returned.
    """

    def __init__(
        self,
        outcomes: Iterable[Union[ProbeResult, float, None]] = (),
        default: Union[ProbeResult, float, None] = 0.0,
    ) -> None:
        self._outcomes = list(outcomes)
        self._default = default
        self.calls = 0

    def __call__(self, device: DeviceControl) -> Optional[ProbeResult]:
        outcome = self._outcomes[self.calls] if self.calls < len(self._outcomes) else self._default
        self.calls += 1

        if outcome is None or isinstance(outcome, ProbeResult):
            return outcome
        power = device.power_usage()
        return ProbeResult(score=float(outcome), avg_power=(power or 0) / 1000.0)
