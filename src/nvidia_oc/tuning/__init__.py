"""Power limit and clock offset autotuning.

Main API:
    tune: Capture the baseline, search, restore (with logging and a result summary)
    SearchController / run_search: The search loop on its own

Probes:
    CommandProbe: Run an external benchmark command
    ScriptedProbe: Replay fixed outcomes (tests, dry runs)
"""

from .api import TuneResult, capture_baseline, tune
from .controller import SearchController, run_search
from .probe import CommandProbe, ScriptedProbe, StabilityProbe
from .search import candidate_steps, frequency_steps, memory_steps, power_descent

__all__ = [
    # Main API
    "tune",
    "TuneResult",
    "capture_baseline",
    # Search loop
    "SearchController",
    "run_search",
    "candidate_steps",
    "frequency_steps",
    "memory_steps",
    "power_descent",
    # Probes
    "StabilityProbe",
    "CommandProbe",
    "ScriptedProbe",
]
