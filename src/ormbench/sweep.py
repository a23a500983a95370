"""
Scenario sweep: the fixed table of benchmark entry points.

Each (query shape, row count, backend) cell is one independently runnable
scenario named <shape>_<rows>_<backend>, e.g. simple_10000_orm.
"""

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Dict, Iterable, List, Tuple

from ormbench.config import BackendKind, QueryShape


class UnknownScenarioError(KeyError):
    """No sweep entry point matches the requested name or pattern."""

    def __str__(self) -> str:
        return str(self.args[0])


SIMPLE_ROW_COUNTS = (10_000, 1_000, 100, 10, 1, 0)
COMPLEX_ROW_COUNTS = (1_000, 100, 10, 1, 0)

SWEEP: Dict[QueryShape, Tuple[int, ...]] = {
    QueryShape.SIMPLE: SIMPLE_ROW_COUNTS,
    QueryShape.COMPLEX: COMPLEX_ROW_COUNTS,
}


@dataclass(frozen=True)
class Scenario:
    """One cell of the sweep"""
    shape: QueryShape
    num_rows: int
    backend: BackendKind

    @property
    def name(self) -> str:
        return f"{self.shape.value}_{self.num_rows}_{self.backend.value}"

    def __str__(self) -> str:
        return self.name


def build_scenarios(backends: Iterable[BackendKind] = tuple(BackendKind)) -> List[Scenario]:
    """Expand SWEEP into scenarios, ordered by shape, row count, backend."""
    backends = list(backends)
    return [
        Scenario(shape=shape, num_rows=num_rows, backend=backend)
        for shape, row_counts in SWEEP.items()
        for num_rows in row_counts
        for backend in backends
    ]


SCENARIOS: Dict[str, Scenario] = {scenario.name: scenario for scenario in build_scenarios()}


def get_scenario(name: str) -> Scenario:
    """
    Look up a scenario by entry point name.

    Raises:
        UnknownScenarioError: If no scenario has that name
    """
    try:
        return SCENARIOS[name]
    except KeyError:
        raise UnknownScenarioError(f"Unknown scenario: {name}") from None


def select_scenarios(patterns: Iterable[str]) -> List[Scenario]:
    """
    Select scenarios whose names match any shell-style pattern.

    Sweep order is kept and duplicates are dropped. A pattern without
    wildcards must name an existing scenario.

    Raises:
        UnknownScenarioError: If an exact name is unknown or a pattern matches nothing
    """
    patterns = list(patterns)
    for pattern in patterns:
        if not any(ch in pattern for ch in "*?[") and pattern not in SCENARIOS:
            raise UnknownScenarioError(f"Unknown scenario: {pattern}")

    selected = [
        scenario for name, scenario in SCENARIOS.items()
        if any(fnmatchcase(name, pattern) for pattern in patterns)
    ]
    if patterns and not selected:
        raise UnknownScenarioError(f"No scenario matches: {', '.join(patterns)}")
    return selected
