"""
Benchmark runner.

Each scenario runs RESET -> SEED -> (TIME -> VALIDATE)* -> DONE on its own
connection. Seeding happens once and is untimed. Every timed sample is
validated by the oracle. Any failure aborts the scenario: partial or
unvalidated timings are never reported.
"""

import gc
import time
from datetime import datetime
from typing import Callable, Iterable, List, Optional

import structlog

from ormbench.adapters import Backend, create_backend
from ormbench.config import (
    BackendKind,
    BenchmarkConfiguration,
    BenchmarkReport,
    QueryShape,
    ScenarioResult,
    ScenarioState,
)
from ormbench.errors import SeedMismatchError
from ormbench.metrics import calculate_metrics
from ormbench.oracle import validate_result
from ormbench.seed import generate_seed_batch
from ormbench.sweep import Scenario

logger = structlog.get_logger()

BackendFactory = Callable[[BackendKind, str], Backend]


def query_for(backend: Backend, shape: QueryShape) -> Callable[[], list]:
    if shape is QueryShape.SIMPLE:
        return backend.run_simple_query
    return backend.run_complex_query


def check_inserted(table: str, expected: int, actual: int) -> None:
    if actual != expected:
        raise SeedMismatchError(table, expected, actual)


class ScenarioRunner:
    """
    Runs sweep scenarios one at a time.

    The backend factory is injectable so tests can run the full state
    machine against an in-memory backend.
    """

    def __init__(self, config: BenchmarkConfiguration, backend_factory: BackendFactory = create_backend):
        """
        Args:
            config: Benchmark configuration
            backend_factory: Callable building a backend from (kind, database_url)

        Raises:
            ValueError: If configuration validation fails
        """
        errors = config.validate()
        if errors:
            raise ValueError("Invalid configuration:\n" + "\n".join(errors))

        self.config = config
        self.backend_factory = backend_factory
        self.state = ScenarioState.PENDING

    def _transition(self, scenario: Scenario, state: ScenarioState) -> None:
        self.state = state
        logger.debug("Scenario state", scenario=scenario.name, state=state.value)

    def seed(self, backend: Backend, scenario: Scenario) -> None:
        """
        Insert the scenario's seed batch once.

        Raises:
            SeedMismatchError: If storage reports a different inserted count
        """
        batch = generate_seed_batch(scenario.num_rows, scenario.shape)
        if not batch.users:
            return

        check_inserted("users", len(batch.users), backend.bulk_insert_users(batch.users))
        if batch.posts:
            check_inserted("posts", batch.post_count, backend.bulk_insert_posts(batch.posts))

    def time_queries(self, backend: Backend, scenario: Scenario) -> List[float]:
        """
        Run the timed loop and return per-sample latencies in milliseconds.

        The oracle runs after each sample's clock stops, so validation cost
        is not part of the measurement.
        """
        query = query_for(backend, scenario.shape)

        for _ in range(self.config.warmup_iterations):
            validate_result(scenario.shape, query(), scenario.num_rows)

        timings: List[float] = []
        elapsed_s = 0.0
        gc_was_enabled = gc.isenabled()
        if self.config.disable_gc:
            gc.disable()

        try:
            for _ in range(self.config.samples):
                start = time.perf_counter()
                rows = query()
                elapsed = time.perf_counter() - start

                validate_result(scenario.shape, rows, scenario.num_rows)
                timings.append(elapsed * 1000.0)

                elapsed_s += elapsed
                if self.config.max_duration_s is not None and elapsed_s >= self.config.max_duration_s:
                    break
        finally:
            if gc_was_enabled:
                gc.enable()

        return timings

    def run_scenario(self, scenario: Scenario) -> ScenarioResult:
        """
        Run one scenario end to end.

        Raises:
            StorageConnectionError, StorageError, SeedMismatchError,
            AssertionError: All fatal; the scenario is marked FAILED first
        """
        log = logger.bind(scenario=scenario.name)
        start_time = datetime.now()
        self._transition(scenario, ScenarioState.PENDING)

        try:
            with self.backend_factory(scenario.backend, self.config.database_url) as backend:
                backend.reset_schema()
                self._transition(scenario, ScenarioState.RESET)

                self.seed(backend, scenario)
                self._transition(scenario, ScenarioState.SEEDED)

                self._transition(scenario, ScenarioState.TIMING)
                timings = self.time_queries(backend, scenario)
        except Exception as e:
            self._transition(scenario, ScenarioState.FAILED)
            log.error("Scenario failed", error=str(e), error_type=type(e).__name__)
            raise

        self._transition(scenario, ScenarioState.DONE)
        metrics = calculate_metrics(timings)
        log.info(
            "Scenario complete",
            samples=len(timings),
            p50_ms=round(metrics['p50_ms'], 3),
            p95_ms=round(metrics['p95_ms'], 3),
        )

        return ScenarioResult(
            scenario_name=scenario.name,
            shape=scenario.shape,
            backend=scenario.backend,
            num_rows=scenario.num_rows,
            timings_ms=timings,
            metrics=metrics,
            start_time=start_time,
            end_time=datetime.now(),
            warmup_iterations=self.config.warmup_iterations,
            state=ScenarioState.DONE,
        )

    def run_all(self, scenarios: Iterable[Scenario], report_id: Optional[str] = None) -> BenchmarkReport:
        """
        Run scenarios sequentially and collect a report.

        Stops at the first failure; the error propagates to the caller.
        """
        start_time = datetime.now()
        report_id = report_id or f"benchmark_{start_time.strftime('%Y%m%d_%H%M%S')}"

        scenarios = list(scenarios)
        logger.info(
            "Starting benchmark",
            report_id=report_id,
            scenarios=len(scenarios),
            samples=self.config.samples,
            warmup=self.config.warmup_iterations,
        )

        results = [self.run_scenario(scenario) for scenario in scenarios]

        return BenchmarkReport(
            report_id=report_id,
            config=self.config,
            start_time=start_time,
            end_time=datetime.now(),
            results=results,
        )
