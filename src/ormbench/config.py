"""
Configuration and data models for the ORM vs raw driver benchmark.

The connection URL is an explicit value on BenchmarkConfiguration. Only
from_env() looks at the process environment, and only the CLI calls it.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Mapping, Optional


DATABASE_URL_ENV = "DATABASE_URL"
SAMPLES_ENV = "ORMBENCH_SAMPLES"
WARMUP_ENV = "ORMBENCH_WARMUP"


class QueryShape(Enum):
    """The two query shapes under comparison"""
    SIMPLE = "simple"
    COMPLEX = "complex"


class BackendKind(Enum):
    """Data-access strategies under comparison"""
    ORM = "orm"
    RAW = "raw"


class ScenarioState(Enum):
    """Scenario execution states"""
    PENDING = "pending"
    RESET = "reset"
    SEEDED = "seeded"
    TIMING = "timing"
    DONE = "done"
    FAILED = "failed"


def orm_url(url: str) -> str:
    """
    Rewrite a PostgreSQL URL so SQLAlchemy loads the psycopg 3 dialect.

    URLs that already name a driver, or use another database, pass through.

    Example:
        >>> orm_url("postgres://bench@localhost/bench")
        'postgresql+psycopg://bench@localhost/bench'
    """
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def driver_url(url: str) -> str:
    """Strip a SQLAlchemy '+driver' suffix so libpq accepts the URL."""
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    return f"{scheme.split('+', 1)[0]}://{rest}"


def _env_int(env: Mapping[str, str], name: str) -> int:
    try:
        return int(env[name])
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {env[name]!r}") from None


@dataclass
class BenchmarkConfiguration:
    """Configuration for a benchmark run"""
    database_url: str
    samples: int = 100
    warmup_iterations: int = 2
    max_duration_s: Optional[float] = None
    disable_gc: bool = True

    def validate(self) -> List[str]:
        """
        Validate configuration parameters.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.database_url:
            errors.append("database_url is required (set DATABASE_URL or pass --database-url)")

        if self.samples <= 0:
            errors.append(f"samples must be > 0, got {self.samples}")

        if self.warmup_iterations < 0:
            errors.append(f"warmup_iterations must be >= 0, got {self.warmup_iterations}")

        if self.max_duration_s is not None and self.max_duration_s <= 0:
            errors.append(f"max_duration_s must be > 0, got {self.max_duration_s}")

        return errors

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "BenchmarkConfiguration":
        """
        Build a configuration from environment variables.

        Explicit keyword overrides win over the environment; None overrides
        are ignored so CLI defaults can be passed straight through.

        Raises:
            ValueError: If ORMBENCH_SAMPLES or ORMBENCH_WARMUP is not an integer
        """
        env = os.environ if environ is None else environ

        values = {"database_url": env.get(DATABASE_URL_ENV, "")}
        if env.get(SAMPLES_ENV):
            values["samples"] = _env_int(env, SAMPLES_ENV)
        if env.get(WARMUP_ENV):
            values["warmup_iterations"] = _env_int(env, WARMUP_ENV)

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


@dataclass
class ScenarioResult:
    """Timings and summary metrics for one scenario run"""
    scenario_name: str
    shape: QueryShape
    backend: BackendKind
    num_rows: int
    timings_ms: List[float]
    metrics: Dict[str, float]
    start_time: datetime
    end_time: datetime
    warmup_iterations: int = 0
    state: ScenarioState = ScenarioState.DONE

    @property
    def duration_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    def to_json(self) -> Dict:
        return {
            "scenario": self.scenario_name,
            "shape": self.shape.value,
            "backend": self.backend.value,
            "num_rows": self.num_rows,
            "state": self.state.value,
            "warmup_iterations": self.warmup_iterations,
            "duration_seconds": self.duration_seconds,
            "metrics": dict(self.metrics),
            "timings_ms": list(self.timings_ms),
        }

    def to_table_row(self) -> List:
        """Row of [scenario, samples, mean, p50, p95, p99, qps]"""
        return [
            self.scenario_name,
            int(self.metrics.get("count", 0)),
            f"{self.metrics.get('mean_ms', 0.0):.3f}",
            f"{self.metrics.get('p50_ms', 0.0):.3f}",
            f"{self.metrics.get('p95_ms', 0.0):.3f}",
            f"{self.metrics.get('p99_ms', 0.0):.3f}",
            f"{self.metrics.get('qps', 0.0):.1f}",
        ]


@dataclass
class BenchmarkReport:
    """Results of every scenario in one harness invocation"""
    report_id: str
    config: BenchmarkConfiguration
    start_time: datetime
    end_time: datetime
    results: List[ScenarioResult] = field(default_factory=list)

    @property
    def total_duration_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    def to_json(self) -> Dict:
        """
        Export report as a JSON-serialisable dict.

        The connection URL is left out since it may carry credentials.
        """
        return {
            "report_id": self.report_id,
            "timestamp": self.start_time.isoformat(),
            "config": {
                "samples": self.config.samples,
                "warmup_iterations": self.config.warmup_iterations,
                "max_duration_s": self.config.max_duration_s,
            },
            "duration_seconds": self.total_duration_seconds,
            "scenarios": {result.scenario_name: result.to_json() for result in self.results},
        }

    def to_table_rows(self) -> List[List]:
        return [result.to_table_row() for result in self.results]
