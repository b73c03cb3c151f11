"""Configuration loading from .env files."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .metrics import Threshold
from .scheduler import Stage, parse_stages, total_duration

DEFAULT_STAGES = "10s:10,20s:30,30s:50,20s:50,5s:0"
DEFAULT_THRESHOLDS = (
    "errors:rate<0.05;"
    "http_req_duration:p(95)<1000,p(99)<2000;"
    "http_req_failed:rate<0.05"
)


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # Target backend
    base_url: str = "http://localhost:8080"
    admin_email: str = "admin@secchub.com"
    admin_password: str = "password"
    request_timeout: float = 60.0

    # Virtual user pacing
    think_time_min: float = 1.0
    think_time_max: float = 3.0

    # Ramp profile and pass/fail criteria
    stages: str = DEFAULT_STAGES
    graceful_stop: float = 30.0
    thresholds: str = DEFAULT_THRESHOLDS

    # OpenTelemetry (optional)
    otel_endpoint: str = ""
    otel_headers: str = ""
    otel_service_name: str = "secchub-load"

    @property
    def otel_enabled(self) -> bool:
        """True when OTel tracing should be initialized."""
        return bool(self.otel_endpoint)

    @property
    def stage_profile(self) -> list[Stage]:
        return parse_stages(self.stages)

    @property
    def threshold_rules(self) -> dict[str, list[str]]:
        return parse_thresholds(self.thresholds)

    @property
    def think_time(self) -> tuple[float, float]:
        return (self.think_time_min, self.think_time_max)

    def validate(self):
        """Raise ValueError if required config is missing or invalid."""
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("BASE_URL must start with http:// or https://")
        if not self.admin_email:
            raise ValueError("ADMIN_EMAIL is required")
        if self.request_timeout <= 0:
            raise ValueError("REQUEST_TIMEOUT must be > 0")
        if self.think_time_min < 0:
            raise ValueError("THINK_TIME_MIN must be >= 0")
        if self.think_time_max < self.think_time_min:
            raise ValueError("THINK_TIME_MAX must be >= THINK_TIME_MIN")
        if self.graceful_stop < 0:
            raise ValueError("GRACEFUL_STOP must be >= 0")

        stages = self.stage_profile
        if max(stage.target for stage in stages) < 1:
            raise ValueError("STAGES must reach at least 1 virtual user")
        if total_duration(stages) <= 0:
            raise ValueError("STAGES must last longer than 0s")

        # Surfaces malformed expressions before the run starts
        for expressions in self.threshold_rules.values():
            for expression in expressions:
                Threshold.parse(expression)


def parse_thresholds(text: str) -> dict[str, list[str]]:
    """Parse 'metric:expr,expr;metric:expr' into {metric: [expr, ...]}."""
    rules: dict[str, list[str]] = {}
    for entry in text.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        metric, sep, expressions = entry.partition(":")
        if not sep or not metric.strip():
            raise ValueError(f"Invalid threshold entry: {entry!r}")
        exprs = [e.strip() for e in expressions.split(",") if e.strip()]
        if not exprs:
            raise ValueError(f"Threshold entry has no expressions: {entry!r}")
        rules.setdefault(metric.strip(), []).extend(exprs)
    return rules


def load_config(env_file: str | None = None) -> Config:
    """Load configuration from environment variables and optional .env file.

    Args:
        env_file: Path to .env file. If None, searches for .env in the
                  project root.
    """
    if env_file:
        load_dotenv(env_file)
    else:
        project_root = Path(__file__).resolve().parent.parent.parent
        dotenv_path = project_root / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path)

    return Config(
        base_url=os.getenv("BASE_URL", "http://localhost:8080").rstrip("/"),
        admin_email=os.getenv("ADMIN_EMAIL", "admin@secchub.com"),
        admin_password=os.getenv("ADMIN_PASSWORD", "password"),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "60")),
        think_time_min=float(os.getenv("THINK_TIME_MIN", "1")),
        think_time_max=float(os.getenv("THINK_TIME_MAX", "3")),
        stages=os.getenv("STAGES", DEFAULT_STAGES),
        graceful_stop=float(os.getenv("GRACEFUL_STOP", "30")),
        thresholds=os.getenv("THRESHOLDS", DEFAULT_THRESHOLDS),
        otel_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", ""),
        otel_headers=os.getenv("OTEL_EXPORTER_OTLP_HEADERS", ""),
        otel_service_name=os.getenv("OTEL_SERVICE_NAME", "secchub-load"),
    )
