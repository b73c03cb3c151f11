"""Run lifecycle hooks: setup once, iterate per virtual user, teardown once."""

import logging

from .auth import AuthenticationError, Credentials, authenticate
from .client import ApiClient
from .config import Config
from .context import SharedTestContext
from .executor import run_iteration
from .metrics import MetricsRegistry
from .scenarios import DOMAIN_WEIGHTS
from .scheduler import max_vus, total_duration

log = logging.getLogger(__name__)

per_iteration = run_iteration


def setup(config: Config, client: ApiClient) -> SharedTestContext:
    """Authenticate the admin user and build the run-wide context.

    Raises AuthenticationError when the admin login fails; no iteration
    may start without a token.
    """
    stages = config.stage_profile
    log.info("Load test setup")
    log.info("  Base URL: %s", config.base_url)
    log.info("  Stages: %s", ", ".join(f"{s.duration:g}s->{s.target}" for s in stages))
    log.info("  Duration: %.0fs, max VUs: %d", total_duration(stages), max_vus(stages))
    log.info("  Domain weights: %s",
             ", ".join(f"{domain.value}={weight}" for domain, weight in DOMAIN_WEIGHTS.items()))

    token = authenticate(client, Credentials(config.admin_email, config.admin_password))
    if token is None:
        raise AuthenticationError(f"Admin login failed for {config.admin_email}")
    log.info("Authenticated as %s", config.admin_email)

    # Admin login timings belong to the run as well
    metrics = client.metrics if client.metrics is not None else MetricsRegistry()
    client.metrics = metrics
    return SharedTestContext(auth_token=token, base_url=config.base_url, metrics=metrics)


def teardown(context: SharedTestContext) -> dict[str, int]:
    """Log and return how many resources of each category were created."""
    summary = context.created_resource_ids.summary()
    log.info("Load test complete. Created resources:")
    for category, count in summary.items():
        log.info("  %-10s %d", category, count)
    return summary
