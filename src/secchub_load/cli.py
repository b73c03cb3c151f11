"""Command-line interface for secchub-load."""

import argparse
import logging
import sys

from .config import load_config

log = logging.getLogger(__name__)

# Exit status when the run completes but breaches a threshold
THRESHOLDS_BREACHED = 99


def setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _load(args):
    config = load_config(args.env_file)
    if getattr(args, "base_url", None):
        config.base_url = args.base_url.rstrip("/")
    if getattr(args, "stages", None):
        config.stages = args.stages
    config.validate()
    return config


def cmd_start(args) -> int:
    """Run the staged load test and evaluate thresholds."""
    config = _load(args)

    from .client import ApiClient
    from .lifecycle import setup, teardown
    from .metrics import MetricsRegistry, evaluate_thresholds, log_threshold_results
    from .runner import LoadRunner
    from .tracing import init_tracing, shutdown_tracing

    init_tracing(config)

    client = ApiClient(config.base_url, timeout=config.request_timeout, metrics=MetricsRegistry())
    try:
        context = setup(config, client)
        runner = LoadRunner(config, context)
        runner.run()
        teardown(context)
    finally:
        client.close()
        shutdown_tracing()

    log.info("Thresholds:")
    results = evaluate_thresholds(context.metrics, config.threshold_rules)
    if not log_threshold_results(results):
        log.error("One or more thresholds were breached")
        return THRESHOLDS_BREACHED
    return 0


def cmd_check(args) -> int:
    """Verify configuration and that the admin user can log in."""
    config = _load(args)

    from .auth import AuthenticationError, Credentials, authenticate
    from .client import ApiClient
    from .scenarios import Domain, get_operations, validate_registry
    from .scheduler import max_vus, total_duration

    validate_registry()

    stages = config.stage_profile
    log.info("Configuration loaded successfully")
    log.info("  Base URL: %s", config.base_url)
    log.info("  Admin: %s", config.admin_email)
    log.info("  Stages: %s (%.0fs, max %d VUs)",
             config.stages, total_duration(stages), max_vus(stages))
    log.info("  Think time: %.1f-%.1fs", config.think_time_min, config.think_time_max)
    log.info("  OTel: %s", "enabled" if config.otel_enabled else "disabled")

    log.info("Scenario weights:")
    for domain in Domain:
        ops = get_operations(domain)
        op_total = sum(op.weight for op in ops)
        log.info("  %-15s weight=%d", domain.value, domain.weight)
        for op in sorted(ops, key=lambda o: o.weight, reverse=True):
            pct = (op.weight / op_total) * 100 if op_total else 0.0
            log.info("    %-25s weight=%d (%.1f%%)", op.name, op.weight, pct)

    client = ApiClient(config.base_url, timeout=config.request_timeout)
    try:
        token = authenticate(client, Credentials(config.admin_email, config.admin_password))
    finally:
        client.close()
    if token is None:
        raise AuthenticationError(f"Admin login failed for {config.admin_email}")

    log.info("  Authentication: ok")
    log.info("All checks passed")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="secchub-load",
        description="Weighted scenario load generator for the SecHub REST backend",
    )
    parser.add_argument("--env-file", help="Path to .env file (default: auto-detect)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # start
    p_start = subparsers.add_parser("start", help="Run the load test")
    p_start.add_argument("--base-url", help="Backend base URL (overrides BASE_URL)")
    p_start.add_argument("--stages", help="Ramp profile, e.g. '10s:10,30s:50,5s:0' (overrides STAGES)")
    p_start.set_defaults(func=cmd_start)

    # check
    p_check = subparsers.add_parser("check", help="Verify config and admin login")
    p_check.add_argument("--base-url", help="Backend base URL (overrides BASE_URL)")
    p_check.set_defaults(func=cmd_check)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    from .auth import AuthenticationError

    try:
        status = args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(1)
    except (ValueError, AuthenticationError) as e:
        log.error(str(e))
        sys.exit(1)
    except Exception as e:
        log.error("Fatal error: %s", e, exc_info=True)
        sys.exit(1)
    sys.exit(status)
