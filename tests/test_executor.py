"""
Unit tests for run_iteration and the lifecycle hooks.
"""

import pytest

from secchub_load.auth import AuthenticationError, login_role
from secchub_load.config import Config
from secchub_load.context import SharedTestContext
from secchub_load.executor import ScenarioOutcome, run_iteration
from secchub_load.lifecycle import per_iteration, setup, teardown
from secchub_load.metrics import MetricsRegistry

from conftest import FakeApiClient, ScriptedRandom


pytestmark = pytest.mark.unit


def test_missing_token_skips_iteration(fake_client, pauses, caplog):
    context = SharedTestContext(auth_token=None, base_url="http://backend")

    outcome = run_iteration(context, fake_client, sleep=pauses.append)

    assert outcome is None
    assert fake_client.calls == []
    assert pauses == []
    assert "No auth token" in caplog.text


def test_iteration_runs_selected_operation_and_records_counters(fake_client, context, metrics, pauses):
    # 0.0 selects the first domain (admin) and its first operation (course)
    rng = ScriptedRandom([0.0])

    outcome = run_iteration(context, fake_client, rng=rng, sleep=pauses.append,
                            think_time=(1.0, 3.0))

    assert isinstance(outcome, ScenarioOutcome)
    assert (outcome.domain, outcome.operation) == ("admin", "course")
    # The fake answers POST /courses with 200 and a list, so create fails and is the only failure
    assert outcome.ok is False
    assert outcome.failed_checks == 1
    assert fake_client.requests() == [("POST", "/courses"), ("GET", "/courses")]

    assert metrics.counter("operations_by_module").by_tag("module") == {"admin": 1}
    assert metrics.counter("iterations").count == 1
    assert metrics.trend("iteration_duration").count == 1
    # Two in-operation pauses, then the think time (uniform draws 0.0 -> lower bound)
    assert pauses == [0.1, 0.1, 1.0]


@pytest.mark.parametrize("draw", [0.0, 0.25, 0.999])
def test_think_time_stays_within_bounds(fake_client, context, draw):
    slept = []
    rng = ScriptedRandom([draw])

    run_iteration(context, fake_client, rng=rng, sleep=slept.append, think_time=(2.0, 4.0))

    assert 2.0 <= slept[-1] <= 4.0


def test_think_time_is_last_pause(fake_client, context):
    pauses = []
    # 0.36 -> log domain, 0.0 -> its first operation, 0.5 -> mid think time
    rng = ScriptedRandom([0.36, 0.0, 0.5])

    outcome = run_iteration(context, fake_client, rng=rng, sleep=pauses.append,
                            think_time=(1.0, 3.0))

    assert (outcome.domain, outcome.operation) == ("log", "all")
    # Audit log operations have no in-operation pauses
    assert pauses == [2.0]


def test_per_iteration_is_run_iteration():
    assert per_iteration is run_iteration


# -----------------------------------------------------------------------------
# setup / teardown
# -----------------------------------------------------------------------------

def _config():
    return Config(base_url="http://backend", admin_email="admin@secchub.com", admin_password="pw")


def test_setup_returns_context_with_admin_token():
    client = FakeApiClient(MetricsRegistry())
    client.route("POST", "/auth/login", body={"accessToken": "admin-token", "refreshToken": "r"})

    context = setup(_config(), client)

    assert context.auth_token == "admin-token"
    assert context.base_url == "http://backend"
    assert context.metrics is client.metrics
    assert client.calls[0].json == {"email": "admin@secchub.com", "password": "pw"}
    assert client.calls[0].token is None


@pytest.mark.parametrize("status, body", [
    (401, {"message": "bad credentials"}),
    (200, {"refreshToken": "r"}),
    (200, "not json"),
    (0, None),
])
def test_setup_raises_when_admin_login_fails(status, body):
    client = FakeApiClient()
    client.route("POST", "/auth/login", status=status, body=body)

    with pytest.raises(AuthenticationError, match="admin@secchub.com"):
        setup(_config(), client)


def test_teardown_reports_counts_per_category(context, caplog):
    context.created_resource_ids.record("courses", 1)
    context.created_resource_ids.record("courses", 2)
    context.created_resource_ids.record("programs", 7)

    with caplog.at_level("INFO"):
        summary = teardown(context)

    assert summary == {
        "courses": 2, "teachers": 0, "students": 0,
        "admins": 0, "programs": 1, "sections": 0,
    }
    assert "Created resources" in caplog.text


def test_login_role_failure_returns_none(caplog):
    client = FakeApiClient()
    client.route("POST", "/auth/login", status=403)

    assert login_role(client, "teacher") is None
    assert client.calls[0].json["email"] == "teacher@secchub.com"
    assert client.calls[0].name == "integration_auth"
    assert "teacher" in caplog.text
