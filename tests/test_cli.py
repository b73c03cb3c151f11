"""
Unit tests for the command-line entry point.
"""

import pytest

from secchub_load import auth, cli


pytestmark = pytest.mark.unit


@pytest.fixture
def env_file(monkeypatch, tmp_path):
    for name in ("BASE_URL", "ADMIN_EMAIL", "ADMIN_PASSWORD", "STAGES",
                 "THINK_TIME_MIN", "THINK_TIME_MAX", "OTEL_EXPORTER_OTLP_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / ".env"
    path.write_text("")
    return str(path)


def _exit_code(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    return excinfo.value.code


def test_check_passes_when_admin_can_log_in(env_file, monkeypatch):
    seen = []

    def fake_authenticate(client, credentials, name="authenticate"):
        seen.append((client.base_url, credentials.email))
        return "token"

    monkeypatch.setattr(auth, "authenticate", fake_authenticate)

    assert _exit_code(["--env-file", env_file, "check", "--base-url", "http://api.test/"]) == 0
    assert seen == [("http://api.test", "admin@secchub.com")]


def test_check_fails_when_admin_login_fails(env_file, monkeypatch):
    monkeypatch.setattr(auth, "authenticate", lambda client, credentials, name="authenticate": None)

    assert _exit_code(["--env-file", env_file, "check"]) == 1


def test_invalid_configuration_exits_with_error(env_file, monkeypatch):
    monkeypatch.setattr(auth, "authenticate", lambda *args, **kwargs: pytest.fail("should not log in"))

    assert _exit_code(["--env-file", env_file, "check", "--base-url", "ftp://nowhere"]) == 1


def test_start_rejects_bad_stage_override(env_file):
    assert _exit_code(["--env-file", env_file, "start", "--stages", "10s:0"]) == 1


def test_command_is_required():
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code == 2
