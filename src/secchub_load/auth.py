"""Login against /auth/login for the admin bootstrap and for secondary roles."""

import logging
from dataclasses import dataclass

from .client import ApiClient

log = logging.getLogger(__name__)


class AuthenticationError(RuntimeError):
    """The primary admin login failed; the run cannot start."""


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str


ROLE_USERS: dict[str, Credentials] = {
    "admin": Credentials("admin@secchub.com", "password"),
    "teacher": Credentials("teacher@secchub.com", "password"),
    "student": Credentials("student@secchub.com", "password"),
    "program": Credentials("program@secchub.com", "password"),
}


def authenticate(client: ApiClient, credentials: Credentials,
                 name: str = "authenticate") -> str | None:
    """Log in and return the access token, or None on any failure."""
    response = client.request(
        "POST", "/auth/login",
        json={"email": credentials.email, "password": credentials.password},
        name=name,
    )
    if response.status != 200:
        log.warning("Authentication failed for %s: %d %s",
                    credentials.email, response.status, response.error or response.text[:200])
        return None

    token = response.json_field("accessToken")
    if not isinstance(token, str) or not token:
        log.warning("Authentication response for %s has no accessToken", credentials.email)
        return None
    return token


def login_role(client: ApiClient, role: str) -> str | None:
    """Authenticate a secondary role (teacher, student, program).

    A failure here is not fatal: callers skip the step that needs the
    role and keep going with the admin token.
    """
    credentials = ROLE_USERS[role]
    token = authenticate(client, credentials, name="integration_auth")
    if token is None:
        log.warning("Could not authenticate %s role, skipping dependent steps", role)
    return token
