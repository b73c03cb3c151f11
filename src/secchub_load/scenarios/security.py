"""Security domain: user lookups and the login/refresh token flow."""

from ..checks import field_equals, has_field, if_status, is_list, non_empty_list, status_is
from ..steps import StepRunner
from ._registry import Domain, operation

# Seeded accounts; all share the same password
MOCK_USERS = [
    "admin", "user", "student", "teacher", "program",
    "maria.garcia", "carlos.lopez", "ana.rodriguez", "luis.martinez", "sofia.hernandez",
    "user-is", "user-si",
    "dr.silva", "prof.torres", "dr.morales", "prof.castro", "dr.vargas",
    "juan.perez", "laura.jimenez", "diego.ramirez", "camila.santos",
    "andres.flores", "valentina.cruz",
    "coord.cs", "coord.is",
]
MOCK_PASSWORD = "password"


def _email(username: str) -> str:
    return f"{username}@secchub.com"


@operation(Domain.SECURITY, "user", weight=70)
def user_lookups(steps: StepRunner) -> None:
    trend = "security_user_duration_ms"

    steps.call(
        "GET", "/user", trend=trend, operation="user_get_current",
        checks={
            "get current user (200)": status_is(200),
            "user has username": has_field("username"),
            "user has email": has_field("email"),
        },
    )
    steps.pause(0.2)

    steps.call(
        "GET", "/user/all", trend=trend, operation="user_get_all",
        checks={
            "get all users (200)": status_is(200),
            "users list is array": is_list(),
            "users list not empty": non_empty_list(),
        },
    )
    steps.pause(0.2)

    email = _email(steps.pick(MOCK_USERS))
    steps.call(
        "GET", "/user/email", params={"email": email},
        trend=trend, operation="user_get_by_email",
        checks={
            "get user by email (200)": status_is(200),
            "email matches": field_equals("email", email),
        },
    )
    steps.pause(0.2)

    user_id = steps.randint(1, 25)
    steps.call(
        "GET", f"/user/id/{user_id}", trend=trend, operation="user_get_by_id",
        checks={
            "get user by id (200 or 404)": status_is(200, 404),
            "user id matches": if_status(200, field_equals("id", user_id)),
        },
    )
    steps.pause(0.2)

    email = _email(steps.pick(MOCK_USERS))
    steps.call(
        "GET", "/user/email", params={"email": email},
        trend=trend, operation="user_get_by_email_again",
        checks={
            "get user by email (200)": status_is(200),
            "user has username": has_field("username"),
        },
    )
    steps.pause(0.2)

    user_id = steps.randint(16, 25)
    steps.call(
        "GET", f"/user/id/{user_id}", trend=trend, operation="user_get_by_id_high",
        checks={
            "get user by id (200 or 404)": status_is(200, 404),
            "user id matches": if_status(200, field_equals("id", user_id)),
        },
    )


@operation(Domain.SECURITY, "authentication", weight=30)
def login_and_refresh(steps: StepRunner) -> None:
    trend = "security_authentication_duration_ms"
    email = _email(steps.pick(MOCK_USERS))

    # Login runs without a bearer token
    response, ok = steps.call(
        "POST", "/auth/login", json={"email": email, "password": MOCK_PASSWORD},
        auth=False, trend=trend, operation="auth_login",
        checks={
            "login (200)": status_is(200),
            "login has accessToken": has_field("accessToken"),
            "login has refreshToken": has_field("refreshToken"),
        },
    )
    refresh_token = response.json_field("refreshToken") if ok else None
    if not refresh_token:
        return
    steps.pause(0.2)

    steps.call(
        "POST", "/auth/refresh", json={"refreshToken": refresh_token},
        auth=False, trend=trend, operation="auth_refresh",
        checks={
            "refresh (200)": status_is(200),
            "refresh has accessToken": has_field("accessToken"),
            "refresh has refreshToken": has_field("refreshToken"),
        },
    )
