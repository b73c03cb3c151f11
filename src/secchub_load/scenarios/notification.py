"""Notification domain: email template lifecycle."""

from ..checks import field_equals, has_field, is_list, status_is
from ..steps import StepRunner
from ._registry import Domain, operation

MOCK_TEMPLATES = [
    {
        "name": "welcome_email",
        "subject": "Welcome to SecHub, {{name}}!",
        "body": "Hello {{name}}, your account has been created. Your username is {{username}}.",
        "variables": ["name", "username"],
    },
    {
        "name": "password_reset",
        "subject": "Password reset request",
        "body": "Hi {{name}}, use this link to reset your password: {{resetLink}}",
        "variables": ["name", "resetLink"],
    },
    {
        "name": "course_enrollment",
        "subject": "Enrollment confirmed: {{courseName}}",
        "body": "Dear {{name}}, you are now enrolled in {{courseName}} for {{semester}}.",
        "variables": ["name", "courseName", "semester"],
    },
    {
        "name": "grade_notification",
        "subject": "New grade posted for {{courseName}}",
        "body": "Hello {{name}}, your grade for {{courseName}} is {{grade}}.",
        "variables": ["name", "courseName", "grade"],
    },
    {
        "name": "schedule_update",
        "subject": "Schedule change for {{courseName}}",
        "body": "Dear {{name}}, {{courseName}} now meets on {{day}} at {{time}}.",
        "variables": ["name", "courseName", "day", "time"],
    },
]


@operation(Domain.NOTIFICATION, "email_template", weight=1)
def email_template_crud(steps: StepRunner) -> None:
    trend = "notification_email_template_duration_ms"

    template = dict(steps.pick(MOCK_TEMPLATES))
    template["name"] = f"{template['name']}_{steps.unique_id()}"

    response, ok = steps.call(
        "POST", "/emails/templates", json=template,
        trend=trend, operation="template_create",
        checks={
            "template created (201)": status_is(201),
            "template has id": has_field("id"),
        },
    )
    template_id = response.json_field("id") if ok else None
    if template_id is None:
        return
    steps.pause(0.2)

    steps.call(
        "GET", "/emails/templates", trend=trend, operation="template_get_all",
        checks={
            "get all templates (200)": status_is(200),
            "templates list is array": is_list(),
        },
    )
    steps.pause(0.2)

    steps.call(
        "GET", f"/emails/templates/{template_id}", trend=trend, operation="template_get_by_id",
        checks={
            "get template by id (200)": status_is(200),
            "template id matches": field_equals("id", template_id),
        },
    )
    steps.pause(0.2)

    steps.call(
        "GET", f"/emails/templates/name/{template['name']}",
        trend=trend, operation="template_get_by_name",
        checks={
            "get template by name (200)": status_is(200),
            "template name matches": field_equals("name", template["name"]),
        },
    )
    steps.pause(0.2)

    update = {
        "name": template["name"],
        "subject": "Updated Subject - Load Test",
        "body": "Updated body content for template {{variable}}",
        "variables": ["variable"],
    }
    steps.call(
        "PUT", f"/emails/templates/{template_id}", json=update,
        trend=trend, operation="template_update",
        checks={
            "template updated (200)": status_is(200),
            "subject updated": field_equals("subject", update["subject"]),
        },
    )
    steps.pause(0.2)

    steps.call(
        "DELETE", f"/emails/templates/{template_id}", trend=trend, operation="template_delete",
        checks={"template deleted (200)": status_is(200)},
    )
