"""Integration domain: academic requests, student applications, teacher-class assignments.

Creation steps run under a secondary role (program, student, teacher)
logged in fresh for each iteration. When that login fails the create
step is skipped and the remaining reads still run with the admin token.
"""

from ..auth import login_role
from ..checks import has_field, is_list, status_is, status_is_not
from ..steps import StepRunner
from ._registry import Domain, operation

MOCK_ACADEMIC_REQUESTS = [
    {"courseId": 1, "semesterId": 2, "sections": [1, 2, 3], "capacity": 40},
    {"courseId": 2, "semesterId": 2, "sections": [1, 2], "capacity": 35},
    {"courseId": 3, "semesterId": 2, "sections": [1], "capacity": 50},
    {"courseId": 4, "semesterId": 2, "sections": [1, 2], "capacity": 35},
    {"courseId": 5, "semesterId": 2, "sections": [1], "capacity": 30},
]

MOCK_STUDENT_APPLICATIONS = [
    {"classId": 7, "observation": "Interested in Database Systems"},
    {"classId": 9, "observation": "Software Engineering focus"},
    {"classId": 11, "observation": "Networking specialization"},
    {"classId": 12, "observation": "ML enthusiast"},
    {"classId": 15, "observation": "OS fundamentals"},
]

REQUEST_SCHEDULES = [
    {"day": "Lunes", "startTime": "08:00:00", "endTime": "10:00:00", "modalityId": 1},
    {"day": "Miercoles", "startTime": "08:00:00", "endTime": "10:00:00", "modalityId": 1},
]


@operation(Domain.INTEGRATION, "academic_request", weight=34)
def academic_request_cycle(steps: StepRunner) -> None:
    trend = "integration_academic_request_duration_ms"
    program_token = login_role(steps.client, "program")
    request_ids = []

    if program_token:
        request = steps.pick(MOCK_ACADEMIC_REQUESTS)
        payload = {"requests": [dict(request, schedules=REQUEST_SCHEDULES)]}
        response, ok = steps.call(
            "POST", "/academic-requests", json=payload, token=program_token,
            trend=trend, operation="academic_request_create",
            checks={
                "academic request created (201)": status_is(201),
                "created requests is array": is_list(),
            },
        )
        if ok:
            request_ids = [item.get("id") for item in response.json() if isinstance(item, dict)]
            request_ids = [rid for rid in request_ids if rid is not None]
        steps.pause(0.2)

    steps.call(
        "GET", "/academic-requests", trend=trend, operation="academic_request_get_all",
        checks={
            "get all academic requests (200)": status_is(200),
            "academic requests is array": is_list(),
        },
    )
    steps.pause(0.2)

    steps.call(
        "GET", "/academic-requests/current-semester",
        trend=trend, operation="academic_request_get_current_semester",
        checks={"get current semester requests (200)": status_is(200)},
    )
    steps.pause(0.2)

    steps.call(
        "GET", "/academic-requests/by-semester", params={"semesterId": 2},
        trend=trend, operation="academic_request_get_by_semester",
        checks={"get requests by semester (200)": status_is(200)},
    )
    steps.pause(0.2)

    if not request_ids:
        return
    request_id = request_ids[0]

    steps.call(
        "GET", f"/academic-requests/{request_id}",
        trend=trend, operation="academic_request_get_by_id",
        checks={"get academic request by id (200)": status_is(200)},
    )
    steps.pause(0.2)

    steps.call(
        "PUT", f"/academic-requests/{request_id}",
        json={"capacity": 45, "observation": "Updated capacity - Load Test"},
        trend=trend, operation="academic_request_update",
        checks={"academic request updated (200)": status_is(200)},
    )
    steps.pause(0.2)

    steps.call(
        "GET", f"/academic-requests/{request_id}/schedules",
        trend=trend, operation="academic_request_get_schedules",
        checks={"get request schedules (200)": status_is(200)},
    )
    steps.pause(0.2)

    steps.call(
        "DELETE", f"/academic-requests/{request_id}",
        trend=trend, operation="academic_request_delete",
        checks={"academic request deleted (204)": status_is(204)},
    )


@operation(Domain.INTEGRATION, "student_application", weight=33)
def student_application_cycle(steps: StepRunner) -> None:
    trend = "integration_student_application_duration_ms"
    student_token = login_role(steps.client, "student")
    application_id = None

    if student_token:
        # A student may already have applied to the class, so 400 is acceptable
        response, ok = steps.call(
            "POST", "/student-applications",
            json=dict(steps.pick(MOCK_STUDENT_APPLICATIONS)), token=student_token,
            trend=trend, operation="student_application_create",
            checks={"application submitted (200, 201 or 400)": status_is(200, 201, 400)},
        )
        if ok and response.status == 201:
            application_id = response.json_field("id")
        steps.pause(0.2)

    steps.call(
        "GET", "/student-applications", trend=trend, operation="student_application_get_all",
        checks={
            "get all applications (200)": status_is(200),
            "applications is array": is_list(),
        },
    )
    steps.pause(0.2)

    steps.call(
        "GET", "/student-applications/current-semester",
        trend=trend, operation="student_application_get_current_semester",
        checks={"get current semester applications (200)": status_is(200)},
    )
    steps.pause(0.2)

    status_id = steps.randint(1, 3)
    steps.call(
        "GET", f"/student-applications/status/{status_id}",
        trend=trend, operation="student_application_get_by_status",
        checks={"get applications by status (200)": status_is(200)},
    )
    steps.pause(0.2)

    section_id = steps.randint(1, 3)
    steps.call(
        "GET", f"/student-applications/section/{section_id}",
        trend=trend, operation="student_application_get_by_section",
        checks={"get applications by section (200)": status_is(200)},
    )
    steps.pause(0.2)

    if application_id is None:
        return

    steps.call(
        "GET", f"/student-applications/{application_id}",
        trend=trend, operation="student_application_get_by_id",
        checks={"get application by id (200)": status_is(200)},
    )
    steps.pause(0.2)

    decision = "approve" if steps.rng.random() > 0.5 else "reject"
    steps.call(
        "PUT", f"/student-applications/{application_id}/{decision}",
        trend=trend, operation=f"student_application_{decision}",
        checks={f"application {decision} (200)": status_is(200)},
    )
    steps.pause(0.2)


@operation(Domain.INTEGRATION, "teacher_class", weight=33)
def teacher_class_cycle(steps: StepRunner) -> None:
    trend = "integration_teacher_class_duration_ms"
    teacher_token = login_role(steps.client, "teacher")
    teacher_id = steps.randint(1, 8)
    class_id = steps.randint(7, 29)

    response, ok = steps.call(
        "POST", "/teachers/classes",
        json={
            "teacherId": teacher_id,
            "classId": class_id,
            "startDate": "2025-01-15",
            "endDate": "2025-05-30",
        },
        trend=trend, operation="teacher_class_create",
        checks={
            "teacher class created (200)": status_is(200),
            "teacher class has id": has_field("id"),
        },
    )
    assignment_id = response.json_field("id") if ok else None
    steps.pause(0.2)

    reads = [
        ("/teachers/classes/current-semester", "teacher_class_get_current_semester"),
        (f"/teachers/{teacher_id}/classes", "teacher_class_get_all_by_teacher"),
        ("/teachers/classes/pending-decision", "teacher_class_get_pending"),
        (f"/teachers/{teacher_id}/classes/status/{steps.randint(1, 3)}",
         "teacher_class_get_by_status"),
        (f"/teachers/classes/class/{class_id}", "teacher_class_get_by_class"),
    ]
    for path, name in reads:
        steps.call(
            "GET", path, trend=trend, operation=name,
            checks={f"{name} (200)": status_is(200)},
        )
        steps.pause(0.2)

    if assignment_id is None or not teacher_token:
        return

    decision = "accept" if steps.rng.random() > 0.5 else "reject"
    steps.call(
        "PATCH", f"/teachers/classes/{assignment_id}/{decision}",
        json={"observation": f"{decision.capitalize()}ed - Load Test"},
        token=teacher_token,
        trend=trend, operation=f"teacher_class_{decision}",
        checks={f"teacher class {decision} (not 500)": status_is_not(500)},
    )
    steps.pause(0.2)

    steps.call(
        "DELETE", f"/teachers/classes/teacher/{teacher_id}/class/{class_id}",
        trend=trend, operation="teacher_class_delete",
        checks={"teacher class deleted (204)": status_is(204)},
    )
    steps.pause(0.2)
