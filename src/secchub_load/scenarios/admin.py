"""Admin domain: courses, teachers, sections, semesters, and user registration."""

from ..checks import field_equals, has_field, is_list, status_is
from ..steps import StepRunner
from ._registry import Domain, operation

MOCK_COURSES = [
    {"name": "Advanced Algorithms", "credits": 3, "sectionId": 1},
    {"name": "Database Systems", "credits": 4, "sectionId": 2},
    {"name": "Software Engineering", "credits": 3, "sectionId": 3},
    {"name": "Computer Networks", "credits": 3, "sectionId": 1},
    {"name": "Artificial Intelligence", "credits": 4, "sectionId": 2},
    {"name": "Operating Systems", "credits": 4, "sectionId": 1},
    {"name": "Web Development", "credits": 3, "sectionId": 3},
    {"name": "Mobile Computing", "credits": 3, "sectionId": 2},
]


@operation(Domain.ADMIN, "course", weight=35)
def course_crud(steps: StepRunner) -> None:
    trend = "admin_course_duration_ms"

    course = dict(steps.pick(MOCK_COURSES))
    course["name"] = f"{course['name']} {steps.unique_id()}"

    response, ok = steps.call(
        "POST", "/courses", json=course, trend=trend, operation="course_create",
        checks={
            "course created (201)": status_is(201),
            "course has id": has_field("id"),
            "course has name": has_field("name"),
        },
    )
    course_id = response.json_field("id") if ok else None
    if course_id is not None:
        steps.record("courses", course_id)
    steps.pause(0.1)

    steps.call(
        "GET", "/courses", trend=trend, operation="course_get_all",
        checks={
            "get all courses (200)": status_is(200),
            "courses list is array": is_list(),
        },
    )
    steps.pause(0.1)

    if course_id is None:
        return

    steps.call(
        "GET", f"/courses/{course_id}", trend=trend, operation="course_get_by_id",
        checks={
            "get course by id (200)": status_is(200),
            "course id matches": field_equals("id", course_id),
        },
    )
    steps.pause(0.1)

    steps.call(
        "PATCH", f"/courses/{course_id}", json={"credits": 4},
        trend=trend, operation="course_patch",
        checks={
            "course patched (200)": status_is(200),
            "credits updated": field_equals("credits", 4),
        },
    )
    steps.pause(0.1)

    steps.call(
        "GET", f"/courses/{course_id}", trend=trend, operation="course_get_after_patch",
        checks={
            "get patched course (200)": status_is(200),
            "patch persisted": field_equals("credits", 4),
        },
    )
    steps.pause(0.1)

    steps.call(
        "DELETE", f"/courses/{course_id}", trend=trend, operation="course_delete",
        checks={"course deleted (204)": status_is(204)},
    )


@operation(Domain.ADMIN, "teacher", weight=25)
def teacher_cycle(steps: StepRunner) -> None:
    trend = "admin_teacher_duration_ms"

    steps.call(
        "GET", "/teachers", trend=trend, operation="teacher_get_all",
        checks={
            "get all teachers (200)": status_is(200),
            "teachers list is array": is_list(),
        },
    )
    steps.pause(0.1)

    # Seeded teachers have ids 1-5
    teacher_id = steps.randint(1, 5)
    response, found = steps.call(
        "GET", f"/teachers/{teacher_id}", trend=trend, operation="teacher_get_by_id",
        checks={"get teacher by id (200 or 404)": status_is(200, 404)},
    )
    steps.pause(0.3)

    if found and response.status == 200:
        update = {
            "employmentTypeId": response.json_field("employmentTypeId"),
            "maxHours": steps.randint(35, 54),
        }
        steps.call(
            "PUT", f"/teachers/{teacher_id}", json=update,
            trend=trend, operation="teacher_update",
            checks={
                "teacher updated (200)": status_is(200),
                "max hours updated": field_equals("maxHours", update["maxHours"]),
            },
        )
        steps.pause(0.3)

        steps.call(
            "GET", f"/teachers/{teacher_id}", trend=trend, operation="teacher_get_after_update",
            checks={
                "get updated teacher (200)": status_is(200),
                "update persisted": field_equals("maxHours", update["maxHours"]),
            },
        )

    steps.pause(0.1)

    employment_type_id = steps.randint(1, 2)
    steps.call(
        "GET", f"/teachers/employment-type/{employment_type_id}",
        trend=trend, operation="teacher_get_by_employment",
        checks={
            "get teachers by employment (200)": status_is(200),
            "filtered teachers is array": is_list(),
        },
    )


@operation(Domain.ADMIN, "section", weight=20)
def section_cycle(steps: StepRunner) -> None:
    trend = "admin_section_duration_ms"

    steps.call(
        "GET", "/sections", trend=trend, operation="section_get_all",
        checks={
            "get all sections (200)": status_is(200),
            "sections list is array": is_list(),
        },
    )
    steps.pause(0.1)

    section_id = steps.randint(1, 3)
    steps.call(
        "GET", f"/sections/{section_id}", trend=trend, operation="section_get_by_id",
        checks={"get section by id (200 or 404)": status_is(200, 404)},
    )
    steps.pause(0.1)

    steps.call(
        "GET", "/sections/planning-status-stats", trend=trend, operation="section_get_stats",
        checks={
            "get planning stats (200)": status_is(200),
            "stats have openCount": has_field("openCount"),
            "stats have closedCount": has_field("closedCount"),
        },
    )
    steps.pause(0.1)

    steps.call(
        "GET", "/sections/summary", trend=trend, operation="section_get_summary",
        checks={
            "get sections summary (200)": status_is(200),
            "summary list is array": is_list(),
        },
    )


@operation(Domain.ADMIN, "semester", weight=19)
def semester_cycle(steps: StepRunner) -> None:
    trend = "admin_semester_duration_ms"

    steps.call(
        "GET", "/semesters/current", trend=trend, operation="semester_get_current",
        checks={
            "get current semester (200)": status_is(200),
            "semester has id": has_field("id"),
            "semester has year": has_field("year"),
            "semester has period": has_field("period"),
        },
    )
    steps.pause(0.1)

    steps.call(
        "GET", "/semesters/all", trend=trend, operation="semester_get_all",
        checks={
            "get all semesters (200)": status_is(200),
            "semesters list is array": is_list(),
        },
    )
    steps.pause(0.1)

    steps.call(
        "GET", "/semesters", params={"year": 2025, "period": 10},
        trend=trend, operation="semester_get_by_params",
        checks={"get semester by params (200 or 404)": status_is(200, 404)},
    )


@operation(Domain.ADMIN, "register", weight=1)
def register_users(steps: StepRunner) -> None:
    trend = "admin_register_duration_ms"
    unique = steps.unique_id()

    student = {
        "username": f"student_{unique}",
        "password": "password123",
        "name": "Test",
        "lastName": "Student",
        "email": f"student_{unique}@secchub.com",
        "documentTypeId": 1,
        "documentNumber": f"DOC{unique}",
    }
    response, ok = steps.call(
        "POST", "/admin/register/student", json=student,
        trend=trend, operation="register_student",
        checks={
            "student registered (201)": status_is(201),
            "student id returned": lambda r: r.text != "",
        },
    )
    if ok:
        # The endpoint answers with the bare numeric id
        try:
            steps.record("students", int(response.text.strip()))
        except ValueError:
            steps.record("students", response.text.strip())
    steps.pause(0.5)

    teacher = {
        "user": {
            "username": f"teacher_{unique}",
            "password": "password123",
            "name": "Test",
            "lastName": "Teacher",
            "email": f"teacher_{unique}@secchub.com",
            "documentTypeId": 1,
            "documentNumber": f"TDOC{unique}",
        },
        "employmentTypeId": steps.randint(1, 2),
        "maxHours": 40,
    }
    response, ok = steps.call(
        "POST", "/admin/register/teacher", json=teacher,
        trend=trend, operation="register_teacher",
        checks={
            "teacher registered (201)": status_is(201),
            "teacher has id": has_field("id"),
        },
    )
    teacher_id = response.json_field("id") if ok else None
    if teacher_id is not None:
        steps.record("teachers", teacher_id)
