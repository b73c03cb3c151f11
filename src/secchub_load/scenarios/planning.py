"""Planning domain: class planning with schedules, classrooms, teaching assistants."""

from ..checks import field_equals, has_field, if_status, is_list, status_is
from ..steps import StepRunner
from ._registry import Domain, operation

MOCK_CLASSROOMS = [
    {"classroomTypeId": 1, "campus": "Main Campus", "location": "Building A", "room": "A101", "capacity": 30},
    {"classroomTypeId": 2, "campus": "Main Campus", "location": "Building B", "room": "B202", "capacity": 25},
    {"classroomTypeId": 3, "campus": "Main Campus", "location": "Building C", "room": "C303", "capacity": 100},
    {"classroomTypeId": 1, "campus": "North Campus", "location": "Building D", "room": "D404", "capacity": 35},
    {"classroomTypeId": 2, "campus": "North Campus", "location": "Building E", "room": "E505", "capacity": 20},
]

MOCK_SCHEDULES = [
    {"classroomId": 1, "startTime": "08:00:00", "endTime": "10:00:00", "dayOfWeek": "Lunes"},
    {"classroomId": 2, "startTime": "10:00:00", "endTime": "12:00:00", "dayOfWeek": "Martes"},
    {"classroomId": 3, "startTime": "14:00:00", "endTime": "16:00:00", "dayOfWeek": "Miércoles"},
    {"classroomId": 4, "startTime": "08:00:00", "endTime": "10:00:00", "dayOfWeek": "Jueves"},
    {"classroomId": 5, "startTime": "16:00:00", "endTime": "18:00:00", "dayOfWeek": "Viernes"},
]

# Seeded student applications that are not yet assigned as teaching assistants
AVAILABLE_APPLICATION_IDS = [7, 8, 11, 12, 14, 16, 17, 18, 19]


def _random_class(steps: StepRunner, min_capacity: int) -> dict:
    return {
        "courseId": steps.randint(1, 20),
        "semesterId": 2,
        "section": steps.randint(1, 3),
        "capacity": steps.randint(min_capacity, min_capacity + 19),
        "teacherId": steps.randint(1, 8),
    }


@operation(Domain.PLANNING, "planning", weight=80)
def class_planning(steps: StepRunner) -> None:
    trend = "planning_planning_duration_ms"

    response, ok = steps.call(
        "POST", "/planning/classes", json=_random_class(steps, 30),
        trend=trend, operation="planning_create_class",
        checks={
            "class created (201)": status_is(201),
            "class has id": has_field("id"),
        },
    )
    class_id = response.json_field("id") if ok else None
    steps.pause(0.2)

    steps.call(
        "GET", "/planning/classes/current-semester",
        trend=trend, operation="planning_get_current_semester",
        checks={
            "get current semester classes (200)": status_is(200),
            "current semester classes is array": is_list(),
        },
    )
    steps.pause(0.2)

    steps.call(
        "GET", "/planning/classes", trend=trend, operation="planning_get_all_classes",
        checks={
            "get all classes (200)": status_is(200),
            "classes is array": is_list(),
        },
    )
    steps.pause(0.2)

    if class_id is None:
        return

    steps.call(
        "GET", f"/planning/classes/{class_id}", trend=trend, operation="planning_get_class_by_id",
        checks={
            "get class by id (200)": status_is(200),
            "class id matches": field_equals("id", class_id),
        },
    )
    steps.pause(0.2)

    update = _random_class(steps, 40)
    steps.call(
        "PUT", f"/planning/classes/{class_id}", json=update,
        trend=trend, operation="planning_update_class",
        checks={
            "class updated (200)": status_is(200),
            "class capacity updated": field_equals("capacity", update["capacity"]),
        },
    )
    steps.pause(0.2)

    steps.call(
        "GET", f"/planning/classes/course/{steps.randint(1, 20)}",
        trend=trend, operation="planning_get_classes_by_course",
        checks={"get classes by course (200)": status_is(200)},
    )
    steps.pause(0.2)

    steps.call(
        "GET", f"/planning/classes/section/{steps.randint(1, 3)}",
        trend=trend, operation="planning_get_classes_by_section",
        checks={"get classes by section (200)": status_is(200)},
    )
    steps.pause(0.2)

    schedule = dict(steps.pick(MOCK_SCHEDULES), classroomId=steps.randint(1, 5))
    response, ok = steps.call(
        "POST", f"/planning/classes/{class_id}/schedules", json=schedule,
        trend=trend, operation="planning_add_schedule",
        checks={
            "schedule added (201)": status_is(201),
            "schedule has id": has_field("id"),
        },
    )
    schedule_id = response.json_field("id") if ok else None
    steps.pause(0.2)

    steps.call(
        "GET", f"/planning/classes/{class_id}/schedules",
        trend=trend, operation="planning_get_class_schedules",
        checks={
            "get class schedules (200)": status_is(200),
            "class schedules is array": is_list(),
        },
    )
    steps.pause(0.2)

    if schedule_id is not None:
        schedule_update = {
            "classroomId": steps.randint(1, 5),
            "startTime": "10:00:00",
            "endTime": "12:00:00",
            "dayOfWeek": "Miércoles",
        }
        steps.call(
            "PUT", f"/planning/schedules/{schedule_id}", json=schedule_update,
            trend=trend, operation="planning_update_schedule",
            checks={
                "schedule updated (200)": status_is(200),
                "schedule time updated": field_equals("startTime", "10:00:00"),
            },
        )
        steps.pause(0.2)

        steps.call(
            "GET", f"/planning/schedules/{schedule_id}",
            trend=trend, operation="planning_get_schedule_by_id",
            checks={
                "get schedule by id (200)": status_is(200),
                "schedule id matches": field_equals("id", schedule_id),
            },
        )
        steps.pause(0.2)

        steps.call(
            "DELETE", f"/planning/schedules/{schedule_id}",
            trend=trend, operation="planning_delete_schedule",
            checks={"schedule deleted (204)": status_is(204)},
        )
        steps.pause(0.2)

    steps.call(
        "DELETE", f"/planning/classes/{class_id}", trend=trend, operation="planning_delete_class",
        checks={"class deleted (204)": status_is(204)},
    )
    steps.pause(0.2)


@operation(Domain.PLANNING, "classroom", weight=10)
def classroom_crud(steps: StepRunner) -> None:
    trend = "planning_classroom_duration_ms"

    classroom = dict(steps.pick(MOCK_CLASSROOMS))
    classroom["room"] = f"{classroom['room']}-{steps.unique_id()}"

    response, ok = steps.call(
        "POST", "/classrooms", json=classroom, trend=trend, operation="classroom_create",
        checks={
            "classroom created (201)": status_is(201),
            "classroom has id": has_field("id"),
        },
    )
    classroom_id = response.json_field("id") if ok else None
    steps.pause(0.2)

    steps.call(
        "GET", "/classrooms", trend=trend, operation="classroom_get_all",
        checks={
            "get all classrooms (200)": status_is(200),
            "classrooms is array": is_list(),
        },
    )
    steps.pause(0.2)

    if classroom_id is None:
        return

    steps.call(
        "GET", f"/classrooms/{classroom_id}", trend=trend, operation="classroom_get_by_id",
        checks={
            "get classroom by id (200)": status_is(200),
            "classroom id matches": field_equals("id", classroom_id),
        },
    )
    steps.pause(0.2)

    update = {
        "classroomTypeId": 1,
        "campus": "Updated Campus",
        "location": "Updated Building",
        "room": f"Updated-{steps.unique_id()}",
        "capacity": 45,
    }
    steps.call(
        "PUT", f"/classrooms/{classroom_id}", json=update,
        trend=trend, operation="classroom_update",
        checks={
            "classroom updated (200)": status_is(200),
            "classroom room updated": field_equals("room", update["room"]),
        },
    )
    steps.pause(0.2)

    steps.call(
        "GET", f"/classrooms/type/{steps.randint(1, 3)}",
        trend=trend, operation="classroom_get_by_type",
        checks={
            "get classrooms by type (200)": status_is(200),
            "classrooms by type is array": is_list(),
        },
    )
    steps.pause(0.2)

    steps.call(
        "DELETE", f"/classrooms/{classroom_id}", trend=trend, operation="classroom_delete",
        checks={"classroom deleted (204)": status_is(204)},
    )
    steps.pause(0.2)


@operation(Domain.PLANNING, "teaching_assistant", weight=10)
def teaching_assistant_cycle(steps: StepRunner) -> None:
    trend = "planning_teaching_assistant_duration_ms"
    application_id = steps.pick(AVAILABLE_APPLICATION_IDS)
    class_id = steps.randint(7, 29)

    assistant = {
        "classId": class_id,
        "studentApplicationId": application_id,
        "weeklyHours": steps.randint(10, 19),
        "weeks": steps.randint(10, 17),
        "totalHours": None,
        "schedules": [
            {"day": "Lunes", "startTime": "08:00:00", "endTime": "10:00:00"},
            {"day": "Miércoles", "startTime": "14:00:00", "endTime": "16:00:00"},
        ],
    }
    # Each application can hold one assignment, so concurrent VUs may hit a 400 duplicate
    response, ok = steps.call(
        "POST", "/teaching-assistants", json=assistant, trend=trend, operation="ta_create",
        checks={
            "teaching assistant created or duplicate (201/400)": status_is(201, 400),
            "teaching assistant has id if created": if_status(201, has_field("id")),
        },
    )
    assistant_id = response.json_field("id") if ok and response.status == 201 else None
    steps.pause(0.2)

    steps.call(
        "GET", "/teaching-assistants", trend=trend, operation="ta_get_all",
        checks={
            "get all teaching assistants (200)": status_is(200),
            "teaching assistants is array": is_list(),
        },
    )
    steps.pause(0.2)

    if assistant_id is None:
        return

    steps.call(
        "GET", f"/teaching-assistants/{assistant_id}", trend=trend, operation="ta_get_by_id",
        checks={
            "get teaching assistant by id (200)": status_is(200),
            "teaching assistant id matches": field_equals("id", assistant_id),
        },
    )
    steps.pause(0.2)

    update = {
        "classId": class_id,
        "studentApplicationId": application_id,
        "weeklyHours": steps.randint(15, 24),
        "weeks": steps.randint(12, 19),
        "totalHours": None,
        "schedules": [
            {"day": "Martes", "startTime": "10:00:00", "endTime": "12:00:00"},
            {"day": "Jueves", "startTime": "16:00:00", "endTime": "18:00:00"},
        ],
    }
    steps.call(
        "PUT", f"/teaching-assistants/{assistant_id}", json=update,
        trend=trend, operation="ta_update",
        checks={
            "teaching assistant updated (200)": status_is(200),
            "teaching assistant has correct id": field_equals("id", assistant_id),
            "teaching assistant hours updated": lambda r: r.json_field("weeklyHours", 0) >= 15,
        },
    )
    steps.pause(0.2)

    steps.call(
        "GET", f"/teaching-assistants/student-application/{steps.randint(1, 19)}",
        trend=trend, operation="ta_get_by_application",
        checks={"get ta by application (200 or 404)": status_is(200, 404)},
    )
    steps.pause(0.2)

    response, ok = steps.call(
        "POST", f"/teaching-assistants/{assistant_id}/schedules",
        json={"day": "Lunes", "startTime": "08:00:00", "endTime": "10:00:00"},
        trend=trend, operation="ta_create_schedule",
        checks={
            "ta schedule created (201)": status_is(201),
            "ta schedule has id": has_field("id"),
        },
    )
    schedule_id = response.json_field("id") if ok else None
    steps.pause(0.2)

    if schedule_id is not None:
        steps.call(
            "PUT", f"/teaching-assistants/schedules/{schedule_id}",
            json={"day": "Miércoles", "startTime": "14:00:00", "endTime": "16:00:00"},
            trend=trend, operation="ta_update_schedule",
            checks={"ta schedule updated (200)": status_is(200)},
        )
        steps.pause(0.2)

        steps.call(
            "DELETE", f"/teaching-assistants/schedules/{schedule_id}",
            trend=trend, operation="ta_delete_schedule",
            checks={"ta schedule deleted (200)": status_is(200)},
        )
        steps.pause(0.2)

    steps.call(
        "GET", "/teaching-assistants/conflicts", trend=trend, operation="ta_get_conflicts",
        checks={
            "get ta conflicts (200)": status_is(200),
            "conflicts is array": is_list(),
        },
    )
    steps.pause(0.2)

    steps.call(
        "DELETE", f"/teaching-assistants/{assistant_id}", trend=trend, operation="ta_delete",
        checks={"teaching assistant deleted (200)": status_is(200)},
    )
    steps.pause(0.2)
