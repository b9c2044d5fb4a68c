"""
Syllabus structure (HOD), coverage updates (faculty) and the student view.
"""
from datetime import date

from attendance_app.models import (
    AttendanceSession, ProgressStatus, SyllabusProgress, SyllabusTopic, SyllabusTopicProgress, SyllabusUnit,
)
from attendance_app.services.syllabus import combined_status, completion


def _units(*numbers, topics=2):
    return [
        {
            "unitNumber": number,
            "title": f"Unit {number}",
            "weightage": 20,
            "topics": [{"topicNumber": t, "title": f"Topic {number}.{t}"} for t in range(1, topics + 1)],
        }
        for number in numbers
    ]


def _create_syllabus(client, hod, subject, auth_headers, *numbers, topics=2):
    response = client.post(
        f"/syllabus/hod/subjects/{subject.id}/syllabus",
        json={"units": _units(*numbers, topics=topics)},
        headers=auth_headers(hod),
    )
    assert response.status_code == 201
    return response.json()["data"]


def _progress(client, faculty, batch, subject, unit_id, auth_headers, **body):
    body.update({"batchId": batch.id, "subjectId": subject.id, "unitId": unit_id})
    return client.put("/syllabus/faculty/syllabus-progress", json=body, headers=auth_headers(faculty))


def test_completion_rounds_half_up():
    done, todo = ProgressStatus.COMPLETED, ProgressStatus.NOT_STARTED
    assert completion([]) == {"totalUnits": 0, "completedUnits": 0, "overallProgress": 0}
    assert completion([done] + [todo] * 7)["overallProgress"] == 13
    assert completion([done, done, todo])["overallProgress"] == 67


def test_combined_status():
    assert combined_status([]) == ProgressStatus.NOT_STARTED
    assert combined_status([ProgressStatus.IN_PROGRESS, ProgressStatus.NOT_STARTED]) == ProgressStatus.IN_PROGRESS
    assert combined_status([ProgressStatus.IN_PROGRESS, ProgressStatus.COMPLETED]) == ProgressStatus.COMPLETED


class TestStructure:
    def test_create_and_read_back(self, client, hod, subject, auth_headers):
        created = _create_syllabus(client, hod, subject, auth_headers, 2, 1, topics=3)

        assert [u["unitNumber"] for u in created] == [2, 1]
        assert [t["topicNumber"] for t in created[0]["topics"]] == [1, 2, 3]

        data = client.get(f"/syllabus/hod/subjects/{subject.id}/syllabus", headers=auth_headers(hod)).json()["data"]
        assert data["subjectId"] == subject.id
        assert [u["unitNumber"] for u in data["units"]] == [1, 2]

    def test_existing_unit_number_conflicts_and_writes_nothing(self, client, db, hod, subject, auth_headers):
        _create_syllabus(client, hod, subject, auth_headers, 1)

        response = client.post(
            f"/syllabus/hod/subjects/{subject.id}/syllabus",
            json={"units": _units(2, 1)},
            headers=auth_headers(hod),
        )

        assert response.status_code == 409
        assert db.query(SyllabusUnit).count() == 1
        assert db.query(SyllabusTopic).count() == 2

    def test_repeated_unit_number_in_request_rejected(self, client, hod, subject, auth_headers):
        response = client.post(
            f"/syllabus/hod/subjects/{subject.id}/syllabus",
            json={"units": _units(1, 1)},
            headers=auth_headers(hod),
        )
        assert response.status_code == 400

    def test_unknown_subject(self, client, hod, auth_headers):
        response = client.post("/syllabus/hod/subjects/999/syllabus", json={"units": _units(1)}, headers=auth_headers(hod))
        assert response.status_code == 404

    def test_update_unit_number_conflict(self, client, hod, subject, auth_headers):
        units = _create_syllabus(client, hod, subject, auth_headers, 1, 2)

        response = client.put(
            f"/syllabus/hod/units/{units[1]['id']}", json={"unitNumber": 1}, headers=auth_headers(hod)
        )
        assert response.status_code == 409

    def test_delete_unit_removes_topics(self, client, db, hod, subject, auth_headers):
        unit = _create_syllabus(client, hod, subject, auth_headers, 1)[0]

        response = client.delete(f"/syllabus/hod/units/{unit['id']}", headers=auth_headers(hod))

        assert response.status_code == 200
        assert db.query(SyllabusUnit).count() == 0
        assert db.query(SyllabusTopic).count() == 0

    def test_unit_with_progress_cannot_be_deleted(self, client, hod, faculty, batch, subject, teaching,
                                                  auth_headers):
        unit = _create_syllabus(client, hod, subject, auth_headers, 1)[0]
        _progress(client, faculty, batch, subject, unit["id"], auth_headers, status="IN_PROGRESS")

        response = client.delete(f"/syllabus/hod/units/{unit['id']}", headers=auth_headers(hod))

        assert response.status_code == 409

    def test_subject_with_syllabus_cannot_be_deleted(self, client, hod, subject, auth_headers):
        _create_syllabus(client, hod, subject, auth_headers, 1)

        response = client.delete(f"/hod/subjects/{subject.id}", headers=auth_headers(hod))

        assert response.status_code == 409
        assert response.json()["details"]["dependents"] == {"syllabusUnits": 1}

    def test_faculty_cannot_edit_structure(self, client, faculty, subject, auth_headers):
        response = client.post(
            f"/syllabus/hod/subjects/{subject.id}/syllabus", json={"units": _units(1)}, headers=auth_headers(faculty)
        )
        assert response.status_code == 403


class TestProgress:
    def test_progress_is_upserted(self, client, db, hod, faculty, batch, subject, teaching, auth_headers):
        unit = _create_syllabus(client, hod, subject, auth_headers, 1)[0]

        started = _progress(client, faculty, batch, subject, unit["id"], auth_headers, status="IN_PROGRESS",
                            completionPercent=40, notes="Half way").json()["data"]["progress"]
        finished = _progress(client, faculty, batch, subject, unit["id"], auth_headers,
                             status="COMPLETED").json()["data"]["progress"]

        assert finished["id"] == started["id"]
        assert started["startedAt"] is not None
        assert started["completedAt"] is None
        assert finished["completionPercent"] == 100
        assert finished["completedAt"] is not None
        assert finished["notes"] == "Half way"
        assert db.query(SyllabusProgress).count() == 1

    def test_topic_progress_linked_to_session(self, client, db, hod, faculty, batch, subject, teaching,
                                              auth_headers):
        unit = _create_syllabus(client, hod, subject, auth_headers, 1)[0]
        session = AttendanceSession(
            subject_id=subject.id, batch_id=batch.id, faculty_id=faculty.id,
            date=date(2024, 3, 4), start_time="09:00", end_time="10:00",
        )
        db.add(session)
        db.commit()
        topic_id = unit["topics"][0]["id"]

        response = _progress(
            client, faculty, batch, subject, unit["id"], auth_headers,
            topicProgress=[{"topicId": topic_id, "status": "COMPLETED", "sessionId": session.id}],
        )

        assert response.status_code == 200
        row = response.json()["data"]["topicProgress"][0]
        assert row["sessionId"] == session.id
        assert row["taughtAt"] is not None

    def test_unassigned_faculty_forbidden(self, client, db, hod, create_faculty, batch, subject, auth_headers):
        unit = _create_syllabus(client, hod, subject, auth_headers, 1)[0]

        response = _progress(client, create_faculty(), batch, subject, unit["id"], auth_headers, status="COMPLETED")

        assert response.status_code == 403
        assert db.query(SyllabusProgress).count() == 0

    def test_unit_of_another_subject_rejected(self, client, hod, faculty, batch, subject, teaching,
                                              create_subject, auth_headers):
        other_unit = _create_syllabus(client, hod, create_subject(), auth_headers, 1)[0]

        response = _progress(client, faculty, batch, subject, other_unit["id"], auth_headers, status="COMPLETED")
        assert response.status_code == 400

    def test_topic_of_another_unit_rejected_without_writes(self, client, db, hod, faculty, batch, subject,
                                                           teaching, auth_headers):
        first, second = _create_syllabus(client, hod, subject, auth_headers, 1, 2)

        response = _progress(
            client, faculty, batch, subject, first["id"], auth_headers,
            status="IN_PROGRESS", topicProgress=[{"topicId": second["topics"][0]["id"], "status": "COMPLETED"}],
        )

        assert response.status_code == 400
        assert db.query(SyllabusProgress).count() == 0
        assert db.query(SyllabusTopicProgress).count() == 0

    def test_my_syllabus_shows_own_progress(self, client, hod, faculty, batch, subject, teaching, auth_headers):
        first, _ = _create_syllabus(client, hod, subject, auth_headers, 1, 2)
        _progress(client, faculty, batch, subject, first["id"], auth_headers, status="COMPLETED")

        data = client.get("/syllabus/faculty/my-syllabus", headers=auth_headers(faculty)).json()["data"]

        assert len(data) == 1
        assert data[0]["subject"]["id"] == subject.id
        assert [u["status"] for u in data[0]["units"]] == ["COMPLETED", "NOT_STARTED"]
        assert data[0]["overallProgress"] == 50

    def test_detail_requires_assignment(self, client, create_faculty, batch, subject, auth_headers):
        response = client.get(
            f"/syllabus/faculty/syllabus-progress/{subject.id}/{batch.id}", headers=auth_headers(create_faculty())
        )
        assert response.status_code == 403

    def test_hod_overview_limited_to_department(self, client, hod, faculty, batch, subject, teaching,
                                                create_subject, assign_teaching, auth_headers):
        physics = create_subject(department="Physics")
        assign_teaching(faculty, batch, physics)
        ours = _create_syllabus(client, hod, subject, auth_headers, 1)[0]
        theirs = _create_syllabus(client, hod, physics, auth_headers, 1)[0]
        _progress(client, faculty, batch, subject, ours["id"], auth_headers, status="IN_PROGRESS")
        _progress(client, faculty, batch, physics, theirs["id"], auth_headers, status="IN_PROGRESS")

        data = client.get("/syllabus/hod/syllabus-progress", headers=auth_headers(hod)).json()["data"]

        assert [row["subject"]["id"] for row in data] == [subject.id]
        assert data[0]["faculty"]["id"] == faculty.id
        assert data[0]["batch"]["BatchId"] == batch.id


class TestStudentView:
    def test_coverage_for_batch(self, client, hod, faculty, batch, subject, teaching, student, auth_headers):
        first, _ = _create_syllabus(client, hod, subject, auth_headers, 1, 2)
        _progress(client, faculty, batch, subject, first["id"], auth_headers, status="COMPLETED")

        data = client.get("/syllabus/student/my-syllabus", headers=auth_headers(student)).json()["data"]

        assert data["batch"]["BatchId"] == batch.id
        [entry] = data["subjects"]
        assert entry["subject"]["id"] == subject.id
        assert [f["id"] for f in entry["faculty"]] == [faculty.id]
        assert entry["completedUnits"] == 1
        assert entry["totalUnits"] == 2
        assert entry["overallProgress"] == 50

    def test_subject_detail(self, client, hod, faculty, batch, subject, teaching, student, auth_headers):
        first, _ = _create_syllabus(client, hod, subject, auth_headers, 1, 2)
        _progress(client, faculty, batch, subject, first["id"], auth_headers, status="IN_PROGRESS")

        data = client.get(f"/syllabus/student/syllabus/{subject.id}", headers=auth_headers(student)).json()["data"]

        assert [u["status"] for u in data["units"]] == ["IN_PROGRESS", "NOT_STARTED"]
        assert len(data["units"][0]["topics"]) == 2

    def test_other_batch_progress_not_counted(self, client, hod, faculty, batch, subject, teaching,
                                              create_batch, create_student, assign_teaching, auth_headers):
        other_batch = create_batch(batch_name="2023-2026")
        assign_teaching(faculty, other_batch, subject)
        first = _create_syllabus(client, hod, subject, auth_headers, 1)[0]
        _progress(client, faculty, other_batch, subject, first["id"], auth_headers, status="COMPLETED")
        classmate = create_student(batch=batch)

        data = client.get(f"/syllabus/student/syllabus/{subject.id}", headers=auth_headers(classmate)).json()["data"]

        assert data["units"][0]["status"] == "NOT_STARTED"
        assert data["overallProgress"] == 0

    def test_student_without_batch(self, client, create_student, auth_headers):
        response = client.get("/syllabus/student/my-syllabus", headers=auth_headers(create_student(batch=None)))
        assert response.status_code == 404
