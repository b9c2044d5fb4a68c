"""
Attendance sessions: atomic creation, ownership, and the percentage views.
"""
from sqlalchemy.exc import OperationalError

from attendance_app.models import AttendanceRecord, AttendanceSession


def _session_body(batch, subject, marks, **overrides):
    body = {
        "subjectId": subject.id,
        "batchId": batch.id,
        "date": "2024-03-04",
        "startTime": "09:00",
        "endTime": "10:00",
        "topic": "Linked lists",
        "attendance": marks,
    }
    body.update(overrides)
    return body


def _mark(student, status):
    return {"studentId": student.id, "status": status}


class TestCreateSession:
    def test_records_session_with_summary(self, client, db, faculty, batch, subject, teaching,
                                          create_student, auth_headers):
        students = [create_student(batch=batch) for _ in range(4)]
        marks = [
            _mark(students[0], "PRESENT"),
            _mark(students[1], "LATE"),
            _mark(students[2], "ABSENT"),
            _mark(students[3], "EXCUSED"),
        ]

        response = client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, marks),
            headers=auth_headers(faculty),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["recordCount"] == 4
        assert data["summary"] == {
            "totalClasses": 4,
            "present": 1,
            "absent": 1,
            "late": 1,
            "excused": 1,
            "percentage": "50.00",
        }
        assert db.query(AttendanceRecord).count() == 4

    def test_status_defaults_to_absent(self, client, faculty, batch, subject, teaching, student, auth_headers):
        response = client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, [{"studentId": student.id}]),
            headers=auth_headers(faculty),
        )

        assert response.json()["data"]["summary"]["absent"] == 1

    def test_unassigned_faculty_is_forbidden(self, client, db, create_faculty, batch, subject, student,
                                             auth_headers):
        outsider = create_faculty()

        response = client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, [_mark(student, "PRESENT")]),
            headers=auth_headers(outsider),
        )

        assert response.status_code == 403
        assert db.query(AttendanceSession).count() == 0

    def test_duplicate_student_rejected_without_writes(self, client, db, faculty, batch, subject, teaching,
                                                       student, auth_headers):
        marks = [_mark(student, "PRESENT"), _mark(student, "ABSENT")]

        response = client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, marks),
            headers=auth_headers(faculty),
        )

        assert response.status_code == 400
        assert db.query(AttendanceSession).count() == 0
        assert db.query(AttendanceRecord).count() == 0

    def test_student_outside_batch_rejected_without_writes(self, client, db, faculty, batch, subject, teaching,
                                                           student, create_batch, create_student, auth_headers):
        other_batch = create_batch(batch_name="2023-2026")
        stranger = create_student(batch=other_batch)

        response = client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, [_mark(student, "PRESENT"), _mark(stranger, "PRESENT")]),
            headers=auth_headers(faculty),
        )

        assert response.status_code == 400
        assert str(stranger.id) in response.json()["message"]
        assert db.query(AttendanceSession).count() == 0
        assert db.query(AttendanceRecord).count() == 0

    def test_failed_commit_leaves_no_rows(self, client, db, faculty, batch, subject, teaching, create_student,
                                          auth_headers, monkeypatch):
        students = [create_student(batch=batch) for _ in range(3)]

        def flush_then_fail():
            db.flush()
            raise OperationalError("COMMIT", None, Exception("disk I/O error"))

        monkeypatch.setattr(db, "commit", flush_then_fail)
        response = client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, [_mark(s, "PRESENT") for s in students]),
            headers=auth_headers(faculty),
        )
        monkeypatch.undo()

        assert response.status_code == 500
        assert db.query(AttendanceSession).count() == 0
        assert db.query(AttendanceRecord).count() == 0

    def test_end_before_start_rejected(self, client, faculty, batch, subject, teaching, student, auth_headers):
        response = client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, [_mark(student, "PRESENT")], startTime="11:00", endTime="10:00"),
            headers=auth_headers(faculty),
        )
        assert response.status_code == 400

    def test_empty_attendance_rejected(self, client, faculty, batch, subject, teaching, auth_headers):
        response = client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, []),
            headers=auth_headers(faculty),
        )
        assert response.status_code == 400

    def test_malformed_time_rejected(self, client, faculty, batch, subject, teaching, student, auth_headers):
        response = client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, [_mark(student, "PRESENT")], startTime="9am"),
            headers=auth_headers(faculty),
        )
        assert response.status_code == 400


class TestFacultyViews:
    def _record(self, client, faculty, batch, subject, student, auth_headers, status="PRESENT", day="2024-03-04"):
        response = client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, [_mark(student, status)], date=day),
            headers=auth_headers(faculty),
        )
        assert response.status_code == 201
        return response.json()["data"]["session"]

    def test_sessions_newest_first(self, client, faculty, batch, subject, teaching, student, auth_headers):
        self._record(client, faculty, batch, subject, student, auth_headers, day="2024-03-04")
        self._record(client, faculty, batch, subject, student, auth_headers, day="2024-03-06")

        body = client.get("/faculty/attendance/sessions", headers=auth_headers(faculty)).json()

        assert [item["session"]["date"] for item in body["data"]] == ["2024-03-06", "2024-03-04"]
        assert body["pagination"]["totalCount"] == 2

    def test_students_for_marking_only_verified(self, client, faculty, batch, subject, teaching,
                                                create_student, auth_headers):
        verified = create_student(batch=batch)
        create_student(batch=batch, is_verified=False)

        response = client.get(
            f"/faculty/attendance/students?batchId={batch.id}&subjectId={subject.id}",
            headers=auth_headers(faculty),
        )

        assert [u["id"] for u in response.json()["data"]] == [verified.id]

    def test_session_detail_of_other_faculty_forbidden(self, client, faculty, batch, subject, teaching,
                                                       student, create_faculty, auth_headers):
        session = self._record(client, faculty, batch, subject, student, auth_headers)
        other = create_faculty()

        response = client.get(f"/faculty/attendance/sessions/{session['id']}", headers=auth_headers(other))
        assert response.status_code == 403

    def test_update_record(self, client, db, faculty, batch, subject, teaching, student, auth_headers):
        self._record(client, faculty, batch, subject, student, auth_headers, status="ABSENT")
        record = db.query(AttendanceRecord).one()

        response = client.put(
            f"/faculty/attendance/record/{record.id}",
            json={"status": "EXCUSED", "remarks": "Medical leave"},
            headers=auth_headers(faculty),
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "EXCUSED"
        assert response.json()["data"]["remarks"] == "Medical leave"

    def test_update_record_of_other_faculty_forbidden(self, client, db, faculty, batch, subject, teaching,
                                                      student, create_faculty, auth_headers):
        self._record(client, faculty, batch, subject, student, auth_headers, status="ABSENT")
        record = db.query(AttendanceRecord).one()
        other = create_faculty()

        response = client.put(
            f"/faculty/attendance/record/{record.id}",
            json={"status": "PRESENT"},
            headers=auth_headers(other),
        )

        assert response.status_code == 403
        db.expire_all()
        assert db.query(AttendanceRecord).one().status.value == "ABSENT"


class TestStudentViews:
    def test_no_records_gives_zero_percentage(self, client, student, auth_headers):
        response = client.get("/student/attendance", headers=auth_headers(student))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["overall"]["totalClasses"] == 0
        assert data["overall"]["percentage"] == "0.00"
        assert data["subjectWise"] == []

    def test_percentage_counts_late_as_attended(self, client, faculty, batch, subject, teaching, student,
                                                auth_headers):
        for day, status in [("2024-03-04", "PRESENT"), ("2024-03-05", "LATE"), ("2024-03-06", "ABSENT")]:
            client.post(
                "/faculty/attendance/session",
                json=_session_body(batch, subject, [_mark(student, status)], date=day),
                headers=auth_headers(faculty),
            )

        data = client.get("/student/attendance", headers=auth_headers(student)).json()["data"]

        overall = data["overall"]
        assert overall["percentage"] == "66.67"
        assert overall["present"] + overall["absent"] + overall["late"] + overall["excused"] == overall["totalClasses"]
        assert data["subjectWise"][0]["subjectCode"] == subject.code
        assert data["recentRecords"][0]["date"] == "2024-03-06"

    def test_subject_view(self, client, faculty, batch, subject, teaching, student, auth_headers):
        client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, [_mark(student, "PRESENT")]),
            headers=auth_headers(faculty),
        )

        response = client.get(f"/student/attendance/subject/{subject.id}", headers=auth_headers(student))

        data = response.json()["data"]
        assert data["summary"]["percentage"] == "100.00"
        assert len(data["records"]) == 1


class TestHodViews:
    def test_stats_flag_low_attendance(self, client, hod, faculty, batch, subject, teaching,
                                       create_student, auth_headers):
        regular = create_student(batch=batch)
        absentee = create_student(batch=batch)
        for day in ("2024-03-04", "2024-03-05"):
            client.post(
                "/faculty/attendance/session",
                json=_session_body(batch, subject, [_mark(regular, "PRESENT"), _mark(absentee, "ABSENT")], date=day),
                headers=auth_headers(faculty),
            )

        data = client.get("/hod/attendance/stats", headers=auth_headers(hod)).json()["data"]

        assert data["totalSessions"] == 2
        assert data["totalRecords"] == 4
        assert data["overallPercentage"] == "50.00"
        assert [s["studentId"] for s in data["lowAttendanceStudents"]] == [absentee.id]
        assert data["lowAttendanceStudents"][0]["percentage"] == "0.00"

    def test_student_report(self, client, hod, faculty, batch, subject, teaching, student, auth_headers):
        client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, [_mark(student, "LATE")]),
            headers=auth_headers(faculty),
        )

        data = client.get(f"/hod/attendance/student/{student.id}", headers=auth_headers(hod)).json()["data"]

        assert data["student"]["id"] == student.id
        assert data["overall"]["late"] == 1
        assert data["overall"]["percentage"] == "100.00"

    def test_batch_report(self, client, hod, faculty, batch, subject, teaching, student, auth_headers):
        client.post(
            "/faculty/attendance/session",
            json=_session_body(batch, subject, [_mark(student, "PRESENT")]),
            headers=auth_headers(faculty),
        )

        data = client.get(f"/hod/attendance/batch/{batch.id}", headers=auth_headers(hod)).json()["data"]

        assert data["batch"]["BatchId"] == batch.id
        assert data["totalSessions"] == 1
        assert len(data["sessions"][0]["session"]["records"]) == 1
