"""
Timetable versions, slots, and the "my timetable" / "today" views.
"""
from datetime import date, timedelta

from attendance_app.models import TimetableSlot, TimetableVersion
from attendance_app.services.timetable import iso_weekday


def _version_body(valid_from, valid_to=None, semester=1, name="Odd semester"):
    body = {
        "name": name,
        "academicYear": "2024-25",
        "semester": semester,
        "validFrom": valid_from.isoformat(),
    }
    if valid_to is not None:
        body["validTo"] = valid_to.isoformat()
    return body


def _slot(day, faculty, batch, subject, start="09:00", end="10:00"):
    return {
        "dayOfWeek": day,
        "startTime": start,
        "endTime": end,
        "subjectId": subject.id,
        "batchId": batch.id,
        "facultyId": faculty.id,
        "roomNumber": f"R{day}01",
    }


def _create_version(client, hod, auth_headers, **kwargs):
    response = client.post("/timetable/hod/version", json=_version_body(**kwargs), headers=auth_headers(hod))
    assert response.status_code == 201
    return response.json()["data"]


def test_iso_weekday():
    assert iso_weekday(date(2024, 1, 1)) == 1  # Monday
    assert iso_weekday(date(2024, 1, 6)) == 6
    assert iso_weekday(date(2024, 1, 7)) == 7  # Sunday


class TestVersions:
    def test_newer_version_closes_previous_window(self, client, db, hod, auth_headers, today):
        old = _create_version(client, hod, auth_headers, valid_from=today - timedelta(days=60))

        new = _create_version(client, hod, auth_headers, valid_from=today - timedelta(days=1))

        assert new["deactivatedVersionIds"] == []
        assert new["trimmedVersionIds"] == [old["version"]["id"]]
        db.expire_all()
        previous = db.get(TimetableVersion, old["version"]["id"])
        assert previous.is_active is True
        assert previous.valid_to == today - timedelta(days=2)

    def test_version_inside_new_window_is_deactivated(self, client, db, hod, auth_headers, today):
        inner = _create_version(
            client, hod, auth_headers,
            valid_from=today + timedelta(days=10), valid_to=today + timedelta(days=20),
        )

        new = _create_version(client, hod, auth_headers, valid_from=today)

        assert new["deactivatedVersionIds"] == [inner["version"]["id"]]
        assert new["trimmedVersionIds"] == []
        db.expire_all()
        active = db.query(TimetableVersion).filter(TimetableVersion.is_active == True).all()
        assert [v.id for v in active] == [new["version"]["id"]]

    def test_later_version_starts_after_new_window(self, client, db, hod, auth_headers, today):
        later = _create_version(client, hod, auth_headers, valid_from=today + timedelta(days=10))

        _create_version(client, hod, auth_headers, valid_from=today, valid_to=today + timedelta(days=30))

        db.expire_all()
        assert db.get(TimetableVersion, later["version"]["id"]).valid_from == today + timedelta(days=31)

    def test_update_applies_same_rule(self, client, db, hod, auth_headers, today):
        running = _create_version(client, hod, auth_headers, valid_from=today - timedelta(days=30))
        draft = _create_version(
            client, hod, auth_headers, valid_from=today - timedelta(days=90), valid_to=today - timedelta(days=31),
        )

        response = client.put(
            f"/timetable/hod/version/{draft['version']['id']}",
            json={"validFrom": (today + timedelta(days=5)).isoformat(), "validTo": None},
            headers=auth_headers(hod),
        )

        assert response.json()["data"]["trimmedVersionIds"] == [running["version"]["id"]]
        db.expire_all()
        assert db.get(TimetableVersion, running["version"]["id"]).valid_to == today + timedelta(days=4)

    def test_other_semester_untouched(self, client, hod, auth_headers, today):
        _create_version(client, hod, auth_headers, valid_from=today, semester=1)

        other = _create_version(client, hod, auth_headers, valid_from=today, semester=3)

        assert other["deactivatedVersionIds"] == []

    def test_disjoint_windows_both_stay_active(self, client, hod, auth_headers, today):
        _create_version(
            client, hod, auth_headers,
            valid_from=today - timedelta(days=120), valid_to=today - timedelta(days=61),
        )

        new = _create_version(client, hod, auth_headers, valid_from=today - timedelta(days=60))

        assert new["deactivatedVersionIds"] == []

    def test_valid_to_before_valid_from_rejected(self, client, hod, auth_headers, today):
        response = client.post(
            "/timetable/hod/version",
            json=_version_body(valid_from=today, valid_to=today - timedelta(days=1)),
            headers=auth_headers(hod),
        )
        assert response.status_code == 400

    def test_list_versions_with_slot_counts(self, client, hod, faculty, batch, subject, auth_headers, today):
        version = _create_version(client, hod, auth_headers, valid_from=today)["version"]
        client.post(
            f"/timetable/hod/version/{version['id']}/slots",
            json={"slots": [_slot(1, faculty, batch, subject), _slot(2, faculty, batch, subject)]},
            headers=auth_headers(hod),
        )

        data = client.get("/timetable/hod/versions", headers=auth_headers(hod)).json()["data"]

        assert data[0]["slotCount"] == 2

    def test_faculty_cannot_create_version(self, client, faculty, auth_headers, today):
        response = client.post("/timetable/hod/version", json=_version_body(today), headers=auth_headers(faculty))
        assert response.status_code == 403


class TestSlots:
    def test_slot_batch_with_unknown_faculty_writes_nothing(self, client, db, hod, faculty, batch, subject,
                                                             auth_headers, today):
        version = _create_version(client, hod, auth_headers, valid_from=today)["version"]
        bad = _slot(2, faculty, batch, subject)
        bad["facultyId"] = 999

        response = client.post(
            f"/timetable/hod/version/{version['id']}/slots",
            json={"slots": [_slot(1, faculty, batch, subject), bad]},
            headers=auth_headers(hod),
        )

        assert response.status_code == 404
        assert db.query(TimetableSlot).count() == 0

    def test_slot_end_before_start_rejected(self, client, hod, faculty, batch, subject, auth_headers, today):
        version = _create_version(client, hod, auth_headers, valid_from=today)["version"]

        response = client.post(
            f"/timetable/hod/version/{version['id']}/slots",
            json={"slots": [_slot(1, faculty, batch, subject, start="10:00", end="09:00")]},
            headers=auth_headers(hod),
        )
        assert response.status_code == 400

    def test_deleted_slot_hidden(self, client, hod, faculty, batch, subject, auth_headers, today):
        version = _create_version(client, hod, auth_headers, valid_from=today)["version"]
        created = client.post(
            f"/timetable/hod/version/{version['id']}/slots",
            json={"slots": [_slot(1, faculty, batch, subject)]},
            headers=auth_headers(hod),
        ).json()["data"]

        client.delete(f"/timetable/hod/slot/{created[0]['id']}", headers=auth_headers(hod))
        data = client.get(f"/timetable/hod/slots?versionId={version['id']}", headers=auth_headers(hod)).json()["data"]

        assert data == []

    def test_update_slot_room(self, client, hod, faculty, batch, subject, auth_headers, today):
        version = _create_version(client, hod, auth_headers, valid_from=today)["version"]
        created = client.post(
            f"/timetable/hod/version/{version['id']}/slots",
            json={"slots": [_slot(1, faculty, batch, subject)]},
            headers=auth_headers(hod),
        ).json()["data"]

        response = client.put(
            f"/timetable/hod/slot/{created[0]['id']}", json={"roomNumber": "LAB-2"}, headers=auth_headers(hod)
        )

        assert response.json()["data"]["roomNumber"] == "LAB-2"


class TestViews:
    def _week(self, client, hod, faculty, batch, subject, auth_headers, today):
        version = _create_version(client, hod, auth_headers, valid_from=today - timedelta(days=7))["version"]
        client.post(
            f"/timetable/hod/version/{version['id']}/slots",
            json={"slots": [_slot(day, faculty, batch, subject) for day in range(1, 8)]},
            headers=auth_headers(hod),
        )
        return version

    def test_student_today_uses_iso_weekday(self, client, hod, faculty, batch, subject, student,
                                            auth_headers, today):
        self._week(client, hod, faculty, batch, subject, auth_headers, today)

        data = client.get("/timetable/student/today", headers=auth_headers(student)).json()["data"]

        assert data["dayOfWeek"] == today.isoweekday()
        assert [s["dayOfWeek"] for s in data["slots"]] == [today.isoweekday()]

    def test_student_week_grouped_by_day(self, client, hod, faculty, batch, subject, student, auth_headers, today):
        self._week(client, hod, faculty, batch, subject, auth_headers, today)

        data = client.get("/timetable/student/my-timetable", headers=auth_headers(student)).json()["data"]

        assert sorted(data["timetable"]) == [str(day) for day in range(1, 8)]
        assert all(len(slots) == 1 for slots in data["timetable"].values())

    def test_future_version_not_current(self, client, hod, faculty, batch, subject, student, auth_headers, today):
        version = _create_version(client, hod, auth_headers, valid_from=today + timedelta(days=10))["version"]
        client.post(
            f"/timetable/hod/version/{version['id']}/slots",
            json={"slots": [_slot(today.isoweekday(), faculty, batch, subject)]},
            headers=auth_headers(hod),
        )

        data = client.get("/timetable/student/today", headers=auth_headers(student)).json()["data"]

        assert data["version"] is None
        assert data["slots"] == []

    def test_future_version_keeps_today_running(self, client, hod, faculty, batch, subject, student,
                                                auth_headers, today):
        running = _create_version(client, hod, auth_headers, valid_from=today - timedelta(days=30))["version"]
        client.post(
            f"/timetable/hod/version/{running['id']}/slots",
            json={"slots": [_slot(today.isoweekday(), faculty, batch, subject)]},
            headers=auth_headers(hod),
        )

        _create_version(client, hod, auth_headers, valid_from=today + timedelta(days=30), name="Next term")
        data = client.get("/timetable/student/today", headers=auth_headers(student)).json()["data"]

        assert data["version"]["id"] == running["id"]
        assert len(data["slots"]) == 1

    def test_student_without_batch(self, client, create_student, auth_headers):
        loner = create_student(batch=None)

        response = client.get("/timetable/student/my-timetable", headers=auth_headers(loner))
        assert response.status_code == 404

    def test_faculty_today(self, client, hod, faculty, batch, subject, auth_headers, today):
        self._week(client, hod, faculty, batch, subject, auth_headers, today)

        data = client.get("/timetable/faculty/today", headers=auth_headers(faculty)).json()["data"]

        assert data["dayOfWeek"] == today.isoweekday()
        assert len(data["slots"]) == 1
        assert data["slots"][0]["faculty"]["id"] == faculty.id

    def test_hod_batch_timetable(self, client, hod, faculty, batch, subject, auth_headers, today):
        version = self._week(client, hod, faculty, batch, subject, auth_headers, today)

        data = client.get(f"/timetable/hod/batch/{batch.id}/timetable", headers=auth_headers(hod)).json()["data"]

        assert data["version"]["id"] == version["id"]
        assert sum(len(slots) for slots in data["timetable"].values()) == 7
