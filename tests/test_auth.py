"""
Authentication: login per role, student signup, and the bearer-token guard.
"""
from datetime import timedelta

from attendance_app.core.security import create_access_token
from attendance_app.models import User

from .conftest import PASSWORD


def _signup_body(**overrides):
    body = {
        "name": "Anita Rao",
        "email": "anita.rao@college.edu",
        "password": "secret123",
        "rollNumber": "BCA2024001",
        "course": "BCA",
    }
    body.update(overrides)
    return body


class TestLogin:
    def test_hod_login_success(self, client, hod):
        response = client.post("/auth/hod/login", json={"email": hod.email, "password": PASSWORD})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["token"]
        assert body["data"]["tokenType"] == "bearer"
        assert body["data"]["expiresIn"] == 24 * 60 * 60
        assert body["data"]["user"]["type"] == "HOD"
        assert body["data"]["user"]["profile"]["department"] == "Computer Science"

    def test_hod_login_wrong_password(self, client, hod):
        response = client.post("/auth/hod/login", json={"email": hod.email, "password": "wrong-password"})

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "INVALID_CREDENTIALS"

    def test_email_is_case_insensitive(self, client, hod):
        response = client.post("/auth/hod/login", json={"email": hod.email.upper(), "password": PASSWORD})
        assert response.status_code == 200

    def test_login_through_wrong_role_endpoint(self, client, faculty):
        response = client.post("/auth/hod/login", json={"email": faculty.email, "password": PASSWORD})
        assert response.status_code == 401

    def test_faculty_login_returns_profile(self, client, faculty):
        response = client.post("/auth/faculty/login", json={"email": faculty.email, "password": PASSWORD})

        assert response.status_code == 200
        assert response.json()["data"]["user"]["profile"]["isHod"] is False

    def test_unverified_student_cannot_login(self, client, create_student, batch):
        student = create_student(batch=batch, is_verified=False)

        response = client.post("/auth/student/login", json={"email": student.email, "password": PASSWORD})

        assert response.status_code == 403
        assert response.json()["error"] == "ACCOUNT_NOT_VERIFIED"

    def test_verified_student_login_includes_batch(self, client, student, batch):
        response = client.post("/auth/student/login", json={"email": student.email, "password": PASSWORD})

        assert response.status_code == 200
        profile = response.json()["data"]["user"]["profile"]
        assert profile["isVerified"] is True
        assert profile["batch"]["BatchId"] == batch.id
        assert profile["batch"]["BatchName"] == batch.batch_name

    def test_inactive_user_cannot_login(self, client, db, faculty):
        faculty.is_active = False
        db.commit()

        response = client.post("/auth/faculty/login", json={"email": faculty.email, "password": PASSWORD})
        assert response.status_code == 401


class TestSignup:
    def test_signup_creates_unverified_student(self, client, db):
        response = client.post("/auth/student/signup", json=_signup_body())

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "anita.rao@college.edu"
        assert data["profile"]["rollNumber"] == "BCA2024001"
        assert data["profile"]["isVerified"] is False

    def test_signup_normalizes_email(self, client):
        response = client.post("/auth/student/signup", json=_signup_body(email="  Anita.Rao@College.EDU "))

        assert response.status_code == 201
        assert response.json()["data"]["email"] == "anita.rao@college.edu"

    def test_duplicate_email_conflicts_and_creates_nothing(self, client, db, student):
        users_before = db.query(User).count()

        response = client.post("/auth/student/signup", json=_signup_body(email=student.email))

        assert response.status_code == 409
        assert response.json()["error"] == "CONFLICT"
        assert db.query(User).count() == users_before

    def test_duplicate_roll_number_conflicts(self, client, db, student):
        users_before = db.query(User).count()

        response = client.post(
            "/auth/student/signup",
            json=_signup_body(rollNumber=student.student.roll_number),
        )

        assert response.status_code == 409
        assert response.json()["details"]["field"] == "rollNumber"
        assert db.query(User).count() == users_before

    def test_signup_with_unknown_batch(self, client, db):
        response = client.post("/auth/student/signup", json=_signup_body(batchId=999))

        assert response.status_code == 404
        assert db.query(User).count() == 0

    def test_missing_field_names_the_field(self, client):
        body = _signup_body()
        del body["email"]

        response = client.post("/auth/student/signup", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert response.json()["message"].startswith("email:")

    def test_short_password_rejected(self, client):
        response = client.post("/auth/student/signup", json=_signup_body(password="123"))

        assert response.status_code == 400
        assert response.json()["message"].startswith("password:")

    def test_signed_up_student_cannot_login_before_verification(self, client):
        client.post("/auth/student/signup", json=_signup_body())

        response = client.post(
            "/auth/student/login",
            json={"email": "anita.rao@college.edu", "password": "secret123"},
        )
        assert response.status_code == 403


class TestTokenGuard:
    def test_missing_token(self, client):
        response = client.get("/hod/students")

        assert response.status_code == 401
        assert response.json()["error"] == "MISSING_TOKEN"
        assert response.json()["message"] == "Access token required"

    def test_garbage_token(self, client):
        response = client.get("/hod/students", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_TOKEN"

    def test_expired_token(self, client, hod):
        token = create_access_token(
            {"sub": str(hod.id), "id": hod.id, "email": hod.email, "role": "HOD"},
            expires_delta=timedelta(minutes=-1),
        )

        response = client.get("/hod/students", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_role_mismatch_is_forbidden(self, client, student, auth_headers):
        response = client.get("/hod/students", headers=auth_headers(student))

        assert response.status_code == 403
        assert response.json()["error"] == "FORBIDDEN"

    def test_token_of_deactivated_user_rejected(self, client, db, faculty, auth_headers):
        headers = auth_headers(faculty)
        faculty.is_active = False
        db.commit()

        response = client.get("/faculty/attendance/assignments", headers=headers)

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_TOKEN"

    def test_me_returns_profile(self, client, faculty, auth_headers):
        response = client.get("/auth/me", headers=auth_headers(faculty))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == faculty.id
        assert data["type"] == "FACULTY"
        assert data["profile"]["department"] == "Computer Science"
