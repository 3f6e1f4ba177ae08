from datetime import datetime, timedelta, timezone

from app.domain.models.otp_verification import OtpVerification
from app.domain.models.user import User

from conftest import PASSWORD


def register(client, email="otp@x.com"):
    response = client.post(
        "/api/users/register", json={"name": "Otto", "email": email, "password": PASSWORD}
    )
    return response.json()["user_id"]


def verify(client, user_id, code):
    return client.post("/api/users/verify-otp", json={"user_id": user_id, "code": code})


def test_wrong_code_is_rejected(client, mailer):
    user_id = register(client)
    wrong = "000000" if mailer.last_code("otp@x.com") != "000000" else "111111"

    response = verify(client, user_id, wrong)

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid or expired OTP"


def test_code_must_be_six_digits(client):
    user_id = register(client)
    assert verify(client, user_id, "12345").status_code == 400
    assert verify(client, user_id, "abcdef").status_code == 400


def test_code_cannot_be_used_twice(client, mailer):
    user_id = register(client)
    code = mailer.last_code("otp@x.com")

    assert verify(client, user_id, code).status_code == 200
    assert verify(client, user_id, code).status_code == 400


def test_verification_marks_user_and_code_together(client, mailer, db):
    user_id = register(client)

    verify(client, user_id, mailer.last_code("otp@x.com"))

    assert db.get(User, user_id).is_verified is True
    rows = db.query(OtpVerification).filter_by(user_id=user_id).all()
    assert [row.consumed for row in rows] == [True]


def test_expired_code_is_rejected(client, db):
    user_id = register(client)
    db.add(
        OtpVerification(
            user_id=user_id,
            code="424242",
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
    )
    db.commit()

    assert verify(client, user_id, "424242").status_code == 400
    assert db.get(User, user_id).is_verified is False


def test_code_for_another_user_is_rejected(client, mailer):
    first = register(client, "one@x.com")
    second = register(client, "two@x.com")

    assert verify(client, second, mailer.last_code("one@x.com")).status_code == 400
    assert verify(client, first, mailer.last_code("one@x.com")).status_code == 200


def test_resend_supersedes_previous_code(client, mailer):
    user_id = register(client)
    first_code = mailer.last_code("otp@x.com")

    client.post("/api/users/resend-otp", json={"email": "otp@x.com"})
    second_code = mailer.last_code("otp@x.com")

    if first_code != second_code:
        assert verify(client, user_id, first_code).status_code == 400
    assert verify(client, user_id, second_code).status_code == 200


def test_failed_delivery_stores_no_code(client, mailer, db):
    user_id = register(client)
    mailer.fail = True

    response = client.post("/api/users/resend-otp", json={"email": "otp@x.com"})

    assert response.status_code == 503
    # The first code is still the only usable one
    rows = db.query(OtpVerification).filter_by(user_id=user_id).all()
    assert len(rows) == 1
    assert rows[0].superseded is False
    mailer.fail = False
    assert verify(client, user_id, mailer.last_code("otp@x.com")).status_code == 200
