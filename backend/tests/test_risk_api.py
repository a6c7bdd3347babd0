"""Tests for counselor risk-flag review."""
from datetime import timedelta

import pytest

from talkitout.constants import FlagStatus, MessageRole
from talkitout.models import Audit, Message, RiskFlag, utcnow
from conftest import auth_header


def _flag(session, user, severity=2, tags=("severe-stress",), created_at=None):
    created_at = created_at or utcnow()
    msg = Message(
        user_id=user.id,
        role=MessageRole.USER,
        text="it's all too much",
        risk_tags=list(tags),
        severity=severity,
        created_at=created_at,
    )
    session.add(msg)
    session.commit()
    flag = RiskFlag(
        user_id=user.id,
        message_id=msg.id,
        tags=list(tags),
        severity=severity,
        created_at=created_at,
    )
    session.add(flag)
    session.commit()
    return flag


class TestAccess:
    def test_students_are_forbidden(self, client, student):
        response = client.get("/risk/flags", headers=auth_header(student))
        assert response.status_code == 403
        assert response.json() == {"error": "Insufficient permissions"}

    def test_unknown_flag(self, client, counselor):
        response = client.get("/risk/flags/999", headers=auth_header(counselor))
        assert response.status_code == 404
        assert response.json() == {"error": "Risk flag not found"}


class TestListFlags:
    def test_most_severe_first(self, client, app_db, counselor, student):
        low = _flag(app_db, student, severity=2)
        high = _flag(app_db, student, severity=3, tags=("self-harm",))

        response = client.get("/risk/flags", headers=auth_header(counselor))
        assert [f["id"] for f in response.json()] == [high.id, low.id]

    def test_filters(self, client, app_db, counselor, student, other_student):
        _flag(app_db, student, severity=2)
        mine = _flag(app_db, other_student, severity=3)

        response = client.get(
            "/risk/flags",
            params={"severity": 3, "user_id": other_student.id, "status": "open"},
            headers=auth_header(counselor),
        )
        assert [f["id"] for f in response.json()] == [mine.id]

    def test_detail_includes_nearby_messages(self, client, app_db, counselor, student):
        flag = _flag(app_db, student)
        app_db.add(Message(user_id=student.id, role=MessageRole.USER, text="old news",
                           created_at=flag.created_at - timedelta(hours=3)))
        app_db.commit()

        response = client.get(f"/risk/flags/{flag.id}", headers=auth_header(counselor))
        data = response.json()
        assert data["flag"]["id"] == flag.id
        assert [m["text"] for m in data["context"]] == ["it's all too much"]


class TestUpdateFlag:
    def test_status_lifecycle(self, client, app_db, counselor, student):
        flag = _flag(app_db, student)
        headers = auth_header(counselor)

        r = client.patch(f"/risk/flags/{flag.id}", json={"status": "in_review"}, headers=headers)
        assert r.status_code == 200
        assert r.json()["status"] == "in_review"
        assert r.json()["resolved_at"] is None
        assert r.json()["reviewed_by"] == counselor.id

        r = client.patch(f"/risk/flags/{flag.id}", json={"status": "resolved", "notes": "Met in person."}, headers=headers)
        assert r.json()["status"] == "resolved"
        assert r.json()["resolved_at"] is not None
        assert r.json()["notes"] == "Met in person."

        r = client.patch(f"/risk/flags/{flag.id}", json={"status": "open"}, headers=headers)
        assert r.json()["status"] == "open"
        assert r.json()["resolved_at"] is None

        audits = app_db.query(Audit).filter(Audit.action == "risk_flag_update").order_by(Audit.id).all()
        assert [(a.meta["from"], a.meta["to"]) for a in audits] == [
            ("open", "in_review"),
            ("in_review", "resolved"),
            ("resolved", "open"),
        ]

    def test_severity_is_not_editable(self, client, app_db, counselor, student):
        flag = _flag(app_db, student, severity=2)
        r = client.patch(f"/risk/flags/{flag.id}", json={"severity": 3, "notes": "x"}, headers=auth_header(counselor))
        assert r.json()["severity"] == 2

    def test_invalid_status(self, client, app_db, counselor, student):
        flag = _flag(app_db, student)
        r = client.patch(f"/risk/flags/{flag.id}", json={"status": "closed"}, headers=auth_header(counselor))
        assert r.status_code == 400

    def test_students_cannot_update(self, client, app_db, student):
        flag = _flag(app_db, student)
        r = client.patch(f"/risk/flags/{flag.id}", json={"status": "resolved"}, headers=auth_header(student))
        assert r.status_code == 403
        app_db.expire_all()
        assert app_db.get(RiskFlag, flag.id).status == FlagStatus.OPEN


class TestOverreliance:
    def test_signal(self, client, counselor, student):
        r = client.get(f"/risk/overreliance/{student.id}", headers=auth_header(counselor))
        assert r.json() == {"user_id": student.id, "overreliance": False}

    def test_unknown_user(self, client, counselor):
        assert client.get("/risk/overreliance/999", headers=auth_header(counselor)).status_code == 404
