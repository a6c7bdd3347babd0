"""Tests for the overreliance heuristic."""
from datetime import datetime, timedelta, timezone

import pytest

from talkitout.agents.overreliance import detect_overreliance
from talkitout.constants import MessageRole, Sentiment, UserRole
from talkitout.models import Message, User

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def user(db):
    u = User(role=UserRole.STUDENT, name="Alex", email="alex@school.sg")
    db.add(u)
    db.commit()
    return u


def _add(db, user, n, age, sentiment=Sentiment.NEUTRAL, role=MessageRole.USER):
    for i in range(n):
        db.add(Message(
            user_id=user.id,
            role=role,
            text="msg",
            sentiment=sentiment if role == MessageRole.USER else None,
            created_at=NOW - age - timedelta(minutes=i),
        ))
    db.commit()


class TestDailyVolume:
    def test_31_messages_in_a_day(self, db, user):
        _add(db, user, 31, timedelta(hours=1))
        assert detect_overreliance(db, user.id, now=NOW) is True

    def test_30_messages_in_a_day(self, db, user):
        _add(db, user, 30, timedelta(hours=1))
        assert detect_overreliance(db, user.id, now=NOW) is False

    def test_assistant_messages_do_not_count(self, db, user):
        _add(db, user, 20, timedelta(hours=1))
        _add(db, user, 20, timedelta(hours=1), role=MessageRole.ASSISTANT)
        assert detect_overreliance(db, user.id, now=NOW) is False


class TestWeeklyNegativity:
    def test_8_of_11_negative(self, db, user):
        _add(db, user, 8, timedelta(days=2), Sentiment.NEGATIVE)
        _add(db, user, 3, timedelta(days=3), Sentiment.NEUTRAL)
        assert detect_overreliance(db, user.id, now=NOW) is True

    def test_7_of_11_negative(self, db, user):
        _add(db, user, 7, timedelta(days=2), Sentiment.NEGATIVE)
        _add(db, user, 4, timedelta(days=3), Sentiment.POSITIVE)
        assert detect_overreliance(db, user.id, now=NOW) is False

    def test_count_gate(self, db, user):
        _add(db, user, 9, timedelta(days=2), Sentiment.NEGATIVE)
        assert detect_overreliance(db, user.id, now=NOW) is False

    def test_older_messages_ignored(self, db, user):
        _add(db, user, 11, timedelta(days=8), Sentiment.NEGATIVE)
        assert detect_overreliance(db, user.id, now=NOW) is False
