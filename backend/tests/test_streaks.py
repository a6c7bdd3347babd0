"""Tests for daily streak counting."""
from datetime import date

from talkitout.constants import DEFAULT_POMODORO, StreakType, UserRole
from talkitout.models import User
from talkitout.streaks import bump_streak, get_or_create_profile, pomodoro_preferences, streak_count


def _profile(db):
    user = User(role=UserRole.STUDENT, name="Alex", email="alex@school.sg")
    db.add(user)
    db.commit()
    return get_or_create_profile(db, user.id)


class TestBumpStreak:
    def test_first_day_starts_at_one(self, db):
        profile = _profile(db)
        assert bump_streak(profile, StreakType.CHECKIN, today=date(2026, 3, 1)) == 1

    def test_same_day_is_unchanged(self, db):
        profile = _profile(db)
        bump_streak(profile, StreakType.CHECKIN, today=date(2026, 3, 1))
        assert bump_streak(profile, StreakType.CHECKIN, today=date(2026, 3, 1)) == 1

    def test_consecutive_days_increment(self, db):
        profile = _profile(db)
        for day in (1, 2, 3):
            count = bump_streak(profile, StreakType.CHECKIN, today=date(2026, 3, day))
        assert count == 3
        assert streak_count(profile, StreakType.CHECKIN) == 3

    def test_gap_resets(self, db):
        profile = _profile(db)
        bump_streak(profile, StreakType.CHECKIN, today=date(2026, 3, 1))
        bump_streak(profile, StreakType.CHECKIN, today=date(2026, 3, 2))
        assert bump_streak(profile, StreakType.CHECKIN, today=date(2026, 3, 5)) == 1

    def test_kinds_are_independent(self, db):
        profile = _profile(db)
        bump_streak(profile, StreakType.CHECKIN, today=date(2026, 3, 1))
        assert streak_count(profile, StreakType.FOCUS) == 0


def test_pomodoro_defaults_without_profile():
    assert pomodoro_preferences(None) == DEFAULT_POMODORO
