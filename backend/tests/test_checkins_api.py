"""Tests for mood check-ins."""
import pytest

from conftest import auth_header


@pytest.fixture
def headers(student):
    return auth_header(student)


class TestCheckIns:
    def test_create_and_list(self, client, headers):
        r = client.post("/checkins", json={"mood": 4, "note": "good study day"}, headers=headers)
        assert r.status_code == 201
        # offline classifier falls back to neutral
        assert r.json()["sentiment"] == "neu"

        client.post("/checkins", json={"mood": 2}, headers=headers)
        listed = client.get("/checkins/me", headers=headers).json()
        assert [c["mood"] for c in listed] == [2, 4]
        assert listed[0]["sentiment"] is None

    def test_stats(self, client, headers):
        for mood in (4, 5, 3):
            client.post("/checkins", json={"mood": mood}, headers=headers)
        stats = client.get("/checkins/stats", headers=headers).json()
        assert stats == {
            "total_check_ins": 3,
            "recent_check_ins": 3,
            "average_mood": 4.0,
            "current_streak": 1,
        }

    def test_stats_when_empty(self, client, headers):
        stats = client.get("/checkins/stats", headers=headers).json()
        assert stats["total_check_ins"] == 0
        assert stats["average_mood"] == 0.0
        assert stats["current_streak"] == 0

    @pytest.mark.parametrize("body", [{"mood": 0}, {"mood": 6}, {"mood": 3, "note": "x" * 1001}, {}])
    def test_validation(self, client, headers, body):
        assert client.post("/checkins", json=body, headers=headers).status_code == 400
