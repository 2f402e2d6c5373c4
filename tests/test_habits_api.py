from datetime import date, timedelta
import uuid

from wellness.models.client_habit import ClientHabit
from tests.conftest import make_client, auth_headers
from wellness.models.user import User


def test_calendar_requires_token(test_client):
    response = test_client.get("/habits/days", params={"start_date": "2025-01-01", "end_date": "2025-01-31"})
    assert response.status_code == 401


def test_start_after_end_is_invalid_input(test_client, client_headers):
    response = test_client.get(
        "/habits/days",
        headers=client_headers,
        params={"start_date": "2025-01-10", "end_date": "2025-01-09"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


def test_calendar_look_ahead_is_limited(test_client, client_headers):
    start = date.today() + timedelta(days=30)
    response = test_client.get(
        "/habits/days",
        headers=client_headers,
        params={"start_date": start.isoformat(), "end_date": (start + timedelta(days=6)).isoformat()},
    )
    assert response.status_code == 400


def test_month_of_day_data(test_client, client_headers, january_programme):
    response = test_client.get(
        "/habits/days",
        headers=client_headers,
        params={"start_date": "2025-01-01", "end_date": "2025-01-31"},
    )
    assert response.status_code == 200
    days = response.json()
    assert len(days) == 31
    wednesday = next(d for d in days if d["date"] == "2025-01-08")
    assert wednesday["scheduled_count"] == 1
    assert wednesday["completed_count"] == 0
    assert wednesday["color"] == "red"


def test_overview(test_client, client_headers, january_programme):
    response = test_client.get(
        "/habits/overview",
        headers=client_headers,
        params={"start_date": "2025-01-06", "end_date": "2025-01-12"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["query_parameters"]["start_date"] == "2025-01-06"
    assert body["query_parameters"]["duration"] == 6
    [programme] = body["programmes"]
    assert programme["human_readable_id"] == "JAN_2025"
    assert programme["habits"][0]["wed_frequency"] == 2
    assert programme["habits"][0]["mon_frequency"] == 0
    assert len(body["habit_day_data"]) == 7


def test_daily_habits(test_client, client_headers, january_programme):
    response = test_client.get("/habits/daily", headers=client_headers, params={"date": "2025-01-08"})
    assert response.status_code == 200
    [habit] = response.json()
    assert habit["title"] == "Stretch"
    assert habit["times_done"] == 0
    assert habit["required_per_day"] == 2
    assert habit["completed"] is False


def test_daily_habits_outside_programme(test_client, client_headers, january_programme):
    response = test_client.get("/habits/daily", headers=client_headers, params={"date": "2025-02-05"})
    assert response.status_code == 200
    assert response.json() == []


def test_record_completion(test_client, db, client_headers, current_programme):
    programme_habit = current_programme.programme_habits[0]
    body = {"programme_habit_id": str(programme_habit.id), "habit_date": date.today().isoformat(), "delta": 1}

    response = test_client.post("/habits/completions", headers=client_headers, json=body)
    assert response.status_code == 200
    result = response.json()
    assert result["times_done"] == 1
    assert result["required_per_day"] == 1
    assert result["completed"] is True
    assert db.query(ClientHabit).count() == 1

    listed = test_client.get(
        "/habits/completions",
        headers=client_headers,
        params={"start_date": date.today().isoformat(), "end_date": date.today().isoformat()},
    )
    assert listed.status_code == 200
    assert listed.json()[0]["id"] == result["client_habit_id"]


def test_completion_needs_exactly_one_change(test_client, client_headers, current_programme):
    programme_habit = current_programme.programme_habits[0]
    response = test_client.post("/habits/completions", headers=client_headers, json={
        "programme_habit_id": str(programme_habit.id),
        "habit_date": date.today().isoformat(),
        "delta": 1,
        "times_done": 4,
    })
    assert response.status_code == 422


def test_completion_in_the_future(test_client, client_headers, current_programme):
    programme_habit = current_programme.programme_habits[0]
    response = test_client.post("/habits/completions", headers=client_headers, json={
        "programme_habit_id": str(programme_habit.id),
        "habit_date": (date.today() + timedelta(days=1)).isoformat(),
        "completed": True,
    })
    assert response.status_code == 422
    assert response.json()["code"] == "OUT_OF_WINDOW"


def test_completion_for_unknown_habit(test_client, client_headers, current_programme):
    response = test_client.post("/habits/completions", headers=client_headers, json={
        "programme_habit_id": str(uuid.uuid4()),
        "habit_date": date.today().isoformat(),
        "delta": 1,
    })
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_completion_when_not_enrolled(test_client, db, current_programme):
    stranger = make_client(db, "stranger@example.com", "Sam", "Stranger")
    headers = auth_headers(db.get(User, stranger.user_id))
    programme_habit = current_programme.programme_habits[0]

    response = test_client.post("/habits/completions", headers=headers, json={
        "programme_habit_id": str(programme_habit.id),
        "habit_date": date.today().isoformat(),
        "delta": 1,
    })
    assert response.status_code == 403
    assert response.json()["code"] == "NOT_ENROLLED"


def test_user_without_client_profile(test_client, admin_headers):
    response = test_client.get("/habits/daily", headers=admin_headers, params={"date": "2025-01-08"})
    assert response.status_code == 403


def test_trainer_reads_client_calendar(test_client, trainer_headers, client_profile, january_programme):
    response = test_client.get(
        f"/habits/clients/{client_profile.id}/daily",
        headers=trainer_headers,
        params={"date": "2025-01-08"},
    )
    assert response.status_code == 200
    assert len(response.json()) == 1


def test_client_cannot_read_other_calendars(test_client, client_headers, client_profile):
    response = test_client.get(
        f"/habits/clients/{client_profile.id}/days",
        headers=client_headers,
        params={"start_date": "2025-01-01", "end_date": "2025-01-31"},
    )
    assert response.status_code == 403


def test_staff_view_of_unknown_client(test_client, trainer_headers):
    response = test_client.get(
        f"/habits/clients/{uuid.uuid4()}/days",
        headers=trainer_headers,
        params={"start_date": "2025-01-01", "end_date": "2025-01-31"},
    )
    assert response.status_code == 404


def test_daily_look_ahead_is_limited(test_client, client_headers, current_programme):
    far_day = date.today() + timedelta(days=30)
    response = test_client.get("/habits/daily", headers=client_headers, params={"date": far_day.isoformat()})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


def test_staff_views_have_the_same_look_ahead(test_client, trainer_headers, client_profile, current_programme):
    start = date.today() + timedelta(days=30)

    days = test_client.get(
        f"/habits/clients/{client_profile.id}/days",
        headers=trainer_headers,
        params={"start_date": start.isoformat(), "end_date": (start + timedelta(days=6)).isoformat()},
    )
    assert days.status_code == 400

    daily = test_client.get(
        f"/habits/clients/{client_profile.id}/daily",
        headers=trainer_headers,
        params={"date": start.isoformat()},
    )
    assert daily.status_code == 400
    assert daily.json()["code"] == "INVALID_INPUT"


def test_staff_view_within_look_ahead(test_client, trainer_headers, client_profile, current_programme):
    tomorrow = date.today() + timedelta(days=1)
    response = test_client.get(
        f"/habits/clients/{client_profile.id}/daily",
        headers=trainer_headers,
        params={"date": tomorrow.isoformat()},
    )
    assert response.status_code == 200
    assert len(response.json()) == 1
