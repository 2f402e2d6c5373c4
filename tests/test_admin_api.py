from datetime import date

from wellness.models.client_habit import ClientHabit
from wellness.models.habit import Habit, ProgrammeHabit
from wellness.models.enrolment import ProgrammeEnrolment
from tests.conftest import make_client, make_programme


def _habit_body(**overrides):
    body = {"title": "Meditate", "frequency_per_week": {"per_week": "Every day", "per_day": 1}}
    body.update(overrides)
    return body


def test_create_habit(test_client, admin_headers):
    response = test_client.post("/admin/habits", headers=admin_headers, json=_habit_body())
    assert response.status_code == 201
    habit = response.json()
    assert habit["title"] == "Meditate"
    assert habit["frequency_per_week"] == {"per_week": 7, "per_day": 1}
    assert habit["current"] is True


def test_create_habit_rejects_bad_frequency(test_client, admin_headers):
    response = test_client.post(
        "/admin/habits",
        headers=admin_headers,
        json=_habit_body(frequency_per_week={"per_week": "sometimes"}),
    )
    assert response.status_code == 422


def test_admin_routes_reject_clients_and_trainers(test_client, client_headers, trainer_headers):
    assert test_client.get("/admin/habits", headers=client_headers).status_code == 403
    assert test_client.get("/admin/habits", headers=trainer_headers).status_code == 403


def test_update_habit(test_client, admin_headers):
    created = test_client.post("/admin/habits", headers=admin_headers, json=_habit_body()).json()
    response = test_client.put(
        f"/admin/habits/{created['id']}",
        headers=admin_headers,
        json=_habit_body(title="Meditate twice", frequency_per_week={"per_week": "5"}, frequency_per_day=2),
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Meditate twice"
    assert response.json()["frequency_per_week"]["per_week"] == 5
    assert response.json()["frequency_per_day"] == 2


def test_delete_unassigned_habit(test_client, db, admin_headers):
    created = test_client.post("/admin/habits", headers=admin_headers, json=_habit_body()).json()
    response = test_client.delete(f"/admin/habits/{created['id']}", headers=admin_headers)
    assert response.status_code == 204
    assert db.query(Habit).count() == 0


def test_delete_assigned_habit_retires_it(test_client, db, admin_headers, wednesday_habit):
    response = test_client.delete(f"/admin/habits/{wednesday_habit.habit_id}", headers=admin_headers)
    assert response.status_code == 204

    db.expire_all()
    assert db.get(Habit, wednesday_habit.habit_id).current is False
    assert db.get(ProgrammeHabit, wednesday_habit.id).current is False


def test_assign_habit_to_programme(test_client, admin_headers, january_programme):
    habit = test_client.post("/admin/habits", headers=admin_headers, json=_habit_body()).json()
    response = test_client.post("/admin/programme-habits", headers=admin_headers, json={
        "programme_id": str(january_programme.id),
        "habit_id": habit["id"],
        "mon_frequency": 1,
        "fri_frequency": 1,
    })
    assert response.status_code == 201
    programme_habit = response.json()
    assert programme_habit["habit_title"] == "Meditate"
    # Inherited from the habit when not given
    assert programme_habit["frequency_per_week"] == {"per_week": 7, "per_day": 1}
    assert programme_habit["mon_frequency"] == 1
    assert programme_habit["tue_frequency"] == 0


def test_assign_rejects_negative_frequency(test_client, admin_headers, january_programme, wednesday_habit):
    response = test_client.post("/admin/programme-habits", headers=admin_headers, json={
        "programme_id": str(january_programme.id),
        "habit_id": str(wednesday_habit.habit_id),
        "mon_frequency": -1,
    })
    assert response.status_code == 422


def test_update_programme_habit_clears_override(test_client, db, admin_headers, wednesday_habit):
    wednesday_habit.frequency_per_day = 4
    db.commit()

    response = test_client.put(
        f"/admin/programme-habits/{wednesday_habit.id}",
        headers=admin_headers,
        json={"frequency_per_day": None, "thu_frequency": 1},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["frequency_per_day"] is None
    assert body["thu_frequency"] == 1
    assert body["wed_frequency"] == 2


def test_delete_programme_habit_with_completions_disables_it(
    test_client, db, admin_headers, client_profile, january_programme, wednesday_habit
):
    db.add(ClientHabit(
        programme_habit_id=wednesday_habit.id,
        client_id=client_profile.id,
        habit_date=date(2025, 1, 8),
        times_done=1,
    ))
    db.commit()

    response = test_client.delete(f"/admin/programme-habits/{wednesday_habit.id}", headers=admin_headers)
    assert response.status_code == 204

    listed = test_client.get(
        "/admin/programme-habits",
        headers=admin_headers,
        params={"programme_id": str(january_programme.id)},
    )
    assert listed.json() == []

    with_disabled = test_client.get(
        "/admin/programme-habits",
        headers=admin_headers,
        params={"programme_id": str(january_programme.id), "include_disabled": True},
    )
    assert [ph["current"] for ph in with_disabled.json()] == [False]
    assert db.query(ClientHabit).count() == 1


def test_delete_programme_habit_without_completions(test_client, db, admin_headers, wednesday_habit):
    response = test_client.delete(f"/admin/programme-habits/{wednesday_habit.id}", headers=admin_headers)
    assert response.status_code == 204
    assert db.query(ProgrammeHabit).count() == 0


def test_enrol_client(test_client, db, admin_headers):
    programme = make_programme(db, "SPRING_RESET", date(2025, 3, 1), date(2025, 3, 31), mon_frequency=1)
    client = make_client(db, "alex@example.com", "Alex", "Smith")

    response = test_client.post("/admin/programme-enrolments", headers=admin_headers, json={
        "programme_id": str(programme.id),
        "client_id": str(client.id),
    })
    assert response.status_code == 201
    body = response.json()
    assert body["programme"]["human_readable_id"] == "SPRING_RESET"
    assert body["client"]["first_name"] == "Alex"

    listed = test_client.get(
        "/admin/programme-enrolments",
        headers=admin_headers,
        params={"programme_id": str(programme.id)},
    )
    assert len(listed.json()) == 1


def test_duplicate_enrolment_conflicts(test_client, admin_headers, client_profile, january_programme):
    response = test_client.post("/admin/programme-enrolments", headers=admin_headers, json={
        "programme_id": str(january_programme.id),
        "client_id": str(client_profile.id),
    })
    assert response.status_code == 409


def test_enrolment_at_capacity_conflicts(test_client, db, admin_headers, client_profile):
    programme = make_programme(db, "SMALL_GROUP", date(2025, 3, 1), max_clients=1, mon_frequency=1)
    db.add(ProgrammeEnrolment(programme_id=programme.id, client_id=client_profile.id))
    db.commit()
    newcomer = make_client(db, "late@example.com", "Late", "Comer")

    response = test_client.post("/admin/programme-enrolments", headers=admin_headers, json={
        "programme_id": str(programme.id),
        "client_id": str(newcomer.id),
    })
    assert response.status_code == 409
    assert "capacity" in response.json()["detail"]


def test_enrolment_for_unknown_client(test_client, admin_headers, january_programme):
    response = test_client.post("/admin/programme-enrolments", headers=admin_headers, json={
        "programme_id": str(january_programme.id),
        "client_id": "00000000-0000-0000-0000-000000000000",
    })
    assert response.status_code == 404


def test_remove_enrolment(test_client, db, admin_headers, january_programme):
    enrolment = db.query(ProgrammeEnrolment).filter(ProgrammeEnrolment.programme_id == january_programme.id).one()
    response = test_client.delete(f"/admin/programme-enrolments/{enrolment.id}", headers=admin_headers)
    assert response.status_code == 204
    assert db.query(ProgrammeEnrolment).count() == 0


def test_zero_capacity_means_unlimited(test_client, db, admin_headers, client_profile):
    programme = make_programme(db, "OPEN_GROUP", date(2025, 3, 1), max_clients=0, mon_frequency=1)
    db.add(ProgrammeEnrolment(programme_id=programme.id, client_id=client_profile.id))
    db.commit()
    newcomer = make_client(db, "late@example.com", "Late", "Comer")

    response = test_client.post("/admin/programme-enrolments", headers=admin_headers, json={
        "programme_id": str(programme.id),
        "client_id": str(newcomer.id),
    })
    assert response.status_code == 201


def test_changing_targets_updates_stored_completed_flags(
    test_client, db, admin_headers, client_headers, client_profile, wednesday_habit
):
    db.add(ClientHabit(
        programme_habit_id=wednesday_habit.id,
        client_id=client_profile.id,
        habit_date=date(2025, 1, 8),
        times_done=1,
        completed=False,
    ))
    db.commit()

    response = test_client.put(
        f"/admin/programme-habits/{wednesday_habit.id}",
        headers=admin_headers,
        json={"wed_frequency": 1},
    )
    assert response.status_code == 200

    listed = test_client.get(
        "/habits/completions",
        headers=client_headers,
        params={"start_date": "2025-01-08", "end_date": "2025-01-08"},
    )
    assert [(r["times_done"], r["completed"]) for r in listed.json()] == [(1, True)]

    test_client.put(
        f"/admin/programme-habits/{wednesday_habit.id}",
        headers=admin_headers,
        json={"frequency_per_day": 3},
    )
    db.expire_all()
    assert db.query(ClientHabit).one().completed is False
