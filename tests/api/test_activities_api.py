from datetime import date
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from activity_sessions import crud
from activity_sessions.constants.status import ParticipantStatus
from activity_sessions.core.exceptions import ActivityNotFoundError
from activity_sessions.models.activity_session import ActivitySession
from activity_sessions.models.notification import OutboxEvent
from tests.utils.activity import add_participant, at_noon, create_random_activity, create_session

ACTIVITY_DATA = {
    "name": "Saturday volleyball",
    "sport": "volleyball",
    "min_players": 4,
    "max_players": 12,
    "recurring_days": ["saturday"],
    "recurring_type": "weekly",
    "start_time": "10:00",
    "end_time": "12:00",
}


def test_create_activity_api(client: TestClient, db_session: Session, current_user, dispatch_task):
    """
    Creating an activity subscribes the creator and generates the first
    sessions straight away.
    """
    # ARRANGE
    current_user.sub = "organizer"

    # ACT
    response = client.post("/api/v1/activities", json=ACTIVITY_DATA)

    # ASSERT
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Saturday volleyball"
    assert data["created_by"] == "organizer"
    assert data["is_subscribed"] is True
    assert len(data["code"]) == 8

    sessions = db_session.query(ActivitySession).filter(ActivitySession.activity_id == data["id"]).all()
    # Two weeks ahead, both ends inclusive
    assert 2 <= len(sessions) <= 3
    assert all(s.date.strftime("%A") == "Saturday" and s.date.hour == 12 for s in sessions)

    event = db_session.query(OutboxEvent).one()
    assert event.event_type == "new_sessions_available"
    assert event.payload["user_ids"] == ["organizer"]
    dispatch_task.assert_called_once()


def test_create_activity_with_inverted_bounds(client: TestClient):
    response = client.post(
        "/api/v1/activities", json={**ACTIVITY_DATA, "min_players": 10, "max_players": 6}
    )

    assert response.status_code == 400


def test_create_activity_schema_validation(client: TestClient):
    response = client.post(
        "/api/v1/activities", json={**ACTIVITY_DATA, "recurring_days": ["someday"]}
    )

    assert response.status_code == 422


def test_join_by_code_and_unsubscribe(client: TestClient, db_session: Session, current_user):
    activity = create_random_activity(db_session)
    session_obj = create_session(db_session, activity, at_noon(date(2030, 1, 8)), max_players=2)
    current_user.sub = "newcomer"

    response = client.post(
        "/api/v1/activities/join-by-code",
        json={"code": f"{activity.code[:4]} {activity.code[4:]}".lower()},
    )
    assert response.status_code == 200
    assert response.json()["id"] == activity.id
    assert response.json()["is_subscribed"] is True

    client.post(f"/api/v1/sessions/{session_obj.id}/join")
    response = client.delete(f"/api/v1/activities/{activity.id}/subscribe")

    assert response.status_code == 200
    assert response.json() == {"message": "Unsubscribed from activity", "removed_participations": 1}
    assert crud.activity_participant.get_by_session_and_user(
        db_session, session_id=session_obj.id, user_id="newcomer"
    ) is None


def test_join_by_unknown_code(client: TestClient):
    response = client.post("/api/v1/activities/join-by-code", json={"code": "ZZZZ0000"})

    assert response.status_code == 404


def test_subscribe_twice_returns_same_subscription(client: TestClient, db_session: Session):
    activity = create_random_activity(db_session)

    first = client.post(f"/api/v1/activities/{activity.id}/subscribe")
    second = client.post(f"/api/v1/activities/{activity.id}/subscribe")

    assert first.status_code == 201
    assert first.json()["id"] == second.json()["id"]


def test_list_activities_api(client: TestClient, db_session: Session):
    create_random_activity(db_session, name="Football")
    create_random_activity(db_session, name="Tennis", recurring_type="monthly")

    response = client.get("/api/v1/activities", params={"recurring_type": "monthly"})

    assert response.status_code == 200
    data = response.json()
    assert [a["name"] for a in data["activities"]] == ["Tennis"]
    assert data["pagination"] == {"page": 1, "limit": 10, "total_count": 1, "total_pages": 1}


def test_my_created_and_participations(client: TestClient, db_session: Session, current_user):
    current_user.sub = "owner_1"
    activity = create_random_activity(db_session, owner_id="owner_1")
    create_random_activity(db_session, owner_id="someone_else")
    session_obj = create_session(db_session, activity, at_noon(date(2030, 1, 8)))
    add_participant(db_session, session_obj, "owner_1", ParticipantStatus.CONFIRMED)

    created = client.get("/api/v1/activities/my-created").json()
    participations = client.get("/api/v1/activities/my-participations").json()

    assert [a["id"] for a in created] == [activity.id]
    assert [s["id"] for s in participations["upcoming"]] == [session_obj.id]
    assert participations["past"] == []


def test_update_and_delete_are_owner_only(client: TestClient, db_session: Session, current_user):
    activity = create_random_activity(db_session, owner_id="owner_1")
    url = f"/api/v1/activities/{activity.id}"

    current_user.sub = "intruder"
    assert client.put(url, json={"name": "Hijacked"}).status_code == 403
    assert client.delete(url).status_code == 403

    current_user.sub = "owner_1"
    response = client.put(url, json={"name": "Renamed"})
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"

    assert client.delete(url).status_code == 204
    assert client.get(url).status_code == 404


def test_update_with_null_fields(client: TestClient, db_session: Session, current_user):
    activity = create_random_activity(db_session, owner_id="owner_1")
    current_user.sub = "owner_1"
    name, start_time = activity.name, activity.start_time

    response = client.put(
        f"/api/v1/activities/{activity.id}", json={"name": None, "start_time": None}
    )

    assert response.status_code == 200
    assert response.json()["name"] == name
    assert response.json()["start_time"] == start_time


def test_generate_sessions_endpoint(client: TestClient, db_session: Session, current_user):
    activity = create_random_activity(db_session, owner_id="owner_1", recurring_days=["tuesday"])
    url = f"/api/v1/activities/{activity.id}/generate-sessions"
    body = {"from_date": "2030-01-07", "weeks_ahead": 2}

    current_user.sub = "owner_1"
    response = client.post(url, json=body)
    assert response.status_code == 200
    assert [s["date"] for s in response.json()] == ["2030-01-08T12:00:00", "2030-01-15T12:00:00"]

    # Repeating the call creates nothing new
    assert client.post(url, json=body).json() == []

    current_user.sub = "intruder"
    assert client.post(url, json=body).status_code == 403


def test_get_activity_not_found(test_client: TestClient):
    with patch(
        "activity_sessions.services.activity_service.get_activity",
        side_effect=ActivityNotFoundError("act_missing"),
    ):
        response = test_client.get("/api/v1/activities/act_missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Activity act_missing not found"
