# tests/services/test_upcoming.py

from datetime import date, datetime

import pytest

from activity_sessions import crud
from activity_sessions.constants.status import ParticipantStatus, SessionStatus
from activity_sessions.core.exceptions import SessionNotFoundError
from activity_sessions.services.upcoming import (
    build_session_view,
    compute_stats,
    find_session_by_id,
    find_user_participations,
    get_upcoming_sessions,
)
from tests.utils.activity import add_participant, at_noon, create_random_activity, create_session

NOW = datetime(2030, 1, 7, 9, 0)


@pytest.fixture
def two_activities(db_session):
    """Football (viewer subscribed) and tennis (not subscribed), two sessions each."""
    football = create_random_activity(db_session, name="Football", subscribers=["viewer"])
    tennis = create_random_activity(db_session, name="Tennis", recurring_days=["wednesday"])
    sessions = {
        "football_1": create_session(db_session, football, at_noon(date(2030, 1, 8))),
        "football_2": create_session(db_session, football, at_noon(date(2030, 1, 15))),
        "tennis_1": create_session(db_session, tennis, at_noon(date(2030, 1, 9))),
        "tennis_2": create_session(db_session, tennis, at_noon(date(2030, 1, 16))),
    }
    return football, tennis, sessions


def test_anonymous_feed_lists_all_future_sessions(db_session, two_activities):
    _, _, sessions = two_activities
    create_session(db_session, two_activities[0], at_noon(date(2030, 1, 1)))

    views = get_upcoming_sessions(db_session, now=NOW)

    assert [v.id for v in views] == [
        sessions["football_1"].id,
        sessions["tennis_1"].id,
        sessions["football_2"].id,
        sessions["tennis_2"].id,
    ]
    assert all(v.user_status.is_participant is False for v in views)


def test_feed_is_gated_by_subscriptions(db_session, two_activities):
    football, _, _ = two_activities

    views = get_upcoming_sessions(db_session, user_id="viewer", now=NOW)

    assert {v.activity_id for v in views} == {football.id}
    assert [v.activity.name for v in views] == ["Football", "Football"]


def test_user_without_subscriptions_sees_nothing(db_session, two_activities):
    assert get_upcoming_sessions(db_session, user_id="newcomer", now=NOW) == []


def test_own_sessions_are_dropped_after_the_limit(db_session, two_activities):
    _, _, sessions = two_activities
    add_participant(db_session, sessions["football_1"], "viewer", ParticipantStatus.CONFIRMED)

    views = get_upcoming_sessions(db_session, user_id="viewer", limit=1, now=NOW)

    # The only fetched row was the viewer's own session
    assert views == []

    views = get_upcoming_sessions(db_session, user_id="viewer", limit=2, now=NOW)
    assert [v.id for v in views] == [sessions["football_2"].id]


def test_completed_sessions_are_not_upcoming(db_session, two_activities):
    _, _, sessions = two_activities
    completed = sessions["football_1"]
    completed.status = SessionStatus.COMPLETED
    db_session.commit()

    views = get_upcoming_sessions(db_session, now=NOW)

    assert completed.id not in {v.id for v in views}


def test_stats_and_join_eligibility(db_session):
    activity = create_random_activity(db_session, max_players=3)
    session_obj = create_session(db_session, activity, at_noon(date(2030, 1, 8)))
    add_participant(db_session, session_obj, "a", ParticipantStatus.CONFIRMED)
    add_participant(db_session, session_obj, "b", ParticipantStatus.CONFIRMED)
    add_participant(db_session, session_obj, "c", ParticipantStatus.INTERESTED)
    db_session.refresh(session_obj)

    stats = compute_stats(session_obj)
    assert (stats.confirmed_count, stats.waiting_count, stats.interested_count) == (2, 0, 1)
    assert stats.available_spots == 1

    outsider = build_session_view(session_obj, "d")
    assert outsider.user_status.can_join is True
    assert outsider.user_status.participant_status is None

    member = build_session_view(session_obj, "c")
    assert member.user_status.is_participant is True
    assert member.user_status.can_join is False
    assert member.user_status.participant_status == ParticipantStatus.INTERESTED


def test_full_or_cancelled_sessions_cannot_be_joined(db_session):
    activity = create_random_activity(db_session, max_players=2)
    session_obj = create_session(db_session, activity, at_noon(date(2030, 1, 8)), max_players=2)
    add_participant(db_session, session_obj, "a", ParticipantStatus.CONFIRMED)
    add_participant(db_session, session_obj, "b", ParticipantStatus.CONFIRMED)
    add_participant(db_session, session_obj, "c", ParticipantStatus.WAITING)
    db_session.refresh(session_obj)

    full = build_session_view(session_obj, "d")
    assert full.stats.available_spots == 0
    assert full.stats.waiting_count == 1
    assert full.user_status.can_join is False

    other = create_session(db_session, activity, at_noon(date(2030, 1, 15)))
    other.is_cancelled = True
    db_session.commit()
    db_session.refresh(other)

    cancelled = build_session_view(other, "d")
    assert cancelled.stats.available_spots == 2
    assert cancelled.user_status.can_join is False


def test_find_session_by_id(db_session):
    activity = create_random_activity(db_session)
    session_obj = create_session(db_session, activity, at_noon(date(2030, 1, 8)))
    add_participant(db_session, session_obj, "first", ParticipantStatus.CONFIRMED)
    add_participant(db_session, session_obj, "second", ParticipantStatus.WAITING)

    found = find_session_by_id(db_session, session_id=session_obj.id)

    assert found.activity.id == activity.id
    assert [p.user_id for p in found.participants] == ["first", "second"]


def test_find_unknown_session(db_session):
    with pytest.raises(SessionNotFoundError):
        find_session_by_id(db_session, session_id="ases_missing")


def test_user_participations_split_by_now(db_session):
    activity = create_random_activity(db_session)
    days = [date(2029, 12, 18), date(2029, 12, 25), date(2030, 1, 8), date(2030, 1, 15)]
    sessions = [create_session(db_session, activity, at_noon(day)) for day in days]
    for session_obj in sessions:
        add_participant(db_session, session_obj, "regular", ParticipantStatus.CONFIRMED)
    add_participant(db_session, sessions[2], "someone_else", ParticipantStatus.CONFIRMED)

    view = find_user_participations(db_session, user_id="regular", now=NOW)

    assert [v.date.date() for v in view.upcoming] == [date(2030, 1, 8), date(2030, 1, 15)]
    assert [v.date.date() for v in view.past] == [date(2029, 12, 25), date(2029, 12, 18)]
    assert view.upcoming[0].stats.confirmed_count == 2
    assert all(v.user_status.is_participant for v in view.upcoming + view.past)


def test_user_without_participations(db_session):
    view = find_user_participations(db_session, user_id="nobody", now=NOW)

    assert view.upcoming == []
    assert view.past == []
    assert crud.activity_participant.get_by_user(db_session, user_id="nobody") == []
