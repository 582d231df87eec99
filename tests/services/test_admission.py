# tests/services/test_admission.py

import random
from datetime import date
from unittest.mock import patch

import pytest

from activity_sessions import crud
from activity_sessions.constants.status import ParticipantStatus
from activity_sessions.core.exceptions import (
    AlreadyParticipatingError,
    CapacityConflictError,
    NotActivityOwnerError,
    NotParticipatingError,
    SessionCancelledError,
    SessionNotFoundError,
)
from activity_sessions.models.activity_participant import ActivityParticipant
from activity_sessions.services import admission
from activity_sessions.services.admission import join_session, leave_session, update_session
from activity_sessions.services.session_materializer import generate_sessions
from tests.utils.activity import (
    MONDAY,
    add_participant,
    at_noon,
    create_random_activity,
    create_session,
)


def _statuses(db, session_id):
    participants = crud.activity_participant.list_participants(db, session_id=session_id)
    return {p.user_id: p.status for p in participants}


def _count(db, session_id, status):
    return crud.activity_participant.count_by_status(db, session_id=session_id, status=status)


@pytest.fixture
def tuesday_session(db_session):
    activity = create_random_activity(db_session, min_players=2, max_players=2)
    return create_session(db_session, activity, at_noon(date(2030, 1, 8)))


def test_full_session_lifecycle(db_session, notifier):
    """
    Weekly Tuesday activity with capacity 2: two joins confirm the session,
    the third waits and is promoted when a confirmed player leaves.
    """
    # ARRANGE
    activity = create_random_activity(
        db_session, recurring_days=["tuesday"], min_players=2, max_players=2
    )
    sessions = generate_sessions(
        db_session, activity_id=activity.id, from_date=MONDAY, weeks_ahead=1, notifier=notifier
    )
    assert [s.date for s in sessions] == [at_noon(date(2030, 1, 8))]
    session_id = sessions[0].id

    # ACT / ASSERT
    first = join_session(db_session, session_id=session_id, user_id="u1", notifier=notifier)
    assert first.status == ParticipantStatus.CONFIRMED
    notifier.notify_session_confirmed.assert_not_called()

    second = join_session(db_session, session_id=session_id, user_id="u2", notifier=notifier)
    assert second.status == ParticipantStatus.CONFIRMED
    notifier.notify_session_confirmed.assert_called_once_with(db_session, session_id=session_id)

    third = join_session(db_session, session_id=session_id, user_id="u3", notifier=notifier)
    assert third.status == ParticipantStatus.WAITING

    promoted = leave_session(db_session, session_id=session_id, user_id="u1")

    assert promoted.user_id == "u3"
    assert _statuses(db_session, session_id) == {
        "u2": ParticipantStatus.CONFIRMED,
        "u3": ParticipantStatus.CONFIRMED,
    }
    # Promotion does not re-trigger the confirmation
    notifier.notify_session_confirmed.assert_called_once()


def test_waitlist_is_first_in_first_out(db_session, notifier):
    activity = create_random_activity(db_session, min_players=2, max_players=2)
    session_obj = create_session(db_session, activity, at_noon(date(2030, 1, 8)), max_players=1)

    join_session(db_session, session_id=session_obj.id, user_id="a", notifier=notifier)
    join_session(db_session, session_id=session_obj.id, user_id="b", notifier=notifier)
    join_session(db_session, session_id=session_obj.id, user_id="c", notifier=notifier)

    promoted = leave_session(db_session, session_id=session_obj.id, user_id="a")
    assert promoted.user_id == "b"

    promoted = leave_session(db_session, session_id=session_obj.id, user_id="b")
    assert promoted.user_id == "c"
    assert _statuses(db_session, session_obj.id) == {"c": ParticipantStatus.CONFIRMED}


def test_leaving_waitlist_promotes_nobody(db_session, notifier, tuesday_session):
    for user_id in ("u1", "u2", "u3", "u4"):
        join_session(db_session, session_id=tuesday_session.id, user_id=user_id, notifier=notifier)

    promoted = leave_session(db_session, session_id=tuesday_session.id, user_id="u3")

    assert promoted is None
    assert _statuses(db_session, tuesday_session.id) == {
        "u1": ParticipantStatus.CONFIRMED,
        "u2": ParticipantStatus.CONFIRMED,
        "u4": ParticipantStatus.WAITING,
    }


def test_leaving_with_empty_waitlist_frees_a_slot(db_session, notifier, tuesday_session):
    join_session(db_session, session_id=tuesday_session.id, user_id="u1", notifier=notifier)

    promoted = leave_session(db_session, session_id=tuesday_session.id, user_id="u1")

    assert promoted is None
    assert _count(db_session, tuesday_session.id, ParticipantStatus.CONFIRMED) == 0


def test_interested_participants_do_not_take_capacity(db_session, notifier):
    activity = create_random_activity(db_session, min_players=2, max_players=2)
    session_obj = create_session(db_session, activity, at_noon(date(2030, 1, 8)), max_players=1)
    add_participant(db_session, session_obj, "watcher", ParticipantStatus.INTERESTED)

    participant = join_session(db_session, session_id=session_obj.id, user_id="u1", notifier=notifier)

    assert participant.status == ParticipantStatus.CONFIRMED


def test_capacity_holds_under_random_joins_and_leaves(db_session, notifier):
    activity = create_random_activity(db_session, min_players=2, max_players=3)
    session_obj = create_session(db_session, activity, at_noon(date(2030, 1, 8)))
    users = [f"user_{i}" for i in range(7)]
    rng = random.Random(20300108)

    for _ in range(120):
        user_id = rng.choice(users)
        try:
            if rng.random() < 0.6:
                join_session(db_session, session_id=session_obj.id, user_id=user_id, notifier=notifier)
            else:
                leave_session(db_session, session_id=session_obj.id, user_id=user_id)
        except (AlreadyParticipatingError, NotParticipatingError):
            pass

        confirmed = _count(db_session, session_obj.id, ParticipantStatus.CONFIRMED)
        waiting = _count(db_session, session_obj.id, ParticipantStatus.WAITING)
        assert confirmed <= 3
        if waiting:
            assert confirmed == 3


def test_confirmation_fires_only_on_reaching_minimum(db_session, notifier):
    activity = create_random_activity(db_session, min_players=3, max_players=5)
    session_obj = create_session(db_session, activity, at_noon(date(2030, 1, 8)))

    for user_id in ("u1", "u2"):
        join_session(db_session, session_id=session_obj.id, user_id=user_id, notifier=notifier)
    notifier.notify_session_confirmed.assert_not_called()

    join_session(db_session, session_id=session_obj.id, user_id="u3", notifier=notifier)
    join_session(db_session, session_id=session_obj.id, user_id="u4", notifier=notifier)

    notifier.notify_session_confirmed.assert_called_once_with(db_session, session_id=session_obj.id)


def test_join_twice_is_rejected(db_session, notifier, tuesday_session):
    join_session(db_session, session_id=tuesday_session.id, user_id="u1", notifier=notifier)

    with pytest.raises(AlreadyParticipatingError):
        join_session(db_session, session_id=tuesday_session.id, user_id="u1", notifier=notifier)

    assert _count(db_session, tuesday_session.id, ParticipantStatus.CONFIRMED) == 1


def test_concurrent_duplicate_join_maps_to_already_participating(
    db_session, notifier, tuesday_session
):
    join_session(db_session, session_id=tuesday_session.id, user_id="u1", notifier=notifier)

    # Simulate the second request passing the existence check before the first commits
    with patch.object(crud.activity_participant, "get_by_session_and_user", return_value=None):
        with pytest.raises(AlreadyParticipatingError):
            join_session(db_session, session_id=tuesday_session.id, user_id="u1", notifier=notifier)

    assert db_session.query(ActivityParticipant).count() == 1


def test_recount_guard_rejects_overfilled_session(db_session, notifier, monkeypatch):
    activity = create_random_activity(db_session, min_players=2, max_players=2)
    session_obj = create_session(db_session, activity, at_noon(date(2030, 1, 8)), max_players=1)
    # First count sees a free slot, the recount after insert sees a concurrent winner
    counts = iter([0, 2])
    monkeypatch.setattr(admission, "_count_confirmed", lambda db, session_id: next(counts))

    with pytest.raises(CapacityConflictError):
        join_session(db_session, session_id=session_obj.id, user_id="u1", notifier=notifier)

    assert db_session.query(ActivityParticipant).count() == 0
    notifier.notify_session_confirmed.assert_not_called()


def test_join_unknown_session(db_session, notifier):
    with pytest.raises(SessionNotFoundError):
        join_session(db_session, session_id="ases_missing", user_id="u1", notifier=notifier)


def test_join_cancelled_session(db_session, notifier, tuesday_session):
    update_session(
        db_session, session_id=tuesday_session.id, obj_in={"is_cancelled": True}, notifier=notifier
    )

    with pytest.raises(SessionCancelledError):
        join_session(db_session, session_id=tuesday_session.id, user_id="u1", notifier=notifier)


def test_leave_without_membership(db_session, tuesday_session):
    with pytest.raises(NotParticipatingError):
        leave_session(db_session, session_id=tuesday_session.id, user_id="stranger")


def test_leave_unknown_session(db_session):
    with pytest.raises(SessionNotFoundError):
        leave_session(db_session, session_id="ases_missing", user_id="u1")


def test_lowering_capacity_below_confirmed_is_rejected(db_session, notifier, tuesday_session):
    for user_id in ("u1", "u2"):
        join_session(db_session, session_id=tuesday_session.id, user_id=user_id, notifier=notifier)

    with pytest.raises(CapacityConflictError):
        update_session(
            db_session, session_id=tuesday_session.id, obj_in={"max_players": 1}, notifier=notifier
        )

    db_session.refresh(tuesday_session)
    assert tuesday_session.max_players == 2


def test_raising_capacity_does_not_promote(db_session, notifier, tuesday_session):
    for user_id in ("u1", "u2", "u3"):
        join_session(db_session, session_id=tuesday_session.id, user_id=user_id, notifier=notifier)

    updated = update_session(
        db_session, session_id=tuesday_session.id, obj_in={"max_players": 4}, notifier=notifier
    )

    assert updated.max_players == 4
    assert _statuses(db_session, tuesday_session.id)["u3"] == ParticipantStatus.WAITING
    # The freed slot goes to the next joiner
    late = join_session(db_session, session_id=tuesday_session.id, user_id="u4", notifier=notifier)
    assert late.status == ParticipantStatus.CONFIRMED


def test_cancelling_notifies_once_with_reason(db_session, notifier, tuesday_session):
    join_session(db_session, session_id=tuesday_session.id, user_id="u1", notifier=notifier)

    updated = update_session(
        db_session,
        session_id=tuesday_session.id,
        obj_in={"is_cancelled": True, "reason": "Pitch flooded"},
        user_id="owner_1",
        notifier=notifier,
    )
    update_session(
        db_session, session_id=tuesday_session.id, obj_in={"is_cancelled": True}, notifier=notifier
    )

    assert updated.is_cancelled is True
    notifier.notify_session_cancelled.assert_called_once_with(
        db_session, session_id=tuesday_session.id, reason="Pitch flooded"
    )
    # Participants are kept on cancellation
    assert _statuses(db_session, tuesday_session.id) == {"u1": ParticipantStatus.CONFIRMED}


def test_update_by_non_owner_is_rejected(db_session, notifier, tuesday_session):
    with pytest.raises(NotActivityOwnerError):
        update_session(
            db_session,
            session_id=tuesday_session.id,
            obj_in={"is_cancelled": True},
            user_id="intruder",
            notifier=notifier,
        )

    db_session.refresh(tuesday_session)
    assert tuesday_session.is_cancelled is False
    notifier.notify_session_cancelled.assert_not_called()


def test_update_unknown_session(db_session, notifier):
    with pytest.raises(SessionNotFoundError):
        update_session(
            db_session, session_id="ases_missing", obj_in={"max_players": 5}, notifier=notifier
        )
