from typing import Iterable, Optional

import pytest

from src.services.rides.state_machine import RideStateMachine
from src.shared.models.enums import AdvanceEvent, RideEventType, RideStatus


def replay(events: Iterable[str]) -> Optional[RideStatus]:
    """Walks an event log through the transition table; None for an invalid path."""
    status_for_event = {v: k for k, v in RideStateMachine.EVENT_FOR_STATUS.items()}
    current = None
    for raw in events:
        target = status_for_event.get(RideEventType(raw))
        if current is None:
            if target != RideStatus.PENDING:
                return None
        elif not RideStateMachine.can_transition(current, target):
            return None
        current = target
    return current


@pytest.mark.parametrize(
    "current, new, allowed",
    [
        ("pending", "accepted", True),
        ("pending", "rejected", True),
        ("pending", "arrived", False),
        ("accepted", "arrived", True),
        ("accepted", "in-progress", False),
        ("arrived", "in-progress", True),
        ("in-progress", "completed", True),
        ("in-progress", "cancelled", True),
        ("completed", "cancelled", False),
        ("rejected", "accepted", False),
        ("unknown", "accepted", False),
    ],
)
def test_can_transition(current, new, allowed):
    assert RideStateMachine.can_transition(current, new) is allowed


def test_terminal_states_have_no_exits():
    for status in RideStateMachine.TERMINAL_STATES:
        assert RideStateMachine.ALLOWED_TRANSITIONS[status] == []
    assert RideStatus.ACCEPTED not in RideStateMachine.TERMINAL_STATES


def test_advance_steps_are_single_hops():
    for event in AdvanceEvent:
        source, target = RideStateMachine.advance_step(event)
        assert RideStateMachine.can_transition(source, target)


def test_cancel_is_reachable_from_every_open_status():
    for status in set(RideStatus) - RideStateMachine.TERMINAL_STATES:
        assert RideStateMachine.can_transition(status, RideStatus.CANCELLED)


@pytest.mark.parametrize(
    "events, final",
    [
        (["requested", "accepted", "arrived", "started", "completed"], RideStatus.COMPLETED),
        (["requested", "accepted", "arrived", "cancelled"], RideStatus.CANCELLED),
        (["requested", "accepted", "started"], None),
        (["requested", "rejected", "accepted"], None),
        (["accepted"], None),
        ([], None),
    ],
)
def test_event_logs_follow_the_transition_table(events, final):
    assert replay(events) == final


def test_event_for_every_status():
    assert RideStateMachine.event_for(RideStatus.IN_PROGRESS) == RideEventType.STARTED
    assert len(RideStateMachine.EVENT_FOR_STATUS) == len(RideStatus)
