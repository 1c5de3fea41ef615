from typing import Tuple

from src.shared.models.enums import AdvanceEvent, RideEventType, RideStatus


class RideStateMachine:
    ALLOWED_TRANSITIONS = {
        RideStatus.PENDING: [RideStatus.ACCEPTED, RideStatus.REJECTED, RideStatus.CANCELLED],
        RideStatus.ACCEPTED: [RideStatus.ARRIVED, RideStatus.CANCELLED],
        RideStatus.ARRIVED: [RideStatus.IN_PROGRESS, RideStatus.CANCELLED],
        RideStatus.IN_PROGRESS: [RideStatus.COMPLETED, RideStatus.CANCELLED],
        RideStatus.COMPLETED: [],
        RideStatus.CANCELLED: [],
        RideStatus.REJECTED: [],
    }

    TERMINAL_STATES = frozenset({RideStatus.COMPLETED, RideStatus.CANCELLED, RideStatus.REJECTED})

    # advance event -> (required current status, target status)
    ADVANCE_STEPS = {
        AdvanceEvent.ARRIVED: (RideStatus.ACCEPTED, RideStatus.ARRIVED),
        AdvanceEvent.STARTED: (RideStatus.ARRIVED, RideStatus.IN_PROGRESS),
        AdvanceEvent.COMPLETED: (RideStatus.IN_PROGRESS, RideStatus.COMPLETED),
    }

    EVENT_FOR_STATUS = {
        RideStatus.PENDING: RideEventType.REQUESTED,
        RideStatus.ACCEPTED: RideEventType.ACCEPTED,
        RideStatus.ARRIVED: RideEventType.ARRIVED,
        RideStatus.IN_PROGRESS: RideEventType.STARTED,
        RideStatus.COMPLETED: RideEventType.COMPLETED,
        RideStatus.CANCELLED: RideEventType.CANCELLED,
        RideStatus.REJECTED: RideEventType.REJECTED,
    }

    @staticmethod
    def can_transition(current_status: str, new_status: str) -> bool:
        try:
            curr = RideStatus(current_status)
            new = RideStatus(new_status)
            return new in RideStateMachine.ALLOWED_TRANSITIONS.get(curr, [])
        except ValueError:
            return False

    @staticmethod
    def advance_step(event: AdvanceEvent) -> Tuple[RideStatus, RideStatus]:
        return RideStateMachine.ADVANCE_STEPS[AdvanceEvent(event)]

    @staticmethod
    def event_for(status: RideStatus) -> RideEventType:
        return RideStateMachine.EVENT_FOR_STATUS[RideStatus(status)]
