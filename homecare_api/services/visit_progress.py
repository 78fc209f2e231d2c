"""
Visit progress state machine

    Scheduled --check-in--> In Progress --check-out--> Completed --approve--> Paid
        |                        |
        +--------cancel----------+--> Canceled (terminal)

Every transition names the audit columns it stamps with the acting user
and the time. Re-applying a transition is rejected, never a no-op.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ..constants import Message, Progress


class TransitionError(ValueError):
    """Raised when a visit cannot make the requested move"""


@dataclass(frozen=True)
class Transition:
    sources: frozenset
    target: Progress
    actor_field: str
    timestamp_field: str
    rejection: str


class VisitAction(str, Enum):
    CHECK_IN = "checkin"
    CHECK_OUT = "checkout"
    APPROVE = "approve"
    CANCEL = "cancel"


TRANSITIONS: dict[VisitAction, Transition] = {
    VisitAction.CHECK_IN: Transition(
        sources=frozenset({Progress.SCHEDULED}),
        target=Progress.IN_PROGRESS,
        actor_field="checkin_by",
        timestamp_field="checkin_at",
        rejection="Can only check in to scheduled visits",
    ),
    VisitAction.CHECK_OUT: Transition(
        sources=frozenset({Progress.IN_PROGRESS}),
        target=Progress.COMPLETED,
        actor_field="checkout_by",
        timestamp_field="checkout_at",
        rejection="Can only check out from in-progress visits",
    ),
    VisitAction.APPROVE: Transition(
        sources=frozenset({Progress.COMPLETED}),
        target=Progress.PAID,
        actor_field="approved_by",
        timestamp_field="approved_at",
        rejection="Can only approve completed visits",
    ),
    VisitAction.CANCEL: Transition(
        sources=frozenset({Progress.SCHEDULED, Progress.IN_PROGRESS}),
        target=Progress.CANCELED,
        actor_field="canceled_by",
        timestamp_field="canceled_at",
        rejection="Cannot cancel a completed or paid visit",
    ),
}


def check_transition(current: int, action: VisitAction) -> Progress:
    """Return the target progress for action, or raise TransitionError"""
    transition = TRANSITIONS[action]
    if current in transition.sources:
        return transition.target

    if action == VisitAction.CANCEL and current == Progress.CANCELED:
        raise TransitionError("Visit is already canceled")
    raise TransitionError(transition.rejection)


def action_for_target(current: int, target: int) -> VisitAction:
    """Find the single legal transition that moves current to target"""
    for action, transition in TRANSITIONS.items():
        if transition.target == target and current in transition.sources:
            return action
    raise TransitionError(
        f"Cannot change visit progress from {_label(current)} to {_label(target)}"
    )


def transition_values(action: VisitAction, actor_id: int, at: datetime) -> dict:
    """Column values written when action is applied"""
    transition = TRANSITIONS[action]
    return {
        "progress": int(transition.target),
        transition.actor_field: actor_id,
        transition.timestamp_field: at,
    }


def _label(progress: int) -> str:
    try:
        return Progress(progress).label
    except ValueError:
        return str(progress)


def validate_visit_times(start_time: datetime, end_time: datetime) -> None:
    """A visit may be zero-length but never end before it starts"""
    if end_time < start_time:
        raise ValueError(Message.VISIT_TIME_INVALID)
