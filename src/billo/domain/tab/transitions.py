from __future__ import annotations

from enum import Enum


class TabStatus(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    PENDING_ACCEPTANCE = "pending_acceptance"
    BILL_ACCEPTED = "bill_accepted"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


OPEN_STATUSES = frozenset(
    {TabStatus.ACTIVE, TabStatus.PENDING_ACCEPTANCE, TabStatus.BILL_ACCEPTED}
)
TERMINAL_STATUSES = frozenset({TabStatus.COMPLETED, TabStatus.CANCELLED})

TAB_TRANSITIONS: dict[TabStatus, frozenset[TabStatus]] = {
    TabStatus.INACTIVE: frozenset({TabStatus.ACTIVE}),
    TabStatus.ACTIVE: frozenset({TabStatus.PENDING_ACCEPTANCE, TabStatus.CANCELLED}),
    TabStatus.PENDING_ACCEPTANCE: frozenset({TabStatus.BILL_ACCEPTED, TabStatus.CANCELLED}),
    TabStatus.BILL_ACCEPTED: frozenset({TabStatus.COMPLETED, TabStatus.CANCELLED}),
    TabStatus.COMPLETED: frozenset(),
    TabStatus.CANCELLED: frozenset(),
}


class TabTransitionError(Exception):
    def __init__(
        self,
        message: str,
        *,
        from_status: TabStatus,
        to_status: TabStatus,
        reason: str,
    ) -> None:
        super().__init__(message)
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason


def check_transition(
    tab_label: str,
    current: TabStatus,
    target: TabStatus,
    *,
    has_waiter: bool,
) -> None:
    """Raise TabTransitionError unless ``current -> target`` is allowed.

    Activation is guarded on its precondition: the waiter must already be
    known when the transition is checked, not assigned afterwards.
    """
    if target not in TAB_TRANSITIONS[current]:
        if current in TERMINAL_STATUSES:
            reason = "TAB_CLOSED"
            detail = f"tab is already {current.value}"
        elif current == target:
            reason = "NO_OP_TRANSITION"
            detail = f"tab is already {current.value}"
        else:
            reason = "ILLEGAL_TRANSITION"
            detail = f"{current.value} cannot move to {target.value}"
        raise TabTransitionError(
            f"cannot move tab {tab_label} to {target.value}: {detail}",
            from_status=current,
            to_status=target,
            reason=reason,
        )

    if target == TabStatus.ACTIVE and not has_waiter:
        raise TabTransitionError(
            f"cannot activate tab {tab_label}: a waiter must be assigned "
            "(activate the tab for a waiter or append its first order)",
            from_status=current,
            to_status=target,
            reason="WAITER_REQUIRED",
        )
