# app/services/state_rules.py
"""
Alert lifecycle rules.

next_state() is a pure function of (current status, confirmed, rejected):
  confirmed >= CONFIRM_THRESHOLD  → confirmed
  rejected  >= FAKE_THRESHOLD     → fake
  otherwise                       → unchanged
The confirm check runs first. "resolved" is never produced here and never left
through here; only the author's explicit resolve action sets it.
"""

PENDING = "pending"
CONFIRMED = "confirmed"
FAKE = "fake"
RESOLVED = "resolved"

ALERT_STATUSES = (PENDING, CONFIRMED, FAKE, RESOLVED)

POLICY_OPEN = "open"
POLICY_FREEZE = "freeze"
POLICY_CLOSED = "closed"
VOTING_POLICIES = (POLICY_OPEN, POLICY_FREEZE, POLICY_CLOSED)

DEFAULT_CONFIRM_THRESHOLD = 3
DEFAULT_FAKE_THRESHOLD = 2


def next_state(current: str, confirmed: int, rejected: int,
               policy: str = POLICY_OPEN,
               confirm_threshold: int = DEFAULT_CONFIRM_THRESHOLD,
               fake_threshold: int = DEFAULT_FAKE_THRESHOLD) -> str:
    if current not in ALERT_STATUSES:
        raise ValueError(f"Unknown alert status: {current!r}")
    if policy not in VOTING_POLICIES:
        raise ValueError(f"Unknown voting policy: {policy!r}")

    if current == RESOLVED:
        return RESOLVED
    if policy != POLICY_OPEN and current != PENDING:
        return current

    if confirmed >= confirm_threshold:
        return CONFIRMED
    if rejected >= fake_threshold:
        return FAKE
    return current


def accepts_votes(current: str, policy: str = POLICY_OPEN) -> bool:
    """Whether a new vote may be recorded on an alert in this status."""
    if policy == POLICY_CLOSED:
        return current == PENDING
    return True
