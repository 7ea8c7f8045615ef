# app/services/errors.py
"""
Alert engine error taxonomy.
Routers map these onto HTTP responses in app/main.py; nothing here is retried
automatically.
"""


class AlertEngineError(Exception):
    """Base class for every outcome the engine reports instead of an Alert."""


class NotFoundError(AlertEngineError):
    """The referenced alert or actor does not exist."""

    def __init__(self, kind: str, ref: str):
        self.kind = kind
        self.ref = ref
        super().__init__(f"{kind} {ref} not found")


class ForbiddenError(AlertEngineError):
    """The actor is neither the author nor (where allowed) an admin."""

    def __init__(self, actor_id: str, alert_id: str, operation: str):
        self.actor_id = actor_id
        self.alert_id = alert_id
        self.operation = operation
        super().__init__(f"Actor {actor_id} may not {operation} alert {alert_id}")


class DuplicateVoteError(AlertEngineError):
    """The voter already has a vote on this alert. Prior vote and counts are unchanged."""

    def __init__(self, alert_id: str, voter_id: str):
        self.alert_id = alert_id
        self.voter_id = voter_id
        super().__init__(f"User {voter_id} has already voted on alert {alert_id}")


class VotingClosedError(AlertEngineError):
    """The alert left "pending" and VOTING_POLICY is "closed"."""

    def __init__(self, alert_id: str, status: str):
        self.alert_id = alert_id
        self.status = status
        super().__init__(f"Voting is closed on alert {alert_id} ({status})")


class ValidationError(AlertEngineError):
    """Malformed input rejected before the ledger or counters are touched."""


class StorageError(AlertEngineError):
    """The persistence layer failed. The unit of work was rolled back."""
