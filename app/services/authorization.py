# app/services/authorization.py
"""
Authorization gate — the single place that decides who may mutate an alert.

  resolve  → author only
  update   → author or admin (allow-listed content fields only)
  delete   → author or admin
  vote     → any known actor; the vote ledger's uniqueness is the real gate

A denial is just False. Callers report it exactly like a missing alert so
existence is never leaked.
"""

from dataclasses import dataclass

RESOLVE = "resolve"
UPDATE = "update"
DELETE = "delete"
VOTE = "vote"

# Content fields an author/admin may edit. Status, counts and timestamps are
# never editable here.
UPDATABLE_FIELDS = frozenset({"reason", "description", "location", "latitude", "longitude", "urgency"})


@dataclass(frozen=True)
class ActorRef:
    """Capability value for whoever is performing an operation."""
    id: str
    is_admin: bool = False


def authorize(actor, alert, operation: str) -> bool:
    if actor is None or alert is None:
        return False

    is_author = actor.id == alert.author_id
    if operation == RESOLVE:
        return is_author
    if operation in (UPDATE, DELETE):
        return is_author or actor.is_admin
    if operation == VOTE:
        return True
    raise ValueError(f"Unknown operation: {operation!r}")


def disallowed_fields(fields) -> set:
    """Names in `fields` that the update path may never touch."""
    return set(fields) - UPDATABLE_FIELDS
