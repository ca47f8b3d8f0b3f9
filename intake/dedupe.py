"""
Duplicate detection for (scholarship, email) pairs, within the current batch
and against stored applications.
"""

from typing import Any, Optional

from intake.errors import ErrorKind, RowError
from intake.schema import NormalizedApplication
from intake.state import BatchState


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def dedupe_key(scholarship_id: int, email: Optional[str]) -> str:
    return f"{scholarship_id}|{normalize_email(email)}"


def check_duplicate(
    application: NormalizedApplication,
    state: BatchState,
    store: Any,
) -> Optional[RowError]:
    """In-batch check first, then the store. None means not a duplicate."""
    key = dedupe_key(application.scholarship_id, application.email_address)
    if key in state.seen_keys:
        return RowError(
            ErrorKind.DUPLICATE_IN_BATCH,
            "Duplicate application in this upload",
        )
    if store.application_exists(application.scholarship_id, normalize_email(application.email_address)):
        return RowError(
            ErrorKind.DUPLICATE_IN_DB,
            "Application already exists for this scholarship and email",
        )
    return None


def remember(application: NormalizedApplication, state: BatchState) -> None:
    """Mark the pair as seen. Called immediately on admission."""
    state.seen_keys.add(dedupe_key(application.scholarship_id, application.email_address))
