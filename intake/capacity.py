"""
Capacity admission control: never admit more applications than a scholarship
has awards.

The in-process check only sees this batch plus the count loaded when the batch
first touched the scholarship. Concurrent requests are covered by the store's
``try_reserve_slot``, a conditional write evaluated server-side.
"""

import logging
from typing import Any, Optional

from intake.errors import ErrorKind, RowError
from intake.schema import ScholarshipRule
from intake.state import BatchState

logger = logging.getLogger(__name__)


def _capacity_error(rule: ScholarshipRule) -> RowError:
    return RowError(
        ErrorKind.CAPACITY_REACHED,
        f"Scholarship capacity reached ({rule.capacity} awards)",
    )


def check_capacity(rule: ScholarshipRule, state: BatchState, store: Any) -> Optional[RowError]:
    """Best-effort pre-check against persisted + in-batch counts."""
    if not rule.has_capacity_limit:
        return None
    used = state.used(rule.id, store)
    if used >= rule.capacity:
        return _capacity_error(rule)
    return None


def admit(rule: ScholarshipRule, state: BatchState, store: Any) -> Optional[RowError]:
    """
    Pre-check, then reserve a slot in the store for limited scholarships.
    Returns a CapacityReached error if either step refuses.
    """
    error = check_capacity(rule, state, store)
    if error:
        return error
    if rule.has_capacity_limit and not store.try_reserve_slot(rule.id):
        logger.info(f"Store refused slot for scholarship {rule.id}; capacity taken by another request")
        return _capacity_error(rule)
    return None


def release(rule: ScholarshipRule, store: Any) -> None:
    """Give back a reserved slot after a failed insert."""
    if not rule.has_capacity_limit:
        return
    try:
        store.release_slot(rule.id)
    except Exception as e:
        logger.warning(f"Could not release slot for scholarship {rule.id}: {e}")


def record_admission(rule: ScholarshipRule, state: BatchState) -> None:
    state.batch_inserted_counts[rule.id] = state.inserted_count(rule.id) + 1
