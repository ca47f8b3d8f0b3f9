"""
Request-scoped batch state shared by every row of one upload.

Created at the start of a request, threaded through each row step, and
discarded when the request completes. Never stored at module level.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set

from intake.schema import ScholarshipRule


@dataclass
class BatchState:
    scholarship_cache: Dict[int, Optional[ScholarshipRule]] = field(default_factory=dict)
    persisted_counts: Dict[int, int] = field(default_factory=dict)
    batch_inserted_counts: Dict[int, int] = field(default_factory=dict)
    seen_keys: Set[str] = field(default_factory=set)

    def get_rule(self, scholarship_id: int, store: Any) -> Optional[ScholarshipRule]:
        """Scholarship rule, loaded from the store once per id (misses are cached too)."""
        if scholarship_id not in self.scholarship_cache:
            self.scholarship_cache[scholarship_id] = store.find_scholarship(scholarship_id)
        return self.scholarship_cache[scholarship_id]

    def persisted_count(self, scholarship_id: int, store: Any) -> int:
        """
        Applications stored before this batch touched the scholarship.
        Loaded at first encounter, before any row for the id is inserted.
        """
        if scholarship_id not in self.persisted_counts:
            self.persisted_counts[scholarship_id] = int(store.count_applications(scholarship_id) or 0)
        return self.persisted_counts[scholarship_id]

    def inserted_count(self, scholarship_id: int) -> int:
        return self.batch_inserted_counts.get(scholarship_id, 0)

    def used(self, scholarship_id: int, store: Any) -> int:
        return self.persisted_count(scholarship_id, store) + self.inserted_count(scholarship_id)
