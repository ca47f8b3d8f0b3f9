"""
Batch outcome aggregation: one RowOutcome per data row plus running counters.
"""

from typing import List

from pydantic import BaseModel, Field

from intake.schema import RowOutcome

STATUS_INSERTED = "inserted"
STATUS_DUPLICATE = "duplicate"
STATUS_ERROR = "error"


class BatchSummary(BaseModel):
    """
    Counters always satisfy ``inserted + duplicates + errors == len(rows)``.
    Mutate only through ``record``.
    """
    inserted: int = 0
    duplicates: int = 0
    errors: int = 0
    rows: List[RowOutcome] = Field(default_factory=list)

    def record(self, outcome: RowOutcome) -> RowOutcome:
        if outcome.status == STATUS_INSERTED:
            self.inserted += 1
        elif outcome.status == STATUS_DUPLICATE:
            self.duplicates += 1
        else:
            outcome.status = STATUS_ERROR
            self.errors += 1
        self.rows.append(outcome)
        return outcome

    @property
    def total(self) -> int:
        return len(self.rows)

    def to_response(self) -> dict:
        return {
            "inserted": self.inserted,
            "duplicates": self.duplicates,
            "errors": self.errors,
            "rows": [outcome.to_response() for outcome in self.rows],
        }
