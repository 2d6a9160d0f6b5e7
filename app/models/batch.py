from enum import Enum
from pydantic import BaseModel, Field
from typing import Dict, List

from app.models.metadata import Unit
from app.models.outcome import Outcome, Success

DISPLAY_ERROR_LIMIT = 5


class BatchMode(str, Enum):
    GENERATE = "generate"
    UPDATE = "update"
    GENERATE_THEN_UPDATE = "generate_then_update"


class BatchState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"


class BatchJob(BaseModel):
    """
    One bulk submission. Lives for a single request: results are keyed by
    unit key and filled in submission order while the job runs.
    """

    items: List[Unit]
    mode: BatchMode
    results: Dict[str, Outcome] = Field(default_factory=dict)
    state: BatchState = BatchState.PENDING

    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self.results.values() if outcome.ok)

    @property
    def errors(self) -> List[str]:
        labels = {item.key: item.label for item in self.items}
        return [
            f"{labels.get(key, key)}: {outcome.message}"
            for key, outcome in self.results.items()
            if not outcome.ok
        ]

    @property
    def successes(self) -> List[Success]:
        return [outcome for outcome in self.results.values() if outcome.ok]

    def display_errors(self, limit: int = DISPLAY_ERROR_LIMIT) -> List[str]:
        errors = self.errors
        if len(errors) <= limit:
            return errors
        return errors[:limit] + [f"...and {len(errors) - limit} more errors"]
