"""Client selection ledger - authoritative record of variant choices per version."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from tripcraft.models.common import utcnow

PRIMARY_OPTION: Literal["primary"] = "primary"


class SelectionEntry(BaseModel):
    """The client's choice for one segment.

    option is either PRIMARY_OPTION (the segment's own baseline) or a variant id.
    """

    option: str
    selected_at: datetime = Field(default_factory=utcnow)
    submitted_at: datetime | None = None

    @property
    def is_submitted(self) -> bool:
        return self.submitted_at is not None


class ClientSelectionRecord(BaseModel):
    """Selection, submission and approval ledger for one trip version."""

    trip_id: str
    version_id: str
    selections: dict[str, SelectionEntry] = Field(default_factory=dict)
    last_submitted_at: datetime | None = None
    approved_at: datetime | None = None

    def entry_for(self, segment_id: str) -> SelectionEntry | None:
        return self.selections.get(segment_id)

    def is_locked(self, segment_id: str) -> bool:
        entry = self.selections.get(segment_id)
        return entry is not None and entry.is_submitted


class VariantView(BaseModel):
    """A selectable candidate as seen by a viewer, with derived flags."""

    option: str
    label: str
    cost: float | None
    currency: str
    quantity: int
    price_per_unit: float | None
    is_primary: bool
    is_selected: bool
    is_submitted: bool


class SelectionProgress(BaseModel):
    """How many variant segments have a choice, and how many are locked."""

    total: int
    selected: int
    submitted: int

    @property
    def unresolved(self) -> int:
        return self.total - self.selected

    @property
    def all_resolved(self) -> bool:
        return self.selected == self.total


class SubmissionResult(BaseModel):
    """Outcome of a client submission round."""

    locked_segment_ids: list[str]
    progress: SelectionProgress
