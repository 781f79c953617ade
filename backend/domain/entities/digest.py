"""
Results produced by the digest pipeline.

A run walks the conversations batch by batch; each batch yields zero or more
DigestEntry objects and at most one delivery.
"""

from dataclasses import dataclass, field
from typing import Optional

from domain.value_objects.enums import DeliveryMode, GenerationErrorKind


@dataclass
class DigestEntry:
    """Generated summary for one conversation."""

    conversation_id: str
    label: str
    summary: str
    message_count: int


@dataclass
class BatchOutcome:
    """What happened to one batch of conversations."""

    index: int  # 1-based
    conversation_count: int
    entries: list[DigestEntry] = field(default_factory=list)
    generation_calls: int = 0
    segments_sent: int = 0
    delivery_mode: Optional[DeliveryMode] = None
    delivered: bool = False


@dataclass
class DigestRunResult:
    """Summary of a full digest run."""

    batches: list[BatchOutcome] = field(default_factory=list)
    aborted: bool = False
    error_kind: Optional[GenerationErrorKind] = None

    @property
    def summary_count(self) -> int:
        return sum(len(batch.entries) for batch in self.batches)

    @property
    def delivered_batches(self) -> int:
        return sum(1 for batch in self.batches if batch.delivered)
