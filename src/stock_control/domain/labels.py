"""Domain models for label generation and printing."""

from dataclasses import dataclass, field
from enum import Enum


class LabelKind(str, Enum):
    """Kinds of labels the backend can allocate."""

    SHELF = "shelf"
    PRODUCT = "product"


@dataclass(frozen=True)
class LabelBatch:
    """Identifier allocated by the label service plus the copies to print."""

    kind: LabelKind
    identifier: str
    count: int
    serials: tuple[str, ...] = ()


class PrintClassification(str, Enum):
    """Aggregate result of a print batch."""

    ALL_SUCCEEDED = "all_succeeded"
    PARTIAL = "partial"
    NONE_SUCCEEDED = "none_succeeded"


@dataclass
class PrintJob:
    """Progress of one print batch."""

    identifier: str
    requested_count: int
    printed_count: int = 0
    succeeded: dict[int, bool] = field(default_factory=dict)

    def record(self, index: int, ok: bool) -> None:
        self.succeeded[index] = ok
        if ok:
            self.printed_count += 1

    def classify(self) -> PrintClassification:
        if self.printed_count == self.requested_count:
            return PrintClassification.ALL_SUCCEEDED
        if self.printed_count > 0:
            return PrintClassification.PARTIAL
        return PrintClassification.NONE_SUCCEEDED


@dataclass(frozen=True)
class PrintOutcome:
    """Final report for a print batch."""

    identifier: str
    classification: PrintClassification
    printed_count: int
    requested_count: int
    failed_indexes: tuple[int, ...] = ()
    cancelled: bool = False
