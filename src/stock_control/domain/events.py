"""Events published to the UI layer."""

from dataclasses import dataclass

from stock_control.domain.capture import CaptureStep, SubmissionOutcome
from stock_control.domain.labels import PrintOutcome


@dataclass(frozen=True)
class StepAdvanced:
    """The workflow moved to another step."""

    previous: CaptureStep
    current: CaptureStep


@dataclass(frozen=True)
class StepNotReadyEvent:
    """A step-gated action was refused."""

    step: CaptureStep
    reason: str


@dataclass(frozen=True)
class InvalidFormatEvent:
    """A scanned identifier was rejected."""

    field: str
    value: str


@dataclass(frozen=True)
class SubmissionFinished:
    """A submission reached a final outcome."""

    outcome: SubmissionOutcome


@dataclass(frozen=True)
class PrintProgress:
    """A label was printed."""

    printed_count: int
    total_count: int


@dataclass(frozen=True)
class PrintFinished:
    """A print batch reached its terminal classification."""

    outcome: PrintOutcome


Event = (
    StepAdvanced
    | StepNotReadyEvent
    | InvalidFormatEvent
    | SubmissionFinished
    | PrintProgress
    | PrintFinished
)
