"""
Domain Errors

Architectural Intent:
- Single error taxonomy shared by every layer of Cutover
- Separates failures raised before any mutation from failures raised mid-rollout
- Lets callers tell "failed and rewound" apart from "failed and rewinding failed"
"""

from __future__ import annotations
from enum import Enum, auto
from typing import Optional


class SagaOutcome(Enum):
    ALL_SUCCEEDED = auto()
    FAILED_COMPENSATED = auto()
    FAILED_UNCOMPENSATED = auto()


class CutoverError(Exception):
    """Base class for every error Cutover raises on purpose."""


class RemoteError(CutoverError):
    """A remote command or query failed, or answered with malformed data."""


class ManifestError(CutoverError):
    pass


class PlanningError(CutoverError):
    """Raised before any remote mutation took place."""


class RolloutError(CutoverError):
    """A plan failed while executing."""

    outcome = SagaOutcome.FAILED_UNCOMPENSATED

    def __init__(self, message: str, step_name: str = "") -> None:
        super().__init__(message)
        self.step_name = step_name

    @property
    def rewound(self) -> bool:
        return self.outcome is SagaOutcome.FAILED_COMPENSATED


class StepForwardError(RolloutError):
    """
    A step's forward action failed.

    The message is the original failure's message. ``compensated`` records
    whether the step's compensation ran and succeeded.
    """

    def __init__(
        self, message: str, step_name: str = "", compensated: bool = False
    ) -> None:
        super().__init__(message, step_name)
        self.compensated = compensated
        self.outcome = (
            SagaOutcome.FAILED_COMPENSATED
            if compensated
            else SagaOutcome.FAILED_UNCOMPENSATED
        )


class CompensationError(RolloutError):
    """
    The compensating action itself failed; the remote system may be
    inconsistent. ``forward_error`` holds the failure that triggered it.
    """

    def __init__(
        self,
        message: str,
        step_name: str = "",
        forward_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, step_name)
        self.forward_error = forward_error
