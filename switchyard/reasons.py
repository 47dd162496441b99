"""
Evaluation reasons for the switchyard SDK.

Provides detailed information about why a flag evaluated to a particular value.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class EvaluationReasonKind(str, Enum):
    """The category of reason for a flag evaluation."""

    TARGET_MATCH = "TARGET_MATCH"  # User matched a targeting rule on a variation
    FALLTHROUGH = "FALLTHROUGH"  # No rule matched, weighted rollout decided
    ERROR = "ERROR"  # Evaluation could not take place


class EvaluationErrorKind(str, Enum):
    """Types of errors that can occur during evaluation."""

    USER_NOT_SPECIFIED = "USER_NOT_SPECIFIED"  # No user key to bucket on


@dataclass
class EvaluationReason:
    """Explains why a flag evaluated to a particular value."""

    kind: EvaluationReasonKind
    in_rollout: Optional[bool] = None
    error_kind: Optional[EvaluationErrorKind] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {"kind": self.kind.value}
        if self.in_rollout is not None:
            result["inRollout"] = self.in_rollout
        if self.error_kind is not None:
            result["errorKind"] = self.error_kind.value
        return result


@dataclass
class EvaluationDetail(Generic[T]):
    """Contains the full result of a flag evaluation."""

    value: Optional[T]
    reason: EvaluationReason
    variation_index: Optional[int] = None

    def to_dict(self) -> dict:
        result = {"value": self.value, "reason": self.reason.to_dict()}
        if self.variation_index is not None:
            result["variationIndex"] = self.variation_index
        return result


def target_match_reason() -> EvaluationReason:
    """Create a reason for a targeting rule match."""
    return EvaluationReason(kind=EvaluationReasonKind.TARGET_MATCH)


def fallthrough_reason(in_rollout: bool = True) -> EvaluationReason:
    """Create a reason for fallthrough to weighted rollout."""
    return EvaluationReason(kind=EvaluationReasonKind.FALLTHROUGH, in_rollout=in_rollout)


def error_reason(error_kind: EvaluationErrorKind) -> EvaluationReason:
    return EvaluationReason(kind=EvaluationReasonKind.ERROR, error_kind=error_kind)
