"""
Flag evaluation.

A flag holds an ordered list of variations. Targeting rules on a variation
force its selection; otherwise the user is placed in a sticky rollout bucket
and assigned by cumulative variation weight.

Bucketing follows ``bucket-hash-v1``: the SHA-1 of ``key.salt.userKey``,
first 15 hex digits, scaled into [0, 1) with IEEE-754 single precision
arithmetic throughout. Existing deployments depend on the exact rounding,
so the float32 steps are reproduced bit for bit.
"""

import hashlib
import logging
import struct
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

from switchyard.reasons import (
    EvaluationDetail,
    EvaluationErrorKind,
    error_reason,
    fallthrough_reason,
    target_match_reason,
)
from switchyard.user import UserContext

logger = logging.getLogger("switchyard.flag")

E = TypeVar("E")

BUCKET_HASH_VERSION = "bucket-hash-v1"
BUCKET_HEX_DIGITS = 15
OPERATOR_IN = "in"

_SCALAR_TYPES = (str, int, float, bool)
_COLLECTION_TYPES = (list, tuple, set, frozenset)


def _to_float32(value: float) -> float:
    """Round a double to the nearest binary32 value."""
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _int_to_float32(value: int) -> float:
    """
    Convert a non-negative integer to binary32 with a single rounding step.

    Going through a Python float first would round twice (to 53 bits, then
    to 24) and can land on a different value.
    """
    shift = value.bit_length() - 24
    if shift > 0:
        quotient, remainder = divmod(value, 1 << shift)
        half = 1 << (shift - 1)
        if remainder > half or (remainder == half and quotient & 1):
            quotient += 1
        value = quotient << shift
    return float(value)


LONG_SCALE = _int_to_float32(int("F" * BUCKET_HEX_DIGITS, 16))


def bucket_user(flag_key: str, salt: str, user_key: str) -> float:
    """
    Compute the sticky rollout position of a user for a flag.

    Returns a binary32 value in [0, 1). The same inputs always produce the
    same bucket.
    """
    hash_input = f"{flag_key}.{salt}.{user_key}".encode("utf-8")
    digest = hashlib.sha1(hash_input).hexdigest()[:BUCKET_HEX_DIGITS]
    numerator = _int_to_float32(int(digest, 16))
    # Quotient of two binary32 values rounded from a double is correctly rounded.
    return _to_float32(numerator / LONG_SCALE)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, _SCALAR_TYPES)


def _json_equal(left: Any, right: Any) -> bool:
    """Compare two JSON primitives; booleans never equal numbers."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right
    return left == right


@dataclass(frozen=True)
class TargetingRule:
    """Matches a user when the named attribute is one of ``values``."""

    attribute: str
    values: Tuple[Any, ...] = ()
    operator: str = OPERATOR_IN

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(self.values))

    def _contains(self, candidate: Any) -> bool:
        return any(_json_equal(candidate, value) for value in self.values)

    def matches(self, user: UserContext) -> bool:
        """Check whether the user satisfies this rule. Never raises."""
        if self.operator != OPERATOR_IN:
            logger.warning(f"Unsupported targeting operator {self.operator!r} on attribute {self.attribute!r}")
            return False

        if self.attribute == "key":
            return user.key is not None and self._contains(user.key)
        if self.attribute == "ip":
            return user.ip is not None and self._contains(user.ip)
        if self.attribute == "country":
            return user.country is not None and self._contains(user.country)

        custom = user.get_custom(self.attribute)
        if custom is None:
            return False
        if isinstance(custom, _COLLECTION_TYPES):
            for element in custom:
                if not _is_scalar(element):
                    logger.error(f"Invalid custom attribute value in user object: {element!r}")
                    return False
                if self._contains(element):
                    return True
            return False
        if _is_scalar(custom):
            return self._contains(custom)
        return False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TargetingRule":
        return cls(
            attribute=data.get("attribute", ""),
            operator=data.get("op", data.get("operator", OPERATOR_IN)),
            values=data.get("values", []),
        )


@dataclass(frozen=True)
class Variation(Generic[E]):
    """One possible flag outcome with its rollout weight and forcing rules."""

    value: E
    weight: int = 0
    targets: Tuple[TargetingRule, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "targets", tuple(self.targets))

    def matches_target(self, user: UserContext) -> bool:
        """Check if any targeting rule selects this variation for the user."""
        return any(rule.matches(user) for rule in self.targets)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Variation[Any]":
        return cls(
            value=data.get("value"),
            weight=int(data.get("weight", 0)),
            targets=[TargetingRule.from_dict(t) for t in data.get("targets") or []],
        )


@dataclass(frozen=True)
class Flag(Generic[E]):
    """
    An immutable snapshot of a feature flag definition.

    Weights are percentages applied in declaration order. They are not
    required to sum to 100; users bucketed past the last cumulative weight
    get no variation.

    Example:
        ```python
        flag = Flag(
            key="new-checkout",
            salt="a1b2",
            variations=[Variation(True, 25), Variation(False, 75)],
        )
        flag.evaluate(UserContext(key="user-123"))
        ```
    """

    key: str
    salt: str
    variations: Tuple[Variation[E], ...] = ()
    enabled: bool = True

    def __post_init__(self):
        object.__setattr__(self, "variations", tuple(self.variations))

    def bucket(self, user: UserContext) -> Optional[float]:
        """Rollout bucket for the user, or None when the user has no key."""
        if user.key is None:
            return None
        return bucket_user(self.key, self.salt, user.key)

    def _select(self, user: UserContext) -> Tuple[Optional[int], Optional[float], bool]:
        """Return (variation index, bucket, matched by target)."""
        bucket = self.bucket(user)
        if bucket is None:
            return None, None, False

        for index, variation in enumerate(self.variations):
            if variation.matches_target(user):
                return index, bucket, True

        total = 0.0
        for index, variation in enumerate(self.variations):
            total = _to_float32(total + variation.weight / 100.0)
            if bucket < total:
                return index, bucket, False

        return None, bucket, False

    def evaluate(self, user: UserContext) -> Optional[E]:
        """Return the variation value for the user, or None if none applies."""
        index, _, _ = self._select(user)
        if index is None:
            return None
        return self.variations[index].value

    def evaluate_detail(self, user: UserContext) -> EvaluationDetail[E]:
        """Evaluate and explain the outcome."""
        index, bucket, targeted = self._select(user)
        if bucket is None:
            return EvaluationDetail(
                value=None,
                reason=error_reason(EvaluationErrorKind.USER_NOT_SPECIFIED),
            )
        if index is None:
            return EvaluationDetail(value=None, reason=fallthrough_reason(in_rollout=False))
        reason = target_match_reason() if targeted else fallthrough_reason()
        return EvaluationDetail(
            value=self.variations[index].value,
            reason=reason,
            variation_index=index,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Flag[Any]":
        """Build a flag from its JSON definition."""
        return cls(
            key=data.get("key", ""),
            salt=data.get("salt", ""),
            enabled=bool(data.get("on", data.get("enabled", False))),
            variations=[Variation.from_dict(v) for v in data.get("variations") or []],
        )


def evaluate(flag: Flag[E], user: UserContext) -> Optional[E]:
    """Evaluate a flag for a user context."""
    return flag.evaluate(user)


def evaluate_detail(flag: Flag[E], user: UserContext) -> EvaluationDetail[E]:
    """Evaluate a flag and report why the value was chosen."""
    return flag.evaluate_detail(user)
