"""
User context for flag targeting.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class UserContext:
    """
    The subject a flag is evaluated against.

    ``key`` drives percentage rollout; a user without a key receives no
    variation. ``country`` is an ISO 3166 alpha-2 code.
    """

    key: Optional[str] = None
    ip: Optional[str] = None
    country: Optional[str] = None
    custom: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.country is not None:
            code = self.country.strip().upper()
            if len(code) != 2 or not code.isalpha():
                raise ValueError(f"country must be an ISO 3166 alpha-2 code, got {self.country!r}")
            object.__setattr__(self, "country", code)

    def get_custom(self, name: str) -> Any:
        """Get a custom attribute value, or None if unset."""
        return self.custom.get(name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {}
        if self.key is not None:
            result["key"] = self.key
        if self.ip is not None:
            result["ip"] = self.ip
        if self.country is not None:
            result["country"] = self.country
        if self.custom:
            result["custom"] = dict(self.custom)
        return result
