"""
switchyard Python SDK - flag evaluation and analytics event delivery.

Usage:
    from switchyard import Config, EventProcessor, FeatureRequestEvent, Flag, UserContext, Variation

    flag = Flag(key="my-feature", salt="x1", variations=[Variation(True, 50), Variation(False, 50)])
    value = flag.evaluate(UserContext(key="user-123"))

    async with EventProcessor(Config(sdk_key="your-sdk-key")) as processor:
        processor.submit(FeatureRequestEvent(key="my-feature", user=user, value=value))
"""

from switchyard.config import Config
from switchyard.user import UserContext
from switchyard.flag import (
    BUCKET_HASH_VERSION,
    Flag,
    TargetingRule,
    Variation,
    bucket_user,
    evaluate,
    evaluate_detail,
)
from switchyard.reasons import (
    EvaluationReason,
    EvaluationDetail,
    EvaluationReasonKind,
    EvaluationErrorKind,
)
from switchyard.events import Event, FeatureRequestEvent, CustomEvent, IdentifyEvent
from switchyard.event_processor import EventProcessor, EventQueue
from switchyard.errors import (
    SwitchyardError,
    AuthenticationError,
    NetworkError,
    RateLimitError,
    ValidationError,
    NotFoundError,
    InternalError,
    ErrorCategory,
)
from switchyard.version import __version__

__all__ = [
    # Config
    "Config",
    # Evaluation
    "UserContext",
    "Flag",
    "TargetingRule",
    "Variation",
    "BUCKET_HASH_VERSION",
    "bucket_user",
    "evaluate",
    "evaluate_detail",
    # Reasons
    "EvaluationReason",
    "EvaluationDetail",
    "EvaluationReasonKind",
    "EvaluationErrorKind",
    # Events
    "Event",
    "FeatureRequestEvent",
    "CustomEvent",
    "IdentifyEvent",
    "EventProcessor",
    "EventQueue",
    # Errors
    "SwitchyardError",
    "AuthenticationError",
    "NetworkError",
    "RateLimitError",
    "ValidationError",
    "NotFoundError",
    "InternalError",
    "ErrorCategory",
]
