"""Fail-fast field validation for user sign-up records."""

from signup_validation.config import SignUpRuleConfig
from signup_validation.events import (
    ObservableMixin,
    ValidationEvent,
    ValidationEventType,
    ValidationObserver,
)
from signup_validation.observers import LoggingObserver, TraceObserver
from signup_validation.process_log import RuleEntry, ValidationTrace
from signup_validation.protocols import LookupStore, Rule
from signup_validation.records import SignUpRecord
from signup_validation.results import (
    Failure,
    Result,
    Success,
    ValidationFailure,
    failure,
    failure_from,
)
from signup_validation.rich_observers import RichSummaryObserver, SimpleProgressObserver
from signup_validation.rules import (
    EmailUniquenessRule,
    is_email_in_use,
    is_email_valid,
    is_password_long_enough,
    is_password_not_too_long,
    is_username_long_enough,
    is_username_not_too_long,
    make_sign_up_validator,
)
from signup_validation.runner import RowResult, RunnerStats, ValidationRunner
from signup_validation.validators import (
    BaseRule,
    FunctionRule,
    SequentialValidator,
    ValidatorPipelineBuilder,
    build,
)

__all__ = [
    # Results
    "Failure",
    "Result",
    "Success",
    "ValidationFailure",
    "failure",
    "failure_from",
    # Records and configuration
    "SignUpRecord",
    "SignUpRuleConfig",
    # Protocols
    "LookupStore",
    "Rule",
    # Combinator
    "BaseRule",
    "FunctionRule",
    "SequentialValidator",
    "ValidatorPipelineBuilder",
    "build",
    # Sign-up rules
    "EmailUniquenessRule",
    "is_email_in_use",
    "is_email_valid",
    "is_password_long_enough",
    "is_password_not_too_long",
    "is_username_long_enough",
    "is_username_not_too_long",
    "make_sign_up_validator",
    # Observer pattern
    "ObservableMixin",
    "ValidationEvent",
    "ValidationEventType",
    "ValidationObserver",
    "LoggingObserver",
    "TraceObserver",
    "RuleEntry",
    "ValidationTrace",
    # Batch runner
    "RowResult",
    "RunnerStats",
    "ValidationRunner",
    # Rich observers
    "RichSummaryObserver",
    "SimpleProgressObserver",
]

__version__ = "0.1.0"
