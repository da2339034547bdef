class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when the access policy denies an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ConfigurationError(DomainError):
    """Malformed rate configuration, rejected at construction."""


class ScheduleConfigurationError(ConfigurationError):
    """Overlapping or otherwise invalid Schedule/Period/TimeRange definitions."""


class DuplicateEntryError(DomainError):
    """An open (PENDING) time entry already exists for the employee and day."""


class NoOpenEntryError(DomainError):
    """Clock-out attempted without an open time entry."""


class InvalidRangeError(DomainError):
    """Clock-out at or before clock-in on a manual correction."""


class ImmutableStateError(DomainError):
    """Edit attempted on a record that is no longer pending."""


class AlreadyDecidedError(DomainError):
    """Approval attempted on a record already in a terminal state."""
