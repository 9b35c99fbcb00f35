"""Custom exceptions for ganttblock."""


class GanttBlockError(Exception):
    """Base exception for all ganttblock errors."""

    pass


class ParseError(GanttBlockError):
    """Raised when schedule text cannot be parsed."""

    pass


class GanttSyntaxError(ParseError):
    """Raised when a line or field does not follow the schedule grammar."""

    pass


class InvalidDateError(GanttSyntaxError):
    """Raised when an absolute date literal cannot be parsed."""

    pass


class DuplicateKeyError(ParseError):
    """Raised when a task or milestone ID is already defined."""

    pass


class ReferenceNotFoundError(ParseError):
    """Raised when a referenced task or milestone ID is not defined (yet)."""

    pass


class UnknownUnitError(ParseError):
    """Raised when a duration ends with an unrecognized unit."""

    pass


class UnknownEventTypeError(ParseError):
    """Raised when a click line uses an unsupported event type."""

    pass


class ValidationError(GanttBlockError):
    """Raised when a parsed schedule fails validation at layout time."""

    pass


class InvalidURLError(ValidationError):
    """Raised when a click action URL matches neither accepted shape."""

    pass


class InvalidOptionError(ValidationError):
    """Raised when a render option value cannot be interpreted."""

    pass


class ConfigError(GanttBlockError):
    """Raised when the configuration file is missing or invalid."""

    pass
