class ConsentStringError(Exception):
    """Base class for every error raised by consent_string."""


class InvalidArgumentError(ConsentStringError, ValueError):
    """A call received an argument it cannot accept (empty input, id out of range)."""


class MissingFieldError(InvalidArgumentError):
    """A required builder field was never set."""


class MalformedConsentError(InvalidArgumentError):
    """Input bytes or text do not form a well-formed consent string."""


class ConsentCreateError(ConsentStringError):
    """Builder values are well-typed but break a consent string rule."""


class UnsupportedVersionError(ConsentStringError):
    def __init__(self, version: int):
        super().__init__(f"Unsupported version: {version}")
        self.version = version


class OutOfRangeError(ConsentStringError, IndexError):
    """Bit access past the end of a BitBuffer."""
