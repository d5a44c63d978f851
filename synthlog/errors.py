"""Exception hierarchy for the access-log generator."""


class GeneratorError(Exception):
    """Base class for every error raised by synthlog."""


class ConfigurationError(GeneratorError):
    """Malformed configuration; raised before any record is generated."""


class InvalidRange(ConfigurationError, ValueError):
    """Raised when a random source is asked for a draw in an empty range."""


class EmptyChoiceSet(ConfigurationError):
    """Raised when a chooser is built from no choices."""


class NonPositiveWeight(ConfigurationError):
    """Raised when a weighted choice carries a weight <= 0."""


class DrawError(GeneratorError):
    """A single draw failed. Recoverable under the lenient error policies."""


class EntropyUnavailable(DrawError):
    """The OS entropy pool could not supply random bytes."""


class SinkError(GeneratorError):
    """Writing a record to the output sink failed."""
