"""Exceptions raised by the Bloom filter and its binary codec."""


class BloomError(Exception):
    """Base class for all bloomers errors."""


class InvalidArgument(BloomError, ValueError):
    """Raised when a filter is constructed from out-of-range parameters.

    Attributes:
        name: The offending parameter name
        value: The rejected value
    """

    def __init__(self, name: str, value: object, message: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"{message}: {value}")


class FormatError(BloomError, ValueError):
    """Raised when a serialized filter cannot be read or written."""
