"""Exceptions raised by the multilingual OCR service."""


class MultilingualOCRError(Exception):
    """Base class for all service errors."""
    pass


class InvalidInputError(MultilingualOCRError, ValueError):
    """A precondition on the call arguments failed before any engine work."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class RuntimeUnavailableError(MultilingualOCRError, RuntimeError):
    """The OCR runtime or its language models could not be made available."""
    pass


class ConfidenceCoercionError(MultilingualOCRError, ValueError):
    """An engine value could not be converted to a float."""
    pass


class ServiceClosedError(MultilingualOCRError, RuntimeError):
    """The service was used after aclose()."""
    pass
