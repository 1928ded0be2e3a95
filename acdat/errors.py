"""Errors raised while reading DAT archives."""


class DatError(Exception):
    """Base class for all archive read failures."""


class TruncatedInputError(DatError, EOFError):
    """Fewer bytes were available than the structure requires."""


class InvalidChainError(DatError):
    """A sector chain points outside the archive or cannot make progress."""


class MalformedTreeError(DatError):
    """A directory node violates the fixed-fanout layout."""


class CorruptHeaderError(MalformedTreeError):
    """A directory node header is internally inconsistent."""


class CycleOrTooDeepError(DatError):
    """The directory walk revisited an offset or exceeded the depth guard."""


class UnsupportedFormError(DatError):
    """An asset payload carries a form discriminant with no known layout."""

    def __init__(self, form: int):
        super().__init__(f"Unsupported asset form: {form}")
        self.form = form
