class PhysioDataError(Exception):
    """Base class for everything that aborts a conversion."""


class FormatError(PhysioDataError, ValueError):
    """Input does not parse into the expected tabular shape."""


class SchemaError(PhysioDataError, ValueError):
    """Epoch rows do not share one column layout."""


class ValidationError(PhysioDataError, ValueError):
    """A semantic constraint is violated (lengths, times, rates)."""
