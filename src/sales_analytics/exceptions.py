class AnalyticsError(Exception):
    """Base class for failures raised by the analytics pass."""


class InvalidOrderError(AnalyticsError, ValueError):
    """An order record could not be parsed or violates its invariants."""


class EmptyOrdersError(AnalyticsError, ValueError):
    """A computation that divides by the order count or revenue got no orders."""


class EmptySeriesError(AnalyticsError, ValueError):
    """A moving average was requested over an empty monthly series."""


class DegenerateInputError(AnalyticsError, ArithmeticError):
    """Least squares fit over points that share a single x value."""


class InvalidConfigError(AnalyticsError, ValueError):
    """A window, horizon or ranking size is outside its valid range."""
