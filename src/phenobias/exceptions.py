"""Exception types raised by the phenobias package.

Every error derives from :class:`PhenoBiasError` so callers can catch
the package's failures in one clause, and additionally from the
closest built-in so existing ``except ValueError`` handlers keep
working.
"""

from __future__ import annotations


class PhenoBiasError(Exception):
    """Base class for all phenobias errors."""


class ConfigurationError(PhenoBiasError, ValueError):
    """An option (e.g. the link function) has an unsupported value."""


class NumericalError(PhenoBiasError, ArithmeticError):
    """A correction quantity is undefined because of a zero divisor.

    Raised when sensitivity and specificity sum to one (the
    true-control estimator divides by ``1 - S - C``) or when the
    case/control mean difference is exactly zero.
    """


class DimensionError(PhenoBiasError, ValueError):
    """Input vectors are empty, not one-dimensional, or misaligned."""


class FittingError(PhenoBiasError, RuntimeError):
    """The linear model could not be fitted (rank-deficient design)."""
