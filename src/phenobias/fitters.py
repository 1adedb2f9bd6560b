"""Linear model fitter protocol, implementations and registry.

The bias correction needs exactly one thing from a regression
routine: the point estimates of an intercept-plus-slopes linear model
of the phenotype score on the predictors.  The ``LinearModelFitter``
protocol pins down that contract so the solver can be swapped (or
stubbed in tests) without touching the correction pipeline in
``correction.py``.

Built-in fitters
~~~~~~~~~~~~~~~~
``OLSFitter`` (``"ols"``)
    scikit-learn ``LinearRegression``, which solves the least-squares
    problem with LAPACK (``dgelsd``).  This is the default.

``GEEFitter`` (``"gee"``)
    statsmodels ``GEE`` with a Gaussian family, identity link and an
    independence working correlation, where every observation is its
    own cluster.  This is the estimator the method was published
    with.  With singleton clusters the estimating equations reduce to
    the normal equations, so the point estimates equal OLS:

        Σᵢ xᵢ (pᵢ − xᵢ'β) = 0   ⇔   X'X β = X'p

Both fitters check the design matrix ``[1, X, W]`` for full column
rank before solving and raise :class:`~phenobias.exceptions.FittingError`
when it is rank-deficient.  Least-squares solvers would otherwise
silently return a minimum-norm solution whose individual coefficients
are not identified.

Each fitter is a frozen ``@dataclass`` that carries no state; the
``resolve_fitter`` helper maps a name (or ``None``, meaning the
configured default) to an instance.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np
import statsmodels.api as sm
from sklearn.linear_model import LinearRegression

from ._config import get_fitter
from .exceptions import DimensionError, FittingError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------ #
# LinearModelFitter protocol
# ------------------------------------------------------------------ #


@runtime_checkable
class LinearModelFitter(Protocol):
    """Interface that every linear model fitter must implement.

    Attributes:
        name: Short identifier recorded in result objects (e.g.
            ``"ols"``, ``"gee"``).
    """

    @property
    def name(self) -> str: ...

    def fit(
        self,
        response: np.ndarray,
        predictors: Sequence[np.ndarray] | np.ndarray,
    ) -> np.ndarray:
        """Fit ``response ~ 1 + predictors`` and return the coefficients.

        Args:
            response: Outcome vector of shape ``(n,)``.
            predictors: Either a sequence of ``k`` vectors of length
                ``n`` or an ``(n, k)`` matrix.

        Returns:
            Coefficient vector of shape ``(k + 1,)`` with the
            intercept at index 0, followed by one slope per predictor
            in input order.
        """
        ...


# ------------------------------------------------------------------ #
# Design-matrix preparation
# ------------------------------------------------------------------ #


def _predictor_matrix(
    response: np.ndarray,
    predictors: Sequence[np.ndarray] | np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Stack *predictors* column-wise and validate the full design.

    Returns:
        ``(y, Z)`` — the response as a float vector of shape ``(n,)``
        and the predictor matrix of shape ``(n, k)`` (no intercept
        column).

    Raises:
        DimensionError: If the predictors are not aligned with the
            response.
        FittingError: If any value is non-finite, or the design matrix
            with its intercept column is rank-deficient.
    """
    y = np.asarray(response, dtype=float).ravel()
    if isinstance(predictors, np.ndarray) and predictors.ndim == 2:
        Z = np.asarray(predictors, dtype=float)
    else:
        Z = np.column_stack([np.asarray(v, dtype=float).ravel() for v in predictors])

    n = y.shape[0]
    if Z.shape[0] != n:
        raise DimensionError(
            f"Predictors have {Z.shape[0]} rows but the response has {n}."
        )
    if not (np.all(np.isfinite(y)) and np.all(np.isfinite(Z))):
        raise FittingError("Response and predictors must be finite to fit.")

    design = np.column_stack([np.ones(n), Z])  # shape: (n, k + 1)
    rank = int(np.linalg.matrix_rank(design))
    if rank < design.shape[1]:
        raise FittingError(
            f"Design matrix is rank-deficient (rank {rank} < "
            f"{design.shape[1]} columns); the coefficients are not "
            f"identified.  Check for constant or collinear predictors "
            f"and for fewer observations than coefficients."
        )
    return y, Z


# ------------------------------------------------------------------ #
# Built-in fitters
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class OLSFitter:
    """Ordinary least squares via scikit-learn ``LinearRegression``."""

    @property
    def name(self) -> str:
        return "ols"

    def fit(
        self,
        response: np.ndarray,
        predictors: Sequence[np.ndarray] | np.ndarray,
    ) -> np.ndarray:
        """Fit by least squares and return ``[β₀, β₁, …, βₖ]``."""
        y, Z = _predictor_matrix(response, predictors)
        model = LinearRegression(fit_intercept=True)
        model.fit(Z, y)
        coefs = np.concatenate([[model.intercept_], np.ravel(model.coef_)])
        logger.debug("OLS coefficients: %s", coefs)
        return coefs  # shape: (k + 1,)


@dataclass(frozen=True)
class GEEFitter:
    """Gaussian GEE with one observation per cluster.

    Estimating-equations fit with an identity link,
    Gaussian variance, independence working correlation and
    ``groups = 0, 1, …, n − 1``.  Only the point estimates are used;
    the sandwich covariance that GEE also computes is discarded.
    """

    @property
    def name(self) -> str:
        return "gee"

    def fit(
        self,
        response: np.ndarray,
        predictors: Sequence[np.ndarray] | np.ndarray,
    ) -> np.ndarray:
        """Fit the independence GEE and return ``[β₀, β₁, …, βₖ]``."""
        y, Z = _predictor_matrix(response, predictors)
        exog = sm.add_constant(Z, has_constant="add")
        groups = np.arange(y.shape[0])
        model = sm.GEE(
            y,
            exog,
            groups=groups,
            family=sm.families.Gaussian(),
            cov_struct=sm.cov_struct.Independence(),
        )
        with warnings.catch_warnings():
            # Singleton clusters make the robust covariance degenerate
            # in tiny samples; the point estimates are unaffected.
            warnings.filterwarnings("ignore", category=RuntimeWarning)
            result = model.fit()
        coefs = np.asarray(result.params, dtype=float)
        logger.debug("GEE coefficients: %s", coefs)
        return coefs  # shape: (k + 1,)


# ------------------------------------------------------------------ #
# Fitter resolution
# ------------------------------------------------------------------ #

_FITTERS: dict[str, type] = {}
"""Registry mapping fitter name strings to concrete fitter classes."""


def register_fitter(name: str, cls: type) -> None:
    """Register a concrete ``LinearModelFitter`` class under *name*.

    Args:
        name: Lookup key (e.g. ``"ols"``, ``"gee"``); stored lowercased.
        cls: A zero-argument-constructible class implementing the
            ``LinearModelFitter`` protocol.

    Raises:
        TypeError: If *cls* does not satisfy the protocol.
    """
    try:
        instance = cls()
    except Exception:  # noqa: BLE001
        msg = f"{cls!r} could not be instantiated for protocol check."
        raise TypeError(msg) from None
    if not isinstance(instance, LinearModelFitter):
        msg = f"{cls!r} does not implement the LinearModelFitter protocol."
        raise TypeError(msg)
    _FITTERS[name.strip().lower()] = cls


def resolve_fitter(fitter: str | LinearModelFitter | None = None) -> LinearModelFitter:
    """Resolve a fitter name or instance to a ``LinearModelFitter``.

    Instances are returned as-is, which is how tests inject stub
    solvers.  ``None`` means the configured default (see
    :func:`~phenobias.get_fitter`).  Names are case-insensitive.

    Raises:
        ValueError: If *fitter* is a string that is not registered.
        TypeError: If *fitter* is neither a string nor a fitter.
    """
    if isinstance(fitter, LinearModelFitter):
        return fitter
    if fitter is None:
        fitter = get_fitter()
    if not isinstance(fitter, str):
        msg = (
            "fitter must be a registered name or a LinearModelFitter, "
            f"got {type(fitter).__name__}."
        )
        raise TypeError(msg)
    key = fitter.strip().lower()
    if key not in _FITTERS:
        available = ", ".join(sorted(_FITTERS)) or "(none registered)"
        msg = f"Unknown fitter {fitter!r}.  Available fitters: {available}."
        raise ValueError(msg)
    instance: LinearModelFitter = _FITTERS[key]()
    return instance


register_fitter("ols", OLSFitter)
register_fitter("gee", GEEFitter)
