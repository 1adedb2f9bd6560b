"""Bias correction for associations estimated with probabilistic phenotypes.

A probabilistic phenotype pᵢ (e.g. an EHR-derived probability that
subject i is a case) is often used directly as the outcome of a
regression on a covariate X and confounder W:

    E[p | X, W] = β₀ + β_X X + β_W W.

If pᵢ is an imperfect proxy for true case status Yᵢ, with class-
conditional means μ₁ = E[p | Y = 1] and μ₀ = E[p | Y = 0], then

    E[p | X, W] = μ₀ + (μ₁ − μ₀) · P(Y = 1 | X, W),

so the slopes of the score regression are the risk-difference slopes
attenuated by the factor (μ₁ − μ₀).  Dividing by that factor removes
the bias, and dividing further by a prevalence term (see ``links.py``)
moves the estimate onto the log or logit scale.

Two entry points cover the two operating conditions:

* :func:`bias_adjust_known` — μ₀ and μ₁ are known.
* :func:`bias_adjust_unknown` — μ₀ and μ₁ are estimated by trimmed
  means of the score after dichotomising it at a cutpoint with known
  sensitivity and specificity (see ``misclassification.py``).

Both return the corrected association vector (intercept dropped).
:func:`adjust_known_means` and :func:`adjust_unknown_means` run the
same pipelines but return a :class:`~phenobias.BiasCorrectionResult`
carrying every intermediate quantity.

The pipeline is permissive.  Only an unsupported link, S + C = 1, a
zero denominator, misaligned inputs and fitter failures are rejected;
out-of-range S, C, p*, μ₀ or μ₁ produce computed (possibly NaN) output.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from ._compat import _ensure_1d_array, _vector_name
from ._results import BiasCorrectionResult
from .exceptions import DimensionError, NumericalError
from .fitters import LinearModelFitter, resolve_fitter
from .links import link_scale, resolve_link
from .misclassification import dichotomize, estimate_class_means, estimate_trim_counts

if TYPE_CHECKING:
    from ._compat import SeriesLike

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------ #
# Input validation
# ------------------------------------------------------------------ #


def _validate_inputs(
    p: SeriesLike,
    X: SeriesLike,
    W: SeriesLike,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, list[str]]:
    """Coerce the three vectors to float arrays and check alignment.

    Returns:
        ``(p, X, W, predictor_names)``.

    Raises:
        DimensionError: If any vector is empty, not 1-D, or their
            lengths differ.
    """
    p_arr = _ensure_1d_array(p, name="p")
    X_arr = _ensure_1d_array(X, name="X")
    W_arr = _ensure_1d_array(W, name="W")

    if p_arr.shape[0] == 0:
        raise DimensionError("'p' must contain at least one observation.")
    lengths = {"p": p_arr.shape[0], "X": X_arr.shape[0], "W": W_arr.shape[0]}
    if len(set(lengths.values())) != 1:
        detail = ", ".join(f"{k}={v}" for k, v in lengths.items())
        raise DimensionError(f"p, X and W must have the same length ({detail}).")

    names = [_vector_name(X, "X"), _vector_name(W, "W")]
    return p_arr, X_arr, W_arr, names


def _fit_coefficients(
    fitter: LinearModelFitter,
    p: np.ndarray,
    X: np.ndarray,
    W: np.ndarray,
) -> np.ndarray:
    """Regress *p* on ``[X, W]`` and check the coefficient vector shape."""
    beta = np.asarray(fitter.fit(p, [X, W]), dtype=float).ravel()
    if beta.shape != (3,):
        raise DimensionError(
            f"Fitter {fitter.name!r} returned {beta.shape[0]} coefficients; "
            f"expected 3 (intercept, X, W)."
        )
    return beta


def _prevalence(p: np.ndarray) -> float:
    """Estimated prevalence, ``sum(p) / N``."""
    return float(np.sum(p) / p.shape[0])


# ------------------------------------------------------------------ #
# BiasCorrector
# ------------------------------------------------------------------ #


def apply_bias_correction(
    beta: np.ndarray,
    denominator: float,
    link: str,
    p: np.ndarray,
) -> np.ndarray:
    """Rescale fitted coefficients and drop the intercept.

    Computes ``β* = β / D``, divides by the link-specific prevalence
    term (see :mod:`phenobias.links`) and returns ``β*[1:]``.

    Args:
        beta: Fitted coefficients ``[intercept, X, W]``.
        denominator: ``mu1 - mu0``.  NaN propagates into the output.
        link: ``"identity"``, ``"log"`` or ``"logit"``.
        p: Phenotype scores, used for the prevalence.

    Raises:
        ConfigurationError: If *link* is unsupported.
        NumericalError: If *denominator* is exactly zero.
    """
    link = resolve_link(link)
    if denominator == 0:
        raise NumericalError(
            "Case and control mean phenotype scores are equal (mu1 - mu0 = 0); "
            "the correction is undefined."
        )
    betastar = np.asarray(beta, dtype=float) / denominator
    prevalence = _prevalence(np.asarray(p, dtype=float))
    betastar = betastar / link_scale(link, prevalence)
    return betastar[1:]


# ------------------------------------------------------------------ #
# Entry points
# ------------------------------------------------------------------ #


def adjust_known_means(
    p: SeriesLike,
    X: SeriesLike,
    W: SeriesLike,
    mu0: float,
    mu1: float,
    link: str = "identity",
    *,
    fitter: str | LinearModelFitter | None = None,
) -> BiasCorrectionResult:
    """Bias correction with known class-conditional mean scores.

    Args:
        p: Probabilistic phenotype, length N.
        X: Covariate of interest, length N.
        W: Confounder, length N.
        mu0: Mean phenotype score among true controls.
        mu1: Mean phenotype score among true cases.
        link: ``"identity"`` (default), ``"log"`` or ``"logit"``.
        fitter: Registered fitter name, fitter instance, or ``None``
            for the configured default.

    Returns:
        A :class:`~phenobias.BiasCorrectionResult`.

    Raises:
        ConfigurationError: Unsupported *link*.
        DimensionError: Empty or misaligned inputs.
        NumericalError: ``mu1 == mu0``.
        FittingError: Rank-deficient design (built-in fitters).
    """
    link = resolve_link(link)
    p_arr, X_arr, W_arr, names = _validate_inputs(p, X, W)
    model = resolve_fitter(fitter)

    beta = _fit_coefficients(model, p_arr, X_arr, W_arr)
    denominator = mu1 - mu0
    corrected = apply_bias_correction(beta, denominator, link, p_arr)
    logger.debug(
        "Known-means correction (%s link, %s fitter): D=%.6f, corrected=%s",
        link,
        model.name,
        denominator,
        corrected,
    )

    return BiasCorrectionResult(
        corrected_coefs=corrected,
        fitted_coefs=beta,
        predictor_names=names,
        method="known",
        link=link,
        denominator=float(denominator),
        mu0=float(mu0),
        mu1=float(mu1),
        prevalence=_prevalence(p_arr),
        n_observations=int(p_arr.shape[0]),
        fitter=model.name,
    )


def adjust_unknown_means(
    p: SeriesLike,
    X: SeriesLike,
    W: SeriesLike,
    S: float,
    C: float,
    pstar: float,
    link: str = "identity",
    *,
    fitter: str | LinearModelFitter | None = None,
) -> BiasCorrectionResult:
    """Bias correction with class-conditional means estimated from *p*.

    The score is dichotomised at *pstar*; the sensitivity *S* and
    specificity *C* of that dichotomisation determine how many
    observations to trim from each observed group before averaging.

    Args:
        p: Probabilistic phenotype, length N.
        X: Covariate of interest, length N.
        W: Confounder, length N.
        S: Sensitivity of ``p > pstar`` for true case status.
        C: Specificity of ``p > pstar`` for true case status.
        pstar: Dichotomisation cutpoint.
        link: ``"identity"`` (default), ``"log"`` or ``"logit"``.
        fitter: Registered fitter name, fitter instance, or ``None``
            for the configured default.

    Returns:
        A :class:`~phenobias.BiasCorrectionResult` including the trim
        counts and estimated class means.

    Raises:
        ConfigurationError: Unsupported *link*.
        DimensionError: Empty or misaligned inputs.
        NumericalError: ``S + C == 1``, or equal estimated means.
        FittingError: Rank-deficient design (built-in fitters).
    """
    link = resolve_link(link)
    p_arr, X_arr, W_arr, names = _validate_inputs(p, X, W)
    model = resolve_fitter(fitter)

    hatY = dichotomize(p_arr, pstar)
    beta = _fit_coefficients(model, p_arr, X_arr, W_arr)
    trim = estimate_trim_counts(hatY, S, C)
    means = estimate_class_means(p_arr, hatY, trim)
    denominator = means.difference
    corrected = apply_bias_correction(beta, denominator, link, p_arr)
    logger.debug(
        "Unknown-means correction (%s link, %s fitter): D=%.6f, corrected=%s",
        link,
        model.name,
        denominator,
        corrected,
    )

    return BiasCorrectionResult(
        corrected_coefs=corrected,
        fitted_coefs=beta,
        predictor_names=names,
        method="unknown",
        link=link,
        denominator=float(denominator),
        mu0=means.mu0,
        mu1=means.mu1,
        prevalence=_prevalence(p_arr),
        n_observations=int(p_arr.shape[0]),
        fitter=model.name,
        cutpoint=float(pstar),
        sensitivity=float(S),
        specificity=float(C),
        trim_counts=trim,
        class_means=means,
    )


def bias_adjust_known(
    p: SeriesLike,
    X: SeriesLike,
    W: SeriesLike,
    mu0: float,
    mu1: float,
    link: str = "identity",
    *,
    fitter: str | LinearModelFitter | None = None,
) -> np.ndarray:
    """Corrected associations ``[β*_X, β*_W]`` with known means.

    See :func:`adjust_known_means` for arguments and errors.
    """
    return adjust_known_means(p, X, W, mu0, mu1, link, fitter=fitter).corrected_coefs


def bias_adjust_unknown(
    p: SeriesLike,
    X: SeriesLike,
    W: SeriesLike,
    S: float,
    C: float,
    pstar: float,
    link: str = "identity",
    *,
    fitter: str | LinearModelFitter | None = None,
) -> np.ndarray:
    """Corrected associations ``[β*_X, β*_W]`` with estimated means.

    See :func:`adjust_unknown_means` for arguments and errors.
    """
    return adjust_unknown_means(
        p, X, W, S, C, pstar, link, fitter=fitter
    ).corrected_coefs
