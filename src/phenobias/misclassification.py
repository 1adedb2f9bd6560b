"""Dichotomisation and misclassification-adjusted class means.

When the mean phenotype scores of true cases (μ₁) and true controls
(μ₀) are unknown, they are estimated from the score distribution
itself.  The score is dichotomised at a proposed cutpoint p*,

    Ŷᵢ = 1{pᵢ > p*},

and the known sensitivity S and specificity C of that dichotomisation
are used to work out how many observed "controls" are really
misclassified cases, and vice versa.

Estimated trim counts
---------------------
With N observations and n₀ = #{Ŷ = 0}, the estimated number of true
controls is

    N̂D = (n₀ − C·N) / (1 − S − C),

which is undefined when S + C = 1.  From it,

    rank0cut = (1 − C) · (N − N̂D)     misclassified cases among Ŷ = 0
    rank1cut = (1 − S) · N̂D           misclassified controls among Ŷ = 1

The counts are not clamped to ``[0, group size]``: inconsistent
S/C/p* inputs yield negative or oversized counts, which are passed
through unchanged (with a ``UserWarning``).

Trimmed class means
-------------------
Within each observed group the scores are ranked (average ranks for
ties, as ``scipy.stats.rankdata(method="average")`` and R's ``rank``
both do), then

    μ̂₁* = mean{ pᵢ ∈ P₁ : rank ≤ |P₁| − rank1cut }   (NaN ignored)
    μ̂₀* = mean{ pᵢ ∈ P₀ : rank > rank0cut }

i.e. the ``rank1cut`` highest observed-case scores and the
``rank0cut`` lowest observed-control scores are dropped.  Ranks are
fractional under ties and are compared against fractional cut
thresholds.  An empty trimmed group yields NaN rather than raising.

The case-side comparison is non-strict: when ``|P₁| − rank1cut`` is
itself an attained rank, that observation is kept, so exactly the
``rank1cut`` highest scores are dropped and S = C = 1 reduces to the
plain group mean.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass

import numpy as np
from scipy import stats

from .exceptions import NumericalError

logger = logging.getLogger(__name__)

# S + C within this distance of 1 is treated as the degenerate case, so
# decimal inputs such as 0.7 and 0.3 are caught despite rounding.
_SUM_TOL = 1e-12


def dichotomize(p: np.ndarray, pstar: float) -> np.ndarray:
    """Threshold the phenotype score at *pstar*.

    Returns:
        Integer array ``hatY`` with ``hatY[i] = 1`` iff
        ``p[i] > pstar``.  NaN scores compare false and are
        classified as controls.
    """
    return (np.asarray(p, dtype=float) > pstar).astype(int)


@dataclass(frozen=True)
class TrimCounts:
    """Misclassification-based trim counts for the observed groups."""

    true_controls: float
    """Estimated number of true controls in the sample (N̂D)."""

    rank0cut: float
    """Number of lowest-ranked observed controls to drop."""

    rank1cut: float
    """Number of highest-ranked observed cases to drop."""

    n_observed_controls: int
    n_observed_cases: int


def estimate_trim_counts(
    hatY: np.ndarray,
    sensitivity: float,
    specificity: float,
) -> TrimCounts:
    """Estimate the true-control count and the two trim counts.

    Args:
        hatY: Dichotomised phenotype from :func:`dichotomize`.
        sensitivity: Sensitivity S of the dichotomisation.
        specificity: Specificity C of the dichotomisation.

    Returns:
        A :class:`TrimCounts` with unclamped values.

    Raises:
        NumericalError: If ``S + C == 1``.
    """
    hatY = np.asarray(hatY)
    n = int(hatY.shape[0])
    n_controls = int(np.sum(hatY == 0))
    n_cases = int(np.sum(hatY == 1))

    if np.isclose(sensitivity + specificity, 1.0, rtol=0.0, atol=_SUM_TOL):
        raise NumericalError(
            f"Sensitivity ({sensitivity}) and specificity ({specificity}) "
            f"sum to 1; the true-control estimate divides by 1 - S - C."
        )

    true_controls = (n_controls - specificity * n) / (1.0 - sensitivity - specificity)
    rank0cut = (1.0 - specificity) * (n - true_controls)
    rank1cut = (1.0 - sensitivity) * true_controls

    logger.debug(
        "Trim counts: N=%d, n0=%d, n1=%d, trueND=%.4f, rank0cut=%.4f, rank1cut=%.4f",
        n,
        n_controls,
        n_cases,
        true_controls,
        rank0cut,
        rank1cut,
    )

    if rank0cut < 0 or rank0cut > n_controls:
        warnings.warn(
            f"Estimated control trim count {rank0cut:.3f} lies outside "
            f"[0, {n_controls}]; sensitivity, specificity and cutpoint "
            f"may be inconsistent with the data.",
            UserWarning,
            stacklevel=2,
        )
    if rank1cut < 0 or rank1cut > n_cases:
        warnings.warn(
            f"Estimated case trim count {rank1cut:.3f} lies outside "
            f"[0, {n_cases}]; sensitivity, specificity and cutpoint "
            f"may be inconsistent with the data.",
            UserWarning,
            stacklevel=2,
        )

    return TrimCounts(
        true_controls=float(true_controls),
        rank0cut=float(rank0cut),
        rank1cut=float(rank1cut),
        n_observed_controls=n_controls,
        n_observed_cases=n_cases,
    )


@dataclass(frozen=True)
class ClassMeans:
    """Estimated mean phenotype score of true controls and true cases."""

    mu0: float
    mu1: float
    n_controls_used: int
    n_cases_used: int

    @property
    def difference(self) -> float:
        """``mu1 - mu0``, the correction denominator."""
        return self.mu1 - self.mu0


def _average_ranks(values: np.ndarray) -> np.ndarray:
    """Ascending ranks, ties sharing the mean of the ranks they span."""
    if values.size == 0:
        return np.empty(0, dtype=float)
    return np.asarray(stats.rankdata(values, method="average"), dtype=float)


def estimate_class_means(
    p: np.ndarray,
    hatY: np.ndarray,
    trim: TrimCounts,
) -> ClassMeans:
    """Trimmed means of the observed case and control groups.

    Args:
        p: Phenotype scores, shape ``(n,)``.
        hatY: Dichotomised phenotype, shape ``(n,)``.
        trim: Trim counts from :func:`estimate_trim_counts`.

    Returns:
        A :class:`ClassMeans`; either mean is NaN when its trimmed
        group is empty.
    """
    p = np.asarray(p, dtype=float)
    hatY = np.asarray(hatY)
    cases = p[hatY == 1]
    controls = p[hatY == 0]

    keep_cases = _average_ranks(cases) <= cases.size - trim.rank1cut
    keep_controls = _average_ranks(controls) > trim.rank0cut
    kept_cases = cases[keep_cases]
    kept_controls = controls[keep_controls]

    with warnings.catch_warnings():
        # Mean of an empty slice is NaN by definition here.
        warnings.filterwarnings("ignore", category=RuntimeWarning)
        mu1 = float(np.nanmean(kept_cases))
        mu0 = float(np.mean(kept_controls))

    logger.debug(
        "Class means: mu0*=%.6f from %d controls, mu1*=%.6f from %d cases",
        mu0,
        kept_controls.size,
        mu1,
        kept_cases.size,
    )
    return ClassMeans(
        mu0=mu0,
        mu1=mu1,
        n_controls_used=int(kept_controls.size),
        n_cases_used=int(kept_cases.size),
    )
