"""phenobias — Bias correction for associations with probabilistic phenotypes.

Corrects regression coefficients estimated with a continuous
probabilistic phenotype score (e.g. an EHR-derived case probability)
as the outcome.  The score regression slope is rescaled by the
difference between the mean score of true cases and true controls,
either supplied by the user or estimated from trimmed means after
dichotomising the score at a cutpoint with known sensitivity and
specificity, and then mapped onto the identity, log or logit scale.

Public API:
    .. autosummary::
        bias_adjust_known
        bias_adjust_unknown
        adjust_known_means
        adjust_unknown_means
        apply_bias_correction
        dichotomize
        estimate_trim_counts
        estimate_class_means
        resolve_link
        print_correction_table
        get_fitter
        set_fitter
        LinearModelFitter
        OLSFitter
        GEEFitter
        register_fitter
        resolve_fitter
        BiasCorrectionResult
        TrimCounts
        ClassMeans
        PhenoBiasError
        ConfigurationError
        NumericalError
        DimensionError
        FittingError
"""

from ._config import get_fitter, set_fitter
from ._results import BiasCorrectionResult
from .correction import (
    adjust_known_means,
    adjust_unknown_means,
    apply_bias_correction,
    bias_adjust_known,
    bias_adjust_unknown,
)
from .display import print_correction_table
from .exceptions import (
    ConfigurationError,
    DimensionError,
    FittingError,
    NumericalError,
    PhenoBiasError,
)
from .fitters import (
    GEEFitter,
    LinearModelFitter,
    OLSFitter,
    register_fitter,
    resolve_fitter,
)
from .links import resolve_link
from .misclassification import (
    ClassMeans,
    TrimCounts,
    dichotomize,
    estimate_class_means,
    estimate_trim_counts,
)

__all__ = [
    "BiasCorrectionResult",
    "ClassMeans",
    "TrimCounts",
    "bias_adjust_known",
    "bias_adjust_unknown",
    "adjust_known_means",
    "adjust_unknown_means",
    "apply_bias_correction",
    "dichotomize",
    "estimate_trim_counts",
    "estimate_class_means",
    "resolve_link",
    "print_correction_table",
    "get_fitter",
    "set_fitter",
    "LinearModelFitter",
    "OLSFitter",
    "GEEFitter",
    "register_fitter",
    "resolve_fitter",
    "PhenoBiasError",
    "ConfigurationError",
    "NumericalError",
    "DimensionError",
    "FittingError",
]

__version__ = "0.1.0"
