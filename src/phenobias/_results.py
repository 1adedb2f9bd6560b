"""Typed result object for bias-corrected associations.

A frozen dataclass that provides:

* **Attribute access** — ``result.corrected_coefs``, ``result.link``.
* **Dict-like access** — ``result["link"]``, ``result.get("key")``,
  ``"key" in result`` for consumers that prefer bracket syntax.
* **Serialisation** — ``.to_dict()`` returns a plain ``dict[str, Any]``
  with all NumPy types and nested dataclasses converted to native
  Python.

The result is frozen (immutable after construction): it is a snapshot
of one completed correction.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar

import numpy as np
import pandas as pd

from .misclassification import ClassMeans, TrimCounts

# ------------------------------------------------------------------ #
# Serialisation helper
# ------------------------------------------------------------------ #


def _numpy_to_python(obj: Any) -> Any:
    """Recursively convert NumPy scalars/arrays to Python-native types.

    Handles nested dicts, lists, np.ndarray, np.integer, and
    np.floating so that :meth:`to_dict` returns a fully
    JSON-serialisable structure.
    """
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer, np.bool_)):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, dict):
        return {k: _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        converted = [_numpy_to_python(item) for item in obj]
        return type(obj)(converted)
    return obj


def _dataclass_or_none(obj: TrimCounts | ClassMeans | None) -> dict[str, Any] | None:
    return None if obj is None else asdict(obj)


# ------------------------------------------------------------------ #
# Dict-compatibility mixin
# ------------------------------------------------------------------ #


class _DictAccessMixin:
    """Dict-like access convenience for result dataclasses.

    Supports three access patterns:

    1. ``result["key"]``     — raises ``KeyError`` on miss
    2. ``result.get(key, d)`` — returns *d* on miss (default ``None``)
    3. ``"key" in result``   — membership test

    Subclasses may override ``_SERIALIZERS`` to register conversion
    functions for non-primitive fields.  Serializers compose with
    :func:`_numpy_to_python`.
    """

    _SERIALIZERS: ClassVar[dict[str, Any]] = {
        "trim_counts": _dataclass_or_none,
        "class_means": _dataclass_or_none,
    }

    def __getitem__(self, key: str) -> Any:
        """Attribute lookup via bracket syntax."""
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        """Attribute lookup with a fallback default."""
        return getattr(self, key, default)

    def __contains__(self, key: object) -> bool:
        """Membership test: ``"key" in result``."""
        if not isinstance(key, str):
            return False
        return hasattr(self, key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary.

        Applies per-field serializers from ``_SERIALIZERS``, then runs
        :func:`_numpy_to_python` on every value so the returned dict
        is fully JSON-serialisable.
        """
        result: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            val = getattr(self, f.name)
            if f.name in self._SERIALIZERS:
                val = self._SERIALIZERS[f.name](val)
            result[f.name] = _numpy_to_python(val)
        return result


# ------------------------------------------------------------------ #
# BiasCorrectionResult
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class BiasCorrectionResult(_DictAccessMixin):
    """Result of one bias correction.

    Returned by :func:`~phenobias.adjust_known_means` and
    :func:`~phenobias.adjust_unknown_means`.  The unknown-means fields
    (``cutpoint`` onwards) are ``None`` for the known-means path.
    """

    # ---- Coefficients ----------------------------------------------
    corrected_coefs: np.ndarray
    """Bias-corrected associations, one per predictor (no intercept)."""

    fitted_coefs: np.ndarray
    """Uncorrected fit ``[intercept, X, W]`` from the linear model."""

    predictor_names: list[str]
    """Labels of the predictors, in coefficient order."""

    # ---- Correction --------------------------------------------------
    method: str
    """``"known"`` or ``"unknown"`` class-conditional means."""

    link: str
    """Canonical link name (``"identity"``, ``"log"``, ``"logit"``)."""

    denominator: float
    """``mu1 - mu0`` used to rescale the fitted coefficients."""

    mu0: float
    mu1: float

    prevalence: float
    """Mean phenotype score, used by the log and logit links."""

    n_observations: int

    fitter: str
    """Name of the linear model fitter that produced ``fitted_coefs``."""

    # ---- Unknown-means path only -------------------------------------
    cutpoint: float | None = None
    sensitivity: float | None = None
    specificity: float | None = None
    trim_counts: TrimCounts | None = None
    class_means: ClassMeans | None = None

    def to_series(self) -> pd.Series:
        """Corrected coefficients as a ``Series`` indexed by predictor."""
        return pd.Series(
            np.asarray(self.corrected_coefs, dtype=float),
            index=list(self.predictor_names),
            name=f"corrected_{self.link}",
        )
