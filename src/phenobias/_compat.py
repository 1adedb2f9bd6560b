"""Input compatibility layer for vector arguments.

All public entry points accept plain sequences, NumPy arrays, pandas
``Series`` and single-column pandas ``DataFrame`` objects.  This module
adds transparent support for Polars ``Series``: when a user passes one
it is converted to a NumPy array at the boundary so that internal code,
which operates on 1-D float arrays, remains unchanged.

Polars is **not** a required dependency.  If it is not installed, the
converter simply handles the NumPy/pandas inputs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeAlias

import numpy as np
import pandas as pd

from .exceptions import DimensionError

if TYPE_CHECKING:
    import polars as pl

    from ._typing import VectorLike

    SeriesLike: TypeAlias = VectorLike | pl.Series
else:
    SeriesLike: TypeAlias = Any

# Runtime detection; polars stays an optional dependency.
try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False


def _ensure_1d_array(obj: SeriesLike, *, name: str = "input") -> np.ndarray:
    """Convert *obj* to a 1-D ``float64`` NumPy array.

    Accepted types:
        * ``numpy.ndarray`` — 1-D, or 2-D with a single row/column.
        * ``pandas.Series`` — values extracted.
        * ``pandas.DataFrame`` — must have exactly one column.
        * ``polars.Series`` — converted via ``.to_numpy()``.
        * Any sequence that ``np.asarray`` understands.

    Args:
        obj: The vector-like input.
        name: Label used in error messages (e.g. ``"p"`` or ``"X"``).

    Returns:
        A 1-D float array.

    Raises:
        DimensionError: If *obj* is a scalar, a DataFrame with more
            than one column, or a genuinely two-dimensional array.
        ValueError: If *obj* cannot be converted to floats.
    """
    if isinstance(obj, pd.DataFrame):
        if obj.shape[1] != 1:
            raise DimensionError(
                f"'{name}' must be a single column, got a DataFrame with "
                f"{obj.shape[1]} columns."
            )
        obj = obj.iloc[:, 0]

    if isinstance(obj, pd.Series):
        values: Any = obj.to_numpy()
    elif _HAS_POLARS and isinstance(obj, pl.Series):
        values = obj.to_numpy()
    else:
        values = obj

    try:
        arr = np.asarray(values, dtype=float)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'{name}' must contain numeric values.") from exc

    # Column and row vectors are unambiguous; flatten them.
    if arr.ndim == 2 and 1 in arr.shape:
        arr = arr.ravel()
    if arr.ndim != 1:
        raise DimensionError(
            f"'{name}' must be one-dimensional, got an array with "
            f"shape {arr.shape}."
        )
    return arr


def _vector_name(obj: SeriesLike, default: str) -> str:
    """Return the label carried by *obj*, or *default* if it has none.

    pandas ``Series`` expose ``.name``, single-column ``DataFrame``
    objects their column label, and polars ``Series`` ``.name``.
    Empty or missing labels fall back to *default*.
    """
    label: Any = None
    if isinstance(obj, pd.DataFrame) and obj.shape[1] == 1:
        label = obj.columns[0]
    elif isinstance(obj, pd.Series):
        label = obj.name
    elif _HAS_POLARS and isinstance(obj, pl.Series):
        label = obj.name
    if label is None or label == "":
        return default
    return str(label)
