"""Shared type aliases for the phenobias package."""

from collections.abc import Sequence

import numpy as np
import pandas as pd

# Vector-like inputs accepted by the public API.
VectorLike = np.ndarray | pd.Series | pd.DataFrame | Sequence[float]
