"""Array conversion helpers shared by the trend models."""

from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np

ArrayLike = Union[np.ndarray, Sequence[float], Sequence[int]]


def ensure_1d_array(values: ArrayLike, *, name: str = "values") -> np.ndarray:
    """Coerce values into a non-empty float64 numpy array of shape (n_samples,)."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be 1-D (batch,), got shape {arr.shape}")
    if arr.size == 0:
        raise ValueError(f"{name} cannot be empty")
    return arr


def ensure_aligned(x: ArrayLike, y: ArrayLike) -> Tuple[np.ndarray, np.ndarray]:
    """Coerce predictor and response arrays and require equal lengths."""
    x_arr = ensure_1d_array(x, name="years")
    y_arr = ensure_1d_array(y, name="yields")
    if x_arr.shape[0] != y_arr.shape[0]:
        raise ValueError(f"years and yields must be aligned, got {x_arr.shape[0]} and {y_arr.shape[0]}")
    return x_arr, y_arr
