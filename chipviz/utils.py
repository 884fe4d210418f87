"""
Utility functions

General-purpose helpers used across ChIPViz modules.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Mapping, Optional, Sequence
import numpy as np

from .config import validate_reducer


def _sd(values: Sequence[float]) -> float:
    # Sample standard deviation; undefined (NaN) for a single value
    arr = np.asarray(values, dtype=float)
    if arr.size < 2:
        return float('nan')
    return float(np.std(arr, ddof=1))


REDUCERS: Dict[str, Callable[[Sequence[float]], float]] = {
    'mean': lambda values: float(np.mean(np.asarray(values, dtype=float))),
    'median': lambda values: float(np.median(np.asarray(values, dtype=float))),
    'max': lambda values: float(np.max(np.asarray(values, dtype=float))),
    'min': lambda values: float(np.min(np.asarray(values, dtype=float))),
    'sd': _sd,
}
"""Reducer name -> function collapsing a sequence of numbers to one scalar"""


def get_reducer(name: str) -> Callable[[Sequence[float]], float]:
    """
    Look up a reducer by name

    Args:
        name: One of mean, median, max, min, sd

    Returns:
        Scalar reduction function

    Raises:
        ConfigurationError: If the name is unknown
    """
    return REDUCERS[validate_reducer(name)]


def apply_reducer(values: Sequence[float], name: str) -> float:
    """Collapse values to a scalar, returning NaN when there is nothing to reduce"""
    clean = [v for v in values if v is not None and not np.isnan(v)]
    if not clean:
        return float('nan')
    return get_reducer(name)(clean)


def resolve_set_colors(
    set_names: Sequence[str],
    palette: Optional[Sequence[str]] = None,
    overrides: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """
    Assign one color per set

    The palette is recycled over the sets in the order given. Sets with an
    explicit override keep it; the palette only fills the remaining sets.

    Args:
        set_names: Set names in display order
        palette: Colors to recycle, or None for no palette colors
        overrides: Explicit per-set colors

    Returns:
        Mapping of set name to color for every set that received one

    Example:
        >>> resolve_set_colors(['a', 'b'], ['red'], {'a': 'blue'})
        {'a': 'blue', 'b': 'red'}
    """
    overrides = dict(overrides or {})
    colors: Dict[str, str] = {}
    palette_list: List[str] = list(palette) if palette else []
    for i, name in enumerate(set_names):
        if name in overrides:
            colors[name] = overrides[name]
        elif palette_list:
            colors[name] = palette_list[i % len(palette_list)]
    return colors
