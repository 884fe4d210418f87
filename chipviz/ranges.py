"""
Genomic range operations

Thin layer over bioframe providing the interval primitives used by the
overlap engine: reduction to a non-overlapping universe, reduction that keeps
attribute values, overlap testing and conversion of intervals to tokens.

Intervals are pandas DataFrames with 'chrom', 'start' and 'end' columns
(0-based start, exclusive end), an optional 'strand' column and any number of
attribute columns.
"""

from __future__ import annotations
from typing import List, Optional, Sequence
import logging

import bioframe as bf
import numpy as np
import pandas as pd

from .config import validate_gap_width
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

INTERVAL_COORDS: List[str] = ['chrom', 'start', 'end']
STRANDED_COORDS: List[str] = INTERVAL_COORDS + ['strand']
UNSTRANDED = '.'


def is_interval_frame(obj: object) -> bool:
    """Whether an object is a DataFrame carrying interval coordinates"""
    return isinstance(obj, pd.DataFrame) and all(c in obj.columns for c in INTERVAL_COORDS)


def empty_ranges(extra: Sequence[str] = ()) -> pd.DataFrame:
    """Zero-row interval frame with the standard dtypes"""
    frame = pd.DataFrame({
        'chrom': pd.Series([], dtype=object),
        'start': pd.Series([], dtype='int64'),
        'end': pd.Series([], dtype='int64'),
        'strand': pd.Series([], dtype=object),
    })
    for col in extra:
        frame[col] = pd.Series([], dtype=object)
    return frame


def as_bedframe(df: pd.DataFrame, name: Optional[str] = None) -> pd.DataFrame:
    """
    Validate and normalise an interval DataFrame

    Args:
        df: DataFrame with at least 'chrom', 'start', 'end'
        name: Set name used in error messages

    Returns:
        Copy with integer coordinates, string chromosomes and a 'strand'
        column ('.' where absent)

    Raises:
        ConfigurationError: Missing coordinate columns or start > end
    """
    label = f" in set '{name}'" if name is not None else ""
    if not isinstance(df, pd.DataFrame):
        raise ConfigurationError(f"Expected a DataFrame of intervals{label}")
    missing = [c for c in INTERVAL_COORDS if c not in df.columns]
    if missing:
        raise ConfigurationError(f"Missing interval column(s){label}: {', '.join(missing)}")

    frame = df.copy()
    if frame.empty:
        for col in STRANDED_COORDS:
            if col not in frame.columns:
                frame[col] = pd.Series([], dtype=object)
        frame['start'] = frame['start'].astype('int64')
        frame['end'] = frame['end'].astype('int64')
        return frame.reset_index(drop=True)

    frame['chrom'] = frame['chrom'].astype(str)
    try:
        frame['start'] = frame['start'].astype('int64')
        frame['end'] = frame['end'].astype('int64')
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Non-integer interval coordinates{label}") from exc
    if (frame['start'] > frame['end']).any():
        raise ConfigurationError(f"Interval start greater than end{label}")

    if 'strand' not in frame.columns:
        frame['strand'] = UNSTRANDED
    else:
        frame['strand'] = frame['strand'].fillna(UNSTRANDED).astype(str).replace('*', UNSTRANDED)
    return frame.reset_index(drop=True)


def _min_dist(gap_width: int) -> Optional[int]:
    """
    Translate a gap width into bioframe's min_dist

    A gap width of g merges intervals separated by fewer than g positions.
    bioframe merges intervals separated by min_dist or less, and only
    overlapping intervals when min_dist is None.
    """
    gap_width = validate_gap_width(gap_width)
    return None if gap_width == 0 else gap_width - 1


def _sort_ranges(frame: pd.DataFrame) -> pd.DataFrame:
    return frame.sort_values(['chrom', 'start', 'end', 'strand'], kind='mergesort').reset_index(drop=True)


def reduce_ranges(
    df: pd.DataFrame,
    gap_width: int = 1,
    ignore_strand: bool = True
) -> pd.DataFrame:
    """
    Collapse intervals into a minimal set of non-overlapping intervals

    Args:
        df: Interval DataFrame
        gap_width: Merge intervals separated by fewer than this many positions.
            1 merges overlapping and book-ended intervals, 0 only overlapping ones
        ignore_strand: Merge across strands (strand set to '.')

    Returns:
        DataFrame with 'chrom', 'start', 'end', 'strand', sorted by position

    Example:
        >>> gr = pd.DataFrame({'chrom': ['chr1'] * 2, 'start': [0, 5], 'end': [10, 20]})
        >>> reduce_ranges(gr)[['start', 'end']].values.tolist()
        [[0, 20]]
    """
    frame = as_bedframe(df)
    min_dist = _min_dist(gap_width)
    if frame.empty:
        return empty_ranges()

    if ignore_strand:
        merged = bf.merge(frame[INTERVAL_COORDS], min_dist=min_dist)
        merged['strand'] = UNSTRANDED
    else:
        merged = bf.merge(frame[STRANDED_COORDS], min_dist=min_dist, on=['strand'])

    merged = _sort_ranges(merged[STRANDED_COORDS].astype({'start': 'int64', 'end': 'int64'}))
    logger.debug(f"Reduced {len(frame)} intervals to {len(merged)} (gap_width={gap_width})")
    return merged


def reduce_mc(
    df: pd.DataFrame,
    gap_width: int = 1,
    ignore_strand: bool = True,
    cols: Sequence[str] = ()
) -> pd.DataFrame:
    """
    Reduce intervals while keeping attribute values

    Each listed attribute becomes a list-valued column holding the values of
    every original interval contributing to the reduced interval.

    Args:
        df: Interval DataFrame
        gap_width: See reduce_ranges
        ignore_strand: See reduce_ranges
        cols: Attribute columns to retain

    Returns:
        Reduced intervals with list-valued attribute columns
    """
    frame = as_bedframe(df)
    min_dist = _min_dist(gap_width)
    cols = list(cols)
    missing = [c for c in cols if c not in frame.columns]
    if missing:
        raise ConfigurationError(f"Couldn't find column(s): {', '.join(missing)}")
    if frame.empty:
        return empty_ranges(cols)

    if ignore_strand:
        frame['strand'] = UNSTRANDED
        clustered = bf.cluster(frame[STRANDED_COORDS + cols], min_dist=min_dist)
    else:
        clustered = bf.cluster(frame[STRANDED_COORDS + cols], min_dist=min_dist, on=['strand'])

    agg = {'chrom': 'first', 'cluster_start': 'first', 'cluster_end': 'first', 'strand': 'first'}
    for col in cols:
        agg[col] = list
    reduced = (
        clustered.groupby('cluster', sort=False)
        .agg(agg)
        .rename(columns={'cluster_start': 'start', 'cluster_end': 'end'})
        .reset_index(drop=True)
    )
    reduced = reduced.astype({'start': 'int64', 'end': 'int64'})
    return _sort_ranges(reduced[STRANDED_COORDS + cols])


def overlaps_any(
    candidates: pd.DataFrame,
    reference: pd.DataFrame,
    ignore_strand: bool = True
) -> np.ndarray:
    """
    Flag candidate intervals overlapping at least one reference interval

    Args:
        candidates: Intervals to test
        reference: Intervals to test against
        ignore_strand: When False, only intervals on the same strand overlap

    Returns:
        Boolean array, one value per candidate row
    """
    cand = as_bedframe(candidates)
    ref = as_bedframe(reference)
    if cand.empty or ref.empty:
        return np.zeros(len(cand), dtype=bool)

    on = None if ignore_strand else ['strand']
    counts = bf.count_overlaps(cand[STRANDED_COORDS], ref[STRANDED_COORDS], on=on)
    return counts['count'].to_numpy() > 0


def ranges_to_tokens(df: pd.DataFrame) -> List[str]:
    """
    Stringify intervals as 'chrom:start-end', appending ':strand' if stranded

    Example:
        >>> ranges_to_tokens(pd.DataFrame({'chrom': ['chr1'], 'start': [0], 'end': [10]}))
        ['chr1:0-10']
    """
    frame = as_bedframe(df)
    if frame.empty:
        return []
    tokens = frame['chrom'] + ':' + frame['start'].astype(str) + '-' + frame['end'].astype(str)
    stranded = frame['strand'].isin(['+', '-'])
    tokens = tokens.where(~stranded, tokens + ':' + frame['strand'])
    return tokens.tolist()
