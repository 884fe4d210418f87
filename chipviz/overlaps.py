"""
Overlap plotter

Shows overlaps between named collections as Venn diagrams (up to three sets)
or UpSet plots (two or more sets). Collections hold either plain tokens such
as gene symbols, or genomic intervals. Interval collections are reduced to a
common universe of non-overlapping intervals before counting, so partially
overlapping peaks from different replicates count as the same element.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.figure import Figure
from matplotlib.patches import Circle

from .config import OverlapConfig, validate_reducer
from .errors import ConfigurationError, RenderError
from .ranges import (
    INTERVAL_COORDS, as_bedframe, is_interval_frame, overlaps_any, ranges_to_tokens,
    reduce_mc, reduce_ranges,
)
from .types import CollectionKind, Collections, PairwiseVennCounts, Strategy, TripleVennCounts
from .utils import apply_reducer, resolve_set_colors

logger = logging.getLogger(__name__)

PLOT_TYPES: Tuple[str, ...] = ('auto', 'venn', 'upset')

# upsetplot orders by cardinality largest-first unless prefixed with '-'
_UPSET_SORT: Dict[str, str] = {
    'descending': 'cardinality',
    'ascending': '-cardinality',
    'input': 'input',
}


@dataclass
class OverlapResult:
    """
    Everything computed for an overlap plot

    Attributes:
        strategy: Diagram chosen for the input
        set_names: Set names in input order
        counts: Areas passed to a Venn diagram (empty for UpSet)
        membership: 0/1 matrix, one row per element, one column per set
        groups: One row per observed combination of sets with its size
        summary: Per-element summary values (UpSet with a summary variable)
        colors: Color assigned to each set
        figure: Rendered figure, None until plotted
    """
    strategy: Strategy
    set_names: List[str]
    counts: Dict[str, int] = field(default_factory=dict)
    membership: pd.DataFrame = field(default_factory=pd.DataFrame)
    groups: pd.DataFrame = field(default_factory=pd.DataFrame)
    summary: Optional[pd.Series] = None
    colors: Dict[str, str] = field(default_factory=dict)
    figure: Optional[Figure] = None

    @property
    def n_sets(self) -> int:
        return len(self.set_names)

    @property
    def union_size(self) -> int:
        """Number of distinct elements across all sets"""
        return len(self.membership)


# ============================================================
# DISPATCH
# ============================================================

def validate_collections(collections: Any) -> List[Tuple[str, Any]]:
    """
    Check that every collection is named and names are unique

    Args:
        collections: Mapping of name to collection, or a sequence of
            (name, collection) pairs

    Returns:
        List of (name, collection) pairs in input order

    Raises:
        ConfigurationError: Empty input, missing or duplicated names
    """
    if isinstance(collections, Mapping):
        items = list(collections.items())
    elif isinstance(collections, (list, tuple)) and all(
        isinstance(item, tuple) and len(item) == 2 for item in collections
    ):
        items = list(collections)
    else:
        raise ConfigurationError("Collections must be a mapping of set name to elements")

    if not items:
        raise ConfigurationError("At least one collection is required")
    names = [name for name, _ in items]
    if any(name is None or not isinstance(name, str) or not name for name in names):
        raise ConfigurationError("Every collection must have a non-empty string name")
    duplicated = sorted({name for name in names if names.count(name) > 1})
    if duplicated:
        raise ConfigurationError(f"Duplicated set names: {', '.join(duplicated)}")
    return items


def detect_kind(values: Iterable[Any]) -> CollectionKind:
    """
    Decide whether collections hold intervals or tokens

    Raises:
        ConfigurationError: Mixed kinds, or a DataFrame without coordinates
    """
    kinds = set()
    for value in values:
        if is_interval_frame(value):
            kinds.add(CollectionKind.INTERVALS)
        elif isinstance(value, pd.DataFrame):
            raise ConfigurationError(
                f"DataFrames must contain interval columns: {', '.join(INTERVAL_COORDS)}"
            )
        else:
            kinds.add(CollectionKind.TOKENS)
    if len(kinds) > 1:
        raise ConfigurationError("Cannot mix interval and token collections")
    return kinds.pop()


def resolve_plot_type(plot_type: str, n: int) -> str:
    """
    Resolve 'auto' to 'venn' for up to three sets, otherwise 'upset'

    Raises:
        ConfigurationError: Unknown plot type
    """
    if plot_type not in PLOT_TYPES:
        raise ConfigurationError(
            f"Invalid type '{plot_type}'. Use one of: {', '.join(PLOT_TYPES)}"
        )
    if plot_type == 'auto':
        return 'venn' if n <= 3 else 'upset'
    return plot_type


def select_strategy(
    kind: CollectionKind,
    n: int,
    plot_type: str,
    var: Optional[str] = None
) -> Strategy:
    """
    Map input kind, number of sets and requested type to a diagram

    A summary variable only applies to interval collections drawn as an
    UpSet plot; Venn diagrams ignore it.

    Raises:
        ConfigurationError: Too many sets for a Venn diagram, a single set
            for an UpSet plot, or a summary variable on token collections
    """
    plot_type = resolve_plot_type(plot_type, n)
    if plot_type == 'venn':
        if var is not None:
            logger.warning(f"Summary variable '{var}' is ignored for Venn diagrams")
        if n == 1:
            return Strategy.SINGLE_VENN
        if n == 2:
            return Strategy.PAIRWISE_VENN
        if n == 3:
            return Strategy.TRIPLE_VENN
        raise ConfigurationError(
            f"Venn diagrams can only be drawn for up to three sets, got {n}. Use type='upset'"
        )

    if var is not None and kind is not CollectionKind.INTERVALS:
        raise ConfigurationError("A summary variable requires interval collections")
    if n == 1:
        raise ConfigurationError("UpSet plots can only be drawn using more than one group")
    return Strategy.UPSET_SUMMARY if var is not None else Strategy.UPSET


# ============================================================
# COUNTING
# ============================================================

def as_tokens(values: Any) -> List[str]:
    """Coerce a collection to unique strings, keeping first-seen order"""
    if isinstance(values, str):
        values = [values]
    return [str(v) for v in pd.unique(pd.Series(list(values), dtype=object).astype(str))]


def _n_duplicated(*sets: Sequence[str]) -> int:
    concatenated = pd.Series([v for s in sets for v in s], dtype=object)
    return int(concatenated.duplicated().sum())


def pairwise_venn_counts(a: Sequence[str], b: Sequence[str]) -> PairwiseVennCounts:
    """
    Areas for a two-set Venn diagram

    Each set is de-duplicated first, so any element duplicated across the
    concatenation of both sets belongs to both.

    Example:
        >>> pairwise_venn_counts(list('abcde'), list('fghijklmnoz'))
        {'area1': 5, 'area2': 11, 'cross_area': 0}
    """
    a, b = as_tokens(a), as_tokens(b)
    return {'area1': len(a), 'area2': len(b), 'cross_area': _n_duplicated(a, b)}


def triple_venn_counts(
    a: Sequence[str],
    b: Sequence[str],
    c: Sequence[str]
) -> TripleVennCounts:
    """
    Areas for a three-set Venn diagram

    Pairwise counts are duplicate counts over each pair's concatenation;
    n123 counts elements occurring three times across all three sets.
    """
    a, b, c = as_tokens(a), as_tokens(b), as_tokens(c)
    tally = pd.Series(a + b + c, dtype=object).value_counts()
    return {
        'area1': len(a),
        'area2': len(b),
        'area3': len(c),
        'n12': _n_duplicated(a, b),
        'n13': _n_duplicated(a, c),
        'n23': _n_duplicated(b, c),
        'n123': int((tally == 3).sum()),
    }


def triple_venn_regions(counts: TripleVennCounts) -> Tuple[int, ...]:
    """
    Exclusive region sizes in matplotlib-venn order

    Returns:
        (Abc, aBc, ABc, abC, AbC, aBC, ABC)
    """
    n12, n13, n23, n123 = counts['n12'], counts['n13'], counts['n23'], counts['n123']
    return (
        counts['area1'] - n12 - n13 + n123,
        counts['area2'] - n12 - n23 + n123,
        n12 - n123,
        counts['area3'] - n13 - n23 + n123,
        n13 - n123,
        n23 - n123,
        n123,
    )


def membership_matrix(token_sets: Mapping[str, Sequence[str]]) -> pd.DataFrame:
    """
    0/1 membership of every element in every set

    Rows are the union of all elements in first-seen order; columns are the
    set names.
    """
    token_sets = {name: as_tokens(values) for name, values in token_sets.items()}
    all_vals = as_tokens([v for values in token_sets.values() for v in values])
    matrix = pd.DataFrame(
        {name: pd.Index(all_vals).isin(values).astype(int) for name, values in token_sets.items()},
        index=pd.Index(all_vals, name='element'),
        columns=list(token_sets),
    )
    return matrix


def intersection_groups(
    membership: pd.DataFrame,
    summary: Optional[pd.Series] = None,
    sort: str = 'descending'
) -> pd.DataFrame:
    """
    Count elements for each observed combination of sets

    Each element belongs to exactly one group: the exact pattern of its
    membership row.

    Args:
        membership: 0/1 membership matrix
        summary: Optional per-element values aligned to membership rows
        sort: Order groups by size: ascending, descending or input (first seen)

    Returns:
        DataFrame with one boolean column per set, 'label', 'degree', 'size',
        and the mean and median of the summary values when given
    """
    set_names = list(membership.columns)
    columns = set_names + ['label', 'degree', 'size']
    if summary is not None:
        columns += ['mean', 'median']
    if membership.empty:
        return pd.DataFrame(columns=columns)

    frame = membership.astype(bool).reset_index(drop=True)
    if summary is not None:
        frame['_value'] = pd.Series(summary).to_numpy(dtype=float)
    grouped = frame.groupby(set_names, sort=False)
    groups = grouped.size().rename('size').reset_index()
    if summary is not None:
        stats = grouped['_value'].agg(['mean', 'median']).reset_index(drop=True)
        groups = pd.concat([groups, stats], axis=1)

    groups['label'] = groups[set_names].apply(
        lambda row: '&'.join(name for name in set_names if row[name]), axis=1
    )
    groups['degree'] = groups[set_names].sum(axis=1).astype(int)
    if sort == 'ascending':
        groups = groups.sort_values('size', ascending=True, kind='mergesort')
    elif sort == 'descending':
        groups = groups.sort_values('size', ascending=False, kind='mergesort')
    return groups[columns].reset_index(drop=True)


# ============================================================
# PLOTTER
# ============================================================

class OverlapPlotter:
    """
    Computes and draws overlaps between named collections
    """

    def __init__(self, config: Optional[OverlapConfig] = None) -> None:
        """
        Initialize OverlapPlotter

        Args:
            config: Plot configuration. If None, uses default settings.

        Example:
            >>> plotter = OverlapPlotter()
            >>> plotter = OverlapPlotter(OverlapConfig.publication())
        """
        self.config: OverlapConfig = config or OverlapConfig()

    def compute(
        self,
        collections: Any,
        type: str = 'auto',
        var: Optional[str] = None,
        reducer: Optional[str] = None,
        set_colors: Optional[Sequence[str]] = None,
        gap_width: Optional[int] = None,
        ignore_strand: Optional[bool] = None
    ) -> OverlapResult:
        """
        Compute overlap counts without drawing

        Args:
            collections: Mapping of set name to tokens or interval DataFrame
            type: 'auto', 'venn' or 'upset'
            var: Numeric interval attribute (or 'width') summarised per
                element in an upper panel (UpSet, intervals only)
            reducer: mean, median, max, min or sd (config default if None)
            set_colors: Colors recycled over the sets
            gap_width: Interval reduction tolerance (config default if None)
            ignore_strand: Reduce across strands (config default if None)

        Returns:
            OverlapResult with figure set to None
        """
        cfg = self.config
        reducer = validate_reducer(reducer if reducer is not None else cfg.reducer)
        gap_width = cfg.gap_width if gap_width is None else gap_width
        ignore_strand = cfg.ignore_strand if ignore_strand is None else ignore_strand

        items = validate_collections(collections)
        set_names = [name for name, _ in items]
        kind = detect_kind(value for _, value in items)
        strategy = select_strategy(kind, len(items), type, var)
        logger.debug(f"Plotting {len(items)} {kind.value} collections as {strategy.value}")

        summary: Optional[pd.Series] = None
        if strategy is Strategy.UPSET_SUMMARY:
            membership, summary = self._interval_membership(
                items, var, reducer, gap_width, ignore_strand
            )
            token_sets: Dict[str, List[str]] = {}
        else:
            if kind is CollectionKind.INTERVALS:
                token_sets = self._intervals_to_tokens(items, gap_width, ignore_strand)
            else:
                token_sets = {name: as_tokens(values) for name, values in items}
            membership = membership_matrix(token_sets)

        counts: Dict[str, int] = {}
        if strategy is Strategy.SINGLE_VENN:
            counts = {'area': len(token_sets[set_names[0]])}
        elif strategy is Strategy.PAIRWISE_VENN:
            counts = dict(pairwise_venn_counts(*(token_sets[n] for n in set_names)))
        elif strategy is Strategy.TRIPLE_VENN:
            counts = dict(triple_venn_counts(*(token_sets[n] for n in set_names)))

        groups = intersection_groups(membership, summary, sort=cfg.upset.sort_intersections)
        colors = resolve_set_colors(set_names, set_colors, cfg.upset.set_queries)

        logger.info(
            f"{len(set_names)} sets, {len(membership)} distinct elements, "
            f"{len(groups)} intersection groups"
        )
        return OverlapResult(
            strategy=strategy,
            set_names=set_names,
            counts=counts,
            membership=membership,
            groups=groups,
            summary=summary,
            colors=colors,
        )

    def plot(
        self,
        collections: Any,
        type: str = 'auto',
        var: Optional[str] = None,
        reducer: Optional[str] = None,
        set_colors: Optional[Sequence[str]] = None,
        gap_width: Optional[int] = None,
        ignore_strand: Optional[bool] = None,
        output_file: Optional[str] = None,
        dpi: int = 300
    ) -> OverlapResult:
        """
        Compute overlaps and draw a Venn diagram or UpSet plot

        Takes the arguments of compute(), plus an optional output file.

        Returns:
            OverlapResult including the rendered figure

        Raises:
            ConfigurationError: Invalid arguments (before any drawing)
            RenderError: The diagram library rejected the computed geometry

        Example:
            >>> ex = {'x': list('abcde'), 'y': list('fghijklmnoz')}
            >>> result = OverlapPlotter().plot(ex, type='upset')
        """
        result = self.compute(
            collections, type=type, var=var, reducer=reducer, set_colors=set_colors,
            gap_width=gap_width, ignore_strand=ignore_strand
        )
        if result.strategy.is_venn:
            result.figure = self._draw_venn(result)
        else:
            result.figure = self._draw_upset(result, var)

        if output_file is not None:
            # Diagram artists are only laid out when the figure is drawn
            try:
                result.figure.savefig(output_file, dpi=dpi, bbox_inches='tight')
            except (TypeError, ValueError, ZeroDivisionError) as exc:
                plt.close(result.figure)
                raise RenderError(f"Overlap plot could not be saved: {exc}") from exc
            logger.info(f"Saved overlap plot: {output_file}")
        return result

    # ------------------------------------------------------------
    # Interval handling
    # ------------------------------------------------------------

    def _intervals_to_tokens(
        self,
        items: List[Tuple[str, pd.DataFrame]],
        gap_width: int,
        ignore_strand: bool
    ) -> Dict[str, List[str]]:
        """
        Replace each set by the universe intervals it overlaps, as tokens
        """
        frames = {name: as_bedframe(df, name) for name, df in items}
        combined = self._concat_coords(frames.values())
        universe = reduce_ranges(combined, gap_width=gap_width, ignore_strand=ignore_strand)
        logger.debug(f"Universe of {len(universe)} intervals from {len(combined)} inputs")
        return {
            name: ranges_to_tokens(universe[overlaps_any(universe, frame, ignore_strand)])
            for name, frame in frames.items()
        }

    def _interval_membership(
        self,
        items: List[Tuple[str, pd.DataFrame]],
        var: str,
        reducer: str,
        gap_width: int,
        ignore_strand: bool
    ) -> Tuple[pd.DataFrame, pd.Series]:
        """
        Membership matrix over the universe plus one summary value per row
        """
        frames = {name: as_bedframe(df, name) for name, df in items}
        self._check_summary_var(frames, var)

        if var == 'width':
            combined = self._concat_coords(frames.values())
            universe = reduce_ranges(combined, gap_width=gap_width, ignore_strand=ignore_strand)
            values = (universe['end'] - universe['start']).astype(float)
        else:
            combined = self._concat_coords(frames.values(), extra=[var])
            universe = reduce_mc(
                combined, gap_width=gap_width, ignore_strand=ignore_strand, cols=[var]
            )
            values = universe[var].apply(lambda v: apply_reducer(v, reducer)).astype(float)

        index = pd.Index(ranges_to_tokens(universe), name='element')
        membership = pd.DataFrame(
            {name: overlaps_any(universe, frame, ignore_strand).astype(int)
             for name, frame in frames.items()},
            index=index,
            columns=list(frames),
        )
        summary = pd.Series(values.to_numpy(), index=index, name=var)
        return membership, summary

    @staticmethod
    def _check_summary_var(frames: Mapping[str, pd.DataFrame], var: str) -> None:
        if var == 'width':
            return
        for name, frame in frames.items():
            # An empty set contributes no values, whatever its columns
            if frame.empty:
                continue
            if var not in frame.columns:
                raise ConfigurationError(f"Couldn't find column {var} in set '{name}'")
            if not pd.api.types.is_numeric_dtype(frame[var]):
                raise ConfigurationError(f"{var} must contain numeric values")
            if pd.api.types.is_bool_dtype(frame[var]):
                raise ConfigurationError(f"{var} must contain numeric values")

    @staticmethod
    def _concat_coords(frames: Iterable[pd.DataFrame], extra: Sequence[str] = ()) -> pd.DataFrame:
        cols = INTERVAL_COORDS + ['strand'] + list(extra)
        parts = [frame[cols] for frame in frames if not frame.empty]
        if not parts:
            return pd.DataFrame({col: pd.Series([], dtype=object) for col in cols})
        return pd.concat(parts, ignore_index=True)

    # ------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------

    def _venn_colors(self, result: OverlapResult) -> List[str]:
        defaults = list(self.config.venn.default_colors)
        return [
            result.colors.get(name, defaults[i % len(defaults)])
            for i, name in enumerate(result.set_names)
        ]

    def _draw_venn(self, result: OverlapResult) -> Figure:
        from matplotlib_venn import venn2, venn2_circles, venn3
        from matplotlib_venn.layout.venn3 import DefaultLayoutAlgorithm

        cfg = self.config.venn
        colors = self._venn_colors(result)
        fig, ax = plt.subplots(figsize=cfg.figure_size)

        try:
            if result.strategy is Strategy.SINGLE_VENN:
                self._draw_single_venn(ax, result.set_names[0], result.counts['area'], colors[0])
                return fig

            if result.strategy is Strategy.PAIRWISE_VENN:
                c = result.counts
                subsets = (c['area1'] - c['cross_area'], c['area2'] - c['cross_area'], c['cross_area'])
                diagram = venn2(
                    subsets=subsets, set_labels=result.set_names, set_colors=colors,
                    alpha=cfg.alpha, ax=ax
                )
                venn2_circles(subsets=subsets, linewidth=cfg.line_width, ax=ax)
            else:
                # Three sets are drawn with fixed region sizes, not to scale
                diagram = venn3(
                    subsets=triple_venn_regions(result.counts), set_labels=result.set_names,
                    set_colors=colors, alpha=cfg.alpha, ax=ax,
                    layout_algorithm=DefaultLayoutAlgorithm(fixed_subset_sizes=(1,) * 7)
                )
        except (ValueError, ZeroDivisionError) as exc:
            plt.close(fig)
            raise RenderError(f"Venn diagram could not be drawn: {exc}") from exc

        for label in diagram.set_labels or []:
            if label is not None:
                label.set_fontsize(cfg.fontsize)
        for label in diagram.subset_labels or []:
            if label is not None:
                label.set_fontsize(cfg.count_fontsize)
        return fig

    def _draw_single_venn(self, ax: Any, name: str, area: int, color: str) -> None:
        cfg = self.config.venn
        ax.add_patch(Circle(
            (0.5, 0.5), 0.4, facecolor=color, edgecolor='black', alpha=cfg.alpha,
            linewidth=cfg.line_width
        ))
        ax.text(0.5, 0.5, f"{area:,}", ha='center', va='center', fontsize=cfg.count_fontsize)
        ax.text(0.5, 0.94, name, ha='center', va='bottom', fontsize=cfg.fontsize)
        ax.set_xlim(0, 1)
        ax.set_ylim(0, 1)
        ax.set_aspect('equal')
        ax.axis('off')

    def _draw_upset(self, result: OverlapResult, var: Optional[str]) -> Figure:
        from upsetplot import UpSet, from_indicators

        cfg = self.config.upset
        if result.membership.empty:
            raise RenderError("UpSet plot requires at least one element across all sets")

        data = result.membership.astype(bool).reset_index(drop=True)
        if result.summary is not None:
            data[var] = result.summary.to_numpy()
        data = from_indicators(result.set_names, data=data)

        fig = plt.figure(figsize=cfg.figure_size)
        try:
            upset = UpSet(
                data,
                subset_size='count',
                sort_by=_UPSET_SORT[cfg.sort_intersections],
                sort_categories_by=_UPSET_SORT[cfg.sort_sets],
                show_counts=cfg.show_counts,
                min_subset_size=cfg.min_subset_size,
            )
            for name, color in result.colors.items():
                upset.style_categories(name, bar_facecolor=color)
            if result.summary is not None:
                upset.add_catplot(value=var, kind=cfg.summary_kind, elements=cfg.summary_elements)
            upset.plot(fig=fig)
        except (ValueError, ZeroDivisionError) as exc:
            plt.close(fig)
            raise RenderError(f"UpSet plot could not be drawn: {exc}") from exc
        return fig


def plot_overlaps(
    collections: Collections,
    type: str = 'auto',
    var: Optional[str] = None,
    reducer: Optional[str] = None,
    set_colors: Optional[Sequence[str]] = None,
    gap_width: Optional[int] = None,
    ignore_strand: Optional[bool] = None,
    config: Optional[OverlapConfig] = None,
    output_file: Optional[str] = None
) -> OverlapResult:
    """
    Convenience function to plot overlaps between named collections

    Args:
        collections: Mapping of set name to tokens or interval DataFrame
        type: 'auto', 'venn' or 'upset'
        var: Interval attribute summarised in an upper panel (UpSet only)
        reducer: mean, median, max, min or sd (config default if None)
        set_colors: Colors recycled over the sets
        gap_width: Merge intervals separated by fewer than this many positions
            (config default if None)
        ignore_strand: Reduce across strands (config default if None)
        config: Plot configuration. If None, uses default settings
            (reducer 'mean', gap_width 1, strands ignored).
        output_file: Optional path to save the figure

    Returns:
        OverlapResult with the rendered figure
    """
    plotter = OverlapPlotter(config)
    return plotter.plot(
        collections, type=type, var=var, reducer=reducer, set_colors=set_colors,
        gap_width=gap_width, ignore_strand=ignore_strand, output_file=output_file
    )
