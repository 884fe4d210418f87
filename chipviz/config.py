"""
ChIPViz Configuration

Named plotting parameters for overlap and pie charts. Every option the
plotting functions understand is a documented field here; nothing is passed
through to the rendering libraries unchecked.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

from .errors import ConfigurationError

REDUCER_NAMES: Tuple[str, ...] = ('mean', 'median', 'max', 'min', 'sd')
SORT_POLICIES: Tuple[str, ...] = ('ascending', 'descending', 'input')


@dataclass
class VennConfig:
    """
    Styling for Venn diagrams (one, two or three sets)
    """

    alpha: float = 0.5
    """Fill transparency of each circle"""

    line_width: float = 1.0
    """Circle outline width (px)"""

    fontsize: int = 12
    """Font size for set labels"""

    count_fontsize: int = 11
    """Font size for region counts"""

    figure_size: Tuple[float, float] = (6.0, 6.0)
    """Figure size in inches"""

    default_colors: Sequence[str] = ('#4C72B0', '#DD8452', '#55A868')
    """Circle colors used when no set colors are supplied"""

    def __post_init__(self) -> None:
        if not 0 <= self.alpha <= 1:
            raise ConfigurationError(f"alpha must be within [0, 1], got {self.alpha}")


@dataclass
class UpSetConfig:
    """
    Styling and ordering for UpSet plots
    """

    sort_sets: str = 'ascending'
    """Ordering of the set-size bars: ascending, descending or input"""

    sort_intersections: str = 'descending'
    """Ordering of the intersection bars: ascending, descending or input"""

    show_counts: bool = True
    """Annotate intersection and set-size bars with counts"""

    min_subset_size: Optional[int] = None
    """Hide intersections smaller than this (display only)"""

    summary_kind: str = 'box'
    """Kind of upper panel drawn when a summary variable is requested"""

    summary_elements: int = 3
    """Relative height of the summary panel"""

    figure_size: Tuple[float, float] = (10.0, 6.0)
    """Figure size in inches"""

    set_queries: Dict[str, str] = field(default_factory=dict)
    """Explicit per-set colors; never overwritten by the palette"""

    def __post_init__(self) -> None:
        for name in ('sort_sets', 'sort_intersections'):
            value = getattr(self, name)
            if value not in SORT_POLICIES:
                raise ConfigurationError(
                    f"{name} must be one of {', '.join(SORT_POLICIES)}, got '{value}'"
                )
        if self.summary_kind not in ('box', 'violin', 'strip'):
            raise ConfigurationError(f"Unsupported summary_kind: {self.summary_kind}")


@dataclass
class OverlapConfig:
    """
    Complete configuration for overlap plots
    """

    # ============================================================
    # SUB-CONFIGURATIONS
    # ============================================================
    venn: VennConfig = field(default_factory=VennConfig)
    """Venn diagram styling"""

    upset: UpSetConfig = field(default_factory=UpSetConfig)
    """UpSet plot styling"""

    # ============================================================
    # INTERVAL REDUCTION
    # ============================================================
    gap_width: int = 1
    """Merge intervals separated by fewer than this many positions"""

    ignore_strand: bool = True
    """Reduce intervals regardless of strand"""

    # ============================================================
    # SUMMARY PANEL
    # ============================================================
    reducer: str = 'mean'
    """Function collapsing per-universe values: mean, median, max, min or sd"""

    def __post_init__(self) -> None:
        validate_reducer(self.reducer)
        validate_gap_width(self.gap_width)

    # ============================================================
    # PRESET CONFIGURATIONS
    # ============================================================

    @classmethod
    def publication(cls) -> 'OverlapConfig':
        """
        Larger fonts and opaque fills for print

        Example:
            >>> config = OverlapConfig.publication()
            >>> plotter = OverlapPlotter(config)
        """
        config = cls()
        config.venn.alpha = 0.7
        config.venn.fontsize = 14
        config.venn.count_fontsize = 13
        config.venn.line_width = 1.5
        config.upset.figure_size = (12.0, 7.0)
        return config

    @classmethod
    def presentation(cls) -> 'OverlapConfig':
        """
        Large figures for screen viewing
        """
        config = cls()
        config.venn.figure_size = (8.0, 8.0)
        config.venn.fontsize = 18
        config.venn.count_fontsize = 16
        config.upset.figure_size = (14.0, 8.0)
        return config

    @classmethod
    def compact(cls) -> 'OverlapConfig':
        """
        Small figures, counts hidden on UpSet bars
        """
        config = cls()
        config.venn.figure_size = (4.0, 4.0)
        config.venn.fontsize = 9
        config.venn.count_fontsize = 8
        config.upset.show_counts = False
        config.upset.figure_size = (8.0, 4.5)
        return config


@dataclass
class PieConfig:
    """
    Configuration for composition pie charts
    """

    show_total: bool = True
    """Print the total count at the upper right of each pie"""

    show_category: bool = True
    """Label slices with their category"""

    min_p: float = 0.01
    """Slices below this proportion are left unlabelled"""

    width: float = 0.8
    """Maximum pie diameter as a fraction of the facet cell"""

    total_size: int = 10
    """Font size for totals"""

    category_size: int = 10
    """Font size for slice labels"""

    figure_size: Optional[Tuple[float, float]] = None
    """Figure size in inches (derived from the number of facets if None)"""

    palette: Optional[Sequence[str]] = None
    """Slice colors in level order (matplotlib's tab10 cycle if None)"""

    def __post_init__(self) -> None:
        if not 0 < self.width <= 1:
            raise ConfigurationError(f"width must be within (0, 1], got {self.width}")
        if not 0 <= self.min_p < 1:
            raise ConfigurationError(f"min_p must be within [0, 1), got {self.min_p}")


def validate_reducer(reducer: str) -> str:
    """Reject unknown reducer names at configuration time"""
    if reducer not in REDUCER_NAMES:
        raise ConfigurationError(
            f"Unknown reducer '{reducer}'. Use one of: {', '.join(REDUCER_NAMES)}"
        )
    return reducer


def validate_gap_width(gap_width: int) -> int:
    if int(gap_width) != gap_width or gap_width < 0:
        raise ConfigurationError(f"gap_width must be a non-negative integer, got {gap_width}")
    return int(gap_width)
