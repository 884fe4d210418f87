"""
Type definitions for ChIPViz

Common types used throughout the package for type checking and documentation.
"""

from __future__ import annotations
from enum import Enum
from typing import TypedDict, Literal, Union, Mapping, Iterable, TYPE_CHECKING
from pathlib import Path

if TYPE_CHECKING:
    import pandas as pd

# Type aliases
PathLike = Union[str, Path]
"""File path as string or Path object"""

PlotType = Literal['auto', 'venn', 'upset']
"""Requested overlap diagram"""

ReducerName = Literal['mean', 'median', 'max', 'min', 'sd']
"""Summarisation applied to list-valued attributes"""

SortPolicy = Literal['ascending', 'descending', 'input']
"""Ordering of sets or intersections in an UpSet plot"""

Collections = Mapping[str, Union['pd.DataFrame', Iterable]]
"""Named collection of token iterables or interval DataFrames"""


class CollectionKind(Enum):
    """What the members of a named collection are"""
    TOKENS = 'tokens'
    INTERVALS = 'intervals'


class Strategy(Enum):
    """Diagram drawn for a given input"""
    SINGLE_VENN = 'single_venn'
    PAIRWISE_VENN = 'pairwise_venn'
    TRIPLE_VENN = 'triple_venn'
    UPSET = 'upset'
    UPSET_SUMMARY = 'upset_summary'

    @property
    def is_venn(self) -> bool:
        return self in (Strategy.SINGLE_VENN, Strategy.PAIRWISE_VENN, Strategy.TRIPLE_VENN)


# Structured data types

class PairwiseVennCounts(TypedDict):
    """Areas passed to a two-set Venn diagram"""
    area1: int
    area2: int
    cross_area: int


class TripleVennCounts(TypedDict):
    """Areas passed to a three-set Venn diagram"""
    area1: int
    area2: int
    area3: int
    n12: int
    n13: int
    n23: int
    n123: int
