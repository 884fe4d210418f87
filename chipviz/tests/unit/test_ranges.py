"""
Unit tests for genomic range operations
"""
import numpy as np
import pandas as pd
import pytest

from chipviz.errors import ConfigurationError
from chipviz.ranges import (
    as_bedframe, overlaps_any, ranges_to_tokens, reduce_mc, reduce_ranges,
)


def make_ranges(coords, chrom='chr1', **attrs):
    frame = pd.DataFrame({
        'chrom': [chrom] * len(coords),
        'start': [s for s, _ in coords],
        'end': [e for _, e in coords],
    })
    for key, values in attrs.items():
        frame[key] = values
    return frame


def as_pairs(frame):
    return [tuple(p) for p in frame[['start', 'end']].values.tolist()]


@pytest.mark.unit
class TestAsBedframe:
    """Tests for as_bedframe"""

    def test_adds_unstranded(self):
        frame = as_bedframe(make_ranges([(0, 10)]))
        assert frame['strand'].tolist() == ['.']

    def test_star_strand_is_unstranded(self):
        frame = as_bedframe(make_ranges([(0, 10)], strand=['*']))
        assert frame['strand'].tolist() == ['.']

    def test_missing_columns(self):
        with pytest.raises(ConfigurationError, match="end"):
            as_bedframe(pd.DataFrame({'chrom': ['chr1'], 'start': [1]}), 'a')

    def test_start_after_end(self):
        with pytest.raises(ConfigurationError):
            as_bedframe(make_ranges([(10, 5)]))

    def test_does_not_mutate_input(self):
        original = make_ranges([(0, 10)])
        as_bedframe(original)
        assert 'strand' not in original.columns


@pytest.mark.unit
class TestReduceRanges:
    """Tests for reduce_ranges"""

    def test_overlapping_merged(self):
        reduced = reduce_ranges(make_ranges([(0, 10), (5, 20), (30, 40)]))
        assert as_pairs(reduced) == [(0, 20), (30, 40)]

    def test_book_ended_merged_by_default(self):
        reduced = reduce_ranges(make_ranges([(0, 10), (10, 20)]))
        assert as_pairs(reduced) == [(0, 20)]

    def test_gap_width_zero_keeps_book_ended(self):
        reduced = reduce_ranges(make_ranges([(0, 10), (10, 20)]), gap_width=0)
        assert as_pairs(reduced) == [(0, 10), (10, 20)]

    def test_gap_width_tolerance(self):
        # A gap of two positions is bridged by gap_width=3 but not by gap_width=2
        ranges = make_ranges([(0, 10), (12, 20)])
        assert as_pairs(reduce_ranges(ranges, gap_width=2)) == [(0, 10), (12, 20)]
        assert as_pairs(reduce_ranges(ranges, gap_width=3)) == [(0, 20)]

    def test_chromosomes_kept_apart(self):
        ranges = pd.concat([make_ranges([(0, 10)]), make_ranges([(5, 15)], chrom='chr2')])
        reduced = reduce_ranges(ranges)
        assert reduced['chrom'].tolist() == ['chr1', 'chr2']

    def test_stranded(self):
        ranges = make_ranges([(0, 10), (5, 15)], strand=['+', '-'])
        assert len(reduce_ranges(ranges, ignore_strand=True)) == 1
        stranded = reduce_ranges(ranges, ignore_strand=False)
        assert sorted(stranded['strand'].tolist()) == ['+', '-']

    @pytest.mark.parametrize('gap_width', [0, 1, 5])
    def test_idempotent(self, gap_width):
        ranges = make_ranges([(0, 10), (10, 12), (14, 20), (30, 35), (33, 50), (60, 61)])
        once = reduce_ranges(ranges, gap_width=gap_width)
        twice = reduce_ranges(once, gap_width=gap_width)
        pd.testing.assert_frame_equal(once, twice)

    def test_no_overlaps_remain(self):
        ranges = make_ranges([(0, 10), (3, 8), (9, 25), (40, 45), (44, 46)])
        reduced = reduce_ranges(ranges)
        starts, ends = reduced['start'].to_numpy(), reduced['end'].to_numpy()
        assert np.all(starts[1:] > ends[:-1])

    def test_empty(self):
        reduced = reduce_ranges(make_ranges([]))
        assert reduced.empty
        assert list(reduced.columns) == ['chrom', 'start', 'end', 'strand']

    def test_negative_gap_width(self):
        with pytest.raises(ConfigurationError):
            reduce_ranges(make_ranges([(0, 10)]), gap_width=-1)


@pytest.mark.unit
class TestReduceMC:
    """Tests for reduce_mc"""

    def test_values_collected(self):
        ranges = make_ranges([(0, 10), (5, 15), (30, 40)], score=[2.0, 4.0, 7.0])
        reduced = reduce_mc(ranges, cols=['score'])
        assert as_pairs(reduced) == [(0, 15), (30, 40)]
        assert sorted(reduced['score'].iloc[0]) == [2.0, 4.0]
        assert reduced['score'].iloc[1] == [7.0]

    def test_matches_reduce_ranges(self):
        ranges = make_ranges([(0, 10), (10, 12), (14, 20), (30, 35)], score=[1, 2, 3, 4])
        for gap_width in (0, 1, 3):
            pd.testing.assert_frame_equal(
                reduce_mc(ranges, gap_width=gap_width)[['chrom', 'start', 'end']],
                reduce_ranges(ranges, gap_width=gap_width)[['chrom', 'start', 'end']],
            )

    def test_unknown_column(self):
        with pytest.raises(ConfigurationError, match="Couldn't find"):
            reduce_mc(make_ranges([(0, 10)]), cols=['score'])


@pytest.mark.unit
class TestOverlapsAny:
    """Tests for overlaps_any"""

    def test_flags(self):
        candidates = make_ranges([(0, 10), (20, 30), (40, 50)])
        reference = make_ranges([(5, 6), (45, 60)])
        assert overlaps_any(candidates, reference).tolist() == [True, False, True]

    def test_book_ended_do_not_overlap(self):
        assert overlaps_any(make_ranges([(0, 10)]), make_ranges([(10, 20)])).tolist() == [False]

    def test_empty_reference(self):
        assert overlaps_any(make_ranges([(0, 10), (20, 30)]), make_ranges([])).tolist() == [False, False]

    def test_strand_aware(self):
        candidates = make_ranges([(0, 10)], strand=['+'])
        reference = make_ranges([(0, 10)], strand=['-'])
        assert overlaps_any(candidates, reference, ignore_strand=True).tolist() == [True]
        assert overlaps_any(candidates, reference, ignore_strand=False).tolist() == [False]


@pytest.mark.unit
def test_ranges_to_tokens():
    ranges = pd.DataFrame({
        'chrom': ['chr1', 'chr2'], 'start': [0, 5], 'end': [10, 15], 'strand': ['.', '-']
    })
    assert ranges_to_tokens(ranges) == ['chr1:0-10', 'chr2:5-15:-']
