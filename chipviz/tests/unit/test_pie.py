"""
Unit tests for pie chart summaries
"""
import numpy as np
import pandas as pd
import pytest

from chipviz.errors import ConfigurationError
from chipviz.pie import PiePlotter


@pytest.mark.unit
class TestPieErrors:
    """Invalid arguments are rejected before summarising"""

    def test_no_data(self):
        with pytest.raises(ConfigurationError):
            PiePlotter().compute(None, fill='feature')

    def test_fill_required(self, feature_table):
        with pytest.raises(ConfigurationError, match="The initial category must be defined as"):
            PiePlotter().compute(feature_table)

    @pytest.mark.parametrize('kwargs', [
        {'fill': ''},
        {'fill': 'feature', 'x': ''},
        {'fill': 'feature', 'x': 'TF1', 'y': ''},
        {'fill': 'feature', 'scale_by': ''},
    ])
    def test_unknown_columns(self, feature_table, kwargs):
        with pytest.raises(ConfigurationError):
            PiePlotter().compute(feature_table, **kwargs)

    def test_y_without_x(self, feature_table):
        with pytest.raises(ConfigurationError):
            PiePlotter().compute(feature_table, fill='feature', y='TF2')

    def test_non_numeric_scale(self, feature_table):
        table = feature_table.assign(scale='a')
        with pytest.raises(ConfigurationError, match="numeric"):
            PiePlotter().compute(table, fill='feature', x='TF1', scale_by='scale')


@pytest.mark.unit
class TestPieSummaries:
    """Shape and content of the slice table"""

    def test_single_pie(self, feature_table):
        result = PiePlotter().compute(feature_table, fill='feature')
        assert len(result.data) == 3
        assert isinstance(result.data['feature'].dtype, pd.CategoricalDtype)
        assert result.data['value'].sum() == len(feature_table)
        assert result.data['p'].sum() == pytest.approx(1.0)

    def test_levels_in_first_seen_order(self, feature_table):
        result = PiePlotter().compute(feature_table, fill='feature')
        assert list(result.data['feature'].cat.categories) == list(pd.unique(feature_table['feature']))

    def test_double_pie(self, feature_table):
        result = PiePlotter().compute(feature_table, fill='feature', x='TF1')
        assert result.data.shape == (9, 8)
        assert list(result.data.columns) == [
            'feature', 'TF1', 'value', 'p', 'label_radians', 'N', 'r', 'x_pos'
        ]
        per_pie = result.data.groupby('TF1', observed=False)['p'].sum()
        assert np.allclose(per_pie.to_numpy(), 1.0)

    def test_triple_pie(self, feature_table):
        result = PiePlotter().compute(feature_table, fill='feature', x='TF1', y='TF2')
        assert result.data.shape == (27, 10)
        assert list(result.data.columns) == [
            'feature', 'TF1', 'TF2', 'value', 'p', 'label_radians', 'N', 'r', 'x_pos', 'y_pos'
        ]
        assert result.totals.sum() == len(feature_table)

    def test_largest_pie_has_full_radius(self, feature_table):
        result = PiePlotter().compute(feature_table, fill='feature', x='TF1')
        assert result.data['r'].max() == pytest.approx(0.4)

    def test_label_angles_within_circle(self, feature_table):
        result = PiePlotter().compute(feature_table, fill='feature', x='TF1')
        assert (result.data['label_radians'] >= 0).all()
        assert (result.data['label_radians'] <= 2 * np.pi).all()

    def test_scale_by_column(self, feature_table):
        table = feature_table.assign(scale=0.5)
        result = PiePlotter().compute(table, fill='feature', x='TF1', scale_by='scale')
        assert result.data['value'].sum() == pytest.approx(len(table) / 2)

    def test_intervals_count_rows(self, feature_table):
        ranges = feature_table.head(20).assign(
            chrom='chr1', start=np.arange(20) * 1000, end=np.arange(20) * 1000 + 500
        )
        result = PiePlotter().compute(ranges, fill='feature')
        assert result.data['value'].sum() == 20

    def test_intervals_scaled_by_width(self, feature_table):
        starts = np.arange(20) * 1000
        ranges = feature_table.head(20).assign(chrom='chr1', start=starts, end=starts + 250)
        result = PiePlotter().compute(ranges, fill='feature', scale_by='width')
        assert result.data['value'].sum() == pytest.approx(20 * 250 / 1e3)
