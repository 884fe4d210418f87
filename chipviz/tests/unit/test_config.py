"""
Unit tests for configuration validation and helper functions
"""
import math

import pytest

from chipviz.config import OverlapConfig, PieConfig, UpSetConfig, VennConfig
from chipviz.errors import ConfigurationError
from chipviz.utils import REDUCERS, apply_reducer, get_reducer, resolve_set_colors


@pytest.mark.unit
class TestConfigValidation:
    """Configurations reject invalid values at construction"""

    def test_defaults(self):
        config = OverlapConfig()
        assert config.gap_width == 1
        assert config.ignore_strand is True
        assert config.reducer == 'mean'
        assert config.upset.sort_sets == 'ascending'

    def test_unknown_reducer(self):
        with pytest.raises(ConfigurationError):
            OverlapConfig(reducer='mode')

    def test_negative_gap_width(self):
        with pytest.raises(ConfigurationError):
            OverlapConfig(gap_width=-1)

    def test_sort_policy(self):
        with pytest.raises(ConfigurationError):
            UpSetConfig(sort_sets='random')

    def test_alpha(self):
        with pytest.raises(ConfigurationError):
            VennConfig(alpha=1.5)

    def test_pie_width(self):
        with pytest.raises(ConfigurationError):
            PieConfig(width=0)

    @pytest.mark.parametrize('preset', ['publication', 'presentation', 'compact'])
    def test_presets(self, preset):
        config = getattr(OverlapConfig, preset)()
        assert isinstance(config, OverlapConfig)
        assert config.venn.figure_size

    def test_presets_do_not_share_state(self):
        compact = OverlapConfig.compact()
        assert compact.upset.show_counts is False
        assert OverlapConfig().upset.show_counts is True


@pytest.mark.unit
class TestReducers:
    """Tests for the reducer lookup"""

    def test_names(self):
        assert set(REDUCERS) == {'mean', 'median', 'max', 'min', 'sd'}

    @pytest.mark.parametrize('name, expected', [
        ('mean', 2.5), ('median', 2.5), ('max', 4.0), ('min', 1.0)
    ])
    def test_values(self, name, expected):
        assert get_reducer(name)([1, 2, 3, 4]) == pytest.approx(expected)

    def test_sample_sd(self):
        assert get_reducer('sd')([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]) == pytest.approx(2.13809, rel=1e-4)

    def test_sd_single_value_is_nan(self):
        assert math.isnan(get_reducer('sd')([3.0]))

    def test_unknown(self):
        with pytest.raises(ConfigurationError):
            get_reducer('mode')

    def test_apply_skips_missing(self):
        assert apply_reducer([2.0, float('nan'), 4.0], 'mean') == pytest.approx(3.0)

    def test_apply_empty_is_nan(self):
        assert math.isnan(apply_reducer([], 'max'))


@pytest.mark.unit
class TestSetColors:
    """Tests for resolve_set_colors"""

    def test_recycled(self):
        assert resolve_set_colors(['a', 'b', 'c'], ['red', 'blue']) == {
            'a': 'red', 'b': 'blue', 'c': 'red'
        }

    def test_override_kept(self):
        colors = resolve_set_colors(['a', 'b'], ['red', 'blue'], {'a': 'black'})
        assert colors['a'] == 'black'
        assert colors['b'] == 'blue'

    def test_override_without_palette(self):
        assert resolve_set_colors(['a', 'b'], None, {'b': 'black'}) == {'b': 'black'}
