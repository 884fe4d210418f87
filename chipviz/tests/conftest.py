"""
Shared pytest fixtures for ChIPViz tests
"""
import string

import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

LETTERS = list(string.ascii_lowercase)


@pytest.fixture(autouse=True)
def close_figures():
    """Close every figure a test opened"""
    yield
    plt.close('all')


@pytest.fixture
def letter_sets():
    """
    Three overlapping token sets drawn from the alphabet

    x = a..e, y = f..o + z, z = b + j..y
    """
    return {
        'x': LETTERS[0:5],
        'y': LETTERS[5:15] + ['z'],
        'z': ['b'] + LETTERS[9:25],
    }


@pytest.fixture
def peak_sets():
    """
    Two replicate peak sets with a numeric score

    Universe after reduction (gap_width=1):
      chr1:0-10   a only
      chr1:11-15  b only
      chr1:20-40  a and b
      chr1:45-50  b only
    """
    a = pd.DataFrame({
        'chrom': ['chr1'] * 3,
        'start': [0, 20, 30],
        'end': [10, 30, 40],
        'score': [1.0, 2.0, 6.0],
    })
    b = pd.DataFrame({
        'chrom': ['chr1'] * 3,
        'start': [11, 20, 45],
        'end': [15, 30, 50],
        'score': [5.0, 4.0, 3.0],
    })
    return {'a': a, 'b': b}


@pytest.fixture
def feature_table():
    """200 rows of region type with the response of two factors"""
    rng = np.random.default_rng(200)
    return pd.DataFrame({
        'feature': rng.choice(['Promoter', 'Enhancer', 'Intergenic'], 200),
        'TF1': rng.choice(['Up', 'Down', 'Unchanged'], 200),
        'TF2': rng.choice(['Up', 'Down', 'Unchanged'], 200),
    })


# Pytest configuration
def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual functions"
    )
    config.addinivalue_line(
        "markers", "integration: Tests drawing figures or running the CLI"
    )
