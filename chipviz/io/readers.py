"""
I/O Readers

Handles reading of interval and token input files.
"""

from __future__ import annotations
from typing import Dict, List, Union
from pathlib import Path
import io
import logging

import bioframe as bf
import pandas as pd

from ..errors import ConfigurationError
from ..ranges import as_bedframe, empty_ranges
from ..types import PathLike

logger = logging.getLogger(__name__)

INTERVAL_SUFFIXES = ('.bed', '.narrowpeak', '.broadpeak')

# bioframe schema by column count; 9 and 10 columns depend on the file type
BED_SCHEMAS: Dict[int, str] = {
    3: 'bed3', 4: 'bed4', 5: 'bed5', 6: 'bed6', 9: 'bed9', 12: 'bed12',
}
PEAK_SCHEMAS: Dict[str, Dict[int, str]] = {
    '.narrowpeak': {10: 'narrowPeak'},
    '.broadpeak': {9: 'broadPeak'},
}
BED6_FIELDS: List[str] = ['chrom', 'start', 'end', 'name', 'score', 'strand']


def _schema(suffix: str, n_cols: int) -> Union[str, List[str]]:
    """
    bioframe schema for a file, or column names where no schema fits

    Unknown layouts keep the BED6 names for their leading columns.
    """
    schema = PEAK_SCHEMAS.get(suffix, {}).get(n_cols) or BED_SCHEMAS.get(n_cols)
    if schema is None and n_cols == 10:
        schema = 'narrowPeak'
    if schema is not None:
        return schema
    names = BED6_FIELDS[:n_cols]
    return names + [f'col{i + 1}' for i in range(len(names), n_cols)]


class BedReader:
    """Reads BED3+ and ENCODE peak files"""

    @staticmethod
    def load(bed_file: PathLike) -> pd.DataFrame:
        """
        Load intervals from a BED-like file

        Track, browser and comment lines are skipped. Columns are named with
        the matching bioframe schema (bed3 to bed12, narrowPeak, broadPeak),
        so the strand is found in column 6 whatever the width of the file.

        Args:
            bed_file: Path to BED, narrowPeak or broadPeak file

        Returns:
            Interval DataFrame (0-based, half-open as in the file)
        """
        bed_file = Path(bed_file)
        if not bed_file.exists():
            raise FileNotFoundError(f"BED file not found: {bed_file}")

        with open(bed_file, 'r') as f:
            lines = [
                line for line in f
                if line.strip() and not line.startswith(('#', 'track', 'browser'))
            ]
        if not lines:
            logger.warning(f"No intervals found in {bed_file}")
            return empty_ranges()

        n_cols = len(lines[0].rstrip('\r\n').split('\t'))
        if n_cols < 3:
            raise ConfigurationError(f"Expected at least 3 columns in {bed_file}")

        schema = _schema(bed_file.suffix.lower(), n_cols)
        buffer = io.StringIO(''.join(lines))
        if isinstance(schema, str):
            frame = bf.read_table(buffer, schema=schema, dtype={'chrom': str})
        else:
            frame = bf.read_table(buffer, names=schema, dtype={'chrom': str})
        if 'strand' in frame.columns:
            frame['strand'] = frame['strand'].astype(str)

        logger.debug(f"Loaded {len(frame)} intervals from {bed_file} ({n_cols} columns)")
        return as_bedframe(frame, bed_file.name)


class TokenReader:
    """Reads plain lists of tokens (e.g. gene symbols), one per line"""

    @staticmethod
    def load(token_file: PathLike) -> List[str]:
        token_file = Path(token_file)
        if not token_file.exists():
            raise FileNotFoundError(f"Token file not found: {token_file}")
        with open(token_file, 'r') as f:
            tokens = [line.strip() for line in f]
        tokens = [t for t in tokens if t and not t.startswith('#')]
        logger.debug(f"Loaded {len(tokens)} tokens from {token_file}")
        return tokens


def read_bed(bed_file: PathLike) -> pd.DataFrame:
    """
    Convenience function to read a BED-like file
    """
    return BedReader.load(bed_file)


def read_tokens(token_file: PathLike) -> List[str]:
    """
    Convenience function to read a token list
    """
    return TokenReader.load(token_file)


def read_collection(path: PathLike) -> Union[pd.DataFrame, List[str]]:
    """
    Read intervals or tokens depending on the file extension
    """
    if str(path).lower().endswith(INTERVAL_SUFFIXES):
        return read_bed(path)
    return read_tokens(path)
