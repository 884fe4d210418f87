"""Overlaps subcommand - Venn / UpSet plots"""

from __future__ import annotations
from typing import Dict, List, Union
from pathlib import Path
import logging
from argparse import ArgumentParser, Namespace, _SubParsersAction

import pandas as pd

from ..config import OverlapConfig
from ..errors import ConfigurationError
from ..io import read_collection, write_groups
from ..overlaps import OverlapPlotter

logger = logging.getLogger(__name__)


def add_parser(subparsers: _SubParsersAction) -> ArgumentParser:
    """
    Add overlaps subcommand parser

    Args:
        subparsers: Subparser action from main argument parser

    Returns:
        Configured ArgumentParser for overlaps subcommand
    """
    parser = subparsers.add_parser(
        'overlaps',
        help='Plot overlaps between peak sets or gene lists'
    )

    # Inputs
    parser.add_argument('-i', '--input', required=True, nargs='+', metavar='NAME=PATH',
                        help='Named inputs. BED/narrowPeak/broadPeak files are read as '
                             'intervals, any other file as one token per line')
    parser.add_argument('-o', '--output', required=True,
                        help='Output figure (format from extension, e.g. .png, .pdf)')
    parser.add_argument('--groups',
                        help='Optional TSV of intersection group sizes')

    # Plot type
    parser.add_argument('--type', choices=['auto', 'venn', 'upset'], default='auto',
                        help='Diagram type (default: auto, Venn for up to three sets)')
    parser.add_argument('--var',
                        help='Numeric interval column (or "width") summarised above an UpSet plot')
    parser.add_argument('--reducer', choices=['mean', 'median', 'max', 'min', 'sd'], default='mean',
                        help='Summarisation of --var within each merged interval (default: mean)')
    parser.add_argument('--colors', nargs='+',
                        help='Set colors, recycled in input order')

    # Reduction
    parser.add_argument('--gap-width', type=int, default=1,
                        help='Merge intervals separated by fewer than this many bases (default: 1)')
    parser.add_argument('--stranded', action='store_true',
                        help='Only merge intervals on the same strand')
    parser.add_argument('--preset', choices=['default', 'publication', 'presentation', 'compact'],
                        default='default', help='Styling preset (default: default)')
    parser.add_argument('--dpi', type=int, default=300, help='Figure resolution (default: 300)')

    # Debug flag
    parser.add_argument('--debug', action='store_true', help='Enable debug logging for troubleshooting')

    return parser  # type: ignore[no-any-return]


def parse_inputs(entries: List[str]) -> Dict[str, Union[pd.DataFrame, List[str]]]:
    """
    Read NAME=PATH input arguments, keeping their order

    A bare PATH is named after the file stem.
    """
    collections: Dict[str, Union[pd.DataFrame, List[str]]] = {}
    for entry in entries:
        name, sep, path = entry.partition('=')
        if not sep:
            path, name = entry, Path(entry).name.split('.')[0]
        if name in collections:
            raise ConfigurationError(f"Duplicated set name: {name}")
        if not Path(path).exists():
            raise FileNotFoundError(f"Input file not found: {path}")
        collections[name] = read_collection(path)
        logger.info(f"Loaded set '{name}' from {path}")
    return collections


def run(args: Namespace) -> None:
    """
    Execute overlaps subcommand

    Args:
        args: Parsed command-line arguments from argparse
    """
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "debug", False) else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True
    )
    for noisy in ("matplotlib", "matplotlib.font_manager", "PIL", "PIL.Image", "fontTools"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)

    config = OverlapConfig() if args.preset == 'default' else getattr(OverlapConfig, args.preset)()
    collections = parse_inputs(args.input)

    logger.info(f"Type: {args.type}")
    logger.info(f"Output: {output}")

    plotter = OverlapPlotter(config)
    result = plotter.plot(
        collections,
        type=args.type,
        var=args.var,
        reducer=args.reducer,
        set_colors=args.colors,
        gap_width=args.gap_width,
        ignore_strand=not args.stranded,
        output_file=str(output),
        dpi=args.dpi
    )

    if args.groups:
        write_groups(result, args.groups)

    logger.info(f"✓ {result.strategy.value} plot saved: {output}")
