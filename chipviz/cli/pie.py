"""Pie subcommand - categorical composition"""

from __future__ import annotations
from pathlib import Path
import logging
from argparse import ArgumentParser, Namespace, _SubParsersAction

import pandas as pd

from ..config import PieConfig
from ..pie import PiePlotter

logger = logging.getLogger(__name__)


def add_parser(subparsers: _SubParsersAction) -> ArgumentParser:
    """
    Add pie subcommand parser

    Args:
        subparsers: Subparser action from main argument parser

    Returns:
        Configured ArgumentParser for pie subcommand
    """
    parser = subparsers.add_parser(
        'pie',
        help='Plot categorical composition as pie charts'
    )

    parser.add_argument('-i', '--input', required=True,
                        help='Tab-separated table with a header row')
    parser.add_argument('-o', '--output', required=True,
                        help='Output figure (format from extension)')
    parser.add_argument('--fill', required=True,
                        help='Column defining the slices')
    parser.add_argument('--x', help='Column splitting pies horizontally')
    parser.add_argument('--y', help='Column splitting pies vertically (requires --x)')
    parser.add_argument('--scale-by', help='Numeric column summed instead of counting rows')
    parser.add_argument('--no-total', action='store_true', help='Hide totals')
    parser.add_argument('--no-category', action='store_true', help='Hide slice labels')
    parser.add_argument('--dpi', type=int, default=300, help='Figure resolution (default: 300)')

    # Debug flag
    parser.add_argument('--debug', action='store_true', help='Enable debug logging for troubleshooting')

    return parser  # type: ignore[no-any-return]


def run(args: Namespace) -> None:
    """
    Execute pie subcommand

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

    input_file = Path(args.input)
    if not input_file.exists():
        raise FileNotFoundError(f"Input file not found: {input_file}")
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = pd.read_csv(input_file, sep='\t')
    logger.info(f"Loaded {len(data)} rows from {input_file}")

    config = PieConfig(show_total=not args.no_total, show_category=not args.no_category)
    result = PiePlotter(config).plot(
        data, fill=args.fill, x=args.x, y=args.y, scale_by=args.scale_by,
        output_file=str(output), dpi=args.dpi
    )
    logger.info(f"✓ Pie chart saved: {output} ({len(result.data)} slices)")
