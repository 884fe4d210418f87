"""
ChIPViz CLI

Command-line interface with subcommands for each plot type.
"""

import argparse
import sys
from .cli import overlaps, pie


def main():
    parser = argparse.ArgumentParser(
        prog='chipviz',
        description='ChIPViz: overlap and composition plots for ChIP-Seq analysis'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Add subcommand parsers
    overlaps.add_parser(subparsers)
    pie.add_parser(subparsers)

    # Parse arguments
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Execute the appropriate subcommand
    if args.command == 'overlaps':
        overlaps.run(args)
    elif args.command == 'pie':
        pie.run(args)


if __name__ == "__main__":
    main()
