#!/usr/bin/env python3
"""
stylestats - stylesheet statistics on the command line

Main entry point for the stylestats command.
"""

import argparse
import sys
from typing import List, Optional

from stylestats import __version__
from stylestats.core.engine import StyleStats
from stylestats.errors import StyleStatsError
from stylestats.format.formatter import FORMATTERS, render
from stylestats.utils.config import Config
from stylestats.utils.logging import log_exception, setup_logging


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="stylestats",
        description="Collect statistics about stylesheets from files, URLs or CSS text")
    parser.add_argument('sources', nargs='+', metavar='SOURCE',
                        help='CSS/LESS/Stylus file, directory, glob, URL or CSS text')
    parser.add_argument('-c', '--config', default=None, help='Path to a JSON options file')
    parser.add_argument('-f', '--format', dest='output_format', default='table',
                        choices=sorted(FORMATTERS), help='Output format (default: table)')
    parser.add_argument('-n', '--number', type=int, default=None,
                        help='Show only the top N properties')
    parser.add_argument('--gzip', action='store_true', help='Report the gzipped size')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', default=None, help='Also write a detailed log to this file')
    parser.add_argument('-V', '--version', action='version', version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    options = Config.load(args.config) if args.config else {}
    if args.number is not None:
        options["propertiesCount"] = args.number
    if args.gzip:
        options["gzippedSize"] = True
    return Config(options)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command."""
    args = parse_arguments(argv)

    logger = setup_logging(log_file=args.log_file,
                           console_level="DEBUG" if args.debug else "WARNING")

    try:
        config = build_config(args)
        record = StyleStats(args.sources, config).parse()
    except StyleStatsError as e:
        log_exception(logger, e, message=f"{e.kind} error")
        return 1

    print(render(record, args.output_format))
    return 0


if __name__ == "__main__":
    sys.exit(main())
