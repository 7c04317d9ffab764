#!/usr/bin/env python3
"""
Liquidity Aggregation - Main Entry Point
=========================================
Finds the order book granularity at which a market shows enough supports.

Usage:
    python main.py agg --exchange binance --market BTCUSDT [--dip 5] [--pip 30]
                       [--max 0] [--min 0] [--top 4] [--dist 0]
                       [--strict] [--sandbox] [--json]
    python main.py book --exchange binance --market BTCUSDT --agg 50 [--side bids]
    python main.py agg --book-file snapshot.json --market BTCUSDT
    python main.py config
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
load_dotenv(Path(__file__).parent / ".env")

from config import DEFAULT_TOLERANCE, validate_config, get_config_summary
from core.exceptions import AggregationException, ExchangeAPIError, ThinBookError
from aggregation import get_aggregation, aggregate_book
from exchanges import StaticBookSource, get_source
from utils.logger import get_logger, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aggregation")
    sub = parser.add_subparsers(dest="command", required=True)

    def common(p: argparse.ArgumentParser):
        p.add_argument("--exchange", default=None, help="exchange name, e.g. binance")
        p.add_argument("--book-file", default=None, help="offline JSON book snapshot")
        p.add_argument("--market", required=True, help="a valid market pair")
        p.add_argument("--sandbox", action="store_true", help="use the exchange sandbox")

    agg = sub.add_parser("agg", help="calculate the aggregation level for a market")
    common(agg)
    agg.add_argument("--dip", type=float, default=DEFAULT_TOLERANCE.dip,
                     help="%% below the 24h average that kicks the bot into action")
    agg.add_argument("--pip", type=float, default=None,
                     help="range in %% where the market is suspected to move up and down")
    agg.add_argument("--max", type=float, default=DEFAULT_TOLERANCE.max_price,
                     help="maximum price you want to pay")
    agg.add_argument("--min", type=float, default=DEFAULT_TOLERANCE.min_price,
                     help="minimum price you want to pay")
    agg.add_argument("--top", type=int, default=DEFAULT_TOLERANCE.top,
                     help="number of supports wanted")
    agg.add_argument("--dist", type=int, default=DEFAULT_TOLERANCE.dist,
                     help="minimum %% distance between supports")
    agg.add_argument("--strict", action="store_true", help="never relax dip or pip")
    agg.add_argument("--json", action="store_true", help="print the full result as JSON")

    book = sub.add_parser("book", help="list the bucketed order book")
    common(book)
    book.add_argument("--agg", type=float, required=True, help="bucket size")
    book.add_argument("--side", choices=["bids", "asks"], default="bids")

    sub.add_parser("config", help="show the current configuration")

    return parser


def validate_args(args: argparse.Namespace) -> List[str]:
    """Range checks the search itself does not perform."""
    errors = []
    if args.command == "config":
        return errors

    if not args.exchange and not args.book_file:
        errors.append("missing argument: exchange")

    if args.command == "agg":
        if not 0 <= args.dip < 100:
            errors.append(f"dip {args.dip:g} is invalid")
        if args.pip is not None:
            if not 0 < args.pip <= 100:
                errors.append(f"pip {args.pip:g} is invalid")
            elif args.pip <= args.dip:
                errors.append(f"pip {args.pip:g} must be higher than dip {args.dip:g}")
        if args.max < 0:
            errors.append(f"max {args.max:g} is invalid")
        if args.min < 0:
            errors.append(f"min {args.min:g} is invalid")
        if args.top < 1:
            errors.append(f"top {args.top} is invalid")
        if args.dist < 0:
            errors.append(f"dist {args.dist} is invalid")
    elif args.command == "book":
        if args.agg <= 0:
            errors.append(f"agg value {args.agg:g} is invalid")

    return errors


def open_source(args: argparse.Namespace):
    if args.book_file:
        return StaticBookSource.from_file(args.book_file)
    return get_source(args.exchange, sandbox=args.sandbox)


async def run(args: argparse.Namespace) -> int:
    """Execute one command and print its output."""
    async with open_source(args) as source:
        if args.command == "agg":
            pip = DEFAULT_TOLERANCE.pip if args.pip is None else args.pip
            result = await get_aggregation(
                source, args.market,
                dip=args.dip, pip=pip, max_price=args.max, min_price=args.min,
                top=args.top, strict=args.strict, dist=args.dist,
            )
            if args.json:
                print(json.dumps(result.to_dict()))
            else:
                print(f"{result.granularity:g}")
            if result.relaxed:
                logger.info(f"{args.market}: relaxed to dip={result.dip:g}% pip={result.pip:g}%")
        else:
            levels = await aggregate_book(source, args.market, args.agg, side=args.side)
            print(json.dumps([level.to_dict() for level in levels]))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    if not validate_config():
        return 1

    errors = validate_args(args)
    if errors:
        for error in errors:
            logger.error(error)
        return 1

    if args.command == "config":
        print(get_config_summary())
        return 0

    try:
        return asyncio.run(run(args))
    except ThinBookError as e:
        logger.warning(f"{args.market}: {e}")
        return 1
    except ExchangeAPIError as e:
        get_logger().log_api_error(args.exchange or "book-file", f"{args.market}: {e}")
        return 1
    except AggregationException as e:
        logger.error(f"{args.market}: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
