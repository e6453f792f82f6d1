#!/usr/bin/env python3
"""
Generate synthetic daily stock price files in the NYSE / NASDAQ dataset layout.
Prices follow a seeded random walk, so the same arguments always produce the same file.
"""

import argparse
import random
import string
import sys
from datetime import date, timedelta
from pathlib import Path

# Allow running as `python scripts/generate_price_data.py` from the project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from common.records import FIELDS  # noqa: E402


def make_symbols(count: int, rng: random.Random) -> list:
    """Distinct 2-4 letter ticker symbols."""
    symbols = set()
    while len(symbols) < count:
        length = rng.randint(2, 4)
        symbols.add(''.join(rng.choice(string.ascii_uppercase) for _ in range(length)))
    return sorted(symbols)


def trading_days(start: date, count: int):
    """Yield the first `count` weekdays on or after `start`."""
    day = start
    produced = 0
    while produced < count:
        if day.weekday() < 5:
            yield day
            produced += 1
        day += timedelta(days=1)


def generate_file(output_path: Path, num_symbols: int, num_days: int,
                  exchange: str = 'NYSE', seed: int = 42,
                  start: date = date(2000, 1, 3)) -> int:
    """
    Write a daily prices CSV with a header row.

    Args:
        output_path: Path where the output file should be written
        num_symbols: Number of distinct stock symbols
        num_days: Number of trading days per symbol
        exchange: Value of the exchange column
        seed: Random seed
        start: First calendar day considered

    Returns:
        Number of data rows written
    """
    rng = random.Random(seed)
    symbols = make_symbols(num_symbols, rng)
    days = list(trading_days(start, num_days))
    rows = 0

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(','.join(FIELDS) + '\n')
        for symbol in symbols:
            close = rng.uniform(5, 200)
            for day in days:
                open_price = close
                close = max(0.01, close * (1 + rng.gauss(0, 0.02)))
                high = max(open_price, close) * (1 + rng.uniform(0, 0.01))
                low = min(open_price, close) * (1 - rng.uniform(0, 0.01))
                volume = rng.randint(0, 5_000_000)
                f.write(f"{exchange},{symbol},{day.isoformat()},{open_price:.2f},{high:.2f},"
                        f"{low:.2f},{close:.2f},{volume},{close:.2f}\n")
                rows += 1

    return rows


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('output', type=Path, help='CSV file to write')
    parser.add_argument('--symbols', type=int, default=100, help='Number of stock symbols')
    parser.add_argument('--days', type=int, default=250, help='Trading days per symbol')
    parser.add_argument('--exchange', default='NYSE')
    parser.add_argument('--seed', type=int, default=42)
    args = parser.parse_args(argv)

    rows = generate_file(args.output, args.symbols, args.days, args.exchange, args.seed)
    size = args.output.stat().st_size
    print(f"✓ Created: {args.output} ({rows} rows, {size / (1024 * 1024):.2f} MB)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
