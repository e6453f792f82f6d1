"""
Pytest configuration and shared fixtures
"""

import os
import shutil
import tempfile

import pytest

from common.records import FIELDS

HEADER = ','.join(FIELDS)


def price_line(symbol, close, volume, day='2010-01-04', exchange='NYSE'):
    """One dataset line; open/high/low/adj_close are derived from close"""
    return f"{exchange},{symbol},{day},{close},{close},{close},{close},{volume},{close}"


def write_prices(path, rows, header=True):
    """Write (symbol, close, volume[, day]) rows as a daily prices CSV file"""
    with open(path, 'w') as f:
        if header:
            f.write(HEADER + '\n')
        for row in rows:
            f.write(price_line(*row) + '\n')
    return path


def read_part_lines(output_path):
    """All output lines of a job, in part file order"""
    lines = []
    for name in sorted(os.listdir(output_path)):
        if name.startswith('part-'):
            with open(os.path.join(output_path, name)) as f:
                lines.extend(f.read().splitlines())
    return lines


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    dirpath = tempfile.mkdtemp()
    yield dirpath
    shutil.rmtree(dirpath)


@pytest.fixture
def intermediate_dir(temp_dir):
    return os.path.join(temp_dir, 'intermediate')


@pytest.fixture
def scenario_rows():
    """AAPL peaks at 90 * 50 = 4500, GOOG at 1000 * 1 = 1000"""
    return [
        ('AAPL', 100, 10, '2010-01-04'),
        ('AAPL', 90, 50, '2010-01-05'),
        ('GOOG', 1000, 1, '2010-01-04'),
    ]


@pytest.fixture
def sample_input_file(temp_dir, scenario_rows):
    """Daily prices file for the AAPL/GOOG scenario"""
    return write_prices(os.path.join(temp_dir, 'prices.csv'), scenario_rows)


@pytest.fixture
def market_cap_job():
    """Module name of the market cap job"""
    return 'jobs.market_cap'
