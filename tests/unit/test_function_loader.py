"""
Unit tests for FunctionLoader
"""

import os

import pytest

from common.counters import STOCK_SYMBOLS
from worker.function_loader import FunctionLoader

WORDCOUNT_JOB = '''
def map_function(key, value, context):
    for word in value.split():
        yield (word, 1)


def reduce_function(key, values, context):
    yield (key, sum(values))
'''


@pytest.fixture
def wordcount_job_file(temp_dir):
    """A plain text job without combiner, record reader or counters"""
    path = os.path.join(temp_dir, 'wordcount.py')
    with open(path, 'w') as f:
        f.write(WORDCOUNT_JOB)
    return path


class TestFunctionLoaderBasics:
    """Tests for basic loading functionality"""

    def test_loads_job_by_module_name(self, market_cap_job):
        loader = FunctionLoader(market_cap_job)
        module = loader.load_module()

        assert hasattr(module, 'map_function')
        assert hasattr(module, 'reduce_function')
        assert hasattr(module, 'combiner_function')

    def test_loads_job_from_file(self, wordcount_job_file):
        loader = FunctionLoader(wordcount_job_file)
        module = loader.load_module()

        assert module.__name__ == 'mapreduce_job_wordcount'
        assert callable(module.map_function)

    def test_raises_error_for_nonexistent_file(self):
        loader = FunctionLoader('/nonexistent/file.py')

        with pytest.raises(FileNotFoundError):
            loader.load_module()

    def test_raises_error_for_unknown_module(self):
        loader = FunctionLoader('jobs.does_not_exist')

        with pytest.raises(ModuleNotFoundError):
            loader.load_module()

    def test_get_map_function_loads_module_automatically(self, market_cap_job):
        loader = FunctionLoader(market_cap_job)
        map_func = loader.get_map_function()

        assert callable(map_func)
        assert loader.module is not None


class TestFunctionLoaderRequiredFunctions:
    """Tests for missing job functions"""

    def test_missing_map_function(self, temp_dir):
        path = os.path.join(temp_dir, 'reduce_only.py')
        with open(path, 'w') as f:
            f.write('def reduce_function(key, values, context):\n    yield (key, 0)\n')

        with pytest.raises(AttributeError, match='map_function'):
            FunctionLoader(path).get_map_function()

    def test_missing_reduce_function(self, temp_dir):
        path = os.path.join(temp_dir, 'map_only.py')
        with open(path, 'w') as f:
            f.write('def map_function(key, value, context):\n    yield (value, 1)\n')

        loader = FunctionLoader(path)
        with pytest.raises(AttributeError, match='reduce_function'):
            loader.get_reduce_function()
        assert loader.get_combiner_function() is None


class TestFunctionLoaderOptionalHooks:
    """Tests for combiner, record reader and declared counters"""

    def test_explicit_combiner(self, market_cap_job):
        loader = FunctionLoader(market_cap_job)
        assert loader.get_combiner_function() is loader.module.combiner_function

    def test_combiner_defaults_to_reduce(self, wordcount_job_file):
        loader = FunctionLoader(wordcount_job_file)
        assert loader.get_combiner_function() is loader.get_reduce_function()

    def test_record_reader_from_job(self, market_cap_job):
        reader = FunctionLoader(market_cap_job).get_record_reader()
        assert reader('NYSE,IBM,2001-05-02,1,1,1,2.5,10,2.5').symbol == 'IBM'

    def test_record_reader_defaults_to_line(self, wordcount_job_file):
        reader = FunctionLoader(wordcount_job_file).get_record_reader()
        assert reader('the quick fox') == 'the quick fox'

    def test_declared_counters(self, market_cap_job, wordcount_job_file):
        assert FunctionLoader(market_cap_job).get_declared_counters() == (STOCK_SYMBOLS,)
        assert FunctionLoader(wordcount_job_file).get_declared_counters() == ()
