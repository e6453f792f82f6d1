"""
Tests for JobConfig validation and environment handling
"""

import pytest

from common.config import (
    ENV_CURRENCY,
    ENV_INTERMEDIATE_DIR,
    ENV_LOCALE,
    ENV_NUM_MAP_TASKS,
    ENV_NUM_REDUCE_TASKS,
    JobConfig,
)
from common.errors import ConfigError


class TestJobConfigValidation:

    def test_defaults(self):
        config = JobConfig(input_path='in', output_path='out')

        assert config.locale == 'en_US'
        assert config.currency == 'USD'
        assert config.job_file == 'jobs.market_cap'
        assert config.num_map_tasks == 4
        assert config.num_reduce_tasks == 2
        assert config.use_combiner is False

    def test_currency_derived_from_locale(self):
        assert JobConfig(input_path='in', output_path='out', locale='de_DE').currency == 'EUR'
        assert JobConfig(input_path='in', output_path='out', locale='ja_JP').currency == 'JPY'

    def test_explicit_currency_is_normalized(self):
        config = JobConfig(input_path='in', output_path='out', locale='en_GB', currency='usd')
        assert config.currency == 'USD'

    @pytest.mark.parametrize('field', ['input_path', 'output_path'])
    def test_empty_locations_rejected(self, field):
        values = {'input_path': 'in', 'output_path': 'out', field: ''}
        with pytest.raises(ConfigError, match='must not be empty'):
            JobConfig(**values)

    @pytest.mark.parametrize('field', ['num_map_tasks', 'num_reduce_tasks', 'max_workers',
                                       'max_task_attempts'])
    @pytest.mark.parametrize('value', [0, -1, True, 2.5])
    def test_counts_must_be_positive_integers(self, field, value):
        with pytest.raises(ConfigError, match=field):
            JobConfig(input_path='in', output_path='out', **{field: value})

    def test_unknown_locale_rejected(self):
        with pytest.raises(ConfigError, match='Unknown locale'):
            JobConfig(input_path='in', output_path='out', locale='xx_NOPE')

    def test_config_is_immutable(self):
        config = JobConfig(input_path='in', output_path='out')
        with pytest.raises(AttributeError):
            config.num_map_tasks = 8


class TestJobConfigFromEnv:

    def test_reads_environment(self):
        env = {
            ENV_LOCALE: 'fr_FR',
            ENV_NUM_MAP_TASKS: '6',
            ENV_NUM_REDUCE_TASKS: '3',
            ENV_INTERMEDIATE_DIR: '/tmp/mr',
        }

        config = JobConfig.from_env('in', 'out', environ=env)

        assert config.locale == 'fr_FR'
        assert config.currency == 'EUR'
        assert config.num_map_tasks == 6
        assert config.num_reduce_tasks == 3
        assert config.intermediate_dir == '/tmp/mr'

    def test_overrides_win_over_environment(self):
        env = {ENV_NUM_MAP_TASKS: '6', ENV_CURRENCY: 'GBP'}

        config = JobConfig.from_env('in', 'out', environ=env, num_map_tasks=2, currency='CHF')

        assert config.num_map_tasks == 2
        assert config.currency == 'CHF'

    def test_none_overrides_are_ignored(self):
        env = {ENV_NUM_MAP_TASKS: '6'}

        config = JobConfig.from_env('in', 'out', environ=env, num_map_tasks=None, locale=None)

        assert config.num_map_tasks == 6
        assert config.locale == 'en_US'

    def test_empty_environment_uses_defaults(self):
        config = JobConfig.from_env('in', 'out', environ={})
        assert config == JobConfig(input_path='in', output_path='out',
                                   intermediate_dir=config.intermediate_dir)

    def test_non_integer_environment_value(self):
        with pytest.raises(ConfigError, match=ENV_NUM_MAP_TASKS):
            JobConfig.from_env('in', 'out', environ={ENV_NUM_MAP_TASKS: 'many'})
