"""
Unit tests for dispatcher configuration

Precedence, lowest first:
- Built-in defaults
- dispatcher.tsv
- DISPATCHER_* environment variables
- Keyword arguments
"""

from pathlib import Path

import pytest

import dbbasic_dispatcher.config as config_module
from dbbasic_dispatcher import ConfigError, DispatcherConfig, get_config, reload_config
from dbbasic_dispatcher.core.call_logger import DEFAULT_MAX_LOG_SIZE


ENV_VARS = [
    'DISPATCHER_VARIADIC_POLICY',
    'DISPATCHER_LOG_DIR',
    'DISPATCHER_MAX_LOG_SIZE',
    'DISPATCHER_CALL_LOGGING',
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's environment out of the tests"""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def write_config(path: Path, rows):
    path.write_text(''.join(f'{row}\n' for row in rows))
    return path


class TestDefaults:
    def test_defaults_without_file(self, tmp_path):
        config = DispatcherConfig(tmp_path / 'missing.tsv')

        assert config.variadic_policy == 'accept'
        assert config.log_dir is None
        assert config.max_log_size == DEFAULT_MAX_LOG_SIZE

    def test_call_logging_needs_log_dir(self, tmp_path):
        """Logging is switched on by default but has nowhere to write"""
        config = DispatcherConfig(tmp_path / 'missing.tsv')

        assert config.settings['call_logging'] is True
        assert config.call_logging is False

    def test_as_dict_is_a_copy(self, tmp_path):
        config = DispatcherConfig(tmp_path / 'missing.tsv')

        values = config.as_dict()
        values['variadic_policy'] = 'reject'

        assert config.variadic_policy == 'accept'


class TestConfigFile:
    """Test loading dispatcher.tsv"""

    def test_load_values(self, tmp_path):
        config_file = write_config(tmp_path / 'dispatcher.tsv', [
            '# dispatcher settings',
            'variadic_policy\treject',
            f'log_dir\t{tmp_path}',
            'max_log_size\t4096',
            'call_logging\tyes',
        ])

        config = DispatcherConfig(config_file)

        assert config.variadic_policy == 'reject'
        assert config.log_dir == tmp_path
        assert config.max_log_size == 4096
        assert config.call_logging is True

    def test_blank_rows_are_skipped(self, tmp_path):
        config_file = write_config(tmp_path / 'dispatcher.tsv', [
            '',
            'variadic_policy\tREJECT',
            '',
        ])

        assert DispatcherConfig(config_file).variadic_policy == 'reject'

    def test_unknown_key(self, tmp_path):
        config_file = write_config(tmp_path / 'dispatcher.tsv', ['replicate\ttrue'])

        with pytest.raises(ConfigError, match='replicate'):
            DispatcherConfig(config_file)

    def test_missing_value(self, tmp_path):
        config_file = write_config(tmp_path / 'dispatcher.tsv', ['log_dir'])

        with pytest.raises(ConfigError, match='log_dir'):
            DispatcherConfig(config_file)

    @pytest.mark.parametrize('row', [
        'variadic_policy\tsometimes',
        'max_log_size\tbig',
        'max_log_size\t0',
        'max_log_size\t-10',
        'call_logging\tmaybe',
    ])
    def test_invalid_values(self, tmp_path, row):
        config_file = write_config(tmp_path / 'dispatcher.tsv', [row])

        with pytest.raises(ConfigError):
            DispatcherConfig(config_file)

    def test_config_error_is_a_value_error(self, tmp_path):
        config_file = write_config(tmp_path / 'dispatcher.tsv', ['max_log_size\tbig'])

        with pytest.raises(ValueError):
            DispatcherConfig(config_file)


class TestPrecedence:
    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        config_file = write_config(tmp_path / 'dispatcher.tsv', ['variadic_policy\treject'])
        monkeypatch.setenv('DISPATCHER_VARIADIC_POLICY', 'accept')

        assert DispatcherConfig(config_file).variadic_policy == 'accept'

    def test_empty_environment_value_is_ignored(self, tmp_path, monkeypatch):
        config_file = write_config(tmp_path / 'dispatcher.tsv', ['max_log_size\t2048'])
        monkeypatch.setenv('DISPATCHER_MAX_LOG_SIZE', '')

        assert DispatcherConfig(config_file).max_log_size == 2048

    def test_environment_values_are_parsed(self, tmp_path, monkeypatch):
        monkeypatch.setenv('DISPATCHER_LOG_DIR', str(tmp_path))
        monkeypatch.setenv('DISPATCHER_CALL_LOGGING', 'off')

        config = DispatcherConfig(tmp_path / 'missing.tsv')

        assert config.log_dir == tmp_path
        assert config.call_logging is False

    def test_invalid_environment_value(self, tmp_path, monkeypatch):
        monkeypatch.setenv('DISPATCHER_VARIADIC_POLICY', 'never')

        with pytest.raises(ConfigError):
            DispatcherConfig(tmp_path / 'missing.tsv')

    def test_keyword_arguments_override_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv('DISPATCHER_VARIADIC_POLICY', 'reject')

        config = DispatcherConfig(tmp_path / 'missing.tsv', variadic_policy='accept', log_dir=tmp_path)

        assert config.variadic_policy == 'accept'
        assert config.log_dir == tmp_path
        assert config.call_logging is True

    def test_keyword_arguments_are_validated(self, tmp_path):
        with pytest.raises(ConfigError):
            DispatcherConfig(tmp_path / 'missing.tsv', max_log_size=0)

        with pytest.raises(ConfigError):
            DispatcherConfig(tmp_path / 'missing.tsv', replicate=True)

    def test_keyword_log_dir_none_disables_logging(self, tmp_path, monkeypatch):
        monkeypatch.setenv('DISPATCHER_LOG_DIR', str(tmp_path))

        config = DispatcherConfig(tmp_path / 'missing.tsv', log_dir=None)

        assert config.call_logging is False


class TestGlobalConfig:
    """Test the lazily loaded global configuration"""

    @pytest.fixture(autouse=True)
    def reset_global(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config_module, '_config', None)
        monkeypatch.chdir(tmp_path)

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reload_config_reads_environment_again(self, monkeypatch):
        first = get_config()
        assert first.variadic_policy == 'accept'

        monkeypatch.setenv('DISPATCHER_VARIADIC_POLICY', 'reject')
        reloaded = reload_config()

        assert reloaded is not first
        assert reloaded.variadic_policy == 'reject'
        assert get_config() is reloaded

    def test_reads_dispatcher_tsv_from_working_directory(self, tmp_path):
        write_config(tmp_path / 'dispatcher.tsv', ['max_log_size\t1024'])

        assert get_config().max_log_size == 1024
