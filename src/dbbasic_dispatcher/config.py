"""
Dispatcher configuration loader

Reads dispatcher.tsv (key<TAB>value rows, '#' comments) when it exists,
then applies DISPATCHER_* environment variables on top. Keyword arguments
passed to DispatcherConfig win over both.

Keys:
    variadic_policy   accept | reject          (DISPATCHER_VARIADIC_POLICY)
    log_dir           base directory for logs  (DISPATCHER_LOG_DIR)
    max_log_size      bytes before rotation    (DISPATCHER_MAX_LOG_SIZE)
    call_logging      true | false             (DISPATCHER_CALL_LOGGING)
"""

import csv
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .core.call_logger import DEFAULT_MAX_LOG_SIZE
from .core.errors import ConfigError
from .core.registry import VARIADIC_ACCEPT, VARIADIC_POLICIES


ENV_PREFIX = 'DISPATCHER_'

DEFAULTS: Dict[str, Any] = {
    'variadic_policy': VARIADIC_ACCEPT,
    'log_dir': None,
    'max_log_size': DEFAULT_MAX_LOG_SIZE,
    'call_logging': True,
}

_TRUE = ('1', 'true', 'yes', 'on')
_FALSE = ('0', 'false', 'no', 'off')


class DispatcherConfig:
    """Load and manage dispatcher configuration"""

    def __init__(self, config_file: str | Path = "dispatcher.tsv", **overrides):
        self.config_file = Path(config_file)
        self.settings: Dict[str, Any] = dict(DEFAULTS)
        self._load()

        for key, value in overrides.items():
            if key not in DEFAULTS:
                raise ConfigError(f"Unknown configuration key: {key}")
            self.settings[key] = self._parse(key, value)

    def _load(self):
        """Load configuration from TSV file, then the environment"""
        if self.config_file.exists():
            with open(self.config_file, 'r', encoding='utf-8') as f:
                reader = csv.reader(
                    (line for line in f if not line.startswith('#')),
                    delimiter='\t'
                )

                for row in reader:
                    # Skip empty rows
                    if not row or not row[0].strip():
                        continue
                    if len(row) < 2:
                        raise ConfigError(f"Missing value for key '{row[0].strip()}' in {self.config_file}")

                    key = row[0].strip()
                    if key not in DEFAULTS:
                        raise ConfigError(f"Unknown configuration key '{key}' in {self.config_file}")
                    self.settings[key] = self._parse(key, row[1].strip())

        for key in DEFAULTS:
            value = os.environ.get(ENV_PREFIX + key.upper())
            if value is not None and value != '':
                self.settings[key] = self._parse(key, value)

    @staticmethod
    def _parse(key: str, value: Any) -> Any:
        """Validate and convert a raw value for a key"""
        if key == 'variadic_policy':
            policy = str(value).strip().lower()
            if policy not in VARIADIC_POLICIES:
                raise ConfigError(
                    f"Invalid variadic_policy: {value!r} (expected accept or reject)"
                )
            return policy

        if key == 'log_dir':
            if value is None or value == '':
                return None
            return Path(value)

        if key == 'max_log_size':
            try:
                size = int(value)
            except (TypeError, ValueError):
                raise ConfigError(f"Invalid max_log_size: {value!r}")
            if size <= 0:
                raise ConfigError(f"max_log_size must be positive, got {size}")
            return size

        if key == 'call_logging':
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise ConfigError(f"Invalid call_logging: {value!r}")

        return value

    @property
    def variadic_policy(self) -> str:
        return self.settings['variadic_policy']

    @property
    def log_dir(self) -> Optional[Path]:
        return self.settings['log_dir']

    @property
    def max_log_size(self) -> int:
        return self.settings['max_log_size']

    @property
    def call_logging(self) -> bool:
        """Whether calls are logged (needs a log_dir)"""
        return self.settings['call_logging'] and self.log_dir is not None

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.settings)


# Global instance (lazy loaded)
_config = None


def get_config() -> DispatcherConfig:
    """Get the global dispatcher configuration"""
    global _config
    if _config is None:
        _config = DispatcherConfig()
    return _config


def reload_config() -> DispatcherConfig:
    """Reload configuration from file and environment"""
    global _config
    _config = DispatcherConfig()
    return _config
