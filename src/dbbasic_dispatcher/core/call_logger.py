"""
Call Logger

Each registered service logs its own registrations and calls.

Design:
- Logs stored in TSV files (human-readable, grep-able)
- Append-only
- Each service has its own log directory: logs/{service_name}/log.tsv
- Log rotation when file exceeds size limit
- Query logs with filters (level, custom fields)
"""

import csv
import hashlib
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import InvalidServiceNameError


DEFAULT_MAX_LOG_SIZE = 10 * 1024 * 1024  # 10MB

LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

_BASE_FIELDS = ['entry_id', 'timestamp', 'level', 'message']

_SEPARATORS = tuple(sep for sep in ('/', '\\', os.sep, os.altsep) if sep)


def service_log_dir(base_dir: Path | str, service_name: str) -> Path:
    """
    Log directory of a service: base_dir/logs/{service_name}.

    The name must be a single path component.

    Raises:
        InvalidServiceNameError: If the name is empty, '.', '..', or
                                 contains a path separator or NUL
    """
    if service_name in ('', '.', '..'):
        raise InvalidServiceNameError(service_name, "not usable as a directory name")
    if '\x00' in service_name:
        raise InvalidServiceNameError(service_name, "contains a NUL character")
    if any(sep in service_name for sep in _SEPARATORS):
        raise InvalidServiceNameError(service_name, "contains a path separator")

    return Path(base_dir) / 'logs' / service_name


class CallLogger:
    """
    Per-service call log.

    Stored in:
    logs/{service_name}/log.tsv
    """

    def __init__(
        self,
        service_name: str,
        base_dir: Path | str,
        max_log_size: Optional[int] = None,
    ):
        """
        Initialize call logger.

        Args:
            service_name: Name the service is registered under
            base_dir: Base directory for log storage
            max_log_size: Maximum log file size in bytes before rotation
                         (default: 10MB)
        """
        self.service_name = service_name
        self.base_dir = Path(base_dir)
        self.max_log_size = max_log_size or DEFAULT_MAX_LOG_SIZE

        self.log_dir = service_log_dir(self.base_dir, service_name)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / 'log.tsv'

        # Concurrent callers append to the same file
        self._lock = threading.Lock()

    def log(
        self,
        level: str,
        message: str,
        **kwargs,
    ) -> None:
        """
        Append a log entry.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            message: Log message
            **kwargs: Additional fields to log (method, arg_count, etc.)
        """
        if level not in LEVELS:
            raise ValueError(f"Invalid log level: {level}")

        timestamp = datetime.now().isoformat()

        entry = {
            'entry_id': self._generate_entry_id(timestamp, level, message),
            'timestamp': timestamp,
            'level': level,
            'message': message,
            **kwargs,
        }

        # Don't log empty fields
        entry = {k: v for k, v in entry.items() if v is not None}

        with self._lock:
            self._rotate_if_needed()

            fieldnames = self._get_fieldnames()
            for key in entry.keys():
                if key not in fieldnames:
                    fieldnames.append(key)

            is_new_file = not self.log_file.exists()

            if not is_new_file and fieldnames != self._get_fieldnames():
                # A new column appeared: rewrite with the widened header
                self._rewrite_with_fieldnames(fieldnames)

            with open(self.log_file, 'a', newline='') as f:
                writer = csv.DictWriter(f, fieldnames=fieldnames, delimiter='\t')

                if is_new_file:
                    writer.writeheader()

                writer.writerow(entry)

    def debug(self, message: str, **kwargs) -> None:
        """Log DEBUG level message"""
        self.log('DEBUG', message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log INFO level message"""
        self.log('INFO', message, **kwargs)

    def get_logs(
        self,
        level: Optional[Union[str, List[str]]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        **filters,
    ) -> List[Dict[str, Any]]:
        """
        Get log entries.

        Args:
            level: Filter by level (string or list of strings)
            limit: Maximum number of entries to return
            offset: Number of entries to skip
            **filters: Additional filters (e.g., method='add')

        Returns:
            List of log entries (dictionaries), oldest first
        """
        entries = []

        # Rotated files hold older entries
        for rotated_file in sorted(self.log_dir.glob('log-*.tsv')):
            entries.extend(self._read_entries(rotated_file))

        if self.log_file.exists():
            entries.extend(self._read_entries(self.log_file))

        if level is not None:
            if isinstance(level, str):
                level = [level]
            entries = [e for e in entries if e.get('level') in level]

        for key, value in filters.items():
            entries = [e for e in entries if e.get(key) == str(value)]

        if offset > 0:
            entries = entries[offset:]

        if limit is not None:
            entries = entries[:limit]

        return entries

    def _read_entries(self, path: Path) -> List[Dict[str, Any]]:
        with open(path, 'r', newline='') as f:
            reader = csv.DictReader(f, delimiter='\t')
            return [
                {k: v for k, v in row.items() if v != ''}
                for row in reader
            ]

    def _get_fieldnames(self) -> List[str]:
        """Get existing fieldnames from log file"""
        if not self.log_file.exists():
            return list(_BASE_FIELDS)

        with open(self.log_file, 'r', newline='') as f:
            reader = csv.DictReader(f, delimiter='\t')
            return list(reader.fieldnames or _BASE_FIELDS)

    def _rewrite_with_fieldnames(self, fieldnames: List[str]) -> None:
        rows = self._read_entries(self.log_file)
        with open(self.log_file, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, delimiter='\t')
            writer.writeheader()
            writer.writerows(rows)

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size"""
        if not self.log_file.exists():
            return

        size = self.log_file.stat().st_size
        if size < self.max_log_size:
            return

        # Rename current log to log-TIMESTAMP.tsv
        timestamp = datetime.now().strftime('%Y%m%d-%H%M%S-%f')
        rotated_name = self.log_dir / f'log-{timestamp}.tsv'

        self.log_file.rename(rotated_name)

        # Next write creates a new log.tsv with header

    def _generate_entry_id(self, timestamp: str, level: str, message: str) -> str:
        """
        Generate entry ID.

        Uses hash of timestamp + service name + message.
        """
        content = f"{timestamp}:{self.service_name}:{level}:{message}"
        hash_obj = hashlib.sha256(content.encode())
        return hash_obj.hexdigest()[:16]
