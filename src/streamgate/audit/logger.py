"""
Audit logging for gateway routing decisions.

Events are buffered and appended to a JSON Lines file. The file is rotated
daily; rotated files are optionally gzip-compressed and removed once they
are older than the retention window.
"""

import gzip
import hashlib
import json
import logging
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from streamgate.providers.events import GatewayEvent
from streamgate.storage.paths import get_audit_log_path

logger = logging.getLogger(__name__)


class AuditLogger:
    """
    JSON Lines based audit logger.

    Logs gateway events to a file with daily rotation and compression support.
    """

    def __init__(
        self,
        log_path: str | Path,
        enable: bool = True,
        retention_days: int = 30,
        compress_old: bool = True,
        hash_details: bool = False,
        buffer_size: int = 20,
        flush_interval_seconds: int = 5,
    ) -> None:
        """
        Initialize audit logger.

        Args:
            log_path: Path to audit log file
            enable: Whether logging is enabled
            retention_days: Days to keep rotated logs
            compress_old: Whether to gzip rotated logs
            hash_details: Replace free-text details with their SHA256 hash
            buffer_size: Number of events to buffer before flush
            flush_interval_seconds: Seconds between forced flushes
        """
        self.log_path = Path(log_path).expanduser()
        self.enable = enable
        self.retention_days = retention_days
        self.compress_old = compress_old
        self.hash_details = hash_details
        self.buffer_size = buffer_size
        self.flush_interval_seconds = flush_interval_seconds

        self._buffer: list[dict[str, Any]] = []
        self._last_flush = datetime.now()

        if self.enable:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_config(cls, config: Any) -> "AuditLogger":
        """
        Create audit logger from configuration.

        Args:
            config: AuditLogConfig instance
        """
        return cls(
            log_path=config.path or get_audit_log_path(),
            enable=config.enable,
            retention_days=config.retention_days,
            compress_old=config.compress_old,
            hash_details=config.hash_details,
            buffer_size=config.buffer_size,
            flush_interval_seconds=config.flush_interval_seconds,
        )

    def _hash_text(self, text: str) -> str:
        return hashlib.sha256(text.encode()).hexdigest()

    def log_gateway_event(self, event: GatewayEvent) -> None:
        """Record a GatewayEvent produced by the failover controller."""
        record = event.to_dict()
        if self.hash_details and "detail" in record:
            record["detail_hash"] = self._hash_text(record.pop("detail"))
        self._write_event(record)

    def _write_event(self, event: dict[str, Any]) -> None:
        if not self.enable:
            return

        self._buffer.append(event)

        now = datetime.now()
        should_flush = (
            len(self._buffer) >= self.buffer_size
            or (now - self._last_flush).total_seconds() >= self.flush_interval_seconds
        )
        if should_flush:
            self.flush()

    def flush(self) -> None:
        """Flush buffered events to disk."""
        if not self.enable or not self._buffer:
            return

        self._rotate_if_needed()

        with self.log_path.open("a", encoding="utf-8") as f:
            for event in self._buffer:
                f.write(json.dumps(event) + "\n")

        self._buffer.clear()
        self._last_flush = datetime.now()

    def _rotate_if_needed(self) -> None:
        """Rotate the log when it was last written on an earlier day."""
        if not self.log_path.exists():
            return

        modified = datetime.fromtimestamp(self.log_path.stat().st_mtime)
        if modified.date() >= datetime.now().date():
            return

        rotated = self.log_path.with_name(
            f"{self.log_path.stem}.{modified:%Y%m%d}{self.log_path.suffix}"
        )
        self.log_path.rename(rotated)

        if self.compress_old:
            self._compress_log(rotated)

        self._clean_old_logs()

    def _compress_log(self, log_path: Path) -> None:
        gz_path = log_path.with_name(log_path.name + ".gz")
        with log_path.open("rb") as src, gzip.open(gz_path, "wb") as dst:
            shutil.copyfileobj(src, dst)
        log_path.unlink()

    def _clean_old_logs(self) -> None:
        cutoff = datetime.now() - timedelta(days=self.retention_days)
        for path in self.log_path.parent.glob(f"{self.log_path.stem}.*"):
            if path == self.log_path:
                continue
            if datetime.fromtimestamp(path.stat().st_mtime) < cutoff:
                logger.debug(f"Removing expired audit log: {path}")
                path.unlink()

    def read_events(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Read events back from the current log file, newest last."""
        self.flush()
        if not self.log_path.exists():
            return []

        events = []
        with self.log_path.open(encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.debug("Skipping corrupt audit line")
        return events[-limit:] if limit else events

    def close(self) -> None:
        """Flush remaining events."""
        self.flush()


# Singleton instance
_audit_logger: AuditLogger | None = None


def get_audit_logger(config: Any | None = None) -> AuditLogger:
    """
    Get or create the global audit logger instance.

    Args:
        config: Optional AuditLogConfig for initialization
    """
    global _audit_logger

    if _audit_logger is None:
        if config is None:
            from streamgate.config.loader import get_config

            config = get_config().audit_log

        _audit_logger = AuditLogger.from_config(config)

    return _audit_logger


def clear_audit_logger() -> None:
    """Flush and drop the global audit logger."""
    global _audit_logger
    if _audit_logger is not None:
        _audit_logger.close()
    _audit_logger = None
