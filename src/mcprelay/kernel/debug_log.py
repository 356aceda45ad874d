"""JSONL debug log for MCP routing, with size-based rotation and redaction."""

from __future__ import annotations

import json
import re
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

LOG_FILE_NAME = "debug.log.jsonl"
REDACTION_MODES = ("default", "none", "strict")

_REDACTED = "***REDACTED***"
_SENSITIVE_KEY_RE = re.compile(
    r"(password|secret|token|authorization|cookie|api[_-]?key|access[_-]?key|private[_-]?key)",
    re.IGNORECASE,
)
_BEARER_RE = re.compile(r"(?i)\bbearer\s+([^\s,;]+)")
_KEY_VALUE_RE = re.compile(
    r"(?i)\b(api[_-]?key|access[_-]?key|token|secret|authorization|cookie|private[_-]?key)\b\s*[:=]\s*([^\s,;]+)"
)
_SK_KEY_RE = re.compile(r"\bsk-[A-Za-z0-9]{8,}\b")


def now_ms() -> int:
    return int(time.time() * 1000)


def redact_text(text: str) -> str:
    if not text:
        return text
    masked = _BEARER_RE.sub("Bearer {0}".format(_REDACTED), text)
    masked = _KEY_VALUE_RE.sub(lambda m: "{0}={1}".format(m.group(1), _REDACTED), masked)
    return _SK_KEY_RE.sub(_REDACTED, masked)


def redact_payload(value: Any, strict: bool = False) -> Any:
    """Mask sensitive keys; strict mode also masks every scalar leaf."""

    if isinstance(value, dict):
        out: Dict[str, Any] = {}
        for key, item in value.items():
            if _SENSITIVE_KEY_RE.search(str(key)):
                out[key] = _REDACTED
            else:
                out[key] = redact_payload(item, strict)
        return out
    if isinstance(value, list):
        return [redact_payload(item, strict) for item in value]
    if strict:
        return _REDACTED
    if isinstance(value, str):
        return redact_text(value)
    return value


class DebugLogWriter:
    """Best-effort writer: failures are counted, never raised to callers."""

    def __init__(
        self,
        *,
        logs_dir: Path,
        enabled: bool = True,
        log_format: str = "jsonl",
        max_file_bytes: int = 10 * 1024 * 1024,
        max_files: int = 5,
        redaction: str = "default",
    ) -> None:
        self._logs_dir = Path(logs_dir)
        self._enabled = bool(enabled)
        # jsonl is the only supported format today.
        self._log_format = "jsonl"
        self._max_file_bytes = max(1, int(max_file_bytes or 0))
        self._max_files = max(1, int(max_files or 0))
        redaction = str(redaction or "default").strip().lower()
        self._redaction = redaction if redaction in REDACTION_MODES else "default"
        self._write_errors = 0
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def active_log_file(self) -> Path:
        return self._logs_dir / LOG_FILE_NAME

    def write_entry(
        self,
        *,
        kind: str,
        message: str,
        level: str = "info",
        component: str = "mcp",
        server: Optional[str] = None,
        call_id: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not self._enabled:
            return

        record: Dict[str, Any] = {
            "ts_ms": now_ms(),
            "level": str(level or "info"),
            "component": str(component or "mcp"),
            "kind": str(kind or "diagnostic"),
            "server": str(server or ""),
            "call_id": str(call_id or ""),
            "message": str(message or ""),
            "data": dict(data or {}),
        }
        if self._redaction != "none":
            record["message"] = redact_text(record["message"])
            record["data"] = redact_payload(record["data"], strict=self._redaction == "strict")

        with self._lock:
            try:
                line = json.dumps(record, ensure_ascii=True, separators=(",", ":"), default=str)
                payload = (line + "\n").encode("utf-8")
                self._logs_dir.mkdir(parents=True, exist_ok=True)
                self._rotate_if_needed_locked(len(payload))
                with self.active_log_file.open("ab") as fp:
                    fp.write(payload)
            except OSError:
                self._write_errors += 1

    def status(self) -> Dict[str, Any]:
        with self._lock:
            report: Dict[str, Any] = {
                "logs_enabled": self._enabled,
                "logs_dir": str(self._logs_dir),
                "logs_active_file": str(self.active_log_file),
                "logs_redaction": self._redaction,
                "logs_max_file_bytes": self._max_file_bytes,
                "logs_max_files": self._max_files,
                "logs_active_size_bytes": 0,
                "logs_total_size_bytes": 0,
                "logs_rotated_files": [],
                "logs_write_errors": int(self._write_errors),
            }
            if not self._enabled:
                return report

            active_size = self._size(self.active_log_file)
            rotated: List[str] = []
            total_size = active_size
            for index in range(1, self._max_files + 1):
                path = self._rotated_file(index)
                if not path.exists():
                    continue
                rotated.append(str(path))
                total_size += self._size(path)

            report["logs_active_size_bytes"] = active_size
            report["logs_total_size_bytes"] = total_size
            report["logs_rotated_files"] = rotated
            return report

    def _rotate_if_needed_locked(self, incoming_size: int) -> None:
        if self._size(self.active_log_file) + int(incoming_size) <= self._max_file_bytes:
            return

        self._rotated_file(self._max_files).unlink(missing_ok=True)
        for index in range(self._max_files - 1, 0, -1):
            src = self._rotated_file(index)
            if src.exists():
                src.replace(self._rotated_file(index + 1))
        if self.active_log_file.exists():
            self.active_log_file.replace(self._rotated_file(1))

    def _rotated_file(self, index: int) -> Path:
        return Path("{0}.{1}".format(self.active_log_file, index))

    @staticmethod
    def _size(path: Path) -> int:
        return int(path.stat().st_size) if path.is_file() else 0
