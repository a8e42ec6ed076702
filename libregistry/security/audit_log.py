"""Audit trail of committed registry events.

Events are persisted as newline-delimited JSON in daily files under the
configured audit directory (``~/.libreg/audit_logs/`` by default). Attach the
logger to a registry with::

    registry.events.subscribe(AuditLogger(audit_dir).subscriber())
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from libregistry.events import EventHandler, RegistryEvent

logger = logging.getLogger(__name__)


@dataclass
class AuditEntry:
    """A single audit log entry."""

    id: str
    timestamp: str
    actor: str
    action: str
    library: str
    details: dict[str, Any] = field(default_factory=dict)


class AuditLogger:
    """File-based JSON audit logger."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else Path.home() / ".libreg" / "audit_logs"
        self._base_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _log_file_for_date(self, dt: datetime) -> Path:
        return self._base_dir / f"{dt.strftime('%Y-%m-%d')}.jsonl"

    def _read_all_entries(self) -> list[AuditEntry]:
        entries: list[AuditEntry] = []
        for path in sorted(self._base_dir.glob("*.jsonl")):
            for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
                if not line.strip():
                    continue
                try:
                    entries.append(AuditEntry(**json.loads(line)))
                except (json.JSONDecodeError, TypeError):
                    logger.warning("Skipping malformed audit line %s:%d", path.name, lineno)
        return entries

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def log_event(
        self,
        actor: str,
        action: str,
        library: str,
        details: Optional[dict[str, Any]] = None,
    ) -> AuditEntry:
        """Record an audit event and return the created entry."""
        now = datetime.now(timezone.utc)
        entry = AuditEntry(
            id=uuid.uuid4().hex[:16],
            timestamp=now.isoformat(),
            actor=actor,
            action=action,
            library=library,
            details=details or {},
        )
        with self._log_file_for_date(now).open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(asdict(entry)) + "\n")
        return entry

    def record(self, event: RegistryEvent, caller: str) -> AuditEntry:
        """Record a registry event on behalf of ``caller``."""
        details = {k: v for k, v in event.to_dict().items() if k not in ("event", "library")}
        return self.log_event(
            actor=caller, action=event.event_type, library=event.library, details=details
        )

    def subscriber(self) -> EventHandler:
        """Return an event bus handler that records every event."""

        def handle(event: RegistryEvent, caller: str) -> None:
            self.record(event, caller)

        return handle

    def get_events(
        self,
        *,
        actor: Optional[str] = None,
        action: Optional[str] = None,
        library: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 200,
    ) -> list[AuditEntry]:
        """Return filtered audit events, newest first."""
        entries = self._read_all_entries()

        if actor:
            entries = [e for e in entries if e.actor == actor]
        if action:
            entries = [e for e in entries if e.action == action]
        if library:
            entries = [e for e in entries if e.library == library]
        if start_date:
            entries = [e for e in entries if e.timestamp >= start_date]
        if end_date:
            entries = [e for e in entries if e.timestamp <= end_date]

        # Stable sort keeps write order for equal timestamps.
        entries.reverse()
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[:limit]

    def export_events(self, fmt: str = "json", **filters: Any) -> str:
        """Export audit events as ``json`` or ``csv``."""
        entries = self.get_events(**filters)

        if fmt == "csv":
            lines = ["id,timestamp,actor,action,library"]
            for e in entries:
                lines.append(f"{e.id},{e.timestamp},{e.actor},{e.action},{e.library}")
            return "\n".join(lines)

        return json.dumps([asdict(e) for e in entries], indent=2)
