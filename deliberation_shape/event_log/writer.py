"""Per-run analysis log: node events as JSONL plus a one-shot shape summary."""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from deliberation_shape.contracts import AnalysisEvent

EVENTS_FILE = "events.jsonl"
SUMMARY_FILE = "summary.json"


class EventLog:
    """Run directory holding the graph node events of one analysis.

    Layout: ``<log_dir>/<run_id>/events.jsonl`` and, once the run finishes,
    ``summary.json``. Reading never raises; unreadable lines are dropped.
    """

    def __init__(self, log_dir: str | Path, run_id: str) -> None:
        self.run_id = run_id
        self.run_dir = Path(log_dir) / run_id
        self.run_dir.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self.run_dir / EVENTS_FILE

    def emit(self, event: AnalysisEvent) -> None:
        self.emit_many([event])

    def emit_many(self, events: Iterable[AnalysisEvent]) -> int:
        """Append events in order; returns how many were written."""
        lines = [json.dumps(e, ensure_ascii=False) for e in events]
        if not lines:
            return 0
        with self.path.open("a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
        return len(lines)

    def iter_events(self, node: str | None = None):
        """Yield logged events, optionally only those of one graph node."""
        try:
            with self.path.open(encoding="utf-8") as f:
                for raw in f:
                    raw = raw.strip()
                    if not raw:
                        continue
                    try:
                        event = json.loads(raw)
                    except json.JSONDecodeError:
                        continue
                    if node is None or event.get("node") == node:
                        yield event
        except OSError:
            return

    def read_all(self) -> list[AnalysisEvent]:
        return list(self.iter_events())

    def total_elapsed(self) -> float:
        return round(sum(e.get("elapsed_s", 0.0) for e in self.iter_events()), 3)

    def write_summary(self, envelope: dict[str, Any]) -> Path:
        """Record the headline of a finished analysis next to its events."""
        shape = envelope.get("shape") or {}
        summary = {
            "run_id": self.run_id,
            "primary": shape.get("primary"),
            "confidence": shape.get("confidence"),
            "peaks": [p.get("id") for p in shape.get("peaks") or []],
            "patterns": [p.get("type") for p in shape.get("patterns") or []],
            "diagnostics": len(envelope.get("diagnostics") or []),
            "has_shadow": "shadow" in envelope,
            "elapsed_s": self.total_elapsed(),
        }
        out = self.run_dir / SUMMARY_FILE
        out.write_text(json.dumps(summary, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        return out

    @staticmethod
    def make_event(
        *,
        node: str,
        elapsed_s: float,
        inputs_summary: dict[str, int] | None = None,
        outputs_summary: dict[str, int] | None = None,
    ) -> AnalysisEvent:
        return AnalysisEvent(
            node=node,
            ts=datetime.now(timezone.utc).isoformat(),
            elapsed_s=round(elapsed_s, 3),
            inputs_summary=inputs_summary or {},
            outputs_summary=outputs_summary or {},
        )
