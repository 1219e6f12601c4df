"""JSONL trace of a generation run."""

from __future__ import annotations

import json
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from pydantic import BaseModel, ConfigDict

TRACE_SCHEMA_VERSION = 1


class TraceEvent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schema_version: int = TRACE_SCHEMA_VERSION
    run_id: str
    seq: int
    t_ms: int
    event: str
    stage: Optional[str] = None
    operation: Optional[str] = None
    status: Optional[str] = None
    duration_ms: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None


def _error_payload(exc: Exception) -> Optional[Dict[str, Any]]:
    error = getattr(exc, "error", None)
    if isinstance(error, BaseModel):
        return error.model_dump(mode="json")
    return None


class Tracer:
    """Appends generation events to ``trace_path``, one JSON object per line.

    ``seq`` increases by one per event and ``t_ms`` is measured from
    ``start_time``. Fields left unset are omitted from the line.
    """

    def __init__(self, *, run_id: str, trace_path: Path, start_time: Optional[float] = None) -> None:
        self.run_id = run_id
        self.trace_path = trace_path
        self._origin = time.perf_counter() if start_time is None else start_time
        self._seq = 0

    def _elapsed_ms(self, since: float) -> int:
        return int((time.perf_counter() - since) * 1000)

    def emit(self, *, event: str, **fields: Any) -> TraceEvent:
        self._seq += 1
        record = TraceEvent(run_id=self.run_id, seq=self._seq, t_ms=self._elapsed_ms(self._origin), event=event, **fields)
        with self.trace_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record.model_dump(mode="json", exclude_none=True), ensure_ascii=False) + "\n")
        return record

    @contextmanager
    def stage(self, stage: str, *, operation: Optional[str] = None) -> Iterator[Dict[str, Any]]:
        """Emit ``stage_start`` and ``stage_end`` around a block.

        The yielded dict is reported as the end event's details. A block that
        raises ends with status ``FAILED`` and the exception's error payload.
        """
        self.emit(event="stage_start", stage=stage, operation=operation)
        started = time.perf_counter()
        details: Dict[str, Any] = {}
        try:
            yield details
        except Exception as exc:
            self.emit(
                event="stage_end",
                stage=stage,
                operation=operation,
                status="FAILED",
                duration_ms=self._elapsed_ms(started),
                details=details or None,
                error=_error_payload(exc),
            )
            raise
        self.emit(
            event="stage_end",
            stage=stage,
            operation=operation,
            status="SUCCESS",
            duration_ms=self._elapsed_ms(started),
            details=details or None,
        )
