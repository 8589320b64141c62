"""Append one CRM ledger row per analysed call."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Protocol, Sequence

from .response_contract import AnalysisRecord
from .sheets import INSERT_ROWS

logger = logging.getLogger(__name__)


class LedgerBackend(Protocol):
    def append_row(
        self,
        spreadsheet_id: str,
        target_range: str,
        values: Sequence[Any],
        insert_mode: str = INSERT_ROWS,
    ) -> Any:
        ...


class PersistenceError(RuntimeError):
    """Raised when the ledger row cannot be appended."""


class LedgerAppendError(PersistenceError):
    """Raised when the spreadsheet backend rejects or fails the append."""


class LedgerTimeoutError(PersistenceError):
    """Raised when the append does not finish within the configured timeout."""


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as RFC 3339 with local offset and second precision."""

    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.isoformat(timespec="seconds")


@dataclass(frozen=True)
class LedgerRow:
    """Spreadsheet row derived from one analysis record."""

    timestamp: str
    client_name: str
    summary: str
    sentiment: str
    urgency_score: int
    urgent: str

    @classmethod
    def from_record(cls, record: AnalysisRecord, moment: datetime) -> "LedgerRow":
        return cls(
            timestamp=format_timestamp(moment),
            client_name=record.client_name,
            summary=record.summary,
            sentiment=record.sentiment,
            urgency_score=record.urgency_score,
            urgent="Yes" if record.is_urgent else "No",
        )

    def values(self) -> list[Any]:
        return [
            self.timestamp,
            self.client_name,
            self.summary,
            self.sentiment,
            self.urgency_score,
            self.urgent,
        ]


class LedgerClient:
    """Write analysis rows to one fixed spreadsheet range."""

    def __init__(
        self,
        backend: LedgerBackend,
        *,
        spreadsheet_id: str,
        append_range: str = "Sheet1!A:F",
        timeout_seconds: float = 15.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._backend = backend
        self._spreadsheet_id = spreadsheet_id
        self._append_range = append_range
        self._timeout = timeout_seconds
        self._clock = clock or (lambda: datetime.now().astimezone())

    async def append_row(self, record: AnalysisRecord) -> LedgerRow:
        """Append the ledger row for ``record`` and return what was written.

        On :class:`LedgerTimeoutError` the worker thread is abandoned, not
        stopped, so the row may still land in the sheet after the caller has
        been told the append failed.
        """

        row = LedgerRow.from_record(record, self._clock())
        try:
            await asyncio.wait_for(
                asyncio.to_thread(
                    self._backend.append_row,
                    self._spreadsheet_id,
                    self._append_range,
                    row.values(),
                    INSERT_ROWS,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise LedgerTimeoutError(
                f"sheets append timed out after {self._timeout:g}s"
            ) from exc
        except Exception as exc:
            raise LedgerAppendError(f"sheets append: {exc}") from exc

        logger.info(
            "Ledger row appended client=%s urgency=%s urgent=%s",
            row.client_name,
            row.urgency_score,
            row.urgent,
        )
        return row


__all__ = [
    "LedgerAppendError",
    "LedgerBackend",
    "LedgerClient",
    "LedgerRow",
    "LedgerTimeoutError",
    "PersistenceError",
    "format_timestamp",
]
