"""Typed containers shared across the voice-to-CRM pipeline.

The outcome variants live here so ``flow`` and the HTTP controller agree on
the three ways a request can end without importing each other.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, ClassVar, Union

from voiceline.services.ledger_client import PersistenceError
from voiceline.services.response_contract import AnalysisRecord

STAGE_VALIDATE = "validate"
STAGE_STAGE = "stage"
STAGE_ANALYZE = "analyze"
STAGE_PERSIST = "persist"


@dataclass(frozen=True)
class AudioSubmission:
    """One uploaded recording as declared by the caller."""

    filename: str
    size: int
    stream: BinaryIO


@dataclass(frozen=True)
class FullSuccess:
    """Analysis produced and appended to the ledger."""

    kind: ClassVar[str] = "full_success"

    record: AnalysisRecord


@dataclass(frozen=True)
class AnalysisOnlyWithPersistError:
    """Analysis produced but the ledger append failed; the record is kept."""

    kind: ClassVar[str] = "analysis_only"

    record: AnalysisRecord
    error: PersistenceError


@dataclass(frozen=True)
class HardFailure:
    """No analysis record was produced."""

    kind: ClassVar[str] = "hard_failure"

    error: Exception
    stage: str


PipelineOutcome = Union[FullSuccess, AnalysisOnlyWithPersistError, HardFailure]
