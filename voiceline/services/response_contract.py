"""Pydantic models for validating the call-analysis JSON returned by Gemini.

The model is asked for a bare JSON object but regularly wraps it in a
Markdown fence anyway. ``strip_json_fence`` peels that envelope off with an
explicit grammar and ``parse_analysis`` decodes what is left into an
immutable :class:`AnalysisRecord`.

Envelope grammar::

    [whitespace] ["```"] ["json"] [spaces/tabs] [newline] payload ["```"] [whitespace]
"""

from __future__ import annotations

import json
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, field_validator

URGENCY_MIN = 1
URGENCY_MAX = 10

_FENCE = "```"
_LANGUAGE_TAG = "json"


class ResponseParseError(RuntimeError):
    """Raised when the model output cannot be decoded into an analysis record."""


class AnalysisRecord(BaseModel):
    summary: str = ""
    action_items: List[str] = Field(default_factory=list)
    # Passed through as returned; the prompt asks for positive/neutral/negative.
    sentiment: str = ""
    urgency_score: StrictInt = 0
    client_name: str = ""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("summary", "sentiment", "client_name", mode="before")
    @classmethod
    def null_text_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("action_items", mode="before")
    @classmethod
    def null_items_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("urgency_score", mode="before")
    @classmethod
    def whole_number_score(cls, value: Any) -> Any:
        # Booleans and strings are rejected; 7.0 is accepted as 7.
        if value is None:
            return 0
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @field_validator("urgency_score", mode="after")
    @classmethod
    def clamp_urgency(cls, value: int) -> int:
        return max(URGENCY_MIN, min(URGENCY_MAX, value))

    @property
    def is_urgent(self) -> bool:
        return self.urgency_score > 7


def strip_json_fence(text: str) -> str:
    """Return the payload of ``text`` with any Markdown code fence removed."""

    body = text.strip()

    if body.startswith(_FENCE):
        body = body[len(_FENCE):]
    if body[: len(_LANGUAGE_TAG)].lower() == _LANGUAGE_TAG:
        body = body[len(_LANGUAGE_TAG):]

    body = body.lstrip(" \t")
    if body.startswith("\r\n"):
        body = body[2:]
    elif body.startswith("\n"):
        body = body[1:]

    body = body.rstrip()
    if body.endswith(_FENCE):
        body = body[: -len(_FENCE)]

    return body.strip()


def parse_analysis(text: str) -> AnalysisRecord:
    """Decode raw model output into an :class:`AnalysisRecord`."""

    payload = strip_json_fence(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"invalid JSON payload: {exc}") from exc
    except RecursionError as exc:
        raise ResponseParseError("invalid JSON payload: nested too deeply") from exc

    if not isinstance(data, dict):
        raise ResponseParseError(
            f"expected a JSON object, got {type(data).__name__}"
        )

    try:
        return AnalysisRecord.model_validate(data)
    except ValidationError as exc:
        raise ResponseParseError(f"unexpected field types: {exc}") from exc


__all__ = [
    "AnalysisRecord",
    "ResponseParseError",
    "URGENCY_MAX",
    "URGENCY_MIN",
    "parse_analysis",
    "strip_json_fence",
]
