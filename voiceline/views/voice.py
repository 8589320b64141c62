"""Schemas returned by the voice-to-CRM endpoint."""

from typing import List

from pydantic import BaseModel, Field

from voiceline.services.response_contract import AnalysisRecord


class AnalysisResponse(BaseModel):
    """CRM fields extracted from one sales call."""

    summary: str = Field(..., description="Brief summary of the conversation")
    action_items: List[str] = Field(..., description="Follow-up actions")
    sentiment: str = Field(..., description="positive, neutral or negative")
    urgency_score: int = Field(..., ge=1, le=10, description="Urgency from 1 to 10")
    client_name: str = Field(..., description="Client or contact mentioned")

    @classmethod
    def from_record(cls, record: AnalysisRecord) -> "AnalysisResponse":
        return cls.model_validate(record.model_dump())


class PersistFailureResponse(BaseModel):
    """Returned when the analysis succeeded but the sheet append did not."""

    error: str
    analysis: AnalysisResponse
