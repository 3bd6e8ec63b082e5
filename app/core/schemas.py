from typing import Any, Dict, List, Optional
from enum import Enum

from pydantic import BaseModel


# =========================
# Enums
# =========================
class QuestionType(str, Enum):
    NON_MEDICAL = "non-medical"
    DATABASE = "database"
    HEALTH = "health"


class Tab(str, Enum):
    CHAT = "chat"
    RESULTS = "results"


# =========================
# MEDICAL QUERY
# =========================
class MedicalQueryRequest(BaseModel):
    # Left untyped so a bad value is rejected by the pipeline with a 400
    question: Any = None


class MedicalQueryResponse(BaseModel):
    type: QuestionType
    question: str
    answer: str
    tab: Tab
    sql: Optional[str] = None
    results: Optional[List[Dict[str, Any]]] = None
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    message: str


def response_payload(response: MedicalQueryResponse) -> Dict[str, Any]:
    """JSON body with unset optional fields dropped (row values keep their nulls)."""
    payload = response.model_dump(mode="json")
    return {key: value for key, value in payload.items() if value is not None}
