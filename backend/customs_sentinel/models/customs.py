"""
Customs Declaration Data Models
Pydantic models for data validation and serialization
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Scores above this are shown as elevated; level always comes from the model
ELEVATED_SCORE_THRESHOLD = 70


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class DocumentState(str, Enum):
    PRESENT = "PRESENT"
    MISSING = "MISSING"
    INCONSISTENT = "INCONSISTENT"


class FindingSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class DeclarationStatus(str, Enum):
    PENDING = "PENDING"
    CLEARED = "CLEARED"
    FLAGGED = "FLAGGED"
    INSPECTING = "INSPECTING"


class ChatRole(str, Enum):
    OPERATOR = "operator"
    ASSISTANT = "assistant"


class DocumentEntry(BaseModel):
    """One supporting document and its verification state"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    status: DocumentState


class CaseRecord(BaseModel):
    """A single customs declaration as shown in the inbound queue"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1, description="Declaration identifier")
    exporter: str = Field("", description="Exporter name and location")
    importer: str = Field("", description="Importer name and location")
    item_description: str = Field(..., alias="itemDescription", min_length=1, description="Commodity description")
    declared_value: float = Field(..., alias="declaredValue", ge=0, description="Declared customs value")
    currency: str = Field(..., min_length=3, max_length=3, description="ISO 4217 currency code")
    origin_country: str = Field(..., alias="originCountry", min_length=1)
    hs_code: str = Field(..., alias="hsCode", min_length=1, description="Harmonized System code")
    document_status: Tuple[DocumentEntry, ...] = Field((), alias="documentStatus")
    risk_score: Optional[float] = Field(None, alias="riskScore", ge=0, le=100)
    risk_level: Optional[RiskLevel] = Field(None, alias="riskLevel")
    timestamp: Optional[datetime] = None
    status: DeclarationStatus = DeclarationStatus.PENDING
    document_refs: Tuple[str, ...] = Field((), alias="documentRefs")

    def documents_in(self, state: DocumentState) -> List[str]:
        return [doc.name for doc in self.document_status if doc.status == state]

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode='json')


class DocumentFinding(BaseModel):
    """Document inconsistency reported against a checklist indicator"""
    model_config = ConfigDict(frozen=True)

    indicator_id: str = Field(..., min_length=1)
    finding: str = Field(..., min_length=1)
    severity: FindingSeverity


class AnalysisResult(BaseModel):
    """Risk assessment returned by the model for one declaration"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    score: float = Field(..., ge=0, le=100, strict=True, allow_inf_nan=False)
    level: RiskLevel
    analysis: str = Field(..., description="Rationale for the score")
    flags: List[str]
    valuation_anomaly: Optional[float] = Field(None, alias="valuationAnomaly", strict=True, allow_inf_nan=False)
    document_analysis: Optional[List[DocumentFinding]] = Field(None, alias="documentAnalysis")

    @field_validator('analysis')
    @classmethod
    def rationale_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("analysis rationale must not be empty")
        return value

    @property
    def is_elevated(self) -> bool:
        return self.score > ELEVATED_SCORE_THRESHOLD

    def to_wire(self) -> dict:
        data = self.model_dump(by_alias=True, mode='json')
        data['elevated'] = self.is_elevated
        return data


class Turn(BaseModel):
    """One message in the operator/assistant transcript"""
    model_config = ConfigDict(frozen=True)

    role: ChatRole
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CustomsEvent(BaseModel):
    """Historical enforcement event shown in the intel feed"""
    model_config = ConfigDict(frozen=True)

    id: str
    date: str
    type: str = Field(..., pattern=r'^(SEIZURE|FRAUD|MISCLASSIFICATION|SANCTION_HIT)$')
    description: str
    entities: List[str] = []
    severity: RiskLevel
    outcome: str


class TrafficSegment(BaseModel):
    """Border Queue System traffic segment"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    category: str
    volume: int = Field(..., ge=0)
    risk_analysis: str = Field(..., alias="riskAnalysis")
    context: str
