"""Pydantic schemas for the coating inspection assistant."""

import math
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EnvironmentCategory(str, Enum):
    """ISO 12944-style corrosivity categories, mildest first."""
    C3 = "C3"
    C4 = "C4"
    C5I = "C5I"
    C5M = "C5M"
    CX = "CX"


class DefectType(str, Enum):
    GENERAL_CORROSION = "general_corrosion"
    PITTING = "pitting"
    BLISTERING = "blistering"
    DELAMINATION = "delamination"
    MECHANICAL_DAMAGE = "mechanical_damage"
    FOULING = "fouling"


class Severity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"


AUTO_ENVIRONMENT = "Auto"

KNOWN_AREAS = [
    "Hull/Topside",
    "Deck",
    "Ballast Tank",
    "Superstructure",
    "Underwater Hull",
    "Hatch Covers",
    "Cargo Holds Dry",
    "Internal Visible Steel",
    "Internal Decks",
    "Fresh/Drinking Water Tank",
    "Heat Resistance",
]


# ========================================
# Classification value objects
# ========================================

class Defect(BaseModel):
    """Best-effort defect guess for one photo.

    Built from untrusted classifier output, so every field is coerced rather
    than rejected: unknown types fall back to general corrosion, unknown
    severities to moderate, and confidence is clamped into [0, 1].
    """
    model_config = ConfigDict(frozen=True)

    type: DefectType = DefectType.GENERAL_CORROSION
    severity: Severity = Severity.MODERATE
    confidence: float = 0.5
    notes: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> DefectType:
        if isinstance(value, DefectType):
            return value
        key = str(value or "").strip().lower().replace(" ", "_").replace("-", "_")
        try:
            return DefectType(key)
        except ValueError:
            return DefectType.GENERAL_CORROSION

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: Any) -> Severity:
        if isinstance(value, Severity):
            return value
        try:
            return Severity(str(value or "").strip().lower())
        except ValueError:
            return Severity.MODERATE

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: Any) -> float:
        if isinstance(value, bool):
            return 0.5
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return 0.5
        if not math.isfinite(number):
            return 0.5
        return min(1.0, max(0.0, number))

    @field_validator("notes", mode="before")
    @classmethod
    def _coerce_notes(cls, value: Any) -> str:
        return "" if value is None else str(value)


# ========================================
# Product catalog / coating cycle schemas
# ========================================

class ProductRef(BaseModel):
    """One catalog product with its dry-film thickness."""
    model_config = ConfigDict(frozen=True)

    name: str
    dft: str
    notes: str = ""


class AlternativeCycle(BaseModel):
    """Equivalent product sequence, usually a different finish family."""
    model_config = ConfigDict(frozen=True)

    products: tuple[ProductRef, ...]
    note: Optional[str] = None


class CoatingCycle(BaseModel):
    """Repair cycle: surface preparation plus products in application order."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    surface_prep: str = Field(..., alias="surfacePrep")
    products: tuple[ProductRef, ...]
    alternatives: Optional[tuple[AlternativeCycle, ...]] = None


class Item(BaseModel):
    """Classification and recommendation for one submitted image."""
    defect: Defect
    recommendation: CoatingCycle


# ========================================
# Request / response schemas
# ========================================

class InspectionMeta(BaseModel):
    """Inspector-supplied context. Unknown keys are carried through untouched."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    area: str = "Hull/Topside"
    environment: Optional[str] = AUTO_ENVIRONMENT
    substrate: str = "Steel"
    existing_system: str = Field("Unknown", alias="existingSystem")
    location: str = ""
    coords: Optional[dict] = None

    @field_validator("location", "area", "substrate", "existing_system", mode="before")
    @classmethod
    def _none_to_default(cls, value: Any, info) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class InspectionReport(BaseModel):
    """Engine output: echoed meta with environments, one item per image, disclaimer."""
    meta: dict[str, Any]
    items: list[Item]
    disclaimer: str

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AnalyzeRequest(BaseModel):
    images: Optional[Any] = None
    meta: Optional[Any] = None


class ChatTurn(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: Optional[str] = None
    meta: Optional[dict[str, Any]] = None
    last_result: Optional[dict[str, Any]] = Field(None, alias="lastResult")
    history: list[ChatTurn] = Field(default_factory=list)


class ChatResponse(BaseModel):
    answer: str
