"""
Domain models (Pydantic v2) for extraction output.

PerkCandidate is the engine's output unit. Models are frozen: the scorer and
any downstream review step work on copies made with model_copy().
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from perkq.extraction.types import IssuerKey


class PerkCandidate(BaseModel):
    """An extracted, not-yet-confirmed perk."""

    model_config = ConfigDict(frozen=True)

    merchant: str = ""
    description: str = ""
    value: str | None = None
    expiration: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    issuer: IssuerKey = IssuerKey.GENERIC
    source_line: int | None = None

    @field_validator("merchant", "description", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("value", "expiration", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @model_validator(mode="after")
    def _require_anchor(self) -> PerkCandidate:
        if not self.merchant and not self.value:
            raise ValueError("PerkCandidate needs a merchant or a value")
        return self


class RecognitionResult(BaseModel):
    """Output of the external image-to-text step for one image."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class ExtractionResult(BaseModel):
    """Recognition text plus the perks extracted from it."""

    text: str
    issuer: IssuerKey
    perks: list[PerkCandidate] = Field(default_factory=list)
    recognition_confidence: float | None = Field(default=None, ge=0.0, le=1.0)
