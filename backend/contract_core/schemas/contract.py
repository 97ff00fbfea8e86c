"""Result contracts for contract field extraction and payment schedules.

All models are frozen: a result is computed once per call and handed to the
caller as-is.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

PaymentType = Literal["installment", "single_with_discount"]
OptionType = Literal["installments", "single_with_discount"]


class ExtractionConfidence(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall: float = Field(ge=0.0, le=1.0)
    field_scores: dict[str, int] = Field(default_factory=dict)


class ExtractionResult(BaseModel):
    """Structured record extracted from contract text.

    ``data`` always carries the full canonical field set of the strategy that
    produced it; fields that were not found are ``None``. ``data`` and
    ``raw_matches`` are read-only mappings; copy them with ``dict()`` to edit.
    """

    model_config = ConfigDict(frozen=True)

    data: Mapping[str, Any]
    confidence: ExtractionConfidence
    strategy: str
    raw_matches: Mapping[str, Optional[str]] = Field(default_factory=dict, validate_default=True)
    model_version: str = ""

    @field_validator("data", "raw_matches", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("data", "raw_matches")
    def _as_dict(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return dict(value)


class PaymentInstallment(BaseModel):
    model_config = ConfigDict(frozen=True)

    installment_number: int = Field(ge=1)
    amount: float
    percentage: float
    due_date: str
    description: str
    payment_type: PaymentType = "installment"


class PaymentOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: OptionType
    total_amount: float
    installments: list[PaymentInstallment] = Field(default_factory=list)
    discount_percentage: Optional[float] = None
    discount_amount: Optional[float] = None
    description: str = ""


class PaymentScheduleResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    options: list[PaymentOption]
    recommended_option: OptionType

    def _option(self, option_type: str) -> PaymentOption:
        for option in self.options:
            if option.type == option_type:
                return option
        raise LookupError(f"No {option_type!r} option in schedule")

    @property
    def installments_option(self) -> PaymentOption:
        return self._option("installments")

    @property
    def single_option(self) -> PaymentOption:
        return self._option("single_with_discount")
