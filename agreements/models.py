"""
Value objects produced by the agreement pipeline.

Inputs stay as plain mappings keyed the way callers send them (camelCase);
everything computed from them lives here as dataclasses with a
``to_payload()`` that returns the camelCase wire form.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class BillingFrequency(str, Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    YEARLY = "Yearly"
    ONE_TIME = "OneTime"

    @property
    def months_per_charge(self) -> Optional[int]:
        """Months covered by one charge; ``None`` for one-time charges."""
        return {
            BillingFrequency.MONTHLY: 1,
            BillingFrequency.QUARTERLY: 3,
            BillingFrequency.YEARLY: 12,
            BillingFrequency.ONE_TIME: None,
        }[self]

    @classmethod
    def lookup(cls, value: Any) -> Optional["BillingFrequency"]:
        """Case-insensitive match. A missing label (``None``) means Monthly; an unrecognized one gives ``None``."""
        if value is None:
            return cls.MONTHLY
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return None


class AgreementState(str, Enum):
    RECEIVED = "received"
    VALIDATING = "validating"
    REJECTED = "rejected"
    COMPUTING = "computing"
    RENDERING = "rendering"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (AgreementState.REJECTED, AgreementState.COMPLETED, AgreementState.FAILED)


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_payload(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "errors": list(self.errors), "warnings": list(self.warnings)}


@dataclass(frozen=True)
class DurationBreakdown:
    years: int = 0
    months: int = 0
    days: int = 0
    total_days: int = 0

    def describe(self) -> str:
        return f"{self.years} year(s), {self.months} month(s), {self.days} day(s)"

    def to_payload(self) -> Dict[str, Any]:
        return {"years": self.years, "months": self.months, "days": self.days, "totalDays": self.total_days}


@dataclass(frozen=True)
class CostItem:
    item: str
    amount: float
    frequency: str

    def to_payload(self) -> Dict[str, Any]:
        return {"item": self.item, "amount": self.amount, "frequency": self.frequency}


@dataclass(frozen=True)
class CostBreakdown:
    monthly_total: float
    yearly_total: float
    breakdown: List[CostItem] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "monthlyTotal": self.monthly_total,
            "yearlyTotal": self.yearly_total,
            "breakdown": [item.to_payload() for item in self.breakdown],
        }


@dataclass(frozen=True)
class AgreementSummary:
    landlord_name: str
    tenant_name: str
    property_address: str
    rent_amount: Any
    duration: str
    total_family_members: int
    total_services: int
    total_monthly_cost: float
    total_yearly_cost: float

    def to_payload(self) -> Dict[str, Any]:
        return {
            "landlordName": self.landlord_name,
            "tenantName": self.tenant_name,
            "propertyAddress": self.property_address,
            "rentAmount": self.rent_amount,
            "duration": self.duration,
            "totalFamilyMembers": self.total_family_members,
            "totalServices": self.total_services,
            "totalMonthlyCost": self.total_monthly_cost,
            "totalYearlyCost": self.total_yearly_cost,
        }


@dataclass
class AgreementResult:
    success: bool
    message: str
    state: AgreementState
    agreement_number: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    pdf_document: Optional[bytes] = None
    agreement_summary: Optional[AgreementSummary] = None

    def to_payload(self, include_pdf: bool = True) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "agreementNumber": self.agreement_number,
            "message": self.message,
            "errors": list(self.errors),
            "validationWarnings": list(self.validation_warnings),
            "agreementSummary": self.agreement_summary.to_payload() if self.agreement_summary else None,
            "state": self.state.value,
        }
        if include_pdf:
            payload["pdfDocument"] = (
                base64.b64encode(self.pdf_document).decode("utf-8") if self.pdf_document is not None else None
            )
        return payload
