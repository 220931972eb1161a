"""
Agreement generation pipeline.

``generate_agreement`` walks one request through
received -> validating -> (rejected | computing) -> rendering -> (completed | failed)
and always returns exactly one ``AgreementResult``. Nothing is persisted and
no state is shared between calls.
"""

from __future__ import annotations

import random
import time
from typing import Any, List, Mapping, Optional, Sequence

from agreements.costs import calculate_total_costs
from agreements.document import format_address, render_agreement_pdf
from agreements.duration import calculate_duration
from agreements.models import (
    AgreementResult,
    AgreementState,
    AgreementSummary,
    CostBreakdown,
    DurationBreakdown,
)
from agreements.validation import validate_agreement_data
from telemetry.logging_utils import get_logger
from telemetry.metrics import timed_operation

logger = get_logger(__name__)

SUPPORTED_DOCUMENT_TYPES = ("PDF", "DOCX")


class UnsupportedDocumentType(ValueError):
    pass


def generate_agreement_number(now_ms: Optional[int] = None) -> str:
    """``AGR-<epoch ms>-<000-999>``; uniqueness is probabilistic only."""
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"AGR-{timestamp}-{random.randint(0, 999):03d}"


def build_agreement_summary(
    landlord: Mapping[str, Any],
    tenant: Mapping[str, Any],
    property_info: Mapping[str, Any],
    agreement_details: Mapping[str, Any],
    additional_services: Sequence[Any],
    family_members: Sequence[Any],
    duration: DurationBreakdown,
    costs: CostBreakdown,
) -> AgreementSummary:
    return AgreementSummary(
        landlord_name=landlord.get("name"),
        tenant_name=tenant.get("name"),
        property_address=format_address(property_info.get("address")),
        rent_amount=agreement_details.get("rentAmount"),
        duration=duration.describe(),
        total_family_members=len(family_members),
        total_services=len(additional_services),
        total_monthly_cost=costs.monthly_total,
        total_yearly_cost=costs.yearly_total,
    )


def _enter(state: AgreementState, **extra: Any) -> AgreementState:
    logger.info("agreement_state", extra={"state": state.value, **extra})
    return state


def generate_agreement(
    landlord: Mapping[str, Any],
    tenant: Mapping[str, Any],
    property_info: Mapping[str, Any],
    agreement_details: Mapping[str, Any],
    additional_services: Optional[Sequence[Any]] = None,
    family_members: Optional[Sequence[Any]] = None,
) -> AgreementResult:
    """Validate, compute and render one agreement; never raises."""
    services = list(additional_services or [])
    members = list(family_members or [])
    warnings: List[str] = []
    state = _enter(AgreementState.RECEIVED)
    try:
        state = _enter(AgreementState.VALIDATING)
        with timed_operation("validation", "rules"):
            validation = validate_agreement_data(landlord, tenant, property_info, agreement_details, members)
        warnings = list(validation.warnings)

        if not validation.is_valid:
            state = _enter(AgreementState.REJECTED, error_count=len(validation.errors))
            return AgreementResult(
                success=False,
                message="Validation failed",
                state=state,
                errors=list(validation.errors),
                validation_warnings=warnings,
            )

        state = _enter(AgreementState.COMPUTING)
        agreement_number = generate_agreement_number()
        duration = calculate_duration(agreement_details["startDate"], agreement_details["endDate"])
        costs = calculate_total_costs(
            agreement_details["rentAmount"],
            agreement_details.get("maintenanceCharges") or 0,
            services,
        )
        summary = build_agreement_summary(
            landlord, tenant, property_info, agreement_details, services, members, duration, costs
        )

        state = _enter(AgreementState.RENDERING, agreement_number=agreement_number)
        with timed_operation("render", "reportlab", agreement_number):
            pdf_bytes = render_agreement_pdf(
                agreement_number,
                landlord,
                tenant,
                property_info,
                agreement_details,
                services,
                members,
                duration,
                costs,
            )

        state = _enter(AgreementState.COMPLETED, agreement_number=agreement_number, pdf_size=len(pdf_bytes))
        return AgreementResult(
            success=True,
            message="Rental agreement generated successfully",
            state=state,
            agreement_number=agreement_number,
            errors=[],
            validation_warnings=warnings,
            pdf_document=pdf_bytes,
            agreement_summary=summary,
        )
    except Exception as exc:
        logger.exception("agreement_failed", extra={"failed_state": state.value})
        return AgreementResult(
            success=False,
            message=f"Error generating agreement: {exc}",
            state=_enter(AgreementState.FAILED),
            errors=[str(exc)],
            validation_warnings=warnings,
        )


def generate_document(doc_type: str, content: Optional[str]) -> str:
    """Describe a generic document request; only PDF and DOCX are accepted."""
    logger.info("document_requested", extra={"doc_type": doc_type})
    if doc_type == "PDF":
        return f"PDF document class implementation generated with content length: {len(content or '')}"
    if doc_type == "DOCX":
        return "DOCX document class implementation generated."
    raise UnsupportedDocumentType(f"Unsupported document type: {doc_type}")
