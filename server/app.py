from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from agreements import calculate_duration, calculate_total_costs, generate_agreement, validate_agreement_data
from agreements.models import AgreementResult, AgreementState
from agreements.service import UnsupportedDocumentType, generate_document
from telemetry.logging_utils import get_logger
from telemetry.metrics import fetch_metrics, summarize_metrics

load_dotenv()

logger = get_logger(__name__)


class _Payload(BaseModel):
    model_config = {"extra": "allow"}


class Contact(_Payload):
    phone: Optional[str] = None
    email: Optional[str] = None
    alternatePhone: Optional[str] = None


class Address(_Payload):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postalCode: Optional[str] = None
    country: Optional[str] = None


class Party(_Payload):
    name: Optional[str] = None
    contact: Optional[Contact] = None
    address: Optional[Address] = None


class Landlord(Party):
    taxID: Optional[str] = None
    bankAccountNumber: Optional[str] = None
    bankName: Optional[str] = None
    bankIFSC: Optional[str] = None


class Tenant(Party):
    occupation: Optional[str] = None
    employer: Optional[str] = None
    idProofType: Optional[str] = None
    idProofNumber: Optional[str] = None


class PropertyInfo(_Payload):
    address: Optional[Address] = None
    propertyType: Optional[str] = None


class AgreementDetails(_Payload):
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    rentAmount: Optional[float] = None
    securityDeposit: Optional[float] = None
    maintenanceCharges: Optional[float] = None


class AdditionalService(_Payload):
    serviceName: Optional[str] = None
    cost: Optional[float] = None
    billingFrequency: Optional[str] = None
    description: Optional[str] = None


class FamilyMember(_Payload):
    name: Optional[str] = None
    relationship: Optional[str] = None
    age: Optional[int] = None


class ValidatePayload(BaseModel):
    landlord: Optional[Landlord] = None
    tenant: Optional[Tenant] = None
    property: Optional[PropertyInfo] = None
    agreementDetails: Optional[AgreementDetails] = None
    familyMembers: Optional[List[FamilyMember]] = None


class GeneratePayload(ValidatePayload):
    additionalServices: Optional[List[AdditionalService]] = None


class CostsPayload(BaseModel):
    rentAmount: float
    maintenanceCharges: Optional[float] = 0
    additionalServices: Optional[List[AdditionalService]] = None


class DocumentPayload(BaseModel):
    docType: str
    content: Optional[str] = None


app = FastAPI(title="Rental Agreement Generator")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _dump(model: Optional[BaseModel]) -> Optional[Dict[str, Any]]:
    return model.model_dump(exclude_none=True) if model is not None else None


def _dump_list(models: Optional[List[BaseModel]]) -> List[Dict[str, Any]]:
    return [model.model_dump(exclude_none=True) for model in models or []]


def _run_generation(payload: GeneratePayload) -> AgreementResult:
    result = generate_agreement(
        _dump(payload.landlord),
        _dump(payload.tenant),
        _dump(payload.property),
        _dump(payload.agreementDetails),
        _dump_list(payload.additionalServices),
        _dump_list(payload.familyMembers),
    )
    logger.info(
        "agreement_request_handled",
        extra={"state": result.state.value, "agreement_number": result.agreement_number},
    )
    return result


def _status_for(result: AgreementResult) -> int:
    if result.success:
        return status.HTTP_200_OK
    if result.state == AgreementState.REJECTED:
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.post("/api/agreements/generate")
def generate(payload: GeneratePayload):
    result = _run_generation(payload)
    return JSONResponse(status_code=_status_for(result), content=result.to_payload())


@app.post("/api/agreements/generate/pdf")
def generate_pdf(payload: GeneratePayload):
    result = _run_generation(payload)
    if not result.success:
        return JSONResponse(status_code=_status_for(result), content=result.to_payload(include_pdf=False))
    safe_number = re.sub(r"[^A-Za-z0-9_-]", "", result.agreement_number or "") or "agreement"
    return Response(
        content=result.pdf_document,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=\"rental_agreement_{safe_number}.pdf\"",
            "X-Agreement-Number": result.agreement_number or "",
        },
    )


@app.post("/api/agreements/validate")
def validate(payload: ValidatePayload):
    result = validate_agreement_data(
        _dump(payload.landlord),
        _dump(payload.tenant),
        _dump(payload.property),
        _dump(payload.agreementDetails),
        _dump_list(payload.familyMembers),
    )
    return result.to_payload()


@app.get("/api/agreements/duration")
def duration(start_date: str = Query(..., alias="startDate"), end_date: str = Query(..., alias="endDate")):
    try:
        breakdown = calculate_duration(start_date, end_date)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return breakdown.to_payload()


@app.post("/api/agreements/costs")
def costs(payload: CostsPayload):
    breakdown = calculate_total_costs(
        payload.rentAmount,
        payload.maintenanceCharges or 0,
        _dump_list(payload.additionalServices),
    )
    return breakdown.to_payload()


@app.post("/api/documents/generate")
def document(payload: DocumentPayload):
    try:
        message = generate_document(payload.docType, payload.content)
    except UnsupportedDocumentType as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return {"message": message}


@app.get("/api/metrics")
def metrics(limit: int = Query(500, ge=1)):
    records = fetch_metrics(limit)
    return {"summary": summarize_metrics(records), "records": records}


@app.get("/healthz")
def health():
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.app:app", host="0.0.0.0", port=8000, reload=False)
