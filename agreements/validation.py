"""
Input validation for rental agreements.

Errors block generation; warnings only flag optional-but-recommended data.
Both lists keep a fixed check order (landlord, tenant, property, agreement)
so callers and tests see stable output.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Sequence

from agreements.costs import to_number
from agreements.duration import try_parse_moment
from agreements.models import ValidationResult

_EMAIL_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
EMAIL_RE = re.compile(r"[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@" + _EMAIL_LABEL + r"(?:\." + _EMAIL_LABEL + r")*")


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_RE.fullmatch(value) is not None


def _section(value: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        return {}
    nested = value.get(key)
    return nested if isinstance(nested, Mapping) else {}


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _field(value: Any, key: str) -> Any:
    return value.get(key) if isinstance(value, Mapping) else None


def _check_contact(role: str, party: Any, errors: List[str]) -> None:
    if not _present(_field(party, "name")):
        errors.append(f"{role} name is required")
    contact = _section(party, "contact")
    if not _present(contact.get("phone")):
        errors.append(f"{role} phone number is required")
    email = contact.get("email")
    if not _present(email):
        errors.append(f"{role} email is required")
    elif not is_valid_email(email):
        errors.append(f"{role} email is invalid")


def _check_landlord(landlord: Any, errors: List[str]) -> None:
    _check_contact("Landlord", landlord, errors)
    address = _section(landlord, "address")
    if not _present(address.get("street")):
        errors.append("Landlord address street is required")
    if not _present(address.get("city")):
        errors.append("Landlord address city is required")


def _check_tenant(tenant: Any, errors: List[str]) -> None:
    _check_contact("Tenant", tenant, errors)
    if not _present(_field(tenant, "idProofType")):
        errors.append("Tenant ID proof type is required")
    if not _present(_field(tenant, "idProofNumber")):
        errors.append("Tenant ID proof number is required")


def _check_property(property_info: Any, errors: List[str]) -> None:
    if not _present(_section(property_info, "address").get("street")):
        errors.append("Property address street is required")
    if not _present(_field(property_info, "propertyType")):
        errors.append("Property type is required")


def _check_agreement(details: Any, errors: List[str]) -> None:
    start_raw = _field(details, "startDate")
    end_raw = _field(details, "endDate")
    if not _present(start_raw):
        errors.append("Agreement start date is required")
    if not _present(end_raw):
        errors.append("Agreement end date is required")

    start = try_parse_moment(start_raw) if _present(start_raw) else None
    end = try_parse_moment(end_raw) if _present(end_raw) else None
    if _present(start_raw) and start is None:
        errors.append("Agreement start date is invalid")
    if _present(end_raw) and end is None:
        errors.append("Agreement end date is invalid")
    if start is not None and end is not None and end <= start:
        errors.append("End date must be after start date")

    rent = to_number(_field(details, "rentAmount"))
    if rent is None or not rent > 0:
        errors.append("Rent amount must be greater than 0")
    deposit = to_number(_field(details, "securityDeposit"))
    if deposit is None or not deposit >= 0:
        errors.append("Security deposit cannot be negative")


def _collect_warnings(landlord: Any, tenant: Any, family_members: Optional[Sequence[Any]]) -> List[str]:
    warnings: List[str] = []
    if not _present(_field(landlord, "taxID")):
        warnings.append("Landlord tax ID is recommended")
    if not _present(_field(landlord, "bankAccountNumber")):
        warnings.append("Landlord bank account number is recommended")
    if not _present(_field(tenant, "occupation")):
        warnings.append("Tenant occupation is recommended")
    if not family_members:
        warnings.append("No family members added - consider adding if applicable")
    return warnings


def validate_agreement_data(
    landlord: Any,
    tenant: Any,
    property_info: Any,
    agreement_details: Any,
    family_members: Optional[Sequence[Any]] = None,
) -> ValidationResult:
    """Check every rule and report all problems at once. Never raises."""
    errors: List[str] = []
    _check_landlord(landlord, errors)
    _check_tenant(tenant, errors)
    _check_property(property_info, errors)
    _check_agreement(agreement_details, errors)
    return ValidationResult(errors=errors, warnings=_collect_warnings(landlord, tenant, family_members))
