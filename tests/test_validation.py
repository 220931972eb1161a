import pytest

from agreements.validation import is_valid_email, validate_agreement_data


def _validate(request):
    return validate_agreement_data(
        request.get("landlord"),
        request.get("tenant"),
        request.get("property"),
        request.get("agreementDetails"),
        request.get("familyMembers"),
    )


def test_complete_request_is_valid_without_warnings(agreement_request):
    result = _validate(agreement_request)
    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []


def test_missing_landlord_email(agreement_request):
    del agreement_request["landlord"]["contact"]["email"]
    result = _validate(agreement_request)
    assert not result.is_valid
    assert result.errors == ["Landlord email is required"]


def test_malformed_tenant_email(agreement_request):
    agreement_request["tenant"]["contact"]["email"] = "bad@@x"
    result = _validate(agreement_request)
    assert "Tenant email is invalid" in result.errors
    assert "Tenant email is required" not in result.errors


def test_end_before_start(agreement_request):
    agreement_request["agreementDetails"]["startDate"] = "2024-06-01"
    agreement_request["agreementDetails"]["endDate"] = "2024-05-01"
    result = _validate(agreement_request)
    assert result.errors == ["End date must be after start date"]


def test_same_start_and_end_is_rejected(agreement_request):
    agreement_request["agreementDetails"]["endDate"] = agreement_request["agreementDetails"]["startDate"]
    assert "End date must be after start date" in _validate(agreement_request).errors


def test_unparseable_date_is_reported(agreement_request):
    agreement_request["agreementDetails"]["endDate"] = "next spring"
    result = _validate(agreement_request)
    assert result.errors == ["Agreement end date is invalid"]


@pytest.mark.parametrize("rent", [0, -10, None, "abc", "NaN", "inf", "-Infinity", float("nan"), float("inf")])
def test_rent_must_be_positive(agreement_request, rent):
    agreement_request["agreementDetails"]["rentAmount"] = rent
    assert _validate(agreement_request).errors == ["Rent amount must be greater than 0"]


def test_security_deposit_bounds(agreement_request):
    agreement_request["agreementDetails"]["securityDeposit"] = 0
    assert _validate(agreement_request).is_valid
    agreement_request["agreementDetails"]["securityDeposit"] = -1
    assert _validate(agreement_request).errors == ["Security deposit cannot be negative"]


def test_non_finite_deposit_is_rejected(agreement_request):
    agreement_request["agreementDetails"]["securityDeposit"] = "nan"
    assert _validate(agreement_request).errors == ["Security deposit cannot be negative"]


def test_end_compared_as_instant_across_offsets(agreement_request):
    # 23:30 at -05:00 is 04:30Z on Jan 2, after the 01:00Z end.
    agreement_request["agreementDetails"]["startDate"] = "2024-01-01T23:30:00-05:00"
    agreement_request["agreementDetails"]["endDate"] = "2024-01-02T01:00:00Z"
    assert _validate(agreement_request).errors == ["End date must be after start date"]


def test_offset_timestamps_in_order_are_valid(agreement_request):
    agreement_request["agreementDetails"]["startDate"] = "2024-01-01T10:00:00+05:30"
    agreement_request["agreementDetails"]["endDate"] = "2025-01-01"
    assert _validate(agreement_request).is_valid


def test_everything_missing_reports_all_errors_in_order():
    result = validate_agreement_data(None, None, None, None, None)
    assert result.errors == [
        "Landlord name is required",
        "Landlord phone number is required",
        "Landlord email is required",
        "Landlord address street is required",
        "Landlord address city is required",
        "Tenant name is required",
        "Tenant phone number is required",
        "Tenant email is required",
        "Tenant ID proof type is required",
        "Tenant ID proof number is required",
        "Property address street is required",
        "Property type is required",
        "Agreement start date is required",
        "Agreement end date is required",
        "Rent amount must be greater than 0",
        "Security deposit cannot be negative",
    ]
    assert result.warnings == [
        "Landlord tax ID is recommended",
        "Landlord bank account number is recommended",
        "Tenant occupation is recommended",
        "No family members added - consider adding if applicable",
    ]
    assert not result.is_valid


def test_wrongly_shaped_sections_do_not_raise():
    result = validate_agreement_data("landlord", ["tenant"], 42, {"startDate": 5}, None)
    assert not result.is_valid
    assert "Agreement start date is invalid" in result.errors


def test_warnings_do_not_block(agreement_request):
    for key in ("taxID", "bankAccountNumber"):
        agreement_request["landlord"].pop(key)
    agreement_request["tenant"].pop("occupation")
    agreement_request["familyMembers"] = []
    result = _validate(agreement_request)
    assert result.is_valid
    assert len(result.warnings) == 4


def test_payload_shape(agreement_request):
    agreement_request["tenant"]["name"] = "  "
    payload = _validate(agreement_request).to_payload()
    assert payload == {"isValid": False, "errors": ["Tenant name is required"], "warnings": []}


@pytest.mark.parametrize(
    "email",
    [
        "user@example.com",
        "first.last+tag@sub.example.co.uk",
        "o'reilly@example.com",
        "user@localhost",
        "x@a-b.com",
    ],
)
def test_valid_email_shapes(email):
    assert is_valid_email(email)


@pytest.mark.parametrize(
    "email",
    [
        "bad@@x",
        "no-at-sign",
        "user@-example.com",
        "user@example-.com",
        "user@exa mple.com",
        "user@example..com",
        "@example.com",
        "user@" + "a" * 64 + ".com",
        None,
    ],
)
def test_invalid_email_shapes(email):
    assert not is_valid_email(email)
