import pytest
from ..forms import validate_application, validate_status_update
from .factories import application_payload, with_field


def test_valid_application_drops_blank_rows():
    result = validate_application(application_payload())

    assert result.is_valid, result.errors
    assert len(result.data["current_transactions"]) == 1
    assert result.data["partnership_details"] is None
    assert result.data["staff_infrastructure"]["warehouse_space"] == 1500


@pytest.mark.parametrize(
    "section, field, value",
    [
        ("personal_details", "mobile_number", "12345"),
        ("personal_details", "citizenship_number", "1201751234"),
        ("personal_details", "age", 17),
        ("personal_details", "gender", "male"),
        ("personal_details", "permanent_address", "Pokhara"),
        ("business_details", "pan_vat_number", "30123456"),
        ("business_details", "registration_number", "R-1"),
        ("staff_infrastructure", "truck_count", -1),
        ("retailer_requirements", "credit_days", 366),
    ],
)
def test_field_errors_are_keyed_by_section(section, field, value):
    result = validate_application(application_payload(**with_field(section, **{field: value})))

    assert not result.is_valid
    assert f"{section}.{field}" in result.errors


def test_mobile_number_accepts_country_code():
    payload = application_payload(**with_field("personal_details", mobile_number="+9779841234567"))
    assert validate_application(payload).is_valid


def test_declaration_must_be_accepted():
    payload = application_payload(**with_field("declaration", declaration=False))

    result = validate_application(payload)
    assert result.errors["declaration.declaration"] == ["The declaration must be accepted"]


def test_missing_required_section():
    payload = application_payload()
    del payload["business_information"]

    result = validate_application(payload)
    assert result.errors["business_information"] == ["This section is required"]


def test_list_sections_are_capped():
    areas = [{"distribution_area": f"Ward {i}"} for i in range(10)]
    result = validate_application(application_payload(area_coverage=areas))

    assert result.errors["area_coverage"] == ["At most 9 entries are allowed"]


def test_list_rows_report_their_index():
    products = [{"product_name": "Biscuits"}, {"product_name": "x" * 101}]
    result = validate_application(application_payload(products_to_distribute=products))

    assert "products_to_distribute[1].product_name" in result.errors


def test_partner_details_are_checked_when_present():
    partner = {"partner_full_name": "Sita Thapa", "partner_mobile_number": "98412"}
    result = validate_application(application_payload(partnership_details=partner))

    assert "partnership_details.partner_mobile_number" in result.errors


def test_status_update_form():
    assert validate_status_update({"status": "APPROVED"}).is_valid
    assert "status" in validate_status_update({"status": "CANCELLED"}).errors
    assert "review_notes" in validate_status_update(
        {"status": "REJECTED", "review_notes": "n" * 1001}
    ).errors
