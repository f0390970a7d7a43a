"""
Validators for the distributor application form.

Each section of the submitted JSON has its own Django form. Errors come back
keyed by path, e.g. "personal_details.mobile_number" or
"area_coverage[2].competitor_brand".
"""
from django import forms
from accounting.forms.base import ValidationResult, form_errors, validate_items
from .models import ApplicationStatus

PHONE_REGEX = r"^(\+977)?[0-9]{10}$"
CITIZENSHIP_REGEX = r"^[0-9]{2}-[0-9]{2}-[0-9]{2}-[0-9]{5}$"
PAN_VAT_REGEX = r"^[0-9]{9}$"

GENDER_CHOICES = [("पुरुष", "पुरुष"), ("महिला", "महिला"), ("अन्य", "अन्य")]

MAX_CURRENT_TRANSACTIONS = 6
MAX_PRODUCTS = 10
MAX_AREAS = 9


def text(min_length=None, max_length=None, required=True):
    return forms.CharField(min_length=min_length, max_length=max_length, required=required)


def count():
    return forms.IntegerField(min_value=0)


def experience():
    return text(max_length=500, required=False)


# ---------- Sections ----------
class PersonalDetailsForm(forms.Form):
    full_name = text(2, 100)
    age = forms.IntegerField(min_value=18, max_value=100)
    gender = forms.ChoiceField(choices=GENDER_CHOICES)
    citizenship_number = forms.RegexField(
        CITIZENSHIP_REGEX,
        error_messages={"invalid": "Citizenship number must look like XX-XX-XX-XXXXX"},
    )
    issued_district = text(2, 50)
    mobile_number = forms.RegexField(
        PHONE_REGEX, error_messages={"invalid": "Enter a valid mobile number"}
    )
    email = forms.EmailField(required=False)
    permanent_address = text(10, 200)
    temporary_address = text(max_length=200, required=False)


class BusinessDetailsForm(forms.Form):
    company_name = text(2, 100)
    registration_number = text(5, 50)
    pan_vat_number = forms.RegexField(
        PAN_VAT_REGEX, error_messages={"invalid": "PAN/VAT number must be 9 digits"}
    )
    office_address = text(10, 200)
    operating_area = text(2, 100)
    desired_distributor_area = text(2, 100)
    current_business = text(5, 200)
    business_type = text(2, 50)


class StaffInfrastructureForm(forms.Form):
    sales_man_count = count()
    sales_man_experience = experience()
    delivery_staff_count = count()
    delivery_staff_experience = experience()
    account_assistant_count = count()
    account_assistant_experience = experience()
    other_staff_count = count()
    other_staff_experience = experience()
    warehouse_space = forms.FloatField(min_value=0)
    warehouse_details = experience()
    truck_count = count()
    truck_details = experience()
    four_wheeler_count = count()
    four_wheeler_details = experience()
    two_wheeler_count = count()
    two_wheeler_details = experience()
    cycle_count = count()
    cycle_details = experience()
    thela_count = count()
    thela_details = experience()


class CurrentTransactionForm(forms.Form):
    company = text(max_length=100, required=False)
    products = text(max_length=200, required=False)
    turnover = text(max_length=50, required=False)


class BusinessInformationForm(forms.Form):
    product_category = text(2, 100)
    years_in_business = forms.IntegerField(min_value=0, max_value=100)
    monthly_sales = text(1, 50)
    storage_facility = text(5, 200)


class ProductToDistributeForm(forms.Form):
    product_name = text(max_length=100, required=False)
    monthly_sales_capacity = text(max_length=50, required=False)


class PartnershipDetailsForm(forms.Form):
    partner_full_name = text(max_length=100, required=False)
    partner_age = forms.IntegerField(min_value=18, max_value=100, required=False)
    partner_gender = forms.ChoiceField(choices=GENDER_CHOICES, required=False)
    partner_citizenship_number = forms.RegexField(CITIZENSHIP_REGEX, required=False)
    partner_issued_district = text(max_length=50, required=False)
    partner_mobile_number = forms.RegexField(PHONE_REGEX, required=False)
    partner_email = forms.EmailField(required=False)
    partner_permanent_address = text(max_length=200, required=False)
    partner_temporary_address = text(max_length=200, required=False)


class RetailerRequirementsForm(forms.Form):
    preferred_products = text(2, 200)
    monthly_order_quantity = text(1, 50)
    payment_preference = text(2, 50)
    credit_days = forms.IntegerField(min_value=0, max_value=365, required=False)
    delivery_preference = text(2, 50)


class AreaCoverageForm(forms.Form):
    distribution_area = text(max_length=100, required=False)
    population_estimate = text(max_length=50, required=False)
    competitor_brand = text(max_length=100, required=False)


class AdditionalInformationForm(forms.Form):
    additional_info_1 = text(max_length=500, required=False)
    additional_info_2 = text(max_length=500, required=False)
    additional_info_3 = text(max_length=500, required=False)


class DocumentsForm(forms.Form):
    # paths of files already stored by the upload layer
    citizenship_id = text(max_length=255, required=False)
    company_registration = text(max_length=255, required=False)
    pan_vat_registration = text(max_length=255, required=False)
    office_photo = text(max_length=255, required=False)
    area_map = text(max_length=255, required=False)


class DeclarationForm(forms.Form):
    declaration = forms.BooleanField(
        error_messages={"required": "The declaration must be accepted"}
    )
    signature = text(2, 100)
    date = forms.DateField()


# section name -> (form, required)
SECTIONS = [
    ("personal_details", PersonalDetailsForm, True),
    ("business_details", BusinessDetailsForm, True),
    ("staff_infrastructure", StaffInfrastructureForm, True),
    ("business_information", BusinessInformationForm, True),
    ("partnership_details", PartnershipDetailsForm, False),
    ("retailer_requirements", RetailerRequirementsForm, True),
    ("additional_information", AdditionalInformationForm, False),
    ("documents", DocumentsForm, False),
    ("declaration", DeclarationForm, True),
]

# list name -> (row form, max rows, field that makes a row worth keeping)
LIST_SECTIONS = [
    ("current_transactions", CurrentTransactionForm, MAX_CURRENT_TRANSACTIONS, "company"),
    ("products_to_distribute", ProductToDistributeForm, MAX_PRODUCTS, "product_name"),
    ("area_coverage", AreaCoverageForm, MAX_AREAS, "distribution_area"),
]


def validate_application(data):
    """
    Validate a whole application payload.
    Rows left blank in the list sections are dropped; optional sections
    that are missing come back as None.
    """
    cleaned = {}
    errors = {}

    for name, form_class, required in SECTIONS:
        section = data.get(name)
        if section in (None, {}) and not required:
            cleaned[name] = None
            continue
        if not isinstance(section, dict):
            errors[name] = ["This section is required" if section is None else "Must be an object"]
            continue
        form = form_class(section)
        if form.is_valid():
            cleaned[name] = form.cleaned_data
        else:
            errors.update(form_errors(form, prefix=name))

    for name, form_class, limit, key_field in LIST_SECTIONS:
        rows = data.get(name) or []
        if not isinstance(rows, list):
            errors[name] = ["Must be a list"]
            continue
        if len(rows) > limit:
            errors[name] = [f"At most {limit} entries are allowed"]
            continue
        items, item_errors = validate_items(form_class, rows, name)
        errors.update(item_errors)
        cleaned[name] = [item for item in items if item.get(key_field)]

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(cleaned)


class StatusUpdateForm(forms.Form):
    status = forms.ChoiceField(choices=ApplicationStatus.choices)
    review_notes = text(max_length=1000, required=False)


def validate_status_update(data):
    form = StatusUpdateForm(data)
    if form.is_valid():
        return ValidationResult(form.cleaned_data)
    return ValidationResult(errors=form_errors(form))
