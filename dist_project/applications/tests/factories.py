import copy

APPLICATION = {
    "personal_details": {
        "full_name": "Ram Bahadur Thapa",
        "age": 35,
        "gender": "पुरुष",
        "citizenship_number": "12-01-75-01234",
        "issued_district": "Kaski",
        "mobile_number": "9841234567",
        "email": "ram.thapa@example.com",
        "permanent_address": "Lakeside-6, Pokhara, Kaski",
    },
    "business_details": {
        "company_name": "Thapa Trading Concern",
        "registration_number": "REG-45678",
        "pan_vat_number": "301234567",
        "office_address": "Chipledhunga, Pokhara-4",
        "operating_area": "Pokhara",
        "desired_distributor_area": "Kaski and Syangja",
        "current_business": "FMCG wholesale",
        "business_type": "Sole proprietorship",
    },
    "staff_infrastructure": {
        "sales_man_count": 3,
        "delivery_staff_count": 2,
        "account_assistant_count": 1,
        "other_staff_count": 0,
        "warehouse_space": 1500,
        "truck_count": 1,
        "four_wheeler_count": 0,
        "two_wheeler_count": 4,
        "cycle_count": 0,
        "thela_count": 1,
    },
    "current_transactions": [
        {"company": "Himalayan Foods", "products": "Noodles", "turnover": "5 lakh"},
        {"company": "", "products": "", "turnover": ""},
    ],
    "business_information": {
        "product_category": "Food & beverages",
        "years_in_business": 8,
        "monthly_sales": "12 lakh",
        "storage_facility": "Dry warehouse with racks",
    },
    "products_to_distribute": [
        {"product_name": "Biscuits", "monthly_sales_capacity": "800 cartons"},
    ],
    "retailer_requirements": {
        "preferred_products": "Biscuits, noodles",
        "monthly_order_quantity": "1000 cartons",
        "payment_preference": "Credit",
        "credit_days": 30,
        "delivery_preference": "Weekly",
    },
    "area_coverage": [
        {"distribution_area": "Lekhnath", "population_estimate": "90000", "competitor_brand": "Wai Wai"},
    ],
    "declaration": {
        "declaration": True,
        "signature": "Ram B. Thapa",
        "date": "2025-03-01",
    },
}


def application_payload(**sections):
    """A valid application; keyword args replace whole sections."""
    data = copy.deepcopy(APPLICATION)
    data.update(sections)
    return data


def with_field(section, **fields):
    data = copy.deepcopy(APPLICATION[section])
    data.update(fields)
    return {section: data}
