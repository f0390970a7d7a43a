from accounting.serializers import iso


def history_to_dict(entry):
    return {
        "status": entry.status,
        "notes": entry.notes,
        "changed_by": entry.changed_by,
        "changed_at": iso(entry.changed_at),
    }


def application_to_dict(application, with_sections=True):
    data = {
        "id": application.pk,
        "full_name": application.full_name,
        "company_name": application.company_name,
        "mobile_number": application.mobile_number,
        "email": application.email,
        "desired_distributor_area": application.desired_distributor_area,
        "business_type": application.business_type,
        "status": application.status,
        "review_notes": application.review_notes,
        "reviewed_by": application.reviewed_by.get_username() if application.reviewed_by_id else None,
        "reviewed_at": iso(application.reviewed_at),
        "distributor_username": (
            application.distributor_user.get_username() if application.distributor_user_id else None
        ),
        "created_at": iso(application.created_at),
    }
    if with_sections:
        data.update(
            personal_details=application.personal_details,
            business_details=application.business_details,
            staff_infrastructure=application.staff_infrastructure,
            current_transactions=application.current_transactions,
            business_information=application.business_information,
            products_to_distribute=application.products_to_distribute,
            partnership_details=application.partnership_details,
            retailer_requirements=application.retailer_requirements,
            area_coverage=application.area_coverage,
            additional_information=application.additional_information,
            documents=application.documents,
            declaration={
                "declaration": application.declaration_accepted,
                "signature": application.signature,
                "date": iso(application.declaration_date),
            },
            history=[history_to_dict(h) for h in application.history.all()],
        )
    return data
