"""Model → JSON-ready dict converters used by the API views."""


def money(value):
    return None if value is None else f"{value:.2f}"


def iso(value):
    return value.isoformat() if value else None


def account_to_dict(account):
    return {
        "id": account.pk,
        "code": account.code,
        "name": account.name,
        "type": account.ac_type,
        "normal_balance": account.normal_balance,
        "sub_type": account.sub_type,
        "parent_code": account.parent.code if account.parent_id else None,
        "description": account.description,
        "opening_balance": money(account.opening_balance),
        "is_active": account.is_active,
    }


def party_to_dict(party):
    return {
        "id": party.pk,
        "party_name": party.party_name,
        "party_type": party.party_type,
        "contact_number": party.contact_number,
        "email": party.email,
        "address": party.address,
        "pan_number": party.pan_number,
        "opening_balance": money(party.opening_balance),
        "opening_balance_type": party.opening_balance_type,
        # stored signed, reported as amount + side
        "current_balance": money(abs(party.current_balance)),
        "balance_type": party.balance_type,
        "credit_limit": money(party.credit_limit),
        "is_active": party.is_active,
    }


def journal_line_to_dict(line):
    return {
        "id": line.pk,
        "account_code": line.account.code,
        "account_name": line.account.name,
        "party_id": line.party_id,
        "description": line.description,
        "debit_amount": money(line.debit_amount),
        "credit_amount": money(line.credit_amount),
    }


def journal_to_dict(entry, with_lines=True):
    data = {
        "id": entry.pk,
        "entry_number": entry.entry_number,
        "date": iso(entry.date),
        "description": entry.description,
        "reference_number": entry.reference_number,
        "reference_type": entry.reference_type,
        "notes": entry.notes,
        "status": entry.status,
        "posted_at": iso(entry.posted_at),
        "source_type": entry.source_type,
        "source_id": entry.source_id,
        "reverses": entry.reverses.entry_number if entry.reverses_id else None,
    }
    if with_lines:
        lines = list(entry.lines.select_related("account").order_by("id"))
        debit = sum((line.debit_amount for line in lines), 0)
        credit = sum((line.credit_amount for line in lines), 0)
        data["entries"] = [journal_line_to_dict(line) for line in lines]
        data["total_debit"] = money(debit)
        data["total_credit"] = money(credit)
    return data


def _item_to_dict(item):
    return {
        "description": item.description,
        "quantity": str(item.quantity.normalize()),
        "unit_price": money(item.unit_price),
        "amount": money(item.amount),
        "is_vat_exempt": item.is_vat_exempt,
    }


def _return_item_to_dict(item):
    data = _item_to_dict(item)
    data["reason"] = item.reason
    return data


def _document_to_dict(doc, with_items):
    data = {
        "id": doc.pk,
        "subtotal": money(doc.subtotal),
        "discount_amount": money(doc.discount_amount),
        "taxable_amount": money(doc.taxable_amount),
        "vat_amount": money(doc.vat_amount),
        "total_amount": money(doc.total_amount),
        "payment_method": doc.payment_method,
        "due_date": iso(doc.due_date),
        "notes": doc.notes,
        "status": doc.status,
        "paid_at": iso(doc.paid_at),
        "journal_entry": doc.journal_entry.entry_number if doc.journal_entry_id else None,
        "payment_journal": doc.payment_journal.entry_number if doc.payment_journal_id else None,
    }
    if with_items:
        data["items"] = [_item_to_dict(item) for item in doc.items.all()]
    return data


def purchase_to_dict(purchase, with_items=True):
    data = {
        "purchase_date": iso(purchase.date),
        "bill_number": purchase.bill_number,
        "supplier_id": purchase.supplier_id,
        "supplier_name": purchase.supplier_name,
    }
    data.update(_document_to_dict(purchase, with_items))
    return data


def sale_to_dict(sale, with_items=True):
    data = {
        "sale_date": iso(sale.date),
        "invoice_number": sale.invoice_number,
        "customer_id": sale.customer_id,
        "customer_name": sale.customer_name,
    }
    data.update(_document_to_dict(sale, with_items))
    return data


def _return_to_dict(ret, with_items):
    data = {
        "id": ret.pk,
        "return_number": ret.return_number,
        "return_date": iso(ret.date),
        "subtotal": money(ret.subtotal),
        "discount_amount": money(ret.discount_amount),
        "taxable_amount": money(ret.taxable_amount),
        "vat_amount": money(ret.vat_amount),
        "total_amount": money(ret.total_amount),
        "notes": ret.notes,
        "status": ret.status,
        "processed_at": iso(ret.processed_at),
        "journal_entry": ret.journal_entry.entry_number if ret.journal_entry_id else None,
    }
    if with_items:
        data["items"] = [_return_item_to_dict(item) for item in ret.items.all()]
    return data


def sales_return_to_dict(sales_return, with_items=True):
    data = _return_to_dict(sales_return, with_items)
    data.update({
        "customer_id": sales_return.customer_id,
        "customer_name": sales_return.customer_name,
        "original_invoice_number": sales_return.original_invoice_number,
    })
    return data


def purchase_return_to_dict(purchase_return, with_items=True):
    data = _return_to_dict(purchase_return, with_items)
    data.update({
        "supplier_id": purchase_return.supplier_id,
        "supplier_name": purchase_return.supplier_name,
        "original_bill_number": purchase_return.original_bill_number,
    })
    return data
