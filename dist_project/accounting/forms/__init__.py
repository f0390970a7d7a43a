from .account import AccountForm, validate_account
from .base import ValidationResult
from .documents import (DocumentItemForm, PurchaseEntryForm, PurchaseReturnForm,
                        ReturnItemForm, SalesEntryForm, SalesReturnForm,
                        validate_purchase_entry, validate_purchase_return,
                        validate_sales_entry, validate_sales_return)
from .journal import JournalEntryForm, JournalLineForm, validate_journal_entry
from .party import PartyLedgerForm, validate_party
from .reports import (AsOfDateForm, DateRangeForm, DocumentRegisterForm,
                      VatReportForm, validate_query)
