from .account import AccountAdmin, PartyLedgerAdmin
from .actions import (mark_documents_overdue, post_journal_entries,
                      process_returns, refresh_balances, reverse_journal_entries)
from .auditlog import AuditLogAdmin
from .documents import (PurchaseEntryAdmin, PurchaseReturnAdmin, SalesEntryAdmin,
                        SalesReturnAdmin)
from .inlines import (JournalLineInline, PurchaseItemInline, PurchaseReturnItemInline,
                      SalesItemInline, SalesReturnItemInline)
from .journal import JournalEntryAdmin, JournalLineAdmin
