from .account import Account
from .auditlog import AuditLog
from .journal import JournalEntry, JournalLine
from .party import PartyLedger
from .purchase import PurchaseEntry, PurchaseItem
from .returns import PurchaseReturn, PurchaseReturnItem, SalesReturn, SalesReturnItem
from .sales import SalesEntry, SalesItem
