from decimal import Decimal

# Nepal VAT rate applied to taxable purchase and sales amounts
VAT_RATE = Decimal("0.13")

# Largest debit/credit or VAT mismatch still treated as rounding noise
BALANCE_TOLERANCE = Decimal("0.01")

# Money is stored and reported with 2 decimal places
CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

# Account type → side on which its balance increases
NORMAL_BALANCE_FOR_TYPE = {
    "asset": "debit",
    "expense": "debit",
    "liability": "credit",
    "equity": "credit",
    "revenue": "credit",
}

# Age buckets (in days) used by the receivable/payable aging report
AGING_BUCKETS = [
    ("current", 0, 30),
    ("days_31_60", 31, 60),
    ("days_61_90", 61, 90),
    ("days_91_180", 91, 180),
    ("over_180", 181, None),
]

# Column precision of every stored money amount
MONEY_MAX_DIGITS = 18
MONEY_DECIMAL_PLACES = 2
