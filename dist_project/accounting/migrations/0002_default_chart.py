from decimal import Decimal
from django.db import migrations

# Accounts the automatic purchase / sales / payment journals post to
# (see ACCOUNTING_POSTING_ACCOUNTS in settings)
DEFAULT_ACCOUNTS = [
    # code, name, ac_type, normal_balance, sub_type
    ("1010", "Cash in Hand", "asset", "debit", "current"),
    ("1020", "Bank Account", "asset", "debit", "current"),
    ("1200", "Sundry Debtors", "asset", "debit", "current"),
    ("1300", "VAT Input (Receivable)", "asset", "debit", "current"),
    ("2100", "Sundry Creditors", "liability", "credit", "current"),
    ("2200", "VAT Output (Payable)", "liability", "credit", "current"),
    ("4100", "Sales", "revenue", "credit", "current"),
    ("5100", "Purchases", "expense", "debit", "current"),
]


def seed_chart(apps, schema_editor):
    Account = apps.get_model("accounting", "Account")
    for code, name, ac_type, normal_balance, sub_type in DEFAULT_ACCOUNTS:
        # leave accounts someone already set up alone
        Account.objects.get_or_create(
            code=code,
            defaults={
                "name": name,
                "ac_type": ac_type,
                "normal_balance": normal_balance,
                "sub_type": sub_type,
                "opening_balance": Decimal("0.00"),
            },
        )


class Migration(migrations.Migration):

    dependencies = [
        ("accounting", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_chart, reverse_code=migrations.RunPython.noop),
    ]
