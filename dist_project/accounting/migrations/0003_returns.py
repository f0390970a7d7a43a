import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


def money(**kwargs):
    kwargs.setdefault("default", Decimal("0.00"))
    return models.DecimalField(
        decimal_places=2,
        max_digits=18,
        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
        **kwargs,
    )


RETURN_STATUS = [("draft", "Draft"), ("approved", "Approved"), ("processed", "Processed")]

# contra accounts the return journals post to
RETURN_ACCOUNTS = [
    # code, name, ac_type, normal_balance, sub_type
    ("4200", "Sales Returns", "revenue", "credit", "current"),
    ("5200", "Purchase Returns", "expense", "debit", "current"),
]


def return_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("date", models.DateField()),
        ("subtotal", money()),
        ("discount_amount", money()),
        ("taxable_amount", money()),
        ("vat_amount", money()),
        ("total_amount", money()),
        ("notes", models.TextField(blank=True, max_length=1000)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("return_number", models.CharField(blank=True, editable=False, max_length=20, unique=True)),
        ("status", models.CharField(choices=RETURN_STATUS, default="draft", max_length=10)),
        ("processed_at", models.DateField(blank=True, null=True)),
        ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
        ("journal_entry", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to="accounting.journalentry")),
    ]


def return_item_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("description", models.CharField(max_length=200)),
        ("quantity", models.DecimalField(decimal_places=4, default=Decimal("1"), max_digits=14, validators=[django.core.validators.MinValueValidator(Decimal("0.01"))])),
        ("unit_price", money()),
        ("amount", money()),
        ("is_vat_exempt", models.BooleanField(default=False)),
        ("reason", models.CharField(blank=True, max_length=200)),
    ]


def seed_return_accounts(apps, schema_editor):
    Account = apps.get_model("accounting", "Account")
    for code, name, ac_type, normal_balance, sub_type in RETURN_ACCOUNTS:
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
        ("accounting", "0002_default_chart"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="SalesReturn",
            fields=return_fields() + [
                ("customer_name", models.CharField(max_length=100)),
                ("original_invoice_number", models.CharField(blank=True, max_length=50)),
                ("customer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="sales_returns", to="accounting.partyledger")),
                ("original_sale", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="returns", to="accounting.salesentry")),
            ],
            options={
                "verbose_name": "sales return",
                "ordering": ["-date", "-id"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["date"], name="sales_return_date_idx"),
                    models.Index(fields=["customer", "status"], name="sales_return_customer_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SalesReturnItem",
            fields=return_item_fields() + [
                ("sales_return", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="accounting.salesreturn")),
            ],
            options={"ordering": ["id"], "abstract": False},
        ),
        migrations.CreateModel(
            name="PurchaseReturn",
            fields=return_fields() + [
                ("supplier_name", models.CharField(max_length=100)),
                ("original_bill_number", models.CharField(blank=True, max_length=50)),
                ("supplier", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="purchase_returns", to="accounting.partyledger")),
                ("original_purchase", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="returns", to="accounting.purchaseentry")),
            ],
            options={
                "verbose_name": "purchase return",
                "ordering": ["-date", "-id"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["date"], name="purchase_return_date_idx"),
                    models.Index(fields=["supplier", "status"], name="purchase_return_supplier_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PurchaseReturnItem",
            fields=return_item_fields() + [
                ("purchase_return", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="accounting.purchasereturn")),
            ],
            options={"ordering": ["id"], "abstract": False},
        ),
        migrations.RunPython(seed_return_accounts, reverse_code=migrations.RunPython.noop),
    ]
