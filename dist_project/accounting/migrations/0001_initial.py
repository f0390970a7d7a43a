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


DOCUMENT_STATUS = [("pending", "Pending"), ("paid", "Paid"), ("overdue", "Overdue")]
PAYMENT_METHODS = [
    ("cash", "Cash"),
    ("bank_transfer", "Bank Transfer"),
    ("cheque", "Cheque"),
    ("credit", "Credit"),
]
NORMAL_BALANCE = [("debit", "Debit"), ("credit", "Credit")]


def document_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("date", models.DateField()),
        ("subtotal", money()),
        ("discount_amount", money()),
        ("taxable_amount", money()),
        ("vat_amount", money()),
        ("total_amount", money()),
        ("payment_method", models.CharField(choices=PAYMENT_METHODS, default="credit", max_length=15)),
        ("due_date", models.DateField(blank=True, null=True)),
        ("notes", models.TextField(blank=True, max_length=1000)),
        ("status", models.CharField(choices=DOCUMENT_STATUS, default="pending", max_length=10)),
        ("paid_at", models.DateField(blank=True, null=True)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
        ("journal_entry", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to="accounting.journalentry")),
        ("payment_journal", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to="accounting.journalentry")),
    ]


def item_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("description", models.CharField(max_length=200)),
        ("quantity", models.DecimalField(decimal_places=4, default=Decimal("1"), max_digits=14, validators=[django.core.validators.MinValueValidator(Decimal("0.01"))])),
        ("unit_price", money()),
        ("amount", money()),
        ("is_vat_exempt", models.BooleanField(default=False)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=20, unique=True, validators=[django.core.validators.RegexValidator("^[A-Z0-9-]+$", "Account code can only contain uppercase letters, numbers, and hyphens")])),
                ("name", models.CharField(max_length=100)),
                ("ac_type", models.CharField(choices=[("asset", "Asset"), ("liability", "Liability"), ("equity", "Equity"), ("revenue", "Revenue"), ("expense", "Expense")], max_length=10)),
                ("normal_balance", models.CharField(blank=True, choices=NORMAL_BALANCE, max_length=6)),
                ("sub_type", models.CharField(choices=[("current", "Current"), ("inventory", "Inventory"), ("long_term", "Long-term / Fixed")], default="current", max_length=10)),
                ("description", models.CharField(blank=True, max_length=500)),
                ("opening_balance", money()),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("parent", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="children", to="accounting.account")),
            ],
            options={
                "ordering": ["code"],
                "indexes": [models.Index(fields=["ac_type", "is_active"], name="acct_type_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                ("object_type", models.CharField(max_length=100)),
                ("object_id", models.CharField(max_length=100)),
                ("changes", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["object_type", "object_id"], name="audit_object_idx"),
                    models.Index(fields=["created_at"], name="audit_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PartyLedger",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("party_name", models.CharField(max_length=100)),
                ("party_type", models.CharField(choices=[("customer", "Customer"), ("supplier", "Supplier"), ("bank", "Bank"), ("cash", "Cash"), ("other", "Other")], max_length=10)),
                ("contact_number", models.CharField(blank=True, max_length=30, validators=[django.core.validators.RegexValidator("^[0-9+\\-\\s()]+$", "Please provide a valid contact number")])),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("address", models.CharField(blank=True, max_length=500)),
                ("pan_number", models.CharField(blank=True, max_length=9, validators=[django.core.validators.RegexValidator("^[0-9]{9}$", "PAN number must be exactly 9 digits")])),
                ("opening_balance", money()),
                ("opening_balance_type", models.CharField(choices=NORMAL_BALANCE, default="debit", max_length=6)),
                ("current_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("credit_limit", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("control_account", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="parties", to="accounting.account")),
            ],
            options={
                "ordering": ["party_name"],
                "constraints": [models.UniqueConstraint(fields=("party_name", "party_type"), name="uq_party_name_type")],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entry_number", models.CharField(blank=True, editable=False, max_length=20, unique=True)),
                ("date", models.DateField()),
                ("description", models.CharField(max_length=500)),
                ("reference_number", models.CharField(blank=True, max_length=50)),
                ("reference_type", models.CharField(choices=[("invoice", "Invoice"), ("payment", "Payment"), ("adjustment", "Adjustment"), ("manual", "Manual")], default="manual", max_length=10)),
                ("notes", models.TextField(blank=True, max_length=1000)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("posted", "Posted")], default="draft", max_length=10)),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("source_type", models.CharField(blank=True, max_length=50)),
                ("source_id", models.BigIntegerField(blank=True, null=True)),
                ("posting_fingerprint", models.CharField(blank=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="journal_entries", to=settings.AUTH_USER_MODEL)),
                ("posted_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="posted_journal_entries", to=settings.AUTH_USER_MODEL)),
                ("reverses", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="reversed_by", to="accounting.journalentry")),
            ],
            options={
                "verbose_name_plural": "journal entries",
                "ordering": ["-date", "-id"],
                "indexes": [
                    models.Index(fields=["date"], name="je_date_idx"),
                    models.Index(fields=["status", "date"], name="je_status_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.CharField(blank=True, max_length=200)),
                ("debit_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("credit_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="journal_lines", to="accounting.account")),
                ("journal", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="accounting.journalentry")),
                ("party", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="journal_lines", to="accounting.partyledger")),
            ],
            options={
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["account", "journal"], name="jl_account_journal_idx"),
                    models.Index(fields=["party"], name="jl_party_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("debit_amount__gte", 0), ("credit_amount__gte", 0)), name="jl_non_negative_amounts"),
                    models.CheckConstraint(condition=models.Q(models.Q(("debit_amount__gt", 0), ("credit_amount", 0)), models.Q(("debit_amount", 0), ("credit_amount__gt", 0)), _connector="OR"), name="jl_debit_xor_credit"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PurchaseEntry",
            fields=document_fields() + [
                ("bill_number", models.CharField(max_length=50)),
                ("supplier_name", models.CharField(max_length=100)),
                ("supplier", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="purchases", to="accounting.partyledger")),
            ],
            options={
                "verbose_name": "purchase entry",
                "verbose_name_plural": "purchase entries",
                "ordering": ["-date", "-id"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["date"], name="purchase_date_idx"),
                    models.Index(fields=["supplier", "status"], name="purchase_supplier_status_idx"),
                ],
                "constraints": [models.UniqueConstraint(fields=("supplier", "bill_number"), name="uq_purchase_supplier_bill")],
            },
        ),
        migrations.CreateModel(
            name="PurchaseItem",
            fields=item_fields() + [
                ("purchase", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="accounting.purchaseentry")),
            ],
            options={"ordering": ["id"], "abstract": False},
        ),
        migrations.CreateModel(
            name="SalesEntry",
            fields=document_fields() + [
                ("invoice_number", models.CharField(max_length=50, unique=True)),
                ("customer_name", models.CharField(max_length=100)),
                ("customer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="sales", to="accounting.partyledger")),
            ],
            options={
                "verbose_name": "sales entry",
                "verbose_name_plural": "sales entries",
                "ordering": ["-date", "-id"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["date"], name="sale_date_idx"),
                    models.Index(fields=["customer", "status"], name="sale_customer_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SalesItem",
            fields=item_fields() + [
                ("sale", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="accounting.salesentry")),
            ],
            options={"ordering": ["id"], "abstract": False},
        ),
    ]
