import django.core.serializers.json
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("PENDING", "Pending"),
    ("UNDER_REVIEW", "Under review"),
    ("APPROVED", "Approved"),
    ("REJECTED", "Rejected"),
    ("REQUIRES_CHANGES", "Requires changes"),
]


def section(**kwargs):
    kwargs.setdefault("default", dict)
    return models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, **kwargs)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="DistributorApplication",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("full_name", models.CharField(max_length=100)),
                ("age", models.PositiveSmallIntegerField()),
                ("gender", models.CharField(max_length=10)),
                ("citizenship_number", models.CharField(max_length=20)),
                ("mobile_number", models.CharField(max_length=15)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("company_name", models.CharField(max_length=100)),
                ("pan_vat_number", models.CharField(max_length=9)),
                ("desired_distributor_area", models.CharField(max_length=100)),
                ("business_type", models.CharField(max_length=50)),
                ("personal_details", section()),
                ("business_details", section()),
                ("staff_infrastructure", section()),
                ("current_transactions", section(default=list)),
                ("business_information", section()),
                ("products_to_distribute", section(default=list)),
                ("partnership_details", section(default=None, null=True)),
                ("retailer_requirements", section()),
                ("area_coverage", section(default=list)),
                ("additional_information", section()),
                ("documents", section()),
                ("declaration_accepted", models.BooleanField(default=False)),
                ("signature", models.CharField(max_length=100)),
                ("declaration_date", models.DateField()),
                ("status", models.CharField(choices=STATUS_CHOICES, default="PENDING", max_length=20)),
                ("review_notes", models.TextField(blank=True, max_length=1000)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("distributor_user", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="distributor_application", to=settings.AUTH_USER_MODEL)),
                ("reviewed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="reviewed_applications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="application_status_idx"),
                    models.Index(fields=["mobile_number"], name="application_mobile_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ApplicationHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ("notes", models.TextField(blank=True)),
                ("changed_by", models.CharField(max_length=150)),
                ("changed_at", models.DateTimeField(auto_now_add=True)),
                ("application", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="history", to="applications.distributorapplication")),
            ],
            options={
                "ordering": ["-changed_at", "-id"],
                "verbose_name_plural": "application history",
            },
        ),
    ]
