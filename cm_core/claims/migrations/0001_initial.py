import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _money():
    return models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)


STATUS_CHOICES = [
    ("DRAFT", "Draft"),
    ("IN_REVIEW", "In review"),
    ("SUBMITTED", "Submitted"),
    ("PENDING_INFO", "Pending info"),
    ("RETURNED", "Returned"),
    ("CANCELLED", "Cancelled"),
    ("SETTLED", "Settled"),
]


def _user_fk(related_name):
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name=related_name,
        to=settings.AUTH_USER_MODEL,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("clients", "0001_initial"),
        ("policies", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Claim",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("org_id", models.UUIDField(db_index=True)),
                ("claim_number", models.PositiveIntegerField()),
                ("status", models.CharField(choices=STATUS_CHOICES, db_index=True, default="DRAFT", max_length=16)),
                (
                    "care_type",
                    models.CharField(
                        blank=True,
                        choices=[("AMBULATORY", "Ambulatory"), ("HOSPITALARY", "Hospitalary"), ("OTHER", "Other")],
                        max_length=16,
                        null=True,
                    ),
                ),
                ("diagnosis", models.TextField(blank=True, null=True)),
                ("incident_date", models.DateField(blank=True, null=True)),
                ("description", models.TextField()),
                ("amount_submitted", _money()),
                ("submitted_date", models.DateField(blank=True, null=True)),
                ("amount_approved", _money()),
                ("amount_denied", _money()),
                ("amount_unprocessed", _money()),
                ("deductible_applied", _money()),
                ("copay_applied", _money()),
                ("settlement_date", models.DateField(blank=True, null=True)),
                ("settlement_number", models.CharField(blank=True, max_length=64, null=True)),
                ("settlement_notes", models.TextField(blank=True, null=True)),
                ("business_days", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="claims",
                        to="clients.client",
                    ),
                ),
                (
                    "affiliate",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="claims",
                        to="clients.affiliate",
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="patient_claims",
                        to="clients.affiliate",
                    ),
                ),
                (
                    "policy",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="claims",
                        to="policies.policy",
                    ),
                ),
                ("created_by", _user_fk("claims_created")),
                ("updated_by", _user_fk("claims_updated")),
            ],
            options={
                "db_table": "claims_claim",
                "indexes": [
                    models.Index(fields=["org_id", "status"], name="claim_org_status_idx"),
                    models.Index(fields=["org_id", "client"], name="claim_org_client_idx"),
                    models.Index(fields=["org_id", "created_at"], name="claim_org_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=["org_id", "claim_number"], name="uq_claim_org_number"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ClaimHistory",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("from_status", models.CharField(blank=True, choices=STATUS_CHOICES, max_length=16, null=True)),
                ("to_status", models.CharField(choices=STATUS_CHOICES, max_length=16)),
                ("reason", models.TextField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("created_by", _user_fk("+")),
                (
                    "claim",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="history",
                        to="claims.claim",
                    ),
                ),
            ],
            options={
                "db_table": "claims_claim_history",
                "indexes": [
                    models.Index(fields=["claim", "created_at"], name="claim_history_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ClaimInvoice",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("invoice_number", models.CharField(max_length=64)),
                ("provider_name", models.CharField(max_length=255)),
                ("amount_submitted", models.DecimalField(decimal_places=2, max_digits=12)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("created_by", _user_fk("+")),
                (
                    "claim",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invoices",
                        to="claims.claim",
                    ),
                ),
            ],
            options={
                "db_table": "claims_claim_invoice",
                "indexes": [
                    models.Index(fields=["claim", "created_at"], name="claim_invoice_idx"),
                ],
            },
        ),
    ]
