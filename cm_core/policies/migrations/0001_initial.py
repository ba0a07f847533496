import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _money():
    return models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)


STATUS_CHOICES = [
    ("PENDING", "Pending"),
    ("ACTIVE", "Active"),
    ("SUSPENDED", "Suspended"),
    ("EXPIRED", "Expired"),
    ("CANCELLED", "Cancelled"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("clients", "0001_initial"),
        ("insurers", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Policy",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("org_id", models.UUIDField(db_index=True)),
                ("policy_number", models.CharField(max_length=64)),
                ("status", models.CharField(choices=STATUS_CHOICES, db_index=True, default="PENDING", max_length=16)),
                (
                    "type",
                    models.CharField(
                        blank=True,
                        choices=[("HEALTH", "Health"), ("LIFE", "Life"), ("ACCIDENTS", "Accidents")],
                        max_length=16,
                        null=True,
                    ),
                ),
                ("plan_name", models.CharField(blank=True, max_length=255, null=True)),
                ("employee_class", models.CharField(blank=True, max_length=255, null=True)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("ambulatory_coinsurance_pct", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("hospitalary_coinsurance_pct", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("maternity_cost", _money()),
                ("t_premium", _money()),
                ("tplus1_premium", _money()),
                ("tplusf_premium", _money()),
                ("benefits_cost_per_person", _money()),
                ("max_coverage", _money()),
                ("deductible", _money()),
                ("cancellation_reason", models.TextField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="policies",
                        to="clients.client",
                    ),
                ),
                (
                    "insurer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="policies",
                        to="insurers.insurer",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="policies_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="policies_updated",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "policies_policy",
                "indexes": [
                    models.Index(fields=["org_id", "status"], name="policy_org_status_idx"),
                    models.Index(fields=["org_id", "client", "start_date"], name="policy_org_client_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=["insurer", "policy_number"], name="uq_policy_insurer_number"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PolicyHistory",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("from_status", models.CharField(blank=True, choices=STATUS_CHOICES, max_length=16, null=True)),
                ("to_status", models.CharField(choices=STATUS_CHOICES, max_length=16)),
                ("reason", models.TextField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "policy",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="history",
                        to="policies.policy",
                    ),
                ),
            ],
            options={
                "db_table": "policies_policy_history",
                "indexes": [
                    models.Index(fields=["policy", "created_at"], name="policy_history_idx"),
                ],
            },
        ),
    ]
