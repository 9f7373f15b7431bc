import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


DIRECTION_CHOICES = [("SALE", "Sale"), ("PURCHASE", "Purchase")]


def line_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("line_no", models.PositiveIntegerField()),
        ("description", models.CharField(blank=True, default="", max_length=255)),
        ("quantity", models.DecimalField(decimal_places=3, max_digits=14)),
        ("unit_price", models.DecimalField(decimal_places=2, max_digits=14)),
        ("tax_rate", models.DecimalField(decimal_places=2, default=0, max_digits=5)),
        ("subtotal", models.DecimalField(decimal_places=2, max_digits=16)),
        ("tax_amount", models.DecimalField(decimal_places=2, max_digits=16)),
        ("line_total", models.DecimalField(decimal_places=2, max_digits=16)),
        (
            "product",
            models.ForeignKey(
                on_delete=django.db.models.deletion.PROTECT,
                related_name="+",
                to="masterdata.product",
            ),
        ),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("masterdata", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("direction", models.CharField(choices=DIRECTION_CHOICES, max_length=10)),
                ("number", models.CharField(max_length=30, unique=True)),
                ("order_date", models.DateField()),
                ("expected_date", models.DateField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("SENT", "Sent"),
                            ("CONFIRMED", "Confirmed"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="DRAFT",
                        max_length=10,
                    ),
                ),
                ("subtotal", models.DecimalField(decimal_places=2, default=0, max_digits=16)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=0, max_digits=16)),
                ("total_amount", models.DecimalField(decimal_places=2, default=0, max_digits=16)),
                ("notes", models.TextField(blank=True, default="")),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "counterparty",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="masterdata.contact",
                    ),
                ),
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
            ],
            options={
                "ordering": ["-order_date", "-id"],
                "indexes": [
                    models.Index(fields=["direction", "status"], name="order_direction_status_idx"),
                    models.Index(fields=["counterparty", "direction"], name="order_counterparty_dir_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderLine",
            fields=line_fields() + [
                (
                    "analytical_account",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_lines",
                        to="masterdata.analyticalaccount",
                    ),
                ),
                ("analytical_account_manual", models.BooleanField(default=False)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="trading.order",
                    ),
                ),
            ],
            options={
                "ordering": ["line_no"],
                "constraints": [
                    models.UniqueConstraint(fields=("order", "line_no"), name="uniq_order_line_no"),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="order_line_quantity_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="FinancialDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("direction", models.CharField(choices=DIRECTION_CHOICES, max_length=10)),
                ("number", models.CharField(max_length=30, unique=True)),
                ("document_date", models.DateField()),
                ("due_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[("DRAFT", "Draft"), ("POSTED", "Posted"), ("CANCELLED", "Cancelled")],
                        default="DRAFT",
                        max_length=10,
                    ),
                ),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=16)),
                ("tax_amount", models.DecimalField(decimal_places=2, max_digits=16)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=16)),
                ("paid_amount", models.DecimalField(decimal_places=2, default=0, max_digits=16)),
                ("notes", models.TextField(blank=True, default="")),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "counterparty",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="financial_documents",
                        to="masterdata.contact",
                    ),
                ),
                (
                    "source_order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="financial_document",
                        to="trading.order",
                    ),
                ),
            ],
            options={
                "ordering": ["-document_date", "-id"],
                "indexes": [
                    models.Index(fields=["direction", "status"], name="document_direction_status_idx"),
                    models.Index(fields=["counterparty", "direction"], name="document_counterparty_dir_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("paid_amount__gte", 0), ("paid_amount__lte", models.F("total_amount"))),
                        name="financial_document_paid_within_total",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="FinancialDocumentLine",
            fields=line_fields() + [
                (
                    "analytical_account",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="document_lines",
                        to="masterdata.analyticalaccount",
                    ),
                ),
                (
                    "document",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="trading.financialdocument",
                    ),
                ),
            ],
            options={
                "ordering": ["line_no"],
                "constraints": [
                    models.UniqueConstraint(fields=("document", "line_no"), name="uniq_document_line_no"),
                ],
            },
        ),
    ]
