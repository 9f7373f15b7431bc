import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("masterdata", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AutoAnalyticalRule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, default="", max_length=255)),
                ("partner_tag", models.CharField(blank=True, max_length=100, null=True)),
                ("product_category", models.CharField(blank=True, max_length=64, null=True)),
                ("auto_apply", models.BooleanField(default=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("NEW", "New"), ("CONFIRMED", "Confirmed"), ("ARCHIVED", "Archived")],
                        default="NEW",
                        max_length=10,
                    ),
                ),
                (
                    "rule_status",
                    models.CharField(
                        choices=[("DRAFT", "Draft"), ("CONFIRM", "Confirmed"), ("CANCELLED", "Cancelled")],
                        default="DRAFT",
                        max_length=10,
                    ),
                ),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "analytical_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="rules",
                        to="masterdata.analyticalaccount",
                    ),
                ),
                (
                    "partner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="analytical_rules",
                        to="masterdata.contact",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="analytical_rules",
                        to="masterdata.product",
                    ),
                ),
            ],
            options={
                "ordering": ["-confirmed_at", "-id"],
                "indexes": [models.Index(fields=["status", "auto_apply"], name="rule_status_auto_apply_idx")],
            },
        ),
        migrations.CreateModel(
            name="Budget",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("period_start", models.DateField()),
                ("period_end", models.DateField()),
                (
                    "stage",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("CONFIRM", "Confirmed"),
                            ("REVISED", "Revised"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="DRAFT",
                        max_length=10,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "revised_budget",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="revisions",
                        to="analytics.budget",
                    ),
                ),
            ],
            options={
                "ordering": ["-period_start", "-id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("period_end__gt", models.F("period_start"))),
                        name="budget_period_end_after_start",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="BudgetLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type",
                    models.CharField(
                        choices=[("INCOME", "Income"), ("EXPENSE", "Expense")],
                        default="EXPENSE",
                        max_length=10,
                    ),
                ),
                ("budgeted_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("achieved_amount", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                (
                    "analytical_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="budget_lines",
                        to="masterdata.analyticalaccount",
                    ),
                ),
                (
                    "budget",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="analytics.budget",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("budgeted_amount__gte", 0)),
                        name="budget_line_budgeted_non_negative",
                    )
                ],
            },
        ),
    ]
