from __future__ import annotations

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Warehouse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("code", models.CharField(max_length=32, unique=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Location",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=32)),
                ("description", models.CharField(blank=True, max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="locations",
                        to="inventory.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["warehouse_id", "code"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("warehouse", "code"),
                        name="uniq_location_code_per_warehouse",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockLevel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity_available", models.IntegerField(default=0)),
                ("quantity_committed", models.IntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_levels",
                        to="inventory.location",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_levels",
                        to="products.product",
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_levels",
                        to="inventory.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["product_id", "warehouse_id", "location_id"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("location__isnull", False)),
                        fields=("product", "warehouse", "location"),
                        name="uniq_stock_level_bucket",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("location__isnull", True)),
                        fields=("product", "warehouse"),
                        name="uniq_stock_level_bucket_no_location",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity_available__gte", 0)),
                        name="chk_stock_level_available_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity_committed__gte", 0)),
                        name="chk_stock_level_committed_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LegacyStock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity_available", models.IntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="legacy_stock",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity_available__gte", 0)),
                        name="chk_legacy_stock_gte_zero",
                    ),
                ],
            },
        ),
    ]
