# Generated manually for initial project scaffold.

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ActorProfile",
            fields=[
                ("id", models.CharField(max_length=128, primary_key=True, serialize=False)),
                ("name", models.CharField(blank=True, max_length=255)),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("citizen", "Citizen"),
                            ("volunteer", "Volunteer"),
                            ("ngo", "NGO"),
                            ("restaurant", "Restaurant"),
                            ("superadmin", "Super Admin"),
                        ],
                        max_length=20,
                    ),
                ),
                ("focus_areas", models.JSONField(blank=True, default=list)),
                ("total_donated", models.PositiveIntegerField(default=0)),
                ("processed_payment_sessions", models.JSONField(blank=True, default=list)),
                ("photo_url", models.CharField(blank=True, max_length=500)),
                (
                    "verification_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="actor_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Issue",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField()),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("infrastructure", "Infrastructure (Roads, Lights)"),
                            ("environment", "Environment (Waste, Pollution)"),
                            ("safety", "Safety & Security"),
                            ("health", "Public Health"),
                            ("education", "Education"),
                            ("social", "Social Welfare"),
                            ("animal welfare", "Animal Welfare"),
                            ("other", "Other"),
                        ],
                        max_length=50,
                    ),
                ),
                ("location", models.CharField(max_length=255)),
                ("latitude", models.FloatField(blank=True, null=True)),
                ("longitude", models.FloatField(blank=True, null=True)),
                ("reporter_id", models.CharField(db_index=True, max_length=128)),
                ("reporter_name", models.CharField(blank=True, max_length=255)),
                ("image_url", models.CharField(blank=True, max_length=500)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("in-progress", "In Progress"),
                            ("resolved", "Resolved"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["-timestamp"],
            },
        ),
        migrations.CreateModel(
            name="Opportunity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("category", models.CharField(max_length=50)),
                ("location", models.CharField(max_length=255)),
                ("date", models.DateField()),
                ("time", models.CharField(blank=True, max_length=50)),
                (
                    "spots",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("org_id", models.CharField(db_index=True, max_length=128)),
                ("org_name", models.CharField(blank=True, max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[("open", "Open"), ("full", "Full"), ("closed", "Closed")],
                        default="open",
                        max_length=20,
                    ),
                ),
                ("signed_up_volunteers", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="FoodDonation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("restaurant_id", models.CharField(db_index=True, max_length=128)),
                ("restaurant_name", models.CharField(blank=True, max_length=255)),
                ("food_type", models.CharField(max_length=255)),
                ("quantity", models.CharField(max_length=100)),
                ("pickup_location", models.CharField(max_length=255)),
                ("pickup_instructions", models.TextField(blank=True)),
                ("best_before", models.DateTimeField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("available", "Available"),
                            ("claimed", "Claimed"),
                            ("unavailable", "Unavailable"),
                        ],
                        default="available",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("claimed_by_volunteer_id", models.CharField(blank=True, max_length=128)),
                ("volunteer_name", models.CharField(blank=True, max_length=255)),
                ("claimed_at", models.DateTimeField(blank=True, null=True)),
                ("volunteer_pickup_notes", models.TextField(blank=True)),
                ("volunteer_phone_number", models.CharField(blank=True, max_length=32)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="FoodRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ngo_id", models.CharField(db_index=True, max_length=128)),
                ("food_type", models.CharField(max_length=255)),
                ("quantity", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("accepted", "Accepted"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("restaurant_id", models.CharField(blank=True, max_length=128)),
                ("restaurant_name", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
