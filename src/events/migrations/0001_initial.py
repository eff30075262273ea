import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import events.models.ticket


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("start", models.DateTimeField(db_index=True)),
                ("end", models.DateTimeField(blank=True, null=True)),
                (
                    "venue_latitude",
                    models.FloatField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(-90.0),
                            django.core.validators.MaxValueValidator(90.0),
                        ],
                    ),
                ),
                (
                    "venue_longitude",
                    models.FloatField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(-180.0),
                            django.core.validators.MaxValueValidator(180.0),
                        ],
                    ),
                ),
                (
                    "early_validation",
                    models.CharField(
                        choices=[
                            ("anytime", "Allow at anytime"),
                            ("two_hours_before", "Two hours before"),
                            ("one_hour_before", "One hour before"),
                            ("at_start", "At start time"),
                        ],
                        default="anytime",
                        max_length=20,
                    ),
                ),
                (
                    "reentry_type",
                    models.CharField(
                        choices=[
                            ("single_use", "No reentry (single use)"),
                            ("pass", "Pass (multiple use)"),
                            ("unlimited", "No limit"),
                        ],
                        default="single_use",
                        max_length=20,
                    ),
                ),
                (
                    "max_uses",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Number of admissions per ticket. Only meaningful for passes.",
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("geofence_enabled", models.BooleanField(default=False)),
                (
                    "geofence_radius_meters",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text=(
                            "Radius around the venue within which validator and holder must be. "
                            "Required with the geofence."
                        ),
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "p2p_validation",
                    models.BooleanField(
                        default=False, help_text="Any ticket holder of this event may validate other tickets."
                    ),
                ),
                ("special_effects_enabled", models.BooleanField(default=False)),
                ("golden_ticket_enabled", models.BooleanField(default=False)),
                (
                    "golden_ticket_odds",
                    models.FloatField(
                        blank=True,
                        help_text=(
                            "Probability of a first admission winning a golden ticket. "
                            "Defaults to the platform setting."
                        ),
                        null=True,
                    ),
                ),
                (
                    "golden_ticket_count",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Maximum number of golden tickets this event can award. Empty means no cap.",
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="owned_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["start"],
            },
        ),
        migrations.CreateModel(
            name="DelegatedValidator",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("email", models.EmailField(max_length=254)),
                (
                    "added_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="delegations_added",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="delegated_validators",
                        to="events.event",
                    ),
                ),
            ],
            options={
                "ordering": ["email"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "email"), name="unique_delegated_validator_per_event")
                ],
            },
        ),
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "ticket_number",
                    models.CharField(default=events.models.ticket.generate_ticket_number, max_length=32),
                ),
                ("use_count", models.PositiveIntegerField(default=0, editable=False)),
                ("validated_at", models.DateTimeField(blank=True, editable=False, null=True)),
                (
                    "validation_code",
                    models.CharField(
                        blank=True,
                        editable=False,
                        help_text="Manual code of the credential used at first admission.",
                        max_length=4,
                    ),
                ),
                ("last_validated_at", models.DateTimeField(blank=True, editable=False, null=True)),
                ("is_golden_ticket", models.BooleanField(default=False, editable=False)),
                (
                    "special_effect",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("nice", "Nice"),
                            ("pride", "Pride"),
                            ("hearts", "Hearts"),
                            ("spooky", "Spooky"),
                            ("snowflakes", "Snowflakes"),
                            ("fireworks", "Fireworks"),
                            ("confetti", "Confetti"),
                            ("monthly", "Monthly colors"),
                        ],
                        editable=False,
                        max_length=20,
                        null=True,
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="tickets", to="events.event"
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tickets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "validated_by",
                    models.ForeignKey(
                        blank=True,
                        editable=False,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="validated_tickets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "ticket_number"), name="unique_ticket_number_per_event"),
                    models.CheckConstraint(
                        condition=models.Q(("use_count__gte", 0)), name="ticket_use_count_non_negative"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ValidationCredential",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("code", models.CharField(db_index=True, max_length=4)),
                (
                    "token",
                    models.CharField(
                        default=events.models.ticket.generate_credential_token, max_length=64, unique=True
                    ),
                ),
                ("expires_at", models.DateTimeField(db_index=True)),
                ("holder_latitude", models.FloatField(blank=True, null=True)),
                ("holder_longitude", models.FloatField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="credentials", to="events.event"
                    ),
                ),
                (
                    "ticket",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="credentials", to="events.ticket"
                    ),
                ),
            ],
            options={
                "ordering": ["-expires_at"],
                "indexes": [models.Index(fields=["event", "code"], name="credential_event_code")],
            },
        ),
        migrations.CreateModel(
            name="TicketAdmission",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("use_number", models.PositiveIntegerField()),
                ("validator_distance_meters", models.FloatField(blank=True, null=True)),
                ("holder_distance_meters", models.FloatField(blank=True, null=True)),
                (
                    "ticket",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="admissions", to="events.ticket"
                    ),
                ),
                (
                    "validated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="admissions_granted",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["ticket", "use_number"],
                "constraints": [
                    models.UniqueConstraint(fields=("ticket", "use_number"), name="unique_admission_use_number")
                ],
            },
        ),
    ]
