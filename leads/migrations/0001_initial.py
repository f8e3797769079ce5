import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("campaigns", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Lead",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("client_name", models.CharField(max_length=255)),
                ("required_services", models.TextField(blank=True)),
                ("website", models.CharField(blank=True, max_length=255)),
                ("phone", models.CharField(blank=True, max_length=50)),
                ("email", models.CharField(blank=True, max_length=255)),
                ("call_enquiry", models.TextField(blank=True)),
                ("mail", models.CharField(blank=True, help_text="Secondary email", max_length=255)),
                ("whatsapp", models.CharField(blank=True, max_length=50)),
                ("follow_up", models.DateField(blank=True, null=True)),
                (
                    "client_status",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("", "No Status"),
                            ("Interested", "Interested"),
                            ("Not Interested", "Not Interested"),
                            ("Budget Not Met", "Budget Not Met"),
                            ("Meeting Scheduled", "Meeting Scheduled"),
                        ],
                        default="",
                        max_length=50,
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                ("industry", models.CharField(blank=True, max_length=100)),
                ("lead_source", models.CharField(default="Manual", max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "assigned_to",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assigned_leads",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "source_ad",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="leads",
                        to="campaigns.runningad",
                    ),
                ),
                (
                    "selected_services",
                    models.ManyToManyField(blank=True, related_name="leads", to="campaigns.service"),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["assigned_to", "created_at"], name="lead_assigned_created_idx"),
                    models.Index(fields=["client_status"], name="lead_status_idx"),
                    models.Index(fields=["follow_up"], name="lead_follow_up_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ActivityLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                ("details", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "lead",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activity_logs",
                        to="leads.lead",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activity_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
