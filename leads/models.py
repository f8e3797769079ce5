from django.conf import settings
from django.db import models

INDUSTRY_OPTIONS = [
    "Technology",
    "Healthcare",
    "Finance",
    "Education",
    "Retail",
    "Manufacturing",
    "Real Estate",
    "Food & Beverage",
    "Energy",
    "Transportation",
    "Entertainment",
    "Non-profit",
    "Government",
    "Other",
]

LEAD_SOURCES = {
    "Manual": "Manual Entry",
    "Facebook Ad": "Facebook Ad",
    "Google Ad": "Google Ad",
    "Instagram Ad": "Instagram Ad",
    "LinkedIn Ad": "LinkedIn Ad",
    "Website Form": "Website Contact Form",
    "Phone Call": "Phone Call",
    "Email": "Email Inquiry",
    "Referral": "Referral",
    "Other": "Other",
}

CSV_IMPORT_SOURCE = "CSV Import"


class ClientStatus(models.TextChoices):
    NONE = "", "No Status"
    INTERESTED = "Interested", "Interested"
    NOT_INTERESTED = "Not Interested", "Not Interested"
    BUDGET_NOT_MET = "Budget Not Met", "Budget Not Met"
    MEETING_SCHEDULED = "Meeting Scheduled", "Meeting Scheduled"


class Lead(models.Model):
    """A prospective client tracked through the sales pipeline."""

    client_name = models.CharField(max_length=255)
    required_services = models.TextField(blank=True)
    website = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    email = models.CharField(max_length=255, blank=True)
    call_enquiry = models.TextField(blank=True)
    mail = models.CharField(max_length=255, blank=True, help_text="Secondary email")
    whatsapp = models.CharField(max_length=50, blank=True)
    follow_up = models.DateField(null=True, blank=True)
    client_status = models.CharField(
        max_length=50, choices=ClientStatus.choices, blank=True, default=ClientStatus.NONE
    )
    notes = models.TextField(blank=True)
    industry = models.CharField(max_length=100, blank=True)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_leads",
    )
    source_ad = models.ForeignKey(
        "campaigns.RunningAd",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="leads",
    )
    lead_source = models.CharField(max_length=100, default="Manual")
    selected_services = models.ManyToManyField(
        "campaigns.Service", blank=True, related_name="leads"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["assigned_to", "created_at"], name="lead_assigned_created_idx"),
            models.Index(fields=["client_status"], name="lead_status_idx"),
            models.Index(fields=["follow_up"], name="lead_follow_up_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.pk} - {self.client_name}"


class ActivityLog(models.Model):
    """Audit trail of lead mutations, imports and exports"""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_logs",
    )
    lead = models.ForeignKey(
        Lead,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_logs",
    )
    action = models.CharField(max_length=50)
    details = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.action} by {self.user_id} at {self.created_at}"
