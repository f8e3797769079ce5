from decimal import Decimal

from django.conf import settings
from django.db import models

SERVICE_CATEGORIES = [
    "Digital Services",
    "Digital Marketing",
    "Design Services",
    "Development Services",
    "Consulting Services",
    "Other",
]

AD_PLATFORMS = [
    "Facebook",
    "Google Ads",
    "Instagram",
    "LinkedIn",
    "Twitter",
    "YouTube",
    "TikTok",
    "Other",
]


class Service(models.Model):
    """An offering in the catalog. Deactivated rather than deleted."""

    service_name = models.CharField(max_length=255)
    service_category = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="services_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.service_name


class RunningAd(models.Model):
    """A marketing campaign whose leads belong to one sales member"""

    ad_name = models.CharField(max_length=255)
    service = models.ForeignKey(
        Service,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="running_ads",
    )
    platform = models.CharField(max_length=100)
    budget = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    target_audience = models.TextField(blank=True)
    ad_copy = models.TextField(blank=True)
    assigned_sales_member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="owned_ads",
    )
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ads_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.ad_name} ({self.platform})"
