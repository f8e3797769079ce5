from django.contrib import admin

from .models import ActivityLog, Lead


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = (
        "client_name",
        "email",
        "phone",
        "industry",
        "client_status",
        "assigned_to",
        "lead_source",
        "follow_up",
        "created_at",
    )
    search_fields = ("client_name", "email", "phone", "required_services")
    list_filter = ("client_status", "industry", "lead_source")
    raw_id_fields = ("assigned_to", "source_ad")
    filter_horizontal = ("selected_services",)
    readonly_fields = ("created_at", "updated_at")
    date_hierarchy = "created_at"


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ("action", "user", "lead", "created_at")
    list_filter = ("action", "created_at")
    search_fields = ("details", "lead__client_name", "user__username")
    readonly_fields = ("user", "lead", "action", "details", "created_at")
