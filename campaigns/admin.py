from django.contrib import admin
from .models import RunningAd, Service


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ('service_name', 'service_category', 'is_active', 'created_by', 'created_at')
    list_filter = ('service_category', 'is_active')
    search_fields = ('service_name', 'description')
    readonly_fields = ('created_at',)


@admin.register(RunningAd)
class RunningAdAdmin(admin.ModelAdmin):
    list_display = ('ad_name', 'platform', 'service', 'assigned_sales_member', 'budget', 'start_date', 'end_date', 'is_active')
    list_filter = ('platform', 'is_active', 'start_date')
    search_fields = ('ad_name', 'service__service_name', 'assigned_sales_member__full_name')
    readonly_fields = ('created_at', 'updated_at')
    date_hierarchy = 'start_date'
