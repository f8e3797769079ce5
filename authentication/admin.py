from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User


@admin.register(User)
class StaffUserAdmin(UserAdmin):
    list_display = ("username", "full_name", "role", "is_active", "date_joined")
    list_filter = ("role", "is_active")
    search_fields = ("username", "full_name", "email")
    fieldsets = UserAdmin.fieldsets + (("Lead management", {"fields": ("full_name", "role")}),)
    add_fieldsets = UserAdmin.add_fieldsets + (("Lead management", {"fields": ("full_name", "role")}),)
