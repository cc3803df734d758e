from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import Organization, User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password", "name", "organization")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "name", "organization", "password1", "password2")}),
    )
    list_display = ("email", "name", "organization", "is_staff")
    list_filter = ("organization", "is_staff")
    search_fields = ("email", "name")
    ordering = ("email",)


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "enable_accounting", "default_currency", "is_active")
    list_filter = ("enable_accounting", "is_active")
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}
