from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import AuditLog, Professional, Role, User


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ('name', 'label')
    search_fields = ('name', 'label')


@admin.register(Professional)
class ProfessionalAdmin(admin.ModelAdmin):
    list_display = ('name', 'credential', 'active')
    list_filter = ('active',)
    search_fields = ('name', 'credential')


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ('username', 'first_name', 'last_name', 'role', 'professional', 'is_active')
    list_filter = ('role', 'is_active', 'is_staff')
    fieldsets = DjangoUserAdmin.fieldsets + (
        ('Clinic', {'fields': ('role', 'professional')}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action', 'role_name', 'user', 'patient_id')
    list_filter = ('action', 'role_name')
    search_fields = ('patient_id', 'action')
    readonly_fields = ('timestamp', 'action', 'role_name', 'user', 'patient_id', 'meta')
