from django.contrib.auth.models import AbstractUser
from django.db import models
from django.conf import settings


class Role(models.Model):
    """User roles for RBAC (Role-Based Access Control).

    Standard roles: clinic, admin, professional
    """

    CLINIC = 'clinic'
    ADMIN = 'admin'
    PROFESSIONAL = 'professional'

    name = models.CharField(max_length=64, unique=True, db_index=True)
    label = models.CharField(max_length=128)

    class Meta:
        db_table = 'core_role'
        ordering = ['name']
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'

    def __str__(self) -> str:
        return self.label


class Professional(models.Model):
    """Stable identity for a clinic professional.

    Appointments and patients store the professional as a display string
    ("Simone Martins De Agrela - CRP 196674"). This table gives every such
    string a stable id so access checks can compare ids instead of names.
    """

    CREDENTIAL_SEPARATOR = ' - '

    name = models.CharField(max_length=150)
    credential = models.CharField(max_length=64, blank=True, default='')
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'core_professional'
        ordering = ['name', 'id']
        verbose_name = 'Professional'
        verbose_name_plural = 'Professionals'

    def __str__(self) -> str:
        return self.display_name

    @property
    def display_name(self) -> str:
        if self.credential:
            return f"{self.name}{self.CREDENTIAL_SEPARATOR}{self.credential}"
        return self.name

    @classmethod
    def split_display(cls, value: str) -> tuple[str, str]:
        """Split "Name - CRP 123" into ("Name", "CRP 123")."""
        name, _, credential = (value or '').partition(cls.CREDENTIAL_SEPARATOR)
        return name.strip(), credential.strip()


class User(AbstractUser):
    """Custom User model with role-based access control.

    Extends Django's AbstractUser with:
    - role: ForeignKey to Role for RBAC
    - professional: the directory entry a professional account acts as
    """

    role = models.ForeignKey(
        Role,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name='users',
    )
    professional = models.ForeignKey(
        Professional,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='users',
    )

    class Meta:
        db_table = 'core_user'
        ordering = ['username']
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    @property
    def role_name(self) -> str | None:
        return getattr(self.role, 'name', None)

    def display_name(self) -> str:
        if self.professional_id:
            return self.professional.display_name
        return (self.get_full_name() or self.username).strip()


class AuditLog(models.Model):
    """Audit log for patient-related actions.

    Tracks who accessed/modified patient data and when.
    patient_id is the client-generated patient id (no FK, patients may be
    deleted while their log entries stay).
    """

    PATIENT_LIST = 'patient_list'
    PATIENT_VIEW = 'patient_view'
    PATIENT_CREATED = 'patient_created'
    PATIENT_UPDATED = 'patient_updated'
    PATIENT_DELETED = 'patient_deleted'
    SESSION_REGISTERED = 'insurance_session_registered'
    AUTHORIZATION_RENEWED = 'insurance_authorization_renewed'
    APPOINTMENT_LIST = 'appointment_list'
    APPOINTMENT_VIEW = 'appointment_view'
    APPOINTMENT_CREATE = 'appointment_create'
    APPOINTMENT_UPDATE = 'appointment_update'
    APPOINTMENT_DELETE = 'appointment_delete'
    INBOX_APPROVED = 'inbox_approved'
    ACTION_CHOICES = [
        (PATIENT_LIST, 'Patient list'),
        (PATIENT_VIEW, 'Patient viewed'),
        (PATIENT_CREATED, 'Patient created'),
        (PATIENT_UPDATED, 'Patient updated'),
        (PATIENT_DELETED, 'Patient deleted'),
        (SESSION_REGISTERED, 'Insurance session registered'),
        (AUTHORIZATION_RENEWED, 'Insurance authorization renewed'),
        (APPOINTMENT_LIST, 'Appointment list'),
        (APPOINTMENT_VIEW, 'Appointment viewed'),
        (APPOINTMENT_CREATE, 'Appointment created'),
        (APPOINTMENT_UPDATE, 'Appointment updated'),
        (APPOINTMENT_DELETE, 'Appointment deleted'),
        (INBOX_APPROVED, 'Pre-registration approved'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
    )
    role_name = models.CharField(max_length=50, db_index=True)
    action = models.CharField(max_length=50, choices=ACTION_CHOICES, db_index=True)
    patient_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)
    meta = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = 'core_auditlog'
        ordering = ['-timestamp', '-id']
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'
        indexes = [
            models.Index(fields=['action', 'timestamp'], name='core_auditl_action_3f1c2e_idx'),
            models.Index(fields=['patient_id', 'timestamp'], name='core_auditl_patient_8d4b7a_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.timestamp} {self.action} (patient_id={self.patient_id})"
