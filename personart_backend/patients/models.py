from django.db import models


class Patient(models.Model):
    """Local patient cache.

    The id is generated by the client ("<epoch-ms>-<base36>") and is the same
    id the remote `patients` table uses. All reads are served from here:
    - Offline access
    - Local modifications before sync

    authorization_number/authorization_date are the single source for the
    insurer authorization. The legacy document duplicates them at the top
    level and inside `funservConfig`; the codec synthesizes both copies.
    """

    CHILD = 'child'
    ADULT = 'adult'
    AGE_BRACKET_CHOICES = [
        (CHILD, 'Child'),
        (ADULT, 'Adult'),
    ]

    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=200)
    birth_date = models.DateField(null=True, blank=True)
    age_bracket = models.CharField(max_length=8, choices=AGE_BRACKET_CHOICES, blank=True, default='')
    guardian = models.CharField(max_length=200, blank=True, default='')
    address = models.CharField(max_length=300, blank=True, default='')
    phone = models.CharField(max_length=64, blank=True, default='')
    email = models.CharField(max_length=254, blank=True, default='')
    origin = models.CharField(max_length=200, blank=True, default='')

    insurer = models.CharField(max_length=120, blank=True, default='')
    card_number = models.CharField(max_length=64, blank=True, default='')
    authorization_number = models.CharField(max_length=64, blank=True, default='')
    authorization_date = models.CharField(max_length=32, blank=True, default='')

    professionals = models.JSONField(default=list, blank=True)
    specialties = models.JSONField(default=list, blank=True)

    # Document keys this backend does not model (clinical evolutions etc.).
    extra_data = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'patients_cache'
        ordering = ['name', 'id']
        verbose_name = 'Patient (Cache)'
        verbose_name_plural = 'Patients (Cache)'

    def __str__(self) -> str:
        return f"{self.name} (id={self.id})"

    @property
    def has_insurer(self) -> bool:
        return bool((self.insurer or '').strip())


class InsurancePlan(models.Model):
    """Insurer session tracking for a patient (authorized "guide").

    history holds ISO dates of registered sessions, newest first.
    """

    WEEKLY = '1x Semana'
    TWICE_WEEKLY = '2x Semana'
    BIWEEKLY = 'Quinzenal'
    OTHER = 'Outro'
    FREQUENCY_CHOICES = [
        (WEEKLY, 'Weekly'),
        (TWICE_WEEKLY, 'Twice a week'),
        (BIWEEKLY, 'Every two weeks'),
        (OTHER, 'Other'),
    ]

    DEFAULT_TOTAL_SESSIONS = 10

    patient = models.OneToOneField(
        Patient,
        on_delete=models.CASCADE,
        related_name='insurance_plan',
    )
    active = models.BooleanField(default=True)
    total_sessions = models.PositiveIntegerField(default=DEFAULT_TOTAL_SESSIONS)
    used_sessions = models.PositiveIntegerField(default=0)
    start_date = models.DateField(null=True, blank=True)
    frequency = models.CharField(max_length=16, choices=FREQUENCY_CHOICES, default=WEEKLY)
    alert_email = models.CharField(max_length=254, blank=True, default='')
    history = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'patients_insurance_plan'
        verbose_name = 'Insurance Plan'
        verbose_name_plural = 'Insurance Plans'

    def __str__(self) -> str:
        return f"{self.patient_id}: {self.used_sessions}/{self.total_sessions}"

    @property
    def remaining_sessions(self) -> int:
        return self.total_sessions - self.used_sessions
