"""Serializers for the appointments app.

Contains:
- AppointmentSerializer: read serializer for cached appointments
- BookingSerializer: booking request with optional recurrence
- AppointmentUpdateSerializer: PATCH payload
"""

from rest_framework import serializers

from personart_backend.appointments.models import TIME_SLOTS, Appointment
from personart_backend.appointments.recurrence import POLICY_NONE, BookingRequest, RecurrenceSpec


class AppointmentSerializer(serializers.ModelSerializer):
    """Read-only serializer with all fields."""

    class Meta:
        model = Appointment
        fields = [
            'id',
            'patient_id',
            'patient_name',
            'card_number',
            'insurer_name',
            'authorization_number',
            'authorization_date',
            'professional',
            'date',
            'time',
            'type',
            'status',
            'note',
            'cache_order',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class RecurrenceSerializer(serializers.Serializer):
    policy = serializers.CharField(required=False, default=POLICY_NONE)
    count = serializers.IntegerField(required=False, default=1)
    anchor = serializers.DateField(required=False, allow_null=True, default=None)


class BookingSerializer(serializers.Serializer):
    """Booking request.

    Field checks (required values, slot catalog, recurrence bounds) are left
    to the recurrence generator so the response carries ``detail`` and
    ``field`` like every other booking error.
    """

    patient_id = serializers.CharField(required=False, allow_blank=True, default='')
    professional = serializers.CharField(required=False, allow_blank=True, default='')
    date = serializers.CharField(required=False, allow_blank=True, default='')
    time = serializers.CharField(required=False, allow_blank=True, default='')
    type = serializers.ChoiceField(
        choices=[value for value, _ in Appointment.TYPE_CHOICES],
        required=False,
        allow_null=True,
        default=None,
    )
    note = serializers.CharField(required=False, allow_blank=True, default='')
    status = serializers.ChoiceField(
        choices=[value for value, _ in Appointment.STATUS_CHOICES],
        required=False,
        default=Appointment.STATUS_SCHEDULED,
    )
    recurrence = RecurrenceSerializer(required=False)

    def build(self, patient):
        data = self.validated_data
        request = BookingRequest(
            patient=patient,
            professional=data['professional'],
            date=data['date'] or None,
            time=data['time'] or None,
            type=data.get('type'),
            note=data['note'],
            status=data['status'],
        )
        recurrence = RecurrenceSpec(**data.get('recurrence', {}))
        return request, recurrence


class AppointmentUpdateSerializer(serializers.ModelSerializer):
    """Partial update of a cached appointment."""

    class Meta:
        model = Appointment
        fields = ['professional', 'date', 'time', 'type', 'status', 'note']

    def validate_time(self, value):
        if value not in TIME_SLOTS:
            raise serializers.ValidationError(f'time {value!r} is not a bookable slot.')
        return value

    def validate_professional(self, value):
        value = (value or '').strip()
        if not value:
            raise serializers.ValidationError('professional is required.')
        return value
