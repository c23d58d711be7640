"""Serializers for the patients app.

Patients travel over the API as legacy documents (the same shape the
remote ``data`` column stores), so the browser client needs no mapping.
"""

from rest_framework import serializers

from personart_backend.patients.models import InsurancePlan
from personart_backend.patients.services import alert_level, estimated_end_date
from personart_backend.sync.codec import FAIXA_ADULT, FAIXA_CHILD, parse_document_date
from personart_backend.sync.exceptions import DocumentError


class InsuranceConfigSerializer(serializers.Serializer):
    """The ``funservConfig`` sub-object."""

    active = serializers.BooleanField(required=False, default=True)
    totalSessions = serializers.IntegerField(required=False, min_value=0, default=InsurancePlan.DEFAULT_TOTAL_SESSIONS)
    usedSessions = serializers.IntegerField(required=False, min_value=0, default=0)
    startDate = serializers.CharField(required=False, allow_blank=True, default='')
    frequency = serializers.ChoiceField(
        choices=[value for value, _ in InsurancePlan.FREQUENCY_CHOICES],
        required=False,
        default=InsurancePlan.WEEKLY,
    )
    alertEmail = serializers.CharField(required=False, allow_blank=True, default='')
    history = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    numeroAutorizacao = serializers.CharField(required=False, allow_blank=True, default='')
    dataAutorizacao = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_startDate(self, value):
        try:
            parse_document_date(value, 'startDate')
        except DocumentError as e:
            raise serializers.ValidationError(str(e))
        return value


class PatientDocumentSerializer(serializers.Serializer):
    """Write serializer for legacy patient documents.

    Keys without a declared field are passed through untouched (they end up
    in ``extra_data``).
    """

    id = serializers.CharField(required=False, allow_blank=True, max_length=64)
    nome = serializers.CharField(max_length=200)
    nascimento = serializers.CharField(required=False, allow_blank=True, default='')
    faixa = serializers.ChoiceField(choices=['', FAIXA_CHILD, FAIXA_ADULT], required=False, default='')
    responsavel = serializers.CharField(required=False, allow_blank=True, default='')
    endereco = serializers.CharField(required=False, allow_blank=True, default='')
    contato = serializers.CharField(required=False, allow_blank=True, default='')
    email = serializers.CharField(required=False, allow_blank=True, default='')
    convenio = serializers.CharField(required=False, allow_blank=True, default='')
    carteirinha = serializers.CharField(required=False, allow_blank=True, default='')
    numero_autorizacao = serializers.CharField(required=False, allow_blank=True, default='')
    data_autorizacao = serializers.CharField(required=False, allow_blank=True, default='')
    profissionais = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    especialidades = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    origem = serializers.CharField(required=False, allow_blank=True, default='')
    funservConfig = InsuranceConfigSerializer(required=False, allow_null=True)

    def validate_nascimento(self, value):
        try:
            parse_document_date(value, 'nascimento')
        except DocumentError as e:
            raise serializers.ValidationError(str(e))
        return value

    def validate(self, attrs):
        if attrs.get('faixa') == FAIXA_CHILD and not attrs.get('responsavel'):
            raise serializers.ValidationError({'responsavel': 'A guardian is required for children.'})
        return attrs

    def to_internal_value(self, data):
        validated = super().to_internal_value(data)
        if validated.get('funservConfig') is None:
            validated.pop('funservConfig', None)
        extras = {k: v for k, v in data.items() if k not in self.fields}
        return {**extras, **validated}


class InsurancePlanSerializer(serializers.ModelSerializer):
    """Read serializer for the session counter endpoints."""

    remaining_sessions = serializers.IntegerField(read_only=True)
    alert_level = serializers.SerializerMethodField()
    estimated_end_date = serializers.SerializerMethodField()

    class Meta:
        model = InsurancePlan
        fields = [
            'patient',
            'active',
            'total_sessions',
            'used_sessions',
            'remaining_sessions',
            'start_date',
            'frequency',
            'alert_email',
            'history',
            'alert_level',
            'estimated_end_date',
        ]
        read_only_fields = fields

    def get_alert_level(self, obj):
        return alert_level(obj)

    def get_estimated_end_date(self, obj):
        end = estimated_end_date(obj)
        return end.isoformat() if end else None


class RegisterSessionSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


class RenewAuthorizationSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    total_sessions = serializers.IntegerField(required=False, min_value=1)
    numero_autorizacao = serializers.CharField(required=False, allow_blank=True)
    data_autorizacao = serializers.CharField(required=False, allow_blank=True)
