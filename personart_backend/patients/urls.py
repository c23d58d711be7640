"""Patients App URLs - Local Patient Cache.

Prefix: /api/
Routes:
    GET/POST        /api/patients/                - List/Create patients
    GET/PUT/DELETE  /api/patients/<id>/           - Retrieve/Replace/Delete patient
    POST            /api/patients/<id>/sessions/  - Register one insurer session
    POST            /api/patients/<id>/renew/     - Renew insurer authorization
"""

from django.urls import path

from personart_backend.patients.views import (
    PatientDetailView,
    PatientListCreateView,
    PatientRenewView,
    PatientSessionView,
)

app_name = 'patients'

urlpatterns = [
    path('patients/', PatientListCreateView.as_view(), name='list'),
    path('patients/<str:pk>/', PatientDetailView.as_view(), name='detail'),
    path('patients/<str:pk>/sessions/', PatientSessionView.as_view(), name='sessions'),
    path('patients/<str:pk>/renew/', PatientRenewView.as_view(), name='renew'),
]
