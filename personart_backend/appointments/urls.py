"""Appointments App URLs - Booking & Calendar.

Prefix: /api/
Routes:
    GET/POST          /api/appointments/       - List / book (optional recurrence)
    GET/PATCH/DELETE  /api/appointments/<id>/  - Retrieve / update / delete
    GET               /api/calendar/day/       - Day agenda (?date=)
    GET               /api/calendar/week/      - Week grid, Sunday first (?date=)
    GET               /api/calendar/month/     - Month grid (?date=)
"""

from django.urls import path

from personart_backend.appointments.views import (
	AppointmentDetailView,
	AppointmentListCreateView,
	CalendarDayView,
	CalendarMonthView,
	CalendarWeekView,
)

app_name = 'appointments'

urlpatterns = [
	path('appointments/', AppointmentListCreateView.as_view(), name='list'),
	path('appointments/<str:pk>/', AppointmentDetailView.as_view(), name='detail'),
	path('calendar/day/', CalendarDayView.as_view(), name='calendar_day'),
	path('calendar/week/', CalendarWeekView.as_view(), name='calendar_week'),
	path('calendar/month/', CalendarMonthView.as_view(), name='calendar_month'),
]
