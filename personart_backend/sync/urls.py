"""Sync App URLs - Connection status, outbox, toasts and inbox.

Prefix: /api/
Routes:
    GET    /api/sync/status/           - Connection status
    POST   /api/sync/refresh/          - Reconnect and reload
    POST   /api/sync/retry/            - Replay pending remote writes
    GET    /api/sync/notifications/    - Drain toasts
    GET    /api/inbox/                 - Pre-registrations
    POST   /api/inbox/<id>/approve/    - Approve a pre-registration
    DELETE /api/inbox/<id>/            - Dismiss a pre-registration
"""

from django.urls import path

from personart_backend.sync.views import (
    InboxApproveView,
    InboxDetailView,
    InboxListView,
    NotificationsView,
    SyncRefreshView,
    SyncRetryView,
    SyncStatusView,
)

app_name = 'sync'

urlpatterns = [
    path('sync/status/', SyncStatusView.as_view(), name='status'),
    path('sync/refresh/', SyncRefreshView.as_view(), name='refresh'),
    path('sync/retry/', SyncRetryView.as_view(), name='retry'),
    path('sync/notifications/', NotificationsView.as_view(), name='notifications'),
    path('inbox/', InboxListView.as_view(), name='inbox'),
    path('inbox/<str:pk>/approve/', InboxApproveView.as_view(), name='inbox_approve'),
    path('inbox/<str:pk>/', InboxDetailView.as_view(), name='inbox_detail'),
]
