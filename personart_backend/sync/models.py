from django.db import models


class PendingEffect(models.Model):
    """Outbox entry for a remote effect whose last attempt failed.

    One row per (table, record_id): a later effect for the same record
    replaces the earlier one. The row to send is rebuilt from the local cache
    when the effect is replayed.
    """

    UPSERT = 'upsert'
    DELETE = 'delete'
    OPERATION_CHOICES = [
        (UPSERT, 'Upsert'),
        (DELETE, 'Delete'),
    ]

    table = models.CharField(max_length=32)
    record_id = models.CharField(max_length=80)
    operation = models.CharField(max_length=8, choices=OPERATION_CHOICES)
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sync_outbox'
        ordering = ['created_at', 'id']
        verbose_name = 'Pending Remote Effect'
        verbose_name_plural = 'Pending Remote Effects'
        constraints = [
            models.UniqueConstraint(fields=['table', 'record_id'], name='sync_outbox_table_record_uniq'),
        ]

    def __str__(self) -> str:
        return f"{self.operation} {self.table}/{self.record_id} (attempts={self.attempts})"
