from django.contrib.auth import get_user_model
from django.db import models
from django.utils import timezone

User = get_user_model()


class AuditLogEntry(models.Model):
    """Who did what to which entity, and whether it worked. Rows are never updated."""

    entity_type = models.CharField(max_length=50, db_index=True)
    resource_id = models.CharField(max_length=64, blank=True)
    action = models.CharField(max_length=100)

    actor = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="audit_entries")
    # Kept after the actor account is deleted
    actor_name = models.CharField(max_length=150, blank=True)

    # None when the action has no success/failure outcome
    succeeded = models.BooleanField(null=True, blank=True)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        verbose_name = "Audit Log Entry"
        verbose_name_plural = "Audit Log Entries"
        ordering = ["-created_at", "-id"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["entity_type", "-created_at"], name="mp_audit_entity_idx"),
            models.Index(fields=["resource_id"], name="mp_audit_resource_idx"),
        ]

    def __str__(self):
        return f"{self.actor_name or 'system'} {self.action} {self.entity_type}:{self.resource_id}"
