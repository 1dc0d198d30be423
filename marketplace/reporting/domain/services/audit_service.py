"""
AuditLogService - Admin audit trail

Writes audit entries for moderation and other admin actions and serves the
filterable audit log. Without a start date the log begins at the retention
cutoff; a range that ends before the cutoff is honoured as given.
"""

from dataclasses import replace
from datetime import timedelta
from typing import Dict, Optional

from django.utils import timezone

from marketplace.conf import get_report_options
from marketplace.querying.filters import TRACKED_ENTITY_TYPES, AuditLogCriteria
from marketplace.reporting.domain.models import AuditLogEntry
from utils.logging_utils import mask_value

from .report_service import ReportService


class AuditLogService(ReportService):
    report_kind = "audit_log"
    criteria_class = AuditLogCriteria
    csv_columns = (
        ("Timestamp", "created_at"),
        ("EntityType", "entity_type"),
        ("Action", "action"),
        ("ResourceId", "resource_id"),
        ("Actor", "actor_name"),
        ("ActorId", "actor_id"),
        ("Succeeded", "succeeded"),
    )

    def create_source(self):
        from marketplace.infra.persistence import AuditLogRowSource

        return AuditLogRowSource()

    @property
    def supported_entity_types(self):
        return TRACKED_ENTITY_TYPES

    def retention_cutoff(self):
        days = get_report_options().audit_retention_days
        if days <= 0:
            return None
        return timezone.now() - timedelta(days=days)

    def prepare_criteria(self, criteria: AuditLogCriteria) -> AuditLogCriteria:
        if criteria.from_date is None:
            cutoff = self.retention_cutoff()
            if cutoff is not None and (criteria.to_date is None or cutoff <= criteria.to_date):
                return replace(criteria, from_date=cutoff)
        return criteria

    def record(
        self,
        entity_type: str,
        resource_id,
        action: str,
        actor=None,
        succeeded: Optional[bool] = None,
        details: Optional[Dict] = None,
    ) -> AuditLogEntry:
        """Append one audit entry. The actor's display name is copied so it survives account deletion."""
        actor_name = ""
        if actor is not None:
            actor_name = actor.get_full_name() or actor.username
        entry = AuditLogEntry.objects.create(
            entity_type=entity_type,
            resource_id=str(resource_id) if resource_id is not None else "",
            action=action,
            actor=actor,
            actor_name=actor_name or "System",
            succeeded=succeeded,
            details=details or {},
        )
        self.logger.info(
            f"Audit: {mask_value(actor_name) if actor_name else 'system'} {action} {entity_type}:{entry.resource_id}"
        )
        return entry
