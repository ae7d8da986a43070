from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from .models import AuditLog, RequestLog
from .middleware import get_request_id

logger = logging.getLogger(__name__)


@transaction.atomic
def audit(
    actor,
    table: str,
    row_id: int,
    action: str,
    before: dict | None = None,
    after: dict | None = None,
    meta: dict | None = None,
) -> None:
    rid = get_request_id("")
    AuditLog.objects.create(
        actor_user=actor if getattr(actor, "pk", None) else None,
        action=action,
        table_name=table,
        record_id=str(row_id),
        before_json=before,
        after_json=after,
        user_agent=((meta or {}).get("user_agent", "") + (f" req_id={rid}" if rid else "")).strip(),
    )


def cleanup_expired_request_logs(now=None) -> int:
    """Delete request logs past their expiry; returns the number removed."""
    now = now or timezone.now()
    deleted, _ = RequestLog.objects.filter(expires_at__lt=now).delete()
    logger.info("[Logs Cleanup] Deleted %s expired logs", deleted)
    return deleted


def request_log_stats(now=None) -> dict:
    now = now or timezone.now()
    return {
        "total_logs": RequestLog.objects.count(),
        "expired_logs": RequestLog.objects.filter(expires_at__lt=now).count(),
    }
