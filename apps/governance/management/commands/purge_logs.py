from datetime import timedelta
from django.core.management.base import BaseCommand
from django.utils import timezone
from apps.governance.models import AuditLog
from apps.governance.services import cleanup_expired_request_logs


class Command(BaseCommand):
    help = "Purge expired request logs and, optionally, audit rows older than --audit-days"

    def add_arguments(self, parser):
        parser.add_argument("--audit-days", type=int, default=0)

    def handle(self, *args, **options):
        total = cleanup_expired_request_logs()
        audit_days = options["audit_days"]
        if audit_days > 0:
            cutoff = timezone.now() - timedelta(days=audit_days)
            deleted, _ = AuditLog.objects.filter(created_at__lt=cutoff).delete()
            total += deleted
        self.stdout.write(self.style.SUCCESS(f"Purged rows: {total}"))
