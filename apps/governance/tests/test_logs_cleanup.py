from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from apps.accounts.models import Profile
from apps.governance.models import AuditLog, RequestLog
from apps.governance.services import audit, cleanup_expired_request_logs, request_log_stats


def make_log(expires_at):
    return RequestLog.objects.create(method="GET", path="/api/v1/x/", status_code=200, expires_at=expires_at)


class CleanupServiceTests(TestCase):
    def test_only_expired_rows_are_deleted(self):
        now = timezone.now()
        make_log(now - timedelta(days=1))
        make_log(now - timedelta(minutes=1))
        fresh = make_log(now + timedelta(days=3))

        self.assertEqual(cleanup_expired_request_logs(now=now), 2)
        self.assertEqual(list(RequestLog.objects.values_list("id", flat=True)), [fresh.id])

    def test_default_expiry_uses_retention_days(self):
        log = RequestLog.objects.create(method="GET", path="/api/", status_code=200)
        delta = log.expires_at - log.created_at
        self.assertAlmostEqual(delta.total_seconds(), timedelta(days=4).total_seconds(), delta=5)

    def test_stats(self):
        now = timezone.now()
        make_log(now - timedelta(days=1))
        make_log(now + timedelta(days=1))
        self.assertEqual(request_log_stats(now=now), {"total_logs": 2, "expired_logs": 1})

    def test_audit_records_row(self):
        user = get_user_model().objects.create_user(username="auditor", password="x")
        audit(user, "medication_requests", 7, "ACCEPT", before={"status": "pending"}, after={"status": "accepted"})
        row = AuditLog.objects.get()
        self.assertEqual(row.record_id, "7")
        self.assertEqual(row.actor_user, user)
        self.assertEqual(row.after_json, {"status": "accepted"})


@override_settings(CRON_SECRET="s3cret")
class CleanupEndpointTests(TestCase):
    url = "/api/v1/governance/logs/cleanup/"

    def setUp(self):
        self.client = APIClient()
        User = get_user_model()
        self.user = User.objects.create_user(username="regular", password="x")
        Profile.objects.create(user=self.user, role=Profile.Role.REGULAR)
        self.admin = User.objects.create_user(username="admin", password="x")
        Profile.objects.create(user=self.admin, role=Profile.Role.ADMIN)
        make_log(timezone.now() - timedelta(days=5))

    def test_requires_manager_or_secret(self):
        r = self.client.post(self.url)
        self.assertIn(r.status_code, (401, 403))

        self.client.force_authenticate(self.user)
        r = self.client.post(self.url)
        self.assertEqual(r.status_code, 403)

    def test_admin_can_clean_up(self):
        self.client.force_authenticate(self.admin)
        r = self.client.post(self.url)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data, {"success": True, "deleted_count": 1})

    def test_cron_secret_header(self):
        r = self.client.post(self.url, HTTP_X_CRON_SECRET="wrong")
        self.assertIn(r.status_code, (401, 403))
        r = self.client.post(self.url, HTTP_X_CRON_SECRET="s3cret")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["deleted_count"], 1)

    def test_requests_are_logged_with_request_id(self):
        self.client.force_authenticate(self.admin)
        r = self.client.get("/api/v1/governance/logs/stats/", HTTP_X_REQUEST_ID="req-123")
        self.assertEqual(r["X-Request-Id"], "req-123")
        self.assertTrue(RequestLog.objects.filter(request_id="req-123", path="/api/v1/governance/logs/stats/").exists())


class PurgeLogsCommandTests(TestCase):
    def test_purge_logs(self):
        make_log(timezone.now() - timedelta(days=1))
        call_command("purge_logs", "--audit-days", "30")
        self.assertEqual(RequestLog.objects.count(), 0)
