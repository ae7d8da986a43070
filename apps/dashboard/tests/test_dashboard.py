from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from rest_framework import status
from rest_framework.test import APITestCase

from apps.accounts.models import Profile
from apps.inventory.models import InventoryItem
from apps.notifications.models import Notification
from apps.stores.models import Store
from apps.transfers.models import MedicationRequest
from core.utils.fetch_all import FetchOrder, fetch_all_rows


def make_user(username, role, store=None):
    user = get_user_model().objects.create_user(username=username, password="pass123")
    Profile.objects.create(user=user, role=role, store=store)
    return user


class DashboardSummaryTests(APITestCase):
    url = "/api/v1/dashboard/summary/"

    def setUp(self):
        self.store_a = Store.objects.create(name="Alpha", code="A1")
        self.store_b = Store.objects.create(name="Beta", code="B1")
        self.admin = make_user("admin", Profile.Role.ADMIN)
        self.clerk = make_user("clerk", Profile.Role.REGULAR, self.store_a)

        def item(store, description, mfr, qty, aging):
            InventoryItem.objects.create(
                store=store, item_code=description[:6], description=description,
                manufacturer_code=mfr, total_quantity=qty, cost=Decimal("2.00"), days_aging=aging,
            )

        item(self.store_a, "LIPITOR 10MG TB 90", "PFI", 10, 200)
        item(self.store_a, "LIPITOR 10MG TB 30", "APX", 5, 20)
        item(self.store_b, "ADVIL 200MG TB", "PFZ", 20, None)

        MedicationRequest.objects.create(
            from_store=self.store_b, to_store=self.store_a, din_number="02230711",
            medication_name="LIPITOR 10MG", requested_quantity=4, requested_by=self.admin,
        )
        Notification.objects.create(type=Notification.Type.SYSTEM, title="Hi", message="m", store=self.store_a)

    def test_requires_authentication(self):
        resp = self.client.get(self.url)
        self.assertIn(resp.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_regular_user_sees_own_store_without_value(self):
        self.client.force_authenticate(self.clerk)
        resp = self.client.get(self.url, {"store_id": self.store_b.id})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["store"]["code"], "A1")
        inv = resp.data["inventory"]
        self.assertEqual(inv["item_count"], 2)
        self.assertEqual(inv["total_quantity"], 15)
        self.assertEqual(inv["aging_items"], 1)
        self.assertEqual(inv["true_duplicate_groups"], 1)
        self.assertNotIn("total_value", inv)
        self.assertEqual(resp.data["requests"]["pending_incoming"], 1)
        self.assertEqual(resp.data["requests"]["pending_outgoing"], 0)
        self.assertEqual(resp.data["unread_notifications"], 1)
        self.assertEqual(len(resp.data["recent_requests"]), 1)
        self.assertEqual(resp.data["warnings"], [])

    def test_manager_sees_everything_with_value(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.get(self.url)
        inv = resp.data["inventory"]
        self.assertIsNone(resp.data["store"])
        self.assertEqual(inv["item_count"], 3)
        self.assertEqual(inv["total_value"], 70.0)

    def test_manager_store_context(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.get(self.url, {"store_id": self.store_b.id})
        self.assertEqual(resp.data["inventory"]["item_count"], 1)
        self.assertEqual(resp.data["requests"]["pending_outgoing"], 1)

    def test_bad_store_id(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.get(self.url, {"store_id": "abc"})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_fetch_failure_is_reported_as_warning(self):
        self.client.force_authenticate(self.admin)
        with mock.patch("core.utils.fetch_all.TableSource.table", side_effect=DatabaseError("gone")):
            resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["inventory"]["item_count"], 0)
        self.assertEqual(len(resp.data["warnings"]), 1)

    def test_inventory_is_paged_in_id_order(self):
        self.client.force_authenticate(self.admin)
        with mock.patch("apps.dashboard.views.fetch_all_rows", wraps=fetch_all_rows) as spy:
            resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["inventory"]["item_count"], 3)
        self.assertEqual(spy.call_args.kwargs["order"], FetchOrder("id"))
