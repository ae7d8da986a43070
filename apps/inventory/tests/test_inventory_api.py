from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from rest_framework import status
from rest_framework.test import APITestCase

from apps.accounts.models import Profile
from apps.inventory.models import InventoryItem
from apps.stores.models import Store
from apps.transfers.models import MedicationRequest


def make_user(username, role, store=None):
    user = get_user_model().objects.create_user(username=username, password="pass123")
    Profile.objects.create(user=user, role=role, store=store, full_name=username.title())
    return user


def make_item(store, description, **kw):
    defaults = {
        "item_code": kw.pop("item_code", description[:6]),
        "manufacturer_code": "PFI",
        "total_quantity": 10,
        "cost": Decimal("2.50"),
        "marketing_status": "MARKETED",
        "order_control": "OPEN",
    }
    defaults.update(kw)
    return InventoryItem.objects.create(store=store, description=description, **defaults)


class InventoryItemsViewTests(APITestCase):
    url = "/api/v1/inventory/items/"

    def setUp(self):
        self.store_a = Store.objects.create(name="Alpha", code="A1")
        self.store_b = Store.objects.create(name="Beta", code="B1")
        self.admin = make_user("admin", Profile.Role.ADMIN, self.store_a)
        self.regular = make_user("clerk", Profile.Role.REGULAR, self.store_a)
        make_item(self.store_a, "LIPITOR 10MG TB 90", din_number="02230711", manufacturer_code="PFI", days_aging=200)
        make_item(self.store_a, "LIPITOR 10MG TB 30", din_number="02230711", manufacturer_code="APX", days_aging=20)
        make_item(self.store_a, "ZOCOR 20MG TB", manufacturer_code="MSD", total_quantity=2, order_control="RESTRICTED")
        make_item(self.store_b, "ADVIL 200MG TB", manufacturer_code="PFZ", days_aging=400)

    def test_requires_authentication(self):
        r = self.client.get(self.url)
        self.assertIn(r.status_code, (401, 403))

    def test_admin_sees_all_stores_with_costs(self):
        self.client.force_authenticate(self.admin)
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["count"], 4)
        self.assertIn("cost", r.data["results"][0])
        self.assertEqual(r.data["results"][0]["description"], "ADVIL 200MG TB")
        self.assertIn("store", r.data["results"][0])

    def test_regular_user_restricted_to_own_store_without_costs(self):
        self.client.force_authenticate(self.regular)
        r = self.client.get(self.url, {"store_id": self.store_b.id})
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["count"], 3)
        self.assertTrue(all(row["store_id"] == self.store_a.id for row in r.data["results"]))
        self.assertNotIn("cost", r.data["results"][0])

    def test_filters(self):
        self.client.force_authenticate(self.admin)
        r = self.client.get(self.url, {"search": "02230711"})
        self.assertEqual(r.data["count"], 2)
        r = self.client.get(self.url, {"min_days_aging": 100})
        self.assertEqual({row["description"] for row in r.data["results"]}, {"LIPITOR 10MG TB 90", "ADVIL 200MG TB"})
        r = self.client.get(self.url, {"max_quantity": 5})
        self.assertEqual([row["description"] for row in r.data["results"]], ["ZOCOR 20MG TB"])
        r = self.client.get(self.url, {"order_control": "RESTRICTED,CLOSED"})
        self.assertEqual(r.data["count"], 1)
        r = self.client.get(self.url, {"duplicates_only": "true"})
        self.assertEqual(r.data["count"], 2)
        self.assertTrue(all(row["is_duplicate"] for row in r.data["results"]))

    def test_ordering(self):
        self.client.force_authenticate(self.admin)
        r = self.client.get(self.url, {"ordering": "-days_aging"})
        self.assertEqual([row["days_aging"] for row in r.data["results"]], [400, 200, 20, None])
        r = self.client.get(self.url, {"ordering": "password"})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bad_integer_filter(self):
        self.client.force_authenticate(self.admin)
        r = self.client.get(self.url, {"min_quantity": "lots"})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_fetch_failure_is_retryable_error(self):
        self.client.force_authenticate(self.admin)
        with mock.patch("core.utils.fetch_all.TableSource.table", side_effect=DatabaseError("timeout")):
            r = self.client.get(self.url)
        self.assertEqual(r.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(r.data["detail"], "Could not load inventory, try again")


class DuplicatesViewTests(APITestCase):
    url = "/api/v1/inventory/duplicates/"

    def setUp(self):
        self.store = Store.objects.create(name="Alpha", code="A1")
        self.admin = make_user("admin", Profile.Role.ADMIN, self.store)
        make_item(self.store, "LIPITOR 10MG TB 90", manufacturer_code="PFI")
        make_item(self.store, "Lipitor 10mg TB 30", manufacturer_code="APX")
        make_item(self.store, "ZOCOR 20MG TB", manufacturer_code="MSD")
        make_item(self.store, "ZOCOR 20MG TB 90", manufacturer_code="MSD")

    def test_groups(self):
        self.client.force_authenticate(self.admin)
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["group_count"], 2)
        self.assertEqual(r.data["true_duplicate_count"], 1)
        lipitor = next(g for g in r.data["groups"] if g["key"] == "LIPITOR|10MG")
        self.assertEqual(lipitor["count"], 2)
        self.assertEqual(lipitor["manufacturer_codes"], ["APX", "PFI"])
        self.assertEqual(lipitor["chemical"], "LIPITOR")

    def test_true_only(self):
        self.client.force_authenticate(self.admin)
        r = self.client.get(self.url, {"true_only": "1", "store_id": self.store.id})
        self.assertEqual([g["key"] for g in r.data["groups"]], ["LIPITOR|10MG"])


class AgingAnalyticsViewTests(APITestCase):
    url = "/api/v1/inventory/aging-analytics/"

    def setUp(self):
        self.store_a = Store.objects.create(name="Alpha", code="A1")
        self.store_b = Store.objects.create(name="Beta", code="B1")
        self.admin = make_user("admin", Profile.Role.ADMIN, self.store_a)
        self.regular = make_user("clerk", Profile.Role.REGULAR, self.store_b)
        make_item(self.store_a, "A 1MG", total_quantity=10, cost=Decimal("10"), days_aging=10)
        make_item(self.store_a, "B 1MG", total_quantity=10, cost=Decimal("10"), days_aging=300)
        make_item(self.store_b, "C 1MG", total_quantity=10, cost=Decimal("20"), days_aging=200)
        make_item(self.store_b, "D 1MG", total_quantity=0, cost=Decimal("20"), days_aging=500)
        make_item(self.store_b, "E 1MG", total_quantity=5, cost=Decimal("4"), days_aging=None)
        MedicationRequest.objects.create(
            from_store=self.store_a, to_store=self.store_b, din_number="1", medication_name="C 1MG",
            requested_quantity=8, offered_quantity=6, status=MedicationRequest.Status.COMPLETED,
            requested_by=self.admin,
        )

    def test_overview_and_brackets(self):
        self.client.force_authenticate(self.admin)
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        overview = r.data["overview"]
        self.assertEqual(overview["total_items"], 4)
        self.assertEqual(overview["items_with_aging_data"], 3)
        self.assertAlmostEqual(overview["total_inventory_value"], 420.0)
        self.assertAlmostEqual(overview["total_aging_value"], 300.0)
        brackets = {b["range"]: b for b in r.data["aging_brackets"]}
        self.assertEqual(brackets["0-30 days"]["item_count"], 1)
        self.assertEqual(brackets["181-270 days"]["item_count"], 1)
        self.assertEqual(brackets["271-365 days"]["item_count"], 1)
        summaries = r.data["store_summaries"]
        self.assertEqual([s["store_name"] for s in summaries], ["Beta", "Alpha"])
        self.assertEqual(summaries[1]["critical_items"], 1)
        self.assertEqual(summaries[0]["high_risk_items"], 1)
        self.assertEqual(r.data["transfer_metrics"]["completed_transfers"], 1)
        self.assertEqual(r.data["transfer_metrics"]["total_units_transferred"], 6)

    def test_regular_user_sees_own_store(self):
        self.client.force_authenticate(self.regular)
        r = self.client.get(self.url)
        self.assertEqual(r.data["overview"]["total_items"], 2)
        self.assertEqual([s["store_name"] for s in r.data["store_summaries"]], ["Beta"])


class AgingMatchesViewTests(APITestCase):
    url = "/api/v1/inventory/aging-matches/"

    def setUp(self):
        self.store_a = Store.objects.create(name="Alpha", code="A1")
        self.store_b = Store.objects.create(name="Beta", code="B1")
        self.store_c = Store.objects.create(name="Gamma", code="C1")
        self.admin = make_user("admin", Profile.Role.ADMIN, self.store_a)
        self.regular = make_user("clerk", Profile.Role.REGULAR, self.store_a)
        make_item(self.store_a, "LIPITOR 10MG", din_number="111", total_quantity=150, cost=Decimal("2"), days_aging=250)
        make_item(self.store_b, "LIPITOR 10MG", din_number="111", total_quantity=3, days_aging=100)
        make_item(self.store_a, "ZOCOR 20MG", din_number="222", total_quantity=5, cost=Decimal("1"), days_aging=90)

    def test_managers_only(self):
        self.client.force_authenticate(self.regular)
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_matches_low_stock_and_missing_stores(self):
        self.client.force_authenticate(self.admin)
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        matches = r.data["matches"]
        self.assertEqual({m["needed_store_name"] for m in matches}, {"Beta", "Gamma"})
        beta = next(m for m in matches if m["needed_store_name"] == "Beta")
        gamma = next(m for m in matches if m["needed_store_name"] == "Gamma")
        self.assertEqual(beta["needed_quantity"], 3)
        self.assertEqual(gamma["needed_quantity"], 0)
        self.assertEqual(beta["transferable_quantity"], 100)
        self.assertAlmostEqual(beta["savings_potential"], 200.0)
        self.assertEqual(r.data["summary"]["total_matches"], 2)
        self.assertEqual(r.data["summary"]["unique_aging_dins"], 1)

    def test_thresholds_from_query(self):
        self.client.force_authenticate(self.admin)
        r = self.client.get(self.url, {"min_aging_days": 60, "max_transfer_quantity": 4})
        self.assertEqual(r.data["summary"]["unique_aging_dins"], 2)
        self.assertTrue(all(m["transferable_quantity"] <= 4 for m in r.data["matches"]))
        r = self.client.get(self.url, {"max_transfer_quantity": 0})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
