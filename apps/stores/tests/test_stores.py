from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from apps.accounts.models import Profile
from apps.stores.models import Driver, Store
from apps.stores.services import available_driver_for

User = get_user_model()


class AvailableDriverTests(TestCase):
    def setUp(self):
        self.store = Store.objects.create(name="North", code="N1")

    def test_none_without_on_duty_driver(self):
        Driver.objects.create(store=self.store, name="Off", phone="5550001")
        Driver.objects.create(
            store=self.store, name="Busy", phone="5550002",
            is_available=False, shift_status=Driver.ShiftStatus.ON_DUTY,
        )
        self.assertIsNone(available_driver_for(self.store.id))

    def test_picks_first_available_on_duty(self):
        first = Driver.objects.create(
            store=self.store, name="Zed", phone="5550003", shift_status=Driver.ShiftStatus.ON_DUTY,
        )
        Driver.objects.create(store=self.store, name="Amy", phone="5550004", shift_status=Driver.ShiftStatus.ON_DUTY)
        other = Store.objects.create(name="South", code="S1")
        Driver.objects.create(store=other, name="Bob", phone="5550005", shift_status=Driver.ShiftStatus.ON_DUTY)
        self.assertEqual(available_driver_for(self.store.id), first)


class StoreApiTests(APITestCase):
    def setUp(self):
        self.store = Store.objects.create(name="North", code="N1")
        self.admin = User.objects.create_user(username="admin", password="x")
        Profile.objects.create(user=self.admin, role=Profile.Role.ADMIN)
        self.clerk = User.objects.create_user(username="clerk", password="x")
        Profile.objects.create(user=self.clerk, role=Profile.Role.REGULAR, store=self.store)

    def test_anonymous_rejected(self):
        resp = self.client.get("/api/v1/stores/stores/")
        self.assertIn(resp.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_regular_user_reads_only(self):
        self.client.force_authenticate(self.clerk)
        resp = self.client.get("/api/v1/stores/stores/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([s["code"] for s in resp.data], ["N1"])
        resp = self.client.post("/api/v1/stores/stores/", {"name": "East", "code": "e1"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_creates_store_with_upper_code(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post("/api/v1/stores/stores/", {"name": "East", "code": " e1 "}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["code"], "E1")

    def test_driver_list_filters_by_store(self):
        other = Store.objects.create(name="South", code="S1")
        Driver.objects.create(store=self.store, name="Amy", phone="5550004")
        Driver.objects.create(store=other, name="Bob", phone="5550005")
        self.client.force_authenticate(self.clerk)
        resp = self.client.get("/api/v1/stores/drivers/", {"store_id": self.store.id})
        self.assertEqual([d["name"] for d in resp.data], ["Amy"])
        self.assertEqual(resp.data[0]["store_name"], "North")

    def test_manager_creates_driver(self):
        self.client.force_authenticate(self.admin)
        payload = {"store": self.store.id, "name": "Cy", "phone": "  ", "shift_status": "on_duty"}
        resp = self.client.post("/api/v1/stores/drivers/", payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        payload["phone"] = "5550006"
        resp = self.client.post("/api/v1/stores/drivers/", payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(available_driver_for(self.store.id).name, "Cy")
