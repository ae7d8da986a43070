from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from apps.accounts.models import Profile
from apps.notifications.models import Notification
from apps.notifications import services
from apps.stores.models import Store


def make_user(username, role=Profile.Role.REGULAR, store=None, email=None):
    user = get_user_model().objects.create_user(username=username, password="x", email=email or f"{username}@example.com")
    Profile.objects.create(user=user, role=role, store=store)
    return user


@override_settings(
    TWILIO_ACCOUNT_SID="AC123",
    TWILIO_AUTH_TOKEN="token",
    TWILIO_FROM_NUMBER="+15550001111",
    EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend",
)
class DeliveryTests(TestCase):
    def setUp(self):
        self.store = Store.objects.create(name="North", code="N1")
        self.user = make_user("pat", store=self.store)

    def test_format_phone(self):
        self.assertEqual(services.format_phone("(416) 555-0100"), "+14165550100")
        self.assertEqual(services.format_phone("+447700900123"), "+447700900123")

    def test_send_sms_posts_to_twilio(self):
        resp = mock.Mock(status_code=201)
        resp.json.return_value = {"sid": "SM42"}
        with mock.patch("apps.notifications.services.requests.post", return_value=resp) as post:
            sid = services.send_sms("4165550100", "hello")
        self.assertEqual(sid, "SM42")
        args, kwargs = post.call_args
        self.assertEqual(args[0], "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json")
        self.assertEqual(kwargs["data"], {"To": "+14165550100", "From": "+15550001111", "Body": "hello"})
        self.assertEqual(kwargs["auth"], ("AC123", "token"))

    def test_send_sms_errors(self):
        resp = mock.Mock(status_code=400, text="invalid number")
        with mock.patch("apps.notifications.services.requests.post", return_value=resp):
            with self.assertRaises(services.SmsError):
                services.send_sms("1", "hello")
        with mock.patch("apps.notifications.services.requests.post", side_effect=requests.ConnectionError("down")):
            with self.assertRaises(services.SmsError):
                services.send_sms("1", "hello")

    @override_settings(TWILIO_ACCOUNT_SID="")
    def test_send_sms_requires_credentials(self):
        with self.assertRaises(services.SmsError):
            services.send_sms("4165550100", "hello")

    def test_popup_is_stored_without_email(self):
        notif = services.notify(type=Notification.Type.SYSTEM, title="Hi", message="There", user=self.user)
        self.assertTrue(notif.is_sent)
        self.assertEqual(len(mail.outbox), 0)

    def test_email_to_store_members(self):
        make_user("sam", store=self.store)
        make_user("elsewhere")
        notif = services.notify(
            type=Notification.Type.SYSTEM, title="Recall", message="Check lot 7", store=self.store,
            delivery_method=Notification.DeliveryMethod.EMAIL,
        )
        self.assertTrue(notif.is_sent)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(sorted(mail.outbox[0].to), ["pat@example.com", "sam@example.com"])
        self.assertEqual(mail.outbox[0].subject, "Recall")

    def test_email_failure_is_recorded(self):
        with mock.patch("apps.notifications.services.send_email", side_effect=OSError("smtp down")):
            notif = services.notify(
                type=Notification.Type.SYSTEM, title="T", message="M", user=self.user,
                delivery_method=Notification.DeliveryMethod.BOTH,
            )
        notif.refresh_from_db()
        self.assertFalse(notif.is_sent)
        self.assertEqual(notif.error, "smtp down")

    def test_notify_needs_target(self):
        with self.assertRaises(ValueError):
            services.notify(type=Notification.Type.SYSTEM, title="T", message="M")


class NotificationApiTests(APITestCase):
    base = "/api/v1/notifications/"

    def setUp(self):
        self.store = Store.objects.create(name="North", code="N1")
        self.other_store = Store.objects.create(name="South", code="S1")
        self.user = make_user("pat", store=self.store)
        self.outsider = make_user("lee", store=self.other_store)
        self.mine = services.notify(type=Notification.Type.SYSTEM, title="Mine", message="m", user=self.user)
        self.store_wide = services.notify(type=Notification.Type.SYSTEM, title="Store", message="s", store=self.store)
        services.notify(type=Notification.Type.SYSTEM, title="Other", message="o", store=self.other_store)

    def test_list_own_and_store_notifications(self):
        self.client.force_authenticate(self.user)
        r = self.client.get(self.base)
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual({n["title"] for n in r.data}, {"Mine", "Store"})

    def test_unread_count_and_mark_read(self):
        self.client.force_authenticate(self.user)
        self.assertEqual(self.client.get(f"{self.base}unread-count/").data, {"unread_count": 2})
        r = self.client.post(f"{self.base}{self.mine.id}/mark-read/")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data["is_read"])
        self.assertEqual(self.client.get(f"{self.base}unread-count/").data["unread_count"], 1)
        self.assertEqual(len(self.client.get(self.base, {"unread_only": "true"}).data), 1)

    def test_mark_all_read(self):
        self.client.force_authenticate(self.user)
        r = self.client.post(f"{self.base}mark-all-read/")
        self.assertEqual(r.data, {"updated": 2})
        self.assertEqual(Notification.objects.filter(is_read=False).count(), 1)

    def test_cannot_mark_someone_elses(self):
        self.client.force_authenticate(self.outsider)
        r = self.client.post(f"{self.base}{self.mine.id}/mark-read/")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
