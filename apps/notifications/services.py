from __future__ import annotations

import logging
import re

import requests
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.db.models import Q
from django.utils import timezone

from apps.accounts.roles import get_store_id
from .models import Notification

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

EMAIL_METHODS = {Notification.DeliveryMethod.EMAIL.value, Notification.DeliveryMethod.BOTH.value}


class SmsError(Exception):
    pass


def format_phone(number: str) -> str:
    """E.164 for North American numbers; numbers already carrying + pass through."""
    number = (number or "").strip()
    if number.startswith("+"):
        return number
    return "+1" + re.sub(r"\D", "", number)


def send_sms(to: str, body: str) -> str:
    """Send a plain-text SMS through the Twilio REST API; returns the message SID."""
    sid = settings.TWILIO_ACCOUNT_SID
    token = settings.TWILIO_AUTH_TOKEN
    if not sid or not token:
        raise SmsError("Twilio credentials not configured. Set TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN")

    formatted = format_phone(to)
    try:
        resp = requests.post(
            TWILIO_MESSAGES_URL.format(sid=sid),
            data={"To": formatted, "From": settings.TWILIO_FROM_NUMBER, "Body": body},
            auth=(sid, token),
            timeout=settings.TWILIO_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise SmsError(f"SMS to {formatted} failed: {exc}") from exc
    if resp.status_code >= 300:
        raise SmsError(f"HTTP {resp.status_code}: {resp.text[:250]}")

    message_sid = resp.json().get("sid", "")
    logger.info("SMS sent to %s: SID %s", formatted, message_sid)
    return message_sid


def send_email(recipients: list[str], subject: str, body: str) -> int:
    return send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, recipients, fail_silently=False)


def _recipient_emails(notif: Notification) -> list[str]:
    if notif.user_id:
        email = notif.user.email
        return [email] if email else []
    User = get_user_model()
    return list(
        User.objects.filter(profile__store_id=notif.store_id, is_active=True)
        .exclude(email="")
        .values_list("email", flat=True)
    )


def deliver(notif: Notification) -> bool:
    """
    Push a stored notification out over email when its method asks for it.

    Popup-only notifications are delivered by being stored. Failures are kept
    on the row and logged.
    """
    if str(notif.delivery_method) in EMAIL_METHODS:
        recipients = _recipient_emails(notif)
        if not recipients:
            notif.error = "No email recipients"
            notif.save(update_fields=["error"])
            logger.warning("Notification %s has no email recipients", notif.pk)
            return False
        try:
            send_email(recipients, notif.title, notif.message)
        except OSError as exc:
            notif.error = str(exc)
            notif.save(update_fields=["error"])
            logger.exception("Email delivery failed for notification %s", notif.pk)
            return False

    notif.is_sent = True
    notif.sent_at = timezone.now()
    notif.error = None
    notif.save(update_fields=["is_sent", "sent_at", "error"])
    return True


def notify(
    *,
    type: str,
    title: str,
    message: str,
    user=None,
    store=None,
    delivery_method: str = Notification.DeliveryMethod.POPUP,
    related_request=None,
    data: dict | None = None,
) -> Notification:
    if user is None and store is None:
        raise ValueError("A notification needs a user or a store")
    notif = Notification.objects.create(
        user=user,
        store=store,
        type=type,
        title=title,
        message=message,
        delivery_method=delivery_method,
        related_request=related_request,
        data=data,
    )
    deliver(notif)
    return notif


def notifications_for(user):
    cond = Q(user=user)
    store_id = get_store_id(user)
    if store_id:
        cond |= Q(store_id=store_id)
    return Notification.objects.filter(cond)


def unread_count(user) -> int:
    return notifications_for(user).filter(is_read=False).count()


def mark_all_read(user) -> int:
    return notifications_for(user).filter(is_read=False).update(is_read=True)
