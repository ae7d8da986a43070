import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from apps.accounts.roles import MANAGER_ROLES, get_role, get_store_id
from apps.governance.services import audit
from apps.notifications.models import Notification
from apps.notifications.services import SmsError, notify, send_sms
from apps.stores.models import Store
from apps.stores.services import available_driver_for
from .models import MedicationRequest

logger = logging.getLogger(__name__)

Status = MedicationRequest.Status
NotificationType = Notification.Type

RESPONDABLE = (Status.PENDING, Status.COUNTER_OFFER)
CANCELLABLE = (Status.PENDING, Status.COUNTER_OFFER)


class NoDriverAvailable(Exception):
    pass


def _require_store(actor, *store_ids):
    """Managers act for any store; everyone else only for their own."""
    if get_role(actor) in MANAGER_ROLES:
        return
    if get_store_id(actor) not in store_ids:
        raise PermissionDenied("You cannot act on requests for another store")


def _locked(request_id) -> MedicationRequest:
    return (
        MedicationRequest.objects.select_for_update()
        .select_related("from_store", "to_store")
        .get(pk=request_id)
    )


@transaction.atomic
def create_request(
    actor,
    *,
    to_store_id,
    din_number,
    medication_name,
    requested_quantity,
    from_store_id=None,
    urgency=MedicationRequest.Urgency.MEDIUM,
    upc=None,
    message=None,
) -> MedicationRequest:
    from_store_id = from_store_id or get_store_id(actor)
    if not from_store_id:
        raise ValidationError("A requesting store is required")
    _require_store(actor, from_store_id)
    if str(from_store_id) == str(to_store_id):
        raise ValidationError("A store cannot request from itself")
    if not requested_quantity or int(requested_quantity) <= 0:
        raise ValidationError("requested_quantity must be greater than zero")

    from_store = Store.objects.filter(pk=from_store_id).first()
    to_store = Store.objects.filter(pk=to_store_id).first()
    if from_store is None or to_store is None:
        raise ValidationError("Store not found")

    req = MedicationRequest.objects.create(
        from_store=from_store,
        to_store=to_store,
        din_number=din_number,
        upc=upc or None,
        medication_name=medication_name,
        requested_quantity=int(requested_quantity),
        urgency=urgency,
        message=(message or "").strip() or None,
        requested_by=actor,
    )

    urgency = str(urgency)
    label = "" if urgency == MedicationRequest.Urgency.LOW else f"{urgency.upper()} "
    notify(
        type=NotificationType.REQUEST_RECEIVED,
        store=to_store,
        title=f"New {label}Medication Request",
        message=f"{from_store.name} has requested {req.requested_quantity} units of {medication_name} (DIN: {din_number})",
        delivery_method=(
            Notification.DeliveryMethod.BOTH
            if urgency == MedicationRequest.Urgency.CRITICAL
            else Notification.DeliveryMethod.POPUP
        ),
        related_request=req,
    )
    audit(actor, "medication_requests", req.id, "CREATE", after={"status": req.status, "to_store_id": to_store.id})
    return req


def respond_to_request(actor, request_id, action, counter_quantity=None, response_message=None) -> MedicationRequest:
    """
    Accept, decline or counter a request on behalf of the supplying store.

    Accepting also asks a driver of the requesting store to pick the stock up;
    a failure there is logged and never undoes the accept.
    """
    with transaction.atomic():
        req = _locked(request_id)
        _require_store(actor, req.to_store_id)
        if req.status not in RESPONDABLE:
            raise ValidationError(f"Cannot respond to request in {req.status} state")

        before = {"status": req.status, "offered_quantity": req.offered_quantity}
        supplier = req.to_store.name
        if action == "accept":
            req.status = Status.ACCEPTED
            req.offered_quantity = req.requested_quantity
            ntype, title = NotificationType.REQUEST_ACCEPTED, "Request Accepted"
            text = f"{supplier} has accepted your request for {req.medication_name} (DIN: {req.din_number})"
        elif action == "decline":
            req.status = Status.DECLINED
            req.offered_quantity = None
            ntype, title = NotificationType.REQUEST_DECLINED, "Request Declined"
            text = f"{supplier} has declined your request for {req.medication_name} (DIN: {req.din_number})"
        elif action == "counter":
            if not counter_quantity or int(counter_quantity) <= 0:
                raise ValidationError("counter_quantity must be greater than zero")
            req.status = Status.COUNTER_OFFER
            req.offered_quantity = int(counter_quantity)
            ntype, title = NotificationType.COUNTER_OFFER, "Counter Offer Received"
            text = f"{supplier} has made a counter offer of {req.offered_quantity} units for {req.medication_name}"
        else:
            raise ValidationError(f"Unknown action: {action}")

        req.response_message = (response_message or "").strip() or None
        req.responded_by = actor
        req.save(update_fields=["status", "offered_quantity", "response_message", "responded_by", "updated_at"])

        notify(type=ntype, store=req.from_store, title=title, message=text, related_request=req)
        audit(
            actor, "medication_requests", req.id, action.upper(),
            before=before, after={"status": req.status, "offered_quantity": req.offered_quantity},
        )

    if req.status == Status.ACCEPTED:
        try:
            notify_driver(req.id)
        except (ValidationError, NoDriverAvailable, SmsError) as exc:
            logger.warning("Driver notification failed for request %s: %s", req.id, exc)
        req.refresh_from_db()
    return req


@transaction.atomic
def complete_request(actor, request_id) -> MedicationRequest:
    req = _locked(request_id)
    _require_store(actor, req.from_store_id, req.to_store_id)
    if req.status != Status.ACCEPTED:
        raise ValidationError(f"Cannot complete request in {req.status} state")

    req.status = Status.COMPLETED
    req.save(update_fields=["status", "updated_at"])
    notify(
        type=NotificationType.REQUEST_COMPLETED,
        store=req.from_store,
        title="Transfer Completed",
        message=f"Your medication request for {req.medication_name} (DIN: {req.din_number}) has been completed",
        related_request=req,
    )
    audit(actor, "medication_requests", req.id, "COMPLETE", before={"status": Status.ACCEPTED.value}, after={"status": req.status})
    return req


@transaction.atomic
def cancel_request(actor, request_id) -> MedicationRequest:
    req = _locked(request_id)
    _require_store(actor, req.from_store_id)
    if req.status not in CANCELLABLE:
        raise ValidationError(f"Cannot cancel request in {req.status} state")

    before = {"status": req.status}
    req.status = Status.CANCELLED
    req.save(update_fields=["status", "updated_at"])
    notify(
        type=NotificationType.REQUEST_CANCELLED,
        store=req.to_store,
        title="Request Cancelled",
        message=f"{req.from_store.name} has cancelled their request for {req.medication_name} (DIN: {req.din_number})",
        related_request=req,
    )
    audit(actor, "medication_requests", req.id, "CANCEL", before=before, after={"status": req.status})
    return req


def pickup_message(req: MedicationRequest) -> str:
    """Plain text only; some carriers drop messages carrying emoji."""
    pickup, dropoff = req.to_store, req.from_store
    body = f"PharmSync Pickup: {req.medication_name} ({req.quantity} units). Pickup from {pickup.name} ({pickup.code})"
    if pickup.address:
        body += f" at {pickup.address}"
    body += f". Deliver to {dropoff.name} ({dropoff.code})"
    if dropoff.address:
        body += f" at {dropoff.address}"
    return body + "."


def notify_driver(request_id) -> dict:
    """Text the first available on-duty driver of the requesting store."""
    req = MedicationRequest.objects.select_related("from_store", "to_store").get(pk=request_id)
    if req.status != Status.ACCEPTED:
        raise ValidationError("Request is not in accepted status")

    driver = available_driver_for(req.from_store_id)
    if driver is None:
        raise NoDriverAvailable("No available driver found for the requesting store")

    sid = send_sms(driver.phone, pickup_message(req))

    req.driver = driver
    req.driver_notified_at = timezone.now()
    req.save(update_fields=["driver", "driver_notified_at", "updated_at"])

    notify(
        type=NotificationType.DRIVER_NOTIFIED,
        store=req.from_store,
        title="Driver Notified",
        message=f"Driver {driver.name} has been notified to pick up {req.medication_name} from {req.to_store.name}",
        related_request=req,
    )
    logger.info("SMS sent to %s (%s) for request %s", driver.name, driver.phone, req.id)
    return {"success": True, "driver_name": driver.name, "driver_phone": driver.phone, "message_sid": sid}
