from .models import Driver


def available_driver_for(store_id):
    """First driver of the store that is available and on duty, or None."""
    return (
        Driver.objects.filter(
            store_id=store_id,
            is_available=True,
            shift_status=Driver.ShiftStatus.ON_DUTY,
        )
        .order_by("id")
        .first()
    )
