import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import WorkspaceBooking
from bookings.utils.verification import invalidate_verification_state

logger = logging.getLogger(__name__)


# ============================================================
# 🔹 Workspace changes flip the working-area agreement gate
# ============================================================
def _clear_verification_state(booking_id):
    invalidate_verification_state(booking_id)
    # A read between the save and the commit may have cached the old gate
    transaction.on_commit(lambda: invalidate_verification_state(booking_id))


@receiver(post_save, sender=WorkspaceBooking)
def workspace_booking_saved(sender, instance, **kwargs):
    _clear_verification_state(instance.booking_id)


@receiver(post_delete, sender=WorkspaceBooking)
def workspace_booking_deleted(sender, instance, **kwargs):
    _clear_verification_state(instance.booking_id)
