import logging

from django.core.management.base import BaseCommand
from django.db import transaction

from bookings.models import BookingDocument
from payments.utils import parse_payment_metadata, serialize_payment_note

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Copy legacy payment metadata from receipt notes into the structured payment_metadata column."

    def add_arguments(self, parser):
        parser.add_argument("--batch-size", type=int, default=500)
        parser.add_argument("--dry-run", action="store_true", help="Report what would change without writing.")

    def handle(self, *args, **options):
        batch_size = options["batch_size"]
        dry_run = options["dry_run"]

        qs = BookingDocument.objects.filter(
            type=BookingDocument.PAYMENT_RECEIPT,
            payment_metadata__isnull=True,
        ).order_by("created_at", "pk")

        migrated = 0
        empty = 0
        for document in qs.iterator(chunk_size=batch_size):
            metadata = parse_payment_metadata(document.note, document.id)
            if not metadata:
                empty += 1

            if dry_run:
                migrated += 1
                continue

            with transaction.atomic():
                # Rewrite the note compactly so the legacy substring filter keeps matching
                BookingDocument.objects.filter(pk=document.pk, payment_metadata__isnull=True).update(
                    payment_metadata=metadata,
                    note=serialize_payment_note(metadata) if metadata else document.note,
                )
            migrated += 1

        verb = "Would migrate" if dry_run else "Migrated"
        logger.info(f"Payment metadata backfill: {migrated} receipts, {empty} without usable metadata")
        self.stdout.write(self.style.SUCCESS(
            f"{verb} {migrated} payment receipt(s); {empty} had no usable metadata."
        ))
