"""
Management command to recreate QR artifacts for existing codes.

Use after media storage was lost or migrated. Code rows are not changed
apart from their artifact path.

Usage:
    python manage.py regenerate_qr_artifacts
    python manage.py regenerate_qr_artifacts --batch <uuid>
"""

import uuid

from django.core.management.base import BaseCommand, CommandError

from apps.codes.models import Batch
from apps.codes.services import regenerate_qr_artifacts


class Command(BaseCommand):
    help = 'Regenerate QR artifact files for issued codes'

    def add_arguments(self, parser):
        parser.add_argument(
            '--batch',
            dest='batch_id',
            help='Only regenerate artifacts for this batch UUID',
        )

    def handle(self, *args, **options):
        batch_id = options.get('batch_id')

        if batch_id:
            try:
                batch_id = uuid.UUID(str(batch_id))
            except ValueError:
                raise CommandError(f'{batch_id} is not a valid batch UUID')

        if batch_id and not Batch.objects.filter(id=batch_id).exists():
            raise CommandError(f'Batch {batch_id} does not exist')

        result = regenerate_qr_artifacts(batch_id=batch_id)

        self.stdout.write(
            f"Found {result['total']} code(s), regenerated {result['regenerated']}"
        )

        if result['failed']:
            self.stdout.write(
                self.style.WARNING(f"{result['failed']} artifact(s) failed, see logs.")
            )
        else:
            self.stdout.write(self.style.SUCCESS('All QR artifacts regenerated.'))
