# Repair Chats Management Command
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from core.lifecycle import confirmed_requests_missing_chat, ensure_chat


class Command(BaseCommand):
    help = 'Provisions the missing chat for every confirmed lesson request that has none.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List the requests that would get a chat without creating anything.',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=500,
            help='Number of requests repaired per transaction.',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        batch_size = options['batch_size']

        if batch_size < 1:
            raise CommandError('--batch-size must be a positive integer.')

        self.stdout.write('Looking for confirmed requests without a chat...')
        pending = list(
            confirmed_requests_missing_chat().values_list('id', 'student_id', 'teacher_id')
        )

        if not pending:
            self.stdout.write(self.style.SUCCESS('Every confirmed request already has a chat.'))
            return

        repaired = 0
        for start in range(0, len(pending), batch_size):
            batch = pending[start:start + batch_size]

            if dry_run:
                for request_id, student_id, teacher_id in batch:
                    self.stdout.write(
                        f'  [DRY-RUN] Request {request_id}: would create chat '
                        f'for student {student_id} and teacher {teacher_id}'
                    )
                continue

            with transaction.atomic():
                for request_id, student_id, teacher_id in batch:
                    ensure_chat(student_id, teacher_id, request_id)
                    repaired += 1

            self.stdout.write(f'Repaired {repaired} requests...')

        if dry_run:
            self.stdout.write(self.style.SUCCESS(
                f'Dry run completed. {len(pending)} requests need a chat. No changes saved.'
            ))
        else:
            self.stdout.write(self.style.SUCCESS(f'Repair completed. {repaired} chats provisioned.'))
