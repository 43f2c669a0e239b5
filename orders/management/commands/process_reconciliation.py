"""
Management command to retry parked stock and payment calls.
"""
import time

from django.core.management.base import BaseCommand

from orders.services.reconciliation import DEFAULT_MAX_RETRIES, Reconciler


class Command(BaseCommand):
    help = 'Retry stock releases and payment calls that failed during order workflows'

    def add_arguments(self, parser):
        parser.add_argument(
            '--limit',
            type=int,
            default=100,
            help='Maximum number of tasks to process in one run',
        )
        parser.add_argument(
            '--max-retries',
            type=int,
            default=DEFAULT_MAX_RETRIES,
            help='Skip tasks that already failed this many times',
        )
        parser.add_argument(
            '--loop',
            action='store_true',
            help='Run in loop (for production)',
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=10,
            help='Interval between loops in seconds',
        )

    def handle(self, *args, **options):
        limit = options['limit']
        interval = options['interval']

        reconciler = Reconciler(max_retries=options['max_retries'])

        if not options['loop']:
            processed = reconciler.process_pending(limit=limit)
            self.stdout.write(self.style.SUCCESS(f'Processed {processed} tasks'))
            return

        self.stdout.write(f'Starting reconciler in loop mode (interval: {interval}s)')
        while True:
            try:
                processed = reconciler.process_pending(limit=limit)
                if processed > 0:
                    self.stdout.write(self.style.SUCCESS(f'Processed {processed} tasks'))
                time.sleep(interval)
            except KeyboardInterrupt:
                self.stdout.write(self.style.WARNING('Stopped by user'))
                break
