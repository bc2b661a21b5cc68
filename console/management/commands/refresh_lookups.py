from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from console.services.backend import BackendClient, BackendError
from console.services.lookups import LOOKUP_KEYS, Lookups


class Command(BaseCommand):
    help = "Probe the HKare backend and warm the console lookup caches."

    def add_arguments(self, parser):
        parser.add_argument('--skip-health', action='store_true', help='Do not call the backend health endpoint first.')

    def handle(self, *args, **options):
        now = timezone.now()
        client = BackendClient()

        if not options['skip_health']:
            try:
                client.get('/health')
            except BackendError as exc:
                raise CommandError(f'backend unhealthy at {client.base_url}: {exc.message}')
            self.stdout.write(f'backend ok: {client.base_url}')

        counts = Lookups(client).warm()
        for key in LOOKUP_KEYS:
            style = self.style.SUCCESS if counts[key] else self.style.WARNING
            self.stdout.write(style(f'{key}: {counts[key]} rows'))

        self.stdout.write(self.style.SUCCESS(f"Refreshed {len(counts)} lookups at {now}"))
