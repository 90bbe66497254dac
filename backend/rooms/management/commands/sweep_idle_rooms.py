from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from sync.coordinator import get_coordinator


class Command(BaseCommand):
    help = "Deactivate rooms with no activity within ROOM_IDLE_TIMEOUT_SECONDS"

    def handle(self, *args, **options):
        closed = async_to_sync(get_coordinator().sweeper.sweep)()

        for code in closed:
            self.stdout.write(f"Deactivated {code}")

        self.stdout.write(
            self.style.SUCCESS(f"Deactivated {len(closed)} idle room(s)")
        )
