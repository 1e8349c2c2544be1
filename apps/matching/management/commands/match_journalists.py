from django.core.management.base import BaseCommand, CommandError

from apps.exclusives.errors import NotFound
from apps.matching.services import get_matches


class Command(BaseCommand):
    help = 'Print ranked journalist matches for an announcement.'

    def add_arguments(self, parser):
        parser.add_argument('announcement_id', type=int)
        parser.add_argument('--limit', type=int, default=None)

    def handle(self, *args, **options):
        try:
            matches = get_matches(options['announcement_id'], limit=options['limit'])
        except NotFound as exc:
            raise CommandError(str(exc)) from exc

        if not matches:
            self.stdout.write('No matching journalists.')
            return
        for rank, match in enumerate(matches, start=1):
            self.stdout.write(
                f"{rank}. {match.journalist.name} (id={match.journalist.member_id}) "
                f"score={match.score} beats={','.join(match.matching_beats)} "
                f"reasons={'; '.join(match.reasons)}"
            )
