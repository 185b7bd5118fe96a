from django.core.management.base import BaseCommand, CommandError
from django.db.models import Sum

from accounts.models import Profile
from ledger.models import Transaction


class Command(BaseCommand):
    help = 'Check that every profile balance equals the sum of its ledger rows'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user-id',
            type=int,
            help='Audit a single user ID only'
        )
        parser.add_argument(
            '--strict',
            action='store_true',
            help='Exit with an error when any mismatch is found'
        )

    def handle(self, *args, **options):
        profiles = Profile.objects.select_related('user').order_by('user_id')
        if options.get('user_id'):
            profiles = profiles.filter(user_id=options['user_id'])

        sums = dict(
            Transaction.objects.order_by().values('user_id')
            .annotate(total=Sum('amount'))
            .values_list('user_id', 'total')
        )

        checked = 0
        mismatches = []
        for profile in profiles:
            checked += 1
            ledger_total = sums.get(profile.user_id) or 0
            if ledger_total != profile.points_balance:
                mismatches.append((profile, ledger_total))

        self.stdout.write(f'Profiles checked: {checked}')
        self.stdout.write('=' * 60)

        if not mismatches:
            self.stdout.write(self.style.SUCCESS('Ledger consistent: every balance matches its transactions.'))
            return

        for profile, ledger_total in mismatches:
            self.stdout.write(self.style.ERROR(
                f'  user {profile.user_id:6d} | {profile.username:20} | '
                f'balance {profile.points_balance:8d} | ledger {ledger_total:8d} | '
                f'diff {profile.points_balance - ledger_total:+d}'
            ))

        self.stdout.write('=' * 60)
        message = f'{len(mismatches)} profile(s) out of balance'
        if options['strict']:
            raise CommandError(message)
        self.stdout.write(self.style.WARNING(message))
