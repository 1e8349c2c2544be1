from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.test import SimpleTestCase, override_settings

from .plans import build_payout_patch, payout_amount, plan_names, releases_payout


class PlanPayoutTests(SimpleTestCase):
    def setUp(self):
        self.settled_at = datetime(2026, 3, 2, 9, 0, tzinfo=dt_timezone.utc)

    def test_premium_releases_thirty_percent(self):
        patch = build_payout_patch('Premium', Decimal('1000.00'), 7, self.settled_at)
        self.assertEqual(
            patch,
            {
                'payout_to_id': 7,
                'payout_split': 30,
                'payout_amount': Decimal('300.00'),
                'status': 'completed',
                'settled_at': self.settled_at,
            },
        )

    def test_basic_keeps_escrow(self):
        self.assertFalse(releases_payout('Basic'))
        self.assertIsNone(build_payout_patch('Basic', Decimal('500.00'), 7, self.settled_at))

    def test_payout_amount_rounds_to_cents(self):
        self.assertEqual(payout_amount(Decimal('99.99'), 30), Decimal('30.00'))
        self.assertEqual(payout_amount(Decimal('0.05'), 50), Decimal('0.03'))

    def test_unknown_plan(self):
        with self.assertRaises(ValueError):
            releases_payout('Platinum')

    @override_settings(
        EXCLUSIVES_PLANS={
            'Basic': {'payout_percentage': 0, 'releases_payout': False},
            'Enterprise': {'payout_percentage': 45, 'releases_payout': True},
        }
    )
    def test_plans_come_from_settings(self):
        self.assertEqual(plan_names(), ['Basic', 'Enterprise'])
        patch = build_payout_patch('Enterprise', Decimal('200'), 3, self.settled_at)
        self.assertEqual(patch['payout_amount'], Decimal('90.00'))
