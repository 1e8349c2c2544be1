from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

CENTS = Decimal('0.01')


def plan_names():
    return list(settings.EXCLUSIVES_PLANS.keys())


def plan_config(plan):
    try:
        return settings.EXCLUSIVES_PLANS[plan]
    except KeyError:
        raise ValueError(f"unknown plan: {plan}") from None


def releases_payout(plan):
    return bool(plan_config(plan).get('releases_payout'))


def payout_amount(fee, percentage):
    amount = Decimal(fee) * Decimal(percentage) / Decimal(100)
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def build_payout_patch(plan, fee, claimant_id, settled_at):
    """Ledger patch released at publication, or None when the plan keeps funds in escrow."""
    if not releases_payout(plan):
        return None
    percentage = int(plan_config(plan).get('payout_percentage', 0))
    return {
        'payout_to_id': claimant_id,
        'payout_split': percentage,
        'payout_amount': payout_amount(fee, percentage),
        'status': 'completed',
        'settled_at': settled_at,
    }
