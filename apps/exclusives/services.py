import logging

from django.db import transaction
from django.utils import timezone

from apps.directory.identities import CompanyIdentity, JournalistIdentity
from apps.payments.plans import build_payout_patch, plan_config, plan_names

from .errors import AlreadyClaimed, Forbidden, InvalidPlan, InvalidTransition, NoMatchingBeat, NotFound
from .lifecycle import AWAITING_CLAIM, PUBLISHED, require_transition
from .stores import get_directory, get_store
from .tasks import deliver_lifecycle_event

logger = logging.getLogger(__name__)

CLAIM_SEED_MESSAGE = 'I have claimed this exclusive and am interested in covering it.'


def _resolve_member(directory, member_id):
    identity = directory.resolve_member(member_id)
    if identity is None:
        raise NotFound('Member not found.')
    return identity


def _load_announcement(store, announcement_id):
    announcement = store.get_announcement(announcement_id)
    if announcement is None:
        raise NotFound()
    return announcement


def _is_participant(announcement, identity):
    if isinstance(identity, CompanyIdentity):
        return announcement.company_id == identity.member_id
    if isinstance(identity, JournalistIdentity):
        return announcement.claimant_id == identity.member_id
    return False


def _emit_after_commit(event, announcement, **extra):
    payload = {
        'announcement_id': announcement.id,
        'company_id': announcement.company_id,
        'claimant_id': announcement.claimant_id,
        'status': announcement.status,
    }
    payload.update(extra)
    transaction.on_commit(lambda: deliver_lifecycle_event.delay(event, payload), robust=True)


def create_announcement(company_id, fields, store=None, directory=None, now=None):
    store = store or get_store()
    directory = directory or get_directory()
    now = now or timezone.now()

    identity = _resolve_member(directory, company_id)
    if not isinstance(identity, CompanyIdentity):
        raise Forbidden('Only companies can create announcements.')
    if fields.get('plan') not in plan_names():
        raise InvalidPlan(f"Unknown plan: {fields.get('plan')}.")

    fields = dict(fields, payout_split=int(plan_config(fields['plan']).get('payout_percentage', 0)))
    announcement = store.create_announcement(identity.member_id, fields, now)
    logger.info('Announcement created: id=%s company=%s plan=%s', announcement.id, company_id, announcement.plan)
    return announcement


def list_open_announcements(journalist_id, store=None, directory=None, now=None):
    store = store or get_store()
    directory = directory or get_directory()
    now = now or timezone.now()

    identity = _resolve_member(directory, journalist_id)
    if not isinstance(identity, JournalistIdentity):
        raise Forbidden()
    return store.list_open_announcements(identity.beat_tags, now)


def list_company_announcements(company_id, store=None, directory=None):
    store = store or get_store()
    directory = directory or get_directory()

    identity = _resolve_member(directory, company_id)
    if not isinstance(identity, CompanyIdentity):
        raise Forbidden()
    return store.list_company_announcements(identity.member_id)


def get_announcement_detail(announcement_id, member_id, store=None, directory=None):
    store = store or get_store()
    directory = directory or get_directory()

    identity = _resolve_member(directory, member_id)
    announcement = _load_announcement(store, announcement_id)
    if _is_participant(announcement, identity):
        return announcement
    if isinstance(identity, JournalistIdentity) and identity.covers_any(announcement.journalist_beat_tags):
        return announcement
    raise Forbidden()


def claim_exclusive(announcement_id, journalist_id, store=None, directory=None, now=None):
    """Give journalist_id the exclusive on an announcement awaiting claim.

    The transition is a conditional write in the store, so of any number of
    concurrent callers exactly one gets a ClaimOutcome and the others get
    AlreadyClaimed with nothing written on their behalf. A journalist with no
    beat in common with the announcement always gets NoMatchingBeat.
    """
    store = store or get_store()
    directory = directory or get_directory()
    now = now or timezone.now()

    identity = _resolve_member(directory, journalist_id)
    if not isinstance(identity, JournalistIdentity):
        raise Forbidden('Only journalists can claim exclusives.')

    announcement = _load_announcement(store, announcement_id)
    if not identity.covers_any(announcement.journalist_beat_tags):
        raise NoMatchingBeat()
    if announcement.status != AWAITING_CLAIM:
        raise AlreadyClaimed()

    outcome = store.claim_announcement(announcement_id, identity.member_id, CLAIM_SEED_MESSAGE, now)
    if outcome is None:
        logger.info('Claim lost: announcement=%s journalist=%s', announcement_id, identity.member_id)
        raise AlreadyClaimed()

    logger.info(
        'Announcement claimed: announcement=%s journalist=%s chat=%s',
        announcement_id,
        identity.member_id,
        outcome.chat_id,
    )
    _emit_after_commit(
        'announcement.claimed',
        outcome.announcement,
        journalist_id=identity.member_id,
        chat_id=outcome.chat_id,
    )
    return outcome


def publish_announcement(announcement_id, caller_id, published_url, store=None, directory=None, now=None):
    """Mark a claimed announcement published and release the payout its plan allows.

    Only the claimant or the owning company may publish. The status check is
    repeated inside the store's conditional write, so a second call (or a
    racing one) fails with InvalidTransition and the ledger is touched once.
    """
    store = store or get_store()
    directory = directory or get_directory()
    now = now or timezone.now()

    caller = _resolve_member(directory, caller_id)
    announcement = _load_announcement(store, announcement_id)
    if not _is_participant(announcement, caller):
        if isinstance(caller, JournalistIdentity):
            raise Forbidden('Only the journalist who claimed this can mark it as published.')
        raise Forbidden()

    require_transition(announcement.status, PUBLISHED)

    payout_patch = build_payout_patch(announcement.plan, announcement.fee, announcement.claimant_id, now)
    published = store.publish_announcement(announcement_id, published_url, payout_patch, now)
    if published is None:
        raise InvalidTransition('Announcement has already been published.')

    logger.info('Announcement published: announcement=%s caller=%s', announcement_id, caller.member_id)
    extra = {'published_url': published_url or ''}
    if payout_patch:
        logger.info(
            'Payout released: announcement=%s to=%s amount=%s split=%s',
            announcement_id,
            payout_patch['payout_to_id'],
            payout_patch['payout_amount'],
            payout_patch['payout_split'],
        )
        extra['payout_amount'] = str(payout_patch['payout_amount'])
        extra['payout_to'] = payout_patch['payout_to_id']
    _emit_after_commit('announcement.published', published, **extra)
    return published


def get_chat(announcement_id, member_id, store=None, directory=None):
    store = store or get_store()
    directory = directory or get_directory()

    identity = _resolve_member(directory, member_id)
    announcement = _load_announcement(store, announcement_id)
    if not _is_participant(announcement, identity):
        raise Forbidden()
    thread = store.get_chat_thread(announcement_id)
    if thread is None:
        raise NotFound('Chat not found.')
    return thread


def post_chat_message(announcement_id, member_id, text, store=None, directory=None, now=None):
    store = store or get_store()
    directory = directory or get_directory()
    now = now or timezone.now()

    identity = _resolve_member(directory, member_id)
    announcement = _load_announcement(store, announcement_id)
    if not _is_participant(announcement, identity):
        raise Forbidden()
    return store.append_chat_message(announcement_id, identity.member_id, text, now)
