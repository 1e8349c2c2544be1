import functools

from django.db import InterfaceError, OperationalError


class ExclusivesError(Exception):
    status_code = 400
    code = 'exclusives_error'
    default_detail = 'Request could not be completed.'

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Forbidden(ExclusivesError):
    status_code = 403
    code = 'forbidden'
    default_detail = 'Access denied.'


class NotFound(ExclusivesError):
    status_code = 404
    code = 'not_found'
    default_detail = 'Announcement not found.'


class AlreadyClaimed(ExclusivesError):
    status_code = 400
    code = 'already_claimed'
    default_detail = 'This announcement has already been claimed.'


class NoMatchingBeat(ExclusivesError):
    status_code = 403
    code = 'no_matching_beat'
    default_detail = 'You do not have a matching beat for this announcement.'


class InvalidTransition(ExclusivesError):
    status_code = 400
    code = 'invalid_transition'
    default_detail = 'Announcement is not in a state that allows this action.'


class InvalidPlan(ExclusivesError):
    status_code = 400
    code = 'invalid_plan'
    default_detail = 'Unknown plan.'


class StoreUnavailable(Exception):
    """Persistence layer could not be reached. Safe for the caller to retry."""


def translate_db_errors(func):
    """Re-raise database connectivity failures from func as StoreUnavailable."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            raise StoreUnavailable(str(exc)) from exc

    return wrapper
