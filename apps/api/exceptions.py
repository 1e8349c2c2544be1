import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.exclusives.errors import ExclusivesError, StoreUnavailable

logger = logging.getLogger('apps')


def exclusives_exception_handler(exc, context):
    if isinstance(exc, ExclusivesError):
        return Response({'code': exc.code, 'detail': exc.detail}, status=exc.status_code)
    if isinstance(exc, StoreUnavailable):
        logger.warning('Store unavailable: %s', exc)
        return Response(
            {'code': 'store_unavailable', 'detail': 'Service temporarily unavailable. Retry later.'},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return exception_handler(exc, context)
