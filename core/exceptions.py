"""
Marketplace Error Taxonomy

Services raise these exceptions; the REST layer renders them through
marketplace_exception_handler as {"error": ..., "code": ...}.

- NotFound: no matching active record
- ValidationFailed: missing/invalid field, nothing was applied
- InsufficientStock: reservation exceeds available quantity
- InvalidTransition: order status change not permitted from current state
- Unauthorized: caller is not the owning account/role
- UpstreamUnavailable: the database call failed for infrastructure reasons
"""

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Base class for all marketplace domain errors."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'marketplace_error'
    default_message = 'Marketplace operation failed.'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class NotFound(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'not_found'
    default_message = 'Not found.'


class ValidationFailed(MarketplaceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'validation_failed'
    default_message = 'Validation failed.'


class InsufficientStock(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT
    code = 'insufficient_stock'
    default_message = 'Not enough stock available.'


class InvalidTransition(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT
    code = 'invalid_transition'
    default_message = 'Order status change is not allowed.'


class Unauthorized(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = 'unauthorized'
    default_message = 'You are not allowed to perform this action.'


class UpstreamUnavailable(MarketplaceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = 'upstream_unavailable'
    default_message = 'The marketplace is temporarily unavailable. Please try again.'


def marketplace_exception_handler(exc, context):
    """
    DRF exception handler.

    Renders MarketplaceError subclasses with their status code, turns
    database failures into UpstreamUnavailable and leaves everything else
    to DRF's default handler.
    """
    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.error(
            f"Database failure in {view.__class__.__name__ if view else 'unknown view'}: {exc}"
        )
        exc = UpstreamUnavailable()

    if isinstance(exc, MarketplaceError):
        data = {'error': exc.message, 'code': exc.code}
        if exc.details:
            data['details'] = exc.details
        return Response(data, status=exc.status_code)

    return exception_handler(exc, context)
