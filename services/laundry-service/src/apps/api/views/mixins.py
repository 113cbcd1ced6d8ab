# services/laundry-service/src/apps/api/views/mixins.py
"""
View Mixins

Error translation and hostel scoping shared by all laundry views.
"""

from shared.common.permissions import Roles
from shared.common.exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    InternalServerException,
    NotFoundException,
)
from apps.core.services import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    OrchestratorError,
    ValidationError,
)


ERROR_MAP = (
    (ValidationError, BadRequestException),
    (AuthorizationError, ForbiddenException),
    (NotFoundError, NotFoundException),
    (ConflictError, ConflictException),
)


def to_api_exception(exc: OrchestratorError):
    """Translate a service error into the shared API exception for its status."""
    for error_class, api_class in ERROR_MAP:
        if isinstance(exc, error_class):
            return api_class(detail=exc.message, error_code=exc.code, extra_data=exc.details)
    return InternalServerException(detail=exc.message, error_code=exc.code)


class OrchestratorViewMixin:
    """
    Renders service errors through the shared error envelope and resolves
    the hostel a request is scoped to.
    """

    def handle_exception(self, exc):
        if isinstance(exc, OrchestratorError):
            exc = to_api_exception(exc)
        return super().handle_exception(exc)

    def get_hostel_id(self, requested=None):
        """Explicit ``hostel_id`` if given, else the caller's own hostel."""
        hostel_id = requested or getattr(self.request.user, 'hostel_id', None)
        if not hostel_id:
            raise BadRequestException(
                detail='hostel_id is required.',
                error_code='HOSTEL_REQUIRED'
            )
        self.check_hostel_access(hostel_id)
        return hostel_id

    def check_hostel_access(self, hostel_id):
        """Only system administrators reach past their own hostel."""
        user = self.request.user
        if Roles.SYSTEM_ADMIN in getattr(user, 'roles', []):
            return
        if str(getattr(user, 'hostel_id', None)) != str(hostel_id):
            raise ForbiddenException(
                detail='This belongs to another hostel.',
                error_code='HOSTEL_FORBIDDEN'
            )

    def is_admin(self) -> bool:
        return bool(getattr(self.request.user, 'is_admin', False))

    def get_query_params(self, serializer_class):
        serializer = serializer_class(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data
