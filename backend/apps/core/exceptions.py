"""
Custom exceptions and error handlers.

Every error leaving the API is rendered with the same envelope:
{'error': {'code', 'message', 'details', 'retryable'}}
"""

from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from django.core.exceptions import ObjectDoesNotExist, ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError
from django.http import Http404, JsonResponse
import requests
import logging

logger = logging.getLogger(__name__)


class ErrorType:
    """Error kinds shared by all apps"""
    VALIDATION = 'VALIDATION_ERROR'
    AUTHENTICATION = 'AUTHENTICATION_ERROR'
    AUTHORIZATION = 'AUTHORIZATION_ERROR'
    NOT_FOUND = 'NOT_FOUND'
    CONFLICT = 'CONFLICT'
    DATABASE = 'DATABASE_ERROR'
    NETWORK = 'NETWORK_ERROR'
    UNEXPECTED = 'UNEXPECTED_ERROR'


class AppError(Exception):
    """
    Custom application error class

    Raised by services; rendered by custom_exception_handler and
    ErrorHandlerMiddleware.
    """
    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = ErrorType.UNEXPECTED,
        retryable: bool = False,
        details: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.retryable = retryable
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details,
                'retryable': self.retryable,
            }
        }


def validation_error(message: str, details: dict = None) -> AppError:
    return AppError(message, 400, ErrorType.VALIDATION, details=details)


def authentication_error(message: str = 'Authentication required') -> AppError:
    return AppError(message, 401, ErrorType.AUTHENTICATION)


def authorization_error(message: str = 'You are not allowed to perform this action') -> AppError:
    return AppError(message, 403, ErrorType.AUTHORIZATION)


def not_found_error(resource: str) -> AppError:
    return AppError(f'{resource} not found', 404, ErrorType.NOT_FOUND)


def conflict_error(message: str, code: str = ErrorType.CONFLICT) -> AppError:
    return AppError(message, 409, code)


def database_error(message: str = 'Database operation failed') -> AppError:
    return AppError(message, 500, ErrorType.DATABASE, retryable=True)


def network_error(message: str = 'Upstream service unavailable', code: str = ErrorType.NETWORK) -> AppError:
    return AppError(message, 503, code, retryable=True)


def unexpected_error(message: str = 'An unexpected error occurred') -> AppError:
    return AppError(message, 500, ErrorType.UNEXPECTED)


def convert_to_api_error(exc: Exception) -> AppError:
    """
    Map any exception raised below the view layer to an AppError.

    Args:
        exc: The exception instance

    Returns:
        AppError describing the failure
    """
    if isinstance(exc, AppError):
        return exc

    if isinstance(exc, DjangoValidationError):
        details = exc.message_dict if hasattr(exc, 'error_dict') else {'errors': exc.messages}
        return validation_error('; '.join(exc.messages), details=details)

    if isinstance(exc, Http404):
        return not_found_error('Resource')

    if isinstance(exc, ObjectDoesNotExist):
        resource = str(exc).split(' matching')[0] or 'Resource'
        return not_found_error(resource)

    if isinstance(exc, IntegrityError):
        return conflict_error('Resource already exists or violates a constraint')

    if isinstance(exc, DatabaseError):
        return database_error()

    if isinstance(exc, requests.RequestException):
        return network_error(str(exc) or 'Upstream service unavailable')

    if isinstance(exc, PermissionError):
        return authorization_error(str(exc)) if str(exc) else authorization_error()

    if isinstance(exc, ValueError):
        return validation_error(str(exc))

    return unexpected_error()


def custom_exception_handler(exc, context):
    """
    Custom exception handler for DRF

    Args:
        exc: The exception instance
        context: The context in which the exception occurred

    Returns:
        Response object with error details
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    # Handle DRF exceptions
    if response is not None:
        error_code = ErrorType.VALIDATION
        retryable = False

        # Determine error code based on status
        if response.status_code == 401:
            error_code = ErrorType.AUTHENTICATION
        elif response.status_code == 403:
            error_code = ErrorType.AUTHORIZATION
        elif response.status_code == 404:
            error_code = ErrorType.NOT_FOUND
        elif response.status_code == 405:
            error_code = 'METHOD_NOT_ALLOWED'
        elif response.status_code == 429:
            error_code = 'RATE_LIMIT_EXCEEDED'
            retryable = True
        elif response.status_code >= 500:
            error_code = ErrorType.UNEXPECTED
            retryable = True

        details = {}
        error_message = response.data
        if isinstance(error_message, dict):
            if 'detail' in error_message:
                error_message = str(error_message['detail'])
            else:
                details = error_message
                error_message = 'Invalid request data'
        elif isinstance(error_message, list):
            details = {'errors': error_message}
            error_message = 'Invalid request data'

        response.data = {
            'error': {
                'code': error_code,
                'message': error_message,
                'details': details,
                'retryable': retryable,
            }
        }
        return response

    api_error = convert_to_api_error(exc)
    if api_error.status_code >= 500:
        logger.error(f'Unhandled error in {context.get("view").__class__.__name__}: {exc}', exc_info=True)

    return Response(api_error.to_dict(), status=api_error.status_code)


class ErrorHandlerMiddleware:
    """
    Middleware to catch and format errors raised outside DRF views
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        return response

    def process_exception(self, request, exception):
        """Handle exceptions that occur during request processing"""
        api_error = convert_to_api_error(exception)

        if api_error.status_code >= 500:
            logger.error(f'Unexpected error on {request.path}: {exception}', exc_info=True)

        return JsonResponse(api_error.to_dict(), status=api_error.status_code)
