"""
Error mapping for API responses.
"""
import logging

from django.http import JsonResponse

from orders.domain.exceptions import OrderServiceError

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Error handler for API responses."""

    ERROR_CODES = {
        "VALIDATION_ERROR": 400,
        "STOCK_UNAVAILABLE": 400,
        "PAYMENT_AMOUNT_MISMATCH": 400,
        "NOT_FOUND": 404,
        "PRODUCT_NOT_FOUND": 404,
        "INVALID_TRANSITION": 409,
        "INVALID_STATE": 409,
        "CONCURRENT_MODIFICATION": 409,
        "DUPLICATE_ORDER_NUMBER": 409,
        "EXTERNAL_SERVICE_FAILURE": 502,
        "ORDER_ERROR": 500,
        "INTERNAL_ERROR": 500,
    }

    @classmethod
    def code_for(cls, error: Exception) -> str:
        if isinstance(error, OrderServiceError):
            return error.code
        return "INTERNAL_ERROR"

    @classmethod
    def status_for(cls, error: Exception) -> int:
        return cls.ERROR_CODES.get(cls.code_for(error), 500)

    @classmethod
    def handle_error(cls, error: Exception) -> JsonResponse:
        """Handle error and return JSON response."""
        if isinstance(error, OrderServiceError):
            return JsonResponse(
                {
                    "error": {
                        "code": error.code,
                        "message": error.message,
                    }
                },
                status=cls.status_for(error),
            )

        # Log unexpected errors
        logger.error(
            "unexpected_error",
            extra={
                "operation": type(error).__name__,
                "error": str(error),
            },
            exc_info=True,
        )

        return JsonResponse(
            {
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                }
            },
            status=500,
        )
