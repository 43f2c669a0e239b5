"""
GraphQL view and payment webhook with structured logging.
"""
import json
import logging
from uuid import uuid4

from ariadne import format_error, graphql_sync
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from orders.api.middleware import ErrorHandler
from orders.api.schema import schema
from orders.infra.pii_masker import mask_pii_in_dict
from orders.services import get_order_service

logger = logging.getLogger(__name__)


def graphql_error_formatter(error, debug: bool = False) -> dict:
    """Attach the domain error code so clients can branch on it."""
    formatted = format_error(error, debug)
    original = getattr(error, "original_error", None)
    if original is not None:
        formatted.setdefault("extensions", {})["code"] = ErrorHandler.code_for(original)
        if ErrorHandler.status_for(original) >= 500:
            logger.error(
                "graphql_resolver_error",
                extra={"operation": type(original).__name__, "error": str(original)},
                exc_info=original,
            )
    return formatted


class BakeryOrdersGraphQLView:
    """GraphQL view with structured logging."""

    def dispatch(self, request, *args, **kwargs):
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        user_id = request.headers.get("X-User-ID")

        logger.info(
            "graphql_request",
            extra={"request_id": request_id, "user_id": user_id, "operation": "graphql"},
        )

        try:
            response = self._process_graphql_request(request, request_id)
        except Exception as e:
            response = ErrorHandler.handle_error(e)

        logger.info(
            "graphql_response",
            extra={
                "request_id": request_id,
                "user_id": user_id,
                "status": response.status_code,
            },
        )
        return response

    def _process_graphql_request(self, request, request_id):
        if request.method == "GET":
            return JsonResponse({"message": "GraphQL endpoint. Use POST for queries."})

        try:
            data = json.loads(request.body)
        except json.JSONDecodeError:
            return JsonResponse(
                {"error": {"code": "VALIDATION_ERROR", "message": "Invalid JSON"}},
                status=400,
            )

        variables = data.get("variables") or {}
        logger.debug(
            "graphql_variables",
            extra={"request_id": request_id, "variables": mask_pii_in_dict(variables)},
        )

        success, result = graphql_sync(
            schema,
            data,
            context_value={"request": request, "request_id": request_id},
            error_formatter=graphql_error_formatter,
        )

        status_code = 200 if success else 400
        return JsonResponse(result, status=status_code)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def graphql_view(request):
    """GraphQL endpoint."""
    view = BakeryOrdersGraphQLView()
    return view.dispatch(request)


@csrf_exempt
@require_http_methods(["POST"])
def payment_update_view(request, order_id):
    """
    Payment service callback.

    Body: {"status": "COMPLETED" | "FAILED" | "CANCELLED" | ..., "gatewayResponse": ...}.
    Answers 200 for every well-formed callback so the payment service does
    not keep retrying.
    """
    try:
        data = json.loads(request.body)
    except json.JSONDecodeError:
        return JsonResponse(
            {"error": {"code": "VALIDATION_ERROR", "message": "Invalid JSON"}},
            status=400,
        )
    if not isinstance(data, dict) or not data.get("status"):
        return JsonResponse(
            {"error": {"code": "VALIDATION_ERROR", "message": "Payment status is required"}},
            status=400,
        )

    outcome = get_order_service().handle_payment_update(order_id, data["status"], details=data)
    logger.info(
        "payment_update_received",
        extra={"order_id": str(order_id), "status": data["status"], "operation": outcome},
    )
    return JsonResponse({"orderId": str(order_id), "status": outcome})
