"""
Order lifecycle orchestration: create, update status, cancel.

Fatal failures abort the workflow and reach the caller as one typed error,
after reserved stock has been released. Non-fatal failures (payment calls,
best-effort stock releases) are logged, parked in the reconciliation queue
and returned as warnings next to the order.
"""
from __future__ import annotations

import logging
from uuid import UUID

from django.db import transaction

from orders.domain.config import OrderConfig
from orders.domain.exceptions import (
    DuplicateOrderNumber,
    ExternalServiceFailure,
    InvalidTransition,
    OrderNotFound,
    OrderServiceError,
    PaymentAmountMismatch,
    StockUnavailable,
    ValidationError,
)
from orders.domain.order import Order, OrderItem, generate_order_number
from orders.domain.pricing import calculate_subtotal, discount_for_percentage
from orders.domain.status import OrderStatus
from orders.domain.transitions import TransitionEffect
from orders.infra.clients import PaymentServiceClient, ProductServiceClient
from orders.infra.locks import order_lock
from orders.infra.reconciliation import (
    CANCEL_PAYMENT,
    CREATE_PAYMENT,
    RELEASE_STOCK,
    ReconciliationRepository,
)
from orders.infra.repositories import OrderRepository
from orders.services.dto import OrderItemRequest, OrderRequest, OrderResult
from orders.services.payments import PaymentOrchestrator, PaymentOutcome, order_status_for_payment
from orders.services.stock import StockOperationResult, StockReservationCoordinator, stock_lines_for
from orders.services.validation import validate_detail_changes, validate_order_request


logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 10


class OrderService:
    """Service for order lifecycle operations."""

    def __init__(
        self,
        config: OrderConfig | None = None,
        product_client: ProductServiceClient | None = None,
        payment_client: PaymentServiceClient | None = None,
        order_repo: OrderRepository | None = None,
        reconciliation_repo: ReconciliationRepository | None = None,
    ):
        self.config = config or OrderConfig.from_settings()
        self.product_client = product_client or ProductServiceClient.from_settings()
        self.payment_client = payment_client or PaymentServiceClient.from_settings()
        self.order_repo = order_repo or OrderRepository()
        self.reconciliation_repo = reconciliation_repo or ReconciliationRepository()
        self.stock = StockReservationCoordinator(self.product_client)
        self.payments = PaymentOrchestrator(self.payment_client, currency=self.config.currency)

    def create_order(self, request: OrderRequest) -> OrderResult:
        """Validate, price, reserve stock, persist, then request payment."""
        logger.info(
            "order_create_started",
            extra={
                "user_id": str(request.user_id),
                "operation": "create_order",
            },
        )
        validate_order_request(request, self.config)

        order = None
        reservation = None
        try:
            order = self._build_order(request)
            self._price_order(order, request.discount_code)
            self._validate_limits(order, request.payment.amount)
            reservation = self.stock.reserve(stock_lines_for(order), order_ref=order.order_number)
            order_id = self._save_new_order(order)
        except Exception as e:
            self._abort_creation(order, reservation, e)
            if isinstance(e, OrderServiceError):
                raise
            raise OrderServiceError(f"Failed to create order: {e}") from e

        warnings = []
        outcome = self.payments.initiate(order, request.payment)
        if not outcome.succeeded:
            warnings.append(self._park_payment_failure(order, outcome, CREATE_PAYMENT))

        logger.info(
            "order_created",
            extra={
                "order_id": str(order_id),
                "order_number": order.order_number,
                "status": order.status.value,
            },
        )
        return OrderResult(order=self.order_repo.get_by_id(order_id), warnings=warnings)

    def update_status(
        self,
        order_id: UUID,
        new_status: OrderStatus | str,
        reason: str | None = None,
        cancel_payment: bool = True,
    ) -> OrderResult:
        """
        Move an order along the state machine.

        Confirmation consumes the reserved stock and fails as a whole if any
        line cannot be consumed, rolling the status change back with it.
        Cancellation runs the full cancel workflow.
        """
        try:
            new_status = OrderStatus(new_status)
        except ValueError as e:
            raise ValidationError(f"Unknown order status: {new_status}") from e

        if new_status == OrderStatus.CANCELLED:
            return self.cancel_order(order_id, reason or "Cancelled", cancel_payment=cancel_payment)

        with transaction.atomic(), order_lock(order_id):
            order = self._load(order_id)
            old_status = order.status
            effect = order.transition_to(new_status, reason=reason)
            # The versioned write claims the transition before stock is consumed
            self.order_repo.save(order)
            if effect == TransitionEffect.CONFIRM:
                self._consume_stock(order)

        logger.info(
            "order_status_updated",
            extra={
                "order_id": str(order_id),
                "order_number": order.order_number,
                "status": f"{old_status.value}->{new_status.value}",
            },
        )
        return OrderResult(order=self.order_repo.get_by_id(order_id))

    def cancel_order(self, order_id: UUID, reason: str, cancel_payment: bool = True) -> OrderResult:
        """
        Cancel a PENDING or CONFIRMED order.

        The status change is committed first so a second concurrent cancel
        fails before touching the collaborators; stock release and payment
        cancellation follow as best-effort compensations.
        """
        logger.info("order_cancel_started", extra={"order_id": str(order_id), "operation": "cancel_order"})

        with transaction.atomic(), order_lock(order_id):
            order = self._load(order_id)
            if not order.can_be_cancelled:
                raise InvalidTransition(order.status, OrderStatus.CANCELLED)
            order.transition_to(OrderStatus.CANCELLED, reason=reason)
            self.order_repo.save(order)

        warnings = []
        released = self.stock.release(stock_lines_for(order), order_ref=order.order_number)
        warnings.extend(self._park_stock_failures(order.id, released))

        if cancel_payment:
            outcome = self.payments.cancel(order, reason)
            if not outcome.succeeded:
                warnings.append(self._park_payment_failure(order, outcome, CANCEL_PAYMENT))

        logger.info(
            "order_cancelled",
            extra={"order_id": str(order_id), "order_number": order.order_number, "status": order.status.value},
        )
        return OrderResult(order=self.order_repo.get_by_id(order_id), warnings=warnings)

    def update_order_details(self, order_id: UUID, **changes) -> OrderResult:
        """Edit customer-facing fields while the order is still PENDING."""
        with transaction.atomic(), order_lock(order_id):
            order = self._load(order_id)
            validate_detail_changes(changes, order.delivery_type)
            changed = order.update_details(**changes)
            if changed:
                self.order_repo.save(order)

        if changed:
            logger.info(
                "order_details_updated",
                extra={"order_id": str(order_id), "operation": ",".join(changed)},
            )
        return OrderResult(order=self.order_repo.get_by_id(order_id))

    def handle_payment_update(self, order_id: UUID, payment_status: str, details: dict | None = None) -> str:
        """
        Apply a payment service callback to the order.

        Always acknowledges so the payment service does not retry forever; a
        failed update is logged at error level for alerting.
        """
        details = details or {}
        target = order_status_for_payment(payment_status)
        if target is None:
            logger.info(
                "payment_update_ignored",
                extra={"order_id": str(order_id), "status": payment_status},
            )
            return "ignored"

        reason = None
        if (payment_status or "").upper() == "FAILED":
            reason = f"Payment failed: {details.get('gatewayResponse')}"
        elif target == OrderStatus.CANCELLED:
            reason = "Payment cancelled"

        try:
            self.update_status(order_id, target, reason=reason, cancel_payment=False)
        except Exception as e:
            logger.error(
                "payment_update_failed",
                extra={
                    "order_id": str(order_id),
                    "status": payment_status,
                    "error": str(e),
                },
                exc_info=not isinstance(e, OrderServiceError),
            )
            return "acknowledged"
        return "updated"

    def get_order(self, order_id: UUID) -> Order:
        return self._load(order_id)

    def get_order_by_number(self, order_number: str) -> Order:
        order = self.order_repo.get_by_order_number(order_number)
        if order is None:
            raise OrderNotFound(order_number)
        return order

    def get_orders_by_user(self, user_id: UUID, limit: int = 50, offset: int = 0) -> list[Order]:
        return self.order_repo.get_by_user(user_id, limit=limit, offset=offset)

    def _load(self, order_id: UUID) -> Order:
        order = self.order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def _build_order(self, request: OrderRequest) -> Order:
        items = [self._resolve_item(item_request) for item_request in request.items]
        order = Order(
            order_number=self._next_order_number(),
            user_id=request.user_id,
            customer_name=request.customer_name.strip(),
            customer_email=request.customer_email,
            customer_phone=request.customer_phone,
            delivery_type=request.delivery_type,
            delivery_address=request.delivery_address,
            delivery_date=request.delivery_date,
            special_instructions=request.special_instructions,
            items=items,
        )
        order.estimate_preparation(self.config.default_preparation_minutes)
        return order

    def _resolve_item(self, item_request: OrderItemRequest) -> OrderItem:
        """Look the product up, check availability and snapshot it."""
        product = self.product_client.get_product(item_request.product_id)

        try:
            sufficient = self.product_client.check_availability(item_request.product_id, item_request.quantity)
        except ExternalServiceFailure as e:
            raise StockUnavailable(
                f"Stock availability check failed for product: {product.name}",
                product_id=item_request.product_id,
            ) from e
        if not sufficient:
            raise StockUnavailable(
                f"Insufficient stock for product: {product.name}",
                product_id=item_request.product_id,
            )

        unit_price = item_request.unit_price_override
        if unit_price is None:
            unit_price = product.price
        preparation = product.preparation_time_minutes
        if preparation is None:
            preparation = self.config.default_item_preparation_minutes

        return OrderItem(
            product_id=item_request.product_id,
            quantity=item_request.quantity,
            unit_price=unit_price,
            product_sku=product.sku,
            product_name=product.name,
            product_category=product.category,
            product_description=product.description,
            product_image_url=product.image_url,
            preparation_time_minutes=preparation,
            special_instructions=item_request.special_instructions,
        )

    def _price_order(self, order: Order, discount_code: str | None) -> None:
        percentage = self.config.discount_percentage_for(discount_code)
        if percentage is not None:
            order.discount_code = discount_code.strip().upper()
            order.discount_percentage = percentage
            order.discount_amount = discount_for_percentage(calculate_subtotal(order.items), percentage)
        order.recalculate_totals(self.config.tax_rate, self.config.delivery_fee)

    def _validate_limits(self, order: Order, payment_amount) -> None:
        if order.total_amount > self.config.max_order_value:
            raise ValidationError(
                f"Order value {order.total_amount} exceeds maximum limit of {self.config.max_order_value}"
            )
        if payment_amount is None or payment_amount < order.total_amount:
            raise PaymentAmountMismatch(payment_amount, order.total_amount)

    def _next_order_number(self) -> str:
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            candidate = generate_order_number()
            if not self.order_repo.order_number_exists(candidate):
                return candidate
        raise OrderServiceError("Could not allocate a unique order number")

    def _save_new_order(self, order: Order) -> UUID:
        """Insert the order, drawing a fresh number when a concurrent create took it."""
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            try:
                return self.order_repo.save(order)
            except DuplicateOrderNumber:
                logger.warning(
                    "order_number_collision",
                    extra={"order_id": str(order.id), "order_number": order.order_number},
                )
                order.order_number = self._next_order_number()
        raise OrderServiceError("Could not allocate a unique order number")

    def _consume_stock(self, order: Order) -> None:
        result = self.stock.consume(stock_lines_for(order), order_ref=order.order_number)
        if result.ok:
            return
        logger.error(
            "order_confirmation_consume_failed",
            extra={
                "order_id": str(order.id),
                "order_number": order.order_number,
                "operation": "consume",
                "error": "; ".join(
                    f"{failure.line.product_id}: {failure.error}" for failure in result.failed
                ),
                # Already consumed lines need manual repair in the inventory service
                "status": ",".join(str(line.product_id) for line in result.succeeded),
            },
        )
        raise ExternalServiceFailure(
            "product-service",
            "consume",
            f"{len(result.failed)} of {len(result.failed) + len(result.succeeded)} items failed",
        )

    def _abort_creation(self, order: Order | None, reservation: StockOperationResult | None, error: Exception) -> None:
        logger.error(
            "order_create_failed",
            extra={
                "order_number": order.order_number if order else None,
                "operation": "create_order",
                "error": str(error),
            },
            exc_info=not isinstance(error, OrderServiceError),
        )
        if order is None:
            return

        if isinstance(error, StockUnavailable) and error.compensation is not None:
            self._park_stock_failures(order.id, error.compensation)
        if reservation is not None:
            released = self.stock.release(reservation.succeeded, order_ref=order.order_number)
            self._park_stock_failures(order.id, released)

    def _park_stock_failures(self, order_id: UUID, result: StockOperationResult) -> list[str]:
        warnings = []
        for failure in result.failed:
            self.reconciliation_repo.add_task(
                order_id,
                RELEASE_STOCK,
                {"productId": str(failure.line.product_id), "quantity": failure.line.quantity},
                error=failure.error,
            )
            warnings.append(f"Stock {result.operation} failed for product {failure.line.product_id}: {failure.error}")
        return warnings

    def _park_payment_failure(self, order: Order, outcome: PaymentOutcome, kind: str) -> str:
        self.reconciliation_repo.add_task(order.id, kind, outcome.payload or {}, error=outcome.error or "")
        return f"Payment {outcome.operation} failed: {outcome.error}"
