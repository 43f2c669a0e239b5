"""
GraphQL schema definition using Ariadne.
"""
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from uuid import UUID

from ariadne import (
    MutationType,
    QueryType,
    ScalarType,
    load_schema_from_path,
    make_executable_schema,
)

from orders.api.serializers import order_result_to_dict, order_to_dict
from orders.domain.exceptions import ValidationError
from orders.services import get_order_service
from orders.services.dto import OrderRequest

# Load schema from .graphql files
SCHEMAS_DIR = Path(__file__).parent / "schemas"
type_defs = "\n".join([
    load_schema_from_path(SCHEMAS_DIR / "common.graphql"),
    load_schema_from_path(SCHEMAS_DIR / "query.graphql"),
    load_schema_from_path(SCHEMAS_DIR / "mutation.graphql"),
])

query = QueryType()
mutation = MutationType()

# GraphQL input name -> Order attribute
DETAIL_FIELDS = {
    "customerPhone": "customer_phone",
    "deliveryAddress": "delivery_address",
    "deliveryDate": "delivery_date",
    "specialInstructions": "special_instructions",
}


@query.field("order")
def resolve_order(_, info, id):
    """Resolve order by id."""
    return order_to_dict(get_order_service().get_order(id))


@query.field("orderByNumber")
def resolve_order_by_number(_, info, orderNumber):
    """Resolve order by its human-readable number."""
    return order_to_dict(get_order_service().get_order_by_number(orderNumber))


@query.field("ordersByUser")
def resolve_orders_by_user(_, info, userId, limit=50, offset=0):
    orders = get_order_service().get_orders_by_user(userId, limit=limit, offset=offset)
    return [order_to_dict(order) for order in orders]


@mutation.field("createOrder")
def resolve_create_order(_, info, input: dict):
    """Resolve create order mutation."""
    request = OrderRequest.from_payload(input)
    return order_result_to_dict(get_order_service().create_order(request))


@mutation.field("updateOrderStatus")
def resolve_update_order_status(_, info, id, status, reason=None):
    result = get_order_service().update_status(id, status, reason=reason)
    return order_result_to_dict(result)


@mutation.field("cancelOrder")
def resolve_cancel_order(_, info, id, reason):
    result = get_order_service().cancel_order(id, reason)
    return order_result_to_dict(result)


@mutation.field("updateOrderDetails")
def resolve_update_order_details(_, info, id, input: dict):
    """Only fields present in the input are changed."""
    changes = {DETAIL_FIELDS[key]: value for key, value in input.items() if key in DETAIL_FIELDS}
    result = get_order_service().update_order_details(id, **changes)
    return order_result_to_dict(result)


# Define custom scalars
decimal_scalar = ScalarType("Decimal")
uuid_scalar = ScalarType("UUID")
datetime_scalar = ScalarType("DateTime")


@decimal_scalar.serializer
def serialize_decimal(value):
    """Serialize Decimal to string."""
    return str(value)


@decimal_scalar.value_parser
def parse_decimal_value(value):
    """Parse Decimal from string or number."""
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValidationError(f"Invalid decimal value: {value}") from e


@uuid_scalar.serializer
def serialize_uuid(value):
    """Serialize UUID to string."""
    return str(value)


@uuid_scalar.value_parser
def parse_uuid_value(value):
    """Parse UUID from string."""
    if isinstance(value, UUID):
        return value
    return UUID(str(value))


@uuid_scalar.literal_parser
def parse_uuid_literal(ast, variables=None):
    """Parse UUID from GraphQL literal."""
    return UUID(str(ast.value))


@datetime_scalar.serializer
def serialize_datetime(value):
    """Serialize DateTime to ISO format string."""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


@datetime_scalar.value_parser
def parse_datetime_value(value):
    """Parse DateTime from an ISO-8601 string."""
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


# Create executable schema
schema = make_executable_schema(
    type_defs,
    query,
    mutation,
    datetime_scalar,
    decimal_scalar,
    uuid_scalar,
)
