from datetime import datetime, timezone
from typing import Any

from graphql import GraphQLError, GraphQLScalarType, StringValueNode, ValueNode
from graphql.language.ast import IntValueNode


class ID(str):
    """Marker type for fields exposed as the GraphQL ``ID`` scalar."""


class Number(float):
    """Marker type for numbers whose scalar is chosen by ``number_scalar_mode``."""


def _serialize_iso_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, str):
        return value
    raise GraphQLError(f"DateTime cannot represent value: {value!r}")


def _parse_iso_date(value: Any) -> datetime:
    if not isinstance(value, str):
        raise GraphQLError(f"DateTime cannot represent non-string value: {value!r}")
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise GraphQLError(f"DateTime cannot represent value: {value!r}") from e


def _parse_iso_date_literal(node: ValueNode, _variables: Any = None) -> datetime:
    if not isinstance(node, StringValueNode):
        raise GraphQLError("DateTime cannot represent a non-string literal")
    return _parse_iso_date(node.value)


def _serialize_timestamp(value: Any) -> int:
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    if isinstance(value, int):
        return value
    raise GraphQLError(f"Timestamp cannot represent value: {value!r}")


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, int) or isinstance(value, bool):
        raise GraphQLError(f"Timestamp cannot represent non-integer value: {value!r}")
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def _parse_timestamp_literal(node: ValueNode, _variables: Any = None) -> datetime:
    if not isinstance(node, IntValueNode):
        raise GraphQLError("Timestamp cannot represent a non-integer literal")
    return _parse_timestamp(int(node.value))


GraphQLISODateTime = GraphQLScalarType(
    name="DateTime",
    description="A date-time string at UTC, compliant with the date-time format.",
    serialize=_serialize_iso_date,
    parse_value=_parse_iso_date,
    parse_literal=_parse_iso_date_literal,
)

GraphQLTimestamp = GraphQLScalarType(
    name="Timestamp",
    description="Number of milliseconds since the Unix epoch.",
    serialize=_serialize_timestamp,
    parse_value=_parse_timestamp,
    parse_literal=_parse_timestamp_literal,
)
