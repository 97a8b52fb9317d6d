from datetime import datetime
from typing import Any

from graphql import (
    GraphQLBoolean,
    GraphQLFloat,
    GraphQLID,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLScalarType,
    GraphQLString,
    GraphQLType,
)

from schemaforge.config import BuildSchemaOptions, DateScalarMode, NumberScalarMode
from schemaforge.errors import InvalidTypeOptionsError, SchemaBuildErrorMessages
from schemaforge.metadata.models import UNDEFINED, FieldOptions
from schemaforge.scalars import ID, GraphQLISODateTime, GraphQLTimestamp, Number

NATIVE_SCALARS: dict[Any, GraphQLScalarType] = {
    str: GraphQLString,
    int: GraphQLInt,
    float: GraphQLFloat,
    bool: GraphQLBoolean,
    ID: GraphQLID,
}


def is_native_type(type_ref: Any) -> bool:
    return type_ref in NATIVE_SCALARS or type_ref in (Number, datetime) or isinstance(type_ref, GraphQLScalarType)


class TypeMapperService:
    """Maps native Python types to scalars and applies list/non-null wrapping."""

    def map_to_scalar_type(self, type_ref: Any, options: BuildSchemaOptions) -> GraphQLScalarType | None:
        if isinstance(type_ref, GraphQLScalarType):
            return type_ref
        if type_ref is Number:
            return GraphQLInt if options.number_scalar_mode == NumberScalarMode.INTEGER else GraphQLFloat
        if type_ref is datetime:
            return GraphQLTimestamp if options.date_scalar_mode == DateScalarMode.TIMESTAMP else GraphQLISODateTime
        try:
            return NATIVE_SCALARS.get(type_ref)
        except TypeError:
            # unhashable references are never scalars
            return None

    def map_to_gql_type(
        self, hostname: str, type_ref: GraphQLType, options: FieldOptions, is_input_type_ctx: bool
    ) -> GraphQLType:
        """Wrap a named type in list and non-null types.

        List items are non-null unless ``nullable`` is ``"items"`` or ``"itemsAndList"``.
        The outermost type is non-null unless ``nullable`` is ``True`` or ``"itemsAndList"``;
        in an input context a default value also makes it nullable.
        """
        self.validate_type_options(hostname, options, is_input_type_ctx)
        graphql_type = type_ref
        if options.is_array:
            graphql_type = self.map_to_gql_list(
                graphql_type, options.array_depth or 1, self.has_nullable_items(options)
            )

        nullable_outer = options.nullable is True or options.nullable == "itemsAndList"
        if is_input_type_ctx:
            is_not_nullable = options.default_value is UNDEFINED and not nullable_outer
        else:
            is_not_nullable = not nullable_outer
        return GraphQLNonNull(graphql_type) if is_not_nullable else graphql_type  # type: ignore[arg-type]

    def map_to_gql_list(self, target_type: GraphQLType, depth: int, nullable_items: bool) -> GraphQLType:
        for _ in range(depth):
            item_type = target_type if nullable_items else GraphQLNonNull(target_type)  # type: ignore[arg-type]
            target_type = GraphQLList(item_type)
        return target_type

    @staticmethod
    def has_nullable_items(options: FieldOptions) -> bool:
        return options.nullable in ("items", "itemsAndList")

    def validate_type_options(self, hostname: str, options: FieldOptions, is_input_type_ctx: bool) -> None:
        if not options.is_array and self.has_nullable_items(options):
            raise InvalidTypeOptionsError(SchemaBuildErrorMessages.NULLABLE_ITEMS.format(host=hostname))
        if is_input_type_ctx and options.nullable is False and options.default_value is None:
            raise InvalidTypeOptionsError(SchemaBuildErrorMessages.DEFAULT_VALUE_CONFLICT.format(host=hostname))
