from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import pytest
from faker import Faker
from graphql import GraphQLInterfaceType, GraphQLObjectType, GraphQLResolveInfo
from hypothesis import strategies as st
from hypothesis.strategies import composite

from schemaforge.config import BuildSchemaOptions
from schemaforge.context import InstanceResolver
from schemaforge.metadata.storage import TypeMetadataStorage, type_metadata_storage
from schemaforge.schema_factory import GraphQLSchemaFactory


@pytest.fixture(autouse=True)
def clean_metadata_storage() -> Iterator[TypeMetadataStorage]:
    """Every test declares its own types in the process-wide storage."""
    type_metadata_storage.clear()
    yield type_metadata_storage
    type_metadata_storage.clear()


def compile_types(
    storage: TypeMetadataStorage = type_metadata_storage,
    options: BuildSchemaOptions | None = None,
    instance_resolver: InstanceResolver | None = None,
) -> GraphQLSchemaFactory:
    """Compile every registered type without assembling a schema."""
    factory = GraphQLSchemaFactory(storage, instance_resolver)
    factory.type_definitions_generator.generate(options or BuildSchemaOptions())
    return factory


def compiled_object(factory: GraphQLSchemaFactory, target: type) -> GraphQLObjectType:
    definition = factory.type_definitions_storage.get_object_type_by_target(target)
    assert definition is not None, f"{target.__name__} was not compiled"
    return definition.type


def compiled_interface(factory: GraphQLSchemaFactory, target: type) -> GraphQLInterfaceType:
    definition = factory.type_definitions_storage.get_interface_by_target(target)
    assert definition is not None, f"{target.__name__} was not compiled"
    return definition.type


@dataclass
class FakeInfo:
    """Stand-in for GraphQLResolveInfo when calling resolvers directly."""

    context: Any = None
    field_name: str = "field"


def fake_info(context: Any = None) -> GraphQLResolveInfo:
    return FakeInfo(context=context)  # type: ignore[return-value]


@dataclass
class InterfaceChainSpec:
    """Field names declared at each level of an interface chain, root interface first."""

    levels: list[list[str]] = field(default_factory=list)
    own_fields: list[str] = field(default_factory=list)

    @property
    def all_field_names(self) -> set[str]:
        return {name for level in self.levels for name in level} | set(self.own_fields)


@composite
def interface_chain_strategy(draw: st.DrawFn, min_depth: int = 2, max_depth: int = 5) -> InterfaceChainSpec:
    faker = Faker()
    faker.seed_instance(draw(st.integers(min_value=0, max_value=10_000)))
    depth = draw(st.integers(min_value=min_depth, max_value=max_depth))

    def field_names(count: int) -> list[str]:
        return [faker.unique.word().lower() + "Field" for _ in range(count)]

    levels = [field_names(draw(st.integers(min_value=1, max_value=3))) for _ in range(depth)]
    own_fields = field_names(draw(st.integers(min_value=0, max_value=3)))
    return InterfaceChainSpec(levels=levels, own_fields=own_fields)
