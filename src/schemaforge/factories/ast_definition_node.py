from collections.abc import Sequence

from graphql import (
    DirectiveNode,
    FieldDefinitionNode,
    GraphQLType,
    InputValueDefinitionNode,
    InterfaceTypeDefinitionNode,
    NameNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    parse,
    parse_type,
)

from schemaforge.metadata.models import DirectiveMetadata


class AstDefinitionNodeFactory:
    """Builds AST nodes carrying directives for generated types and fields.

    graphql-core only reads directives from ``ast_node``, there is no plain
    configuration option for them, so a definition node is synthesized for every
    element that declares directives.
    """

    def create_object_type_node(
        self, name: str, directives: Sequence[DirectiveMetadata] | None
    ) -> ObjectTypeDefinitionNode | None:
        if not directives:
            return None
        return ObjectTypeDefinitionNode(
            name=NameNode(value=name),
            directives=self.create_directive_nodes(directives),
            interfaces=(),
            fields=(),
        )

    def create_interface_type_node(
        self, name: str, directives: Sequence[DirectiveMetadata] | None
    ) -> InterfaceTypeDefinitionNode | None:
        if not directives:
            return None
        return InterfaceTypeDefinitionNode(
            name=NameNode(value=name),
            directives=self.create_directive_nodes(directives),
            interfaces=(),
            fields=(),
        )

    def create_field_node(
        self, name: str, type_: GraphQLType, directives: Sequence[DirectiveMetadata] | None
    ) -> FieldDefinitionNode | None:
        if not directives:
            return None
        return FieldDefinitionNode(
            name=NameNode(value=name),
            type=parse_type(str(type_)),
            arguments=(),
            directives=self.create_directive_nodes(directives),
        )

    def create_input_value_node(
        self, name: str, type_: GraphQLType, directives: Sequence[DirectiveMetadata] | None
    ) -> InputValueDefinitionNode | None:
        if not directives:
            return None
        return InputValueDefinitionNode(
            name=NameNode(value=name),
            type=parse_type(str(type_)),
            directives=self.create_directive_nodes(directives),
        )

    def create_directive_nodes(self, directives: Sequence[DirectiveMetadata]) -> tuple[DirectiveNode, ...]:
        return tuple(self.create_directive_node(directive) for directive in directives)

    @staticmethod
    def create_directive_node(directive: DirectiveMetadata) -> DirectiveNode:
        # a lone directive cannot be parsed, wrap it in a type extension
        document = parse(f"extend type Dummy {directive.sdl}", no_location=True)
        definition = document.definitions[0]
        assert isinstance(definition, ObjectTypeExtensionNode)
        return definition.directives[0]
