# Copyright 2019-present Kensho Technologies, LLC.
"""Helpers for reading and rewriting GraphQL AST objects using structural sharing."""
from copy import copy
from typing import Dict, FrozenSet, List

from graphql.error import GraphQLSyntaxError
from graphql.language.ast import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionNode,
    SelectionSetNode,
)
from graphql.language.parser import parse

from .exceptions import GraphQLParsingError, GraphQLValidationError


def get_ast_field_name(ast: FieldNode) -> str:
    """Return the field name for the given AST node."""
    return ast.name.value


def get_human_friendly_ast_field_name(ast) -> str:
    """Return a human-friendly name for the AST node, suitable for error messages."""
    if isinstance(ast, InlineFragmentNode):
        if ast.type_condition is None:
            return "inline fragment"
        return "type coercion to {}".format(ast.type_condition.name.value)
    elif isinstance(ast, OperationDefinitionNode):
        return "{} operation definition".format(ast.operation.value)

    return get_ast_field_name(ast)


def safe_parse_graphql(graphql_string: str) -> DocumentNode:
    """Return an AST representation of the given GraphQL input, reraising GraphQL library errors."""
    try:
        ast = parse(graphql_string)
    except GraphQLSyntaxError as e:
        raise GraphQLParsingError(e) from e

    return ast


def _get_fragment_definitions_by_name(
    document_ast: DocumentNode,
) -> Dict[str, FragmentDefinitionNode]:
    """Return a dict of fragment name -> fragment definition, checking that names are unique."""
    fragment_definitions: Dict[str, FragmentDefinitionNode] = {}
    for definition in document_ast.definitions:
        if isinstance(definition, FragmentDefinitionNode):
            fragment_name = definition.name.value
            if fragment_name in fragment_definitions:
                raise GraphQLValidationError(
                    'There can be only one fragment named "{}".'.format(fragment_name)
                )
            fragment_definitions[fragment_name] = definition
    return fragment_definitions


def _inline_fragment_spreads_in_selection(
    fragment_definitions: Dict[str, FragmentDefinitionNode],
    selection: SelectionNode,
    spread_fragment_names: FrozenSet[str],
) -> SelectionNode:
    """Return the selection with every fragment spread inside it replaced by an inline fragment.

    Args:
        fragment_definitions: fragment name -> fragment definition, for the whole document
        selection: the selection to rewrite. It is not modified by this function.
        spread_fragment_names: names of the fragments whose bodies enclose this selection,
                               used to detect fragments that (indirectly) spread themselves

    Returns:
        SelectionNode equivalent to the input, with no fragment spreads remaining anywhere within
        it. If no changes were necessary, this is the same object as the input selection.
    """
    if isinstance(selection, FragmentSpreadNode):
        fragment_name = selection.name.value
        if fragment_name in spread_fragment_names:
            raise GraphQLValidationError(
                'Cannot spread fragment "{}" within itself.'.format(fragment_name)
            )
        fragment_definition = fragment_definitions.get(fragment_name)
        if fragment_definition is None:
            raise GraphQLValidationError('Unknown fragment "{}".'.format(fragment_name))

        inlined_fragment = InlineFragmentNode(
            type_condition=fragment_definition.type_condition,
            directives=selection.directives,
            selection_set=fragment_definition.selection_set,
        )
        return _inline_fragment_spreads_in_selection(
            fragment_definitions, inlined_fragment, spread_fragment_names | {fragment_name}
        )
    elif isinstance(selection, (FieldNode, InlineFragmentNode)):
        if selection.selection_set is None:
            return selection

        new_selection_set = _inline_fragment_spreads_in_selection_set(
            fragment_definitions, selection.selection_set, spread_fragment_names
        )
        if new_selection_set is selection.selection_set:
            return selection

        new_selection = copy(selection)
        new_selection.selection_set = new_selection_set
        return new_selection
    else:
        raise AssertionError(
            "Unexpected selection type received: {} {}".format(type(selection), selection)
        )


def _inline_fragment_spreads_in_selection_set(
    fragment_definitions: Dict[str, FragmentDefinitionNode],
    selection_set: SelectionSetNode,
    spread_fragment_names: FrozenSet[str],
) -> SelectionSetNode:
    """Return the selection set with all fragment spreads inlined, or the input if unchanged."""
    made_changes = False
    new_selections: List[SelectionNode] = []
    for selection in selection_set.selections:
        new_selection = _inline_fragment_spreads_in_selection(
            fragment_definitions, selection, spread_fragment_names
        )
        if new_selection is not selection:
            made_changes = True
        new_selections.append(new_selection)

    if not made_changes:
        return selection_set

    new_selection_set = copy(selection_set)
    new_selection_set.selections = tuple(new_selections)
    return new_selection_set


# ############
# Public API #
# ############


def inline_fragment_spreads(document_ast: DocumentNode) -> DocumentNode:
    """Return a document where every named fragment spread is replaced by an inline fragment.

    Each spread "...F" becomes "... on T { <selections of F> }", where T is the type condition
    of fragment F. Fragment definitions are not part of the returned document, so fragments that
    are never spread do not appear in it at all, and a fragment spread twice appears twice.

    Args:
        document_ast: GraphQL document, possibly containing fragment definitions and spreads.
                      It is not modified by this function.

    Returns:
        DocumentNode containing only the operation definitions of the input document, with no
        fragment spreads remaining. Unchanged operation definitions are shared with the input.

    Raises:
        GraphQLValidationError, if a spread names an undefined fragment, if two fragments share
        a name, if fragments spread each other in a cycle, or if the document contains
        non-executable definitions such as type definitions.
    """
    fragment_definitions = _get_fragment_definitions_by_name(document_ast)

    new_definitions: List[OperationDefinitionNode] = []
    for definition in document_ast.definitions:
        if isinstance(definition, FragmentDefinitionNode):
            continue
        if not isinstance(definition, OperationDefinitionNode):
            raise GraphQLValidationError(
                "Only operation and fragment definitions can be costed, but found: {}".format(
                    type(definition).__name__
                )
            )

        new_selection_set = _inline_fragment_spreads_in_selection_set(
            fragment_definitions, definition.selection_set, frozenset()
        )
        if new_selection_set is definition.selection_set:
            new_definitions.append(definition)
        else:
            new_definition = copy(definition)
            new_definition.selection_set = new_selection_set
            new_definitions.append(new_definition)

    return DocumentNode(definitions=new_definitions, loc=document_ast.loc)

