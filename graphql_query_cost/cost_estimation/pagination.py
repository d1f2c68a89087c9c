# Copyright 2019-present Kensho Technologies, LLC.
"""Compute how many items a field is expected to produce, based on pagination arguments."""
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from graphql.error import GraphQLError
from graphql.language.ast import ArgumentNode, FieldNode, IntValueNode, Node, VariableNode

from ..ast_manipulation import get_ast_field_name
from ..exceptions import ConflictingPaginationArgumentsError, MalformedPaginationLiteralError


FIRST_ARGUMENT_NAME = "first"
LAST_ARGUMENT_NAME = "last"
PAGINATION_ARGUMENT_NAMES = frozenset((FIRST_ARGUMENT_NAME, LAST_ARGUMENT_NAME))

# An entry of the "ancestors" list produced by the graphql-core visitor. Besides AST nodes, the
# visitor records the lists that hold sibling nodes (e.g. the selections of a selection set).
Ancestor = Union[Node, Sequence[Node]]


def _is_valid_pagination_count(value: Any) -> bool:
    """Return True if the value can be used as a count of paginated items."""
    # bool is a subclass of int, but True and False are not item counts.
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _get_pagination_argument_value(
    field: FieldNode, argument: ArgumentNode, variables: Mapping[str, Any]
) -> Tuple[Optional[int], Optional[GraphQLError]]:
    """Return the number of items the pagination argument asks for, or an error if it's malformed.

    Args:
        field: the field the argument is applied to
        argument: a "first" or "last" argument
        variables: coerced variable values of the operation being costed

    Returns:
        tuple (value, error) where at most one of the two elements is not None:
        - value: int, the number of requested items, or None if the argument does not contribute
                 to the pagination factor
        - error: GraphQLError describing why a literal pagination value is invalid, or None
    """
    value_node = argument.value
    if isinstance(value_node, IntValueNode):
        try:
            value = int(value_node.value, 10)
        except ValueError:
            value = None

        if value is None or not _is_valid_pagination_count(value):
            return None, MalformedPaginationLiteralError(
                'Unexpected non-count value "{}" for argument "{}" of field "{}".'.format(
                    value_node.value, argument.name.value, get_ast_field_name(field)
                ),
                argument,
            )
        return value, None
    elif isinstance(value_node, VariableNode):
        # Not every argument named "first" or "last" is a pagination parameter. If the variable
        # does not hold an item count, we leave it out of the pagination calculation.
        value = variables.get(value_node.name.value)
        if _is_valid_pagination_count(value):
            return value, None
        return None, None
    else:
        return None, None


def get_field_pagination_count(
    field: FieldNode, variables: Mapping[str, Any]
) -> Tuple[int, List[GraphQLError]]:
    """Return the number of items the field's own pagination arguments request.

    Args:
        field: the field whose "first" and "last" arguments are examined
        variables: coerced variable values of the operation being costed

    Returns:
        tuple (count, errors):
        - count: int, the product of the field's pagination argument values, or 1 if the field
                 has no pagination arguments that resolve to item counts
        - errors: list of GraphQLErrors describing malformed or conflicting pagination arguments
    """
    count = 1
    errors: List[GraphQLError] = []
    seen_argument_names = set()
    for argument in field.arguments or []:
        argument_name = argument.name.value
        if argument_name not in PAGINATION_ARGUMENT_NAMES:
            continue
        seen_argument_names.add(argument_name)

        value, error = _get_pagination_argument_value(field, argument, variables)
        if error is not None:
            errors.append(error)
        if value is not None:
            # Conflicting arguments are reported separately, and still both count here.
            count *= value

    if seen_argument_names == PAGINATION_ARGUMENT_NAMES:
        errors.append(
            ConflictingPaginationArgumentsError(
                'Received both "first" and "last" arguments on field "{}", '
                "cannot cost it.".format(get_ast_field_name(field)),
                field,
            )
        )

    return count, errors


def get_pagination_factor(
    ancestors: Sequence[Ancestor], variables: Mapping[str, Any]
) -> Tuple[int, List[GraphQLError]]:
    """Compute the number of items a field and its subtree are expected to be fetched for.

    Pagination arguments compound with depth. For example, given the query
        resources(first: 50) {
            foo
            conn(last: 10) {
                bar
            }
        }
    the pagination factors are:
        resources: 1
        foo:       50
        conn:      50
        bar:       500

    Only field ancestors are taken into account. The visitor's ancestors also include the lists
    that hold sibling selections; those are not fields, and treating them as such would multiply
    together the arguments of sibling fields that are supposed to be summed.

    Args:
        ancestors: the ancestors of the field being costed, as recorded by the graphql-core
                   visitor, ordered from the document root down to the field's parent
        variables: coerced variable values of the operation being costed

    Returns:
        tuple (factor, errors):
        - factor: int, the product of the pagination counts of all field ancestors
        - errors: list of GraphQLErrors found in the pagination arguments of the ancestors
    """
    factor = 1
    errors: List[GraphQLError] = []
    for ancestor in ancestors:
        if not isinstance(ancestor, FieldNode):
            continue

        count, ancestor_errors = get_field_pagination_count(ancestor, variables)
        factor *= count
        errors.extend(ancestor_errors)

    return factor, errors
