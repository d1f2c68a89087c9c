# Copyright 2019-present Kensho Technologies, LLC.
from typing import Mapping, Optional

from graphql import TypeInfo

from ..exceptions import QueryCostConfigurationError


# The cost of a field whose definition has no cost-configured directive.
DEFAULT_FIELD_ITEM_COST = 1


def validate_directive_costs(directive_costs: Mapping[str, float]) -> None:
    """Ensure every configured directive cost is a positive number.

    Raises:
        QueryCostConfigurationError, if any directive cost is not a positive number
    """
    for directive_name, directive_cost in directive_costs.items():
        is_number = isinstance(directive_cost, (int, float)) and not isinstance(
            directive_cost, bool
        )
        if not is_number or directive_cost <= 0:
            raise QueryCostConfigurationError(
                'Directive "{}" must be configured with a positive cost, but got: {}'.format(
                    directive_name, directive_cost
                )
            )


def get_directive_cost(
    type_info: TypeInfo, directive_costs: Mapping[str, float]
) -> Optional[float]:
    """Return the configured cost of the current field's definition directives, if any.

    Args:
        type_info: graphql-core TypeInfo, positioned at the field being costed
        directive_costs: directive name -> fixed cost of every item the field produces

    Returns:
        the largest cost configured for any directive on the schema definition of the current
        field, or None if the field is not in the schema or has no cost-configured directives.
        Directives are only visible on schemas built from SDL, since programmatically built
        fields carry no definition AST.
    """
    field_definition = type_info.get_field_def()
    if field_definition is None or field_definition.ast_node is None:
        return None

    directive_cost = None
    for directive in field_definition.ast_node.directives or []:
        cost = directive_costs.get(directive.name.value)
        if cost is not None and (directive_cost is None or cost > directive_cost):
            directive_cost = cost
    return directive_cost


def get_field_item_cost(type_info: TypeInfo, directive_costs: Mapping[str, float]) -> float:
    """Return the cost of every item produced by the current field, before pagination."""
    directive_cost = get_directive_cost(type_info, directive_costs)
    if directive_cost is None:
        return DEFAULT_FIELD_ITEM_COST
    return directive_cost
