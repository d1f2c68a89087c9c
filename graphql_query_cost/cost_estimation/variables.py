# Copyright 2019-present Kensho Technologies, LLC.
from typing import Any, Dict, List, Mapping, Optional, Tuple

from graphql import GraphQLError, GraphQLSchema
from graphql.execution.values import get_variable_values
from graphql.language.ast import OperationDefinitionNode


def coerce_operation_variables(
    schema: GraphQLSchema,
    operation: OperationDefinitionNode,
    request_variables: Optional[Mapping[str, Any]],
) -> Tuple[Dict[str, Any], List[GraphQLError]]:
    """Coerce the request's variables according to the operation's variable definitions.

    Args:
        schema: schema the operation is written against
        operation: operation whose variable definitions drive the coercion
        request_variables: variable name -> raw value, as supplied with the request. Values for
                           variables the operation does not define are ignored.

    Returns:
        tuple (coerced_variables, errors):
        - coerced_variables: dict, variable name -> coerced value. Empty if coercion failed.
        - errors: list of GraphQLErrors describing why coercion failed, empty on success
    """
    coerced_or_errors = get_variable_values(
        schema, list(operation.variable_definitions or []), dict(request_variables or {})
    )
    if isinstance(coerced_or_errors, list):
        return {}, coerced_or_errors
    return coerced_or_errors, []
