# Copyright 2019-present Kensho Technologies, LLC.
from hashlib import sha256
import json
from typing import Any, Mapping, Optional

import funcy
from graphql.error import GraphQLSyntaxError
from graphql.utilities import strip_ignored_characters

from ..cost_estimation.pagination import PAGINATION_ARGUMENT_NAMES
from ..exceptions import GraphQLParsingError


# Separates the query text from the variables in the hashed cache key content.
CACHE_KEY_SEPARATOR = "|"


def _get_canonical_pagination_variables(variables: Optional[Mapping[str, Any]]) -> str:
    """Serialize the pagination variables in a way that does not depend on key order."""
    # Other variables, like cursors, change with every request but do not affect the cost.
    # Leaving them out lets requests for different pages share one cache entry.
    pagination_variables = funcy.project(dict(variables or {}), PAGINATION_ARGUMENT_NAMES)
    return json.dumps(pagination_variables, sort_keys=True, separators=(",", ":"), default=str)


def get_query_cost_cache_key(query_string: str, variables: Optional[Mapping[str, Any]]) -> str:
    """Return the key under which the cost of the query with the given variables is cached.

    The key is the same for queries that differ only in whitespace, commas or comments, and for
    variables that differ only in key order or in variables other than "first" and "last".

    Args:
        query_string: GraphQL document text
        variables: variable name -> raw value, as supplied with the request

    Returns:
        hex digest of the normalized query text and its pagination variables

    Raises:
        GraphQLParsingError, if the query string cannot even be split into GraphQL tokens
    """
    try:
        normalized_query_string = strip_ignored_characters(query_string)
    except GraphQLSyntaxError as e:
        raise GraphQLParsingError(e) from e

    cache_key_content = CACHE_KEY_SEPARATOR.join(
        (normalized_query_string, _get_canonical_pagination_variables(variables))
    )
    return sha256(cache_key_content.encode("utf-8")).hexdigest()
