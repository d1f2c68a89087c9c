# Copyright 2017-present Kensho Technologies, LLC.
"""Commonly-used functions and data types from this package."""
from .ast_manipulation import inline_fragment_spreads, safe_parse_graphql  # noqa
from .caching import LruMap, get_query_cost_cache_key  # noqa
from .cost_estimation.pagination import get_field_pagination_count, get_pagination_factor  # noqa
from .cost_estimation.query_cost import (  # noqa
    MUTATION_COST,
    calculate_document_cost,
    calculate_query_cost,
)
from .exceptions import (  # noqa
    ConflictingPaginationArgumentsError,
    GraphQLParsingError,
    GraphQLValidationError,
    MalformedPaginationLiteralError,
    QueryCostCalculationError,
    QueryCostConfigurationError,
    QueryCostError,
    QueryCostTooHighError,
    UnsupportedOperationError,
)
from .query_cost_guard import QueryCostConfig, QueryCostGuard, QueryCostObserver  # noqa


__package_name__ = "graphql-query-cost"
__version__ = "1.0.1"
