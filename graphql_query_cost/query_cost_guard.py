# Copyright 2019-present Kensho Technologies, LLC.
"""Estimate the cost of incoming requests, and block the ones that are too expensive."""
from dataclasses import dataclass, field
import logging
import random
import time
from typing import Any, Callable, Mapping, Optional

from graphql import GraphQLSchema
from graphql.language.ast import DocumentNode
from graphql.language.printer import print_ast

from .caching import LruMap, get_query_cost_cache_key
from .cost_estimation.directive_costs import validate_directive_costs
from .cost_estimation.query_cost import calculate_document_cost
from .exceptions import QueryCostConfigurationError, QueryCostError, QueryCostTooHighError


logger = logging.getLogger(__name__)


DEFAULT_QUERY_CACHE_SIZE = 1000


@dataclass(frozen=True)
class QueryCostConfig:
    """Settings for estimating, and possibly blocking on, the cost of requests."""

    # Requests whose cost is strictly larger than this are considered too expensive.
    cost_threshold: float

    # The fraction of requests to cost, between 0 and 1. Costing every request is the only way
    # to guarantee expensive requests are blocked, so it must be 1 when blocking is enabled.
    sample_rate: float = 1.0

    # Whether to reject requests that are too expensive, or only report their cost.
    block_on_high_query_cost: bool = False

    # How many computed costs to remember. Zero disables caching.
    query_cache_size: int = DEFAULT_QUERY_CACHE_SIZE

    # Directive name -> fixed cost of every item produced by fields whose schema definition
    # carries that directive.
    directive_costs: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate fields."""
        if not 0 <= self.sample_rate <= 1:
            raise QueryCostConfigurationError(
                "Sample rate should be >= 0 and <= 1, got {}".format(self.sample_rate)
            )
        if self.sample_rate < 1 and self.block_on_high_query_cost:
            raise QueryCostConfigurationError(
                "Sample rate cannot be < 1 if blocking on high query cost is enabled, "
                "got {}".format(self.sample_rate)
            )
        if self.query_cache_size < 0:
            raise QueryCostConfigurationError(
                "Query cache size cannot be negative, got {}".format(self.query_cache_size)
            )
        if self.cost_threshold < 0:
            raise QueryCostConfigurationError(
                "Cost threshold cannot be negative, got {}".format(self.cost_threshold)
            )
        validate_directive_costs(self.directive_costs)


class QueryCostObserver(object):
    """Receives notifications about the cost estimation of requests.

    All hooks do nothing by default; subclass and override the ones of interest, e.g. to emit
    metrics. Exceptions raised by hooks are not caught.
    """

    def on_cache_hit(self, cache_key: str) -> None:
        """Called when the cost of a request was found in the cache."""

    def on_cache_miss(self, cache_key: str) -> None:
        """Called when the cost of a request was not cached, and is about to be calculated."""

    def on_cost_calculated(
        self, cost: float, document_ast: DocumentNode, duration_ms: float
    ) -> None:
        """Called after the cost of a request was calculated, with how long that took."""

    def on_error(self, error: QueryCostError) -> None:
        """Called when the cost of a request could not be calculated."""

    def on_blocked_request(self, cost: float, threshold: float) -> None:
        """Called right before a request is rejected for being too expensive."""


def _get_query_string(document_ast: DocumentNode) -> str:
    """Return the text the document was parsed from, or its printed form if it has no source."""
    if document_ast.loc is not None and document_ast.loc.source is not None:
        return document_ast.loc.source.body
    return print_ast(document_ast)


class QueryCostGuard(object):
    """Cost incoming requests against a schema, caching costs and blocking expensive requests."""

    def __init__(
        self,
        schema: GraphQLSchema,
        config: QueryCostConfig,
        observer: Optional[QueryCostObserver] = None,
        random_source: Callable[[], float] = random.random,
    ) -> None:
        """Create a guard costing requests against the given schema.

        Args:
            schema: schema the requests are written against
            config: settings for costing and blocking requests
            observer: notified about cache usage, costs, errors and blocked requests
            random_source: returns a uniformly random float in [0, 1), used to sample requests
        """
        self.schema = schema
        self.config = config
        self.observer = QueryCostObserver() if observer is None else observer
        self.random_source = random_source
        self.cached_costs: LruMap[str, float] = LruMap(config.query_cache_size)

    def get_cost(
        self, document_ast: DocumentNode, variables: Optional[Mapping[str, Any]] = None
    ) -> float:
        """Return the cost of the document with the given variables, using the cache if possible.

        A cached cost is returned as-is: the document is not validated again.

        Raises:
            QueryCostError, if the document is not cached and cannot be costed
        """
        cache_key = get_query_cost_cache_key(_get_query_string(document_ast), variables)

        cached_cost = self.cached_costs.get(cache_key)
        if cached_cost is not None:
            logger.debug("Query cost cache hit for key %s.", cache_key)
            self.observer.on_cache_hit(cache_key)
            return cached_cost

        logger.debug("Query cost cache miss for key %s.", cache_key)
        self.observer.on_cache_miss(cache_key)

        start_time = time.perf_counter()
        cost = calculate_document_cost(
            self.schema, document_ast, variables, self.config.directive_costs
        )
        duration_ms = (time.perf_counter() - start_time) * 1000

        self.cached_costs.set(cache_key, cost)
        logger.debug(
            "Calculated query cost %(cost)s in %(duration_ms).3f ms.",
            {"cost": cost, "duration_ms": duration_ms},
        )
        self.observer.on_cost_calculated(cost, document_ast, duration_ms)
        return cost

    def check_request(
        self, document_ast: DocumentNode, variables: Optional[Mapping[str, Any]] = None
    ) -> Optional[float]:
        """Cost a sample of the requests, blocking the ones that are too expensive if configured.

        Requests that cannot be costed are let through: the failure is logged and reported to the
        observer, and the GraphQL server is left to reject the request if it is invalid.

        Args:
            document_ast: the parsed and validated request document
            variables: variable name -> raw value, as supplied with the request

        Returns:
            the cost of the request, or None if the request was not sampled or could not be costed

        Raises:
            QueryCostTooHighError, if blocking is enabled and the cost is above the threshold
        """
        if self.random_source() > self.config.sample_rate:
            return None

        try:
            cost = self.get_cost(document_ast, variables)
        except QueryCostError as e:
            logger.exception("Could not calculate the cost of the request.")
            self.observer.on_error(e)
            return None

        threshold = self.config.cost_threshold
        if self.config.block_on_high_query_cost and cost > threshold:
            logger.warning(
                "Blocking request with cost %(cost)s above threshold %(threshold)s.",
                {"cost": cost, "threshold": threshold},
            )
            self.observer.on_blocked_request(cost, threshold)
            raise QueryCostTooHighError(cost, threshold)

        return cost
