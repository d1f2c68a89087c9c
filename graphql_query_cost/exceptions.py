# Copyright 2017-present Kensho Technologies, LLC.
from typing import Sequence

from graphql.error import GraphQLError


class QueryCostError(Exception):
    """Generic error when estimating the cost of a GraphQL query."""


class GraphQLParsingError(QueryCostError):
    """Exception raised when the provided GraphQL string could not be parsed."""


class GraphQLValidationError(QueryCostError):
    """Exception raised when the provided GraphQL does not validate against the provided schema.

    This also covers documents whose fragments cannot be resolved, e.g. a spread of an undefined
    fragment or fragments that spread each other in a cycle.
    """


class UnsupportedOperationError(QueryCostError):
    """Exception raised when the document contains an operation that cannot be costed.

    Only "query" and "mutation" operations have a cost; subscriptions are rejected.
    """


class QueryCostCalculationError(QueryCostError):
    """Exception raised when one or more errors were found while costing a document.

    The cost calculation does not stop at the first problem it finds. Every error found in a single
    traversal is collected and reported together through this exception.
    """

    def __init__(self, errors: Sequence[GraphQLError]) -> None:
        """Create an error describing all the given GraphQL errors."""
        self.errors = list(errors)
        super(QueryCostCalculationError, self).__init__(
            ", ".join(error.message for error in self.errors)
        )


class QueryCostTooHighError(QueryCostError):
    """Exception raised when a request is blocked because its estimated cost is too high."""

    def __init__(self, cost: float, threshold: float) -> None:
        """Create an error describing the blocked request."""
        self.cost = cost
        self.threshold = threshold
        super(QueryCostTooHighError, self).__init__(
            "Blocked request because calculated cost too high. "
            "Calculated: {}, threshold {}".format(cost, threshold)
        )


class QueryCostConfigurationError(QueryCostError):
    """Exception raised when the query cost configuration is invalid.

    For example:
    - the sample rate may be outside the [0, 1] range;
    - blocking may be enabled while only a sample of the requests is costed;
    - a directive may be configured with a non-positive cost.
    """


class ConflictingPaginationArgumentsError(GraphQLError):
    """A field was paginated with both "first" and "last" arguments, so it cannot be costed."""


class MalformedPaginationLiteralError(GraphQLError):
    """A literal "first" or "last" argument value is not a valid non-negative integer."""
