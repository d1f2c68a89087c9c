# Copyright 2019-present Kensho Technologies, LLC.
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

from graphql import GraphQLError, GraphQLSchema, TypeInfo, TypeInfoVisitor, Visitor, validate, visit
from graphql.language.ast import (
    DocumentNode,
    FieldNode,
    InlineFragmentNode,
    OperationDefinitionNode,
    OperationType,
)

from ..ast_manipulation import (
    get_human_friendly_ast_field_name,
    inline_fragment_spreads,
    safe_parse_graphql,
)
from ..exceptions import (
    GraphQLValidationError,
    QueryCostCalculationError,
    UnsupportedOperationError,
)
from .directive_costs import get_field_item_cost, validate_directive_costs
from .pagination import get_field_pagination_count, get_pagination_factor
from .variables import coerce_operation_variables


SUPPORTED_OPERATIONS = frozenset((OperationType.QUERY, OperationType.MUTATION))

# Mutations put more load on the datastores than queries, so every mutation costs a bit extra.
MUTATION_COST = 10

CostScopeNode = Union[FieldNode, InlineFragmentNode, OperationDefinitionNode]


@dataclass
class CostScope:
    """Running costs of an operation, field or type-conditioned branch whose subtree is visited."""

    node: CostScopeNode

    # The pagination factor times the item cost of the field. Zero for non-field scopes.
    own_cost: float = 0

    # The sum of the own costs of fields directly within this scope. Only type-conditioned
    # branches consume it: other scopes add their fields' own costs to the total straight away.
    direct_field_cost: float = 0

    # The largest aggregate cost among the type-conditioned branches directly within this scope.
    max_branch_cost: float = 0

    @property
    def is_type_conditioned_branch(self) -> bool:
        """Return True if this scope only applies when the runtime type matches its condition."""
        return isinstance(self.node, InlineFragmentNode)

    @property
    def branch_cost(self) -> float:
        """Return the aggregate cost of this scope when seen as a branch by its enclosing scope."""
        return self.direct_field_cost + self.max_branch_cost


class QueryCostVisitor(Visitor):
    """Accumulate the cost of every operation in a document whose fragment spreads are inlined."""

    def __init__(
        self,
        schema: GraphQLSchema,
        type_info: TypeInfo,
        request_variables: Optional[Mapping[str, Any]],
        directive_costs: Mapping[str, float],
    ) -> None:
        """Create a visitor for costing the operations of a document.

        Args:
            schema: schema the document is written against
            type_info: used to keep track of the schema types and field definitions while
                       traversing the AST. Must be the same TypeInfo the TypeInfoVisitor wrapping
                       this visitor updates.
            request_variables: variable name -> raw value, as supplied with the request
            directive_costs: directive name -> fixed cost of every item produced by fields whose
                             definition carries that directive
        """
        super(QueryCostVisitor, self).__init__()
        self.schema = schema
        self.type_info = type_info
        self.request_variables = request_variables
        self.directive_costs = directive_costs

        self.total_cost: float = 0
        self.errors: List[GraphQLError] = []

        # The coerced variables of the operation currently being visited.
        self._variables: Dict[str, Any] = {}

        # Scopes enclosing the node currently being visited, innermost last.
        self._scopes: List[CostScope] = []

        # (error type, message, ids of offending nodes) of every error reported so far.
        self._reported_error_keys: Set[Tuple[Any, ...]] = set()

    def enter_operation_definition(
        self,
        node: OperationDefinitionNode,
        key: Any,
        parent: Any,
        path: List[Any],
        ancestors: List[Any],
    ) -> None:
        """Check the operation is supported, and coerce the variables it defines."""
        if node.operation not in SUPPORTED_OPERATIONS:
            raise UnsupportedOperationError(
                'Can only calculate cost for "query" and "mutation" operations, '
                'got "{}".'.format(node.operation.value)
            )
        if node.operation == OperationType.MUTATION:
            self.total_cost += MUTATION_COST

        self._variables, coercion_errors = coerce_operation_variables(
            self.schema, node, self.request_variables
        )
        self._report_errors(coercion_errors)
        self._scopes.append(CostScope(node))

    def leave_operation_definition(
        self,
        node: OperationDefinitionNode,
        key: Any,
        parent: Any,
        path: List[Any],
        ancestors: List[Any],
    ) -> None:
        """Add the most expensive type-conditioned branch at the operation root."""
        scope = self._pop_scope(node)
        if self._scopes:
            raise AssertionError(
                "Unexpectedly found unfinished scopes after leaving {}: {}".format(
                    get_human_friendly_ast_field_name(node), self._scopes
                )
            )
        self.total_cost += scope.max_branch_cost
        self._variables = {}

    def enter_field(
        self, node: FieldNode, key: Any, parent: Any, path: List[Any], ancestors: List[Any]
    ) -> None:
        """Compute the field's own cost from its pagination factor and its item cost."""
        factor, ancestor_errors = get_pagination_factor(ancestors, self._variables)
        _, own_errors = get_field_pagination_count(node, self._variables)
        # Each ancestor's arguments are examined again for every field below it, and every field
        # has already reported its own argument errors when it was entered.
        self._report_errors(ancestor_errors)
        self._report_errors(own_errors)

        item_cost = get_field_item_cost(self.type_info, self.directive_costs)
        self._scopes.append(CostScope(node, own_cost=factor * item_cost))

    def leave_field(
        self, node: FieldNode, key: Any, parent: Any, path: List[Any], ancestors: List[Any]
    ) -> None:
        """Add the field's own cost and its most expensive type-conditioned branch to the total."""
        scope = self._pop_scope(node)
        enclosing_scope = self._get_current_scope()
        if enclosing_scope.is_type_conditioned_branch:
            # Fields of a type-conditioned branch are costed as part of that branch's aggregate.
            enclosing_scope.direct_field_cost += scope.own_cost
        else:
            self.total_cost += scope.own_cost
        self.total_cost += scope.max_branch_cost

    def enter_inline_fragment(
        self,
        node: InlineFragmentNode,
        key: Any,
        parent: Any,
        path: List[Any],
        ancestors: List[Any],
    ) -> None:
        """Open a new scope if the fragment is a type-conditioned branch."""
        if self._is_type_conditioned_branch(node):
            self._scopes.append(CostScope(node))

    def leave_inline_fragment(
        self,
        node: InlineFragmentNode,
        key: Any,
        parent: Any,
        path: List[Any],
        ancestors: List[Any],
    ) -> None:
        """Offer the branch's aggregate cost to the enclosing scope, which keeps the largest one.

        Sibling type-conditioned branches are mutually exclusive at runtime, so only the most
        expensive one counts. Within a branch, all fields are summed, and nested branches again
        contribute only their most expensive member.
        """
        if self._get_current_scope().node is not node:
            # The fragment always applies, so its selections were costed in the enclosing scope.
            return

        scope = self._pop_scope(node)
        enclosing_scope = self._get_current_scope()
        enclosing_scope.max_branch_cost = max(enclosing_scope.max_branch_cost, scope.branch_cost)

    def _is_type_conditioned_branch(self, node: InlineFragmentNode) -> bool:
        """Return True if the fragment only applies to some of the runtime types in its scope.

        Fragments without a type condition, or conditioned on the enclosing type itself, always
        apply: their selections behave exactly as if they were selected in the enclosing scope.
        """
        if node.type_condition is None:
            return False
        parent_type = self.type_info.get_parent_type()
        return parent_type is None or parent_type.name != node.type_condition.name.value

    def _get_current_scope(self) -> CostScope:
        """Return the innermost scope enclosing the node being visited."""
        if not self._scopes:
            raise AssertionError("Unexpectedly found no enclosing scope. This is a bug.")
        return self._scopes[-1]

    def _pop_scope(self, node: CostScopeNode) -> CostScope:
        """Remove and return the innermost scope, asserting that it belongs to the given node."""
        scope = self._get_current_scope()
        if scope.node is not node:
            raise AssertionError(
                "Expected to leave the scope of {}, but the innermost scope belongs to {}.".format(
                    get_human_friendly_ast_field_name(node),
                    get_human_friendly_ast_field_name(scope.node),
                )
            )
        return self._scopes.pop()

    def _report_errors(self, errors: List[GraphQLError]) -> None:
        """Record the given errors, skipping any that have already been recorded."""
        for error in errors:
            error_key = (
                type(error),
                error.message,
                tuple(id(error_node) for error_node in error.nodes or ()),
            )
            if error_key not in self._reported_error_keys:
                self._reported_error_keys.add(error_key)
                self.errors.append(error)


def calculate_document_cost(
    schema: GraphQLSchema,
    document_ast: DocumentNode,
    variables: Optional[Mapping[str, Any]] = None,
    directive_costs: Optional[Mapping[str, float]] = None,
) -> float:
    """Estimate the cost of executing every operation in the given document.

    Every field costs its item cost (1, or the cost configured for a directive on its schema
    definition) times the number of items its ancestors are paginated to. Sibling
    type-conditioned branches only contribute their most expensive member, and every mutation
    adds a fixed surcharge. The costs of all operations in the document are summed.

    Args:
        schema: schema the document is written against
        document_ast: parsed GraphQL document. It is not modified by this function.
        variables: variable name -> raw value, as supplied with the request
        directive_costs: directive name -> fixed cost of every item produced by fields whose
                         definition carries that directive

    Returns:
        the non-negative estimated cost of the document

    Raises:
        - GraphQLValidationError if the document's fragments cannot be resolved
        - UnsupportedOperationError if the document contains an operation that is neither
          a query nor a mutation
        - QueryCostCalculationError describing every problem found while costing the document,
          such as conflicting or malformed pagination arguments, or variables that cannot be
          coerced
        - QueryCostConfigurationError if a directive is configured with a non-positive cost
    """
    if directive_costs is None:
        directive_costs = {}
    validate_directive_costs(directive_costs)

    resolved_document_ast = inline_fragment_spreads(document_ast)

    type_info = TypeInfo(schema)
    visitor = QueryCostVisitor(schema, type_info, variables, directive_costs)
    visit(resolved_document_ast, TypeInfoVisitor(type_info, visitor))

    if visitor.errors:
        raise QueryCostCalculationError(visitor.errors)

    return visitor.total_cost


def calculate_query_cost(
    schema: GraphQLSchema,
    query_string: str,
    variables: Optional[Mapping[str, Any]] = None,
    directive_costs: Optional[Mapping[str, float]] = None,
    validate_query: bool = False,
) -> float:
    """Parse the query string, then estimate its cost. See calculate_document_cost for details.

    Args:
        schema: schema the query is written against
        query_string: GraphQL document text
        variables: variable name -> raw value, as supplied with the request
        directive_costs: directive name -> fixed cost of every item produced by fields whose
                         definition carries that directive
        validate_query: whether to validate the document against the schema before costing it.
                        Hosts that cost documents their GraphQL server has already validated can
                        leave this off.

    Returns:
        the non-negative estimated cost of the query

    Raises:
        - GraphQLParsingError if the query string is not valid GraphQL syntax
        - GraphQLValidationError if validation is requested and the query does not validate
        - any error raised by calculate_document_cost
    """
    document_ast = safe_parse_graphql(query_string)

    if validate_query:
        validation_errors = validate(schema, document_ast)
        if validation_errors:
            raise GraphQLValidationError("AST does not validate: {}".format(validation_errors))

    return calculate_document_cost(schema, document_ast, variables, directive_costs)
