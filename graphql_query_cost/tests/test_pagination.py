# Copyright 2019-present Kensho Technologies, LLC.
import unittest

from graphql import parse
from graphql.language.ast import ArgumentNode, FieldNode, IntValueNode, NameNode

from ..cost_estimation.pagination import get_field_pagination_count, get_pagination_factor
from ..exceptions import ConflictingPaginationArgumentsError, MalformedPaginationLiteralError


def _get_root_field(query_string: str) -> FieldNode:
    """Return the first field selected by the first operation of the query."""
    return parse(query_string).definitions[0].selection_set.selections[0]


class PaginationCountTests(unittest.TestCase):
    def test_no_pagination_arguments(self) -> None:
        for query in ("{ resources }", "{ resources(after: 10) }", "{ resources(filter: 3) }"):
            self.assertEqual((1, []), get_field_pagination_count(_get_root_field(query), {}))

    def test_literal_arguments(self) -> None:
        field = _get_root_field("{ resources(first: 10) }")
        self.assertEqual((10, []), get_field_pagination_count(field, {}))

        field = _get_root_field("{ resources(last: 7, after: 3) }")
        self.assertEqual((7, []), get_field_pagination_count(field, {}))

        field = _get_root_field("{ resources(first: 0) }")
        self.assertEqual((0, []), get_field_pagination_count(field, {}))

    def test_variable_arguments(self) -> None:
        field = _get_root_field("query q($first: Int) { resources(first: $first) }")
        self.assertEqual((25, []), get_field_pagination_count(field, {"first": 25}))

        # Values that are not item counts are silently left out of the pagination factor.
        for value in ("25", 2.5, True, -3, None, [1]):
            self.assertEqual((1, []), get_field_pagination_count(field, {"first": value}))
        self.assertEqual((1, []), get_field_pagination_count(field, {}))

    def test_non_int_literal_arguments(self) -> None:
        for query in (
            '{ resources(first: "10") }',
            "{ resources(first: 10.5) }",
            "{ resources(first: TEN) }",
            "{ resources(first: null) }",
        ):
            self.assertEqual((1, []), get_field_pagination_count(_get_root_field(query), {}))

    def test_negative_literal_argument(self) -> None:
        field = _get_root_field("{ resources(first: -10) }")
        count, errors = get_field_pagination_count(field, {})
        self.assertEqual(1, count)
        self.assertEqual(1, len(errors))
        self.assertIsInstance(errors[0], MalformedPaginationLiteralError)

    def test_unparseable_literal_argument(self) -> None:
        field = FieldNode(
            name=NameNode(value="resources"),
            arguments=[ArgumentNode(name=NameNode(value="first"), value=IntValueNode(value="1x"))],
            directives=[],
        )
        count, errors = get_field_pagination_count(field, {})
        self.assertEqual(1, count)
        self.assertEqual(1, len(errors))
        self.assertIsInstance(errors[0], MalformedPaginationLiteralError)

    def test_both_first_and_last(self) -> None:
        field = _get_root_field("{ resources(first: 10, last: 5) }")
        count, errors = get_field_pagination_count(field, {})
        # The conflict is reported, but both arguments still contribute.
        self.assertEqual(50, count)
        self.assertEqual(1, len(errors))
        self.assertIsInstance(errors[0], ConflictingPaginationArgumentsError)
        self.assertEqual([field], errors[0].nodes)


class PaginationFactorTests(unittest.TestCase):
    def test_compounding_factor(self) -> None:
        document_ast = parse("{ resources(first: 10) { conn(last: 50) { name } } }")
        operation_ast = document_ast.definitions[0]
        resources_ast = operation_ast.selection_set.selections[0]
        conn_ast = resources_ast.selection_set.selections[0]

        ancestors = [
            document_ast,
            document_ast.definitions,
            operation_ast,
            operation_ast.selection_set,
            operation_ast.selection_set.selections,
            resources_ast,
            resources_ast.selection_set,
            resources_ast.selection_set.selections,
            conn_ast,
            conn_ast.selection_set,
        ]
        self.assertEqual((1, []), get_pagination_factor(ancestors[:5], {}))
        self.assertEqual((10, []), get_pagination_factor(ancestors[:8], {}))
        self.assertEqual((500, []), get_pagination_factor(ancestors, {}))

    def test_sibling_lists_are_not_ancestors(self) -> None:
        resources_ast = _get_root_field("{ resources { foo(first: 10) { id } bar(first: 20) } }")
        sibling_selections = resources_ast.selection_set.selections
        foo_ast = sibling_selections[0]

        # The visitor records the list holding both foo and bar before foo itself. Only foo is an
        # ancestor of the fields selected within foo.
        ancestors = [resources_ast, resources_ast.selection_set, sibling_selections, foo_ast]
        self.assertEqual((10, []), get_pagination_factor(ancestors, {}))

    def test_ancestor_errors(self) -> None:
        resources_ast = _get_root_field("{ resources(first: 2, last: 3) { str } }")
        factor, errors = get_pagination_factor([resources_ast], {})
        self.assertEqual(6, factor)
        self.assertEqual(1, len(errors))
        self.assertIsInstance(errors[0], ConflictingPaginationArgumentsError)

    def test_variables(self) -> None:
        document_ast = parse(
            "query q($first: Int, $last: Int) { a(first: $first) { b(last: $last) { c } } }"
        )
        a_ast = document_ast.definitions[0].selection_set.selections[0]
        b_ast = a_ast.selection_set.selections[0]

        self.assertEqual(
            (12, []), get_pagination_factor([a_ast, b_ast], {"first": 3, "last": 4})
        )
        self.assertEqual((4, []), get_pagination_factor([a_ast, b_ast], {"last": 4}))
