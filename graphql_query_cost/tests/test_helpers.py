# Copyright 2017-present Kensho Technologies, LLC.
"""Common test data and helper functions."""
from typing import Any, Dict, Optional

from graphql import GraphQLSchema, build_schema

from ..cost_estimation.query_cost import calculate_query_cost


TINYLIST_COST = 10

DIRECTIVE_COSTS = {"tinylist": TINYLIST_COST}

SCHEMA_TEXT = """
directive @tinylist on FIELD_DEFINITION

enum ThingsEnum {
  first
  second
  third
}

interface GenericResource {
  id: ID!
  foo: String!
}

interface ComputerResource implements GenericResource {
  id: ID!
  foo: String!
  serialNumber: String!
  hardwareUUID: String!
}

type WindowsComputerResource implements ComputerResource & GenericResource {
  id: ID!
  foo: String!
  serialNumber: String!
  hardwareUUID: String!
  username: String!
  computerName: String!
  otherThing: Int!
}

type MacComputerResource implements ComputerResource & GenericResource {
  id: ID!
  foo: String!
  serialNumber: String!
  hardwareUUID: String!
  version: String!
}

type EmployeeResource implements GenericResource {
  id: ID!
  foo: String!
  name: String!
  email: String!
  otherAttr: Int!
  tl: [String!]! @tinylist
}

type MiscResource implements GenericResource {
  id: ID!
  foo: String!
  thing: String!
}

type NestedConn {
  name: String!
}

type ResourceConn {
  str: String!
  tl: [String!]! @tinylist
  conn(
    first: Int
    last: Int
  ): NestedConn!
  genericResource: GenericResource!
}

type Query {
  hello: String
  world: String
  resources(
    first: Int
    last: Int
  ): ResourceConn!
  things: ThingsEnum
}

type Mutation {
  hello: String
}

type Subscription {
  hello: String
}
"""


def get_schema() -> GraphQLSchema:
    """Get a schema object for testing."""
    return build_schema(SCHEMA_TEXT)


def calculate_test_query_cost(
    schema: GraphQLSchema,
    query_string: str,
    variables: Optional[Dict[str, Any]] = None,
    validate_query: bool = False,
) -> float:
    """Cost the query against the test schema, with the test directive costs configured."""
    return calculate_query_cost(
        schema, query_string, variables, DIRECTIVE_COSTS, validate_query=validate_query
    )
