# Copyright 2019-present Kensho Technologies, LLC.
"""Query cost estimator.

Purpose
=======

Some GraphQL queries are far more expensive to execute than they look. Nested pagination
arguments compound: asking for the first 100 items of a connection, and then the first 100 items
of a connection within each of those, fetches 10000 items from the backends. Limits on query depth
or on the number of selected fields do not see this load at all.

In order to reject or throttle such queries before they run, we assign every query a predicted
execution *cost*, computed from the query alone, its variables, and the schema it is written
against.

Estimating Cost
===============

Every selected field costs its *item cost* times its *pagination factor*:
    - The item cost is 1, unless the field's schema definition carries a directive configured
      with a fixed cost (e.g. a field marked as always returning a short list).
    - The pagination factor is the number of times the field is expected to be fetched: the
      product of the "first" or "last" arguments of all the fields enclosing it.

Example:
    Given the query
    {
        resources(first: 10) {
            conn(last: 50) {
                name
            }
        }
    }
    we estimate cost as follows:
        resources = 1 * 1
        conn      = 1 * 10
        name      = 1 * 10 * 50
    for a total cost of 511.

Type-conditioned branches (inline fragments and spreads of fragments on another type) only apply
when the runtime object is of the named type, so sibling branches never execute together. Each
branch is summed up on its own, and only the most expensive sibling branch counts towards the
cost of the enclosing field. Finally, mutations put more load on the datastores, so each
mutation adds a fixed surcharge of 10.

Caching
=======

The same queries tend to be sent over and over, with only their cursors changing. The computed
cost of a query is cached under a key derived from the query text with insignificant characters
stripped, together with the values of the "first" and "last" variables only. The cache is a
bounded map that evicts the least-recently-used cost when it is full.
"""
