# Copyright 2019-present Kensho Technologies, LLC.
"""Cache query costs, so repeated queries are not costed again."""
from .cache_key import get_query_cost_cache_key  # noqa
from .lru_map import LruMap  # noqa
