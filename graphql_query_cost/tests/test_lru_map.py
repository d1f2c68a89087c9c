# Copyright 2019-present Kensho Technologies, LLC.
import unittest

from ..caching.lru_map import LruMap


class LruMapTests(unittest.TestCase):
    def test_get_and_set(self) -> None:
        lru_map: LruMap[str, int] = LruMap(2)
        self.assertIsNone(lru_map.get("a"))

        lru_map.set("a", 1)
        self.assertEqual(1, lru_map.get("a"))
        self.assertEqual(1, len(lru_map))

        lru_map.set("a", 2)
        self.assertEqual(2, lru_map.get("a"))
        self.assertEqual(1, len(lru_map))

    def test_falsy_values_are_cached(self) -> None:
        lru_map: LruMap[str, int] = LruMap(1)
        lru_map.set("a", 0)
        self.assertEqual(0, lru_map.get("a"))

    def test_evicts_least_recently_inserted(self) -> None:
        lru_map: LruMap[str, int] = LruMap(2)
        lru_map.set("a", 1)
        lru_map.set("b", 2)
        lru_map.set("c", 3)

        self.assertEqual(2, len(lru_map))
        self.assertIsNone(lru_map.get("a"))
        self.assertEqual(2, lru_map.get("b"))
        self.assertEqual(3, lru_map.get("c"))

    def test_get_renews_recency(self) -> None:
        lru_map: LruMap[str, int] = LruMap(2)
        lru_map.set("a", 1)
        lru_map.set("b", 2)
        self.assertEqual(1, lru_map.get("a"))
        lru_map.set("c", 3)

        self.assertNotIn("b", lru_map)
        self.assertEqual(1, lru_map.get("a"))
        self.assertEqual(3, lru_map.get("c"))

    def test_set_renews_recency(self) -> None:
        lru_map: LruMap[str, int] = LruMap(2)
        lru_map.set("a", 1)
        lru_map.set("b", 2)
        lru_map.set("a", 10)
        lru_map.set("c", 3)

        self.assertNotIn("b", lru_map)
        self.assertEqual(10, lru_map.get("a"))

    def test_contains_does_not_renew_recency(self) -> None:
        lru_map: LruMap[str, int] = LruMap(2)
        lru_map.set("a", 1)
        lru_map.set("b", 2)
        self.assertIn("a", lru_map)
        lru_map.set("c", 3)

        self.assertNotIn("a", lru_map)
        self.assertIn("b", lru_map)
        self.assertIn("c", lru_map)

    def test_zero_capacity(self) -> None:
        lru_map: LruMap[str, int] = LruMap(0)
        lru_map.set("a", 1)
        self.assertIsNone(lru_map.get("a"))
        self.assertEqual(0, len(lru_map))

    def test_negative_capacity(self) -> None:
        with self.assertRaises(AssertionError):
            LruMap(-1)
