import dataclasses
import unittest
from datetime import datetime, timedelta, timezone

from posadmin.models import CategoryNode, CategoryRecord
from posadmin.validation import ValidationError


class CategoryRecordParseTests(unittest.TestCase):
    def _parse(self, **overrides):
        payload = {"category_id": "c1", "name": "Drinks"}
        payload.update(overrides)
        return CategoryRecord.from_dict(payload)

    def test_minimal_record_gets_defaults(self):
        record = self._parse()
        self.assertEqual(record.category_id, "c1")
        self.assertEqual(record.name, "Drinks")
        self.assertEqual(record.description, "")
        self.assertIsNone(record.parent_category_id)
        self.assertEqual(record.sort_order, 0)
        self.assertEqual(record.tags, ())
        self.assertEqual(record.product_count, 0)
        self.assertIsNone(record.level)
        self.assertTrue(record.is_active)
        self.assertFalse(record.display_on_main_screen)
        self.assertTrue(record.is_root)

    def test_blank_parent_means_root(self):
        self.assertIsNone(self._parse(parent_category_id="  ").parent_category_id)
        self.assertIsNone(self._parse(parent_category_id=None).parent_category_id)

    def test_product_count_accepts_both_spellings(self):
        self.assertEqual(self._parse(productCount=4).product_count, 4)
        self.assertEqual(self._parse(product_count=9).product_count, 9)

    def test_negative_product_count_rejected(self):
        with self.assertRaises(ValidationError):
            self._parse(productCount=-1)

    def test_sort_order_strict_integer(self):
        self.assertEqual(self._parse(sort_order="3").sort_order, 3)
        for bad in ("1.5", "1e3", "", 2.0, True, "abc"):
            with self.subTest(value=bad):
                with self.assertRaises(ValidationError):
                    self._parse(sort_order=bad)

    def test_required_fields(self):
        with self.assertRaises(ValidationError):
            CategoryRecord.from_dict({"name": "No id"})
        with self.assertRaises(ValidationError):
            CategoryRecord.from_dict({"category_id": "c1", "name": "   "})
        with self.assertRaises(ValidationError):
            CategoryRecord.from_dict(["not", "an", "object"])

    def test_tags_are_stripped_and_blanks_dropped(self):
        record = self._parse(tags=[" Seasonal ", "", "  ", "sale"])
        self.assertEqual(record.tags, ("Seasonal", "sale"))

    def test_tags_must_be_a_list(self):
        with self.assertRaises(ValidationError):
            self._parse(tags="seasonal")

    def test_booleans_accept_string_flags(self):
        record = self._parse(is_active="false", display_on_main_screen="yes")
        self.assertFalse(record.is_active)
        self.assertTrue(record.display_on_main_screen)

    def test_timestamps_normalized_to_utc(self):
        record = self._parse(created_at="2025-03-01T12:30:00+02:00", updated_at="2025-03-02T08:00:00Z")
        self.assertEqual(record.created_at, datetime(2025, 3, 1, 10, 30))
        self.assertEqual(record.updated_at, datetime(2025, 3, 2, 8, 0))

    def test_bad_timestamp_rejected(self):
        with self.assertRaises(ValidationError):
            self._parse(created_at="yesterday")

    def test_unknown_keys_pass_through(self):
        record = self._parse(create_user_id="u-7", properties={"color": "#3B82F6"})
        data = record.to_dict()
        self.assertEqual(data["create_user_id"], "u-7")
        self.assertEqual(data["properties"], {"color": "#3B82F6"})

    def test_derived_children_are_not_read_back(self):
        record = self._parse(children=[{"category_id": "x", "name": "X"}])
        self.assertNotIn("children", record.extra)
        self.assertNotIn("children", record.to_dict())

    def test_to_dict_uses_service_field_names(self):
        record = self._parse(productCount=3, created_at="2025-01-01T00:00:00Z", level=1)
        data = record.to_dict()
        self.assertEqual(data["productCount"], 3)
        self.assertEqual(data["created_at"], "2025-01-01T00:00:00Z")
        self.assertEqual(data["level"], 1)
        self.assertEqual(data["tags"], [])

    def test_to_dict_timestamps_are_whole_second_utc(self):
        aware = datetime(2025, 3, 1, 12, 30, 15, 999, tzinfo=timezone(timedelta(hours=2)))
        record = CategoryRecord(category_id="c1", name="Drinks", created_at=aware,
                                updated_at=datetime(2025, 3, 2, 8, 0, 0, 500))
        data = record.to_dict()
        self.assertEqual(data["created_at"], "2025-03-01T10:30:15Z")
        self.assertEqual(data["updated_at"], "2025-03-02T08:00:00Z")
        self.assertIsNone(self._parse(created_at="  ").created_at)

    def test_records_are_immutable(self):
        record = self._parse()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            record.name = "Other"


class CategoryNodeTests(unittest.TestCase):
    def test_node_to_dict_nests_children(self):
        parent = CategoryNode(record=CategoryRecord(category_id="p", name="Parent"), level=0)
        child = CategoryNode(record=CategoryRecord(category_id="c", name="Child", parent_category_id="p"), level=1)
        parent.children.append(child)

        data = parent.to_dict()
        self.assertTrue(parent.has_children)
        self.assertEqual(data["level"], 0)
        self.assertEqual(data["children"][0]["category_id"], "c")
        self.assertEqual(data["children"][0]["level"], 1)
        self.assertEqual(data["children"][0]["children"], [])
