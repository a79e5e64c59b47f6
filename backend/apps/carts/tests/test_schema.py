import unittest
from unittest.mock import patch

from apps.carts import schema
from apps.carts.schema import CURRENT_SCHEMA_VERSION, SchemaError, migrate_document


class MigrateDocumentTests(unittest.TestCase):
    def test_current_version_passes_through(self):
        doc = {"version": CURRENT_SCHEMA_VERSION, "revision": 3, "items": []}
        self.assertEqual(migrate_document(doc), doc)

    def test_version_zero_envelope_is_upgraded(self):
        items = [{"id": "a", "product_id": "a", "product_name": "A", "quantity": 1, "price_cents": 5}]
        doc = migrate_document({"state": {"items": items}, "version": 0})
        self.assertEqual(doc, {"version": 1, "revision": 0, "items": items})

    def test_missing_version_is_treated_as_zero(self):
        doc = migrate_document({"state": {"items": []}})
        self.assertEqual(doc["version"], 1)
        self.assertEqual(doc["items"], [])

    def test_bare_list_is_treated_as_version_zero(self):
        doc = migrate_document([{"id": "a"}])
        self.assertEqual(doc["version"], 1)
        self.assertEqual(doc["items"], [{"id": "a"}])

    def test_future_version_is_rejected(self):
        with self.assertRaises(SchemaError):
            migrate_document({"version": CURRENT_SCHEMA_VERSION + 1, "items": []})

    def test_non_integer_version_is_rejected(self):
        with self.assertRaises(SchemaError):
            migrate_document({"version": "1", "items": []})
        with self.assertRaises(SchemaError):
            migrate_document({"version": True, "items": []})

    def test_unsupported_shapes_are_rejected(self):
        for raw in ("cart", 42, None):
            with self.assertRaises(SchemaError):
                migrate_document(raw)

    def test_version_zero_without_state_is_rejected(self):
        with self.assertRaises(SchemaError):
            migrate_document({"version": 0, "items": []})

    def test_migrations_are_chained(self):
        def v1_to_v2(document):
            return {**document, "version": 2, "currency": "USD"}

        with patch.object(schema, "CURRENT_SCHEMA_VERSION", 2), patch.dict(
            schema.MIGRATIONS, {1: v1_to_v2}
        ):
            doc = schema.migrate_document({"state": {"items": []}, "version": 0})
        self.assertEqual(doc, {"version": 2, "revision": 0, "items": [], "currency": "USD"})

    def test_migration_that_does_not_advance_is_rejected(self):
        with patch.object(schema, "CURRENT_SCHEMA_VERSION", 2), patch.dict(
            schema.MIGRATIONS, {1: lambda document: dict(document)}
        ):
            with self.assertRaises(SchemaError):
                schema.migrate_document({"version": 1, "items": []})


if __name__ == "__main__":
    unittest.main()
