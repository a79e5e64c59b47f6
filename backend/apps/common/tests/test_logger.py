import logging
import unittest

from apps.common import AppLogger, get_logger


class AppLoggerTests(unittest.TestCase):
    def test_bind_merges_context_without_mutating_parent(self):
        parent = get_logger("apps.tests.logger").bind(component="carts")
        child = parent.bind(layer="store")
        self.assertEqual(parent.context, {"component": "carts"})
        self.assertEqual(child.context, {"component": "carts", "layer": "store"})

    def test_render_appends_key_value_pairs(self):
        rendered = AppLogger.render("Cart persisted", {"items": 3, "ids": ["a", "b"], "slot": None})
        self.assertEqual(rendered, "Cart persisted | items=3 ids=[a,b] slot=None")

    def test_render_without_context_is_message(self):
        self.assertEqual(AppLogger.render("Cart cleared", {}), "Cart cleared")

    def test_emits_through_stdlib_logger(self):
        log = get_logger("apps.tests.logger").bind(component="carts")
        with self.assertLogs("apps.tests.logger", level="INFO") as captured:
            log.info("Cart rehydrated", lines=2)
            log.debug("hidden")
        self.assertEqual(len(captured.records), 1)
        self.assertEqual(captured.records[0].levelno, logging.INFO)
        self.assertEqual(
            captured.records[0].getMessage(), "Cart rehydrated | component=carts lines=2"
        )

    def test_exception_attaches_traceback(self):
        log = get_logger("apps.tests.logger")
        with self.assertLogs("apps.tests.logger", level="ERROR") as captured:
            try:
                raise OSError("disk full")
            except OSError:
                log.exception("Failed to persist cart", revision=4)
        record = captured.records[0]
        self.assertEqual(record.getMessage(), "Failed to persist cart | revision=4")
        self.assertIsNotNone(record.exc_info)


if __name__ == "__main__":
    unittest.main()
