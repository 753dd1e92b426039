import logging
import os
import unittest
from unittest.mock import patch

from giftcard_gateway import logging_config
from giftcard_gateway.logging_config import add_app_context, configure_logging


class TestAppContext(unittest.TestCase):
    def tearDown(self):
        configure_logging("INFO")

    def test_environment_is_bound_at_configure_time(self):
        configure_logging("INFO", environment="staging")
        with patch.dict(os.environ, {"ENVIRONMENT": "development"}):
            event = add_app_context(None, "info", {"event": "request_started"})
        self.assertEqual(event["environment"], "staging")
        self.assertEqual(event["app"], "giftcard-gateway")

    def test_default_environment(self):
        configure_logging("WARNING")
        self.assertEqual(logging_config._app_context["environment"], "production")
        self.assertEqual(logging.getLogger().level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
