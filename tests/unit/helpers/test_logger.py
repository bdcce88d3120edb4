"""Test logger utilities."""

import logging
import unittest
from unittest.mock import MagicMock, patch

from remscontent.helpers.logger import log_debug_json


class TestLogging(unittest.TestCase):
    """Test logger utilities."""

    @patch("remscontent.helpers.logger.LOG")
    def test_log_debug_json(self, mock_log: MagicMock) -> None:
        """Test log_debug_json."""

        mock_log.isEnabledFor.return_value = True
        log_debug_json({"name": "test_name", "url": "https://rems.example.org/api"})

        mock_log.isEnabledFor.assert_called_once_with(logging.DEBUG)
        mock_log.debug.assert_called_once()
        args, _ = mock_log.debug.call_args
        expected_output = "{\n" '    "name": "test_name",\n' '    "url": "https://rems.example.org/api"\n' "}"
        self.assertEqual(args[0], expected_output)

    @patch("remscontent.helpers.logger.LOG")
    def test_log_debug_json_disabled(self, mock_log: MagicMock) -> None:
        """Test that nothing is logged unless debug logging is enabled."""

        mock_log.isEnabledFor.return_value = False
        log_debug_json([{"name": "test_name"}])

        mock_log.debug.assert_not_called()
