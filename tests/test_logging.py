import json
import logging
import unittest

from stockledger.core.logging import JsonFormatter, setup_logging


class JsonFormatterTest(unittest.TestCase):
    def test_context_fields_are_included(self):
        record = logging.LogRecord("stockledger.test", logging.INFO, __file__, 1, "saved %s", ("x",), None)
        record.snapshot_date = "2024-05-15"
        record.status_code = 503

        entry = json.loads(JsonFormatter().format(record))

        self.assertEqual(entry["msg"], "saved x")
        self.assertEqual(entry["level"], "INFO")
        self.assertEqual(entry["snapshot_date"], "2024-05-15")
        self.assertEqual(entry["status_code"], "503")
        self.assertNotIn("job_name", entry)


class SetupLoggingTest(unittest.TestCase):
    def setUp(self):
        root = logging.getLogger()
        self._saved = (root.level, list(root.handlers))

    def tearDown(self):
        root = logging.getLogger()
        root.setLevel(self._saved[0])
        root.handlers[:] = self._saved[1]

    def test_single_json_handler(self):
        setup_logging(level="debug", json_lines=True)
        setup_logging(level="debug", json_lines=True)

        root = logging.getLogger()
        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)
        self.assertIsInstance(root.handlers[0].formatter, JsonFormatter)


if __name__ == "__main__":
    unittest.main()
