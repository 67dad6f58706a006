import io
import logging
import os
import tempfile
import unittest

from billing.core.logging_config import setup_logging


class TtyStream(io.StringIO):
    def isatty(self):
        return True


class SetupLoggingTests(unittest.TestCase):
    def tearDown(self):
        root = logging.getLogger()
        for handler in root.handlers:
            handler.close()
        setup_logging("WARNING", stream=io.StringIO())

    def test_console_only_without_color_when_not_a_terminal(self):
        stream = io.StringIO()
        setup_logging("info", stream=stream)

        logging.getLogger("billing.test").info("payment confirmed")

        self.assertEqual(len(logging.getLogger().handlers), 1)
        self.assertIn("INFO", stream.getvalue())
        self.assertNotIn("\033[", stream.getvalue())
        self.assertEqual(logging.getLogger("sqlalchemy.engine").level, logging.WARNING)

    def test_terminal_output_is_colored_and_files_stay_plain(self):
        stream = TtyStream()
        with tempfile.TemporaryDirectory() as log_dir:
            setup_logging("INFO", log_dir=log_dir, stream=stream)
            logging.getLogger("billing.test").error("allocation failed")
            for handler in logging.getLogger().handlers:
                handler.flush()

            files = sorted(os.listdir(log_dir))
            self.assertEqual([name.split("_")[0] for name in files], ["billing", "error"])
            for name in files:
                with open(os.path.join(log_dir, name), encoding="utf-8") as fh:
                    content = fh.read()
                self.assertIn("allocation failed", content)
                self.assertNotIn("\033[", content)

            for handler in logging.getLogger().handlers:
                handler.close()
            logging.getLogger().handlers.clear()

        self.assertIn("\033[31m", stream.getvalue())

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("chatty", stream=io.StringIO())
        self.assertEqual(logging.getLogger().level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
