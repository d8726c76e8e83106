"""
Logger Unit Tests
=================
"""

import pytest
from unittest.mock import patch

from jito_bundler.shared.system.logging import Logger


class TestSourceTags:
    @pytest.mark.parametrize("message,expected", [
        ("[JITO] Bundle sent: abc", ("JITO", "Bundle sent: abc")),
        ("  [poll] Bundle status: Pending", ("POLL", "Bundle status: Pending")),
        ("no tag here", ("SYSTEM", "no tag here")),
        ("[THIS_TAG_IS_FAR_TOO_LONG] text", ("SYSTEM", "[THIS_TAG_IS_FAR_TOO_LONG] text")),
    ])
    def test_split_source(self, message, expected):
        assert Logger._split_source(message) == expected


class TestConsoleOutput:
    def test_info_prints_with_icon(self):
        with patch("jito_bundler.shared.system.logging._console") as console:
            Logger.info("[BUNDLE] Bundling 3 transactions")

        printed = console.print.call_args.args[0].plain
        assert "BUNDLE" in printed
        assert "📦 Bundling 3 transactions" in printed

    def test_debug_is_file_only(self):
        with patch("jito_bundler.shared.system.logging._console") as console:
            Logger.debug("[POLL] quiet")

        console.print.assert_not_called()

    def test_silent_mode(self):
        Logger.set_silent(True)
        try:
            with patch("jito_bundler.shared.system.logging._console") as console:
                Logger.warning("[JITO] Rate Limit (429)")
                Logger.section("Distribute SOL")
            console.print.assert_not_called()
            console.rule.assert_not_called()
        finally:
            Logger.set_silent(False)

    def test_file_log_keeps_source(self):
        with patch("jito_bundler.shared.system.logging._get_file_logger") as get_logger:
            Logger.success("[FUNDS] done")

        level, text = get_logger.return_value.log.call_args.args
        assert text == "[FUNDS] ✅ done"
