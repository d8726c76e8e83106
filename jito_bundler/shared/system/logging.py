"""
Centralized Logger with Rich Console
====================================
Static logger used across the bundler.

Messages carry a leading [SOURCE] tag (JITO, BUNDLE, POLL, ...). The tag
picks the console icon and is kept in the file log.

Usage:
    from jito_bundler.shared.system.logging import Logger

    Logger.info("[JITO] Bundle submitted")
    Logger.success("[BUNDLE] Landed")
    Logger.debug("[POLL] Pending")      # file only
    Logger.section("Distributing SOL")
"""

import logging
import os
import re
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional, Tuple

from rich.console import Console
from rich.text import Text

from jito_bundler.config.settings import Settings


SOURCE_ICONS = {
    "SYSTEM": "🛸",
    "JITO": "⚡",
    "BUNDLE": "📦",
    "POLL": "⏳",
    "ASSEMBLER": "🔧",
    "TIP": "💸",
    "FUNDS": "💰",
    "WALLETS": "👛",
    "RPC": "📡",
}

LEVEL_STYLES = {
    "INFO": "cyan",
    "SUCCESS": "green bold",
    "WARNING": "yellow",
    "ERROR": "red bold",
    "SECTION": "magenta bold",
}

# Console level -> file level
FILE_LEVELS = {
    "INFO": logging.INFO,
    "SUCCESS": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "DEBUG": logging.DEBUG,
}

_SOURCE_TAG = re.compile(r"^\s*\[([A-Za-z_]{1,14})\]\s*(.*)$", re.DOTALL)

_console = Console()
_file_logger: Optional[logging.Logger] = None


def _get_file_logger() -> logging.Logger:
    """Per-run rotating session log under Settings.LOG_DIR, opened on first write."""
    global _file_logger
    if _file_logger is None:
        os.makedirs(Settings.LOG_DIR, exist_ok=True)
        run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = os.path.join(Settings.LOG_DIR, f"bundler_{run_id}.log")

        handler = RotatingFileHandler(path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))

        file_logger = logging.getLogger("JitoBundler")
        file_logger.setLevel(logging.DEBUG)
        file_logger.propagate = False
        file_logger.addHandler(handler)
        _file_logger = file_logger
    return _file_logger


class Logger:
    """Color-coded console output plus a rotating file log."""

    _silent_mode = False

    @staticmethod
    def _split_source(message: str) -> Tuple[str, str]:
        match = _SOURCE_TAG.match(message)
        if match:
            return match.group(1).upper(), match.group(2)
        return "SYSTEM", message

    @staticmethod
    def _console_enabled() -> bool:
        return not (Logger._silent_mode or Settings.SILENT_MODE)

    @staticmethod
    def _print(level: str, source: str, message: str) -> None:
        now = datetime.now()
        icon = SOURCE_ICONS.get(source, "")

        line = Text()
        line.append(f"{now:%H:%M:%S}.{now.microsecond // 1000:03d} ", style="dim")
        line.append(f"| {level:<8} ", style=LEVEL_STYLES.get(level, "white"))
        line.append(f"| {source[:10]:<10} | ", style="dim")
        line.append(f"{icon} {message}" if icon else message)
        _console.print(line)

    @staticmethod
    def _emit(level: str, message: str, icon: str = "", console: bool = True) -> None:
        source, text = Logger._split_source(message)
        if icon:
            text = f"{icon} {text}"
        if console and Logger._console_enabled():
            Logger._print(level, source, text)
        if level == "SUCCESS":
            text = f"✅ {text}"
        _get_file_logger().log(FILE_LEVELS[level], f"[{source}] {text}")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @staticmethod
    def info(message: str, icon: str = "") -> None:
        Logger._emit("INFO", message, icon)

    @staticmethod
    def success(message: str) -> None:
        Logger._emit("SUCCESS", message)

    @staticmethod
    def warning(message: str) -> None:
        Logger._emit("WARNING", message)

    @staticmethod
    def error(message: str) -> None:
        Logger._emit("ERROR", message)

    @staticmethod
    def debug(message: str) -> None:
        Logger._emit("DEBUG", message, console=False)

    @staticmethod
    def section(title: str) -> None:
        if Logger._console_enabled():
            _console.print()
            _console.rule(f"[bold magenta]{title}[/]", style="dim")
        _get_file_logger().info(f"[SYSTEM] === {title} ===")

    @staticmethod
    def set_silent(silent: bool) -> None:
        """Enable/disable console output."""
        Logger._silent_mode = silent
