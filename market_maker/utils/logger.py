"""
Logging Configuration Module
===========================

Controls logging levels and output formatting for the market making core.
Provides different logging modes for research, embedding and production callers.
"""

import sys
from enum import Enum
from typing import List
from loguru import logger

from .config import config


class LogLevel(Enum):
    """Logging levels for different caller modes"""
    SILENT = "SILENT"           # Only critical errors
    QUIET = "QUIET"             # Errors and warnings only
    NORMAL = "NORMAL"           # Info, warnings, and errors
    VERBOSE = "VERBOSE"         # Debug, info, warnings, and errors
    TRACE = "TRACE"             # All logging including trace


LEVEL_MAPPING = {
    LogLevel.SILENT: "CRITICAL",
    LogLevel.QUIET: "WARNING",
    LogLevel.NORMAL: "INFO",
    LogLevel.VERBOSE: "DEBUG",
    LogLevel.TRACE: "TRACE"
}

# Modules that log per computation
COMPUTATION_MODULES = [
    "market_maker.strategy.avellaneda_stoikov",
    "market_maker.strategy.glft",
    "market_maker.analytics.volatility",
    "market_maker.position.tracker",
]


class LogConfig:
    """Logging configuration manager"""

    def __init__(self):
        self.current_level = LogLevel.NORMAL
        self._initialized = False
        self._console_handler_id = None

    def setup_logging(self,
                     level: LogLevel = LogLevel.NORMAL,
                     show_backtrace: bool = False,
                     show_diagnose: bool = False) -> None:
        """
        Configure console logging

        Args:
            level: Logging level to use
            show_backtrace: Show full backtraces on errors
            show_diagnose: Show diagnostic information
        """
        if self._console_handler_id is not None:
            logger.remove(self._console_handler_id)
        elif not self._initialized:
            # Remove loguru's default handler once
            logger.remove()

        if level == LogLevel.SILENT:
            format_str = "<red><bold>CRITICAL</bold></red> | {message}"
        elif level == LogLevel.QUIET:
            format_str = "<level>{level}</level> | {message}"
        elif level == LogLevel.NORMAL:
            format_str = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> | {message}"
        else:
            format_str = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | {message}"

        self._console_handler_id = logger.add(
            sys.stderr,
            format=format_str,
            level=LEVEL_MAPPING[level],
            backtrace=show_backtrace,
            diagnose=show_diagnose,
            colorize=True
        )

        self.current_level = level

        if level != LogLevel.SILENT and not self._initialized:
            logger.debug(f"Logging configured: level={level.value}")

        self._initialized = True

    def set_research_mode(self) -> None:
        """Configure logging for notebooks and research - full output"""
        self.setup_logging(
            level=LogLevel.VERBOSE,
            show_backtrace=True,
            show_diagnose=True
        )

    def set_production_mode(self) -> None:
        """Configure logging for production - balanced output"""
        self.setup_logging(level=LogLevel.NORMAL)

    def set_embedded_mode(self) -> None:
        """Configure logging for a host event loop - warnings and errors only"""
        self.setup_logging(level=LogLevel.QUIET)

    def set_silent_mode(self) -> None:
        """Configure logging for silent operation - critical errors only"""
        self.setup_logging(level=LogLevel.SILENT)

    def add_file_logging(self,
                        filepath: str,
                        level: LogLevel = LogLevel.VERBOSE,
                        rotation: str = "10 MB",
                        retention: str = "7 days") -> int:
        """
        Add file logging in addition to console

        Args:
            filepath: Path to log file
            level: Logging level for file
            rotation: File rotation policy
            retention: Log retention policy

        Returns:
            loguru handler id, usable with logger.remove()
        """
        file_format = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"

        handler_id = logger.add(
            filepath,
            format=file_format,
            level=LEVEL_MAPPING[level],
            rotation=rotation,
            retention=retention,
            backtrace=True,
            diagnose=True
        )

        if self.current_level != LogLevel.SILENT:
            logger.info(f"File logging enabled: {filepath}")

        return handler_id

    def suppress_module_logging(self, modules: List[str]) -> None:
        """Suppress logging from specific modules"""
        for module in modules:
            logger.disable(module)

    def enable_module_logging(self, modules: List[str]) -> None:
        """Re-enable logging for specific modules"""
        for module in modules:
            logger.enable(module)


# Global log configuration instance
log_config = LogConfig()


def setup_research_logging():
    """Quick setup for research - full logging"""
    log_config.set_research_mode()
    log_config.enable_module_logging(COMPUTATION_MODULES)


def setup_production_logging():
    """Quick setup for production - balanced logging"""
    log_config.set_production_mode()


def setup_embedded_logging():
    """Quick setup inside a host trading loop - per-computation logs muted"""
    log_config.set_embedded_mode()
    log_config.suppress_module_logging(COMPUTATION_MODULES)


def setup_silent_logging():
    """Quick setup for silent operation"""
    log_config.set_silent_mode()


def get_logger(name: str):
    """
    Get a logger instance for a component

    Args:
        name: Component name

    Returns:
        Logger instance with the component bound in ``extra``
    """
    if not log_config._initialized:
        log_config.setup_logging(_configured_level())

    return logger.bind(component=name)


def _configured_level() -> LogLevel:
    try:
        return LogLevel(config.logging.level.upper())
    except ValueError:
        return LogLevel.NORMAL


# Initialize default logging on import
if not log_config._initialized:
    log_config.setup_logging(_configured_level())
    if config.logging.log_file:
        log_config.add_file_logging(config.logging.log_file)
