# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Logging and reporting interface for addonmanifest.

This module provides a configurable logging interface that library modules
can use for output without depending on the CLI. The logger can be configured
globally or passed as a parameter for better isolation.

The logger supports these output levels:

- Step: Always printed (for progress indicators)
- Verbose: Only printed when verbose mode is enabled
- Debug: Only printed when debug mode is enabled (implies verbose)
- Warning: Always printed; non-fatal problems (e.g., a removed addon)
- Error: Always printed; per-addon failures with optional attribution

Example:
    Configure global logger:
        ```python
        from addonmanifest.logging import get_logger, set_global_logger

        logger = get_logger(verbose=True, debug=False)
        set_global_logger(logger)
        ```

    Use in library code:
        ```python
        from addonmanifest.logging import get_global_logger

        logger = get_global_logger()
        logger.step(1, 4, "Loading addon definitions...")
        logger.verbose("GITHUB", "Listing releases")
        logger.warning("Addon foo was removed from manifest!")
        logger.error("Addon Foo failed to update: ...", title="Foo")
        ```

Note:
    The default logger is silent, so library functions won't print anything
    unless explicitly configured. The CLI configures the global logger when
    commands are executed.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Logger(Protocol):
    """Protocol for logger implementations."""

    def step(self, step: int, total: int, message: str) -> None:
        """Print a step indicator.

        Args:
            step: Current step number (1-based).
            total: Total number of steps.
            message: Step description.
        """
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Print a verbose log message.

        Args:
            prefix: Message prefix (e.g., "MANIFEST", "GITHUB").
            message: Log message.
        """
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Print a debug log message.

        Args:
            prefix: Message prefix (e.g., "PE", "HTTP").
            message: Log message.
        """
        ...

    def warning(self, message: str) -> None:
        """Report a non-fatal warning."""
        ...

    def error(
        self, message: str, *, title: str | None = None, file: str | None = None
    ) -> None:
        """Report an error.

        Args:
            message: Human-readable error message.
            title: Optional short title (usually the addon name).
            file: Optional path of the file the error belongs to.
        """
        ...


class DefaultLogger:
    """Default logger implementation that prints to a text stream.

    This logger respects verbose and debug flags. Output goes to stdout by
    default; the CLI redirects it to stderr when the manifest itself is
    printed to stdout.
    """

    def __init__(
        self,
        verbose: bool = False,
        debug: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        """Initialize logger with verbosity settings.

        Args:
            verbose: If True, print verbose messages.
            debug: If True, print debug messages (implies verbose).
            stream: Output stream. Defaults to sys.stdout at call time.
        """
        self._verbose = verbose or debug
        self._debug = debug
        self._stream = stream

    def _print(self, text: str) -> None:
        print(text, file=self._stream or sys.stdout)

    def step(self, step: int, total: int, message: str) -> None:
        """Print a step indicator."""
        self._print(f"[{step}/{total}] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        """Print a verbose log message (only when verbose mode is active)."""
        if self._verbose:
            self._print(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        """Print a debug log message (only when debug mode is active)."""
        if self._debug:
            self._print(f"[{prefix}] {message}")

    def warning(self, message: str) -> None:
        """Print a warning."""
        self._print(f"[WARNING] {message}")

    def error(
        self, message: str, *, title: str | None = None, file: str | None = None
    ) -> None:
        """Print an error, with the file it belongs to when known."""
        if file:
            self._print(f"[ERROR] {message} ({file})")
        else:
            self._print(f"[ERROR] {message}")


class GithubActionsLogger(DefaultLogger):
    """Logger that emits GitHub Actions workflow annotations.

    Warnings and errors are written as ``::warning::`` and ``::error::``
    workflow commands so they show up on the run summary and, when a file
    is given, on the addon definition file itself.
    """

    def warning(self, message: str) -> None:
        self._print(f"::warning::{_escape_data(message)}")

    def error(
        self, message: str, *, title: str | None = None, file: str | None = None
    ) -> None:
        props = []
        if title:
            props.append(f"title={_escape_property(title)}")
        if file:
            props.append(f"file={_escape_property(file)}")
            props.append("line=1")
            props.append("endLine=1")
        head = "::error " + ",".join(props) if props else "::error"
        self._print(f"{head}::{_escape_data(message)}")


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


class SilentLogger:
    """Logger that suppresses all output.

    Useful for programmatic usage when output is not desired.
    """

    def step(self, step: int, total: int, message: str) -> None:
        """Suppress step output."""
        pass

    def verbose(self, prefix: str, message: str) -> None:
        """Suppress verbose output."""
        pass

    def debug(self, prefix: str, message: str) -> None:
        """Suppress debug output."""
        pass

    def warning(self, message: str) -> None:
        """Suppress warnings."""
        pass

    def error(
        self, message: str, *, title: str | None = None, file: str | None = None
    ) -> None:
        """Suppress errors."""
        pass


# Global logger instance (defaults to silent)
_global_logger: Logger = SilentLogger()


def get_logger(
    verbose: bool = False,
    debug: bool = False,
    stream: TextIO | None = None,
    annotations: bool = False,
) -> Logger:
    """Get a logger instance with specified verbosity.

    Args:
        verbose: If True, logger will print verbose messages.
        debug: If True, logger will print debug messages (implies verbose).
        stream: Output stream (default: stdout).
        annotations: If True, return a logger that emits GitHub Actions
            workflow annotations for warnings and errors.

    Returns:
        A logger instance configured with the specified verbosity.

    Example:
        Get a verbose logger that writes to stderr:
            ```python
            import sys

            logger = get_logger(verbose=True, stream=sys.stderr)
            logger.verbose("MODULE", "Processing...")
            ```
    """
    if annotations:
        return GithubActionsLogger(verbose=verbose, debug=debug, stream=stream)
    return DefaultLogger(verbose=verbose, debug=debug, stream=stream)


def get_global_logger() -> Logger:
    """Get the global logger instance.

    Returns:
        The current global logger instance.

    Note:
        The default global logger is silent. Use set_global_logger() to
        configure it.
    """
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Set the global logger instance.

    Args:
        logger: Logger instance to use as the global logger.

    Note:
        This affects all library functions that use get_global_logger().
    """
    global _global_logger
    _global_logger = logger
