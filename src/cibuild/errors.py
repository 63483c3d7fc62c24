"""Exceptions raised while compiling a build script."""

from __future__ import annotations


class CibuildError(Exception):
    """Base exception for cibuild operations."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


class StructuralFault(CibuildError):
    """Raised when the builder is used out of nesting order.

    An unclosed conditional or fold, a branch outside of a conditional, or a
    close() on the root script all end up here. No script text is produced.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"structural fault: {message}", exit_code=3)


class ConfigurationFault(CibuildError):
    """Raised when build configuration cannot be turned into a build at all."""

    def __init__(self, message: str) -> None:
        super().__init__(message, exit_code=2)


class UnknownLanguageError(ConfigurationFault):
    """Raised when no profile is registered for the configured language."""

    def __init__(self, language: str, available: list[str]) -> None:
        self.language = language
        super().__init__(
            f"unknown language '{language}'. Available: {', '.join(available)}"
        )
