"""Exception types raised while converting or validating messages.

Every error is fatal: inputs are build-time artifacts, so there is nothing to
retry. :func:`log_then_raise` logs the offending value before raising so that
the source key can be located from the log alone.
"""
from __future__ import annotations

import logging
from typing import Any, NoReturn, Type

logger = logging.getLogger(__name__)


class TranslationError(ValueError):
    """Base class for every error raised by this package."""

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


class GrammarError(TranslationError):
    """Unbalanced braces, stray separators or reserved characters."""


class StructureError(TranslationError):
    """Plural, variable, link or tree-shape invariants do not hold."""


class ConfigurationError(TranslationError):
    """Unknown locale or an unusable configuration."""


class InvalidTranslationFile(ConfigurationError):
    """Raised when a localisation file has an unexpected structure."""


class ConsistencyError(TranslationError):
    """Restructuring then destructuring the source messages changed them."""


def log_then_raise(
    value: Any,
    message: str,
    error: Type[TranslationError] = StructureError,
) -> NoReturn:
    logger.error("%r", value)
    logger.error(message)
    raise error(message, value)
