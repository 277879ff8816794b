"""
structured_i18n — convert native messages to and from Structured JSON.

The native messages support pluralization, variables, component
interpolation and linked messages. Structured JSON is the flat format that a
translation platform consumes and returns.
"""
from .errors import (
    ConfigurationError,
    ConsistencyError,
    GrammarError,
    InvalidTranslationFile,
    StructureError,
    TranslationError,
)
from .locales import Locale, LocaleRegistry, default_registry
from .message import Message
from .sources import read_source_messages, write_translations
from .structure import destructure, restructure
from .translations import Translation, Translations

__all__ = [
    "ConfigurationError",
    "ConsistencyError",
    "GrammarError",
    "InvalidTranslationFile",
    "Locale",
    "LocaleRegistry",
    "Message",
    "StructureError",
    "Translation",
    "TranslationError",
    "Translations",
    "default_registry",
    "destructure",
    "read_source_messages",
    "restructure",
    "write_translations",
]
