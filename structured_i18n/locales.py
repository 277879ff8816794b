"""
Static per-locale metadata.

The registry is read from a YAML document (``locales.yaml`` ships with the
package). Plural categories that the document does not pin are taken from the
CLDR plural rules bundled with Babel.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import yaml
from babel import Locale as BabelLocale
from babel.core import UnknownLocaleError

from .errors import ConfigurationError, log_then_raise

logger = logging.getLogger(__name__)

_LOCALE_OPTIONS = {"plural_categories", "warn_variable_separator"}


@dataclass(frozen=True)
class Locale:
    code: str
    plural_categories: Tuple[str, ...]
    warn_variable_separator: bool = True


def cldr_plural_categories(code: str) -> Tuple[str, ...]:
    """Sorted plural categories of ``code`` according to CLDR."""
    try:
        rule = BabelLocale.parse(code).plural_form
    except (UnknownLocaleError, ValueError) as exc:
        raise ConfigurationError(f"unknown locale {code}: {exc}", code) from exc
    # `other` is implicit in a rule unless it is defined explicitly.
    return tuple(sorted(set(rule.tags) | {"other"}))


class LocaleRegistry(Mapping[str, Locale]):
    """Read-only mapping from a locale code to its :class:`Locale`."""

    def __init__(self, locales: Mapping[str, Locale], source_locale: str) -> None:
        self._locales: Dict[str, Locale] = dict(locales)
        if source_locale not in self._locales:
            log_then_raise(source_locale, "source locale is not configured", ConfigurationError)
        self.source_locale = source_locale

    # ---------- Mapping ---------------------------------------------------- #
    def __getitem__(self, code: str) -> Locale:
        try:
            return self._locales[code]
        except KeyError:
            raise ConfigurationError(f"unknown locale {code}", code) from None

    def __contains__(self, code: object) -> bool:
        return code in self._locales

    def __iter__(self) -> Iterator[str]:
        return iter(self._locales)

    def __len__(self) -> int:
        return len(self._locales)

    @property
    def source(self) -> Locale:
        return self[self.source_locale]

    # ---------- construction ----------------------------------------------- #
    @classmethod
    def from_config(cls, config: Any) -> "LocaleRegistry":
        if not isinstance(config, Mapping):
            log_then_raise(config, "locale config must be a mapping", ConfigurationError)

        defaults = {"warn_variable_separator": True, **(config.get("defaults") or {})}
        entries = config.get("locales") or {}
        if not isinstance(entries, Mapping) or not entries:
            log_then_raise(entries, "locale config must list at least one locale", ConfigurationError)

        locales: Dict[str, Locale] = {}
        for code, options in entries.items():
            options = {**defaults, **(options or {})}
            unknown = set(options) - _LOCALE_OPTIONS
            if unknown:
                log_then_raise(
                    options,
                    f"unknown options for locale {code}: {', '.join(sorted(unknown))}",
                    ConfigurationError,
                )

            categories = options.get("plural_categories")
            if categories is None:
                categories = cldr_plural_categories(code)
            elif not categories or not all(isinstance(c, str) for c in categories):
                log_then_raise(categories, f"invalid plural_categories for {code}", ConfigurationError)

            locales[code] = Locale(
                code=code,
                plural_categories=tuple(sorted(categories)),
                warn_variable_separator=bool(options["warn_variable_separator"]),
            )
            logger.debug("locale %s: %s", code, locales[code])

        return cls(locales, config.get("source_locale", "en"))

    @classmethod
    def from_yaml(cls, text: str) -> "LocaleRegistry":
        try:
            config = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"invalid locale config: {exc}", text) from exc
        return cls.from_config(config or {})

    @classmethod
    def from_file(cls, path: Path) -> "LocaleRegistry":
        logger.info("reading locale config %s", path)
        return cls.from_yaml(path.read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def default_registry() -> LocaleRegistry:
    """The registry described by the bundled ``locales.yaml``, built once."""
    text = resources.files(__package__).joinpath("locales.yaml").read_text(encoding="utf-8")
    return LocaleRegistry.from_yaml(text)


def load_registry(path: Optional[Path] = None) -> LocaleRegistry:
    return default_registry() if path is None else LocaleRegistry.from_file(path)
