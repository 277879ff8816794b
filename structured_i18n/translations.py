"""
Source messages walked in parallel with their translations.

A :class:`Translations` tree mirrors the source messages. Each node knows its
parent and its key, and reaches its translated values through its parent, so
a handle obtained earlier always sees later changes. The tree is used to:

* walk the source messages and translations in parallel
* modify the translations
* output the native JSON for the translations
"""
from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .errors import ConsistencyError, log_then_raise
from .interpolation import ROOT_KEY, is_component_interpolation
from .links import LINK_MARKER, path_of_linked_message
from .locales import Locale
from .message import Message
from .variables import parse_vars

logger = logging.getLogger(__name__)

Key = Union[str, int]
Callback = Callable[["Translation"], None]

_re_index = re.compile(r"^\d+$")


def _is_index(key: Optional[str]) -> bool:
    return key is not None and _re_index.match(key) is not None


class Translation:
    """A single source message along with its translation."""

    def __init__(self, parent: "Translations", key: str) -> None:
        self.parent = parent
        self.key = key
        self.source: Message = parent.source_value(key)

    def __repr__(self) -> str:
        return f"Translation({'.'.join(self.path)!r})"

    @property
    def root(self) -> "Translations":
        return self.parent.root

    @property
    def path(self) -> List[str]:
        return [*self.parent.path, self.key]

    @property
    def translated(self) -> Optional[Message]:
        """
        The translation, an empty message if untranslated, or ``None`` if the
        message does not exist in the exchange format at all (a linked message).
        """
        translated = self.parent.translated_value(self.key)
        if translated is not None and not isinstance(translated, Message):
            log_then_raise(translated, f"expected a message at {'.'.join(self.path)}")
        return translated

    def to_native(self, key: Optional[str] = None) -> Any:
        translated = self.translated
        if translated is None or translated.is_empty():
            return None
        if key == ROOT_KEY and len(self.source) != 1:
            # Forms of a pluralized `full` are listed separately.
            return list(translated)
        return translated.to_native()


class Translations:
    """
    A node of the translation tree.

    ``source`` is a mapping or a list. The translated values are always kept
    in a dict keyed by strings, since the exchange format has no arrays.
    """

    def __init__(
        self,
        parent: Optional["Translations"],
        key: Optional[str],
        source: Any,
        translated: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not isinstance(source, (Mapping, list)):
            log_then_raise(source, "invalid source")
        if parent is None and not isinstance(translated, dict):
            log_then_raise(translated, "invalid translated")
        self.parent = parent
        self.key = key
        self._source = source
        self._own_translated = translated
        self.is_array = isinstance(source, list)
        self.is_component_interpolation = is_component_interpolation(source)

    def __repr__(self) -> str:
        return f"Translations({'.'.join(self.path)!r})"

    @property
    def root(self) -> "Translations":
        return self if self.parent is None else self.parent.root

    @property
    def path(self) -> List[str]:
        return [] if self.parent is None else [*self.parent.path, self.key]

    @property
    def source(self) -> Any:
        return self._source

    @property
    def translated(self) -> Dict[str, Any]:
        if self.parent is None:
            return self._own_translated
        return self.parent._translated_subtree(self.key)

    # ---------- lookup ----------------------------------------------------- #
    def keys(self) -> List[str]:
        if self.is_array:
            return [str(index) for index in range(len(self._source))]
        return list(self._source)

    def source_value(self, key: str) -> Any:
        if self.is_array:
            if not _is_index(key) or int(key) >= len(self._source):
                return None
            return self._source[int(key)]
        return self._source.get(key)

    def translated_value(self, key: str) -> Any:
        return self.translated.get(key)

    def _translated_subtree(self, key: str) -> Dict[str, Any]:
        translated = self.translated
        subtree = translated.get(key)
        if subtree is None:
            subtree = translated[key] = {}
        elif not isinstance(subtree, dict):
            log_then_raise(subtree, f"expected an object at {'.'.join([*self.path, key])}")
        return subtree

    def get(self, key: Key) -> Union[Translation, "Translations", None]:
        """Return a single translation or a subtree; either stays live."""
        key = str(key)
        source_value = self.source_value(key)
        if source_value is None:
            return None
        if isinstance(source_value, Message):
            return Translation(self, key)
        # Create the translated subtree on first touch.
        self._translated_subtree(key)
        return Translations(self, key, source_value)

    # ---------- modification ----------------------------------------------- #
    def set(self, key: Key, translated: Message) -> "Translations":
        key = str(key)
        if not isinstance(self.source_value(key), Message):
            log_then_raise(key, "invalid key")
        if not isinstance(translated, Message):
            log_then_raise(translated, "invalid translated")
        self.translated[key] = translated
        return self

    def delete(self, key: Key) -> None:
        """Mark a translation as untranslated, or clear a subtree."""
        key = str(key)
        value = self.translated.get(key)
        if value is None:
            return
        if isinstance(value, Message):
            self.translated[key] = Message.empty(len(value))
        else:
            subtree = self.get(key)
            if subtree is None:
                log_then_raise(value, f"unknown key {'.'.join([*self.path, key])}")
            subtree.clear()

    def clear(self) -> None:
        for key in list(self.translated):
            self.delete(key)

    # ---------- traversal -------------------------------------------------- #
    def walk(self, callbacks: Union[Callback, Sequence[Callback]]) -> None:
        """Call each callback for each translation, depth-first."""
        if callable(callbacks):
            callbacks = [callbacks]
        for key in self.keys():
            value = self.get(key)
            if isinstance(value, Translation):
                for callback in callbacks:
                    callback(value)
            else:
                value.walk(callbacks)

    def to_native(self, key: Optional[str] = None) -> Any:
        """
        The native JSON of the translations, or ``None`` if there are none.

        An array element never collapses to ``None``: that would leave a hole
        in the enclosing array.
        """
        if self.is_array:
            result = []
            empty_messages = 0
            empty_objects = 0
            for index in self.keys():
                value = self.get(index).to_native(index)
                result.append(value)
                if value is None:
                    empty_messages += 1
                elif not value:
                    empty_objects += 1
            if empty_messages + empty_objects == len(self._source):
                return [] if _is_index(key) else None
            # JSON has no sparse arrays.
            if empty_messages:
                log_then_raise(self, "sparse array")
            return result

        result: Dict[str, Any] = {}
        translated = self.translated
        for k in self.keys():
            if k not in translated:
                continue
            value = self.get(k).to_native(k)
            if value is not None:
                result[k] = value
        unknown = [k for k in translated if self.source_value(k) is None]
        if unknown:
            log_then_raise(unknown, f"translations without a source message in {'.'.join(self.path) or 'root'}")
        return result if result or _is_index(key) else None


# --------------------------------------------------------------------------- #
# Passes over a Translations tree. Each is called once per translation.

def copy_linked_message(translation: Translation) -> None:
    """
    Copy a linked message if the message it links to is translated.

    If the target is missing from a locale, the runtime does not always fall
    back to the source locale, so an untranslated target means no copy.
    """
    path = path_of_linked_message(translation.source)
    if path is None:
        return
    target: Any = translation.root
    for key in path:
        target = target.get(key) if isinstance(target, Translations) else None
    if not isinstance(target, Translation):
        log_then_raise(translation.source, f"link to unknown message {'.'.join(path)}")
    if target.translated is not None and not target.translated.is_empty():
        translation.parent.set(translation.key, translation.source)


def verify_destructure(translation: Translation) -> None:
    source, translated = translation.source, translation.translated
    if translated is None or source.forms != translated.forms:
        log_then_raise(
            {"path": translation.path, "source": source, "translated": translated},
            "mismatch for source locale",
            ConsistencyError,
        )


def delete_partial_translation(translation: Translation) -> None:
    """
    Remove a partially translated component interpolation or array.

    The output then never mixes locales within one piece of text. An array is
    removed whole because JSON cannot represent the missing element.
    """
    parent = translation.parent
    if not (parent.is_component_interpolation or parent.is_array):
        return
    translated = translation.translated
    if translated is None or translated.is_empty():
        parent.clear()


# Characters that may directly precede or follow a variable.
_SEPARATORS = "\\] !\"'(),./:;<>?\\[’“”„–—-"
_re_no_separator = re.compile(f"[^{_SEPARATORS}]\\{{|\\}}[^{_SEPARATORS}]")


def validate_translation(locale: Locale) -> Callback:
    """Build the pass that checks each translation for ``locale``."""

    def validate(translation: Translation) -> None:
        source, translated = translation.source, translation.translated
        if translated is None:
            return
        # A single-category locale never needs a second form, so arity is not
        # compared there.
        if len(locale.plural_categories) != 1 and (len(source) != 1) != (len(translated) != 1):
            log_then_raise({"source": source, "translated": translated}, "pluralization mismatch")
        if not translated.is_empty() and parse_vars(source[0]) != parse_vars(translated[0]):
            log_then_raise(
                {"source": source, "translated": translated},
                "translation must use the same variables as the source message",
            )

        for index, form in enumerate(translated):
            source_form = source[index] if index < len(source) else None
            if LINK_MARKER in form and form != source_form:
                log_then_raise({"source": source, "translated": translated}, "unexpected linked locale message")
            if locale.warn_variable_separator and _re_no_separator.search(form):
                logger.warning("%s: variable without separator.", ".".join(translation.path))

    return validate


def prepare_translations(translations: Translations, locale: Locale) -> None:
    """Run the passes for a locale other than the source locale, in order."""
    translations.walk(delete_partial_translation)
    # A second walk, so that a linked message is copied only if
    # delete_partial_translation() won't remove its target.
    translations.walk([copy_linked_message, validate_translation(locale)])


def verify_source_round_trip(source: Mapping[str, Any], destructured: Dict[str, Any]) -> None:
    """Check that the destructured source messages equal the originals."""
    translations = Translations(None, None, source, destructured)
    translations.walk([copy_linked_message, verify_destructure])

