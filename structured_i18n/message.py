"""
The :class:`Message` value type.

A message holds one form per plural category. A message that is not
pluralized has a single form. It converts to and from both the native format
(forms joined by `` | ``) and the exchange format (ICU plurals).
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable, Iterator, Tuple

from .errors import GrammarError, StructureError, log_then_raise
from .variables import parse_vars

if TYPE_CHECKING:
    from .locales import Locale

NATIVE_SEPARATOR = " | "

_re_icu_plural = re.compile(r"^(\{count, plural,).+\}$", re.S)
_re_icu_category = re.compile(r" ([a-z]+) \{")
_re_bad_whitespace = re.compile(r"(^\s|\s$|\s\s)")
_re_whitespace = re.compile(r"\s+")


class Message:
    """An immutable sequence of plural forms."""

    __slots__ = ("_forms",)

    def __init__(self, forms: Iterable[str]) -> None:
        forms = tuple(forms)
        if not forms:
            raise StructureError("forms cannot be empty", forms)

        variables = parse_vars(forms[0])
        for form in forms[1:]:
            if (form == "") != (forms[0] == ""):
                log_then_raise(forms, "unexpected empty plural form")
            if parse_vars(form) != variables:
                log_then_raise(forms, "plural forms must use the same variables in each form")
        self._forms: Tuple[str, ...] = forms

    # ---------- constructors ----------------------------------------------- #
    @classmethod
    def empty(cls, length: int) -> "Message":
        return cls([""] * length)

    @classmethod
    def from_native(cls, message: str) -> "Message":
        forms = message.split(NATIVE_SEPARATOR)
        if len(forms) > 2:
            log_then_raise(message, "a pluralized message must have exactly two forms", GrammarError)

        for form in forms:
            if "|" in form:
                log_then_raise(message, "unexpected |", GrammarError)
            if _re_bad_whitespace.search(form):
                log_then_raise(message, "unexpected white space", GrammarError)

        return cls(forms)

    @classmethod
    def from_exchange(cls, string: str, locale: "Locale") -> "Message":
        icu = _re_icu_plural.match(string)
        if icu is None:
            forms = [string]
        else:
            forms = []
            categories = []
            begin = len(icu.group(1))
            while begin < len(string) - 1:
                category = _re_icu_category.match(string, begin)
                if category is None:
                    log_then_raise(string, "invalid plural", GrammarError)
                categories.append(category.group(1))

                # Find the brace that closes this category's block.
                end = category.end()
                unmatched = 1
                while unmatched > 0 and end < len(string) - 1:
                    if string[end] == "{":
                        unmatched += 1
                    elif string[end] == "}":
                        unmatched -= 1
                    end += 1
                if unmatched != 0:
                    log_then_raise(string, "unmatched brace", GrammarError)
                forms.append(string[category.end():end - 1])
                begin = end

            categories.sort()
            expected = list(locale.plural_categories)
            if categories != expected:
                log_then_raise(
                    string,
                    f"Expected the plural categories [{', '.join(expected)}], "
                    f"but found [{', '.join(categories)}]. "
                    'Did you download the translations "to translate"?',
                )

        return cls(_re_whitespace.sub(" ", form.strip()) for form in forms)

    # ---------- sequence protocol ------------------------------------------ #
    @property
    def forms(self) -> Tuple[str, ...]:
        return self._forms

    def __len__(self) -> int:
        return len(self._forms)

    def __getitem__(self, index: int) -> str:
        return self._forms[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self._forms)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Message):
            return NotImplemented
        return self._forms == other._forms

    def __hash__(self) -> int:
        return hash(self._forms)

    def __repr__(self) -> str:
        return f"Message({list(self._forms)!r})"

    def is_empty(self) -> bool:
        return self._forms[0] == ""

    # ---------- encoders --------------------------------------------------- #
    def to_native(self) -> str:
        if any("|" in form for form in self._forms):
            log_then_raise(self, "unexpected |", GrammarError)
        return NATIVE_SEPARATOR.join(self._forms)

    def to_exchange(self) -> str:
        for form in self._forms:
            # Single quotes are used for escaping in ICU plurals.
            if "'" in form:
                log_then_raise(
                    self,
                    "We don't support straight single quotes in ICU plurals, "
                    "but curly quotes are supported.",
                    GrammarError,
                )
            if "#" in form:
                log_then_raise(self, "unexpected #", GrammarError)
        if len(self._forms) > 2:
            log_then_raise(self, "too many plural forms")
        if len(self._forms) == 2:
            return f"{{count, plural, one {{{self._forms[0]}}} other {{{self._forms[1]}}}}}"
        return self._forms[0]
