"""
Reading source messages and writing translations.

Source messages live in ``<locales_dir>/<source>.json5`` and in ``<i18n>``
custom blocks of single file components. Translations are written to
``<locales_dir>/<locale>.json`` and to an autogenerated ``<i18n>`` block at the
end of each component file.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import json5
import quickjs

from .comments import SourceComments, scan_comments
from .errors import ConfigurationError, InvalidTranslationFile, TranslationError, log_then_raise
from .interpolation import ROOT_KEY
from .locales import LocaleRegistry, default_registry
from .message import Message
from .structure import destructure, restructure
from .translations import Translations, prepare_translations, verify_source_round_trip

logger = logging.getLogger(__name__)

COMPONENT_KEY = "component"

AUTOGENERATED_OPEN = "<!-- Autogenerated by structured-i18n -->\n<i18n>\n"
AUTOGENERATED_CLOSE = "\n</i18n>\n"

_re_i18n_block = re.compile(r'<i18n( +lang="json5")? *>')


@dataclass
class SourceMessages:
    messages: Dict[str, Any]
    comments: SourceComments = field(default_factory=SourceComments)


# ---------- parsing -------------------------------------------------------- #
def load_json5(src: str, filename: str) -> Any:
    """
    Parse JSON5, falling back to QuickJS for any other object literal
    (template literals, concatenation).
    """
    try:
        return json5.loads(src)
    except ValueError:
        pass

    ctx = quickjs.Context()
    try:
        json_str = ctx.eval(f"JSON.stringify(({src}))")
    except quickjs.JSException as exc:
        raise InvalidTranslationFile(f"{filename}: {exc}", filename) from exc
    if json_str is None:
        log_then_raise(filename, f"{filename}: not an object literal", InvalidTranslationFile)
    return json.loads(json_str)


def _to_messages(node: Any, filename: str, key: Optional[str] = None) -> Any:
    """
    Convert the leaves of a parsed tree to messages.

    Valid leaves are strings. A ``full`` array lists the forms of a pluralized
    component interpolation; any other list or dict is walked recursively.
    """
    if isinstance(node, str):
        return Message.from_native(node)

    if key == ROOT_KEY:
        if not isinstance(node, list):
            log_then_raise(node, f"{filename}: invalid full property", InvalidTranslationFile)
        forms: List[str] = []
        for item in node:
            if not isinstance(item, str):
                log_then_raise(node, f"{filename}: invalid full property", InvalidTranslationFile)
            message = Message.from_native(item)
            if len(message) != 1:
                log_then_raise(node, f"{filename}: invalid full property", InvalidTranslationFile)
            forms.append(message[0])
        return Message(forms)

    if isinstance(node, Mapping):
        return {k: _to_messages(v, filename, k) for k, v in node.items()}
    if isinstance(node, list):
        return [_to_messages(item, filename) for item in node]

    raise InvalidTranslationFile(
        f"{filename}: leaf values must be strings, got {type(node).__name__}", node
    )


def parse_messages(src: str, filename: str = "<string>") -> Tuple[Dict[str, Any], SourceComments]:
    payload = load_json5(src, filename)
    if not isinstance(payload, Mapping):
        log_then_raise(payload, f"{filename}: messages must be an object", InvalidTranslationFile)
    return _to_messages(payload, filename), scan_comments(src, filename)


def extract_i18n_block(content: str, filename: str) -> Optional[str]:
    """Return the JSON5 of the first ``<i18n>`` block, or ``None``.

    The autogenerated block of translations is not a source block.
    """
    autogenerated = content.find(AUTOGENERATED_OPEN)
    if autogenerated != -1:
        content = content[:autogenerated]
    match = _re_i18n_block.search(content)
    if match is None:
        return None
    end = content.find("</i18n>", match.end())
    if end == -1:
        log_then_raise(filename, "invalid single file component", InvalidTranslationFile)
    # Trimmed so that error positions are easy to map back.
    return content[match.end():end].strip()


def read_source_messages(
    locales_dir: Path,
    filenames_by_component: Iterable[Tuple[str, Path]],
    registry: Optional[LocaleRegistry] = None,
) -> SourceMessages:
    """Read the messages of the source locale, including component messages."""
    registry = registry or default_registry()
    source_locale = registry.source_locale

    path = locales_dir / f"{source_locale}.json5"
    logger.info("reading %s", path)
    messages, comments = parse_messages(path.read_text(encoding="utf-8"), str(path))
    if COMPONENT_KEY in messages:
        log_then_raise(path, f"{COMPONENT_KEY} is reserved for component messages", InvalidTranslationFile)

    messages[COMPONENT_KEY] = {}
    for component_name, filename in filenames_by_component:
        block = extract_i18n_block(Path(filename).read_text(encoding="utf-8"), str(filename))
        if block is None:
            continue
        try:
            block_messages, block_comments = parse_messages(block, str(filename))
        except TranslationError:
            logger.error("could not parse the messages of %s", component_name)
            raise
        if source_locale not in block_messages:
            log_then_raise(filename, f"no {source_locale} messages", InvalidTranslationFile)
        messages[COMPONENT_KEY][component_name] = block_messages[source_locale]
        # A comment on the locale key describes the block, not its messages.
        block_comments.by_path.pop((source_locale,), None)
        comments.update(block_comments.moved((source_locale,), (COMPONENT_KEY, component_name)))

    return SourceMessages(messages, comments)


# ---------- writing -------------------------------------------------------- #
def _escape_json(text: str) -> str:
    # '<' inside a custom block confuses template parsers.
    return text.replace("<", "\\u003c")


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def embed_component_translations(
    content: str,
    locale: str,
    messages: Optional[Dict[str, Any]],
    filename: str = "<string>",
) -> Optional[str]:
    """
    Return ``content`` with the autogenerated block updated for ``locale``.

    Returns ``None`` if the file would not change: there is nothing to add and
    no autogenerated block yet.
    """
    begin = content.find(AUTOGENERATED_OPEN)
    if begin == -1:
        if messages is None:
            return None
        return f"{content}\n{AUTOGENERATED_OPEN}{_escape_json(_dump({locale: messages}))}{AUTOGENERATED_CLOSE}"

    end = content.find(AUTOGENERATED_CLOSE, begin)
    if end == -1:
        log_then_raise(filename, "autogenerated i18n custom block is invalid", InvalidTranslationFile)
    if end + len(AUTOGENERATED_CLOSE) != len(content):
        log_then_raise(filename, "content found after autogenerated i18n custom block", InvalidTranslationFile)

    try:
        block = json.loads(content[begin + len(AUTOGENERATED_OPEN):end])
    except ValueError as exc:
        raise InvalidTranslationFile(f"{filename}: {exc}", filename) from exc
    if messages is None:
        block.pop(locale, None)
    else:
        block[locale] = messages
    # Locales are kept in alphabetical order.
    block = {key: block[key] for key in sorted(block)}
    return f"{content[:begin]}{AUTOGENERATED_OPEN}{_escape_json(_dump(block))}{AUTOGENERATED_CLOSE}"


def check_source_locale(source: Mapping[str, Any], comments: Optional[SourceComments] = None,
                        registry: Optional[LocaleRegistry] = None) -> Dict[str, Any]:
    """
    Restructure the source messages, destructure them again and compare.

    Returns the Structured JSON. A mismatch means restructure() and
    destructure() disagree.
    """
    registry = registry or default_registry()
    structured = restructure(source, comments)
    destructured = destructure(json.dumps(structured), registry.source)
    verify_source_round_trip(source, destructured)
    return structured


def render_translations(
    locale: str,
    source: Mapping[str, Any],
    translated: Dict[str, Any],
    component_contents: Mapping[str, Tuple[Path, str]],
    registry: Optional[LocaleRegistry] = None,
) -> Tuple[Dict[str, Any], Dict[Path, str]]:
    """
    Compute the artifacts for ``locale`` without touching the file system.

    ``component_contents`` maps a component name to its file and the current
    content of that file. Returns the locale messages and the new content of
    each component file that changes.
    """
    registry = registry or default_registry()
    locale_info = registry[locale]

    translations = Translations(None, None, source, translated)
    prepare_translations(translations, locale_info)

    files: Dict[Path, str] = {}
    by_component = translations.get(COMPONENT_KEY)
    for component_name, (filename, content) in component_contents.items():
        component = by_component.get(component_name) if by_component is not None else None
        if component is None:
            continue
        updated = embed_component_translations(
            content, locale, component.to_native(component_name), str(filename)
        )
        if updated is not None:
            files[filename] = updated

    translations.delete(COMPONENT_KEY)
    return translations.to_native() or {}, files


def write_translations(
    locale: str,
    source: Mapping[str, Any],
    translated: Dict[str, Any],
    locales_dir: Path,
    filenames_by_component: Iterable[Tuple[str, Path]],
    registry: Optional[LocaleRegistry] = None,
) -> List[Path]:
    """
    Write the translations for ``locale``.

    For the source locale nothing is written: ``translated`` must be the
    destructured source messages, and they are compared to ``source``. Every
    artifact is computed before the first write.
    """
    registry = registry or default_registry()
    if locale not in registry:
        log_then_raise(locale, f"unknown locale {locale}", ConfigurationError)

    if locale == registry.source_locale:
        verify_source_round_trip(source, translated)
        return []

    component_contents = {
        name: (Path(filename), Path(filename).read_text(encoding="utf-8"))
        for name, filename in filenames_by_component
    }
    messages, files = render_translations(locale, source, translated, component_contents, registry)

    written: List[Path] = []
    for filename, content in files.items():
        filename.write_text(content, encoding="utf-8")
        written.append(filename)
    output = locales_dir / f"{locale}.json"
    output.write_text(_dump(messages), encoding="utf-8")
    written.append(output)
    logger.info("wrote %d files for %s", len(written), locale)
    return written
