"""
Conversion between native messages and Structured JSON.

Structured JSON is the exchange format of the translation platform: every
message becomes ``{"string": ..., "developer_comment": ...}``. It has no
arrays, so an array becomes an object keyed by the stringified index.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Union

from .comments import Path, SourceComments
from .errors import StructureError, log_then_raise
from .interpolation import generate_comments_for_full, is_component_interpolation
from .links import path_of_linked_message, resolve_linked_message
from .locales import Locale
from .message import Message

logger = logging.getLogger(__name__)


def _join_comments(comment: Optional[str], comment_for_full: Optional[str]) -> Optional[str]:
    if comment is None:
        return comment_for_full
    if comment_for_full is None:
        return comment
    return f"{comment}\n\n{comment_for_full}"


def _restructure(
    value: Any,
    root: Mapping[str, Any],
    path: Path,
    comments: SourceComments,
    comment_for_path: Optional[str],
    comment_for_key: Optional[str],
    comment_for_full: Optional[str],
) -> Dict[str, Any]:
    if isinstance(value, Message):
        structured: Dict[str, Any] = {"string": value.to_exchange()}
        # An inline comment takes precedence over one from the top of the file.
        comment = _join_comments(
            comment_for_path if comment_for_path is not None else comment_for_key,
            comment_for_full,
        )
        if comment is not None:
            structured["developer_comment"] = comment
        return structured

    if isinstance(value, list):
        items = [(index, str(index), item) for index, item in enumerate(value)]
    elif isinstance(value, Mapping):
        items = [(key, key, item) for key, item in value.items()]
    else:
        log_then_raise(value, f"invalid value at {'.'.join(map(str, path))}")

    comments_for_full = generate_comments_for_full(value) if is_component_interpolation(value) else {}

    # Even for an array, the result is an object: Structured JSON has no arrays.
    structured = {}
    for path_key, key, item in items:
        if item is None:
            log_then_raise(value, f"invalid value at {key}")

        # A linked message is validated, then left out of the Structured JSON.
        if isinstance(item, Message):
            link = path_of_linked_message(item)
            if link is not None:
                resolve_linked_message(link, root, value)
                continue

        item_path = path + (path_key,)
        child = _restructure(
            item,
            root,
            item_path,
            comments,
            comments.by_path.get(item_path, comment_for_path),
            comments.by_key.get(key, comment_for_key),
            comments_for_full.get(key),
        )
        # Drop an object that only contained linked messages.
        if not isinstance(item, Message) and not child:
            continue
        structured[key] = child
    return structured


def restructure(
    messages: Mapping[str, Any],
    comments: Optional[SourceComments] = None,
) -> Dict[str, Any]:
    """Convert a native message tree to a Structured JSON tree."""
    if not isinstance(messages, Mapping):
        raise StructureError("messages must be a mapping", messages)
    return _restructure(messages, messages, (), comments or SourceComments(), None, None, None)


def _destructure(value: Any, locale: Locale) -> Any:
    if isinstance(value, Mapping):
        if isinstance(value.get("string"), str):
            return Message.from_exchange(value["string"], locale)
        return {key: _destructure(item, locale) for key, item in value.items()}
    if isinstance(value, list):
        return [_destructure(item, locale) for item in value]
    return value


def destructure(payload: Union[str, bytes, Mapping[str, Any]], locale: Locale) -> Dict[str, Any]:
    """
    Convert Structured JSON for ``locale`` to a tree of messages.

    Every object with a ``string`` property becomes a :class:`Message`; the
    rest of the structure is kept as nested dicts.
    """
    if isinstance(payload, (str, bytes)):
        payload = json.loads(payload)
    if not isinstance(payload, Mapping):
        log_then_raise(payload, "Structured JSON must be an object")
    logger.debug("destructuring %d top-level keys for %s", len(payload), locale.code)
    return _destructure(payload, locale)
