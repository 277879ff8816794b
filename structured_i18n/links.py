"""
Linked locale messages.

A linked message is used only when two messages are exactly the same, written
as ``@:path.to.message``. A link is never used to insert one message into a
longer one: grammatical features like noun case mean that usually won't work
across languages. For the same reason a pluralized message may be linked to
but may never contain a link.
"""
from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Sequence

from .errors import StructureError, log_then_raise
from .message import Message

LINK_MARKER = "@:"

_re_link = re.compile(r"^@:([\w.]+)$")


def path_of_linked_message(message: Message) -> Optional[List[str]]:
    """Return the path the message links to, or ``None`` if it is not a link."""
    if len(message) == 1:
        match = _re_link.match(message[0])
        if match is not None:
            return match.group(1).split(".")

    if any(LINK_MARKER in form for form in message):
        log_then_raise(message, "unexpected linked locale message")
    return None


def _child(node: Any, key: str) -> Any:
    if isinstance(node, list):
        if not key.isdigit() or int(key) >= len(node):
            return None
        return node[int(key)]
    if isinstance(node, Mapping):
        return node.get(key)
    return None


def resolve_linked_message(
    path: Sequence[str],
    root: Mapping[str, Any],
    context: Any,
) -> Message:
    """
    Dereference ``path`` against ``root`` for a link defined in ``context``.

    ``context`` is the mapping or list that holds the link. The target must be
    a message that is not itself a link, and neither the link nor its target
    may be part of an array or a component interpolation.
    """
    if isinstance(context, list) or (isinstance(context, Mapping) and "full" in context):
        # Linking to an untranslated message here could result in a partial
        # translation, which would then be removed.
        log_then_raise(
            context,
            "linked locale message not allowed in component interpolation or array element",
        )

    node: Any = root
    parent: Any = None
    for key in path:
        parent, node = node, _child(node, key)
        if node is None:
            log_then_raise(
                context,
                f"link to {'.'.join(path)}, a message that either does not exist "
                "or is in a component block",
            )

    if not isinstance(node, Message):
        log_then_raise(node, f"link to {'.'.join(path)}, which is not a message")
    if isinstance(parent, list) or "full" in parent:
        log_then_raise(
            context,
            f"cannot link to {'.'.join(path)}, which is part of an array or component interpolation",
        )
    if path_of_linked_message(node) is not None:
        log_then_raise(context, "cannot link to a linked locale message", StructureError)
    return node
