"""
Component interpolation.

Our convention for component interpolation is to group all the messages used
in the component interpolation in a flat object. The object has a property
named ``full`` whose path is passed to the interpolating component. A
component interpolation is identified by the presence of ``full``, so ``full``
should not be used as a property name anywhere else.

A component interpolation can be nested, for example, if only part of a link
is formatted in bold. The messages of the entire interpolation are still
grouped in one flat object; the nesting is recovered from which message uses
which ``{slot}``. :func:`generate_comments_for_full` turns that tree into
developer comments for translators.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional

from .errors import log_then_raise
from .message import Message

ROOT_KEY = "full"


def is_component_interpolation(value: object) -> bool:
    return isinstance(value, Mapping) and ROOT_KEY in value


class ComponentInterpolationNode:
    """A message of a component interpolation along with the messages it uses."""

    def __init__(self, key: str, message: Message) -> None:
        self.key = key
        self.message = message
        self.parent: Optional[ComponentInterpolationNode] = None
        self.children: List[ComponentInterpolationNode] = []

    def __repr__(self) -> str:
        return f"ComponentInterpolationNode({self.key!r})"

    @property
    def slot(self) -> str:
        return f"{{{self.key}}}"

    def has_children(self) -> bool:
        return bool(self.children)

    def visit_descendants(self, callback: Callable[["ComponentInterpolationNode"], None]) -> None:
        for child in self.children:
            callback(child)
            child.visit_descendants(callback)

    @classmethod
    def from_messages(cls, messages: Mapping[str, object]) -> "ComponentInterpolationNode":
        """Build the tree of ``messages`` and return the node of ``full``."""
        nodes: Dict[str, ComponentInterpolationNode] = {}
        for key, value in messages.items():
            if not isinstance(value, Message):
                log_then_raise(messages, "invalid message")
            nodes[key] = cls(key, value)
        if ROOT_KEY not in nodes:
            log_then_raise(messages, "component interpolation without full")

        # First pass: for each slot, every sibling that uses it.
        candidates: Dict[str, List[str]] = {key: [] for key in nodes if key != ROOT_KEY}
        for key, node in nodes.items():
            for slot_key in candidates:
                if slot_key != key and f"{{{slot_key}}}" in node.message[0]:
                    candidates[slot_key].append(key)

        # Second pass: each message other than full has exactly one parent.
        for key, parents in candidates.items():
            if not parents:
                log_then_raise(messages, f"parent not found for {key}")
            if len(parents) > 1:
                log_then_raise(messages, f"{key} is used by more than one message: {', '.join(parents)}")
            node, parent = nodes[key], nodes[parents[0]]
            node.parent = parent
            parent.children.append(node)

        for node in nodes.values():
            seen = set()
            ancestor = node
            while ancestor.parent is not None:
                if ancestor.key in seen:
                    log_then_raise(messages, f"cycle in component interpolation at {node.key}")
                seen.add(ancestor.key)
                ancestor = ancestor.parent

        root = nodes[ROOT_KEY]
        if not root.has_children():
            log_then_raise(messages, "invalid component interpolation")
        return root


def generate_comments_for_full(messages: Mapping[str, object]) -> Dict[str, str]:
    """Developer comments for each message of a component interpolation."""
    root = ComponentInterpolationNode.from_messages(messages)
    comments: Dict[str, str] = {ROOT_KEY: ""}

    def comment_on_child(node: ComponentInterpolationNode, expanded: str) -> None:
        comment = (
            "This text will be formatted within the application, for example, "
            "it might be bold or a link. "
        )
        if len(root.message) == 1:
            comment += f"It will be inserted where {node.slot} is in the following text:"
        else:
            # The plural form is shown because that is what translators see
            # first for a pluralized source string.
            comment += (
                f"It will be inserted where {node.slot} is in the following text. "
                "(The plural form of the text is shown.)"
            )
        comments[node.key] = f"{comment}\n\n{expanded}"

        if node.has_children():
            expanded = expanded.replace(node.slot, node.message[-1], 1)
            for child in node.children:
                comment_on_child(child, expanded)

    for child in root.children:
        comment_on_child(child, root.message[-1])

    def comment_on_parent(node: ComponentInterpolationNode) -> None:
        comment = comments[node.key]
        if comment:
            comment += "\n\n"

        if len(node.children) == 1 and not node.children[0].has_children():
            only = node.children[0]
            if node.parent is None:
                comment += (
                    f"{only.slot} is a separate string that will be translated below. "
                    "Its text will be formatted within the application, for example, "
                    "it might be bold or a link."
                )
            else:
                comment += f"Note that {only.slot} is a separate string that will be translated below."
            comment += " "
            if len(only.message) == 1:
                comment += f"Its text is:\n\n{only.message[0]}"
            else:
                comment += f"In its plural form, its text is:\n\n{only.message[-1]}"
            comments[node.key] = comment
            return

        if node.parent is None:
            comment += (
                "The following are separate strings that will be translated below. "
                "They will be formatted within the application, for example, "
                "they might be bold or a link."
            )
        else:
            comment += "Note that the following are separate strings that will be translated below:"
        comment += "\n"

        lines: List[str] = []

        def describe(descendant: ComponentInterpolationNode) -> None:
            if len(descendant.message) == 1:
                lines.append(f"\n- {descendant.slot} has the text: {descendant.message[0]}")
            else:
                lines.append(f"\n- {descendant.slot} has the plural form: {descendant.message[-1]}")

        node.visit_descendants(describe)
        comments[node.key] = comment + "".join(lines)

        for child in node.children:
            if child.has_children():
                comment_on_parent(child)

    comment_on_parent(root)
    return comments
