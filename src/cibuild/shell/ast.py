"""Shell AST - the intermediate representation of a build script.

Nodes describe shell intent (run this, export that, group these lines)
without committing to shell syntax. They are frozen once built; the
renderer turns a finished tree into text.
"""

from __future__ import annotations

from typing import Optional, Tuple, Union

import msgspec

ANSI_COLORS = ("red", "green", "yellow")
REDACTED = "[secure]"


class Command(msgspec.Struct, frozen=True, tag=True):
    """A shell command plus the wrapping the renderer should apply to it."""

    text: str
    echo: bool = False
    assert_: bool = msgspec.field(default=False, name="assert")
    timing: bool = False
    retry: bool = False
    secure: bool = False
    color: Optional[str] = None

    def __post_init__(self) -> None:
        if self.color is not None and self.color not in ANSI_COLORS:
            raise ValueError(
                f"Unknown color '{self.color}' (expected one of {', '.join(ANSI_COLORS)})"
            )


class Export(msgspec.Struct, frozen=True, tag=True):
    """An environment variable assignment. The value is shell text."""

    key: str
    value: str
    echo: bool = True
    secure: bool = False


class Raw(msgspec.Struct, frozen=True, tag=True):
    """Literal shell text outside the modeled vocabulary."""

    text: str


class Branch(msgspec.Struct, frozen=True, tag=True):
    """One arm of a conditional. ``test`` is None for the else arm."""

    test: Optional[str]
    children: Tuple["Node", ...] = ()


class ConditionalBlock(msgspec.Struct, frozen=True, tag=True):
    branches: Tuple[Branch, ...]


class FoldBlock(msgspec.Struct, frozen=True, tag=True):
    """A named, collapsible log section. Has no control-flow effect."""

    label: str
    children: Tuple["Node", ...] = ()


class Script(msgspec.Struct, frozen=True, tag=True):
    """Root of a compiled tree."""

    children: Tuple["Node", ...] = ()


Node = Union[Command, Export, Raw, ConditionalBlock, FoldBlock]


def walk(node):
    """Yield every node below ``node`` in rendering order (pre-order)."""
    if isinstance(node, (Script, FoldBlock, Branch)):
        for child in node.children:
            yield child
            yield from walk(child)
    elif isinstance(node, ConditionalBlock):
        for branch in node.branches:
            yield from walk(branch)


def redact(node):
    """Copy of ``node`` with every secure value replaced by REDACTED."""
    if isinstance(node, Command):
        return msgspec.structs.replace(node, text=REDACTED) if node.secure else node
    if isinstance(node, Export):
        return msgspec.structs.replace(node, value=REDACTED) if node.secure else node
    if isinstance(node, ConditionalBlock):
        return msgspec.structs.replace(
            node, branches=tuple(redact(b) for b in node.branches)
        )
    if isinstance(node, (Script, FoldBlock, Branch)):
        return msgspec.structs.replace(
            node, children=tuple(redact(c) for c in node.children)
        )
    return node


def dumps(node) -> str:
    """Indented JSON for a tree, for debug logging. Secure values are redacted."""
    return msgspec.json.format(msgspec.json.encode(redact(node)), indent=2).decode()
