"""Builder DSL - appends AST nodes at the current nesting level.

All builder calls go to whatever block sits on top of the ContextStack.
Opening a conditional or a fold pushes a frame, close() pops it and
freezes it into an immutable node on its parent. The root script frame
is always at the bottom of the stack.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from cibuild.errors import StructuralFault
from cibuild.shell.ast import (
    Branch,
    Command,
    ConditionalBlock,
    Export,
    FoldBlock,
    Node,
    Raw,
    Script,
)
from cibuild.shell.renderer import message_line

log = logging.getLogger(__name__)


class Frame:
    """An open block collecting children until it is closed."""

    kind = "block"

    def __init__(self) -> None:
        self.children: List[Node] = []

    def append(self, node: Node) -> None:
        self.children.append(node)

    def freeze(self):
        raise NotImplementedError


class ScriptFrame(Frame):
    kind = "script"

    def freeze(self) -> Script:
        return Script(children=tuple(self.children))


class FoldFrame(Frame):
    kind = "fold"

    def __init__(self, label: str) -> None:
        super().__init__()
        self.label = label

    def freeze(self) -> FoldBlock:
        return FoldBlock(label=self.label, children=tuple(self.children))


class ConditionalFrame(Frame):
    """Collects branches; appends always land in the last opened branch."""

    kind = "conditional"

    def __init__(self, test: str) -> None:
        super().__init__()
        self.branches: List[Tuple[Optional[str], List[Node]]] = [(test, self.children)]
        self.has_else = False

    def add_branch(self, test: Optional[str]) -> None:
        if self.has_else:
            raise StructuralFault("no branch may follow an else branch")
        self.children = []
        self.branches.append((test, self.children))
        if test is None:
            self.has_else = True

    def freeze(self) -> ConditionalBlock:
        return ConditionalBlock(
            branches=tuple(
                Branch(test=test, children=tuple(children))
                for test, children in self.branches
            )
        )


class ContextStack:
    """Explicit cursor over the blocks currently open for writing.

    Ordered outer to inner; the top is the insertion target. Never empty
    while open, and strictly LIFO.
    """

    def __init__(self) -> None:
        self._frames: List[Frame] = [ScriptFrame()]
        self._finished = False

    @property
    def current(self) -> Frame:
        self._check_open()
        return self._frames[-1]

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def kinds(self) -> List[str]:
        return [frame.kind for frame in self._frames]

    def push(self, frame: Frame) -> Frame:
        self._check_open()
        self._frames.append(frame)
        return frame

    def pop(self) -> Frame:
        """Close the top block and append its frozen node to the parent."""
        self._check_open()
        if len(self._frames) == 1:
            raise StructuralFault("close() called with no open block")
        frame = self._frames.pop()
        self._frames[-1].append(frame.freeze())
        return frame

    def finish(self) -> Script:
        """Freeze the whole tree. Fails if any block is still open."""
        self._check_open()
        if len(self._frames) > 1:
            open_blocks = ", ".join(self.kinds[1:])
            raise StructuralFault(f"unclosed block(s) at end of script: {open_blocks}")
        self._finished = True
        return self._frames[0].freeze()

    def _check_open(self) -> None:
        if self._finished:
            raise StructuralFault("script is already finished")


class ShellBuilder:
    """DSL for issuing shell intent against a ContextStack.

    Usage:
        sh = ShellBuilder()
        sh.export("CC", "gcc")
        with sh.if_("[[ -f Makefile ]]"):
            sh.cmd("make", echo=True, assert_=True)
            sh.else_()
            sh.echo("No Makefile", ansi="yellow")
        script = sh.finish()
    """

    def __init__(self, stack: ContextStack | None = None) -> None:
        self.stack = stack or ContextStack()

    # -- leaf nodes -------------------------------------------------------

    def cmd(
        self,
        text: str,
        *,
        echo: bool = False,
        assert_: bool = False,
        timing: bool = False,
        retry: bool = False,
        secure: bool = False,
        color: Optional[str] = None,
        fold: Optional[str] = None,
    ) -> Command:
        node = Command(
            text=text,
            echo=echo,
            assert_=assert_,
            timing=timing,
            retry=retry,
            secure=secure,
            color=color,
        )
        if fold:
            with self.fold(fold):
                self._append(node)
        else:
            self._append(node)
        return node

    def export(
        self, key: str, value: str, *, echo: bool = True, secure: bool = False
    ) -> Export:
        node = Export(key=key, value=str(value), echo=echo, secure=secure)
        self._append(node)
        return node

    def echo(self, message: str, ansi: Optional[str] = None) -> Command:
        """Print a message line, optionally colored."""
        return self.cmd(message_line(message, ansi))

    def newline(self) -> Raw:
        return self.raw("echo")

    def raw(self, text: str) -> Raw:
        node = Raw(text=text)
        self._append(node)
        return node

    # -- blocks -----------------------------------------------------------

    def open_conditional(self, test: str) -> None:
        self.stack.push(ConditionalFrame(test))

    def elif_(self, test: str) -> None:
        self._conditional("elif").add_branch(test)

    def else_(self) -> None:
        self._conditional("else").add_branch(None)

    def open_fold(self, label: str) -> None:
        self.stack.push(FoldFrame(label))

    def close(self) -> None:
        self.stack.pop()

    @contextmanager
    def if_(self, test: str) -> Iterator["ShellBuilder"]:
        self.open_conditional(test)
        yield self
        self.close()

    @contextmanager
    def fold(self, label: str) -> Iterator["ShellBuilder"]:
        self.open_fold(label)
        yield self
        self.close()

    def finish(self) -> Script:
        script = self.stack.finish()
        log.debug("Finished script with %d top-level node(s)", len(script.children))
        return script

    def _conditional(self, what: str) -> ConditionalFrame:
        frame = self.stack.current
        if not isinstance(frame, ConditionalFrame):
            raise StructuralFault(f"{what} outside of an open conditional")
        return frame

    def _append(self, node: Node) -> None:
        self.stack.current.append(node)
