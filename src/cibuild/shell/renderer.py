"""Renderer - converts a finished shell AST to bash text.

Rendering is a pure, single pass over the tree in node order. The same
tree always renders to the same bytes; downstream caching relies on it.

The wrapping helpers referenced here (cibuild_retry, cibuild_assert,
cibuild_time_start/finish, cibuild_fold) are defined by the script header.
"""

from __future__ import annotations

import shlex
from typing import List, Optional

from cibuild.shell.ast import (
    REDACTED,
    Command,
    ConditionalBlock,
    Export,
    FoldBlock,
    Raw,
    Script,
)

INDENT = "  "
RETRY_ATTEMPTS = 3


def message_line(message: str, ansi: Optional[str] = None) -> str:
    """Shell line printing ``message`` literally, optionally colored."""
    quoted = shlex.quote(message)
    if ansi is None:
        return f"echo {quoted}"
    color = f"${{ANSI_{ansi.upper()}}}"
    return f'printf "{color}%s${{ANSI_RESET}}\\n" {quoted}'


class Renderer:
    """Renders a Script AST to bash text."""

    def render(self, script: Script, depth: int = 0) -> str:
        """Render a Script to bash text (no trailing newline).

        Args:
            script: The finished AST.
            depth: Nesting level of the top-level nodes.

        Returns:
            The script body as a single string.
        """
        lines: List[str] = []
        for node in script.children:
            lines.extend(self._render_node(node, depth))
        return "\n".join(lines)

    def _render_node(self, node, depth: int) -> List[str]:
        if isinstance(node, Command):
            return self._render_command(node, depth)
        if isinstance(node, Export):
            return self._render_export(node, depth)
        if isinstance(node, Raw):
            return self._indent(node.text, depth)
        if isinstance(node, FoldBlock):
            return self._render_fold(node, depth)
        if isinstance(node, ConditionalBlock):
            return self._render_conditional(node, depth)
        raise TypeError(f"Cannot render node of type {type(node).__name__}")

    def _render_command(self, cmd: Command, depth: int) -> List[str]:
        lines: List[str] = []
        if cmd.timing:
            lines.append("cibuild_time_start")
        if cmd.echo:
            preview = REDACTED if cmd.secure else cmd.text
            lines.append(message_line(f"$ {preview}", cmd.color))
        if cmd.retry:
            lines.append(f"cibuild_retry eval {shlex.quote(cmd.text)}")
        else:
            lines.append(cmd.text)
        if cmd.timing:
            lines.append("cibuild_time_finish")
        if cmd.assert_:
            lines.append("cibuild_assert")
        return self._indent_each(lines, depth)

    def _render_export(self, export: Export, depth: int) -> List[str]:
        lines: List[str] = []
        if export.echo:
            preview = REDACTED if export.secure else export.value
            lines.append(message_line(f"$ export {export.key}={preview}"))
        lines.append(f"export {export.key}={export.value}")
        return self._indent_each(lines, depth)

    def _render_fold(self, fold: FoldBlock, depth: int) -> List[str]:
        label = shlex.quote(fold.label)
        lines = self._indent(f"cibuild_fold start {label}", depth)
        for child in fold.children:
            lines.extend(self._render_node(child, depth + 1))
        lines.extend(self._indent(f"cibuild_fold end {label}", depth))
        return lines

    def _render_conditional(self, block: ConditionalBlock, depth: int) -> List[str]:
        lines: List[str] = []
        for i, branch in enumerate(block.branches):
            if branch.test is None:
                header = "else"
            elif i == 0:
                header = f"if {branch.test}; then"
            else:
                header = f"elif {branch.test}; then"
            lines.extend(self._indent(header, depth))
            if branch.children:
                for child in branch.children:
                    lines.extend(self._render_node(child, depth + 1))
            else:
                lines.extend(self._indent(":", depth + 1))
        lines.extend(self._indent("fi", depth))
        return lines

    def _indent(self, text: str, depth: int) -> List[str]:
        """Indent the first line of ``text``.

        Continuation lines belong to the user's text (quoted literals,
        heredoc bodies and terminators) and are emitted byte-for-byte.
        """
        first, *rest = text.split("\n")
        prefix = INDENT * depth
        return [f"{prefix}{first}" if prefix and first else first, *rest]

    def _indent_each(self, pieces: List[str], depth: int) -> List[str]:
        lines: List[str] = []
        for piece in pieces:
            lines.extend(self._indent(piece, depth))
        return lines
