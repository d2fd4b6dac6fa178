# phenoattr/cli_display.py
"""Display helpers for decoded attribute trees.

Renders a tree as a Rich ``Tree`` (one branch per list, map and key) and a
shape summary as a KV table plus a kind histogram.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from . import cli_theme as theme
from .attributes import AttributeValue, AttributeVisitor, ValueKind, walk
from .attributes.traversal import Node, TreeStats

_MAX_TEXT = 80


def _leaf_label(value: AttributeValue) -> str:
    kind = value.kind
    tag = f"[{theme.GREIGE}]{kind.label}[/{theme.GREIGE}]"
    if kind is ValueKind.NULL:
        return f"{tag} [{theme.MUTED}]null[/{theme.MUTED}]"
    if kind is ValueKind.STRING:
        text = value.payload
        if len(text) > _MAX_TEXT:
            text = text[:_MAX_TEXT] + "…"
        return f"{tag} {escape(repr(text))}"
    if kind is ValueKind.ONTOLOGY_CLASS:
        term = value.payload
        label = f" {escape(term.label)}" if term.label else ""
        return f"{tag} [bold]{escape(term.id)}[/bold]{label}"
    if kind.is_structured:
        return f"{tag} [bold]{escape(value.payload.id)}[/bold]"
    return f"{tag} {escape(str(value.payload))}"


class _RichTreeVisitor(AttributeVisitor):
    def __init__(self, title: str):
        self.tree = Tree(f"[bold {theme.CORAL}]{escape(title)}[/bold {theme.CORAL}]")
        self._stack: list[Tree] = [self.tree]

    def visit_leaf(self, value, path):
        self._stack[-1].add(_leaf_label(value))

    def enter_list(self, values, path):
        self._stack.append(self._stack[-1].add(f"[bold]list[/bold] [{theme.MUTED}]({len(values)})[/{theme.MUTED}]"))

    def enter_map(self, attributes, path):
        self._stack.append(self._stack[-1].add(f"[bold]map[/bold] [{theme.MUTED}]({len(attributes)} keys)[/{theme.MUTED}]"))

    def enter_key(self, key, values, path):
        self._stack.append(self._stack[-1].add(f"[{theme.CORAL}]{escape(key)}[/{theme.CORAL}]"))

    def leave_list(self, values, path):
        self._stack.pop()

    def leave_map(self, attributes, path):
        self._stack.pop()

    def leave_key(self, key, values, path):
        self._stack.pop()


def build_tree(node: Node, title: str = "value", max_depth: Optional[int] = None) -> Tree:
    """Return a Rich ``Tree`` mirroring *node*."""
    return walk(node, _RichTreeVisitor(title), max_depth=max_depth).tree


def render_stats(stats: TreeStats, byte_size: int, console: Console) -> None:
    """Print the shape summary produced by ``collect_stats``."""
    theme.section("Shape", console, "01")
    t = theme.make_kv_table()
    t.add_row("bytes", str(byte_size))
    t.add_row("nodes", str(stats.nodes))
    t.add_row("leaves", str(stats.leaves))
    t.add_row("depth", str(stats.depth))
    console.print(t)

    theme.section("Kinds", console, "02")
    t = theme.make_table()
    t.add_column("tag", justify="right")
    t.add_column("kind")
    t.add_column("count", justify="right")
    for kind in sorted(stats.kinds):
        t.add_row(str(kind.value), kind.label, str(stats.kinds[kind]))
    console.print(t)
