"""Flatten package dependency trees into display trees."""

from __future__ import annotations

import os
from dataclasses import replace

from rich.text import Text
from rich.tree import Tree

from npd.lib.domain import DisplayNode, PackageNode


def prune_to_direct(node: PackageNode) -> PackageNode:
    """Return a copy whose direct dependencies carry no dependencies of their own.

    Install, update and link results intentionally show at most one dependency
    level below each root.
    """

    return replace(
        node,
        dependencies={
            name: replace(child, dependencies={})
            for name, child in node.dependencies.items()
        },
    )


def _installed_version(node: PackageNode) -> str | None:
    if node.missing or node.pkg_meta is None:
        return None
    return node.pkg_meta.release or node.pkg_meta.version


def _update_hint(node: PackageNode) -> str:
    if node.update is None:
        return ""

    installed = node.pkg_meta.version if node.pkg_meta is not None else None
    target = node.update.target
    latest = node.update.latest
    parts: list[str] = []
    if target and target != installed:
        parts.append(f"{target} available")
    if latest and latest != target:
        parts.append(f"latest is {latest}")
    return ", ".join(parts)


def _relative_dir(canonical_dir: str, directory: str | None) -> str:
    if directory is None:
        return canonical_dir
    try:
        return os.path.relpath(canonical_dir, directory)
    except ValueError:
        # Different drives on Windows have no relative path.
        return canonical_dir


def package_label(node: PackageNode, directory: str | None = None) -> Text:
    """Compose `name#version` plus root dir and status decorations."""

    version = _installed_version(node)
    label = Text(node.endpoint.name + (f"#{version}" if version else ""))

    if node.root and node.canonical_dir:
        label.append(" " + _relative_dir(node.canonical_dir, directory))

    if node.missing:
        label.append(" not installed", style="red")
        return label

    if node.different:
        label.append(" different", style="red")
    if node.linked:
        label.append(" linked", style="magenta")

    if node.incompatible:
        label.append(" incompatible", style="yellow")
        if node.endpoint.target:
            label.append(f" with {node.endpoint.target}")
    elif node.extraneous:
        label.append(" extraneous", style="green")

    hint = _update_hint(node)
    if hint:
        label.append(" (")
        label.append(hint, style="cyan")
        label.append(")")

    return label


def flatten(node: PackageNode, directory: str | None = None) -> DisplayNode:
    """Convert one package node, and everything below it, into a display node.

    Missing packages are leaves even when they list dependencies. Shared
    dependencies are duplicated under every parent that requires them.
    """

    label = package_label(node, directory)
    if node.missing or not node.dependencies:
        return DisplayNode(label=label)
    return DisplayNode(
        label=label,
        nodes=tuple(flatten(child, directory) for child in node.dependencies.values()),
    )


def flatten_install_root(node: PackageNode, directory: str | None = None) -> DisplayNode:
    """Flatten an install/update/link root, truncated to one dependency level."""

    return flatten(replace(prune_to_direct(node), root=True), directory)


def to_rich_tree(node: DisplayNode) -> Tree:
    tree = Tree(node.label)
    _attach_children(tree, node)
    return tree


def _attach_children(branch: Tree, node: DisplayNode) -> None:
    for child in node.nodes:
        _attach_children(branch.add(child.label), child)
