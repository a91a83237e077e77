"""Exported-declaration predicate used to decide which declarations become cards."""

from __future__ import annotations

from .syntax import FuncDecl, GenDecl, Token, TypeSpec, is_exported_name


def is_exported(node: object) -> bool:
    """Return True when ``node`` is an exported type or function declaration.

    Type declarations are judged by their first spec only, so a grouped
    declaration such as ``type (a int; B string)`` is not exported. Any node
    other than a :class:`GenDecl` or :class:`FuncDecl` is never exported.
    """
    if isinstance(node, GenDecl):
        if node.tok is not Token.TYPE:
            return False
        if len(node.specs) < 1:
            return False
        spec = node.specs[0]
        if not isinstance(spec, TypeSpec):
            return False
        return spec.name.is_exported
    if isinstance(node, FuncDecl):
        return node.name.is_exported
    return False


__all__ = ["is_exported", "is_exported_name"]
