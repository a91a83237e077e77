"""Immutable declaration model produced by the Go source parser."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

Span = Tuple[int, int]

_DIRECTIVE_PREFIXES = ("line ", "extern ", "export ")
_DIRECTIVE_PATTERN = re.compile(r"^[a-z0-9]+:[a-z0-9]")


def is_exported_name(name: str) -> bool:
    """Return True when ``name`` starts with an upper-case letter."""
    return bool(name) and name[0].isupper()


@dataclass(frozen=True)
class Ident:
    """An identifier and its byte offset in the file."""

    name: str
    pos: int = 0

    @property
    def is_exported(self) -> bool:
        return is_exported_name(self.name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class CommentGroup:
    """Sequence of adjacent comments with no blank line between them."""

    comments: Tuple[str, ...]

    def text(self) -> str:
        """Return the comment text with markers and directives removed."""
        lines: List[str] = []
        for comment in self.comments:
            if comment.startswith("//"):
                body = comment[2:]
                if _is_directive(body):
                    continue
                if body.startswith(" "):
                    body = body[1:]
            elif comment.startswith("/*"):
                body = comment[2:-2]
            else:
                body = comment
            lines.extend(line.rstrip(" \t\r\n") for line in body.split("\n"))

        while lines and not lines[0]:
            lines.pop(0)

        collapsed: List[str] = []
        for line in lines:
            if line or (collapsed and collapsed[-1]):
                collapsed.append(line)
        while collapsed and not collapsed[-1]:
            collapsed.pop()

        if not collapsed:
            return ""
        return "\n".join(collapsed) + "\n"


def _is_directive(body: str) -> bool:
    if body.startswith(_DIRECTIVE_PREFIXES):
        return True
    return bool(_DIRECTIVE_PATTERN.match(body))


def doc_text(group: Optional[CommentGroup]) -> str:
    return group.text() if group is not None else ""


class Token(str, Enum):
    """Keyword that introduces a generic declaration."""

    IMPORT = "import"
    CONST = "const"
    TYPE = "type"
    VAR = "var"


@dataclass(frozen=True)
class ImportSpec:
    path: str
    name: Optional[str] = None
    span: Span = (0, 0)


@dataclass(frozen=True)
class EmbeddedField:
    """An anonymous struct field naming a package-local type."""

    name: str
    pointer: bool = False


@dataclass(frozen=True)
class TypeSpec:
    name: Ident
    doc: Optional[CommentGroup] = None
    alias: bool = False
    span: Span = (0, 0)
    is_struct: bool = False
    embedded: Tuple[EmbeddedField, ...] = ()


@dataclass(frozen=True)
class ValueSpec:
    names: Tuple[Ident, ...]
    doc: Optional[CommentGroup] = None
    span: Span = (0, 0)


Spec = Union[ImportSpec, TypeSpec, ValueSpec]


@dataclass(frozen=True)
class GenDecl:
    """A ``type``, ``const``, ``var`` or ``import`` declaration, possibly grouped."""

    tok: Token
    specs: Tuple[Spec, ...]
    doc: Optional[CommentGroup] = None
    filename: str = ""
    span: Span = (0, 0)
    lparen: bool = False


@dataclass(frozen=True)
class Field:
    """One entry of a parameter, result or type parameter list.

    ``type`` holds the canonical type text; ``type_pos`` is the byte offset
    where the type starts in the source file.
    """

    names: Tuple[Ident, ...]
    type: str
    span: Span = (0, 0)
    type_pos: int = 0

    def text(self) -> str:
        """Return the field as gofmt prints it: names, one blank, type."""
        if not self.names:
            return self.type
        return ", ".join(ident.name for ident in self.names) + " " + self.type


@dataclass(frozen=True)
class FieldList:
    """Fields between brackets; ``span`` covers the brackets themselves."""

    fields: Tuple[Field, ...] = ()
    span: Span = (0, 0)
    enclosed: bool = True


@dataclass(frozen=True)
class FuncDecl:
    """A function or method declaration.

    Field lists record byte offsets into the owning file so line breaks can be
    recovered through a :class:`FileSet` when the signature is rendered.
    ``result_types`` names the base type of each result, empty for types that
    are imported or not named.
    """

    name: Ident
    doc: Optional[CommentGroup] = None
    filename: str = ""
    span: Span = (0, 0)
    recv: Optional[FieldList] = None
    recv_type: str = ""
    type_params: Optional[FieldList] = None
    params: Optional[FieldList] = None
    result: Optional[FieldList] = None
    result_types: Tuple[str, ...] = ()
    has_body: bool = False

    @property
    def is_method(self) -> bool:
        return self.recv is not None

    @property
    def type_param_names(self) -> Tuple[str, ...]:
        if self.type_params is None:
            return ()
        return tuple(ident.name for item in self.type_params.fields for ident in item.names)


Decl = Union[GenDecl, FuncDecl]


@dataclass(frozen=True)
class File:
    name: str
    package: Ident
    doc: Optional[CommentGroup] = None
    decls: Tuple[Decl, ...] = ()
    imports: Tuple[ImportSpec, ...] = ()


@dataclass
class Package:
    """Files sharing one ``package`` clause, keyed by file path."""

    name: str
    files: Dict[str, File] = field(default_factory=dict)


class FileSet:
    """Registry of parsed file sources addressed by file path."""

    def __init__(self) -> None:
        self._sources: Dict[str, bytes] = {}

    def add_file(self, filename: str, source: bytes) -> None:
        self._sources[filename] = source

    def source(self, filename: str) -> bytes:
        return self._sources[filename]

    def __contains__(self, filename: object) -> bool:
        return filename in self._sources

    def __len__(self) -> int:
        return len(self._sources)

    def filenames(self) -> List[str]:
        return sorted(self._sources)

    def line(self, filename: str, offset: int) -> int:
        """Return the 1-based line of byte ``offset`` in ``filename``."""
        return self._sources[filename].count(b"\n", 0, offset) + 1


__all__ = [
    "CommentGroup",
    "Decl",
    "EmbeddedField",
    "Field",
    "FieldList",
    "File",
    "FileSet",
    "FuncDecl",
    "GenDecl",
    "Ident",
    "ImportSpec",
    "Package",
    "Span",
    "Spec",
    "Token",
    "TypeSpec",
    "ValueSpec",
    "doc_text",
    "is_exported_name",
]
