"""Renders function declarations back into canonical Go source text."""

from __future__ import annotations

from typing import List

from .syntax import FieldList, FileSet, FuncDecl


class DeclarationRenderError(RuntimeError):
    """Raised when a declaration cannot be serialized."""


def func_decl_string(decl: object, fileset: FileSet) -> str:
    """Return the signature of ``decl`` laid out the way gofmt prints it.

    The body is never rendered and comments are dropped. Parameters are
    rebuilt from the parsed fields with canonical spacing; a list whose
    entries start on separate source lines keeps those line breaks, each entry
    indented by one tab and the list closed with a trailing comma.
    """
    if not isinstance(decl, FuncDecl):
        raise DeclarationRenderError(
            f"cannot render {type(decl).__name__} as a function declaration"
        )
    if decl.filename not in fileset:
        raise DeclarationRenderError(f"{decl.filename or '<unknown>'}: file is not in the file set")
    if decl.params is None:
        raise DeclarationRenderError(f"{decl.filename}: {decl.name} has no parameter list")

    renderer = _SignatureRenderer(decl, fileset)
    parts: List[str] = ["func "]
    if decl.recv is not None:
        parts.append(renderer.field_list(decl.recv))
        parts.append(" ")
    parts.append(decl.name.name)
    if decl.type_params is not None:
        parts.append(renderer.field_list(decl.type_params, "[", "]"))
    parts.append(renderer.field_list(decl.params))
    result = renderer.result(decl.result)
    if result:
        parts.append(" ")
        parts.append(result)
    return "".join(parts)


class _SignatureRenderer:
    def __init__(self, decl: FuncDecl, fileset: FileSet) -> None:
        self.decl = decl
        self.fileset = fileset
        self.size = len(fileset.source(decl.filename))

    def line(self, offset: int) -> int:
        if offset < 0 or offset > self.size:
            raise DeclarationRenderError(
                f"{self.decl.filename}: offset {offset} of {self.decl.name} is outside the file"
            )
        return self.fileset.line(self.decl.filename, offset)

    def field_list(self, fields: FieldList, opening: str = "(", closing: str = ")") -> str:
        start, end = fields.span
        if end < start:
            raise DeclarationRenderError(
                f"{self.decl.filename}: span {start}:{end} of {self.decl.name} is outside the file"
            )
        parts = [opening]
        if fields.fields:
            prev_line = self.line(start)
            for index, item in enumerate(fields.fields):
                begins = self.line(item.span[0])
                if index > 0:
                    parts.append(",")
                if prev_line < begins:
                    parts.append("\n\t")
                elif index > 0:
                    parts.append(" ")
                parts.append(item.text())
                prev_line = self.line(item.type_pos)
            if prev_line < self.line(max(end - 1, start)):
                parts.append(",\n")
        parts.append(closing)
        return "".join(parts)

    def result(self, fields: FieldList | None) -> str:
        if fields is None or not fields.fields:
            return ""
        if not fields.enclosed or (len(fields.fields) == 1 and not fields.fields[0].names):
            # A single unnamed result prints without parentheses.
            return fields.fields[0].type
        return self.field_list(fields)


__all__ = ["DeclarationRenderError", "func_decl_string"]
