"""Tree-sitter powered Go source parser."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from .logging import get_logger
from .syntax import (
    CommentGroup,
    Decl,
    EmbeddedField,
    Field,
    FieldList,
    File,
    FileSet,
    FuncDecl,
    GenDecl,
    Ident,
    ImportSpec,
    Package,
    Span,
    Spec,
    Token,
    TypeSpec,
    ValueSpec,
)

GO_LANGUAGE = Language(tree_sitter_go.language())

_GEN_DECL_TOKENS = {
    "import_declaration": Token.IMPORT,
    "const_declaration": Token.CONST,
    "type_declaration": Token.TYPE,
    "var_declaration": Token.VAR,
}
_SPEC_TYPES = {"import_spec", "const_spec", "var_spec", "type_spec", "type_alias"}
_SPEC_LISTS = {"import_spec_list", "var_spec_list"}
_FIELD_TYPES = {"parameter_declaration", "variadic_parameter_declaration", "type_parameter_declaration"}

logger = get_logger("parser")


class ParseError(RuntimeError):
    """Raised when the source tree cannot be read or parsed."""


def filter_tests(name: str) -> bool:
    """Return True for files that should be parsed (anything but tests)."""
    return "_test" not in name


class GoParser:
    """Converts Go files into :mod:`gocards.syntax` declarations."""

    def __init__(self) -> None:
        self._parser = Parser(GO_LANGUAGE)

    def parse_dir(
        self,
        path: str | Path,
        file_filter: Optional[Callable[[str], bool]] = filter_tests,
    ) -> Tuple[FileSet, Dict[str, Package]]:
        """Parse every ``.go`` file of ``path`` accepted by ``file_filter``.

        Files are visited in lexicographic order and grouped by package name.
        The first failure aborts parsing with :class:`ParseError`.
        """
        directory = Path(path)
        try:
            entries = sorted(entry for entry in directory.iterdir() if entry.is_file())
        except OSError as exc:
            raise ParseError(f"cannot read directory {directory}: {exc}") from exc

        fileset = FileSet()
        packages: Dict[str, Package] = {}
        for entry in entries:
            if not entry.name.endswith(".go"):
                continue
            if file_filter is not None and not file_filter(entry.name):
                logger.debug("Skipping %s", entry.name)
                continue
            try:
                source = entry.read_bytes()
            except OSError as exc:
                raise ParseError(f"cannot read {entry}: {exc}") from exc
            parsed = self.parse_file(str(entry), source, fileset)
            package = packages.setdefault(parsed.package.name, Package(name=parsed.package.name))
            package.files[parsed.name] = parsed
            logger.debug("Parsed %s (package %s)", entry.name, parsed.package.name)

        logger.debug("Found %d package(s) in %s", len(packages), directory)
        return fileset, packages

    def parse_file(self, filename: str, source: bytes, fileset: FileSet) -> File:
        """Parse one file and register its source with ``fileset``."""
        try:
            source.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"{filename}: invalid UTF-8 encoding") from exc

        tree = self._parser.parse(source)
        root = tree.root_node
        if root.has_error:
            node = _first_error(root)
            row, column = _point(node.start_point) if node is not None else (0, 0)
            raise ParseError(f"{filename}:{row + 1}:{column + 1}: syntax error")

        fileset.add_file(filename, source)
        builder = _FileBuilder(filename, source)
        return builder.build(root)


class _FileBuilder:
    def __init__(self, filename: str, source: bytes) -> None:
        self.filename = filename
        self.source = source

    def build(self, root: Node) -> File:
        package: Optional[Ident] = None
        file_doc: Optional[CommentGroup] = None
        decls: List[Decl] = []
        imports: List[ImportSpec] = []

        for node, doc in _with_docs(root.children, self.source):
            if node.type == "package_clause":
                name_node = _first_of_type(node, "package_identifier")
                if name_node is None:
                    raise ParseError(f"{self.filename}: malformed package clause")
                package = Ident(self._text(name_node), name_node.start_byte)
                file_doc = doc
            elif node.type == "function_declaration" or node.type == "method_declaration":
                decls.append(self._func_decl(node, doc))
            elif node.type in _GEN_DECL_TOKENS:
                decl = self._gen_decl(node, doc)
                decls.append(decl)
                if decl.tok is Token.IMPORT:
                    imports.extend(spec for spec in decl.specs if isinstance(spec, ImportSpec))

        if package is None:
            raise ParseError(f"{self.filename}:1:1: expected 'package' clause")
        return File(
            name=self.filename,
            package=package,
            doc=file_doc,
            decls=tuple(decls),
            imports=tuple(imports),
        )

    def _func_decl(self, node: Node, doc: Optional[CommentGroup]) -> FuncDecl:
        receiver = node.child_by_field_name("receiver")
        type_params = node.child_by_field_name("type_parameters")
        params = node.child_by_field_name("parameters")
        result = node.child_by_field_name("result")
        return FuncDecl(
            name=self._ident(node.child_by_field_name("name")),
            doc=doc,
            filename=self.filename,
            span=_span(node),
            recv=self._field_list(receiver) if receiver is not None else None,
            recv_type=self._receiver_type(receiver) if receiver is not None else "",
            type_params=self._field_list(type_params) if type_params is not None else None,
            params=self._field_list(params) if params is not None else None,
            result=self._result(result),
            result_types=self._result_types(result),
            has_body=node.child_by_field_name("body") is not None,
        )

    def _receiver_type(self, receiver: Node) -> str:
        for param in receiver.named_children:
            if param.type != "parameter_declaration":
                continue
            type_node = param.child_by_field_name("type")
            if type_node is None:
                return ""
            name, pointer = self._base_type_name(type_node)
            return f"*{name}" if pointer and name else name
        return ""

    def _field_list(self, node: Node) -> FieldList:
        fields = tuple(
            self._field(child) for child in node.named_children if child.type in _FIELD_TYPES
        )
        return FieldList(fields=fields, span=_span(node))

    def _field(self, node: Node) -> Field:
        names = tuple(
            self._ident(child)
            for child in node.children_by_field_name("name")
            if child.type == "identifier"
        )
        type_node = node.child_by_field_name("type")
        type_text = self._type_text(type_node) if type_node is not None else ""
        if node.type == "variadic_parameter_declaration":
            type_text = f"...{type_text}"
        return Field(
            names=names,
            type=type_text,
            span=_span(node),
            type_pos=type_node.start_byte if type_node is not None else node.start_byte,
        )

    def _result(self, node: Optional[Node]) -> Optional[FieldList]:
        if node is None:
            return None
        if node.type == "parameter_list":
            return self._field_list(node)
        single = Field(names=(), type=self._type_text(node), span=_span(node), type_pos=node.start_byte)
        return FieldList(fields=(single,), span=_span(node), enclosed=False)

    def _result_types(self, node: Optional[Node]) -> Tuple[str, ...]:
        if node is None:
            return ()
        if node.type == "parameter_list":
            types = [
                child.child_by_field_name("type")
                for child in node.named_children
                if child.type in _FIELD_TYPES
            ]
        else:
            types = [node]
        return tuple(self._factory_type_name(type_node) for type_node in types if type_node is not None)

    def _factory_type_name(self, node: Node) -> str:
        # Slices and arrays of T count as results of type T.
        if node.type in {"slice_type", "array_type", "implicit_length_array_type"}:
            element = node.child_by_field_name("element")
            if element is None:
                return ""
            node = element
        return self._base_type_name(node)[0]

    def _base_type_name(self, node: Node) -> Tuple[str, bool]:
        """Return the local type name behind pointers and type arguments."""
        pointer = False
        while node.type in {"pointer_type", "parenthesized_type"}:
            if node.type == "pointer_type":
                pointer = True
            inner = _inner(node)
            if inner is None:
                return "", pointer
            node = inner
        if node.type == "generic_type":
            base = node.child_by_field_name("type")
            if base is None:
                return "", pointer
            node = base
        if node.type != "type_identifier":
            return "", pointer
        return self._text(node), pointer

    def _type_text(self, node: Node) -> str:
        """Render a type expression with gofmt spacing."""
        kind = node.type
        if kind in {"type_identifier", "identifier", "field_identifier", "package_identifier"}:
            return self._text(node)
        if kind == "qualified_type":
            package = node.child_by_field_name("package")
            name = node.child_by_field_name("name")
            if package is not None and name is not None:
                return f"{self._text(package)}.{self._text(name)}"
        elif kind in {"pointer_type", "negated_type", "parenthesized_type"}:
            inner = _inner(node)
            if inner is not None:
                text = self._type_text(inner)
                if kind == "pointer_type":
                    return f"*{text}"
                if kind == "negated_type":
                    return f"~{text}"
                return f"({text})"
        elif kind == "slice_type":
            element = node.child_by_field_name("element")
            if element is not None:
                return f"[]{self._type_text(element)}"
        elif kind == "array_type":
            length = node.child_by_field_name("length")
            element = node.child_by_field_name("element")
            if length is not None and element is not None:
                return f"[{_collapse(self._text(length))}]{self._type_text(element)}"
        elif kind == "implicit_length_array_type":
            element = node.child_by_field_name("element")
            if element is not None:
                return f"[...]{self._type_text(element)}"
        elif kind == "map_type":
            key = node.child_by_field_name("key")
            value = node.child_by_field_name("value")
            if key is not None and value is not None:
                return f"map[{self._type_text(key)}]{self._type_text(value)}"
        elif kind == "channel_type":
            value = node.child_by_field_name("value")
            if value is not None:
                head = "".join(self.source[node.start_byte : value.start_byte].decode("utf-8").split())
                head = {"<-chan": "<-chan ", "chan<-": "chan<- "}.get(head, "chan ")
                return f"{head}{self._type_text(value)}"
        elif kind == "function_type":
            params = node.child_by_field_name("parameters")
            if params is not None:
                text = f"func{self._inline_list(params)}"
                result = self._result(node.child_by_field_name("result"))
                if result is not None and result.fields:
                    text = f"{text} {_inline_result(result)}"
                return text
        elif kind == "generic_type":
            base = node.child_by_field_name("type")
            arguments = node.child_by_field_name("type_arguments")
            if base is not None and arguments is not None:
                args = ", ".join(self._type_text(child) for child in _named(arguments))
                return f"{self._type_text(base)}[{args}]"
        elif kind in {"type_elem", "type_constraint"}:
            return " | ".join(self._type_text(child) for child in _named(node))
        return _collapse(self._text(node))

    def _inline_list(self, node: Node) -> str:
        fields = self._field_list(node).fields
        return "(" + ", ".join(item.text() for item in fields) + ")"

    def _gen_decl(self, node: Node, doc: Optional[CommentGroup]) -> GenDecl:
        tok = _GEN_DECL_TOKENS[node.type]
        specs: List[Spec] = []
        lparen = False
        containers = [node]
        containers.extend(child for child in node.named_children if child.type in _SPEC_LISTS)
        for container in containers:
            if any(child.type == "(" for child in container.children):
                lparen = True
            for spec_node, spec_doc in _with_docs(container.children, self.source):
                if spec_node.type in _SPEC_TYPES:
                    specs.append(self._spec(spec_node, spec_doc))
        return GenDecl(
            tok=tok,
            specs=tuple(specs),
            doc=doc,
            filename=self.filename,
            span=_span(node),
            lparen=lparen,
        )

    def _spec(self, node: Node, doc: Optional[CommentGroup]) -> Spec:
        if node.type == "import_spec":
            path_node = node.child_by_field_name("path")
            name_node = node.child_by_field_name("name")
            path = self._text(path_node).strip('"`') if path_node is not None else ""
            return ImportSpec(
                path=path,
                name=self._text(name_node) if name_node is not None else None,
                span=_span(node),
            )
        if node.type in {"type_spec", "type_alias"}:
            type_node = node.child_by_field_name("type")
            is_struct = type_node is not None and type_node.type == "struct_type"
            return TypeSpec(
                name=self._ident(node.child_by_field_name("name")),
                doc=doc,
                alias=node.type == "type_alias",
                span=_span(node),
                is_struct=is_struct,
                embedded=self._embedded_fields(type_node) if is_struct else (),
            )
        names = tuple(
            self._ident(child)
            for child in node.children_by_field_name("name")
            if child.type == "identifier"
        )
        return ValueSpec(names=names, doc=doc, span=_span(node))

    def _embedded_fields(self, struct: Node) -> Tuple[EmbeddedField, ...]:
        embedded: List[EmbeddedField] = []
        for field_list in struct.named_children:
            if field_list.type != "field_declaration_list":
                continue
            for declaration in field_list.named_children:
                if declaration.type != "field_declaration":
                    continue
                if declaration.children_by_field_name("name"):
                    continue
                type_node = declaration.child_by_field_name("type")
                if type_node is None:
                    continue
                name, pointer = self._base_type_name(type_node)
                if not name:
                    continue
                pointer = pointer or any(child.type == "*" for child in declaration.children)
                embedded.append(EmbeddedField(name=name, pointer=pointer))
        return tuple(embedded)

    def _ident(self, node: Optional[Node]) -> Ident:
        if node is None:
            return Ident("")
        return Ident(self._text(node), node.start_byte)

    def _text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8")


def _with_docs(
    children: Iterable[Node], source: bytes
) -> Iterator[Tuple[Node, Optional[CommentGroup]]]:
    """Pair each named node with the comment group that documents it.

    A comment group documents a node when it ends on the line right above the
    node and its first comment does not share a line with a preceding token.
    Comments trailing a token only group with comments on that same line.
    """
    group: List[Node] = []
    group_is_lead = False
    last_token_row = -1

    for child in children:
        if child.type == "comment":
            start_row = _point(child.start_point)[0]
            reach = 1 if group_is_lead else 0
            if group and start_row <= _point(group[-1].end_point)[0] + reach:
                group.append(child)
            else:
                group = [child]
                group_is_lead = start_row > last_token_row
            continue

        if not child.is_named:
            if child.type in {"\n", ";", ""} or not source[child.start_byte : child.end_byte].strip():
                continue
            last_token_row = _point(child.end_point)[0]
            group = []
            continue

        doc: Optional[CommentGroup] = None
        if (
            group
            and group_is_lead
            and _point(group[-1].end_point)[0] + 1 == _point(child.start_point)[0]
        ):
            doc = CommentGroup(
                tuple(
                    source[comment.start_byte : comment.end_byte].decode("utf-8")
                    for comment in group
                )
            )
        yield child, doc
        group = []
        last_token_row = _point(child.end_point)[0]


def _named(node: Node) -> List[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def _inner(node: Node) -> Optional[Node]:
    children = _named(node)
    return children[0] if children else None


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _inline_result(result: FieldList) -> str:
    fields = result.fields
    if not result.enclosed or (len(fields) == 1 and not fields[0].names):
        return fields[0].type
    return "(" + ", ".join(item.text() for item in fields) + ")"


def _first_error(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _first_of_type(node: Node, node_type: str) -> Optional[Node]:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _point(point) -> Tuple[int, int]:  # type: ignore[no-untyped-def]
    return point[0], point[1]


def _span(node: Node) -> Span:
    return node.start_byte, node.end_byte


def parse_dir(
    path: str | Path, file_filter: Optional[Callable[[str], bool]] = filter_tests
) -> Tuple[FileSet, Dict[str, Package]]:
    """Parse a directory of Go files with a fresh :class:`GoParser`."""
    return GoParser().parse_dir(path, file_filter)


__all__ = ["GO_LANGUAGE", "GoParser", "ParseError", "filter_tests", "parse_dir"]
