"""Builds the package documentation model consumed by card templates."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Flag, auto
from typing import Dict, List, Optional, Set, Tuple

from .logging import get_logger
from .syntax import FuncDecl, GenDecl, Package, Token, TypeSpec, ValueSpec, doc_text, is_exported_name

logger = get_logger("docmodel")

_PREDECLARED_TYPES = frozenset(
    {
        "any", "bool", "byte", "comparable", "complex64", "complex128", "error",
        "float32", "float64", "int", "int8", "int16", "int32", "int64", "rune",
        "string", "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
    }
)


class DocMode(Flag):
    """Controls which declarations make it into a :class:`PackageDoc`.

    ``ALL_DECLS`` keeps unexported declarations. ``ALL_METHODS`` keeps every
    method promoted through an embedded field; without it only methods
    promoted from unexported types are listed.
    """

    NONE = 0
    ALL_DECLS = auto()
    ALL_METHODS = auto()


@dataclass(frozen=True)
class FuncDoc:
    """Documentation for a function or method.

    For a method promoted from an embedded type, ``recv`` names the embedding
    type, ``orig`` the receiver it was declared on and ``level`` the embedding
    depth. Declared methods have level 0.
    """

    name: str
    doc: str
    decl: FuncDecl
    recv: str = ""
    orig: str = ""
    level: int = 0


@dataclass(frozen=True)
class ValueDoc:
    """Documentation for one ``const`` or ``var`` declaration."""

    names: Tuple[str, ...]
    doc: str
    decl: GenDecl


@dataclass(frozen=True)
class TypeDoc:
    """Documentation for a type, its constructors and its methods."""

    name: str
    doc: str
    decl: GenDecl
    methods: Tuple[FuncDoc, ...] = ()
    funcs: Tuple[FuncDoc, ...] = ()


@dataclass(frozen=True)
class PackageDoc:
    """Read-only documentation snapshot of a single package."""

    name: str
    doc: str
    import_path: str
    filenames: Tuple[str, ...]
    imports: Tuple[str, ...]
    consts: Tuple[ValueDoc, ...]
    vars: Tuple[ValueDoc, ...]
    types: Tuple[TypeDoc, ...]
    funcs: Tuple[FuncDoc, ...]


def build_package_doc(
    package: Package,
    import_path: str = "",
    mode: DocMode = DocMode.ALL_DECLS | DocMode.ALL_METHODS,
) -> PackageDoc:
    """Group a package's declarations into functions, types, methods and values.

    Declarations keep source order; files are read in filename order. Methods
    are attached to their receiver's base type and dropped when that type is
    not declared in the package. A function whose results name exactly one
    package type is listed among that type's ``funcs`` instead of the
    package's. Methods of embedded types are promoted to the embedding type.
    """
    all_decls = bool(mode & DocMode.ALL_DECLS)
    all_methods = bool(mode & DocMode.ALL_METHODS)

    filenames = tuple(sorted(package.files))
    package_doc = ""
    imports: set[str] = set()
    consts: List[ValueDoc] = []
    variables: List[ValueDoc] = []
    funcs: List[FuncDoc] = []
    types: List[Tuple[str, str, GenDecl]] = []
    type_specs: Dict[str, TypeSpec] = {}
    methods: Dict[str, List[FuncDoc]] = {}

    for filename in filenames:
        file = package.files[filename]
        text = doc_text(file.doc)
        if text:
            package_doc = f"{package_doc}\n{text}" if package_doc else text
        imports.update(spec.path for spec in file.imports)

        for decl in file.decls:
            if isinstance(decl, FuncDecl):
                if not (all_decls or decl.name.is_exported):
                    continue
                func = FuncDoc(
                    name=decl.name.name,
                    doc=doc_text(decl.doc),
                    decl=decl,
                    recv=decl.recv_type,
                    orig=decl.recv_type,
                )
                if decl.is_method:
                    methods.setdefault(decl.recv_type.lstrip("*"), []).append(func)
                else:
                    funcs.append(func)
            elif decl.tok is Token.TYPE:
                type_specs.update(
                    (spec.name.name, spec) for spec in decl.specs if isinstance(spec, TypeSpec)
                )
                types.extend(_split_types(decl, all_decls))
            elif decl.tok in (Token.CONST, Token.VAR):
                value = _value_doc(decl)
                if not (all_decls or any(is_exported_name(name) for name in value.names)):
                    continue
                (consts if decl.tok is Token.CONST else variables).append(value)

    for receiver in methods:
        if receiver not in type_specs:
            logger.debug("Dropping methods of undeclared type %s in %s", receiver, package.name)

    declared = {name for name, _, _ in types}
    constructors: Dict[str, List[FuncDoc]] = {}
    package_funcs: List[FuncDoc] = []
    for func in funcs:
        owner = _factory_type(func.decl, declared, type_specs, all_decls)
        if owner:
            constructors.setdefault(owner, []).append(func)
        else:
            package_funcs.append(func)

    embedding = _Embedding(type_specs, methods, all_decls)
    type_docs = tuple(
        TypeDoc(
            name=name,
            doc=doc,
            decl=decl,
            methods=embedding.method_set(name, all_methods),
            funcs=tuple(constructors.get(name, ())),
        )
        for name, doc, decl in types
    )
    return PackageDoc(
        name=package.name,
        doc=package_doc,
        import_path=import_path,
        filenames=filenames,
        imports=tuple(sorted(imports)),
        consts=tuple(consts),
        vars=tuple(variables),
        types=type_docs,
        funcs=tuple(package_funcs),
    )


def _factory_type(
    decl: FuncDecl, declared: Set[str], type_specs: Dict[str, TypeSpec], all_decls: bool
) -> str:
    """Return the type a constructor belongs to, or ``""`` for plain functions.

    Every result naming a local, visible, non-predeclared type counts; the
    function is a constructor only when exactly one result counts and it
    names a listed type. Type parameters never count.
    """
    type_params = set(decl.type_param_names)
    names = [
        name
        for name in decl.result_types
        if name
        and (all_decls or is_exported_name(name))
        and (name not in _PREDECLARED_TYPES or name in type_specs)
        and name not in type_params
    ]
    if len(names) == 1 and names[0] in declared:
        return names[0]
    return ""


class _MethodSet:
    """Methods by name; a shallower method hides deeper ones, equal depths cancel out."""

    def __init__(self, declared: List[FuncDoc]) -> None:
        self._methods: Dict[str, Optional[FuncDoc]] = {}
        self._levels: Dict[str, int] = {}
        for method in declared:
            self._methods[method.name] = method
            self._levels[method.name] = 0

    def add(self, method: FuncDoc) -> None:
        level = self._levels.get(method.name)
        if level is None or method.level < level:
            self._methods[method.name] = method
            self._levels[method.name] = method.level
        elif method.level == level:
            self._methods[method.name] = None

    def listed(self, all_methods: bool) -> Tuple[FuncDoc, ...]:
        return tuple(
            method
            for method in self._methods.values()
            if method is not None
            and (all_methods or method.level == 0 or not is_exported_name(method.orig.lstrip("*")))
        )


class _Embedding:
    def __init__(
        self,
        type_specs: Dict[str, TypeSpec],
        methods: Dict[str, List[FuncDoc]],
        all_decls: bool,
    ) -> None:
        self.type_specs = type_specs
        self.methods = methods
        self.all_decls = all_decls

    def method_set(self, name: str, all_methods: bool) -> Tuple[FuncDoc, ...]:
        method_set = _MethodSet(self.methods.get(name, []))
        self._collect(method_set, name, name, False, 1, set())
        return method_set.listed(all_methods)

    def _collect(
        self,
        method_set: _MethodSet,
        type_name: str,
        recv_name: str,
        embedded_is_ptr: bool,
        level: int,
        visited: Set[str],
    ) -> None:
        visited.add(type_name)
        spec = self.type_specs.get(type_name)
        for field in spec.embedded if spec is not None else ():
            if field.name not in self.type_specs:
                continue
            if not (self.all_decls or is_exported_name(field.name)):
                continue
            # Pointer embedding sticks for everything embedded below it.
            is_ptr = embedded_is_ptr or field.pointer
            for method in self.methods.get(field.name, ()):
                method_set.add(_promote(method, recv_name, is_ptr, level))
            if field.name not in visited:
                self._collect(method_set, field.name, recv_name, is_ptr, level + 1, visited)
        visited.discard(type_name)


def _promote(method: FuncDoc, recv_name: str, embedded_is_ptr: bool, level: int) -> FuncDoc:
    """Rewrite ``method`` as if declared on ``recv_name``."""
    decl = method.decl
    if decl.recv is None or len(decl.recv.fields) != 1:
        return method
    pointer = decl.recv_type.startswith("*") and not embedded_is_ptr
    recv_type = f"*{recv_name}" if pointer else recv_name
    receiver = replace(decl.recv.fields[0], type=recv_type)
    promoted = replace(decl, recv=replace(decl.recv, fields=(receiver,)), recv_type=recv_type)
    return replace(method, decl=promoted, recv=recv_type, orig=method.recv, level=level)


def _split_types(decl: GenDecl, all_decls: bool) -> List[Tuple[str, str, GenDecl]]:
    """Return ``(name, doc, decl)`` for every type spec of ``decl``.

    Each spec of a parenthesised group gets its own single-spec declaration
    that falls back to the group comment when the spec has none.
    """
    specs = [spec for spec in decl.specs if isinstance(spec, TypeSpec)]
    if len(decl.specs) == 1 and specs and not decl.lparen:
        spec = specs[0]
        if not (all_decls or spec.name.is_exported):
            return []
        return [(spec.name.name, doc_text(spec.doc or decl.doc), decl)]

    result = []
    for spec in specs:
        if not (all_decls or spec.name.is_exported):
            continue
        single = GenDecl(
            tok=Token.TYPE,
            specs=(spec,),
            doc=decl.doc,
            filename=decl.filename,
            span=spec.span,
            lparen=False,
        )
        result.append((spec.name.name, doc_text(spec.doc or decl.doc), single))
    return result


def _value_doc(decl: GenDecl) -> ValueDoc:
    names = tuple(
        ident.name
        for spec in decl.specs
        if isinstance(spec, ValueSpec)
        for ident in spec.names
    )
    return ValueDoc(names=names, doc=doc_text(decl.doc), decl=decl)


__all__ = [
    "DocMode",
    "FuncDoc",
    "PackageDoc",
    "TypeDoc",
    "ValueDoc",
    "build_package_doc",
]
