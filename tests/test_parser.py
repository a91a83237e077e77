"""Tests for gocards.parser."""

from __future__ import annotations

from pathlib import Path

import pytest

from gocards.parser import GoParser, ParseError, filter_tests, parse_dir
from gocards.syntax import EmbeddedField, FuncDecl, GenDecl, Token, TypeSpec, ValueSpec


def test_filter_tests_excludes_test_files() -> None:
    assert filter_tests("calc.go") is True
    assert filter_tests("calc_test.go") is False
    assert filter_tests("x_testdata.go") is False


def test_parse_dir_builds_declarations(calc_dir: Path) -> None:
    fileset, packages = parse_dir(calc_dir)

    assert list(packages) == ["calc"]
    package = packages["calc"]
    filename = str(calc_dir / "calc.go")
    assert list(package.files) == [filename]
    assert filename in fileset

    file = package.files[filename]
    assert file.package.name == "calc"
    assert file.doc is not None
    assert file.doc.text() == "Package calc provides arithmetic helpers. It is tiny.\n"
    assert [spec.path for spec in file.imports] == ["fmt"]

    funcs = [decl for decl in file.decls if isinstance(decl, FuncDecl)]
    assert [decl.name.name for decl in funcs] == ["Add", "sub", "Inc", "reset", "String"]
    add = funcs[0]
    assert add.doc is not None and add.doc.text() == "Add sums two integers. See also Sub.\n"
    assert add.is_method is False
    assert add.has_body is True
    assert funcs[3].doc is None

    methods = {decl.name.name: decl.recv_type for decl in funcs if decl.is_method}
    assert methods == {"Inc": "*Counter", "reset": "*Counter", "String": "Counter"}

    gen_decls = [decl for decl in file.decls if isinstance(decl, GenDecl)]
    assert [decl.tok for decl in gen_decls] == [Token.IMPORT, Token.CONST, Token.TYPE]
    const_spec = gen_decls[1].specs[0]
    assert isinstance(const_spec, ValueSpec)
    assert [ident.name for ident in const_spec.names] == ["Pi"]
    type_spec = gen_decls[2].specs[0]
    assert isinstance(type_spec, TypeSpec)
    assert type_spec.name.name == "Counter"
    assert gen_decls[2].doc is not None
    assert gen_decls[2].doc.text() == "Counter counts things.\n"


def test_parse_dir_skips_tests_and_other_files(go_source) -> None:
    root = go_source.write(
        {
            "calc.go": "package calc\n",
            "calc_test.go": "package calc\n\nfunc TestBroken( {\n",
            "README.md": "not go\n",
        }
    )

    fileset, packages = parse_dir(root)

    assert len(fileset) == 1
    assert list(packages["calc"].files) == [str(root / "calc.go")]


def test_parse_dir_groups_files_by_package(go_source) -> None:
    root = go_source.write(
        {
            "b.go": "package calc\n\nfunc B() {}\n",
            "a.go": "package calc\n\nfunc A() {}\n",
            "main.go": "package main\n\nfunc main() {}\n",
        }
    )

    _, packages = parse_dir(root)

    assert sorted(packages) == ["calc", "main"]
    assert list(packages["calc"].files) == [str(root / "a.go"), str(root / "b.go")]


def test_detached_comment_is_not_documentation(go_source) -> None:
    root = go_source.write(
        {
            "calc.go": """
            package calc

            // Detached note.

            func Add() {}

            func Sub() {} // trailing comment
            // Mul multiplies.
            func Mul() {}
            """
        }
    )

    _, packages = parse_dir(root)
    file = next(iter(packages["calc"].files.values()))
    docs = {decl.name.name: decl.doc for decl in file.decls if isinstance(decl, FuncDecl)}

    assert docs["Add"] is None
    assert docs["Sub"] is None
    assert docs["Mul"] is not None
    assert docs["Mul"].text() == "Mul multiplies.\n"


def test_grouped_specs_keep_their_own_docs(go_source) -> None:
    root = go_source.write(
        {
            "shapes.go": """
            package shapes

            // Shapes used by tests.
            type (
            	// Circle is round.
            	Circle struct{}
            	square struct{}
            )

            const (
            	Red, Green = 1, 2
            	blue       = 3
            )
            """
        }
    )

    _, packages = parse_dir(root)
    file = next(iter(packages["shapes"].files.values()))
    type_decl, const_decl = file.decls

    assert isinstance(type_decl, GenDecl)
    assert type_decl.lparen is True
    assert type_decl.doc is not None and type_decl.doc.text() == "Shapes used by tests.\n"
    circle, square = type_decl.specs
    assert isinstance(circle, TypeSpec) and isinstance(square, TypeSpec)
    assert circle.doc is not None and circle.doc.text() == "Circle is round.\n"
    assert square.doc is None

    assert isinstance(const_decl, GenDecl)
    assert const_decl.tok is Token.CONST
    names = [[ident.name for ident in spec.names] for spec in const_decl.specs]
    assert names == [["Red", "Green"], ["blue"]]


def test_generic_receiver_type_is_reduced_to_base_name(go_source) -> None:
    root = go_source.write(
        {
            "list.go": """
            package list

            type List[T any] struct{ items []T }

            func (l *List[T]) Len() int { return len(l.items) }
            """
        }
    )

    _, packages = parse_dir(root)
    file = next(iter(packages["list"].files.values()))
    method = file.decls[-1]

    assert isinstance(method, FuncDecl)
    assert method.recv_type == "*List"


def test_function_fields_are_recorded(go_source) -> None:
    root = go_source.write(
        {
            "gen.go": """
            package gen

            type Box[T any] struct{ v T }

            func Pack[T any](a,b T, rest ...string) (*Box[T], error) {
            	return nil, nil
            }

            func Many() ([]Box[int], map[string]int) {
            	return nil, nil
            }
            """
        }
    )

    _, packages = parse_dir(root)
    file = next(iter(packages["gen"].files.values()))
    pack, many = [decl for decl in file.decls if isinstance(decl, FuncDecl)]

    assert pack.type_param_names == ("T",)
    assert pack.params is not None
    assert [item.text() for item in pack.params.fields] == ["a, b T", "rest ...string"]
    assert pack.result is not None and pack.result.enclosed is True
    assert [item.type for item in pack.result.fields] == ["*Box[T]", "error"]
    assert pack.result_types == ("Box", "error")
    assert many.result_types == ("Box", "")


def test_embedded_struct_fields_are_recorded(go_source) -> None:
    root = go_source.write(
        {
            "embed.go": """
            package embed

            import "sync"

            type Outer struct {
            	Base
            	*Inner
            	sync.Mutex
            	name string
            }
            """
        }
    )

    _, packages = parse_dir(root)
    file = next(iter(packages["embed"].files.values()))
    (spec,) = file.decls[-1].specs

    assert isinstance(spec, TypeSpec)
    assert spec.is_struct is True
    assert spec.embedded == (EmbeddedField("Base"), EmbeddedField("Inner", pointer=True))


def test_syntax_error_raises_parse_error(go_source) -> None:
    root = go_source.write({"broken.go": "package broken\n\nfunc Add(a int {\n"})

    with pytest.raises(ParseError, match="broken.go:"):
        parse_dir(root)


def test_missing_package_clause_raises_parse_error(go_source) -> None:
    root = go_source.write({"empty.go": "// nothing here\n"})

    with pytest.raises(ParseError, match="expected 'package'"):
        parse_dir(root)


def test_missing_directory_raises_parse_error(tmp_path: Path) -> None:
    with pytest.raises(ParseError, match="cannot read directory"):
        GoParser().parse_dir(tmp_path / "missing")


def test_custom_filter_is_applied(go_source) -> None:
    root = go_source.write({"a.go": "package a\n", "b.go": "package b\n"})

    _, packages = GoParser().parse_dir(root, lambda name: name.startswith("a"))

    assert list(packages) == ["a"]
