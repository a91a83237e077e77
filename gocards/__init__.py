"""Generate flash cards from the exported declarations of Go packages."""

from .docmodel import DocMode, FuncDoc, PackageDoc, TypeDoc, ValueDoc, build_package_doc
from .orchestrator import CardGenerator, GenerationResult
from .parser import GoParser, ParseError, parse_dir
from .printer import DeclarationRenderError, func_decl_string
from .sentences import first_sentence
from .templates import DEFAULT_TEMPLATE, TemplateCompileError, load_template
from .visibility import is_exported
from .writer import DirectoryError, PackageWriteError, ensure_output_dir, write_pkg_cards

__version__ = "0.1.0"

__all__ = [
    "CardGenerator",
    "DEFAULT_TEMPLATE",
    "DeclarationRenderError",
    "DirectoryError",
    "DocMode",
    "FuncDoc",
    "GenerationResult",
    "GoParser",
    "PackageDoc",
    "PackageWriteError",
    "ParseError",
    "TemplateCompileError",
    "TypeDoc",
    "ValueDoc",
    "build_package_doc",
    "ensure_output_dir",
    "first_sentence",
    "func_decl_string",
    "is_exported",
    "load_template",
    "parse_dir",
    "write_pkg_cards",
]
