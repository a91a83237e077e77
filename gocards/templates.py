"""Jinja2 environment and the built-in flash card template."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from jinja2 import (
    BaseLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    pass_context,
)
from jinja2.runtime import Context

from .printer import func_decl_string
from .sentences import first_sentence
from .syntax import FileSet
from .visibility import is_exported, is_exported_name

DEFAULT_TEMPLATE_VERSION = "1"

# Flash card output template that works for Quizlet.
DEFAULT_TEMPLATE = """What is pkg {{ pkg.name }}?,{{ first_sentence(pkg.doc) }};
{% for func in pkg.funcs %}{% if is_exported(func.decl) %}What does function {{ func.name }} do and what is its declaration?,{{ first_sentence(func.doc) }}

{{ func_decl_string(func.decl) }};
{% endif %}{% endfor %}
{% for typ in pkg.types %}{% if is_exported(typ.decl) %}What is type {{ typ.name }}?,{{ first_sentence(typ.doc) }};
{% for method in typ.methods %}{% if method.decl.name.is_exported %}What does method {{ method.name }} do and what is its declaration?,{{ first_sentence(method.doc) }}

{{ func_decl_string(method.decl) }};
{% endif %}{% endfor %}{% endif %}{% endfor %}
"""


class TemplateCompileError(RuntimeError):
    """Raised when a card template cannot be loaded or compiled."""


@pass_context
def _render_func_decl(context: Context, decl: Any) -> str:
    fileset = context.get("fileset")
    if not isinstance(fileset, FileSet):
        fileset = FileSet()
    return func_decl_string(decl, fileset)


def create_environment(loader: Optional[BaseLoader] = None) -> Environment:
    """Return an environment with the card helpers registered."""
    env = Environment(
        loader=loader,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    helpers = {
        "first_sentence": first_sentence,
        "func_decl_string": _render_func_decl,
        "is_exported": is_exported,
        "is_exported_name": is_exported_name,
    }
    env.globals.update(helpers)
    env.filters.update(helpers)
    return env


def load_template(path: Path | str | None = None) -> Template:
    """Compile the template at ``path``, or the built-in one when ``path`` is None."""
    if path is None:
        env = create_environment()
        try:
            return env.from_string(DEFAULT_TEMPLATE)
        except TemplateError as exc:  # pragma: no cover - built-in template is static
            raise TemplateCompileError(f"default template: {exc}") from exc

    template_path = Path(path).expanduser()
    env = create_environment(FileSystemLoader(str(template_path.parent)))
    try:
        return env.get_template(template_path.name)
    except TemplateNotFound as exc:
        raise TemplateCompileError(f"template not found: {template_path}") from exc
    except TemplateError as exc:
        raise TemplateCompileError(f"{template_path}: {exc}") from exc
    except OSError as exc:
        raise TemplateCompileError(f"cannot read template {template_path}: {exc}") from exc


__all__ = [
    "DEFAULT_TEMPLATE",
    "DEFAULT_TEMPLATE_VERSION",
    "TemplateCompileError",
    "create_environment",
    "load_template",
]
