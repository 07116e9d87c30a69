"""
Jinja2 Environment
Shared loader for document, block and page templates
"""

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

TEMPLATES_DIR = Path(__file__).parent / "templates"


def escape_text(value: Any) -> Markup:
    """HTML-escape a value; braces become entities so values never read as tokens"""
    return Markup(str(escape(str(value))).replace("{", "&#123;").replace("}", "&#125;"))


env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
env.filters["text"] = escape_text


def render_block(name: str, **context) -> Markup:
    """Render a template file into markup that is safe to embed"""
    return Markup(env.get_template(name).render(**context))
