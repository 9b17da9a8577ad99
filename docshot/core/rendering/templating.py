"""
Template Environment
====================

Jinja2 environment for the HTML fragments the pipeline injects into documents.
"""

from functools import lru_cache
from pathlib import Path

import jinja2


TEMPLATE_DIR = Path(__file__).parent / "templates"


@lru_cache(maxsize=1)
def get_template_environment() -> jinja2.Environment:
    """Return the shared Jinja2 environment for injected fragments."""
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=jinja2.select_autoescape(["html", "xml"]),
        keep_trailing_newline=True,
    )


def render_fragment(template_name: str, **context: object) -> str:
    """Render a template from the fragments directory."""
    return get_template_environment().get_template(template_name).render(**context)
