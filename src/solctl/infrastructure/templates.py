"""Shared Jinja2 template loading for files solctl writes."""

from __future__ import annotations

from jinja2 import Environment, PackageLoader, StrictUndefined


def build_template_environment(group: str) -> Environment:
    """Build a Jinja2 environment over the packaged ``templates/<group>`` directory.

    Undefined variables raise instead of rendering empty, so a template
    that drifts from its caller fails loudly.
    """
    return Environment(
        loader=PackageLoader("solctl", f"templates/{group}"),
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        autoescape=False,
    )
