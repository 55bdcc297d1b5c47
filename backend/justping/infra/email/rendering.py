from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape


@dataclass(frozen=True, slots=True)
class RenderedEmail:
    html: str
    text: str


class TemplateRenderer:
    """Render ``<name>.html`` and ``<name>.txt`` from the bundled templates."""

    def __init__(self, env: Environment | None = None) -> None:
        self.env = env or Environment(
            loader=PackageLoader("justping.infra.email", "templates"),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
        )

    def render(self, template_name: str, variables: dict[str, Any]) -> RenderedEmail:
        html = self.env.get_template(f"{template_name}.html").render(**variables)
        text = self.env.get_template(f"{template_name}.txt").render(**variables)
        return RenderedEmail(html=html, text=text)
