"""
Rendering of a store's public HTML page.

Templates are looked up in app/templates first; when the file is missing a
built-in fallback template with the same name is used.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader, select_autoescape

from app.domain.models import StoreDomain

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
STORE_TEMPLATE = "store_template.html"

FALLBACK_STORE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ store.name }} - Online Store</title>
</head>
<body>
    <h1>Welcome to {{ store.name }}</h1>
    <p><strong>Domain:</strong> {{ store.full_domain }}</p>
    <p><strong>Status:</strong> <span class="status {{ status_class }}">{{ status_label }}</span></p>
    <p><strong>Store ID:</strong> {{ store.id }}</p>
    <p><strong>Created:</strong> {{ created_at }}</p>
    <h2>Featured Products</h2>
    {% for product in store.products %}
    <div class="product">
        <strong>{{ product.name }}</strong>
        <div>{{ product.description }}</div>
        <strong>${{ "%.2f"|format(product.price) }}</strong>
    </div>
    {% else %}
    <div class="product"><p>No products available yet.</p></div>
    {% endfor %}
    <p><a href="/store">View Store API</a></p>
</body>
</html>
"""


def format_created_date(moment: Optional[datetime]) -> str:
    """Human-readable creation date, e.g. 'March 5, 2025 at 02:07 PM'."""
    if moment is None:
        return "Unknown"
    return f"{moment.strftime('%B')} {moment.day}, {moment.year} at {moment.strftime('%I:%M %p')}"


class TemplateService:
    """Jinja2 environment for store pages."""

    def __init__(self, templates_dir: Optional[Path] = None):
        templates_dir = templates_dir or TEMPLATES_DIR
        self.env = Environment(
            loader=ChoiceLoader(
                [
                    FileSystemLoader(str(templates_dir)),
                    DictLoader({STORE_TEMPLATE: FALLBACK_STORE_TEMPLATE}),
                ]
            ),
            autoescape=select_autoescape(["html", "xml"]),
        )

        if (templates_dir / STORE_TEMPLATE).is_file():
            logger.info("✅ Store template loaded successfully")
        else:
            logger.warning("⚠️ Store template not found, using fallback")

    def render_store_page(self, store: StoreDomain) -> str:
        """
        Render the public page of a store.

        Args:
            store: Store to render

        Returns:
            str: HTML document
        """
        template = self.env.get_template(STORE_TEMPLATE)
        return template.render(
            store=store,
            status_label=store.status.value.upper(),
            status_class=store.status.value,
            created_at=format_created_date(store.created_at),
        )


_template_service: Optional[TemplateService] = None


def get_template_service() -> TemplateService:
    global _template_service
    if _template_service is None:
        _template_service = TemplateService()
    return _template_service
