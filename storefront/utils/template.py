import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from storefront.utils.formatters import format_cents, format_date_time

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")

env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"])
)
env.filters["cents"] = format_cents
env.filters["date_time"] = format_date_time


def render_template(template_path: str, **context) -> str:
    template = env.get_template(template_path)
    return template.render(**context)
