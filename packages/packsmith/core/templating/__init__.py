"""Template evaluation for packsmith sources, headers and config files."""

from packsmith.core.templating.helpers import HelperFn, HelperRegistry, TemplateScope
from packsmith.core.templating.renderer import TemplateRenderer

__all__ = [
    "HelperFn",
    "HelperRegistry",
    "TemplateRenderer",
    "TemplateScope",
]
