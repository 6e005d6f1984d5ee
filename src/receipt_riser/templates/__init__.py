"""Per-type receipt extraction templates."""

from .base_template import BaseTemplate, baseline_confidence
from .gas import GasTemplate
from .restaurant import RestaurantTemplate
from .retail import RetailTemplate
from .template_engine import TemplateEngine

__all__ = [
    'BaseTemplate', 'baseline_confidence',
    'RetailTemplate', 'RestaurantTemplate', 'GasTemplate',
    'TemplateEngine',
]
