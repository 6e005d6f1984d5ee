"""Template engine selecting the extractor for a classified receipt."""

import logging
from datetime import date
from typing import Dict, Optional, Callable

from ..models import ExtractionResult, ReceiptType
from .base_template import BaseTemplate
from .gas import GasTemplate
from .restaurant import RestaurantTemplate
from .retail import RetailTemplate

logger = logging.getLogger(__name__)


class TemplateEngine:
    """Engine for managing and applying the per-type receipt templates."""

    def __init__(self, clock: Optional[Callable[[], date]] = None):
        """
        Initialize with the built-in templates.

        Args:
            clock: Returns today's date for receipts without a readable date
        """
        self.templates: Dict[ReceiptType, BaseTemplate] = {
            ReceiptType.RETAIL: RetailTemplate(clock=clock),
            ReceiptType.RESTAURANT: RestaurantTemplate(clock=clock),
            ReceiptType.GAS: GasTemplate(clock=clock),
        }

        logger.info(f"Initialized TemplateEngine with {len(self.templates)} templates")

    def template_for(self, receipt_type: ReceiptType) -> BaseTemplate:
        """Return the template for a receipt type; unknown receipts use the retail template."""
        return self.templates.get(receipt_type, self.templates[ReceiptType.RETAIL])

    def extract(self, text: str, receipt_type: ReceiptType) -> ExtractionResult:
        """
        Extract fields with the template matching the receipt type.

        Args:
            text: Raw receipt text
            receipt_type: Classifier output

        Returns:
            ExtractionResult from the selected template
        """
        template = self.template_for(receipt_type)
        logger.info(f"Using template: {template.name}")
        return template.extract(text)

    def list_templates(self) -> Dict[str, str]:
        """List available templates keyed by receipt type."""
        return {receipt_type.value: template.name
                for receipt_type, template in self.templates.items()}
