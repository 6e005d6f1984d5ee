"""Receipt parsing pipeline combining heuristics, entities and learned models."""

import logging
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional

from .classify import ReceiptClassifier
from .config import Settings
from .entities import EntityExtractionService, ReceiptEntities
from .learning import CorrectionEngine, ModelTrainingService, TrainingDataStore, TrainingScheduler
from .models import ExtractionResult, ParsedReceipt, ReceiptField, ReceiptType, value_to_text
from .parsers import DateParser
from .storage import PreferenceStore
from .templates import TemplateEngine, baseline_confidence

logger = logging.getLogger(__name__)

PREFERENCES_FILE = 'preferences.json'
RECOGNIZED_TYPE_BONUS = 0.1


class ReceiptParser:
    """
    Turns OCR text into a structured receipt and learns from corrections.

    Extraction runs classifier, type template, entity adapter and field
    models in that order. Heuristic values win over entity values, which
    only fill gaps; a field model overrides both when its confidence
    exceeds the prediction threshold.
    """

    def __init__(self,
                 settings: Optional[Settings] = None,
                 entity_service: Optional[EntityExtractionService] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """
        Initialize the pipeline and its learning components.

        Args:
            settings: Limits and data directory; defaults when omitted
            entity_service: Entity adapter; the regex recognizer by default
            clock: Current time, used for default dates and record timestamps
        """
        self.settings = settings or Settings()
        self.clock = clock

        self.preferences = PreferenceStore(self.settings.data_dir / PREFERENCES_FILE)
        self.classifier = ReceiptClassifier(self.settings.rules_path)
        self.template_engine = TemplateEngine(clock=lambda: self.clock().date())
        self.entity_service = entity_service or EntityExtractionService(
            chunk_size=self.settings.entity_chunk_size
        )
        self.date_parser = DateParser()

        self.training_store = TrainingDataStore(
            self.preferences,
            self.settings.data_dir,
            max_examples=self.settings.max_training_examples,
            clock=clock,
        )
        self.trainer = ModelTrainingService(self.training_store)
        self.corrections = CorrectionEngine(
            self.preferences,
            max_history=self.settings.max_correction_history,
            max_suggestions=self.settings.max_suggestions,
            clock=clock,
        )
        self.scheduler = TrainingScheduler(
            self.trainer,
            self.training_store,
            self.preferences,
            min_examples=self.settings.min_training_examples,
            training_interval=self.settings.training_interval,
            check_interval=self.settings.check_interval,
            clock=clock,
        )
        self._initialized = False

        logger.info(f"Initialized receipt parser (data dir: {self.settings.data_dir})")

    async def initialize(self) -> bool:
        """
        Rebuild the field models from the stored examples.

        Models live in memory only, so each new process retrains once before
        its first parse. Training runs when an earlier run succeeded or when
        the store already holds enough examples for a scheduled run.

        Returns:
            True if field models are available afterwards
        """
        if self._initialized:
            return bool(self.trainer.field_models)
        self._initialized = True

        count = await self.training_store.count()
        if count == 0:
            return False

        trained_before = self.scheduler.get_last_training_time() is not None
        if not trained_before and count < self.settings.min_training_examples:
            logger.info(f"Skipping model rebuild: {count} examples and no previous training run")
            return False

        return await self.trainer.train_models()

    async def parse_receipt_text(self, text: str) -> ParsedReceipt:
        """
        Parse one receipt.

        Args:
            text: Newline-delimited OCR text

        Returns:
            ParsedReceipt with the extraction result and per-field suggestions
        """
        if not self._initialized:
            await self.initialize()

        receipt_type = self.classifier.classify(text)
        result = self.template_engine.extract(text, receipt_type)

        entities = await self.entity_service.extract_receipt_entities(text)
        self._merge_entities(result, entities)

        self._apply_model_predictions(result, text)
        result.confidence_score = final_confidence(result)

        suggestions = {}
        for receipt_field in ReceiptField:
            suggestions[receipt_field.value] = await self.corrections.get_suggestions(
                text, receipt_field.value, result.field_value(receipt_field)
            )

        if result.merchant_name and result.amount is not None:
            await self.training_store.add_example(text, training_labels(result))

        logger.info(f"Parsed {result.receipt_type.value} receipt: merchant={result.merchant_name}, "
                    f"amount={result.amount}, confidence={result.confidence_score:.2f}")
        return ParsedReceipt(result=result, suggestions=suggestions)

    async def store_correction(self, text: str, field: str, original_value: Any, corrected_value: Any):
        """
        Record a user correction and fold it into the training example for this text.

        Args:
            text: Receipt text the correction applies to
            field: Corrected field name
            original_value: Value the parser extracted
            corrected_value: Value the user entered
        """
        await self.corrections.store_correction(text, field, original_value, corrected_value)

        corrected = value_to_text(corrected_value)
        if not corrected or corrected == (value_to_text(original_value) or ''):
            return

        existing = await self.training_store.get_example_for_text(text)
        labels = dict(existing.labels) if existing else {}
        labels[field] = corrected
        await self.training_store.add_example(text, labels)

    def _merge_entities(self, result: ExtractionResult, entities: ReceiptEntities):
        if result.merchant_address is None and entities.merchant_address:
            result.merchant_address = entities.merchant_address
        if result.amount is None and entities.amount is not None:
            result.amount = entities.amount
        if not result.date_found and entities.transaction_date is not None:
            result.transaction_date = entities.transaction_date
            result.date_found = True
        result.phone_number = entities.phone_number
        result.email = entities.email

    def _apply_model_predictions(self, result: ExtractionResult, text: str):
        for receipt_field in ReceiptField:
            field_name = receipt_field.value
            if not self.trainer.has_model_for_field(field_name):
                continue

            confidence = self.trainer.get_prediction_confidence(field_name, text)
            if confidence <= self.settings.prediction_threshold:
                continue

            label = self.trainer.predict_field(field_name, text)
            if label is None:
                continue

            if self._apply_label(result, receipt_field, label):
                logger.debug(f"Model override for {field_name}: {label!r} (confidence {confidence:.2f})")

    def _apply_label(self, result: ExtractionResult, receipt_field: ReceiptField, label: str) -> bool:
        if receipt_field == ReceiptField.MERCHANT_NAME:
            result.merchant_name = label
        elif receipt_field == ReceiptField.MERCHANT_ADDRESS:
            result.merchant_address = label
        elif receipt_field == ReceiptField.AMOUNT:
            try:
                result.amount = Decimal(label)
            except InvalidOperation:
                logger.warning(f"Ignoring unparseable amount prediction {label!r}")
                return False
        elif receipt_field == ReceiptField.TRANSACTION_DATE:
            parsed = self._parse_label_date(label)
            if parsed is None:
                logger.warning(f"Ignoring unparseable date prediction {label!r}")
                return False
            result.transaction_date = parsed
        return True

    def _parse_label_date(self, label: str) -> Optional[date]:
        try:
            return date.fromisoformat(label)
        except ValueError:
            return self.date_parser.parse_text(label)


def final_confidence(result: ExtractionResult) -> float:
    """Baseline field coverage plus a bonus for a recognized receipt type, capped at 1."""
    confidence = baseline_confidence(result)
    if result.receipt_type != ReceiptType.UNKNOWN:
        confidence += RECOGNIZED_TYPE_BONUS
    return min(1.0, max(0.0, confidence))


def training_labels(result: ExtractionResult) -> Dict[str, Optional[str]]:
    """Labels captured from an extraction; a defaulted date is not a label."""
    labels = {
        receipt_field.value: value_to_text(result.field_value(receipt_field))
        for receipt_field in ReceiptField
    }
    if not result.date_found:
        labels[ReceiptField.TRANSACTION_DATE.value] = None
    return labels
