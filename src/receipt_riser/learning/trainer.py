"""Training service owning the current snapshot of field models."""

import logging
from typing import Any, Dict, Optional

from .features import extract_features
from .field_model import FieldModel
from .training_store import TrainingDataStore

logger = logging.getLogger(__name__)


class ModelTrainingService:
    """Builds one FieldModel per labelled field and answers predictions."""

    def __init__(self, store: TrainingDataStore):
        self.store = store
        self.field_models: Dict[str, FieldModel] = {}
        self.is_training = False
        self.training_progress = 0.0
        self.training_status = ''

    async def train_models(self) -> bool:
        """
        Retrain every field model from the stored examples.

        The new models replace the current snapshot in a single assignment, so
        concurrent predictions see either the old or the new set.

        Returns:
            True on success; False when already training, when there is no data
            or when training failed (the previous snapshot is kept)
        """
        if self.is_training:
            logger.warning("Training already in progress")
            return False

        self.is_training = True
        self.training_progress = 0.0
        self.training_status = 'Loading training data...'

        try:
            examples = await self.store.get_examples()
            if not examples:
                self.training_status = 'No training data available'
                logger.warning(self.training_status)
                return False

            fields = []
            for example in examples:
                for field in example.labels:
                    if field not in fields:
                        fields.append(field)

            models: Dict[str, FieldModel] = {}
            for index, field in enumerate(fields):
                self.training_status = f'Training model for {field}...'
                self.training_progress = index / len(fields)

                model = FieldModel(field)
                for example in examples:
                    if example.has_label(field):
                        model.add_example(extract_features(example.text, field), example.labels[field])

                if model.example_count:
                    model.train()
                    models[field] = model

            self.field_models = models
            self.training_status = 'Training complete'
            self.training_progress = 1.0
            logger.info(f"Trained {len(models)} field models from {len(examples)} examples")
            return True
        except Exception as e:
            self.training_status = f'Error during training: {e}'
            logger.error(self.training_status)
            return False
        finally:
            self.is_training = False

    def predict_field(self, field: str, text: str) -> Optional[str]:
        model = self.field_models.get(field)
        if model is None:
            return None
        return model.predict(extract_features(text, field))

    def get_prediction_confidence(self, field: str, text: str) -> float:
        model = self.field_models.get(field)
        if model is None:
            return 0.0
        return model.confidence(extract_features(text, field))

    def has_model_for_field(self, field: str) -> bool:
        return field in self.field_models

    def get_training_example_count(self, field: str) -> int:
        model = self.field_models.get(field)
        return model.example_count if model else 0

    async def get_training_stats(self) -> Dict[str, Any]:
        """Summary of stored data and trained models for status displays."""
        examples = await self.store.get_examples()

        per_field: Dict[str, int] = {}
        for example in examples:
            for field in example.labels:
                if example.has_label(field):
                    per_field[field] = per_field.get(field, 0) + 1

        return {
            'total_examples': len(examples),
            'examples_per_field': per_field,
            'models': {
                field: {
                    'examples': model.example_count,
                    'labels': len(model.labels),
                    'default_label': model.default_label,
                }
                for field, model in self.field_models.items()
            },
            'is_training': self.is_training,
            'training_progress': self.training_progress,
            'training_status': self.training_status,
        }
