"""On-device learning: field models, training data, corrections and scheduling."""

from .corrections import CorrectionEngine
from .features import extract_features, relevant_excerpt, text_hash, trigram_similarity
from .field_model import FieldModel
from .scheduler import TrainingScheduler
from .trainer import ModelTrainingService
from .training_store import TrainingDataStore

__all__ = [
    'CorrectionEngine', 'FieldModel', 'ModelTrainingService',
    'TrainingDataStore', 'TrainingScheduler',
    'extract_features', 'relevant_excerpt', 'text_hash', 'trigram_similarity',
]
