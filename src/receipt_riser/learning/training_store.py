"""Bounded, de-duplicated store of labelled training examples."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..exceptions import StorageError, TrainingDataError
from ..models import TrainingExample
from ..storage import PreferenceStore, read_json_array, write_json
from .features import text_hash

logger = logging.getLogger(__name__)

TRAINING_DATA_KEY = 'receipt_training_data'
TRAINING_DATA_FILE = 'receipt_training_data.json'
EXPORT_FILE = 'receipt_training_data_export.json'


class TrainingDataStore:
    """
    Training examples keyed by the content hash of their text.

    Examples are kept in the preference store and mirrored to a JSON array
    file; reads prefer the file. Adding an example whose text hashes like a
    stored one replaces it. Past the cap, the oldest examples are evicted.
    """

    def __init__(self,
                 preferences: PreferenceStore,
                 data_dir: Path,
                 max_examples: int = 200,
                 clock: Callable[[], datetime] = datetime.now):
        self.preferences = preferences
        self.data_dir = Path(data_dir)
        self.max_examples = max_examples
        self.clock = clock

    @property
    def file_path(self) -> Path:
        return self.data_dir / TRAINING_DATA_FILE

    async def add_example(self, text: str, labels: Dict[str, Optional[str]]):
        """
        Add or replace the training example for this text.

        Failures are logged and never raised.
        """
        try:
            examples = self._load()
            example = TrainingExample(
                text=text,
                labels=dict(labels),
                text_hash=text_hash(text),
                timestamp=int(self.clock().timestamp() * 1000),
            )

            for i, existing in enumerate(examples):
                if existing.text_hash == example.text_hash:
                    examples[i] = example
                    break
            else:
                examples.append(example)

            self._save(self._evict_oldest(examples))
            logger.debug(f"Stored training example {example.text_hash} with labels {sorted(labels)}")
        except StorageError as e:
            logger.error(f"Error adding training example: {e}")

    async def get_examples(self) -> List[TrainingExample]:
        try:
            return self._load()
        except StorageError as e:
            logger.error(f"Error getting training examples: {e}")
            return []

    async def get_examples_for_field(self, field: str) -> List[TrainingExample]:
        """Examples carrying a non-null label for the field."""
        return [example for example in await self.get_examples() if example.has_label(field)]

    async def get_example_for_text(self, text: str) -> Optional[TrainingExample]:
        """The stored example whose text hashes like this one, if any."""
        target = text_hash(text)
        for example in await self.get_examples():
            if example.text_hash == target:
                return example
        return None

    async def count(self) -> int:
        return len(await self.get_examples())

    async def clear(self):
        try:
            self.preferences.remove(TRAINING_DATA_KEY)
            if self.file_path.exists():
                self.file_path.unlink()
            logger.info("Cleared training data")
        except (StorageError, OSError) as e:
            logger.error(f"Error clearing training data: {e}")

    async def export(self, path: Optional[Path] = None) -> Optional[Path]:
        """
        Write every example to one JSON array file.

        Args:
            path: Destination; receipt_training_data_export.json in the data directory by default

        Returns:
            The written path, or None if the export failed
        """
        path = Path(path) if path else self.data_dir / EXPORT_FILE
        try:
            examples = self._load()
            write_json(path, [example.to_dict() for example in examples])
        except StorageError as e:
            logger.error(f"Error exporting training data: {e}")
            return None

        logger.info(f"Exported {len(examples)} training examples to {path}")
        return path

    async def import_examples(self, path: Path) -> bool:
        """
        Replace the active training set with the examples in a JSON array file.

        Returns:
            False if the file is missing or not a JSON array; the active set is then untouched
        """
        try:
            records = read_json_array(Path(path))
        except StorageError as e:
            logger.warning(f"Cannot import training data: {e}")
            return False

        if records is None:
            logger.warning(f"Training data file not found: {path}")
            return False

        examples = self._decode(records, source=str(path))
        try:
            self._save(self._evict_oldest(examples))
        except StorageError as e:
            logger.error(f"Error importing training data: {e}")
            return False

        logger.info(f"Imported {len(examples)} training examples from {path}")
        return True

    def _load(self) -> List[TrainingExample]:
        records = None
        try:
            records = read_json_array(self.file_path)
        except StorageError as e:
            logger.warning(f"Ignoring unreadable training data file: {e}")

        if records:
            return self._decode(records, source=str(self.file_path))

        decoded = []
        for raw in self.preferences.get_string_list(TRAINING_DATA_KEY):
            try:
                decoded.append(json.loads(raw))
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping unreadable training record: {e}")
        return self._decode(decoded, source=TRAINING_DATA_KEY)

    def _decode(self, records: List, source: str) -> List[TrainingExample]:
        examples = []
        for record in records:
            try:
                if not isinstance(record, dict):
                    raise TrainingDataError(f"expected an object, got {type(record).__name__}")
                examples.append(TrainingExample.from_dict(record))
            except TrainingDataError as e:
                logger.warning(f"Skipping malformed training example in {source}: {e}")
        return examples

    def _save(self, examples: List[TrainingExample]):
        records = [example.to_dict() for example in examples]
        self.preferences.set_string_list(TRAINING_DATA_KEY, [json.dumps(r) for r in records])
        write_json(self.file_path, records)

    def _evict_oldest(self, examples: List[TrainingExample]) -> List[TrainingExample]:
        if len(examples) <= self.max_examples:
            return examples
        examples = sorted(examples, key=lambda e: e.timestamp)
        evicted = len(examples) - self.max_examples
        logger.info(f"Evicting {evicted} oldest training examples")
        return examples[evicted:]
