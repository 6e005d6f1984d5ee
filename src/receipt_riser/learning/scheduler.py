"""Policy for when the field models are retrained."""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..exceptions import StorageError
from ..storage import PreferenceStore
from .trainer import ModelTrainingService
from .training_store import TrainingDataStore

logger = logging.getLogger(__name__)

LAST_TRAINING_TIME_KEY = 'last_model_training_time'


def always_ready() -> bool:
    return True


class TrainingScheduler:
    """
    Periodically retrains the field models when enough data has accumulated.

    A periodic check trains only when the store holds at least min_examples,
    the last successful run is at least training_interval old and the
    readiness predicate passes. A forced run skips the first two checks.
    Only one run is in flight at a time; overlapping triggers are rejected.
    """

    def __init__(self,
                 trainer: ModelTrainingService,
                 store: TrainingDataStore,
                 preferences: PreferenceStore,
                 min_examples: int = 10,
                 training_interval: timedelta = timedelta(days=1),
                 check_interval: timedelta = timedelta(hours=1),
                 clock: Callable[[], datetime] = datetime.now,
                 is_ready: Callable[[], bool] = always_ready):
        self.trainer = trainer
        self.store = store
        self.preferences = preferences
        self.min_examples = min_examples
        self.training_interval = training_interval
        self.check_interval = check_interval
        self.clock = clock
        self.is_ready = is_ready
        self.in_progress = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Check immediately, then every check_interval. Must be called from a running event loop."""
        if self.is_running:
            return
        self._task = asyncio.ensure_future(self._run())
        logger.info(f"Training scheduler started (check every {self.check_interval})")

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Training scheduler stopped")

    async def _run(self):
        while True:
            await self.check_and_train()
            await asyncio.sleep(self.check_interval.total_seconds())

    async def check_and_train(self) -> bool:
        """
        Train if every scheduling condition holds.

        Returns:
            True if a training run happened and succeeded
        """
        if self.in_progress:
            logger.debug("Training check skipped: run already in progress")
            return False

        count = await self.store.count()
        if count < self.min_examples:
            logger.debug(f"Training check skipped: {count} examples, need {self.min_examples}")
            return False

        now = self.clock()
        last_training = self.get_last_training_time()
        if last_training is not None and now - last_training < self.training_interval:
            logger.debug(f"Training check skipped: last run at {last_training}")
            return False

        if not self.is_ready():
            logger.debug("Training check skipped: environment not ready")
            return False

        return await self._train(now)

    async def force_train_now(self) -> bool:
        """Train immediately regardless of example count and interval."""
        if self.in_progress:
            logger.warning("Forced training rejected: run already in progress")
            return False
        return await self._train(self.clock())

    async def _train(self, started_at: datetime) -> bool:
        self.in_progress = True
        try:
            success = await self.trainer.train_models()
        finally:
            self.in_progress = False

        if success:
            self._set_last_training_time(started_at)
            logger.info(f"Scheduled training finished at {started_at}")
        else:
            logger.warning(f"Training did not complete: {self.trainer.training_status}")
        return success

    def get_last_training_time(self) -> Optional[datetime]:
        try:
            millis = self.preferences.get_int(LAST_TRAINING_TIME_KEY)
        except StorageError as e:
            logger.error(f"Error reading last training time: {e}")
            return None
        if millis is None:
            return None
        return datetime.fromtimestamp(millis / 1000)

    def _set_last_training_time(self, when: datetime):
        try:
            self.preferences.set_int(LAST_TRAINING_TIME_KEY, int(when.timestamp() * 1000))
        except StorageError as e:
            logger.error(f"Error persisting last training time: {e}")
