"""Bootstrap of the storage strategy and engine services for the CLI.

The strategy is decided once per process from the active profile's
configuration; commands ask for ready-made services instead of wiring
repositories themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from planwise.config import get_config_manager
from planwise.models.strategy import LocalStrategy, StrategyContext
from planwise.services.backlog import BacklogService
from planwise.services.lifecycle import OccurrenceLifecycleManager
from planwise.services.task_service import TaskService
from planwise.utils.logger import get_logger, set_level


@lru_cache(maxsize=4)
def get_strategy_context(profile: str = "default") -> StrategyContext:
    """Cached StrategyContext over the profile's SQLite database."""
    db_path = get_config_manager(profile).db_path
    get_logger().debug("using local storage at %s", db_path)
    return StrategyContext(LocalStrategy(db_path=str(db_path)))


@dataclass
class Engine:
    """Engine services sharing one storage context."""

    storage: StrategyContext
    tasks: TaskService
    lifecycle: OccurrenceLifecycleManager
    backlog: BacklogService


def get_engine(profile: str = "default") -> Engine:
    """Build the engine services for a profile."""
    config = get_config_manager(profile).config
    set_level(config.logging.level)

    storage = get_strategy_context(profile)
    lifecycle = OccurrenceLifecycleManager(storage, config.engine)
    return Engine(
        storage=storage,
        tasks=TaskService(storage, lifecycle),
        lifecycle=lifecycle,
        backlog=BacklogService(storage, config.engine),
    )
