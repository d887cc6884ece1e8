"""
Lifecycle Controller.

Drives the ORM engine through exactly one start and one stop:

    UNINITIALIZED ──start()──► INITIALIZING ──► READY
                                     │
                                     └──(engine error)──► FAILED

    READY ──stop()──► TEARING_DOWN ──► STOPPED
                           │
                           └──(engine error)──► FAILED

No state is re-enterable. Engine errors are wrapped in
InitializationError / TeardownError and never retried.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from ormhub.engine.base import EngineConfig
from ormhub.errors import InitializationError, LifecycleError, TeardownError

if TYPE_CHECKING:
    from ormhub.engine.base import ORMEngine
    from ormhub.registration.collector import Collector

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    """Lifecycle state of the ORM engine."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    TEARING_DOWN = "tearing_down"
    STOPPED = "stopped"
    FAILED = "failed"


class LifecycleController:
    """
    Starts and stops the ORM engine from the merged collector.

    Usage:
        controller = LifecycleController(collector, engine)
        await controller.start()   # host before-start
        ...
        await controller.stop()    # host after-stop
    """

    def __init__(self, collector: Collector, engine: ORMEngine):
        self._collector = collector
        self._engine = engine
        self._state = LifecycleState.UNINITIALIZED

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def engine(self) -> ORMEngine:
        return self._engine

    async def start(self) -> None:
        """
        Hand the merged configuration to the engine and initialize it.

        Raises:
            LifecycleError: If start was already attempted
            InitializationError: If the engine fails
        """
        self._transition(LifecycleState.UNINITIALIZED, LifecycleState.INITIALIZING)
        collector = self._collector
        collector.freeze()

        logger.info(
            f"[lifecycle] Initializing ORM with {len(collector.models)} models, "
            f"{len(collector.connections)} connections, {len(collector.adapters)} adapters"
        )

        try:
            for model in collector.models.values():
                self._engine.load_collection(model)

            config = EngineConfig(
                adapters=collector.adapters,
                connections=collector.connections,
                defaults=collector.defaults,
            )
            await self._engine.initialize(config)
        except Exception as e:
            self._state = LifecycleState.FAILED
            raise InitializationError(f"ORM engine failed to initialize: {e}") from e

        self._state = LifecycleState.READY
        logger.info("[lifecycle] ORM ready")

    async def stop(self) -> None:
        """
        Tear the engine down unless ``teardown_on_stop`` is explicitly False.

        Raises:
            LifecycleError: If the engine is not READY
            TeardownError: If the engine fails
        """
        self._transition(LifecycleState.READY, LifecycleState.TEARING_DOWN)

        if self._collector.teardown_on_stop is False:
            logger.info("[lifecycle] Skipping ORM teardown (teardown_on_stop=False)")
            self._state = LifecycleState.STOPPED
            return

        try:
            await self._engine.teardown()
        except Exception as e:
            self._state = LifecycleState.FAILED
            raise TeardownError(f"ORM engine failed during teardown: {e}") from e

        self._state = LifecycleState.STOPPED
        logger.info("[lifecycle] ORM torn down")

    def _transition(self, expected: LifecycleState, target: LifecycleState) -> None:
        if self._state is not expected:
            raise LifecycleError(
                f"Cannot move to {target.value}: lifecycle is {self._state.value}, expected {expected.value}"
            )
        logger.debug(f"[lifecycle] {self._state.value} -> {target.value}")
        self._state = target
