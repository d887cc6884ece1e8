"""
Tests for the lifecycle controller.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from ormhub.config.schemas import ModelDefinition
from ormhub.engine import EngineConfig
from ormhub.errors import InitializationError, LifecycleError, TeardownError
from ormhub.registration import Collector
from ormhub.runtime import LifecycleController, LifecycleState


@pytest.fixture
def collector():
    collector = Collector()
    collector.adapters["memory"] = object()
    collector.models["user"] = ModelDefinition(identity="user")
    collector.models["product"] = ModelDefinition(identity="product")
    collector.defaults["connection"] = "default"
    return collector


@pytest.fixture
def mock_engine():
    engine = MagicMock()
    engine.initialize = AsyncMock()
    engine.teardown = AsyncMock()
    return engine


@pytest.fixture
def controller(collector, mock_engine):
    return LifecycleController(collector, mock_engine)


class TestStart:
    @pytest.mark.asyncio
    async def test_start_loads_each_model_and_initializes(self, controller, collector, mock_engine):
        await controller.start()

        loaded = [call.args[0].identity for call in mock_engine.load_collection.call_args_list]
        assert loaded == ["user", "product"]

        mock_engine.initialize.assert_awaited_once()
        config = mock_engine.initialize.await_args.args[0]
        assert isinstance(config, EngineConfig)
        assert config.adapters is collector.adapters
        assert config.connections is collector.connections
        assert config.defaults == {"connection": "default"}

        assert controller.state is LifecycleState.READY

    @pytest.mark.asyncio
    async def test_start_freezes_collector(self, controller, collector):
        await controller.start()

        assert collector.frozen

    @pytest.mark.asyncio
    async def test_start_runs_once(self, controller):
        await controller.start()

        with pytest.raises(LifecycleError):
            await controller.start()

    @pytest.mark.asyncio
    async def test_initialize_failure(self, controller, mock_engine):
        mock_engine.initialize.side_effect = RuntimeError("connection refused")

        with pytest.raises(InitializationError) as exc_info:
            await controller.start()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "connection refused" in str(exc_info.value)
        assert controller.state is LifecycleState.FAILED

    @pytest.mark.asyncio
    async def test_load_failure(self, controller, mock_engine):
        mock_engine.load_collection.side_effect = ValueError("bad model")

        with pytest.raises(InitializationError):
            await controller.start()

        mock_engine.initialize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_retry_after_failure(self, controller, mock_engine):
        mock_engine.initialize.side_effect = RuntimeError("boom")

        with pytest.raises(InitializationError):
            await controller.start()

        with pytest.raises(LifecycleError):
            await controller.start()

        assert mock_engine.initialize.await_count == 1


class TestStop:
    @pytest.mark.asyncio
    async def test_unset_flag_tears_down(self, controller, mock_engine):
        await controller.start()
        await controller.stop()

        mock_engine.teardown.assert_awaited_once()
        assert controller.state is LifecycleState.STOPPED

    @pytest.mark.asyncio
    async def test_true_flag_tears_down(self, controller, collector, mock_engine):
        collector.set_teardown_on_stop(True)

        await controller.start()
        await controller.stop()

        mock_engine.teardown.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_false_flag_skips_teardown(self, controller, collector, mock_engine):
        collector.set_teardown_on_stop(False)

        await controller.start()
        await controller.stop()

        mock_engine.teardown.assert_not_awaited()
        assert controller.state is LifecycleState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_before_start(self, controller, mock_engine):
        with pytest.raises(LifecycleError):
            await controller.stop()

        mock_engine.teardown.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stop_runs_once(self, controller, mock_engine):
        await controller.start()
        await controller.stop()

        with pytest.raises(LifecycleError):
            await controller.stop()

        assert mock_engine.teardown.await_count == 1

    @pytest.mark.asyncio
    async def test_teardown_failure(self, controller, mock_engine):
        mock_engine.teardown.side_effect = RuntimeError("socket closed")
        await controller.start()

        with pytest.raises(TeardownError) as exc_info:
            await controller.stop()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert controller.state is LifecycleState.FAILED
