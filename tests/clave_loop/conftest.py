"""
Pytest fixtures for clave_loop tests.

Provides mock dependencies and a test transport.
"""

from __future__ import annotations

import pytest
from mocks import MockCommandSource, MockRenderer, MockSoundOutput, MockStatusSink

from clave_loop.engine import LookaheadScheduler, TransportController
from clave_loop.state import RuntimeState


@pytest.fixture
def mock_output() -> MockSoundOutput:
    """Create a fresh MockSoundOutput (manual clock at 0.0)."""
    return MockSoundOutput()


@pytest.fixture
def mock_renderer() -> MockRenderer:
    """Create a fresh MockRenderer for testing."""
    return MockRenderer()


@pytest.fixture
def mock_status() -> MockStatusSink:
    """Create a fresh MockStatusSink for testing."""
    return MockStatusSink()


@pytest.fixture
def mock_commands() -> MockCommandSource:
    """Create a fresh MockCommandSource for testing."""
    return MockCommandSource()


@pytest.fixture
def test_controller(
    mock_output: MockSoundOutput,
    mock_renderer: MockRenderer,
    mock_status: MockStatusSink,
    mock_commands: MockCommandSource,
) -> TransportController:
    """
    Create a TransportController with all mock dependencies.

    Outside an event loop the scheduler task is not spawned, so tests
    drive wake-ups by hand through controller.scheduler.tick().
    """
    controller = TransportController(
        output=mock_output,
        renderer=mock_renderer,
        status=mock_status,
        commands=mock_commands,
    )
    # Register handlers as start() would do
    controller._register_handlers()
    return controller


@pytest.fixture
def state() -> RuntimeState:
    """Fresh runtime state."""
    return RuntimeState()


@pytest.fixture
def scheduler(
    state: RuntimeState,
    mock_output: MockSoundOutput,
    mock_renderer: MockRenderer,
) -> LookaheadScheduler:
    """Scheduler on a fresh state with the default timing constants."""
    return LookaheadScheduler(state, mock_output, mock_renderer)
