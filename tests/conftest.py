"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
from chipcore import create_state, execute, QuirksConfig, SequenceRandomSource
from chipcore.state import write_memory


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state(rng=SequenceRandomSource([0xA5, 0x3C, 0xFF]))


@pytest.fixture
def modern_state():
    """Provide a fresh state with modern quirks."""
    return create_state(quirks=QuirksConfig.modern())


@pytest.fixture
def legacy_state():
    """Provide a fresh state with COSMAC VIP quirks."""
    return create_state(quirks=QuirksConfig.legacy())


@pytest.fixture
def wrap_state():
    """Provide a fresh state drawing sprites from raw coordinates."""
    return create_state(quirks=QuirksConfig(wrap_sprite=True))


class FakeClock:
    """Manually advanced clock for timer tests."""

    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return write_memory(state, address, sprite_bytes)


def setup_program(state, address, words):
    """Helper to write big-endian instruction words into memory."""
    data = []
    for word in words:
        data.extend([(word >> 8) & 0xFF, word & 0xFF])
    return write_memory(state, address, data)


def with_registers(state, values):
    """Helper to set several V registers at once from {index: value}."""
    V = state.V
    for index, value in values.items():
        V = V.at[index].set(value)
    return state.replace(V=V)


def run(state, *instructions):
    """Execute instructions in order, failing the test on any fault."""
    for instruction in instructions:
        result = execute(state, instruction)
        assert result.fault is None, f"{instruction!r} faulted with {result.fault}"
        state = result.state
    return state


def pixel(state, x, y):
    """Read one display pixel from the packed rows."""
    return (int(state.display[y]) >> (63 - x)) & 1
