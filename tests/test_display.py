"""Tests for display operations (DXYN)."""

import jax.numpy as jnp
from chipcore import Fault, execute
from conftest import run, pixel, setup_sprite_in_memory, with_registers


def lit_pixels(state):
    return {(x, y) for y in range(32) for x in range(64) if pixel(state, x, y)}


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Test basic sprite drawing without collision."""
        sprite = [0xC0, 0xC0]  # 11000000, 11000000
        state = setup_sprite_in_memory(fresh_state, 0x300, sprite)

        state = run(state, 0x600A, 0x6105, 0xA300, 0xD012)

        assert lit_pixels(state) == {(10, 5), (11, 5), (10, 6), (11, 6)}
        assert state.V[15] == 0

    def test_row_packing_msb_is_leftmost(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80])

        state = run(state, 0x6000, 0x6100, 0xA300, 0xD011)

        assert int(state.display[0]) == 1 << 63

    def test_collision_detection(self, fresh_state):
        """Test collision flag when sprite overlaps existing pixels."""
        state = setup_sprite_in_memory(fresh_state, 0x400, [0x80])
        state = run(state, 0x6014, 0x610A, 0xA400)

        state = run(state, 0xD011)
        assert pixel(state, 20, 10) == 1
        assert state.V[15] == 0

        state = run(state, 0xD011)
        assert pixel(state, 20, 10) == 0
        assert state.V[15] == 1

    def test_all_ones_sprite_twice_erases(self, fresh_state):
        """Drawing a full sprite twice clears it and reports the collision."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xFF, 0xFF, 0xFF])
        state = run(state, 0x6004, 0x6102, 0xA300)

        state = run(state, 0xD013)
        assert len(lit_pixels(state)) == 24
        assert state.V[15] == 0

        state = run(state, 0xD013)
        assert lit_pixels(state) == set()
        assert state.V[15] == 1

    def test_xor_behavior(self, fresh_state):
        """Overlapping sprites XOR rather than OR."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xF0])
        state = setup_sprite_in_memory(state, 0x301, [0x3C])
        state = run(state, 0x6000, 0x6100, 0xA300, 0xD011, 0xA301, 0xD011)

        assert lit_pixels(state) == {(0, 0), (1, 0), (4, 0), (5, 0)}
        assert state.V[15] == 1

    def test_collision_flag_cleared_on_clean_draw(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80])
        state = with_registers(state, {15: 1})

        state = run(state, 0xA300, 0xD011)

        assert state.V[15] == 0

    def test_font_glyph(self, fresh_state):
        """FX29 then DXY5 draws the built-in zero glyph."""
        state = run(fresh_state, 0x6000, 0x6100, 0x6200, 0xF229, 0xD015)

        rows = [int(state.display[y]) >> 56 for y in range(5)]
        assert rows == [0xF0, 0x90, 0x90, 0x90, 0xF0]


class TestClipping:
    """Test coordinate handling with wrap_sprite disabled."""

    def test_origin_taken_modulo_screen(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80])

        state = run(state, 0x6046, 0x6123, 0xA300, 0xD011)  # (70, 35)

        assert lit_pixels(state) == {(6, 3)}

    def test_right_edge_clipped(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x300, [0xFF])

        state = run(state, 0x603C, 0x6100, 0xA300, 0xD011)  # x = 60

        assert lit_pixels(state) == {(60, 0), (61, 0), (62, 0), (63, 0)}

    def test_bottom_edge_clipped(self, fresh_state):
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80, 0x80, 0x80, 0x80])

        state = run(state, 0x6000, 0x611E, 0xA300, 0xD014)  # y = 30

        assert lit_pixels(state) == {(0, 30), (0, 31)}


class TestWrapSprite:
    """Test coordinate handling with wrap_sprite enabled."""

    def test_raw_origin_beyond_right_edge_draws_nothing(self, wrap_state):
        state = setup_sprite_in_memory(wrap_state, 0x300, [0xFF])

        state = run(state, 0x6046, 0x6100, 0xA300, 0xD011)  # x = 70

        assert lit_pixels(state) == set()
        assert state.V[15] == 0

    def test_partial_row_truncated_not_wrapped(self, wrap_state):
        state = setup_sprite_in_memory(wrap_state, 0x300, [0xFF])

        state = run(state, 0x603C, 0x6105, 0xA300, 0xD011)  # x = 60

        assert lit_pixels(state) == {(60, 5), (61, 5), (62, 5), (63, 5)}

    def test_raw_origin_below_screen_draws_nothing(self, wrap_state):
        state = setup_sprite_in_memory(wrap_state, 0x300, [0xFF])

        state = run(state, 0x6000, 0x6128, 0xA300, 0xD011)  # y = 40

        assert lit_pixels(state) == set()

    def test_collision_twice(self, wrap_state):
        state = setup_sprite_in_memory(wrap_state, 0x300, [0xFF, 0xFF])
        state = run(state, 0x6008, 0x6108, 0xA300, 0xD012, 0xD012)

        assert lit_pixels(state) == set()
        assert state.V[15] == 1


class TestDrawFaults:
    """Test DXYN edge cases."""

    def test_sprite_past_end_of_memory(self, fresh_state):
        state = run(fresh_state, 0xAFFE)

        result = execute(state, 0xD015)

        assert result.fault is Fault.MEMORY_RANGE_OUT_OF_BOUNDS
        assert result.state is state

    def test_zero_height_draws_nothing(self, fresh_state):
        state = with_registers(fresh_state, {15: 1})

        state = run(state, 0xA300, 0xD010)

        assert lit_pixels(state) == set()
        assert state.V[15] == 1

    def test_clear_screen(self, fresh_state):
        state = fresh_state.replace(display=jnp.full(32, 0xFFFF, dtype=jnp.uint64))

        state = run(state, 0x00E0)

        assert int(jnp.sum(state.display)) == 0
