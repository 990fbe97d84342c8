"""Tests for the fetch/decode/execute cycle and timer decay."""

import pytest
from chipcore import Fault, MachineFault, Stepper, Unrecognized, create_state, fetch, press_key
from chipcore.decode import JP, LDB
from chipcore.stepper import decay_timers
from conftest import run, setup_program


TICK = 1 / 60


@pytest.fixture
def stepper(fake_clock):
    return Stepper(clock=fake_clock)


class TestFetch:
    """Test instruction fetch."""

    def test_fetch_reads_big_endian_and_advances(self, fresh_state):
        state = setup_program(fresh_state, 0x200, [0x6A42])

        fetched, word = fetch(state)

        assert word == 0x6A42
        assert fetched.pc == 0x202
        assert state.pc == 0x200

    def test_fetch_last_full_word(self, fresh_state):
        state = setup_program(fresh_state, 0xFFE, [0x1234]).replace(pc=0xFFE)
        fetched, word = fetch(state)
        assert word == 0x1234
        assert fetched.pc == 0x1000

    @pytest.mark.parametrize("pc", [0xFFF, 0x1000])
    def test_fetch_out_of_bounds(self, fresh_state, pc):
        state = fresh_state.replace(pc=pc)
        with pytest.raises(MachineFault) as error:
            fetch(state)
        assert error.value.fault is Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS


class TestStep:
    """Test a full cycle."""

    def test_step_executes_and_reports(self, fresh_state, stepper):
        state = setup_program(fresh_state, 0x200, [0x6A42])

        result = stepper.step(state)

        assert result.ok
        assert result.address == 0x200
        assert result.instruction == LDB(x=0xA, kk=0x42)
        assert result.state.V[0xA] == 0x42
        assert result.state.pc == 0x202

    def test_taken_skip_passes_next_instruction(self, fresh_state, stepper):
        state = setup_program(fresh_state, 0x200, [0x3000, 0x6001, 0x6102])

        state = stepper.step(state).state
        assert state.pc == 0x204

        state = stepper.step(state).state
        assert state.V[0] == 0
        assert state.V[1] == 2

    def test_jump_replaces_pc(self, fresh_state, stepper):
        state = setup_program(fresh_state, 0x200, [0x1240])

        result = stepper.step(state)

        assert result.instruction == JP(addr=0x240)
        assert result.state.pc == 0x240

    def test_jump_to_self_loops(self, fresh_state, stepper):
        state = setup_program(fresh_state, 0x200, [0x1200])
        for _ in range(3):
            state = stepper.step(state).state
        assert state.pc == 0x200

    def test_unrecognized_opcode_advances_past_instruction(self, fresh_state, stepper):
        state = setup_program(fresh_state, 0x200, [0x0123])

        result = stepper.step(state)

        assert result.fault is Fault.UNRECOGNIZED_OPCODE
        assert result.instruction == Unrecognized(word=0x0123)
        assert result.address == 0x200
        assert result.state.pc == 0x202
        assert not result.stuck

    def test_faulting_instruction_has_no_other_effect(self, fresh_state, stepper):
        state = setup_program(fresh_state, 0x200, [0xAFFF, 0xF255])

        state = stepper.step(state).state
        result = stepper.step(state)

        assert result.fault is Fault.MEMORY_RANGE_OUT_OF_BOUNDS
        assert result.state.I == 0xFFF
        assert int(result.state.memory[0xFFF]) == 0

    def test_pc_out_of_bounds_is_stuck(self, fresh_state, stepper):
        state = fresh_state.replace(pc=0xFFF)

        result = stepper.step(state)

        assert result.fault is Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS
        assert result.stuck
        assert result.instruction is None
        assert result.address == 0xFFF
        assert result.state.pc == 0xFFF

    def test_raise_for_fault(self, fresh_state, stepper):
        state = setup_program(fresh_state, 0x200, [0x0123])

        with pytest.raises(MachineFault, match="0x200"):
            stepper.step(state).raise_for_fault()

    def test_raise_for_fault_passes_clean_steps(self, fresh_state, stepper):
        state = setup_program(fresh_state, 0x200, [0x6001])
        result = stepper.step(state)
        assert result.raise_for_fault() is result


class TestWaitForKey:
    """Test LDK blocking the cycle."""

    def test_wait_keeps_pc_on_instruction(self, fresh_state, stepper):
        state = setup_program(fresh_state, 0x200, [0xF50A])

        result = stepper.step(state)
        assert result.awaiting_key
        assert result.fault is None
        assert result.state.pc == 0x200

        result = stepper.step(result.state)
        assert result.awaiting_key
        assert result.state.pc == 0x200

    def test_press_resumes(self, fresh_state, stepper):
        state = setup_program(fresh_state, 0x200, [0xF50A])
        state = stepper.step(state).state

        result = stepper.step(press_key(state, 0xE))

        assert not result.awaiting_key
        assert result.state.V[5] == 0xE
        assert result.state.pc == 0x202

    def test_timers_decay_while_waiting(self, fresh_state, fake_clock, stepper):
        state = setup_program(fresh_state, 0x200, [0xF50A])
        state = run(state, 0x600A, 0xF015).replace(pc=0x200)
        state = stepper.step(state).state

        fake_clock.advance(2.5 * TICK)
        result = stepper.step(state)

        assert result.awaiting_key
        assert result.state.delay_timer == 8


class TestTimers:
    """Test wall-clock timer decay."""

    def timed_state(self, state, delay, sound):
        state = setup_program(state, 0x200, [0x1200])
        return run(state, 0x6000 | delay, 0xF015, 0x6000 | sound, 0xF018)

    def test_first_step_only_starts_clock(self, fresh_state, fake_clock, stepper):
        state = self.timed_state(fresh_state, 10, 5)
        fake_clock.advance(100.0)

        state = stepper.step(state).state

        assert state.delay_timer == 10
        assert state.sound_timer == 5

    def test_ticks_from_elapsed_time(self, fresh_state, fake_clock, stepper):
        state = stepper.step(self.timed_state(fresh_state, 10, 5)).state

        fake_clock.advance(2.5 * TICK)
        state = stepper.step(state).state

        assert state.delay_timer == 8
        assert state.sound_timer == 3

    def test_fraction_carries_over(self, fresh_state, fake_clock, stepper):
        state = stepper.step(self.timed_state(fresh_state, 10, 10)).state

        fake_clock.advance(0.6 * TICK)
        state = stepper.step(state).state
        assert state.delay_timer == 10

        fake_clock.advance(0.6 * TICK)
        state = stepper.step(state).state
        assert state.delay_timer == 9

    def test_backlog_is_clamped(self, fresh_state, fake_clock):
        stepper = Stepper(clock=fake_clock, max_ticks_per_step=4)
        state = stepper.step(self.timed_state(fresh_state, 50, 50)).state

        fake_clock.advance(1.0)
        state = stepper.step(state).state
        assert state.delay_timer == 46

        fake_clock.advance(0.5 * TICK)
        state = stepper.step(state).state
        assert state.delay_timer == 46

    def test_timers_stop_at_zero(self, fresh_state, fake_clock, stepper):
        state = stepper.step(self.timed_state(fresh_state, 3, 1)).state

        for _ in range(5):
            fake_clock.advance(1.5 * TICK)
            state = stepper.step(state).state

        assert state.delay_timer == 0
        assert state.sound_timer == 0

    def test_reset_clock_skips_pause(self, fresh_state, fake_clock, stepper):
        state = stepper.step(self.timed_state(fresh_state, 10, 10)).state

        fake_clock.advance(30.0)
        stepper.reset_clock()
        state = stepper.step(state).state

        assert state.delay_timer == 10

    def test_decay_timers(self, fresh_state):
        state = self.timed_state(fresh_state, 3, 7)

        state = decay_timers(state, 5)

        assert state.delay_timer == 0
        assert state.sound_timer == 2

    def test_decay_timers_without_ticks(self, fresh_state):
        assert decay_timers(fresh_state, 0) is fresh_state

    def test_invalid_tick_limit(self, fake_clock):
        with pytest.raises(ValueError):
            Stepper(clock=fake_clock, max_ticks_per_step=0)


def test_counting_program():
    """A small loop counts V0 up to five then spins."""
    state = create_state()
    state = setup_program(state, 0x200, [
        0x7001,  # ADD V0, 1
        0x3005,  # SE V0, 5
        0x1200,  # JP 0x200
        0x1206,  # JP 0x206
    ])
    stepper = Stepper(clock=lambda: 0.0)

    for _ in range(20):
        result = stepper.step(state)
        assert result.ok
        state = result.state

    assert state.V[0] == 5
    assert state.pc == 0x206
