"""Command line driver: run a ROM in the terminal or headless."""

import argparse
import sys
import time
from typing import Optional, Sequence

from chipcore.state import QuirksConfig, create_state
from chipcore.emulator import load_rom
from chipcore.stepper import Stepper
from chipcore.rng import JaxRandomSource
from chipcore.logging import LEVELS, ExecutionLogger, run_with_progress
from chipcore.rendering import render_text, save_frame, terminal_screen


def positive_float(value: str) -> float:
    """argparse type for rates that must be above zero."""
    number = float(value)
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chipcore", description="Run a CHIP-8 program.")
    parser.add_argument("rom", help="program image loaded at 0x200")
    parser.add_argument("--interpreter", help="image for 0x000-0x1FF (built-in font if omitted)")
    parser.add_argument("--legacy", action="store_true", help="start from COSMAC VIP quirks")
    parser.add_argument("--wrap-sprite", action="store_true", default=None,
                        help="draw from raw VX/VY, no modulo or clipping of the origin")
    parser.add_argument("--shift-vy", action="store_true", default=None,
                        help="8XY6/8XYE shift VY into VX")
    parser.add_argument("--increment-index", action="store_true", default=None,
                        help="FX55/FX65 advance I past the registers transferred")
    parser.add_argument("--seed", type=int, default=0, help="seed for CXKK")
    parser.add_argument("--hz", type=positive_float, default=500.0, help="instructions per second in live mode")
    parser.add_argument("--steps", type=int, help="run this many steps headless, then print the screen")
    parser.add_argument("--on-fault", choices=["halt", "continue"], default="halt")
    parser.add_argument("--save-frame", help="write the final screen to an image file")
    parser.add_argument("--color-scheme", default="classic")
    parser.add_argument("--trace", action="store_true", help="log every instruction")
    parser.add_argument("--log-level", type=str.upper, choices=LEVELS, default="INFO")
    return parser


def quirks_from_args(args: argparse.Namespace) -> QuirksConfig:
    quirks = QuirksConfig.legacy() if args.legacy else QuirksConfig.modern()
    if args.wrap_sprite:
        quirks = quirks.replace(wrap_sprite=True)
    if args.shift_vy:
        quirks = quirks.replace(high_precision_shift=False)
    if args.increment_index:
        quirks = quirks.replace(auto_increment_index=True)
    return quirks


def run_live(stepper, state, hz, halt_on_fault, logger):
    """Step at ``hz`` rendering to the terminal until a halting fault or Ctrl-C."""
    period = 1.0 / hz
    steps_per_frame = max(1, int(hz // 60))
    exit_code = 0
    with terminal_screen(sys.stdout) as screen:
        try:
            count = 0
            while True:
                result = stepper.step(state)
                state = result.state
                logger.log_step(result)
                if result.stuck or (result.fault is not None and halt_on_fault):
                    exit_code = 1
                    break
                count += 1
                if count % steps_per_frame == 0:
                    status = "waiting for key" if result.awaiting_key else f"PC=0x{int(state.pc):03X}"
                    screen.draw(state.display, status)
                time.sleep(period)
        except KeyboardInterrupt:
            logger.info("Interrupted")
        screen.draw(state.display)
    return state, exit_code


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = ExecutionLogger(trace=args.trace, log_level="DEBUG" if args.trace else args.log_level)

    interpreter = None
    if args.interpreter:
        with open(args.interpreter, "rb") as f:
            interpreter = f.read()

    quirks = quirks_from_args(args)
    try:
        state = create_state(interpreter=interpreter, quirks=quirks, rng=JaxRandomSource.from_seed(args.seed))
        state = load_rom(state, args.rom)
    except (OSError, ValueError) as error:
        logger.error(f"Cannot load program: {error}")
        return 2

    logger.log_run_start({
        "rom": args.rom,
        "interpreter": args.interpreter or "built-in font",
        "quirks": quirks,
        "seed": args.seed,
        "mode": f"headless, {args.steps} steps" if args.steps is not None else f"live, {args.hz:g} Hz",
    })

    stepper = Stepper()
    halt_on_fault = args.on_fault == "halt"
    if args.steps is not None:
        state, stopped_by = run_with_progress(stepper, state, args.steps, logger, halt_on_fault)
        print(render_text(state.display))
        exit_code = 1 if stopped_by is not None and stopped_by.fault is not None else 0
        if stopped_by is not None and stopped_by.awaiting_key:
            logger.info(f"Program is waiting for a key at 0x{stopped_by.address:03X}")
    else:
        state, exit_code = run_live(stepper, state, args.hz, halt_on_fault, logger)

    if args.save_frame:
        save_frame(state.display, args.save_frame, color_scheme=args.color_scheme)
        logger.info(f"Saved final frame to {args.save_frame}")
    logger.log_run_end(state)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
