"""CHIP-8 rendering utilities for visualization."""
import contextlib
import sys
from typing import Iterator, TextIO, Tuple

import jax.numpy as jnp
import numpy as np
from PIL import Image

from chipcore.constants import SCREEN_WIDTH, SCREEN_HEIGHT

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_SCREEN = "\x1b[2J"
CURSOR_HOME = "\x1b[H"

_COLUMN_SHIFTS = np.arange(SCREEN_WIDTH - 1, -1, -1, dtype=np.uint64)


def display_to_array(display: jnp.ndarray) -> np.ndarray:
    """Unpack 32 packed 64-bit rows into a (32, 64) boolean array.

    Bit 63 of each row is the leftmost pixel.
    """
    rows = np.asarray(display, dtype=np.uint64).reshape(SCREEN_HEIGHT, 1)
    return ((rows >> _COLUMN_SHIFTS) & np.uint64(1)).astype(np.bool_)


def chip8_display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert CHIP-8 packed display to RGB array with optional upscaling.

    Args:
        display: Array of 32 uint64 rows representing CHIP-8 display
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: green)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (height*scale, width*scale, 3) with uint8 values
    """
    pixels = display_to_array(display)
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Apply upscaling using nearest neighbor interpolation
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("classic", "amber", "white", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]


def save_frame(display: jnp.ndarray, filename: str, scale: int = 8, color_scheme: str = "classic") -> None:
    """Write the display to an image file, format chosen by extension."""
    on_color, off_color = create_color_scheme(color_scheme)
    rgb = chip8_display_to_rgb(display, scale, on_color, off_color)
    Image.fromarray(rgb).save(filename)


def render_text(display: jnp.ndarray, on: str = "█", off: str = " ") -> str:
    """Render the display as text, one line per row."""
    pixels = display_to_array(display)
    return "\n".join("".join(on if lit else off for lit in row) for row in pixels)


@contextlib.contextmanager
def terminal_screen(stream: TextIO = None) -> Iterator["TerminalScreen"]:
    """Own the terminal for the duration of the block.

    Hides the cursor and clears the screen on entry; the cursor is shown
    again on every exit path, KeyboardInterrupt included.
    """
    stream = sys.stdout if stream is None else stream
    stream.write(HIDE_CURSOR + CLEAR_SCREEN)
    stream.flush()
    try:
        yield TerminalScreen(stream)
    finally:
        stream.write(SHOW_CURSOR + "\n")
        stream.flush()


class TerminalScreen:
    """Redraws frames in place on an ANSI terminal."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def draw(self, display: jnp.ndarray, status: str = "") -> None:
        frame = render_text(display)
        if status:
            frame = f"{frame}\n{status}"
        self.stream.write(CURSOR_HOME + frame + "\n")
        self.stream.flush()
