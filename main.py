"""
Pygame front end for the CHIP-8 interpreter core
"""

import argparse
import time

import pygame
from chipcore import QuirksConfig, Stepper, create_state, load_rom, set_keys, display_to_array
from chipcore.decode import disassemble
from chipcore.logging import ExecutionLogger
from chipcore.rendering import create_color_scheme

# Modern key mapping
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
    pygame.K_UP: 0x2, pygame.K_DOWN: 0x8, pygame.K_LEFT: 0x4, pygame.K_RIGHT: 0x6,
    pygame.K_SPACE: 0x5,
}


def draw_overlay_text(surface, text_lines, position, font, bg_color=(0, 0, 0), text_color=(255, 255, 255), alpha=120):
    """Draw text with semi-transparent background overlay"""
    if not text_lines:
        return

    line_height = font.get_height()
    max_width = max(font.size(line)[0] for line in text_lines)
    overlay_height = len(text_lines) * line_height + 8
    overlay_width = max_width + 16

    overlay = pygame.Surface((overlay_width, overlay_height))
    overlay.set_alpha(alpha)
    overlay.fill(bg_color)
    surface.blit(overlay, position)

    x, y = position
    for i, line in enumerate(text_lines):
        text_surface = font.render(line, True, text_color)
        surface.blit(text_surface, (x + 8, y + 4 + i * line_height))


def new_state(rom_filename, quirks):
    return load_rom(create_state(quirks=quirks), rom_filename)


def run_emulator(rom_filename, quirks=None, scale=8, ipf=10, color_scheme="classic", halt_on_fault=False):
    """Main loop: ``ipf`` instructions per 60 Hz frame."""
    logger = ExecutionLogger(name="chipcore-pygame")
    quirks = quirks or QuirksConfig.modern()

    try:
        state = new_state(rom_filename, quirks)
        logger.info(f"Loaded: {rom_filename}")
    except (OSError, ValueError) as e:
        logger.error(f"Cannot load {rom_filename}: {e}")
        return

    pygame.init()
    screen = pygame.display.set_mode((64 * scale, 32 * scale))
    pygame.display.set_caption("chipcore")
    clock = pygame.time.Clock()
    on_color, off_color = create_color_scheme(color_scheme)

    stepper = Stepper()
    pressed = set()
    instruction_count = 0
    running = True
    paused = False
    show_debug = False
    last_fault = None
    start_time = time.time()

    logger.info("Controls: ESC=Quit, F1=Pause, F2=Reset, F3=Debug, F5/F6=Speed")

    try:
        while running:
            clock.tick(60)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_F1:
                        paused = not paused
                        stepper.reset_clock()
                    elif event.key == pygame.K_F2:
                        state = new_state(rom_filename, quirks)
                        stepper.reset_clock()
                        pressed.clear()
                        instruction_count = 0
                        last_fault = None
                        logger.info("Reset")
                    elif event.key == pygame.K_F3:
                        show_debug = not show_debug
                    elif event.key == pygame.K_F6:
                        ipf = min(100, ipf + 2)
                        logger.info(f"Speed: {ipf} IPF")
                    elif event.key == pygame.K_F5:
                        ipf = max(1, ipf - 2)
                        logger.info(f"Speed: {ipf} IPF")
                    elif event.key in KEY_MAP:
                        pressed.add(KEY_MAP[event.key])
                elif event.type == pygame.KEYUP:
                    if event.key in KEY_MAP:
                        pressed.discard(KEY_MAP[event.key])

            if not paused:
                state = set_keys(state, pressed)
                for _ in range(ipf):
                    result = stepper.step(state)
                    state = result.state
                    if result.fault is not None:
                        last_fault = f"{result.fault.value} at 0x{result.address:03X}"
                        logger.warning(f"{last_fault} ({disassemble(result.instruction) if result.instruction else '-'})")
                        if halt_on_fault or result.stuck:
                            paused = True
                            break
                    if result.awaiting_key:
                        break
                    instruction_count += 1

            screen.fill(off_color)
            pixels = display_to_array(state.display)
            for y in range(32):
                for x in range(64):
                    if pixels[y, x]:
                        pygame.draw.rect(screen, on_color, pygame.Rect(x * scale, y * scale, scale, scale))

            if show_debug:
                font_small = pygame.font.Font(None, 18)
                runtime = time.time() - start_time
                ips = instruction_count / runtime if runtime > 0 else 0
                debug_lines = [
                    f"PC: 0x{int(state.pc):03X}  I: 0x{int(state.I):03X}",
                    f"DT: {int(state.delay_timer)}  ST: {int(state.sound_timer)}",
                    f"CPU: {ips:.0f} Hz  IPF: {ipf}",
                    f"Status: {'PAUSED' if paused else 'RUNNING'}",
                ]
                if last_fault:
                    debug_lines.append(f"Fault: {last_fault}")
                for i in range(0, 16, 8):
                    debug_lines.append(" ".join(f"V{j:X}:{int(state.V[j]):02X}" for j in range(i, i + 8)))
                draw_overlay_text(screen, debug_lines, (5, 5), font_small, alpha=100)

            pygame.display.flip()
    finally:
        pygame.quit()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Play a CHIP-8 program in a window.")
    parser.add_argument("rom")
    parser.add_argument("--legacy", action="store_true")
    parser.add_argument("--scale", type=int, default=8)
    parser.add_argument("--ipf", type=int, default=10)
    parser.add_argument("--color-scheme", default="classic")
    args = parser.parse_args()
    run_emulator(
        args.rom,
        QuirksConfig.legacy() if args.legacy else QuirksConfig.modern(),
        scale=args.scale,
        ipf=args.ipf,
        color_scheme=args.color_scheme,
    )
