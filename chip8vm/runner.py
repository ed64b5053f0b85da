import logging
import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"
import pygame

from chip8vm.errors import EngineError, UnknownOpcode
from chip8vm.keypad import HEX_LAYOUT, LAYOUTS, pump

log = logging.getLogger(__name__)


# Clock speeds used by Chip-8
TIMER_HZ = 60
CYCLE_HZ = 500
FPS = 60

ERROR_POLICIES = ('halt', 'skip')


def load_rom(path):
    """read a ROM file, size checks happen when the bytes are loaded in a machine"""
    with open(path, mode='rb') as f:
        rom = f.read()
    log.info("Read %d bytes from %s", len(rom), path)
    return rom


class Runner:
    """
    Drives a Chip8 in wall-clock time.

    Instructions run at ``cycle_hz`` and the timers tick at ``timer_hz``, each
    paced by its own accumulator so the two rates stay independent. ``layout``
    is a key map or the name of one in ``LAYOUTS``. With the
    "skip" policy an unknown opcode is logged and stepped over, every other
    EngineError still stops the run.
    """

    def __init__(self, chip, cycle_hz=CYCLE_HZ, timer_hz=TIMER_HZ, on_error='halt',
                 layout=HEX_LAYOUT, on_frame=None):
        if on_error not in ERROR_POLICIES:
            raise ValueError(f"on_error must be one of {ERROR_POLICIES}, got {on_error!r}")
        self.chip = chip
        self.cycle_hz = cycle_hz
        self.timer_hz = timer_hz
        self.on_error = on_error
        self.layout = LAYOUTS[layout] if isinstance(layout, str) else layout
        self.on_frame = on_frame
        self.cycle_ms = 0.0
        self.timer_ms = 0.0
        self.cycles = 0
        self.skipped = 0
        self.running = False

    def cycle(self):
        """one instruction, return True if it touched the framebuffer"""
        try:
            self.chip.step()
        except UnknownOpcode as e:
            if self.on_error != 'skip':
                log.error("Halting at 0x%04x: %s", self.chip.pc, e)
                raise
            log.warning("Skipping unknown opcode 0x%04x at 0x%04x", e.word, self.chip.pc)
            self.chip.pc += 2
            self.skipped += 1
            return False
        except EngineError as e:
            log.error("Halting at 0x%04x: %s\n%s", self.chip.pc, e, self.chip)
            raise
        self.cycles += 1
        return self.chip.draw

    def advance(self, elapsed_ms):
        """run every cycle and timer tick due in elapsed_ms, return True if something was drawn"""
        drew = False
        self.timer_ms += elapsed_ms
        timer_period = 1000.0 / self.timer_hz
        while self.timer_ms >= timer_period:
            self.timer_ms -= timer_period
            self.chip.tick_timers()
        self.cycle_ms += elapsed_ms
        cycle_period = 1000.0 / self.cycle_hz
        while self.cycle_ms >= cycle_period:
            self.cycle_ms -= cycle_period
            drew = self.cycle() or drew
        return drew

    def run(self, fps=FPS, max_frames=None):
        """
        emulation loop, the host must have opened a pygame display so events get delivered
        stops on QUIT/ESC, after max_frames frames, or when stop() is called from on_frame
        """
        clock = pygame.time.Clock()
        self.running = True
        frames = 0
        log.info("Emulation starting, %d cycles/s, timers at %dHz", self.cycle_hz, self.timer_hz)
        try:
            while self.running:
                if not pump(self.chip, self.layout):
                    break
                if self.advance(clock.tick(fps)) and self.on_frame is not None:
                    self.on_frame(self.chip)
                frames += 1
                if max_frames is not None and frames >= max_frames:
                    break
        finally:
            self.running = False
            log.info("Emulation halted after %d cycles", self.cycles)

    def stop(self):
        self.running = False
