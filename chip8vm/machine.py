# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
#
# MASTERING CHIP-8
# https://github.com/mattmikolay/chip-8/wiki/Mastering-CHIP%E2%80%908

from chip8vm.errors import MemoryOutOfBounds, ReadOnlyMemory, StackOverflow, StackUnderflow


# ******************** STATIC SECTION
C8_FONTS = [0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
            0x20, 0x60, 0x20, 0x20, 0x70,  # 1
            0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
            0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
            0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
            0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
            0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
            0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
            0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
            0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
            0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
            0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
            0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
            0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
            0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
            0xF0, 0x80, 0xF0, 0x80, 0x80]  # F

MEMORY_SIZE = 4096
FONT_START_ADDRESS = 0x000
FONT_END_ADDRESS = FONT_START_ADDRESS + len(C8_FONTS)    # first address past the font
FONT_CHAR_SIZE = 5
ROM_START_ADDRESS = 0x200
MAX_ROM_SIZE = MEMORY_SIZE - ROM_START_ADDRESS
STACK_DEPTH = 16
KEY_COUNT = 16
SCREEN_HEIGHT = 32
SCREEN_WIDTH = 64


# ******************** MEMORY SECTION
# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    def __init__(self):
        self.inner = bytearray(MEMORY_SIZE)
        self.inner[FONT_START_ADDRESS:FONT_END_ADDRESS] = bytes(C8_FONTS)

    def __len__(self):
        return len(self.inner)

    def __getitem__(self, index):
        if isinstance(index, slice):
            start = 0 if index.start is None else index.start
            stop = MEMORY_SIZE if index.stop is None else index.stop
            return self.read(start, max(0, stop - start))
        self._check(index, 1)
        return self.inner[index]

    def __setitem__(self, key, value):
        self.write(key, [value])

    def _check(self, addr, count):
        """raise for the first address of [addr, addr+count) falling outside memory"""
        if addr < 0:
            raise MemoryOutOfBounds(addr)
        if addr + count > MEMORY_SIZE:
            raise MemoryOutOfBounds(max(addr, MEMORY_SIZE))

    def read(self, addr, count):
        self._check(addr, count)
        return bytes(self.inner[addr:addr + count])

    def read_word(self, addr):
        """instructions are two bytes long, stored big-endian"""
        hi, lo = self.read(addr, 2)
        return hi << 8 | lo

    def write(self, addr, data):
        """
        write a block of bytes, the whole range is validated before anything is written
        the built-in font is read-only to programs
        """
        data = bytes(v & 0xFF for v in data)
        self._check(addr, len(data))
        if data and addr < FONT_END_ADDRESS:
            raise ReadOnlyMemory(addr)
        self.inner[addr:addr + len(data)] = data

    def load_rom(self, rom):
        self._check(ROM_START_ADDRESS, len(rom))
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS + len(rom)] = rom


# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self, depth=STACK_DEPTH):
        self.addr_list = []
        self.depth = depth

    def __len__(self):
        return len(self.addr_list)

    def __repr__(self):
        return "[" + ", ".join(f"0x{a:03x}" for a in self.addr_list) + "]"

    def append(self, address):
        if len(self.addr_list) >= self.depth:
            raise StackOverflow(self.depth)
        self.addr_list.append(address)

    def pop(self):
        if not self.addr_list:
            raise StackUnderflow()
        return self.addr_list.pop()


# ******************** I/O SECTION
class Keypad:
    """16 keys, written by the host before each cycle and only read by instructions"""
    def __init__(self):
        self.pressed = [False] * KEY_COUNT

    def __getitem__(self, key):
        """keys outside 0x0-0xF don't exist, so they are never pressed"""
        return 0 <= key < KEY_COUNT and self.pressed[key]

    def __setitem__(self, key, value):
        if not 0 <= key < KEY_COUNT:
            raise IndexError(f"CHIP-8 keys go from 0x0 to 0xF, got {key}")
        self.pressed[key] = bool(value)

    def first(self):
        """lowest key index currently held down, None when no key is pressed"""
        for key, down in enumerate(self.pressed):
            if down:
                return key
        return None


class Framebuffer:
    """64x32 monochrome pixels, renderers should only read it between steps"""
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT):
        self.w, self.h = w, h
        self.buffer = bytearray(w * h)

    def __getitem__(self, xy):
        """return 1 if pixel (x, y) is ON, return 0 if pixel is OFF"""
        x, y = xy
        return self.buffer[y * self.w + x]

    def flip_pixel(self, x, y):
        """XOR a lit sprite bit onto the pixel, return True when the pixel got erased"""
        i = y * self.w + x
        erased = self.buffer[i] == 1
        self.buffer[i] ^= 1
        return erased

    def clear(self):
        self.buffer = bytearray(self.w * self.h)

    def rows(self):
        return [list(self.buffer[y * self.w:(y + 1) * self.w]) for y in range(self.h)]

    def snapshot(self):
        return bytes(self.buffer)

    def lit(self):
        return sum(self.buffer)
