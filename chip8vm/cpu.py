# TEST SUITE
# https://github.com/Timendus/chip8-test-suite

import logging
import random
from functools import wraps

from chip8vm.config import Quirks
from chip8vm.decoder import Op, decode, dispatch
from chip8vm.errors import EngineError, MemoryOutOfBounds, ProgramTooLarge
from chip8vm.machine import (
    FONT_CHAR_SIZE, FONT_START_ADDRESS, MAX_ROM_SIZE, MEMORY_SIZE, ROM_START_ADDRESS,
    Framebuffer, Keypad, Memory, Stack,
)

log = logging.getLogger(__name__)


# ******************** UTILITIES SECTION
def asm(op):
    """decorator to log the ASM of the instruction being executed"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(self, ins):
            if log.isEnabledFor(logging.DEBUG):
                log.debug("mem_addr: 0x%04x    instruction: %s",
                          self.pc - 2, op.value.format(**ins.fields()))
            return fn(self, ins)
        wrapper_fn.op = op
        return wrapper_fn
    return decorator


# ******************** CPU SECTION
class Chip8:
    def __init__(self, program=None, quirks=None, rng=None):
        self.quirks = quirks if quirks is not None else Quirks()
        self.rng = rng if rng is not None else random.Random()
        self.instructions = {
            Op.CLS: self._clear_screen,
            Op.RET: self._return,
            Op.JP: self._jump,
            Op.CALL: self._call_addr,
            Op.SE_BYTE: self._skip_if_eq,
            Op.SNE_BYTE: self._skip_if_not_eq,
            Op.SE_REG: self._skip_if_eq_regs,
            Op.LD_BYTE: self._set_vk,
            Op.ADD_BYTE: self._add_to_vk,
            Op.LD_REG: self._set_vx_to_vy,
            Op.OR: self._set_vx_or_vy,
            Op.AND: self._set_vx_and_vy,
            Op.XOR: self._set_vx_xor_vy,
            Op.ADD_REG: self._add_vx_vy,
            Op.SUB: self._sub_vx_vy,
            Op.SHR: self._shr,
            Op.SUBN: self._subn_vx_vy,
            Op.SHL: self._shl,
            Op.SNE_REG: self._skip_if_not_eq_regs,
            Op.LD_I: self._set_idx,
            Op.JP_V0: self._jump_plus,
            Op.RND: self._random_byte_and,
            Op.DRW: self._to_screen,
            Op.SKP: self._skip_if_pressed,
            Op.SKNP: self._skip_if_not_pressed,
            Op.LD_VX_DT: self._set_vx_dt,
            Op.LD_VX_K: self._wait_keypress,
            Op.LD_DT_VX: self._set_dt_vx,
            Op.LD_ST_VX: self._set_st,
            Op.ADD_I: self._add_to_idx,
            Op.LD_F: self._select_char,
            Op.LD_B: self._bcd_repr,
            Op.LD_MEM_VX: self._store_vregs,
            Op.LD_VX_MEM: self._load_vregs,
        }
        self.reset()
        if program is not None:
            self.load(program)

    def reset(self):
        """fresh machine: font in memory, everything else zeroed, PC at the ROM start"""
        self.mem = Memory()
        self.stack = Stack()
        self.v_regs = [0] * 16
        self.pc = ROM_START_ADDRESS
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero
        self.keypad = Keypad()
        self.screen = Framebuffer()
        self.draw = False
        self.opcode = 0
        self.opcode_addr = ROM_START_ADDRESS

    def __str__(self):
        registers = f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.idx:04x} | VARIABLE_REGISTERS:{self.v_regs}"
        timers = f"DT:{self.dt} | ST:{self.st}"
        stack = f"STACK:{self.stack}"
        last = f"LAST_OPCODE:0x{self.opcode:04x} AT 0x{self.opcode_addr:04x}"
        return f"{registers}\n{timers}\n{stack}\n{last}"

    def load(self, program, length=None):
        """copy a program image at 0x200, raise ProgramTooLarge if it doesn't fit"""
        if length is not None:
            if length > len(program):
                raise ValueError(f"Length {length} is past the end of a {len(program)} bytes program")
            program = program[:length]
        rom = bytes(program)
        if len(rom) > MAX_ROM_SIZE:
            raise ProgramTooLarge(len(rom), MAX_ROM_SIZE)
        self.mem.load_rom(rom)
        log.debug("Loaded %d bytes at 0x%03x", len(rom), ROM_START_ADDRESS)

    # ********** HOST INTERFACE
    @property
    def framebuffer(self):
        return self.screen

    @property
    def delay_timer(self):
        return self.dt

    @property
    def sound_timer(self):
        return self.st

    @property
    def sound_active(self):
        """audio is left to the host, which should beep while this is True"""
        return self.st > 0

    def set_key(self, index, pressed):
        self.keypad[index] = pressed

    def tick_timers(self):
        """decrement delay/sound timers, the host calls it at 60Hz"""
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            self.st -= 1

    def step(self):
        """
        execute exactly one instruction and return its Op
        an EngineError leaves PC on the failing instruction and the rest of the state untouched,
        opcode/opcode_addr keep describing the last instruction that completed
        """
        addr = self.pc
        # fetch (each instruction is two bytes long)
        word = self.mem.read_word(addr)
        # decode
        ins = decode(word)
        op = dispatch(ins)
        # execute
        draw = self.draw
        self.draw = False
        self._goto_next_instruction()
        try:
            self.instructions[op](ins)
        except EngineError:
            self.pc, self.draw = addr, draw
            raise
        self.opcode, self.opcode_addr = word, addr
        return op

    def _goto_next_instruction(self):
        self.pc += 0x2

    def _jump_to(self, target):
        """PC must stay on a fetchable word, the error is raised by the jump itself"""
        if not 0 <= target <= MEMORY_SIZE - 2:
            raise MemoryOutOfBounds(target)
        self.pc = target

    # ********** INSTRUCTIONS
    @asm(Op.CLS)
    def _clear_screen(self, ins):
        self.screen.clear()
        self.draw = True

    @asm(Op.RET)
    def _return(self, ins):
        """return from a subroutine"""
        self.pc = self.stack.pop()

    @asm(Op.JP)
    def _jump(self, ins):
        self._jump_to(ins.addr)

    @asm(Op.CALL)
    def _call_addr(self, ins):
        if ins.addr > MEMORY_SIZE - 2:
            raise MemoryOutOfBounds(ins.addr)
        self.stack.append(self.pc)
        self._jump_to(ins.addr)

    @asm(Op.SE_BYTE)
    def _skip_if_eq(self, ins):
        if self.v_regs[ins.x] == ins.byte:
            self._goto_next_instruction()

    @asm(Op.SNE_BYTE)
    def _skip_if_not_eq(self, ins):
        if self.v_regs[ins.x] != ins.byte:
            self._goto_next_instruction()

    @asm(Op.SE_REG)
    def _skip_if_eq_regs(self, ins):
        if self.v_regs[ins.x] == self.v_regs[ins.y]:
            self._goto_next_instruction()

    @asm(Op.SNE_REG)
    def _skip_if_not_eq_regs(self, ins):
        if self.v_regs[ins.x] != self.v_regs[ins.y]:
            self._goto_next_instruction()

    @asm(Op.LD_BYTE)
    def _set_vk(self, ins):
        """set the value of one of the 16 variable registers, Vx"""
        self.v_regs[ins.x] = ins.byte

    @asm(Op.ADD_BYTE)
    def _add_to_vk(self, ins):
        """add to the value already present in one of the variable registers, VF is not touched"""
        self.v_regs[ins.x] = (self.v_regs[ins.x] + ins.byte) & 0xFF

    @asm(Op.LD_REG)
    def _set_vx_to_vy(self, ins):
        self.v_regs[ins.x] = self.v_regs[ins.y]

    @asm(Op.OR)
    def _set_vx_or_vy(self, ins):
        self.v_regs[ins.x] |= self.v_regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[0xF] = 0

    @asm(Op.AND)
    def _set_vx_and_vy(self, ins):
        self.v_regs[ins.x] &= self.v_regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[0xF] = 0

    @asm(Op.XOR)
    def _set_vx_xor_vy(self, ins):
        self.v_regs[ins.x] ^= self.v_regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.v_regs[0xF] = 0

    # the flag is always written last, so it wins when x is F
    @asm(Op.ADD_REG)
    def _add_vx_vy(self, ins):
        """set Vx = Vx + Vy, VF = carry"""
        total = self.v_regs[ins.x] + self.v_regs[ins.y]
        self.v_regs[ins.x] = total & 0xFF
        self.v_regs[0xF] = 1 if total > 0xFF else 0

    @asm(Op.SUB)
    def _sub_vx_vy(self, ins):
        """set Vx = Vx - Vy, VF = NOT borrow"""
        vx, vy = self.v_regs[ins.x], self.v_regs[ins.y]
        self.v_regs[ins.x] = (vx - vy) & 0xFF
        self.v_regs[0xF] = 1 if vx > vy else 0

    @asm(Op.SUBN)
    def _subn_vx_vy(self, ins):
        """set Vx = Vy - Vx, VF = NOT borrow"""
        vx, vy = self.v_regs[ins.x], self.v_regs[ins.y]
        self.v_regs[ins.x] = (vy - vx) & 0xFF
        self.v_regs[0xF] = 1 if vy > vx else 0

    @asm(Op.SHR)
    def _shr(self, ins):
        """set Vx = Vx SHR 1, VF = the bit shifted out"""
        value = self.v_regs[ins.y] if self.quirks.shift_uses_vy else self.v_regs[ins.x]
        self.v_regs[ins.x] = value >> 1
        self.v_regs[0xF] = value & 0x1

    @asm(Op.SHL)
    def _shl(self, ins):
        """set Vx = Vx SHL 1, VF = the bit shifted out"""
        value = self.v_regs[ins.y] if self.quirks.shift_uses_vy else self.v_regs[ins.x]
        self.v_regs[ins.x] = (value << 1) & 0xFF
        self.v_regs[0xF] = (value & 0x80) >> 7

    @asm(Op.LD_I)
    def _set_idx(self, ins):
        self.idx = ins.addr

    @asm(Op.JP_V0)
    def _jump_plus(self, ins):
        offset = self.v_regs[ins.x] if self.quirks.jump_uses_vx else self.v_regs[0x0]
        self._jump_to(ins.addr + offset)

    @asm(Op.RND)
    def _random_byte_and(self, ins):
        self.v_regs[ins.x] = self.rng.randint(0, 255) & ins.byte

    @asm(Op.DRW)
    def _to_screen(self, ins):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision"""
        x, y = self.v_regs[ins.x], self.v_regs[ins.y]
        sprite = self.mem.read(self.idx, ins.n)
        self.v_regs[0xF] = 0
        for i, sprite_byte in enumerate(sprite):
            # wrap around both edges of the screen
            y_coordinate = (y + i) % self.screen.h
            for j in range(8):
                if not sprite_byte & (0x80 >> j):
                    continue
                x_coordinate = (x + j) % self.screen.w
                # sprites are XORed onto the screen, erasing a lit pixel is a collision
                if self.screen.flip_pixel(x_coordinate, y_coordinate):
                    self.v_regs[0xF] = 1
        self.draw = True

    @asm(Op.SKP)
    def _skip_if_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is pressed"""
        if self.keypad[self.v_regs[ins.x]]:
            self._goto_next_instruction()

    @asm(Op.SKNP)
    def _skip_if_not_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is NOT pressed"""
        if not self.keypad[self.v_regs[ins.x]]:
            self._goto_next_instruction()

    @asm(Op.LD_VX_DT)
    def _set_vx_dt(self, ins):
        self.v_regs[ins.x] = self.dt

    @asm(Op.LD_VX_K)
    def _wait_keypress(self, ins):
        """wait for a key press and store its value in Vx"""
        key = self.keypad.first()
        if key is None:
            self.pc -= 0x2      # stay on the same instruction until a key is pressed
        else:
            self.v_regs[ins.x] = key

    @asm(Op.LD_DT_VX)
    def _set_dt_vx(self, ins):
        self.dt = self.v_regs[ins.x]

    @asm(Op.LD_ST_VX)
    def _set_st(self, ins):
        self.st = self.v_regs[ins.x]

    @asm(Op.ADD_I)
    def _add_to_idx(self, ins):
        self.idx = (self.idx + self.v_regs[ins.x]) & 0xFFFF

    @asm(Op.LD_F)
    def _select_char(self, ins):
        """set I to location of sprite for digit Vx"""
        self.idx = FONT_START_ADDRESS + self.v_regs[ins.x] * FONT_CHAR_SIZE

    @asm(Op.LD_B)
    def _bcd_repr(self, ins):
        """hundreds digit of Vx in memory at I, the tens digit at I+1, the ones digit at I+2"""
        value = self.v_regs[ins.x]
        self.mem.write(self.idx, [value // 100, value // 10 % 10, value % 10])

    @asm(Op.LD_MEM_VX)
    def _store_vregs(self, ins):
        """store registers V0 through Vx (included) in memory starting at location I"""
        self.mem.write(self.idx, self.v_regs[:ins.x + 1])
        if self.quirks.load_store_increments_index:
            self.idx = (self.idx + ins.x + 1) & 0xFFFF

    @asm(Op.LD_VX_MEM)
    def _load_vregs(self, ins):
        """read registers V0 through Vx (included) from memory starting at location I"""
        self.v_regs[:ins.x + 1] = list(self.mem.read(self.idx, ins.x + 1))
        if self.quirks.load_store_increments_index:
            self.idx = (self.idx + ins.x + 1) & 0xFFFF
