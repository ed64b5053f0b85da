from collections import namedtuple
from enum import Enum

from chip8vm.errors import UnknownOpcode


class Op(Enum):
    """every instruction kind of the standard CHIP-8 set, the value is its assembly template"""
    CLS = "CLS"
    RET = "RET"
    JP = "JP 0x{addr:03x}"
    CALL = "CALL 0x{addr:03x}"
    SE_BYTE = "SE V{x:X}, 0x{byte:02x}"
    SNE_BYTE = "SNE V{x:X}, 0x{byte:02x}"
    SE_REG = "SE V{x:X}, V{y:X}"
    LD_BYTE = "LD V{x:X}, 0x{byte:02x}"
    ADD_BYTE = "ADD V{x:X}, 0x{byte:02x}"
    LD_REG = "LD V{x:X}, V{y:X}"
    OR = "OR V{x:X}, V{y:X}"
    AND = "AND V{x:X}, V{y:X}"
    XOR = "XOR V{x:X}, V{y:X}"
    ADD_REG = "ADD V{x:X}, V{y:X}"
    SUB = "SUB V{x:X}, V{y:X}"
    SHR = "SHR V{x:X}"
    SUBN = "SUBN V{x:X}, V{y:X}"
    SHL = "SHL V{x:X}"
    SNE_REG = "SNE V{x:X}, V{y:X}"
    LD_I = "LD I, 0x{addr:03x}"
    JP_V0 = "JP V0, 0x{addr:03x}"
    RND = "RND V{x:X}, 0x{byte:02x}"
    DRW = "DRW V{x:X}, V{y:X}, {n}"
    SKP = "SKP V{x:X}"
    SKNP = "SKNP V{x:X}"
    LD_VX_DT = "LD V{x:X}, DT"
    LD_VX_K = "LD V{x:X}, K"
    LD_DT_VX = "LD DT, V{x:X}"
    LD_ST_VX = "LD ST, V{x:X}"
    ADD_I = "ADD I, V{x:X}"
    LD_F = "LD F, V{x:X}"
    LD_B = "LD B, V{x:X}"
    LD_MEM_VX = "LD [I], V{x:X}"
    LD_VX_MEM = "LD V{x:X}, [I]"


class Instruction(namedtuple('Instruction', 'word n1 n2 n3 n4')):
    """a 16-bit instruction word split in its four nibbles, most significant first"""
    __slots__ = ()

    @property
    def x(self):
        return self.n2

    @property
    def y(self):
        return self.n3

    @property
    def n(self):
        return self.n4

    @property
    def byte(self):
        return (self.n3 << 4) | self.n4

    @property
    def addr(self):
        return (self.n2 << 8) | (self.n3 << 4) | self.n4

    def fields(self):
        """operand fields by name, as used in the Op templates"""
        return {'x': self.x, 'y': self.y, 'n': self.n, 'byte': self.byte, 'addr': self.addr}


# WATCH OUT: entries order is important!!!
# the lookup stops at the first (mask, pattern) matching the word,
# so fully specified patterns come before the ones with wildcard nibbles
DISPATCH_TABLE = [
    (0xFFFF, 0x00E0, Op.CLS),
    (0xFFFF, 0x00EE, Op.RET),
    (0xF00F, 0x5000, Op.SE_REG),
    (0xF00F, 0x8000, Op.LD_REG),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD_REG),
    (0xF00F, 0x8005, Op.SUB),
    (0xF00F, 0x8006, Op.SHR),
    (0xF00F, 0x8007, Op.SUBN),
    (0xF00F, 0x800E, Op.SHL),
    (0xF00F, 0x9000, Op.SNE_REG),
    (0xF0FF, 0xE09E, Op.SKP),
    (0xF0FF, 0xE0A1, Op.SKNP),
    (0xF0FF, 0xF007, Op.LD_VX_DT),
    (0xF0FF, 0xF00A, Op.LD_VX_K),
    (0xF0FF, 0xF015, Op.LD_DT_VX),
    (0xF0FF, 0xF018, Op.LD_ST_VX),
    (0xF0FF, 0xF01E, Op.ADD_I),
    (0xF0FF, 0xF029, Op.LD_F),
    (0xF0FF, 0xF033, Op.LD_B),
    (0xF0FF, 0xF055, Op.LD_MEM_VX),
    (0xF0FF, 0xF065, Op.LD_VX_MEM),
    (0xF000, 0x1000, Op.JP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SE_BYTE),
    (0xF000, 0x4000, Op.SNE_BYTE),
    (0xF000, 0x6000, Op.LD_BYTE),
    (0xF000, 0x7000, Op.ADD_BYTE),
    (0xF000, 0xA000, Op.LD_I),
    (0xF000, 0xB000, Op.JP_V0),
    (0xF000, 0xC000, Op.RND),
    (0xF000, 0xD000, Op.DRW),
]


def decode(word):
    """split a 16-bit word into nibbles, every value decodes"""
    word &= 0xFFFF
    return Instruction(word, word >> 12, (word >> 8) & 0xF, (word >> 4) & 0xF, word & 0xF)


def dispatch(instruction):
    """return the Op of a decoded instruction, raise UnknownOpcode when no pattern matches"""
    word = instruction.word
    for mask, pattern, op in DISPATCH_TABLE:
        if word & mask == pattern:
            return op
    raise UnknownOpcode(word)


def disassemble(word):
    """e.g. 0x8014 -> 'ADD V0, V1'"""
    instruction = decode(word)
    return dispatch(instruction).value.format(**instruction.fields())
