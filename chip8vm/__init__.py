from chip8vm.config import Quirks, configure_logging
from chip8vm.cpu import Chip8
from chip8vm.decoder import Instruction, Op, decode, disassemble, dispatch
from chip8vm.errors import (
    EngineError, MemoryOutOfBounds, ProgramTooLarge, ReadOnlyMemory,
    StackOverflow, StackUnderflow, UnknownOpcode,
)

__version__ = "0.1.0"
