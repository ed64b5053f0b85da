# ******************** ERRORS SECTION
# every failure the core can report while loading or stepping a program


class EngineError(Exception):
    """base class for every error raised by the CHIP-8 core"""


class UnknownOpcode(EngineError):
    def __init__(self, word):
        self.word = word
        super().__init__(f"Unknown opcode 0x{word:04x}")


class StackOverflow(EngineError, IndexError):
    def __init__(self, depth=16):
        self.depth = depth
        super().__init__(f"The CHIP-8 stack can contain at most {depth} addresses. Limit exceeded")


class StackUnderflow(EngineError, IndexError):
    def __init__(self):
        super().__init__("Return with an empty CHIP-8 stack")


class MemoryOutOfBounds(EngineError):
    def __init__(self, addr, reason="Memory access out of bounds"):
        self.addr = addr
        super().__init__(f"{reason} at 0x{addr:04x}")


class ReadOnlyMemory(MemoryOutOfBounds):
    """a program tried to overwrite the built-in font"""
    def __init__(self, addr):
        super().__init__(addr, "Write to the read-only font area")


class ProgramTooLarge(EngineError):
    def __init__(self, size, limit):
        self.size = size
        self.limit = limit
        super().__init__(f"Program is {size} bytes, at most {limit} bytes fit in memory")
