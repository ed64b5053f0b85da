# COMPATIBILITY QUIRKS TABLE
# https://games.gulrak.net/cadmium/chip8-opcode-table.html#quirk6

import logging
import os


DEBUG = True if int(os.getenv('DEBUG', 0)) >= 1 else False


def configure_logging(debug=DEBUG):
    """set up the root logger, DEBUG level traces every executed instruction"""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class Quirks:
    """
    behaviours that differ between CHIP-8 interpreters
    every toggle defaults to off, which gives the baseline behaviour:
    shifts ignore Vy, FX55/FX65 leave I alone, OR/AND/XOR keep VF and BNNN adds V0
    """
    NAMES = (
        'shift_uses_vy',
        'load_store_increments_index',
        'logic_resets_vf',
        'jump_uses_vx',
    )

    def __init__(self, shift_uses_vy=False, load_store_increments_index=False,
                 logic_resets_vf=False, jump_uses_vx=False):
        self.shift_uses_vy = shift_uses_vy
        self.load_store_increments_index = load_store_increments_index
        self.logic_resets_vf = logic_resets_vf
        self.jump_uses_vx = jump_uses_vx

    @classmethod
    def from_names(cls, names):
        enabled = {}
        for name in names:
            name = name.strip()
            if not name:
                continue
            if name not in cls.NAMES:
                raise ValueError(f"Unknown quirk {name!r}, expected one of {', '.join(cls.NAMES)}")
            enabled[name] = True
        return cls(**enabled)

    @classmethod
    def from_env(cls, var='QUIRKS'):
        """build the quirks from a comma separated env var, e.g. QUIRKS=shift_uses_vy,logic_resets_vf"""
        return cls.from_names(os.getenv(var, '').split(','))

    def __eq__(self, other):
        if not isinstance(other, Quirks):
            return NotImplemented
        return all(getattr(self, n) == getattr(other, n) for n in self.NAMES)

    def __repr__(self):
        flags = ", ".join(f"{n}={getattr(self, n)}" for n in self.NAMES)
        return f"Quirks({flags})"
