import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_0, K_1, K_2, K_3,
    K_4, K_5, K_6, K_7,
    K_8, K_9, K_a, K_b,
    K_c, K_d, K_e, K_f,
    K_q, K_r, K_s, K_v,
    K_w, K_x, K_z,
    K_ESCAPE, KEYDOWN, KEYUP, QUIT,
)


# keys are labelled with their own hex value
HEX_LAYOUT = {
    K_0: 0x0,
    K_1: 0x1,
    K_2: 0x2,
    K_3: 0x3,
    K_4: 0x4,
    K_5: 0x5,
    K_6: 0x6,
    K_7: 0x7,
    K_8: 0x8,
    K_9: 0x9,
    K_a: 0xA,
    K_b: 0xB,
    K_c: 0xC,
    K_d: 0xD,
    K_e: 0xE,
    K_f: 0xF,
}

# the COSMAC VIP keypad laid on the left side of a QWERTY keyboard
#
# +-----+-----+-----+-----+
# | 1/1 | 2/2 | 3/3 | C/4 |
# +-----+-----+-----+-----+
# | 4/Q | 5/W | 6/E | D/R |
# +-----+-----+-----+-----+
# | 7/A | 8/S | 9/D | E/F |
# +-----+-----+-----+-----+
# | A/Z | 0/X | B/C | F/V |
# +-----+-----+-----+-----+
COSMAC_LAYOUT = {
    K_1: 0x1, K_2: 0x2, K_3: 0x3, K_4: 0xC,
    K_q: 0x4, K_w: 0x5, K_e: 0x6, K_r: 0xD,
    K_a: 0x7, K_s: 0x8, K_d: 0x9, K_f: 0xE,
    K_z: 0xA, K_x: 0x0, K_c: 0xB, K_v: 0xF,
}

LAYOUTS = {
    'hex': HEX_LAYOUT,
    'cosmac': COSMAC_LAYOUT,
}


def handle_event(chip, event, layout=HEX_LAYOUT):
    """
    apply a pygame event to the machine keypad
    return False when the event asks to stop the emulation (window closed or ESC)
    """
    if event.type == QUIT:
        return False
    if event.type == KEYDOWN:
        if event.key == K_ESCAPE:
            return False
        if event.key in layout:
            chip.set_key(layout[event.key], True)     # register keypress
    elif event.type == KEYUP and event.key in layout:
        chip.set_key(layout[event.key], False)
    return True


def pump(chip, layout=HEX_LAYOUT):
    """drain the pygame event queue, return False if any event asked to stop"""
    running = True
    for event in pygame.event.get():
        running = handle_event(chip, event, layout) and running
    return running
