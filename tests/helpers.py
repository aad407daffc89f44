"""Shared fixtures: a tiny game definition and an SC3 file builder."""

from sc3tools.charset import CompoundChar
from sc3tools.gamedef import GameDef

CHARSET = (
    '\u3000'
    ' ABCabc123!?.'
    'ＡＢＣＤａｂｃ１２３！？．'
    'あいうえお「」'
    '\ue000\ue001\ue002\ue003\ue004'
    '[]\\［］ｘ'
)

COMPOUND_CHARS = [
    CompoundChar('\ue000', '\ue000', '!?'),
    CompoundChar('\ue001', '\ue003', '¹⁸'),
    CompoundChar('\ue004', '\ue004', 'ＯＫ'),
]


def make_gamedef(blocklist=()):
    return GameDef('Test Game', ['test', 'tg'], CHARSET, COMPOUND_CHARS, blocklist)

def code(ch):
    return 0x8000 + CHARSET.index(ch)

def codes(s):
    return tuple(code(ch) for ch in s)

def enc(s):
    """Big-endian text bytes for the characters of `s`."""
    out = bytearray()
    for c in codes(s):
        out.extend(c.to_bytes(2, 'big'))
    return bytes(out)

def build_script(strings, prologue=b''):
    """Builds an SC3 file: header, `prologue`, offset table, then the strings."""
    table_start = 12 + len(prologue)
    table_end = table_start + 4 * len(strings)

    out = bytearray(b'SC3\0')
    out.extend(table_start.to_bytes(4, 'little'))
    out.extend(table_end.to_bytes(4, 'little'))
    out.extend(prologue)
    offset = table_end
    for s in strings:
        out.extend(offset.to_bytes(4, 'little'))
        offset += len(s)
    for s in strings:
        out.extend(s)
    return bytes(out)

def read_offsets(data):
    start = int.from_bytes(data[4:8], 'little')
    end = int.from_bytes(data[8:12], 'little')
    return [int.from_bytes(data[i:i+4], 'little') for i in range(start, end, 4)]
