# Token codec for the string slots of SC3 script files
# for MAGES. engine visual novels (Chaos;Head, Steins;Gate, Robotics;Notes, ...)
# Last updated: 2026-10-18

from collections import namedtuple
import enum


class Sc3Error(Exception):
    pass

class UnrecognizedFormat(Sc3Error):
    def __str__(self):
        return 'unrecognized format'

class CorruptedFile(Sc3Error):
    def __str__(self):
        detail = super().__str__()
        return 'file appears to be corrupted' + (f' ({detail})' if detail else '')

class ExpectedMoreInput(Sc3Error):
    def __str__(self):
        return 'expected more input'

class UnrecognizedInstr(Sc3Error):
    def __init__(self, op):
        super().__init__(op)
        self.op = op

    def __str__(self):
        return f'unrecognized instruction 0x{self.op:02X}'


class PresentAction(enum.Enum):
    NONE = 'none'
    RESET_ALIGNMENT = 'reset-alignment'
    UNKNOWN_0x18 = 'unknown-0x18'


# `value` is None for bare opcodes, a PresentAction for 'present', an int for
# u16 payloads, an Expr for 'color'/'eval' and a tuple of code units for 'text'
Token = namedtuple('Token', ['kind', 'value'], defaults=(None,))

TERMINATOR = Token('terminator')


class Expr(bytes):
    """Expression bytecode, kept verbatim up to and including its 0x00 terminator.

    The game evaluates these; we only need to know where they end.
    """

    def __repr__(self):
        return f'Expr({self.hex()})'

    @staticmethod
    def const_len(b):
        # Length of a variable-width constant given its first byte (>= 0x80)
        return ((b & 0xE0) - 0x80) // 0x20 + 1

    @classmethod
    def parse(cls, data, offset=0):
        """Returns (expr, end_offset)."""
        i = offset
        while True:
            if i >= len(data):
                raise ExpectedMoreInput()
            b = data[i]
            if b == 0x00:
                i += 1
                break
            if b < 0x80:
                i += 2
            else:
                i += cls.const_len(b) + 1
            if i > len(data):
                raise ExpectedMoreInput()
        return cls(data[offset:i]), i


# opcode -> (kind, payload, fixed value)
OPCODES = {
    0x00: ('linebreak', None, None),
    0x01: ('name-start', None, None),
    0x02: ('line-start', None, None),
    0x03: ('present', None, PresentAction.NONE),
    0x04: ('color', 'expr', None),
    0x08: ('present', None, PresentAction.RESET_ALIGNMENT),
    0x09: ('ruby-base-start', None, None),
    0x0A: ('ruby-text-start', None, None),
    0x0B: ('ruby-text-end', None, None),
    0x0C: ('font-size', 'u16', None),
    0x0E: ('parallel', None, None),
    0x0F: ('center', None, None),
    0x11: ('margin-top', 'u16', None),
    0x12: ('margin-left', 'u16', None),
    0x13: ('hardcoded-value', 'u16', None),
    0x15: ('eval', 'expr', None),
    0x18: ('present', None, PresentAction.UNKNOWN_0x18),
    0x19: ('auto-forward', None, None),
    0x1A: ('auto-forward-1a', None, None),
    0x1E: ('ruby-center-per-char', None, None),
    0xFF: ('terminator', None, None),
}

# Reverse lookup. 'present' is keyed by its action, everything else by kind
_ENCODE = {}
for (op, (kind, payload, fixed)) in OPCODES.items():
    _ENCODE[(kind, fixed) if kind == 'present' else kind] = (op, payload)
del op, kind, payload, fixed

KINDS = frozenset(kind for (kind, _, _) in OPCODES.values()) | {'text'}


def is_opcode(b):
    return b < 0x80 or b == 0xFF

def read_u16(data, offset):
    if offset + 2 > len(data):
        raise ExpectedMoreInput()
    return int.from_bytes(data[offset:offset+2], 'big')

def decode_text(data, offset):
    codes = []
    i = offset
    while True:
        if i >= len(data):
            # A text run has to be followed by an opcode, usually the terminator
            raise ExpectedMoreInput()
        if is_opcode(data[i]):
            break
        codes.append(read_u16(data, i))
        i += 2
    return tuple(codes), i

def decode_token(data, offset=0):
    """Decodes one token from `data` at `offset`. Returns (token, end_offset)."""
    if offset >= len(data):
        raise ExpectedMoreInput()

    op = data[offset]
    if not is_opcode(op):
        codes, end = decode_text(data, offset)
        return Token('text', codes), end

    if op not in OPCODES:
        raise UnrecognizedInstr(op)

    kind, payload, fixed = OPCODES[op]
    i = offset + 1
    if payload == 'u16':
        return Token(kind, read_u16(data, i)), i + 2
    if payload == 'expr':
        expr, i = Expr.parse(data, i)
        return Token(kind, expr), i
    return Token(kind, fixed), i

def encode_token(token, out=None):
    """Appends the encoded form of `token` to `out` (a bytearray) and returns it."""
    if out is None:
        out = bytearray()

    kind, value = token
    if kind == 'text':
        if not value:
            raise ValueError('Cannot encode an empty text run')
        for code in value:
            # 0xFFxx would read back as a terminator
            if not 0x8000 <= code < 0xFF00:
                raise ValueError(f'Text code unit 0x{code:X} is outside the double-byte range')
            out.extend(code.to_bytes(2, 'big'))
        return out

    key = (kind, value) if kind == 'present' else kind
    if key not in _ENCODE:
        raise ValueError(f'Cannot encode token {token!r}')
    op, payload = _ENCODE[key]

    out.append(op)
    if payload == 'u16':
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f'{kind} value {value} does not fit in 16 bits')
        out.extend(value.to_bytes(2, 'big'))
    elif payload == 'expr':
        # Only accept spans that the decoder would read back the same way
        try:
            (_, end) = Expr.parse(value)
        except ExpectedMoreInput:
            raise ValueError(f'{kind} expression {bytes(value).hex()} is truncated')
        if end != len(value):
            raise ValueError(f'{kind} expression {bytes(value).hex()} has trailing bytes')
        out.extend(value)
    return out

def iter_tokens(data):
    """Lazily decodes tokens until the end of `data` or the first terminator.

    The terminator is not yielded. Decode errors are raised where they occur.
    """
    i = 0
    while i < len(data):
        token, i = decode_token(data, i)
        if token.kind == 'terminator':
            return
        yield token
