# Double-byte text encoding used by SC3 scripts
# for MAGES. engine visual novels (Chaos;Head, Steins;Gate, Robotics;Notes, ...)
# Last updated: 2026-10-18
#
# Each game ships its own charset: the character at index i has the code
# 0x8000 + i. Some glyphs are ligatures or are drawn across several cells;
# those sit in the Private Use Area and the compound character table says
# what text they stand for.

from collections import namedtuple
import re

CODE_BASE = 0x8000
# U+FF01..U+FF5E are the fullwidth forms of '!'..'~'
FULLWIDTH_FIRST = '\uff01'
FULLWIDTH_LAST = '\uff5e'
FULLWIDTH_OFFSET = 0xFEE0


class EncodingError(ValueError):
    pass

class MissingPuaCharsError(Exception):
    def __init__(self, missing):
        super().__init__(missing)
        self.missing = missing

    def __str__(self):
        chars = ', '.join(f"'\\u{{{ord(ch):04X}}}'" for ch in self.missing)
        return f'The following Private Use Area characters were not found in the charset: [{chars}]'


# One logical character: a plain character, or the text a compound glyph stands for
Char = namedtuple('Char', ['value', 'compound'])

CompoundChar = namedtuple('CompoundChar', ['first', 'last', 'text'])

_MAPPING_LINE = re.compile(r'\[([0-9A-Fa-f]+)(?:-([0-9A-Fa-f]+))?\]=(.*)')

def parse_compound_chars(text):
    """Parses lines like `[E01C]=meow` or `[E01C-E01F]=¹⁸`."""
    mappings = []
    for (lineno, line) in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        m = _MAPPING_LINE.fullmatch(line)
        if m is None:
            raise ValueError(f'Bad compound character mapping on line {lineno}: {line!r}')
        first = int(m.group(1), 16)
        last = int(m.group(2), 16) if m.group(2) else first
        if last < first or last > 0x10FFFF:
            raise ValueError(f'Bad code point range on line {lineno}: {line!r}')
        mappings.append(CompoundChar(chr(first), chr(last), m.group(3)))
    return mappings


class EncodingMaps:
    def __init__(self, charset, compound_chars):
        self.charset = list(charset)

        self.char_to_code = {}
        for (i, ch) in enumerate(self.charset):
            # Charsets have a few duplicates; the first one is the canonical glyph
            self.char_to_code.setdefault(ch, CODE_BASE + i)

        missing = set()
        self.compound_by_char = {}
        self.compound_codes = {}
        for mapping in compound_chars:
            codes = []
            for cp in range(ord(mapping.first), ord(mapping.last) + 1):
                ch = chr(cp)
                if ch not in self.char_to_code:
                    missing.add(ch)
                    continue
                self.compound_by_char[ch] = mapping
                codes.append(self.char_to_code[ch])
            self.compound_codes.setdefault(mapping.text, tuple(codes))
        if missing:
            raise MissingPuaCharsError(sorted(missing))

        # Longest first, so that greedy matching prefers the bigger ligature
        self.compound_texts = sorted((t for t in self.compound_codes if t), key=len, reverse=True)

    def lookup(self, code):
        i = code - CODE_BASE
        if 0 <= i < len(self.charset):
            return self.charset[i]
        return None

    def decode_code(self, code):
        ch = self.lookup(code)
        if ch is None:
            raise EncodingError(f'Code 0x{code:04X} is not in the charset')
        return ch


def is_fullwidth(ch):
    return FULLWIDTH_FIRST <= ch <= FULLWIDTH_LAST

def to_narrow(ch):
    return chr(ord(ch) - FULLWIDTH_OFFSET) if is_fullwidth(ch) else ch

def to_wide(ch):
    return chr(ord(ch) + FULLWIDTH_OFFSET) if '!' <= ch <= '~' else ch

def fold_fullwidth(ch, blocklist=()):
    """Fullwidth forms become ASCII unless blocklisted. U+3000 (ideographic space) is left alone."""
    if ch in blocklist:
        return ch
    return to_narrow(ch)

def iter_chars(codes, maps):
    i = 0
    while i < len(codes):
        ch = maps.decode_code(codes[i])
        i += 1
        mapping = maps.compound_by_char.get(ch)
        if mapping is None:
            yield Char(ch, False)
            continue
        # A glyph drawn across several cells is stored as consecutive codes
        expected = ord(ch) + 1
        while i < len(codes) and expected <= ord(mapping.last) and maps.lookup(codes[i]) == chr(expected):
            i += 1
            expected += 1
        yield Char(mapping.text, True)

def decode_str(codes, gamedef, keep_fullwidth):
    out = []
    for c in iter_chars(codes, gamedef.encoding_maps):
        if c.compound or keep_fullwidth:
            out.append(c.value)
        else:
            out.append(fold_fullwidth(c.value, gamedef.fullwidth_blocklist))
    return ''.join(out)

def split_compounds(s, maps):
    """Splits human-written text into Chars, matching compound texts greedily."""
    i = 0
    while i < len(s):
        for text in maps.compound_texts:
            if s.startswith(text, i):
                yield Char(text, True)
                i += len(text)
                break
        else:
            yield Char(s[i], False)
            i += 1

def to_halfwidth(s, gamedef):
    blocklist = gamedef.fullwidth_blocklist
    return ''.join(c.value if c.compound else fold_fullwidth(c.value, blocklist)
                   for c in split_compounds(s, gamedef.encoding_maps))

def encode_char(ch, gamedef, fullwidth):
    maps = gamedef.encoding_maps
    twin = to_wide(ch) if to_wide(ch) != ch else to_narrow(ch)
    blocked = ch in gamedef.fullwidth_blocklist or twin in gamedef.fullwidth_blocklist
    if fullwidth and is_fullwidth(twin) and not blocked:
        candidates = (twin, ch)
    else:
        candidates = (ch, twin)
    for c in candidates:
        code = maps.char_to_code.get(c)
        if code is not None:
            return code
    raise EncodingError(f"Character '{ch}' (U+{ord(ch):04X}) is not in the charset")

def encode_str(s, gamedef, fullwidth):
    """Encodes text to code units. With `fullwidth`, ASCII is written with its fullwidth glyphs."""
    codes = []
    for c in split_compounds(s, gamedef.encoding_maps):
        if c.compound:
            codes.extend(gamedef.encoding_maps.compound_codes[c.value])
        else:
            codes.append(encode_char(c.value, gamedef, fullwidth))
    return tuple(codes)

def has_fullwidth_alnum(codes, gamedef):
    for c in iter_chars(codes, gamedef.encoding_maps):
        if c.compound or not is_fullwidth(c.value):
            continue
        narrow = to_narrow(c.value)
        if narrow.isascii() and narrow.isalnum():
            return True
    return False
