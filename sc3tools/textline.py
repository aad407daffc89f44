# Human-editable text form of SC3 strings: one line per string, with the
# control codes written as tags like [name], [linebreak] or [margin top="12"]
# Last updated: 2026-10-18

from collections import namedtuple
import re

from .charset import decode_str, encode_str
from .script import Sc3String
from .tokens import Expr, ExpectedMoreInput, PresentAction, Token


class TagError(ValueError):
    pass


Text = namedtuple('Text', ['text'])
Tag = namedtuple('Tag', ['name', 'attrs'])

# kind -> (tag name, attribute name)
TAGS = {
    'linebreak': ('linebreak', None),
    'name-start': ('name', None),
    'line-start': ('line', None),
    'color': ('color', 'index'),
    'ruby-base-start': ('ruby-base', None),
    'ruby-text-start': ('ruby-text-start', None),
    'ruby-text-end': ('ruby-text-end', None),
    'font-size': ('font', 'size'),
    'parallel': ('parallel', None),
    'center': ('center', None),
    'margin-top': ('margin', 'top'),
    'margin-left': ('margin', 'left'),
    'hardcoded-value': ('hardcoded-value', 'index'),
    'eval': ('evaluate', 'expr'),
    'auto-forward': ('auto-forward', None),
    'auto-forward-1a': ('auto-forward-1a', None),
    'ruby-center-per-char': ('ruby-center-per-char', None),
}

PRESENT_TAGS = {
    PresentAction.NONE: '%p',
    PresentAction.RESET_ALIGNMENT: '%e',
    PresentAction.UNKNOWN_0x18: '%18',
}

EXPR_KINDS = ('color', 'eval')

_KIND_BY_TAG = {tag: kind for (kind, tag) in TAGS.items()}
_PRESENT_BY_TAG = {tag: action for (action, tag) in PRESENT_TAGS.items()}

_TAG = re.compile(r'\[(%?[a-z0-9-]+)((?: [a-z]+="[^"\[\]]*")*)\]')
_ATTR = re.compile(r' ([a-z]+)="([^"]*)"')
# In text, \[ \] and \\ stand for literal brackets and backslashes
_PIECE = re.compile(r'\\([\\\[\]])|' + _TAG.pattern)


def escape_text(text):
    return text.replace('\\', '\\\\').replace('[', '\\[').replace(']', '\\]')

def parse_line(line):
    """Splits a line into Text and Tag segments. Escapes in Text are resolved."""
    segments = []
    text = []
    pos = 0
    for m in _PIECE.finditer(line):
        text.append(line[pos:m.start()])
        pos = m.end()
        if m.group(1) is not None:
            text.append(m.group(1))
            continue
        if any(text):
            segments.append(Text(''.join(text)))
        text = []
        segments.append(Tag(m.group(2), dict(_ATTR.findall(m.group(3)))))
    text.append(line[pos:])
    if any(text):
        segments.append(Text(''.join(text)))
    return segments

def format_tag(tag):
    attrs = ''.join(f' {k}="{v}"' for (k, v) in tag.attrs.items())
    return f'[{tag.name}{attrs}]'

def serialize_token(token, gamedef, keep_fullwidth=False):
    kind, value = token
    if kind == 'text':
        return escape_text(decode_str(value, gamedef, keep_fullwidth))
    if kind == 'present':
        return f'[{PRESENT_TAGS[value]}]'
    if kind not in TAGS:
        raise ValueError(f'Token {token!r} has no text form')

    name, attr = TAGS[kind]
    if attr is None:
        return f'[{name}]'
    if kind in EXPR_KINDS:
        return f'[{name} {attr}="{value.hex()}"]'
    return f'[{name} {attr}="{value}"]'

def serialize_string(s, gamedef, keep_fullwidth=False):
    return ''.join(serialize_token(token, gamedef, keep_fullwidth) for token in s.tokens())

def _parse_u16(tag, s):
    if not s.isascii() or not s.isdigit() or int(s) > 0xFFFF:
        raise TagError(f'{format_tag(tag)}: expected a number between 0 and 65535')
    return int(s)

def _parse_expr(tag, s):
    try:
        data = bytes.fromhex(s)
        (expr, end) = Expr.parse(data)
    except (ValueError, ExpectedMoreInput):
        raise TagError(f'{format_tag(tag)}: not a valid expression')
    if end != len(data):
        raise TagError(f'{format_tag(tag)}: expression has trailing bytes')
    return expr

def deserialize_segment(segment, gamedef, fullwidth=False):
    """Turns one parsed segment back into a Token."""
    if isinstance(segment, Text):
        return Token('text', encode_str(segment.text, gamedef, fullwidth))

    if len(segment.attrs) > 1:
        raise TagError(f'{format_tag(segment)}: too many attributes')

    if not segment.attrs:
        if segment.name in _PRESENT_BY_TAG:
            return Token('present', _PRESENT_BY_TAG[segment.name])
        key = (segment.name, None)
        value = None
    else:
        ((attr, value),) = segment.attrs.items()
        key = (segment.name, attr)

    kind = _KIND_BY_TAG.get(key)
    if kind is None:
        raise TagError(f'Unrecognized tag {format_tag(segment)}')
    if value is None:
        return Token(kind)
    if kind in EXPR_KINDS:
        return Token(kind, _parse_expr(segment, value))
    return Token(kind, _parse_u16(segment, value))

def deserialize_line(line, gamedef, fullwidth=False):
    tokens = [deserialize_segment(seg, gamedef, fullwidth) for seg in parse_line(line)]
    return Sc3String.from_tokens(tokens)
