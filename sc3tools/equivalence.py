# Deciding whether an edited text line still says the same thing as the
# string already in the script
# Last updated: 2026-10-18

from itertools import zip_longest

from .charset import decode_str, to_halfwidth
from .textline import Text, deserialize_segment


def equivalent(token, segment, gamedef, width_insensitive=True):
    """Compares one script token with one parsed text segment.

    By default text is compared ignoring character width, since whoever edits
    the text file is free to type either. With `width_insensitive` off, the
    text has to match the script's characters exactly, so changing only the
    width counts as an edit. Everything else has to match exactly.
    """
    if token.kind == 'text' and isinstance(segment, Text):
        if width_insensitive:
            script_text = decode_str(token.value, gamedef, keep_fullwidth=False)
            return script_text == to_halfwidth(segment.text, gamedef)
        return decode_str(token.value, gamedef, keep_fullwidth=True) == segment.text

    try:
        return deserialize_segment(segment, gamedef, fullwidth=False) == token
    except ValueError:
        return False

def line_changed(tokens, segments, gamedef, width_insensitive=True):
    """Returns True if the parsed text line `segments` differs from the script tokens.

    Text segments the script has no counterpart for are encoded to make sure
    they can be, so their errors propagate.
    """
    for (token, segment) in zip_longest(tokens, segments):
        if token is None:
            deserialize_segment(segment, gamedef, fullwidth=False)
            return True
        if segment is None:
            return True
        if not equivalent(token, segment, gamedef, width_insensitive):
            return True
    return False
