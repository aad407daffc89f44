# Extracting SC3 strings to text files and putting edited text back
# Last updated: 2026-10-18

import logging
import os
import sys

from .charset import has_fullwidth_alnum
from .equivalence import line_changed
from .script import Script
from .textline import deserialize_line, parse_line, serialize_string, serialize_token
from .tokens import Sc3Error

log = logging.getLogger(__name__)


class ProcessingError(Exception):
    pass

class ScriptLineError(ProcessingError):
    def __init__(self, path, index, error):
        super().__init__(path, index, error)
        self.path = path
        self.index = index
        self.error = error

    def __str__(self):
        return f'{os.path.basename(self.path)}, line {self.index + 1}: {self.error}'

class TextLineError(ScriptLineError):
    pass

class LineCountMismatchError(ProcessingError):
    def __init__(self, script_lines, text_lines):
        super().__init__(script_lines, text_lines)
        self.script_lines = script_lines
        self.text_lines = text_lines

    def __str__(self):
        return ('The number of lines in the text file has to match that of the script file '
                f'(script has {self.script_lines}, text file has {self.text_lines})')

# Anything that should stop one file but not the whole batch
FILE_ERRORS = (Sc3Error, ProcessingError, OSError, ValueError)


def report_ok(message):
    print(message + '\n')

def report_err(err):
    print(f'Error: {err}.\n', file=sys.stderr)

def read_text_lines(path):
    with open(path, 'r', encoding='utf-8-sig', newline='') as f:
        text = f.read()
    lines = text.split('\n')
    if lines[-1] == '':
        lines.pop()
    return [line[:-1] if line.endswith('\r') else line for line in lines]

def extract_text(script_path, out_path, gamedef, keep_fullwidth=False):
    """Writes every string of the script to `out_path`, one per line. Returns the line count."""
    lines = []
    with Script.open(script_path) as script:
        for (i, handle) in enumerate(script.string_index):
            s = script.read_string(handle)
            try:
                lines.append(serialize_string(s, gamedef, keep_fullwidth))
            except (Sc3Error, ValueError) as e:
                raise ScriptLineError(script_path, i, e) from e

    with open(out_path, 'w', encoding='utf-8', newline='\n') as f:
        for line in lines:
            f.write(line + '\n')
    return len(lines)

def _check_script_line(script_path, i, s, gamedef):
    # Decode everything up front so problems on the script side get blamed on the script
    try:
        tokens = list(s.tokens())
        for token in tokens:
            serialize_token(token, gamedef)
    except (Sc3Error, ValueError) as e:
        raise ScriptLineError(script_path, i, e) from e
    return tokens

def replace_text(script_path, text_path, gamedef, width_insensitive=True):
    """Puts the lines of `text_path` back into the script, rewriting only what changed.

    With `width_insensitive` off, the text file is taken to spell out every
    character width (as extracted with --preserve-fullwidth): width-only edits
    count as changes and text is written back with the widths it was typed in.

    Returns (changed, total).
    """
    lines = read_text_lines(text_path)

    with Script.open(script_path, writable=True) as script:
        count = script.string_index.count()
        if len(lines) != count:
            raise LineCountMismatchError(count, len(lines))

        changes = {}
        for (i, (s, line)) in enumerate(zip(script.read_strings(), lines)):
            tokens = _check_script_line(script_path, i, s, gamedef)
            try:
                if not line_changed(tokens, parse_line(line), gamedef, width_insensitive):
                    continue
                # Keep writing fullwidth letters if that's what the original did
                fullwidth = width_insensitive and any(
                    has_fullwidth_alnum(t.value, gamedef) for t in tokens if t.kind == 'text')
                changes[i] = deserialize_line(line, gamedef, fullwidth)
            except ValueError as e:
                raise TextLineError(text_path, i, e) from e
            log.debug('Line %d changed (fullwidth=%s)', i + 1, fullwidth)

        if changes:
            script.replace_strings(changes)

    return len(changes), count

def _stem(path):
    return os.path.splitext(os.path.basename(path))[0]

def find_text_file(script_path, text_paths):
    # foo.scx pairs with foo.scx.txt or foo.txt
    names = (os.path.basename(script_path), _stem(script_path))
    for path in text_paths:
        if _stem(path) in names:
            return path
    return None

def run_extract_text(paths, gamedef, keep_fullwidth=False):
    """Extracts every script into a txt/ folder beside it. Returns the number of files that failed."""
    failures = 0
    for path in paths:
        out_dir = os.path.join(os.path.dirname(path), 'txt')
        out_path = os.path.join(out_dir, os.path.basename(path) + '.txt')
        print(f'Processing {path}...')
        try:
            os.makedirs(out_dir, exist_ok=True)
            count = extract_text(path, out_path, gamedef, keep_fullwidth)
        except FILE_ERRORS as e:
            report_err(e)
            failures += 1
            continue

        if count > 0:
            report_ok(f'Successfully extracted {count} lines.')
        else:
            report_ok('No text data to be extracted.')
    return failures

def run_replace_text(script_paths, text_paths, gamedef, width_insensitive=True):
    """Returns the number of files that failed."""
    text_paths = list(text_paths)
    failures = 0
    for path in script_paths:
        text_path = find_text_file(path, text_paths)
        if text_path is None:
            log.debug('No text file for %s', path)
            continue

        print(f'Processing {path}...')
        try:
            changed, total = replace_text(path, text_path, gamedef, width_insensitive)
        except FILE_ERRORS as e:
            report_err(e)
            failures += 1
            continue

        if changed > 0:
            report_ok(f'Successfully replaced {changed} out of {total} lines.')
        else:
            report_ok('No changes found.')
    return failures
