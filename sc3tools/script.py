# Reading and rewriting the string table of SC3 script files
# for MAGES. engine visual novels (Chaos;Head, Steins;Gate, Robotics;Notes, ...)
# Last updated: 2026-10-18
#
# Layout:
#   0x0  'SC3\0'
#   0x4  u32 offset of the string offset table
#   0x8  u32 end of the string offset table
#   [start, end) u32 absolute offset of every string, in order
#   the strings themselves, all the way to the end of the file

import io
import logging

from .tokens import CorruptedFile, UnrecognizedFormat, TERMINATOR, encode_token, iter_tokens

log = logging.getLogger(__name__)

MAGIC = b'SC3\0'
HEADER_SIZE = 12


class StringHandle:
    """Byte range of one string at the time it was looked up."""

    def __init__(self, start, end):
        self.start = start
        self.end = end

    def size(self):
        return self.end - self.start

    def __eq__(self, other):
        return isinstance(other, StringHandle) and (self.start, self.end) == (other.start, other.end)

    def __repr__(self):
        return f'StringHandle({self.start:#x}..{self.end:#x})'


class StringIndex:
    def __init__(self, offsets, eof):
        self.offsets = list(offsets)
        self.eof = eof

    def count(self):
        return len(self.offsets)

    __len__ = count

    def get(self, index):
        if not 0 <= index < len(self.offsets):
            return None
        if index < len(self.offsets) - 1:
            return StringHandle(self.offsets[index], self.offsets[index + 1])
        return StringHandle(self.offsets[index], self.eof)

    def __iter__(self):
        for i in range(len(self.offsets)):
            yield self.get(i)


class Sc3String:
    """The raw bytes of one string slot."""

    def __init__(self, data):
        self.data = bytes(data)

    def __len__(self):
        return len(self.data)

    def __eq__(self, other):
        return isinstance(other, Sc3String) and self.data == other.data

    def __repr__(self):
        return f'Sc3String({self.data.hex()})'

    def tokens(self):
        return iter_tokens(self.data)

    @classmethod
    def from_tokens(cls, tokens):
        out = bytearray()
        for token in tokens:
            encode_token(token, out)
        encode_token(TERMINATOR, out)
        return cls(out)


def layout_heap(heap_start, strings):
    """Returns the offsets and concatenated bytes of `strings` laid out back to back from `heap_start`."""
    offsets = []
    heap = bytearray()
    for s in strings:
        offsets.append(heap_start + len(heap))
        heap.extend(s.data)
    return offsets, heap


class Script:
    """An open SC3 script.

    Reads share the file's cursor, so one Script must only be used from one
    place at a time.
    """

    def __init__(self, f, owns_file=False):
        self.file = f
        self._owns_file = owns_file

        header = f.read(HEADER_SIZE)
        if len(header) != HEADER_SIZE or header[0:4] != MAGIC:
            raise UnrecognizedFormat()
        start = int.from_bytes(header[4:8], 'little')
        end = int.from_bytes(header[8:12], 'little')

        eof = f.seek(0, io.SEEK_END)

        if end < start or (end - start) % 4 != 0 or end > eof:
            raise CorruptedFile(f'bad string table range {start:#x}..{end:#x}')
        if end > start and start < HEADER_SIZE:
            raise CorruptedFile('string table overlaps the header')

        f.seek(start)
        table = f.read(end - start)
        if len(table) != end - start:
            raise CorruptedFile('string table is truncated')
        offsets = [int.from_bytes(table[i:i+4], 'little') for i in range(0, len(table), 4)]

        # The strings come after the table
        prev = end
        for (i, offset) in enumerate(offsets):
            if offset < prev or offset > eof:
                raise CorruptedFile(f'string {i} has a bad offset {offset:#x}')
            prev = offset

        self.string_table_offset = start
        self.string_index = StringIndex(offsets, eof)
        log.debug('Found %d strings, table at %#x', len(offsets), start)

    @classmethod
    def open(cls, path, writable=False):
        f = open(path, 'r+b' if writable else 'rb')
        try:
            return cls(f, owns_file=True)
        except BaseException:
            f.close()
            raise

    def close(self):
        if self._owns_file:
            self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def read_string(self, handle):
        self.file.seek(handle.start)
        data = self.file.read(handle.size())
        if len(data) != handle.size():
            raise CorruptedFile(f'string at {handle.start:#x} is truncated')
        return Sc3String(data)

    def read_strings(self):
        return [self.read_string(handle) for handle in self.string_index]

    def replace_strings(self, changes):
        """Replaces the strings at the indices in `changes` (index -> Sc3String).

        Every string after the first one is rewritten, since their offsets move.
        The heap is written before the offset table, so a crash in between
        leaves the file inconsistent; write to a copy if that matters.
        """
        count = self.string_index.count()
        for i in changes:
            if not 0 <= i < count:
                raise IndexError(f'String index {i} out of range (script has {count} strings)')
        if count == 0:
            return

        strings = [changes[i] if i in changes else self.read_string(handle)
                   for (i, handle) in enumerate(self.string_index)]

        heap_start = self.string_index.offsets[0]
        offsets, heap = layout_heap(heap_start, strings)

        table = bytearray()
        for offset in offsets:
            table.extend(offset.to_bytes(4, 'little'))

        f = self.file
        f.seek(heap_start)
        f.write(heap)
        # The heap runs to the end of the file, so anything left over would be
        # read back as part of the last string
        f.truncate()
        f.seek(self.string_table_offset)
        f.write(table)
        f.flush()

        self.string_index = StringIndex(offsets, heap_start + len(heap))
        log.debug('Rewrote %d strings (%d changed), heap %#x..%#x',
                  count, len(changes), heap_start, heap_start + len(heap))
