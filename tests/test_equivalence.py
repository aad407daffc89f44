"""Tests for comparing script tokens with edited text."""

import unittest

from sc3tools.equivalence import equivalent, line_changed
from sc3tools.script import Sc3String
from sc3tools.textline import Tag, TagError, Text, parse_line
from sc3tools.tokens import Token

from tests.helpers import codes, enc, make_gamedef


class TestEquivalent(unittest.TestCase):
    def setUp(self):
        self.gamedef = make_gamedef()

    def test_text_ignores_width(self):
        token = Token('text', codes('ＡＢあ'))
        self.assertTrue(equivalent(token, Text('ABあ'), self.gamedef))
        self.assertTrue(equivalent(token, Text('ＡＢあ'), self.gamedef))
        self.assertTrue(equivalent(token, Text('ＡBあ'), self.gamedef))
        self.assertFalse(equivalent(token, Text('ABい'), self.gamedef))

    def test_text_respects_blocklist(self):
        gamedef = make_gamedef(blocklist={'！'})
        token = Token('text', codes('Ａ！'))
        self.assertTrue(equivalent(token, Text('A！'), gamedef))
        self.assertFalse(equivalent(token, Text('A!'), gamedef))

    def test_text_with_compounds(self):
        token = Token('text', codes('あ\ue000'))
        self.assertTrue(equivalent(token, Text('あ!?'), self.gamedef))
        self.assertTrue(equivalent(token, Text('あ！？'), self.gamedef))
        self.assertFalse(equivalent(Token('text', codes('あ')), Text('あ!?'), self.gamedef))

    def test_tags_are_exact(self):
        token = Token('margin-top', 12)
        self.assertTrue(equivalent(token, Tag('margin', {'top': '12'}), self.gamedef))
        self.assertFalse(equivalent(token, Tag('margin', {'top': '13'}), self.gamedef))
        self.assertFalse(equivalent(token, Tag('margin', {'left': '12'}), self.gamedef))

    def test_unparseable_segment(self):
        self.assertFalse(equivalent(Token('center'), Tag('bogus', {}), self.gamedef))
        self.assertFalse(equivalent(Token('center'), Text('xyz'), self.gamedef))

    def test_text_against_tag(self):
        self.assertFalse(equivalent(Token('text', codes('あ')), Tag('center', {}), self.gamedef))
        self.assertFalse(equivalent(Token('center'), Text('あ'), self.gamedef))

    def test_exact_widths(self):
        token = Token('text', codes('ＡＢあ'))
        self.assertTrue(equivalent(token, Text('ＡＢあ'), self.gamedef, width_insensitive=False))
        self.assertFalse(equivalent(token, Text('ABあ'), self.gamedef, width_insensitive=False))
        self.assertFalse(equivalent(token, Text('ＡBあ'), self.gamedef, width_insensitive=False))

    def test_exact_widths_leave_tags_alone(self):
        token = Token('margin-top', 12)
        self.assertTrue(equivalent(token, Tag('margin', {'top': '12'}), self.gamedef, width_insensitive=False))


class TestLineChanged(unittest.TestCase):
    def setUp(self):
        self.gamedef = make_gamedef()
        self.tokens = list(Sc3String(b'\x01' + enc('あ') + b'\x02' + enc('ＡＢ') + b'\xff').tokens())

    def changed(self, line):
        return line_changed(self.tokens, parse_line(line), self.gamedef)

    def test_same(self):
        self.assertFalse(self.changed('[name]あ[line]AB'))
        self.assertFalse(self.changed('[name]あ[line]ＡＢ'))

    def test_different_text(self):
        self.assertTrue(self.changed('[name]あ[line]ABC'))

    def test_different_tag(self):
        self.assertTrue(self.changed('[name]あ[center]AB'))

    def test_fewer_segments(self):
        self.assertTrue(self.changed('[name]あ[line]'))

    def test_more_segments(self):
        self.assertTrue(self.changed('[name]あ[line]AB[linebreak]'))

    def test_bad_extra_segment(self):
        with self.assertRaises(TagError):
            self.changed('[name]あ[line]AB[bogus]')

    def test_width_only_edit_with_exact_widths(self):
        segments = parse_line('[name]あ[line]AB')
        self.assertTrue(line_changed(self.tokens, segments, self.gamedef, width_insensitive=False))
        segments = parse_line('[name]あ[line]ＡＢ')
        self.assertFalse(line_changed(self.tokens, segments, self.gamedef, width_insensitive=False))

    def test_escaped_brackets_are_text(self):
        tokens = [Token('text', codes('Ａ［ｘ］'))]
        self.assertFalse(line_changed(tokens, parse_line(r'A\[x\]'), self.gamedef))
        self.assertTrue(line_changed(tokens, parse_line(r'A\[ｘ\]ｘ'), self.gamedef))


if __name__ == '__main__':
    unittest.main()
