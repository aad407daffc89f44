# Per-game settings: charset, compound characters and fullwidth exceptions
# Last updated: 2026-10-18
#
# gamedefs.json is a list of objects like
#   {
#       "name": "STEINS;GATE",
#       "resource_dir": "sg",
#       "aliases": ["sg", "steinsgate"],
#       "fullwidth_blocklist": ["＃"]
#   }
# where resource_dir (relative to the JSON file) holds charset.utf8 and
# compound_chars.map for that game.

import json
import logging
import os

from .charset import EncodingMaps, parse_compound_chars

log = logging.getLogger(__name__)

DEFAULT_GAMEDEFS = os.path.join(os.path.dirname(__file__), 'resources', 'gamedefs.json')


class GameDef:
    def __init__(self, full_name, aliases, charset, compound_chars, fullwidth_blocklist=()):
        self.full_name = full_name
        self.aliases = list(aliases)
        self.charset = list(charset)
        self.compound_chars = list(compound_chars)
        # Raises MissingPuaCharsError, which nothing should try to recover from
        self.encoding_maps = EncodingMaps(self.charset, self.compound_chars)
        self.fullwidth_blocklist = frozenset(fullwidth_blocklist)

    def __repr__(self):
        return f'GameDef({self.full_name!r})'

    @classmethod
    def from_resource_dir(cls, full_name, resource_dir, aliases, fullwidth_blocklist=()):
        with open(os.path.join(resource_dir, 'charset.utf8'), 'r', encoding='utf-8', newline='') as f:
            # Line breaks in the charset are real entries
            charset = f.read()
        compound_path = os.path.join(resource_dir, 'compound_chars.map')
        compound_chars = []
        if os.path.exists(compound_path):
            with open(compound_path, 'r', encoding='utf-8-sig') as f:
                compound_chars = parse_compound_chars(f.read())
        log.debug('%s: %d characters, %d compound mappings', full_name, len(charset), len(compound_chars))
        return cls(full_name, aliases, charset, compound_chars, fullwidth_blocklist)


def load_gamedefs(path=None):
    if path is None:
        path = DEFAULT_GAMEDEFS
    with open(path, 'r', encoding='utf-8') as f:
        entries = json.load(f)

    if type(entries) != list:
        raise ValueError(f'{path}: expected a list of game definitions')

    base_dir = os.path.dirname(os.path.abspath(path))
    defs = []
    for entry in entries:
        for key in ('name', 'resource_dir', 'aliases'):
            if key not in entry:
                raise ValueError(f'{path}: game definition is missing "{key}"')
        defs.append(GameDef.from_resource_dir(
            entry['name'],
            os.path.join(base_dir, entry['resource_dir']),
            entry['aliases'],
            entry.get('fullwidth_blocklist', []),
        ))
    return defs

def get_by_alias(defs, alias):
    for gamedef in defs:
        if alias in gamedef.aliases:
            return gamedef
    return None
