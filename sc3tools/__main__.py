# Command line front end for extracting and replacing text in SC3 scripts
# Last updated: 2026-10-18

import argparse
import glob
import logging
import sys

from .gamedef import get_by_alias, load_gamedefs
from .workflow import run_extract_text, run_replace_text


def supported_games_help(defs):
    if not defs:
        return 'SUPPORTED GAMES:\n    (none -- add them to gamedefs.json or pass --defs)'
    games = '\n    '.join(f'{d.full_name} ({"|".join(d.aliases)})' for d in defs)
    return 'SUPPORTED GAMES:\n    ' + games

def build_parser(defs):
    parser = argparse.ArgumentParser(
        prog='sc3tools',
        epilog=supported_games_help(defs),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--defs', help='Path to a gamedefs.json to use instead of the built-in one')
    parser.add_argument('-v', '--verbose', action='store_true', help='Print debugging output')
    subparsers = parser.add_subparsers(dest='command', required=True)

    extract = subparsers.add_parser('extract-text', help='Extracts text from one or multiple script files')
    extract.add_argument('input', help='Path to the input file or a glob pattern')
    extract.add_argument('game')
    extract.add_argument('--preserve-fullwidth', action='store_true', help='Preserve fullwidth characters')

    replace = subparsers.add_parser('replace-text', help='Replaces the contents of one or multiple script files')
    replace.add_argument('scripts', help='Path to the input script file or a glob pattern')
    replace.add_argument('text_files', metavar='text-files', help='Path to the input text file or a glob pattern')
    replace.add_argument('game')
    replace.add_argument('--preserve-fullwidth', action='store_true',
                         help='Compare and write text with exact character widths')

    return parser

def _defs_path(args):
    # --defs has to be known before the parser can list the supported games
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument('--defs')
    (known, _) = pre.parse_known_args(args)
    return known.defs

def main(args):
    # Game definitions that fail to load would make every later step unsound
    defs = load_gamedefs(_defs_path(args[1:]))

    parser = build_parser(defs)
    opts = parser.parse_args(args[1:])

    if opts.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s: %(message)s')

    gamedef = get_by_alias(defs, opts.game)
    if gamedef is None:
        print(f'Unsupported game "{opts.game}"\n')
        print(supported_games_help(defs))
        return 1

    if opts.command == 'extract-text':
        paths = sorted(glob.glob(opts.input))
        failures = run_extract_text(paths, gamedef, opts.preserve_fullwidth)
    else:
        scripts = sorted(glob.glob(opts.scripts))
        text_files = sorted(glob.glob(opts.text_files))
        failures = run_replace_text(scripts, text_files, gamedef, not opts.preserve_fullwidth)

    return 1 if failures else 0

def run():
    exit(main(sys.argv))

if __name__ == '__main__':
    run()
