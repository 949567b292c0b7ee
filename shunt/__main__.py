"""CLI entry point for the formula evaluator.

Usage:
    python -m shunt [-v|-vv|-vvv] [--engine {shunt,lark}] <formula>
    python -m shunt [-v...] --emit-tree <formula>
    python -m shunt [-v...] --tree <tree_json_file>
    python -m shunt [-v...] --file <formula_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --engine      Front end used to parse the formula (default: shunt)
  --emit-tree   Parse the formula and print its tree as JSON
  --tree        Evaluate a previously emitted tree JSON file
  --file        Read the formula from a file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. The result is printed on stdout; errors
are printed on stderr with exit status 1.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from . import ENGINES, parse_formula
from .debug import DebugSink
from .errors import FormulaError
from .evaluator import Evaluator
from .tree_json import tree_from_obj, tree_to_obj


def read_file(path_name: str) -> str:
    path = Path(path_name)
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog='shunt', description="Arithmetic formula evaluator")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--engine', choices=ENGINES, default='shunt', help='parser front end')
    parser.add_argument('--debug-file', default='debug.txt', help='where debug output goes when -v is given')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-tree', action='store_true', help='print the parsed tree as JSON instead of evaluating')
    group.add_argument('--tree', metavar='TREE_JSON_FILE', help='evaluate a tree from a JSON file')
    parser.add_argument('--file', metavar='FORMULA_FILE', help='read the formula from a file')
    parser.add_argument('formula', nargs='?', help='formula to evaluate')
    args = parser.parse_args(argv)

    with DebugSink(args.v, args.debug_file) as sink:
        # Evaluate from tree JSON
        if args.tree:
            if args.formula or args.file:
                parser.error('--tree does not take a formula')
            text = read_file(args.tree)
            try:
                root = tree_from_obj(json.loads(text))
            except (KeyError, TypeError, ValueError) as e:
                print(f"Error: malformed tree: {e}", file=sys.stderr)
                sys.exit(1)
            run(lambda: Evaluator(debug=sink).evaluate(root))
            return

        if args.file:
            if args.formula:
                parser.error('give either a formula or --file, not both')
            formula = read_file(args.file).rstrip('\n')
        elif args.formula is not None:
            formula = args.formula
        else:
            parser.error('missing formula; or use --file/--tree')

        if args.emit_tree:
            try:
                root = parse_formula(formula, engine=args.engine, debug=sink)
            except FormulaError as e:
                report(e, formula)
                sys.exit(1)
            json.dump(tree_to_obj(root), sys.stdout, ensure_ascii=False, indent=2)
            print()
            return

        run(lambda: Evaluator(debug=sink).evaluate(parse_formula(formula, engine=args.engine, debug=sink)), formula)


def run(compute, formula: Optional[str] = None) -> None:
    try:
        value = compute()
    except FormulaError as e:
        report(e, formula)
        sys.exit(1)
    print(value)


def report(err: FormulaError, formula: Optional[str]) -> None:
    print(f"Error: {err}", file=sys.stderr)
    if formula is not None and '\n' not in formula:
        print(f"  {formula}", file=sys.stderr)
        print('  ' + ' ' * err.offset + '^', file=sys.stderr)


if __name__ == '__main__':
    main()
