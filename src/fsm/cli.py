"""
CLI for compiling saved bot workspaces.

Usage:
    python -m src.fsm.cli compile bot.json
    python -m src.fsm.cli compile bot.json --format json -o bot.program.json
    python -m src.fsm.cli kinds
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from src.fsm.errors import CompileError
from src.fsm.registries import STATEMENT_RULES, VALUE_RULES
from src.service.compile_service import CompileService

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def cmd_compile(args) -> int:
    """Compile a workspace file to JavaScript or JSON."""
    path = Path(args.workspace)
    if not path.exists():
        logger.error(f"Workspace not found: {path}")
        return 1

    try:
        workspace_json = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path}: {e}")
        return 1

    service = CompileService()
    try:
        result = service.compile(workspace_json, include_code=args.format == "js")
    except CompileError as e:
        logger.error(f"Compile failed: {e}")
        return 1

    if args.format == "js":
        output = result.code or ""
    else:
        output = json.dumps(result.program.model_dump(mode="json", by_alias=True), indent=2) + "\n"

    if args.output:
        Path(args.output).write_text(output)
        logger.info(f"Wrote {args.output}")
    else:
        sys.stdout.write(output)
    return 0


def cmd_kinds(args) -> int:
    """List the block kinds the compiler understands."""
    print("Value blocks:")
    for kind in sorted(VALUE_RULES):
        print(f"  {kind}")
    print("Statement blocks:")
    for kind in sorted(STATEMENT_RULES):
        print(f"  {kind}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Compile visual bot programs")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Compile command
    compile_parser = subparsers.add_parser("compile", help="Compile a saved workspace")
    compile_parser.add_argument("workspace", help="Path to the saved workspace JSON")
    compile_parser.add_argument("-o", "--output", help="Write to file instead of stdout")
    compile_parser.add_argument(
        "--format", choices=["js", "json"], default="js", help="Output format (default: js)"
    )

    # Kinds command
    subparsers.add_parser("kinds", help="List supported block kinds")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "compile": cmd_compile,
        "kinds": cmd_kinds,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
