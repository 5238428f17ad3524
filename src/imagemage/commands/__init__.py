"""
Subcommands.

Each module exposes register(subparsers), which adds its parser and sets
func=run. run(args) returns the process exit code and lets fatal
ImagemageError exceptions propagate to the CLI entry point.
"""

from . import diagram, edit, generate, icon, pattern, restore, story

# Order shown in --help
COMMAND_MODULES = [generate, edit, restore, icon, pattern, story, diagram]

__all__ = ["COMMAND_MODULES"]
