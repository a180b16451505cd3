"""
Command registry for the command line.

Each command is a CommandDescriptor; nested command names ("oval generate
report") become nested argparse subcommands.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from enum import IntEnum
from typing import BinaryIO, Callable, Dict, List, Optional, TextIO, Tuple

from oval_core.logic.models import OvalConfig


class ExitStatus(IntEnum):
    """Process exit status."""
    OK = 0
    ERROR = 1
    FAIL = 2


@dataclass
class CommandContext:
    """Run-wide settings handed to every command handler."""
    config: OvalConfig = field(default_factory=OvalConfig)
    verbosity: int = 0
    stdout: Optional[TextIO] = None
    stderr: Optional[TextIO] = None

    @property
    def out(self) -> TextIO:
        return self.stdout if self.stdout is not None else sys.stdout

    @property
    def err(self) -> TextIO:
        return self.stderr if self.stderr is not None else sys.stderr

    @property
    def binary_out(self) -> BinaryIO:
        return self.out.buffer


Handler = Callable[[argparse.Namespace, CommandContext], ExitStatus]


@dataclass
class CommandDescriptor:
    """A runnable command: its name path, help texts, argument setup and handler."""
    name: str
    summary: str
    usage: str
    configure: Callable[[argparse.ArgumentParser], None]
    handler: Handler

    @property
    def path(self) -> Tuple[str, ...]:
        return tuple(self.name.split())


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser exiting with ExitStatus.ERROR on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(int(ExitStatus.ERROR), f"{self.prog}: error: {message}\n")


class CommandRegistry:
    """
    Registry of command descriptors.

    Group commands ("oval", "oval generate") are created implicitly from the
    leaf command names.
    """

    def __init__(self):
        self._commands: Dict[Tuple[str, ...], CommandDescriptor] = {}
        self._group_help: Dict[Tuple[str, ...], str] = {}
        self.logger = logging.getLogger("cli.registry")

    def register(self, descriptor: CommandDescriptor) -> None:
        """
        Raises:
            ValueError: If a command with the same name is already registered
        """
        if descriptor.path in self._commands:
            raise ValueError(f"Command already registered: {descriptor.name}")
        self._commands[descriptor.path] = descriptor
        self.logger.debug(f"Registered command: {descriptor.name}")

    def describe_group(self, name: str, summary: str) -> None:
        self._group_help[tuple(name.split())] = summary

    def get(self, name: str) -> Optional[CommandDescriptor]:
        return self._commands.get(tuple(name.split()))

    def descriptors(self) -> List[CommandDescriptor]:
        return list(self._commands.values())

    def build_parser(self, prog: str, description: str = "") -> argparse.ArgumentParser:
        """Build the argument parser; the chosen descriptor is stored as ``args.command``."""
        parser = _ArgumentParser(prog=prog, description=description)
        parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
        parser.add_argument("-q", "--quiet", action="store_true", help="Suppress verdict lines and reports")
        parser.add_argument("--config", metavar="PATH", help="Configuration file (YAML or JSON)")
        parser.add_argument("--version", action="store_true", help="Print version and exit")

        subparsers = {(): parser.add_subparsers(dest="command_0", metavar="<command>")}
        subparsers[()].required = True

        for path, descriptor in self._commands.items():
            for depth in range(1, len(path)):
                group = path[:depth]
                if group in subparsers:
                    continue
                group_parser = subparsers[group[:-1]].add_parser(
                    group[-1], help=self._group_help.get(group, ""),
                    description=self._group_help.get(group, "")
                )
                subparsers[group] = group_parser.add_subparsers(dest=f"command_{depth}", metavar="<command>")
                subparsers[group].required = True

            leaf = subparsers[path[:-1]].add_parser(
                path[-1], help=descriptor.summary, description=descriptor.summary,
                usage=f"%(prog)s {descriptor.usage}" if descriptor.usage else None
            )
            descriptor.configure(leaf)
            leaf.set_defaults(command=descriptor)

        return parser
