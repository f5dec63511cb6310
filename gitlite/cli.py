# cli.py -- Command-line interface for gitlite
# Copyright (C) 2026 gitlite contributors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# gitlite is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Simple command-line interface to gitlite.

Commands operate on the repository found by walking up from the current
directory. Errors raised by the library are reported here, and only here,
as a message on stderr and a non-zero exit status.
"""

__all__ = [
    "AmbiguousObjectId",
    "Command",
    "main",
    "resolve_object",
]

import argparse
import logging
import os
import signal
import sys
import types
from collections.abc import Sequence

from .errors import (
    ChecksumMismatch,
    FileFormatException,
    InvalidObjectId,
    NotGitRepository,
    ObjectMissing,
)
from .file import ensure_dir_exists
from .log_utils import _configure_logging_from_trace
from .object_store import BaseObjectStore
from .objects import ObjectID, ShaFile, valid_hexsha
from .repo import CONTROLDIR, Repo

logger = logging.getLogger(__name__)

MIN_ABBREV = 4


class AmbiguousObjectId(ValueError):
    """An abbreviated object id matches more than one object."""

    def __init__(self, prefix: str, candidates: Sequence[str]) -> None:
        self.prefix = prefix
        self.candidates = list(candidates)
        super().__init__(
            f"short object id {prefix} is ambiguous: {', '.join(self.candidates)}"
        )


def resolve_object(object_store: BaseObjectStore, name: str) -> ObjectID:
    """Resolve a full or abbreviated hex object id to a full one.

    Raises:
      InvalidObjectId: if name is not hex, or shorter than MIN_ABBREV
      ObjectMissing: if no object matches
      AmbiguousObjectId: if more than one object matches
    """
    hex_length = object_store.object_format.hex_length
    if len(name) == hex_length:
        return ObjectID(name.lower())
    if len(name) < MIN_ABBREV or len(name) > hex_length:
        raise InvalidObjectId(name, hex_length)
    if not valid_hexsha(name.ljust(hex_length, "0"), object_store.object_format):
        raise InvalidObjectId(name, hex_length)
    candidates = list(object_store.iter_prefix(name))
    if not candidates:
        raise ObjectMissing(name)
    if len(candidates) > 1:
        raise AmbiguousObjectId(name, candidates)
    return candidates[0]


class Command:
    """A gitlite subcommand."""

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_init(Command):
    """Create an empty repository or reinitialize an existing one."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the init command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitlite init")
        parser.add_argument(
            "path", nargs="?", default=os.getcwd(), help="Repository path"
        )
        parsed_args = parser.parse_args(args)
        ensure_dir_exists(parsed_args.path)
        controldir = os.path.abspath(os.path.join(parsed_args.path, CONTROLDIR))
        with Repo.init(controldir):
            pass
        sys.stdout.write(f"Initialized empty repository in {controldir}\n")


class cmd_hash_object(Command):
    """Compute object ids and optionally store the objects."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the hash-object command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitlite hash-object")
        parser.add_argument(
            "-w",
            dest="write",
            action="store_true",
            help="Actually write the object into the object database",
        )
        parser.add_argument(
            "-t", dest="type", default="blob", help="Type of object to create"
        )
        parser.add_argument(
            "--stdin", action="store_true", help="Read the object from stdin"
        )
        parser.add_argument("files", nargs="*", help="Files to hash")
        parsed_args = parser.parse_args(args)
        if not parsed_args.files and not parsed_args.stdin:
            parser.error("no input given; pass files or --stdin")

        contents = []
        if parsed_args.stdin:
            contents.append(sys.stdin.buffer.read())
        for path in parsed_args.files:
            with open(path, "rb") as f:
                contents.append(f.read())

        if parsed_args.write:
            with Repo.discover() as repo:
                for content in contents:
                    sha = repo.object_store.add_data(parsed_args.type, content)
                    sys.stdout.write(f"{sha}\n")
        else:
            for content in contents:
                obj = ShaFile.from_raw_string(parsed_args.type, content)
                sys.stdout.write(f"{obj.id}\n")


class cmd_cat_file(Command):
    """Provide the content, type, or size of a stored object."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the cat-file command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitlite cat-file")
        group = parser.add_mutually_exclusive_group(required=True)
        group.add_argument(
            "-p", dest="pretty", action="store_true", help="Print the object content"
        )
        group.add_argument(
            "-t", dest="type", action="store_true", help="Show the object type"
        )
        group.add_argument(
            "-s", dest="size", action="store_true", help="Show the object size"
        )
        group.add_argument(
            "-e",
            dest="exists",
            action="store_true",
            help="Exit with zero status if the object exists",
        )
        parser.add_argument("object", help="Object id, possibly abbreviated")
        parsed_args = parser.parse_args(args)

        with Repo.discover() as repo:
            if parsed_args.exists:
                try:
                    sha = resolve_object(repo.object_store, parsed_args.object)
                    found = sha in repo.object_store
                except (ObjectMissing, InvalidObjectId, AmbiguousObjectId):
                    return 1
                return 0 if found else 1
            sha = resolve_object(repo.object_store, parsed_args.object)
            type_name, content = repo.object_store.get_raw(sha)
        if parsed_args.type:
            sys.stdout.write(f"{type_name}\n")
        elif parsed_args.size:
            sys.stdout.write(f"{len(content)}\n")
        else:
            sys.stdout.flush()
            sys.stdout.buffer.write(content)
            sys.stdout.buffer.flush()
        return None


class cmd_help(Command):
    """Show help information."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the help command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitlite help")
        parser.parse_args(args)
        sys.stdout.write("The following commands are available:\n\n")
        for name, cmd_kls in sorted(commands.items()):
            sys.stdout.write(f"  {name:<12} {cmd_kls.__doc__}\n")


commands: dict[str, type[Command]] = {
    "cat-file": cmd_cat_file,
    "hash-object": cmd_hash_object,
    "help": cmd_help,
    "init": cmd_init,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Main entry point for the gitlite CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code or None
    """
    if argv is None:
        argv = sys.argv[1:]

    if not argv or argv[0] in ("-h", "--help"):
        parser = argparse.ArgumentParser(
            prog="gitlite", description="Simple command-line interface to gitlite"
        )
        parser.add_argument(
            "command",
            nargs="?",
            help=f"Command to run. Available: {', '.join(sorted(commands))}",
        )
        parser.print_help()
        return 1

    if not _configure_logging_from_trace():
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
        )

    cmd = argv[0]
    cmd_args = argv[1:]

    try:
        cmd_kls = commands[cmd]
    except KeyError:
        logger.fatal("No such subcommand: %s", cmd)
        return 1
    try:
        return cmd_kls().run(cmd_args)
    except (
        ChecksumMismatch,
        FileFormatException,
        NotGitRepository,
        ObjectMissing,
        OSError,
        ValueError,
    ) as e:
        logger.error("error: %s", e)
        return 1


def signal_int(signal: int, frame: types.FrameType | None) -> None:
    """Handle interrupt signal by exiting.

    Args:
        signal: Signal number
        frame: Current stack frame
    """
    sys.exit(1)


def _main() -> None:
    signal.signal(signal.SIGINT, signal_int)
    sys.exit(main())


if __name__ == "__main__":
    _main()
