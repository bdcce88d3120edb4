"""Command line interface.

Usage::

    remscontent [-c CONFIG] [-s STATE] plan|apply|destroy|refresh|schema|health
    remscontent [-c CONFIG] [-s STATE] import TYPE.NAME ID

``plan`` exits with 0 when REMS matches the configuration and with 2 when changes are pending. Errors exit with 1.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

import ujson
from dotenv import find_dotenv, load_dotenv

from . import __version__
from .exceptions import ProviderError, SystemException, UserErrors, UserException
from .provider import RemsContentProvider
from .provider.plan import Action, PlannedChange
from .runner.config import Address, Configuration, load_configuration
from .runner.engine import Engine
from .runner.state import StateFile
from .services.service_handler import ServiceError

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CHANGES = 2


def parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="remscontent", description="Manage REMS content from a configuration file.")
    parser.add_argument("-c", "--config", default="remscontent.json", help="configuration file")
    parser.add_argument("-s", "--state", default="remscontent.state.json", help="state file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)
    plan = commands.add_parser("plan", help="show the changes apply would make")
    plan.add_argument("--destroy", action="store_true", help="plan to destroy every managed object")
    plan.add_argument("--refresh", action=argparse.BooleanOptionalAction, default=True, help="refresh the state first")
    commands.add_parser("apply", help="apply the configuration")
    commands.add_parser("destroy", help="destroy every managed object")
    commands.add_parser("refresh", help="update the state from REMS")
    import_ = commands.add_parser("import", help="bring an existing REMS object under management")
    import_.add_argument("address", help="configured address, TYPE.NAME")
    import_.add_argument("id", help="REMS id of the object")
    commands.add_parser("schema", help="print the provider schema as JSON")
    commands.add_parser("health", help="check that REMS answers")
    return parser


def summary(changes: list[PlannedChange]) -> tuple[int, int, int]:
    """Count objects to add, change and destroy."""
    add = sum(change.action in (Action.CREATE, Action.REPLACE) for change in changes)
    change_count = sum(change.action == Action.UPDATE for change in changes)
    destroy = sum(change.action in (Action.DELETE, Action.REPLACE) for change in changes)
    return add, change_count, destroy


def render(changes: list[PlannedChange]) -> bool:
    """Print the planned changes.

    :returns: True if there are changes to apply
    """
    pending = [change for change in changes if change.action != Action.NOOP]
    for change in pending:
        print(change.render())
        print()
    if not any(change.has_changes for change in changes):
        print("No changes. REMS content matches the configuration.")
        return False
    add, change_count, destroy = summary(changes)
    print(f"Plan: {add} to add, {change_count} to change, {destroy} to destroy.")
    return True


async def run(args: argparse.Namespace) -> int:
    """Run a command."""
    provider = RemsContentProvider(__version__)
    if args.command == "schema":
        print(ujson.dumps(provider.schema(), indent=2, escape_forward_slashes=False))
        return EXIT_OK

    if args.command == "health" and not Path(args.config).exists():
        configuration = Configuration()
    else:
        configuration = load_configuration(args.config)
    provider.configure(configuration.provider)
    try:
        if args.command == "health":
            health = await provider.health()
            print(f"REMS is {health.value}")
            return EXIT_OK

        engine = Engine(provider, configuration, StateFile(args.state))
        if args.command == "plan":
            if args.refresh:
                await engine.refresh()
            return EXIT_CHANGES if render(await engine.plan(destroy=args.destroy)) else EXIT_OK
        if args.command == "refresh":
            await engine.refresh()
            engine.save_state()
            print(f"Refreshed {len(engine.state.managed())} objects.")
            return EXIT_OK
        if args.command == "import":
            entry = await engine.import_resource(Address.parse(args.address), args.id)
            print(f"Imported '{entry.address}'.")
            return EXIT_OK

        destroy = args.command == "destroy"
        await engine.refresh()
        changes = await engine.apply(destroy=destroy)
        render(changes)
        add, change_count, destroy_count = summary(changes)
        verb = "Destroy" if destroy else "Apply"
        print(f"{verb} complete! Resources: {add} added, {change_count} changed, {destroy_count} destroyed.")
        return EXIT_OK
    finally:
        await provider.close()


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command line interface.

    :returns: The exit code
    """
    load_dotenv(find_dotenv(usecwd=True))
    args = parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except ProviderError as ex:
        print(f"Error: {ex.summary}\n\n{ex.detail}", file=sys.stderr)
    except (UserErrors, UserException, SystemException, ServiceError) as ex:
        print(f"Error: {ex}", file=sys.stderr)
    return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
