"""Command line front-end for the TrackMyKid CRM.

Examples::

    trackmykid login --email me@example.com
    trackmykid list customers --query alpha --page 2
    trackmykid create kids --set name=Sam --set parent_id=4
    trackmykid delete customers 12
    trackmykid map
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from typing import Any

from trackmykid.client import CrmClient
from trackmykid.config import CrmConfig
from trackmykid.dashboard import Dashboard
from trackmykid.exceptions import CrmError
from trackmykid.pages import ListPage, get_entity
from trackmykid.pages.entities import ENTITIES, EntitySpec
from trackmykid.render import render_dashboard, render_markers, render_table
from trackmykid.routes import DASHBOARD, ENTITY_ROUTES, LOGIN, resolve_route
from trackmykid.session import FileStorage, SessionContext
from trackmykid.telemetry import TelemetryMap

_logger = logging.getLogger(__name__)


def _parse_assignments(pairs: list[str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise SystemExit(f"--set expects key=value, got {pair!r}")
        values[key.strip()] = value
    return values


def _prompt_confirm(message: str) -> bool:
    answer = input(f"{message} [y/N] ").strip().lower()
    return answer in {"y", "yes"}


def _require_login(context: SessionContext, route: str) -> bool:
    if resolve_route(route, authenticated=context.is_authenticated) == LOGIN:
        print("Not signed in. Run 'trackmykid login' first.", file=sys.stderr)
        return False
    return True


def _session_lost(context: SessionContext) -> bool:
    if context.navigator.current == LOGIN and not context.is_authenticated:
        print("Session expired. Please login again.", file=sys.stderr)
        return True
    return False


async def _cmd_login(client: CrmClient, args: argparse.Namespace) -> int:
    if resolve_route(LOGIN, authenticated=client.context.is_authenticated) == DASHBOARD and not args.force:
        print("Already signed in.")
        return 0
    email = args.email or input("Email: ")
    password = args.password or getpass.getpass("Password: ")
    try:
        await client.login(email, password, remember=args.remember)
    except CrmError as exc:
        print(f"Login failed: {exc}", file=sys.stderr)
        return 1
    print("Signed in.")
    return 0


async def _cmd_list(client: CrmClient, args: argparse.Namespace) -> int:
    spec = get_entity(args.entity)
    if not _require_login(client.context, ENTITY_ROUTES[spec.name]):
        return 1
    page = ListPage(client, spec, per_page=args.per_page)
    await page.load_related()
    page.state.query = args.query
    page.state.page = max(1, args.page)
    await page.fetch()
    if _session_lost(client.context):
        return 1
    print(render_table(page))
    return 0 if page.state.error is None else 1


async def _load_record(client: CrmClient, spec: EntitySpec, record_id: str) -> Any:
    response = await client.get(f"{spec.endpoint}/{record_id}")
    if isinstance(response, dict) and isinstance(response.get("data"), dict):
        response = response["data"]
    if not isinstance(response, dict):
        raise CrmError(f"Unexpected response for {spec.singular} {record_id}")
    return spec.model.model_validate(response)


async def _cmd_save(client: CrmClient, args: argparse.Namespace) -> int:
    spec = get_entity(args.entity)
    if not _require_login(client.context, ENTITY_ROUTES[spec.name]):
        return 1
    page = ListPage(client, spec)
    values = _parse_assignments(args.set or [])
    try:
        if args.command == "update":
            record = await _load_record(client, spec, args.id)
            page.open_edit(record)
        else:
            page.open_create()
    except CrmError as exc:
        if not _session_lost(client.context):
            print(f"Error: {exc}", file=sys.stderr)
        return 1

    if await page.submit(values):
        print(f"Saved {spec.singular}.")
        return 0
    if page.form.error:
        print(f"Error: {page.form.error}", file=sys.stderr)
    _session_lost(client.context)
    return 1


async def _cmd_delete(client: CrmClient, args: argparse.Namespace) -> int:
    spec = get_entity(args.entity)
    if not _require_login(client.context, ENTITY_ROUTES[spec.name]):
        return 1
    confirm = (lambda _message: True) if args.yes else _prompt_confirm
    page = ListPage(client, spec, confirm=confirm)
    record = spec.model.model_validate({"id": args.id})
    try:
        deleted = await page.delete(record)
    except CrmError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if deleted:
        print(f"Deleted {spec.singular} {args.id}.")
        return 0
    if page.state.error:
        print(f"Error: {page.state.error}", file=sys.stderr)
    _session_lost(client.context)
    return 1


async def _cmd_dashboard(client: CrmClient, _args: argparse.Namespace) -> int:
    if not _require_login(client.context, DASHBOARD):
        return 1
    dashboard = Dashboard(client)
    stats = await dashboard.load()
    if _session_lost(client.context):
        return 1
    if dashboard.error:
        print(f"Error: {dashboard.error}", file=sys.stderr)
        return 1
    print(render_dashboard(stats))
    return 0


async def _cmd_map(client: CrmClient, args: argparse.Namespace) -> int:
    if not _require_login(client.context, ENTITY_ROUTES["telemetry"]):
        return 1
    page = TelemetryMap(client, per_page=args.per_page)
    await page.search(args.query)
    if _session_lost(client.context):
        return 1
    print(render_table(page))
    print()
    print(render_markers(page.markers, page.center))
    return 0 if page.state.error is None else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trackmykid", description="TrackMyKid CRM command line client")
    parser.add_argument("--base-url", help="Override the CRM API base URL")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Sign in and store the token")
    login.add_argument("--email")
    login.add_argument("--password")
    login.add_argument(
        "--remember",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Keep the token for later commands (default: yes)",
    )
    login.add_argument("--force", action="store_true", help="Sign in again even if a token is stored")

    sub.add_parser("logout", help="Forget the stored token")

    listing = sub.add_parser("list", help="Show one page of an entity list")
    listing.add_argument("entity", choices=sorted(ENTITIES))
    listing.add_argument("--query", "-q", default="")
    listing.add_argument("--page", type=int, default=1)
    listing.add_argument("--per-page", type=int)

    for name, help_text in (("create", "Create a record"), ("update", "Update a record")):
        save = sub.add_parser(name, help=help_text)
        save.add_argument("entity", choices=sorted(ENTITIES))
        if name == "update":
            save.add_argument("id")
        save.add_argument("--set", action="append", metavar="FIELD=VALUE", help="Field value (repeatable)")

    delete = sub.add_parser("delete", help="Delete a record")
    delete.add_argument("entity", choices=sorted(ENTITIES))
    delete.add_argument("id")
    delete.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    sub.add_parser("dashboard", help="Show record counts")

    map_cmd = sub.add_parser("map", help="Latest position per device")
    map_cmd.add_argument("--query", "-q", default="")
    map_cmd.add_argument("--per-page", type=int)

    theme = sub.add_parser("theme", help="Show or change the theme preference")
    theme.add_argument("mode", nargs="?", choices=["light", "dark", "toggle"])

    return parser


_COMMANDS = {
    "login": _cmd_login,
    "list": _cmd_list,
    "create": _cmd_save,
    "update": _cmd_save,
    "delete": _cmd_delete,
    "dashboard": _cmd_dashboard,
    "map": _cmd_map,
}


async def run(args: argparse.Namespace, config: CrmConfig, context: SessionContext) -> int:
    if args.command == "logout":
        context.clear_tokens()
        print("Signed out.")
        return 0
    if args.command == "theme":
        if args.mode == "toggle":
            context.toggle_theme()
        elif args.mode:
            context.set_theme(args.mode)
        print(context.theme)
        return 0

    async with CrmClient(config, context=context) as client:
        return await _COMMANDS[args.command](client, args)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    config = CrmConfig.from_env(**overrides)
    _logger.debug("Using %s, state file %s", config.base_url, config.state_file)
    context = SessionContext(durable=FileStorage(config.state_file))
    return asyncio.run(run(args, config, context))


if __name__ == "__main__":
    sys.exit(main())
