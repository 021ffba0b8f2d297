"""Workspace CLI: validate, plan, apply, destroy, import, show, schema, sweep.

Examples:
  merakiprov validate -c main.yaml
  merakiprov plan -c main.yaml -s merakiprov.tfstate.json
  merakiprov apply -c main.yaml --auto-approve
  merakiprov import -c main.yaml meraki_network.lab 123456,L_987654
  merakiprov schema meraki_networks_appliance_vlan
  merakiprov sweep --organization-id 123456
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any

from tabulate import tabulate

from merakiprov import configure_logging
from merakiprov.engine.config import Address
from merakiprov.engine.planner import Action, Plan
from merakiprov.engine.runner import DEFAULT_STATE_FILE, Workspace
from merakiprov.engine.state import StateFile
from merakiprov.exceptions import DiagnosticsError, ProviderError
from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.schema import Attribute, Schema
from merakiprov.framework.values import UNKNOWN
from merakiprov.provider import MerakiProvider
from merakiprov.registry import create_data_source, create_resource, list_data_sources, list_resources
from merakiprov.sweeper import DEFAULT_PREFIX, Sweeper

ACTION_VERBS = {
    Action.CREATE: "created",
    Action.UPDATE: "updated in-place",
    Action.REPLACE: "replaced",
    Action.DELETE: "destroyed",
    Action.READ: "read during apply",
    Action.NOOP: "left unchanged",
}

ACTION_SYMBOLS = {
    Action.CREATE: "+",
    Action.UPDATE: "~",
    Action.REPLACE: "-/+",
    Action.DELETE: "-",
    Action.READ: "<=",
    Action.NOOP: " ",
}


def _render(value: Any, attr: Attribute | None = None) -> str:
    if attr is not None and attr.sensitive and value is not None:
        return "(sensitive value)"
    if value is UNKNOWN:
        return "(known after apply)"
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, default=lambda v: "(known after apply)")
    if value is None:
        return "null"
    return json.dumps(value)


def print_diagnostics(diags: Diagnostics) -> None:
    for diagnostic in diags:
        print(f"\n{diagnostic}", file=sys.stderr)


def _schema_for(address: Address) -> Schema:
    if address.mode == "data":
        return create_data_source(address.type).schema()
    return create_resource(address.type).schema()


def print_plan(plan: Plan) -> None:
    pending = plan.pending()
    if not pending:
        print("No changes. Your infrastructure matches the configuration.")
        return

    for change in pending:
        schema = _schema_for(change.address)
        print(f"\n  {ACTION_SYMBOLS[change.action]} {change.address} will be {ACTION_VERBS[change.action]}")
        rows = []
        for name, attr in schema.attributes.items():
            before = (change.before or {}).get(name)
            after = (change.after or {}).get(name) if change.action != Action.DELETE else None
            if change.action != Action.CREATE and before == after:
                continue
            if change.action == Action.CREATE and after is None:
                continue
            marker = " # forces replacement" if name in change.replace_paths else ""
            rows.append([name, _render(before, attr), _render(after, attr) + marker])
        if rows:
            print(tabulate(rows, headers=["attribute", "before", "after"], tablefmt="simple"))

    counts = plan.summary()
    print(f"\nPlan: {counts['add']} to add, {counts['change']} to change, {counts['destroy']} to destroy.")


def print_state(state: StateFile, address: str | None = None) -> None:
    if not state.resources:
        print("The state file is empty. No resources are represented.")
        return
    for instance in state.resources:
        if address and str(instance.address) != address:
            continue
        schema = create_resource(instance.type).schema()
        rows = [
            [name, _render(instance.attributes.get(name), attr)]
            for name, attr in schema.attributes.items()
            if instance.attributes.get(name) is not None
        ]
        print(f"\n# {instance.address}")
        print(tabulate(rows, tablefmt="plain"))


def print_schema(type_name: str | None, data: bool) -> None:
    if type_name is None:
        rows = [[name, "resource"] for name in list_resources()]
        rows += [[name, "data source"] for name in list_data_sources()]
        print(tabulate(rows, headers=["type", "kind"], tablefmt="simple"))
        return
    schema = create_data_source(type_name).schema() if data else create_resource(type_name).schema()
    if schema.description:
        print(f"{type_name}: {schema.description}\n")
    rows = []
    for name, attr in schema.attributes.items():
        flags = [f for f in ("required", "optional", "computed", "sensitive") if getattr(attr, f)]
        notes = [v.description for v in attr.validators] + [m.description for m in attr.plan_modifiers]
        rows.append([name, attr.type_name, ", ".join(flags), " ".join([attr.description, *notes]).strip()])
    print(tabulate(rows, headers=["attribute", "type", "flags", "description"], tablefmt="simple", maxcolwidths=[None, None, None, 70]))


def _confirm(question: str) -> bool:
    print(f"\n{question}\n  Only 'yes' will be accepted to approve.\n")
    return input("  Enter a value: ").strip() == "yes"


def cmd_validate(workspace: Workspace, args: argparse.Namespace) -> None:
    diags = workspace.validate()
    print_diagnostics(diags)
    print("Success! The configuration is valid.")


def cmd_plan(workspace: Workspace, args: argparse.Namespace) -> None:
    plan, _ = workspace.plan(refresh=args.refresh)
    print_diagnostics(plan.diagnostics)
    print_plan(plan)
    if args.detailed_exitcode and plan.has_changes():
        sys.exit(2)


def cmd_apply(workspace: Workspace, args: argparse.Namespace) -> None:
    plan, state = workspace.plan()
    print_plan(plan)
    if not plan.pending():
        return
    if not args.auto_approve and not _confirm("Do you want to perform these actions?"):
        print("\nApply cancelled.")
        return
    plan, _ = workspace.apply(plan, state)
    print_diagnostics(plan.diagnostics)
    counts = plan.summary()
    print(f"\nApply complete! Resources: {counts['add']} added, {counts['change']} changed, {counts['destroy']} destroyed.")


def cmd_destroy(workspace: Workspace, args: argparse.Namespace) -> None:
    state = workspace.show()
    if not state.resources:
        print("No resources in state; nothing to destroy.")
        return
    for address in state.destroy_order():
        print(f"  - {address} will be destroyed")
    if not args.auto_approve and not _confirm("Do you really want to destroy all resources?"):
        print("\nDestroy cancelled.")
        return
    workspace.destroy()
    print(f"\nDestroy complete! Resources: {len(state.resources)} destroyed.")


def cmd_import(workspace: Workspace, args: argparse.Namespace) -> None:
    instance = workspace.import_resource(args.address, args.id)
    print(f"{instance.address}: Import prepared!")
    print("\nImport successful! The resource is now managed in the state file.")


def cmd_show(workspace: Workspace, args: argparse.Namespace) -> None:
    print_state(workspace.show(), args.address)


def cmd_sweep(args: argparse.Namespace) -> None:
    provider = MerakiProvider()
    diags = Diagnostics()
    config: dict[str, Any] = {}
    if args.api_key:
        config["api_key"] = args.api_key
    client = provider.configure(config, diags)
    if client is None:
        raise DiagnosticsError(diags)
    organization_ids = args.organization_id or []
    if not organization_ids and os.getenv("TF_ACC_MERAKI_ORGANIZATION_ID"):
        organization_ids = [os.environ["TF_ACC_MERAKI_ORGANIZATION_ID"]]
    try:
        report = Sweeper(client, prefix=args.prefix).run(organization_ids, include_organizations=not args.skip_organizations)
    finally:
        provider.close()
    for target in report.deleted:
        print(f"deleted  {target}")
    for target in report.failed:
        print(f"FAILED   {target}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the workspace commands."""
    parser = argparse.ArgumentParser(
        prog="merakiprov",
        description="Declarative management of Cisco Meraki Dashboard configuration",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def workspace_parser(name: str, help_text: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("-c", "--config", default="main.yaml", help="Configuration file (default: main.yaml)")
        sub.add_argument(
            "-s", "--state", default=DEFAULT_STATE_FILE, help=f"State file (default: {DEFAULT_STATE_FILE})"
        )
        return sub

    workspace_parser("validate", help_text="Check whether the configuration is valid")

    plan_parser = workspace_parser("plan", help_text="Show changes required by the current configuration")
    plan_parser.add_argument("--no-refresh", dest="refresh", action="store_false", help="Skip refreshing state")
    plan_parser.add_argument(
        "--detailed-exitcode", action="store_true", help="Exit with 2 when the plan contains changes"
    )

    apply_parser = workspace_parser("apply", help_text="Create or update infrastructure")
    apply_parser.add_argument("--auto-approve", action="store_true", help="Skip interactive approval")

    destroy_parser = workspace_parser("destroy", help_text="Destroy previously-created infrastructure")
    destroy_parser.add_argument("--auto-approve", action="store_true", help="Skip interactive approval")

    import_parser = workspace_parser("import", help_text="Associate existing infrastructure with a resource")
    import_parser.add_argument("address", help="Resource address, e.g. meraki_network.lab")
    import_parser.add_argument("id", help="Import identifier, e.g. organization_id,network_id")

    show_parser = workspace_parser("show", help_text="Show the current state")
    show_parser.add_argument("address", nargs="?", help="Only show this resource address")

    schema_parser = subparsers.add_parser("schema", help="Describe resource and data-source schemas")
    schema_parser.add_argument("type_name", nargs="?", help="Resource or data-source type")
    schema_parser.add_argument("--data", action="store_true", help="Describe the data source of that name")

    sweep_parser = subparsers.add_parser("sweep", help="Remove leftover acceptance-test objects")
    sweep_parser.add_argument("--api-key", help="API key (default: MERAKI_DASHBOARD_API_KEY)")
    sweep_parser.add_argument(
        "--organization-id", action="append", help="Organization to sweep (repeatable, default: TF_ACC_MERAKI_ORGANIZATION_ID)"
    )
    sweep_parser.add_argument("--prefix", default=DEFAULT_PREFIX, help=f"Name prefix to delete (default: {DEFAULT_PREFIX})")
    sweep_parser.add_argument("--skip-organizations", action="store_true", help="Do not delete prefixed organizations")

    return parser


WORKSPACE_COMMANDS = {
    "validate": cmd_validate,
    "plan": cmd_plan,
    "apply": cmd_apply,
    "destroy": cmd_destroy,
    "import": cmd_import,
    "show": cmd_show,
}


def main(args: list[str] | None = None) -> None:
    """Main entry point for the workspace CLI."""
    parser = build_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        sys.exit(1)

    if parsed.verbose:
        os.environ["LOGURU_LEVEL"] = "DEBUG"
        configure_logging()

    try:
        if parsed.command == "schema":
            print_schema(parsed.type_name, parsed.data)
        elif parsed.command == "sweep":
            cmd_sweep(parsed)
        else:
            workspace = Workspace(parsed.config, parsed.state)
            try:
                WORKSPACE_COMMANDS[parsed.command](workspace, parsed)
            finally:
                workspace.close()
    except DiagnosticsError as e:
        print_diagnostics(e.diagnostics)
        sys.exit(1)
    except (ProviderError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
