"""Orchestrator CLI: dispatches to the workspace commands.

Sub-commands:
  validate  Check the configuration without calling the API
  plan      Show the changes the configuration requires
  apply     Create, update or delete objects to match the configuration
  destroy   Delete every object recorded in the state file
  import    Bring an existing Dashboard object under management
  show      Print the state file
  schema    Describe resource and data-source schemas
  sweep     Remove objects left behind by acceptance tests

Examples:
  MERAKI_DASHBOARD_API_KEY=<KEY> merakiprov plan -c main.yaml

  merakiprov import -c main.yaml meraki_network.lab 123456,L_987654

  merakiprov schema meraki_devices_switch_port
"""

from __future__ import annotations

import os
import sys

from tabulate import tabulate

from merakiprov import __version__, configure_logging
from merakiprov import glogger

COMMANDS = {
    "validate": ("merakiprov.cli", "Check the configuration without calling the API"),
    "plan": ("merakiprov.cli", "Show the changes the configuration requires"),
    "apply": ("merakiprov.cli", "Apply the configuration"),
    "destroy": ("merakiprov.cli", "Delete every object in the state file"),
    "import": ("merakiprov.cli", "Import an existing Dashboard object"),
    "show": ("merakiprov.cli", "Print the state file"),
    "schema": ("merakiprov.cli", "Describe resource and data-source schemas"),
    "sweep": ("merakiprov.cli", "Remove leftover acceptance-test objects"),
}


def _print_usage() -> None:
    print("usage: merakiprov <command> [options]\n")
    print("Available commands:")
    for cmd, (_, desc) in COMMANDS.items():
        print(f"  {cmd:14s}  {desc}")
    print("\nRun 'merakiprov <command> --help' for command-specific options.")


def _print_startup_banner() -> None:
    startup_rows = [
        ["version", __version__],
        ["api", os.environ.get("MERAKI_BASE_URL", "https://api.meraki.com") + "/api/v1"],
        ["api key", "set" if os.environ.get("MERAKI_DASHBOARD_API_KEY") else "not set"],
    ]

    for var in ("GITHUB_REF", "GITHUB_SHA", "BUILDTIME"):
        val = os.environ.get(var)
        if val and not val.endswith("_is_undefined"):
            startup_rows.append([var, val])

    table_str = tabulate(startup_rows, tablefmt="mixed_grid")
    lines = table_str.split("\n")
    table_width = len(lines[0])
    title = "merakiprov starting up"
    title_border = "┍" + "━" * (table_width - 2) + "┑"
    title_row = "│ " + title.center(table_width - 4) + " │"
    separator = lines[0].replace("┍", "┝").replace("┑", "┥").replace("┯", "┿")

    glogger.opt(raw=True).info(
        "\n{}\n", title_border + "\n" + title_row + "\n" + separator + "\n" + "\n".join(lines[1:])
    )


def main() -> None:
    """Main entry point: dispatch to the command's CLI module."""
    configure_logging()
    _print_startup_banner()

    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help"):
        _print_usage()
        sys.exit(0 if len(sys.argv) >= 2 else 1)

    command = sys.argv[1]
    if command not in COMMANDS:
        print(f"merakiprov: unknown command '{command}'\n", file=sys.stderr)
        _print_usage()
        sys.exit(1)

    module_path, _ = COMMANDS[command]

    # The command module parses its own sub-command, so it gets argv including it
    from importlib import import_module

    module = import_module(module_path)
    module.main(sys.argv[1:])


if __name__ == "__main__":
    main()
