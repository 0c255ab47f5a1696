"""Command-line interface for Blendfold.

Reads a controller document (JSON or YAML), reports or applies layer
flattening, and rewrites master tree timing.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from blendfold.core.assembly import (
    AssemblyError,
    MasterTreeLocator,
    apply_optimization,
    attachable_branches,
    collect_optimization_info,
)
from blendfold.core.classify.models import BranchDescriptor
from blendfold.core.config.loader import configure_logging, load_app_config
from blendfold.core.config.models import AppConfig
from blendfold.core.io import load_controller, save_controller
from blendfold.core.speed import SpeedConvergenceError, TreeSpeedSynchronizer

console = Console()
logger = logging.getLogger(__name__)

_SEVERITY_STYLES = {"error": "red", "warning": "yellow", "info": "dim"}


def _diagnostic_lines(branch: BranchDescriptor) -> str:
    return "\n".join(
        f"[{_SEVERITY_STYLES[d.severity.value]}]{d.severity.value}: {escape(d.message)}"
        f"[/{_SEVERITY_STYLES[d.severity.value]}]"
        for d in branch.diagnostics
    )


def analyze(args: argparse.Namespace, config: AppConfig) -> int:
    """Print the flattenable layers of a controller."""
    controller = load_controller(Path(args.controller))
    info = collect_optimization_info(controller, config)

    if not info.branches:
        console.print(f"[yellow]No layers of {controller.name!r} can be flattened[/yellow]")
        return 0

    table = Table(title=f"Flattenable layers: {controller.name}", show_header=True)
    table.add_column("Layer", style="cyan")
    table.add_column("Pattern", style="magenta")
    table.add_column("Parameter", style="green")
    table.add_column("Entries", justify="right")
    table.add_column("Active")
    table.add_column("Diagnostics")

    for branch in info.branches:
        table.add_row(
            branch.name,
            branch.pattern.value,
            branch.parameter or "-",
            str(len(branch.entries)),
            "yes" if branch.is_active else "[red]no[/red]",
            _diagnostic_lines(branch),
        )

    console.print(table)
    master = "found" if info.master_tree is not None else "will be created"
    console.print(f"\n[bold]Master tree:[/bold] {master}")
    console.print(f"[bold]Active:[/bold] {len(info.active_branches)}/{len(info.branches)}")
    return 0


def apply(args: argparse.Namespace, config: AppConfig) -> int:
    """Flatten the active layers of a controller and write the result."""
    controller = load_controller(Path(args.controller))
    info = collect_optimization_info(controller, config)
    if args.include_inactive:
        info.set_all_active(True)
    if args.keep_layers:
        info.set_all_replacing(False)

    attached = attachable_branches(info.active_branches)
    if not attached:
        console.print("[yellow]No active branches with entries; nothing to apply[/yellow]")
        return 0

    optimized = apply_optimization(info, config)
    out = Path(args.out)
    save_controller(optimized, out)

    console.print(
        f"[green]✅ Flattened {len(attached)} layer(s):[/green] "
        f"{len(controller.layers)} → {len(optimized.layers)} layers"
    )
    console.print(f"[green]📁 Saved to:[/green] {out}")
    return 0


def _rewrite_master(args: argparse.Namespace, config: AppConfig, reset: bool) -> int:
    controller = load_controller(Path(args.controller))
    locator = MasterTreeLocator(config.optimizer)
    master = locator.find(controller)
    if master is None:
        raise AssemblyError(f"Controller {controller.name!r} has no master tree")

    synchronizer = TreeSpeedSynchronizer(config.speed)
    if reset:
        tree = synchronizer.reset(master)
    else:
        if not master.is_direct:
            raise AssemblyError(f"Master tree {master.name!r} is not a direct blend tree")
        tree, total = synchronizer.fix(master)
        logger.debug(f"Synchronised master tree, total length {total:.3f}")

    out = Path(args.out or args.controller)
    save_controller(locator.replace(controller, tree), out)
    action = "Reset" if reset else "Fixed"
    console.print(f"[green]✅ {action} speed of {master.name!r}[/green] → {out}")
    return 0


def fix_speed(args: argparse.Namespace, config: AppConfig) -> int:
    """Synchronise the master tree's sibling speeds."""
    return _rewrite_master(args, config, reset=False)


def reset_speed(args: argparse.Namespace, config: AppConfig) -> int:
    """Set every time scale in the master tree back to 1."""
    return _rewrite_master(args, config, reset=True)


_COMMANDS = {
    "analyze": analyze,
    "apply": apply,
    "fix-speed": fix_speed,
    "reset-speed": reset_speed,
}


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="blendfold",
        description="Blendfold - flatten animator controller layers into one blend tree",
    )
    p.add_argument(
        "--app-config",
        default=None,
        help="Path to app config JSON/YAML (default: blendfold.yaml if present)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    analyze_cmd = sub.add_parser("analyze", help="List flattenable layers and diagnostics")
    analyze_cmd.add_argument("controller", help="Path to controller JSON/YAML")

    apply_cmd = sub.add_parser("apply", help="Flatten layers into the master tree")
    apply_cmd.add_argument("controller", help="Path to controller JSON/YAML")
    apply_cmd.add_argument("--out", required=True, help="Path of the optimised controller")
    apply_cmd.add_argument(
        "--keep-layers", action="store_true", help="Keep source layers instead of replacing them"
    )
    apply_cmd.add_argument(
        "--include-inactive",
        action="store_true",
        help="Also flatten branches deactivated by diagnostics",
    )

    for name, help_text in (
        ("fix-speed", "Synchronise master tree sibling speeds"),
        ("reset-speed", "Reset master tree time scales to 1"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("controller", help="Path to controller JSON/YAML")
        cmd.add_argument("--out", default=None, help="Output path (default: overwrite input)")

    return p


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    try:
        config = load_app_config(args.app_config)
        configure_logging(config)
        return _COMMANDS[args.cmd](args, config)
    except (AssemblyError, SpeedConvergenceError, ValueError, OSError) as e:
        console.print(f"[red]ERROR: {escape(str(e))}[/red]")
        return 1
