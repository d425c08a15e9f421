"""Command line interface for tabgroups."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from tabgroups.binding import BindingScriptGenerator, render_overview
from tabgroups.colors import ColorAllocator
from tabgroups.config import ConfigError, ConfigManager, TabGroupsConfig
from tabgroups.groups import GroupError, GroupStore, GroupWarning
from tabgroups.logging_config import configure_logging
from tabgroups.patching import PatchError, PatchResult, ResourcePatcher
from tabgroups.state import SnapshotRepository, StateError
from tabgroups.sync import HostResourceWatcher, NoticeLevel, SyncController

LOGGER = logging.getLogger(__name__)

console = Console()

MESSAGES: dict[str, str] = {
    "group.created": "Group {0} created with color {1}.",
    "group.removed": "Group {0} removed.",
    "file.added": "Added {0} to group {1}.",
    "file.moved": "Moved {0} from group {1} to group {2}.",
    "file.removed": "Removed {0} from group {1}.",
    "file.closed": "Closed {0}; removed from group {1}.",
    "file.closed_ungrouped": "Closed {0}; it was not grouped.",
    "patch.applied": "Patched {0}.",
    "patch.backup_created": "Saved pristine backup to {0}.",
    "patch.restored": "Restored {0} from backup.",
    "patch.reload_needed": "Reload the host window to see the change.",
    "patch.failed": "Unable to update the host UI: {0}",
    "host.unconfigured": "No host install directory configured; set host.install_dir.",
}

_LEVEL_STYLES: dict[str, str] = {"info": "green", "warning": "yellow", "error": "red"}


def _message(key: str, *params: object) -> str:
    template = MESSAGES.get(key)
    if template is None:
        return " ".join([key, *(str(param) for param in params)])
    return template.format(*params)


class _ConsoleNotifier:
    """Render catalog messages on the console, honoring quiet mode."""

    def __init__(self, *, quiet: bool) -> None:
        self._quiet = quiet

    def __call__(self, level: NoticeLevel, key: str, *params: object) -> None:
        if self._quiet and level != "error":
            return
        style = _LEVEL_STYLES.get(level, "white")
        console.print(Text(_message(key, *params), style=style))


@dataclass(slots=True)
class _Runtime:
    """Objects wired together for a single command invocation."""

    config: TabGroupsConfig
    store: GroupStore
    patcher: Optional[ResourcePatcher]
    controller: SyncController
    notify: _ConsoleNotifier


def _reload_signal(command: Optional[list[str]]) -> Optional[Callable[[], None]]:
    """Return a fire-and-forget reload signal running ``command``, if configured."""
    if not command:
        return None

    def _reload() -> None:
        try:
            subprocess.Popen(command)
        except OSError as exc:
            LOGGER.warning("Host reload command failed: %s", exc)

    return _reload


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output.
        click.ClickException: For non-JSON flows.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)
    raise click.ClickException(message) from original


def _load_runtime(
    *,
    quiet: bool = False,
    json_output: bool = False,
    open_paths: Optional[list[str]] = None,
) -> _Runtime:
    """Load configuration and wire the store, patcher, and controller.

    Args:
        quiet: Suppress non-error notices.
        json_output: Report setup errors as JSON.
        open_paths: Paths open in the host; when given, only these files are bound.

    Returns:
        _Runtime: Wired objects for the command.
    """
    try:
        config = ConfigManager().load()
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    configure_logging(config.logging)

    repository = SnapshotRepository(Path(config.state.path))
    try:
        store = GroupStore.load(
            repository, allocator=ColorAllocator(max_luminance=config.colors.max_luminance)
        )
    except StateError as exc:
        _handle_cli_error(str(exc), code="state_error", json_output=json_output, original=exc)

    patcher: Optional[ResourcePatcher] = None
    if config.host.install_dir:
        patcher = ResourcePatcher(
            Path(config.host.install_dir),
            candidates=config.host.resource_candidates,
            backup_name=config.host.backup_name,
            reload=_reload_signal(config.host.reload_command),
        )

    notify = _ConsoleNotifier(quiet=quiet or config.cli.quiet_default or json_output)
    controller = SyncController(
        store,
        BindingScriptGenerator(home_alias=config.patch.home_alias),
        patcher,
        notifier=notify,
        open_paths=(lambda: open_paths) if open_paths is not None else None,
        reload_on_change=config.patch.reload_on_change,
    )
    return _Runtime(
        config=config, store=store, patcher=patcher, controller=controller, notify=notify
    )


def _require_patcher(runtime: _Runtime, *, json_output: bool = False) -> ResourcePatcher:
    if runtime.patcher is None:
        _handle_cli_error(
            _message("host.unconfigured"), code="host_unconfigured", json_output=json_output
        )
    return runtime.patcher


def _report_patch(runtime: _Runtime, result: PatchResult, key: str) -> None:
    runtime.notify("info", key, result.resource)
    if result.backup_created:
        runtime.notify("info", "patch.backup_created", result.backup)
    if not result.reload_requested:
        runtime.notify("info", "patch.reload_needed")


quiet_option = click.option("--quiet", is_flag=True, help="Suppress non-error output.")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="tabgroups")
def cli() -> None:
    """Tabgroups organizes open editor tabs into named, colored groups."""


# ---------------------------------------------------------------------- #
# Groups                                                                 #
# ---------------------------------------------------------------------- #


@cli.group()
def group() -> None:
    """Create, delete, and list groups."""


@group.command("create")
@click.argument("name")
@quiet_option
def group_create(name: str, quiet: bool) -> None:
    """Create an empty group NAME with a new color."""
    runtime = _load_runtime(quiet=quiet)
    try:
        created = runtime.controller.create_group(name)
    except (GroupError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    runtime.notify("info", "group.created", created.name, created.color)


@group.command("delete")
@click.argument("name", required=False)
@click.option("--path", "path", type=str, help="Delete the group containing PATH instead.")
@quiet_option
def group_delete(name: Optional[str], path: Optional[str], quiet: bool) -> None:
    """Delete group NAME, or the group holding --path."""
    if bool(name) == bool(path):
        raise click.UsageError("Provide either NAME or --path.")
    runtime = _load_runtime(quiet=quiet)
    if path:
        holder = runtime.store.find_group_for_path(str(Path(path).expanduser().resolve()))
        if holder is None:
            raise click.ClickException(f"No group contains {path}.")
        name = holder.name
    try:
        removed = runtime.controller.remove_group(name)
    except GroupError as exc:
        raise click.ClickException(str(exc)) from exc
    runtime.notify("info", "group.removed", removed.name)


@group.command("list")
@click.option("--json", "json_output", is_flag=True, help="Emit groups as JSON.")
def group_list(json_output: bool) -> None:
    """Show current groups and their files."""
    runtime = _load_runtime(json_output=json_output)
    if json_output:
        console.print_json(data=runtime.store.snapshot().to_payload())
        return

    if not len(runtime.store):
        console.print("[yellow]No groups yet.[/yellow]")
        return

    table = Table(title="Tab groups")
    table.add_column("Group", style="bold")
    table.add_column("Color")
    table.add_column("Files")
    for entry in runtime.store.groups():
        files = "\n".join(f"{ref.display_name}  [dim]{ref.path}[/dim]" for ref in entry.files)
        table.add_row(
            entry.name,
            Text(f" {entry.color} ", style=f"#f0f0f0 on {entry.color}"),
            files or "[dim](empty)[/dim]",
        )
    console.print(table)


# ---------------------------------------------------------------------- #
# Files                                                                  #
# ---------------------------------------------------------------------- #


@cli.group("file")
def file_group() -> None:
    """Add files to groups and remove them."""


@file_group.command("add")
@click.argument("group_name")
@click.argument("path")
@click.option("--name", "display_name", type=str, help="Label to show; defaults to the base name.")
@click.option("--create", is_flag=True, help="Create GROUP_NAME first if it does not exist.")
@quiet_option
def file_add(
    group_name: str, path: str, display_name: Optional[str], create: bool, quiet: bool
) -> None:
    """Add PATH to GROUP_NAME, moving it out of any other group."""
    runtime = _load_runtime(quiet=quiet)
    resolved = str(Path(path).expanduser().resolve())
    label = display_name or Path(resolved).name
    try:
        if create and group_name not in runtime.store:
            created = runtime.controller.create_group(group_name)
            runtime.notify("info", "group.created", created.name, created.color)
        previous = runtime.controller.add_file(group_name, label, resolved)
    except GroupWarning as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        return
    except (GroupError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    if previous is not None:
        runtime.notify("info", "file.moved", label, previous, group_name)
    else:
        runtime.notify("info", "file.added", label, group_name)


@file_group.command("remove")
@click.argument("group_name")
@click.argument("display_name")
@quiet_option
def file_remove(group_name: str, display_name: str, quiet: bool) -> None:
    """Remove the file labelled DISPLAY_NAME from GROUP_NAME."""
    runtime = _load_runtime(quiet=quiet)
    try:
        runtime.controller.remove_file(group_name, display_name)
    except GroupWarning as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        return
    except GroupError as exc:
        raise click.ClickException(str(exc)) from exc
    runtime.notify("info", "file.removed", display_name, group_name)


@file_group.command("close")
@click.argument("path")
@quiet_option
def file_close(path: str, quiet: bool) -> None:
    """Report that PATH was closed in the host."""
    runtime = _load_runtime(quiet=quiet)
    resolved = str(Path(path).expanduser().resolve())
    group_name = runtime.controller.handle_document_closed(resolved)
    if group_name is None:
        runtime.notify("info", "file.closed_ungrouped", resolved)
    else:
        runtime.notify("info", "file.closed", resolved, group_name)


# ---------------------------------------------------------------------- #
# Patch                                                                  #
# ---------------------------------------------------------------------- #


@cli.group()
def patch() -> None:
    """Apply, restore, and inspect the host UI patch."""


@patch.command("apply")
@click.option("--reload/--no-reload", default=False, help="Ask the host to reload afterwards.")
@click.option(
    "--open",
    "open_paths",
    multiple=True,
    help="Path open in the host (repeatable); restricts bindings to these files.",
)
@quiet_option
def patch_apply(reload: bool, open_paths: tuple[str, ...], quiet: bool) -> None:
    """Render the current groups into the host UI document."""
    resolved = [str(Path(path).expanduser().resolve()) for path in open_paths]
    runtime = _load_runtime(quiet=quiet, open_paths=resolved or None)
    _require_patcher(runtime)
    result = runtime.controller.repaint(reload=reload)
    if result is None:
        raise SystemExit(1)
    _report_patch(runtime, result, "patch.applied")


@patch.command("restore")
@quiet_option
def patch_restore(quiet: bool) -> None:
    """Restore the host UI document from the pristine backup."""
    runtime = _load_runtime(quiet=quiet)
    _require_patcher(runtime)
    try:
        result = runtime.controller.restore()
    except PatchError as exc:
        raise click.ClickException(str(exc)) from exc
    _report_patch(runtime, result, "patch.restored")


@patch.command("status")
@click.option("--json", "json_output", is_flag=True, help="Emit status as JSON.")
def patch_status(json_output: bool) -> None:
    """Show where the host document is and whether it is patched."""
    runtime = _load_runtime(json_output=json_output)
    status = _require_patcher(runtime, json_output=json_output).status()
    payload = {
        "resource": str(status.resource) if status.resource else None,
        "backup_exists": status.backup_exists,
        "patched": status.patched,
    }
    if json_output:
        console.print_json(data=payload)
        return
    if status.resource is None:
        console.print("[red]Host UI resource not found.[/red]")
        return
    console.print(f"Resource: {status.resource}")
    console.print(f"Backup:   {'present' if status.backup_exists else 'missing'}")
    console.print(f"Patched:  {'yes' if status.patched else 'no'}")


# ---------------------------------------------------------------------- #
# Overview / watch                                                       #
# ---------------------------------------------------------------------- #


@cli.command()
@click.option("--open", "open_paths", multiple=True, help="Path open in the host (repeatable).")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the page to a file instead of stdout.",
)
def overview(open_paths: tuple[str, ...], output: Optional[Path]) -> None:
    """Render an HTML overview of groups and ungrouped open files."""
    runtime = _load_runtime()
    resolved = [str(Path(path).expanduser().resolve()) for path in open_paths]
    page = render_overview(runtime.store, resolved)
    if output is None:
        click.echo(page, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(page, encoding="utf-8")
    console.print(f"[green]Wrote overview to {output}.[/green]")


@cli.command()
@click.option("--once", is_flag=True, help="Check the host document once and exit.")
@click.option("--debounce", type=float, default=None, help="Override watch.debounce_seconds.")
@quiet_option
def watch(once: bool, debounce: Optional[float], quiet: bool) -> None:
    """Keep the host UI patched across host updates."""
    runtime = _load_runtime(quiet=quiet)
    patcher = _require_patcher(runtime)
    if debounce is None:
        debounce = runtime.config.watch.debounce_seconds
    watcher = HostResourceWatcher(runtime.controller, patcher, debounce_seconds=debounce)

    if once:
        result = watcher.check_once()
        if result is not None:
            _report_patch(runtime, result, "patch.applied")
        else:
            console.print("[green]Host UI patch is up to date.[/green]")
        return

    runtime.controller.activate()
    try:
        watcher.watch(lambda result: _report_patch(runtime, result, "patch.applied"))
    except KeyboardInterrupt:
        console.print("[yellow]Watch stopped by user request.[/yellow]")
    except PatchError as exc:
        raise click.ClickException(str(exc)) from exc


# ---------------------------------------------------------------------- #
# Config                                                                 #
# ---------------------------------------------------------------------- #


@cli.group()
def config() -> None:
    """Inspect and change tabgroups settings."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Show the file and defaults only.")
@click.option("--json", "json_output", is_flag=True, help="Emit the settings as JSON.")
def config_view(no_env: bool, json_output: bool) -> None:
    """Show the effective settings."""
    try:
        settings = ConfigManager().load(include_env=not no_env)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    if json_output:
        console.print_json(data=settings.model_dump(mode="json"))
        return
    text = yaml.safe_dump(settings.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(text, "yaml"))


@config.command("path")
def config_path() -> None:
    """Print the location of the configuration file."""
    click.echo(str(ConfigManager().path))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Store VALUE (YAML syntax) under the dotted KEY, e.g. `host.install_dir`."""
    try:
        changed = ConfigManager().set_value(key, value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    if changed:
        console.print(f"[green]{key} = {value}[/green]")
    else:
        console.print(f"[yellow]{key} already set to {value}.[/yellow]")


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file in $EDITOR and validate the result."""
    manager = ConfigManager()
    edited = click.edit(manager.read_text(), extension=".yaml")
    if edited is None:
        console.print("[yellow]Edit cancelled.[/yellow]")
        return
    try:
        changed = manager.replace(edited)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    if changed:
        console.print("[green]Configuration saved.[/green]")
    else:
        console.print("[yellow]No changes.[/yellow]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
