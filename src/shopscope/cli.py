"""Typer CLI entry point for ShopScope."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .api import AdminApiClient, ResourceGateway
from .config import Settings, get_settings
from .screens import SCREENS, ScreenConfig, get_screen
from .view.bulk import BulkOperation, BulkOperationRunner, BulkResult
from .view.controller import ListController, NoticeLevel, ViewState
from .view.filters import FilterKind
from .view.sorting import SortDirection, TypeHint

app = typer.Typer(
    name="shopscope",
    help="ShopScope: back-office list views for products, orders and users",
    rich_markup_mode="rich",
)

console = Console()

_NOTICE_STYLES = {
    NoticeLevel.INFO: "cyan",
    NoticeLevel.SUCCESS: "green",
    NoticeLevel.WARNING: "yellow",
    NoticeLevel.ERROR: "red",
}


def _setup_logging(verbose: bool = False) -> None:
    settings = get_settings()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(
                settings.logs_dir / "shopscope.log",
                encoding="utf-8",
            ),
        ],
    )


def _get_screen(name: str) -> ScreenConfig:
    try:
        return get_screen(name)
    except KeyError as exc:
        raise typer.BadParameter(exc.args[0], param_hint="SCREEN") from None


def _build_gateway(screen: ScreenConfig, settings: Settings) -> ResourceGateway:
    client = AdminApiClient(
        settings.api.base_url,
        token=settings.api.token,
        timeout=settings.api.timeout,
    )
    return ResourceGateway(client, screen.resource, status_endpoint=screen.status_endpoint)


def _build_controller(screen: ScreenConfig, page_size: int | None = None) -> ListController:
    settings = get_settings()
    size = page_size or settings.default_page_size
    if size not in screen.page_size_options:
        size = screen.default_page_size
    return ListController(
        screen,
        _build_gateway(screen, settings),
        debounce_ms=settings.debounce_ms,
        fetch_limit=settings.fetch_limit,
        page_size=size,
    )


def _parse_filter(screen: ScreenConfig, raw: str) -> tuple[str, Any]:
    """``key=value`` for equality filters, ``key=low..high`` for ranges."""
    key, sep, value = raw.partition("=")
    if not sep:
        raise typer.BadParameter(f"Expected key=value, got {raw!r}", param_hint="--filter")
    try:
        definition = screen.filter_definition(key.strip())
    except KeyError as exc:
        raise typer.BadParameter(exc.args[0], param_hint="--filter") from None

    value = value.strip()
    if definition.kind is FilterKind.EQUALITY:
        return definition.key, value
    low, _, high = value.partition("..")
    return definition.key, (low.strip() or None, high.strip() or None)


def _apply_view_options(
    controller: ListController,
    search: Optional[str],
    filters: Optional[List[str]],
    sort: Optional[str],
) -> None:
    screen = controller.screen
    if search:
        controller.submit_query(search)
    for raw in filters or []:
        key, value = _parse_filter(screen, raw)
        try:
            controller.set_filter(key, value)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--filter") from None
    if sort:
        column_key, _, direction = sort.partition(":")
        try:
            controller.set_sort(column_key, SortDirection(direction or "desc"))
        except (KeyError, ValueError) as exc:
            raise typer.BadParameter(str(exc), param_hint="--sort") from None


def _print_notice(state: ViewState) -> None:
    if state.notice is not None:
        style = _NOTICE_STYLES[state.notice.level]
        console.print(f"[{style}]{state.notice.message}[/{style}]")


def _print_state(screen: ScreenConfig, state: ViewState, currency: str) -> None:
    table = Table(title=f"{screen.title} (page {state.current_page} of {state.total_pages})")
    table.add_column("", style="dim", width=3)
    table.add_column("ID", style="dim", max_width=26)
    for col in screen.columns:
        justify = "right" if col.type_hint is TypeHint.NUMERIC else "left"
        table.add_column(col.title, style="cyan" if col.key == "name" else None, justify=justify, max_width=40)

    for row in state.rows:
        table.add_row(
            "[x]" if row.selected else "[ ]",
            row.id,
            *(col.display(row.record, currency) for col in screen.columns),
        )

    console.print(table)
    if state.total_items:
        console.print(f"Showing {state.start} to {state.end} of {state.total_items} results")
    else:
        console.print("[dim]No records match the current search and filters.[/dim]")
    if state.selected_count:
        console.print(f"{state.selected_count} selected")

    stats = "  ".join(
        f"{screen.stat_labels.get(key, key)}: [green]{value:,}[/green]"
        for key, value in state.stats.items()
    )
    console.print(stats)


def _print_bulk_result(result: BulkResult) -> None:
    table = Table(title=f"Bulk {result.operation.label}")
    table.add_column("ID", style="cyan")
    table.add_column("Result")
    table.add_column("Error", style="red")
    for item in result.items:
        table.add_row(
            item.id,
            "[green]ok[/green]" if item.success else "[red]failed[/red]",
            item.error or "",
        )
    console.print(table)
    colour = "green" if result.all_succeeded else "red"
    console.print(f"[{colour}]{result.summary()}[/{colour}]")


def _run_bulk(screen_name: str, ids: List[str], operation: BulkOperation) -> None:
    screen = _get_screen(screen_name)
    gateway = _build_gateway(screen, get_settings())
    result = asyncio.run(BulkOperationRunner(gateway).run(ids, operation))
    _print_bulk_result(result)
    if not result.all_succeeded:
        raise typer.Exit(1)


@app.command(name="list")
def list_records(
    screen: str = typer.Argument(..., help=f"One of: {', '.join(SCREENS)}"),
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Free-text search"),
    filters: Optional[List[str]] = typer.Option(
        None, "--filter", "-f", help="key=value, or key=low..high for ranges (repeatable)",
    ),
    sort: Optional[str] = typer.Option(None, "--sort", "-s", help="column[:asc|desc]"),
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
    page_size: Optional[int] = typer.Option(None, "--page-size", "-n", help="Rows per page (10/25/50/100)"),
    select: Optional[List[str]] = typer.Option(None, "--select", help="Mark these ids as selected"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Fetch a screen and print one page of it."""
    _setup_logging(verbose)
    config = _get_screen(screen)
    controller = _build_controller(config)
    if page_size is not None:
        try:
            controller.set_page_size(page_size)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--page-size") from None

    asyncio.run(controller.load())
    _apply_view_options(controller, search, filters, sort)
    controller.go_to_page(page)
    for row_id in select or []:
        controller.toggle_row(row_id)

    state = controller.state()
    _print_notice(state)
    _print_state(config, state, get_settings().currency)


@app.command(name="bulk-delete")
def bulk_delete(
    screen: str = typer.Argument(..., help=f"One of: {', '.join(SCREENS)}"),
    ids: List[str] = typer.Argument(..., help="Record ids"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Delete every given record."""
    _setup_logging(verbose)
    if not yes:
        typer.confirm(f"Delete {len(ids)} {screen}? This cannot be undone", abort=True)
    _run_bulk(screen, ids, BulkOperation.delete())


@app.command(name="bulk-status")
def bulk_status(
    screen: str = typer.Argument(..., help=f"One of: {', '.join(SCREENS)}"),
    status: str = typer.Argument(..., help="New status"),
    ids: List[str] = typer.Argument(..., help="Record ids"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Set the status of every given record."""
    _setup_logging(verbose)
    config = _get_screen(screen)
    if status not in config.status_options:
        console.print(
            f"[red]Invalid status: {status}. Use one of {', '.join(config.status_options)}.[/red]"
        )
        raise typer.Exit(1)
    _run_bulk(screen, ids, BulkOperation.set_status(status))


def _run_record(controller: ListController, coro) -> None:
    response = asyncio.run(coro)
    _print_notice(controller.state())
    if not response.success:
        raise typer.Exit(1)


@app.command()
def delete(
    screen: str = typer.Argument(..., help=f"One of: {', '.join(SCREENS)}"),
    record_id: str = typer.Argument(..., help="Record id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Delete a single record."""
    _setup_logging(verbose)
    config = _get_screen(screen)
    if not yes:
        typer.confirm(f"Delete {config.item_name} {record_id}? This cannot be undone", abort=True)
    controller = _build_controller(config)
    _run_record(controller, controller.delete_record(record_id, refresh=False))


@app.command(name="set-status")
def set_status(
    screen: str = typer.Argument(..., help=f"One of: {', '.join(SCREENS)}"),
    record_id: str = typer.Argument(..., help="Record id"),
    status: str = typer.Argument(..., help="New status"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Set the status of a single record (e.g. mark an order shipped)."""
    _setup_logging(verbose)
    config = _get_screen(screen)
    controller = _build_controller(config)
    try:
        _run_record(controller, controller.set_record_status(record_id, status, refresh=False))
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None


@app.command()
def export(
    screen: str = typer.Argument(..., help=f"One of: {', '.join(SCREENS)}"),
    fmt: str = typer.Option("csv", "--format", "-F", help="csv, json or xlsx"),
    fields: Optional[List[str]] = typer.Option(None, "--field", help="Column key or field path (repeatable)"),
    only: Optional[List[str]] = typer.Option(None, "--only", help="Export only these ids"),
    search: Optional[str] = typer.Option(None, "--search", "-q"),
    filters: Optional[List[str]] = typer.Option(None, "--filter", "-f"),
    sort: Optional[str] = typer.Option(None, "--sort", "-s"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file name"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Export the searched, filtered and sorted rows of a screen."""
    _setup_logging(verbose)
    config = _get_screen(screen)
    controller = _build_controller(config)

    from .outputs.table_export import ExportFormat, TableExporter
    try:
        export_format = ExportFormat(fmt.lower())
    except ValueError:
        raise typer.BadParameter(f"Unknown format {fmt!r}", param_hint="--format") from None

    asyncio.run(controller.load())
    _apply_view_options(controller, search, filters, sort)
    state = controller.state()
    _print_notice(state)
    if state.notice is not None and state.notice.level is NoticeLevel.ERROR:
        raise typer.Exit(1)

    if only:
        for row_id in only:
            controller.toggle_row(row_id)
        records = controller.selected_records()
    else:
        records = list(controller.visible_records())

    exporter = TableExporter(config, get_settings().exports_dir)
    path = exporter.export(records, export_format, fields=fields, filename=output)
    console.print(f"[green]Exported {len(records)} {config.name} to:[/green] {path}")


@app.command()
def gui():
    """Launch the desktop list views."""
    _setup_logging(False)
    from .gui.main_window import launch_gui
    raise typer.Exit(launch_gui())


if __name__ == "__main__":
    app()
