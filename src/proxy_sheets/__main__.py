"""CLI entry point for proxy_sheets."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Tuple

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, MofNCompleteColumn, TimeElapsedColumn
from rich.panel import Panel
from rich.table import Table
from rich import box

from proxy_sheets.config import PRESETS, DecodeFailurePolicy, SheetLayout
from proxy_sheets.errors import ProxySheetError
from proxy_sheets.image_sources import iter_image_bytes
from proxy_sheets.layout import PlacedCard, SheetLayoutEngine, build_proxy_pdf
from proxy_sheets.pdf_generator import DEFAULT_TITLE, get_file_size_str

console = Console()


def parse_size(value: str) -> Tuple[float, float]:
    """Parse a `WIDTHxHEIGHT` size in millimeters."""
    try:
        width, height = (float(part) for part in value.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected WIDTHxHEIGHT in millimeters, e.g. 210x279, got {value!r}"
        ) from None
    return width, height


def add_layout_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="sleeve",
        help="Card size preset (default: sleeve, 61.5x86.9 mm; full is 63.5x88.9 mm).",
    )
    parser.add_argument(
        "--page-size",
        type=parse_size,
        default=None,
        help="Page size in millimeters as WIDTHxHEIGHT (default: 210x279).",
    )
    parser.add_argument(
        "--card-size",
        type=parse_size,
        default=None,
        help="Card size in millimeters as WIDTHxHEIGHT (overrides --preset).",
    )
    parser.add_argument(
        "--gutter",
        type=float,
        default=None,
        help="Gap between cards in millimeters (default: 1).",
    )
    parser.add_argument(
        "--dpi",
        type=float,
        default=None,
        help="Density used to measure every image (default: 300).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Proxy Sheets – Generate printable card PDFs with 3x3 layout"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every page and card placement.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Build command - read images and generate PDF
    build_cmd = subparsers.add_parser(
        "build",
        help="Lay out card images and generate printable PDF"
    )
    build_cmd.add_argument(
        "sources",
        nargs="+",
        type=Path,
        help="Card images (JPEG/PNG), folders or ZIP archives, in print order.",
    )
    build_cmd.add_argument(
        "--output",
        type=str,
        default="build/proxies.pdf",
        help="Path to output file (default: build/proxies.pdf).",
    )
    build_cmd.add_argument(
        "--copies",
        type=int,
        default=1,
        help="Print every image this many times (default: 1).",
    )
    build_cmd.add_argument(
        "--skip-undecodable",
        action="store_true",
        help="Leave a blank cell for images that cannot be decoded instead of failing.",
    )
    build_cmd.add_argument(
        "--cut-guides",
        action="store_true",
        help="Draw cut marks on the page edges.",
    )
    build_cmd.add_argument(
        "--title",
        type=str,
        default=DEFAULT_TITLE,
        help=f"PDF document title (default: {DEFAULT_TITLE!r}).",
    )
    add_layout_arguments(build_cmd)

    # Plan command - show the computed grid without reading images
    plan_cmd = subparsers.add_parser(
        "plan",
        help="Show margins and card positions for a layout"
    )
    plan_cmd.add_argument(
        "--count",
        type=int,
        default=None,
        help="Also report how many pages this many cards need.",
    )
    add_layout_arguments(plan_cmd)

    return parser


def layout_from_args(args: argparse.Namespace) -> SheetLayout:
    """Build the sheet layout selected on the command line."""
    page_width, page_height = args.page_size or (None, None)
    card_width, card_height = args.card_size or (None, None)
    on_decode_failure = None
    if getattr(args, "skip_undecodable", False):
        on_decode_failure = DecodeFailurePolicy.SKIP
    return SheetLayout.preset(args.preset).with_overrides(
        page_width=page_width,
        page_height=page_height,
        card_width=card_width,
        card_height=card_height,
        gutter=args.gutter,
        dpi=args.dpi,
        on_decode_failure=on_decode_failure,
        cut_guides=getattr(args, "cut_guides", None) or None,
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def run_build(args: argparse.Namespace, layout: SheetLayout) -> None:
    """Run the build command."""
    output_path = Path(args.output).resolve()

    console.print()
    console.print(Panel.fit(
        "[bold magenta]🃏 Proxy Sheets[/bold magenta]\n"
        "[dim]Creating printable card sheets[/dim]",
        border_style="magenta",
    ))
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        # Total is unknown up front: images are read one at a time
        task_id = progress.add_task("[green]Placing cards...", total=None)

        def on_card(card: PlacedCard) -> None:
            progress.update(
                task_id,
                advance=1,
                description=f"[green]Placing cards on page [bold]{card.cell.page + 1}[/bold]...",
            )

        summary = build_proxy_pdf(
            iter_image_bytes(args.sources, copies=args.copies),
            output_path=output_path,
            layout=layout,
            title=args.title,
            progress_callback=on_card,
        )

    # Print summary
    console.print()

    table = Table(box=box.ROUNDED, border_style="green")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("🃏 Cards placed", f"[bold]{summary.cards_placed}[/bold]")
    if summary.cards_skipped:
        table.add_row("⚠ Cards left blank", f"[bold yellow]{summary.cards_skipped}[/bold yellow]")
    table.add_row("📄 Pages created", f"[bold]{summary.page_count}[/bold]")
    table.add_row("💾 Output file", f"[bold]{output_path}[/bold]")
    table.add_row("📊 File size", f"[bold]{get_file_size_str(output_path)}[/bold]")

    console.print(table)

    console.print()
    console.print("[green]✔[/green] [bold green]Done![/bold green] Your card sheets are ready to print.")
    console.print()


def run_plan(args: argparse.Namespace, layout: SheetLayout) -> None:
    """Run the plan command."""
    engine = SheetLayoutEngine(layout)

    table = Table(box=box.ROUNDED, border_style="cyan", title="Sheet layout (mm)")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Page", f"{layout.page_width:g} x {layout.page_height:g}")
    table.add_row("Card", f"{layout.card_width:g} x {layout.card_height:g}")
    table.add_row("Gutter", f"{layout.gutter:g}")
    table.add_row("Margins", f"{layout.margin_width:.2f} x {layout.margin_height:.2f}")
    table.add_row("Density", f"{layout.dpi:g} dpi")
    if args.count is not None:
        pages = engine.cell_for_index(args.count - 1).page + 1 if args.count > 0 else 0
        table.add_row("Pages", f"{pages} for {args.count} card(s)")
    console.print(table)

    cells = Table(box=box.SIMPLE, border_style="cyan", title="Card origins (bottom-left)")
    cells.add_column("Slot", style="dim")
    cells.add_column("Row")
    cells.add_column("Column")
    cells.add_column("x", justify="right")
    cells.add_column("y", justify="right")
    for slot in range(9):
        cell = engine.cell_for_index(slot)
        x, y = engine.cell_origin(cell.row, cell.column)
        cells.add_row(str(slot), str(cell.row), str(cell.column), f"{x:.2f}", f"{y:.2f}")
    console.print(cells)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 2

    try:
        layout = layout_from_args(args)
        if args.command == "build":
            if args.copies < 1:
                parser.error("--copies must be at least 1")
            run_build(args, layout)
        elif args.command == "plan":
            run_plan(args, layout)
    except ProxySheetError as e:
        console.print(f"[red]✘[/red] {type(e).__name__}: {escape(str(e))}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
