"""
Chart Engine CLI

Preview the engine's decisions for a CSV dataset from the terminal:

    chart-engine series data.csv --x region --y sales --agg sum --sort-by value --limit 5
    chart-engine layout data.csv --x region --y sales --width 480 --height 320
    chart-engine templates data.csv

Every subcommand accepts ``--json`` for machine-readable output.
"""

import argparse
import sys
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table

from src.chart_engine.core import settings
from src.chart_engine.engine import ChartEngine
from src.chart_engine.layout.text_measurer import TextMeasurer
from src.chart_engine.models.schema import (
    ColumnSchemaEntry,
    CompatibilityScore,
    FieldMapping,
    LayoutPlan,
    Series,
)
from src.chart_engine.transforms.temporal import looks_like_date
from src.shared_lib.utils.json_serialization import json_dumps
from src.shared_lib.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


# ============================================================================
# DATA LOADING
# ============================================================================


def load_rows(path: str) -> List[Dict[str, Any]]:
    """
    Read a CSV file into row dicts (missing cells become None).

    Args:
        path: CSV path

    Returns:
        List of rows
    """
    frame = pd.read_csv(path)
    frame = frame.astype(object).where(frame.notna(), None)
    logger.info(f"[CLI] Loaded {len(frame)} rows x {len(frame.columns)} columns from {path}")
    return frame.to_dict(orient="records")


def schema_from_frame(frame: pd.DataFrame) -> List[ColumnSchemaEntry]:
    """
    Column schema from pandas dtypes.

    Object columns whose first value looks like a date are typed as dates;
    low-cardinality object columns are categorical.
    """
    entries = []
    for column in frame.columns:
        series = frame[column]
        if pd.api.types.is_bool_dtype(series):
            column_type = "categorical"
        elif pd.api.types.is_numeric_dtype(series):
            column_type = "number"
        elif pd.api.types.is_datetime64_any_dtype(series):
            column_type = "date"
        else:
            non_null = series.dropna()
            if not non_null.empty and looks_like_date(non_null.iloc[0]):
                column_type = "date"
            elif non_null.nunique() <= max(1, len(non_null) // 2):
                column_type = "categorical"
            else:
                column_type = "string"
        entries.append(ColumnSchemaEntry(name=str(column), type=column_type))
    return entries


def mapping_from_args(args: argparse.Namespace) -> FieldMapping:
    """Field mapping from the shared mapping options."""
    data: Dict[str, Any] = {
        "chart_type": args.type,
        "category": args.x,
        "metrics": args.y or [],
        "metrics_left": args.y1 or [],
        "metrics_right": args.y2 or [],
        "aggregation": args.agg,
        "granularity": args.granularity,
        "sort_by": args.sort_by,
        "sort_order": args.order,
        "limit": args.limit,
        "label_rotation": args.rotation,
    }
    return FieldMapping.model_validate(data)


# ============================================================================
# DISPLAY
# ============================================================================


class ResultDisplay:
    """Rich renderings of engine outputs."""

    def __init__(self, console: Optional[Console] = None, max_rows: int = 20):
        self.console = console or Console()
        self.max_rows = max_rows

    def show_json(self, payload: Any) -> None:
        self.console.print(JSON(json_dumps(payload, ensure_ascii=False)))

    def show_series(self, series: Series) -> None:
        columns = [c for c in [series.category_key] + list(series.metrics) if c]
        if not columns and series.rows:
            columns = list(series.rows[0].keys())

        table = Table(
            title=f"Series ({len(series)} rows)",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold cyan",
        )
        for column in columns:
            side = " (right)" if column in series.axes.right else ""
            table.add_column(f"{column}{side}")

        for row in series.rows[: self.max_rows]:
            table.add_row(*["" if row.get(c) is None else str(row.get(c)) for c in columns])

        if len(series) > self.max_rows:
            table.caption = f"showing {self.max_rows} of {len(series)} rows"

        self.console.print(table)

        axes = series.axes
        summary = (
            f"[bold]Axes:[/bold] {axes.source} | left: {', '.join(axes.left) or '-'}"
            f" | right: {', '.join(axes.right) or '-'}\n"
            f"[bold]Stages:[/bold] {', '.join(series.metadata.get('stages', [])) or 'none'}"
            f" | input rows: {series.metadata.get('input_rows', 0)}"
        )
        self.console.print(Panel(summary, border_style="cyan", box=box.ROUNDED))

    def show_layout(self, plan: LayoutPlan, width: float, height: float) -> None:
        table = Table(
            title=f"Layout plan ({width:.0f} x {height:.0f})",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Setting")
        table.add_column("Value", justify="right")

        table.add_row("Rotation", f"{plan.rotation_angle}°")
        table.add_row("Bottom margin", f"{plan.bottom_margin:.1f}px")
        table.add_row("Left margin", f"{plan.left_margin:.1f}px")
        table.add_row("Right margin", f"{plan.right_margin:.1f}px")
        table.add_row("Top margin", f"{plan.top_margin:.1f}px")
        table.add_row("Tick interval", str(plan.tick_interval))
        table.add_row("Measurement", plan.measurement)
        self.console.print(table)

    def show_templates(self, scores: Sequence[CompatibilityScore]) -> None:
        table = Table(
            title="Template compatibility",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold green",
        )
        table.add_column("Template")
        table.add_column("Score", justify="right")
        table.add_column("Tier")
        table.add_column("Type / Cols / Clarity", justify="right")
        table.add_column("Status")

        tier_styles = {"high": "green", "medium": "yellow", "low": "red"}
        for item in scores:
            factors = item.factors
            status = "[green]compatible[/green]" if item.compatible else f"[red]{item.message}[/red]"
            style = tier_styles[item.tier]
            table.add_row(
                item.template_id or "-",
                str(item.total),
                f"[{style}]{item.tier}[/{style}]",
                f"{factors.data_type_match} / {factors.column_confidence} / {factors.clarity_score}",
                status,
            )
        self.console.print(table)


# ============================================================================
# COMMANDS
# ============================================================================


def _build_engine(args: argparse.Namespace) -> ChartEngine:
    use_fonts = False if args.no_fonts else None
    return ChartEngine(measurer=TextMeasurer(use_fonts=use_fonts))


def run_series(args: argparse.Namespace, display: ResultDisplay) -> int:
    engine = _build_engine(args)
    series = engine.compute_series(load_rows(args.data), mapping_from_args(args))

    if args.json:
        display.show_json(series)
    else:
        display.show_series(series)

    if args.perf:
        display.console.print(engine.monitor.get_report())
    return 0


def run_layout(args: argparse.Namespace, display: ResultDisplay) -> int:
    engine = _build_engine(args)
    mapping = mapping_from_args(args)
    series = engine.compute_series(load_rows(args.data), mapping)
    plan = engine.layout_for_series(
        series, (args.width, args.height), mapping.label_rotation, mapping.chart_type
    )

    if args.json:
        display.show_json({"layout": plan, "axes": series.axes})
    else:
        display.show_layout(plan, args.width, args.height)

    if args.perf:
        display.console.print(engine.monitor.get_report())
    return 0


def run_templates(args: argparse.Namespace, display: ResultDisplay) -> int:
    engine = _build_engine(args)
    frame = pd.read_csv(args.data)
    scores = engine.recommend_templates(
        schema=schema_from_frame(frame), include_incompatible=True
    )

    if args.json:
        display.show_json(scores)
    else:
        display.show_templates(scores)
    return 0


def _add_mapping_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("data", help="Path to a CSV dataset")
    parser.add_argument("--type", "-t", default="bar", choices=settings.SUPPORTED_CHART_TYPES)
    parser.add_argument("--x", "-x", help="Category (x-axis) column")
    parser.add_argument("--y", "-y", action="append", help="Metric column (repeatable)")
    parser.add_argument("--y1", action="append", help="Left-axis metric (repeatable)")
    parser.add_argument("--y2", action="append", help="Right-axis metric (repeatable)")
    parser.add_argument("--agg", choices=settings.VALID_AGGREGATIONS, help="Aggregation function")
    parser.add_argument(
        "--granularity", choices=["day", "week", "month", "quarter", "year"]
    )
    parser.add_argument("--sort-by", help='"value", "label" or a column name')
    parser.add_argument("--order", default="desc", choices=settings.VALID_SORT_ORDERS)
    parser.add_argument("--limit", type=int, help="Keep the top/bottom N rows")
    parser.add_argument(
        "--rotation", default="auto", choices=settings.VALID_ROTATION_MODES
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chart-engine",
        description="Chart data transformation and adaptive layout engine",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--json", action="store_true", help="JSON output")
    parser.add_argument("--no-fonts", action="store_true", help="Use approximate text widths")
    parser.add_argument("--perf", action="store_true", help="Print stage timings")

    subparsers = parser.add_subparsers(dest="command", required=True)

    series_parser = subparsers.add_parser("series", help="Compute the chart series")
    _add_mapping_options(series_parser)
    series_parser.set_defaults(handler=run_series)

    layout_parser = subparsers.add_parser("layout", help="Plan the chart layout")
    _add_mapping_options(layout_parser)
    layout_parser.add_argument("--width", type=float, default=600.0)
    layout_parser.add_argument("--height", type=float, default=400.0)
    layout_parser.set_defaults(handler=run_layout)

    templates_parser = subparsers.add_parser("templates", help="Score gallery templates")
    templates_parser.add_argument("data", help="Path to a CSV dataset")
    templates_parser.set_defaults(handler=run_templates)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the ``chart-engine`` command.

    Args:
        argv: Arguments (default: sys.argv)

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level="DEBUG" if args.verbose else "WARNING")
    settings.validate_settings()

    display = ResultDisplay()
    try:
        return args.handler(args, display)
    except FileNotFoundError as e:
        display.console.print(f"[red]File not found:[/red] {e.filename}")
        return 1
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        display.console.print(f"[red]Could not read CSV:[/red] {e}")
        return 1
    except ValidationError as e:
        display.console.print(f"[red]Invalid mapping:[/red] {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
