from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Optional

from rich import box, table
from rich.markup import escape

from interval_rbtree.models import Interval
from interval_rbtree.utils.iterators import Pair

if TYPE_CHECKING:  # pragma: no cover - typing only
    from interval_rbtree.services.interval_tree import IntervalTree


def style_interval(interval: Interval, query: Optional[Interval] = None) -> str:
    """Format an interval, highlighting it when it overlaps ``query``."""

    text = f"[{interval.low}, {interval.high}]"
    if query is not None and interval.overlaps(query):
        return f"[bold green]{text}[/bold green]"
    return text


def style_value(value: Any, width: int = 40) -> str:
    text = repr(value)
    if len(text) > width:
        text = text[: width - 1] + "…"
    return escape(text)


class TreeLogger:
    @staticmethod
    def contents_table(
        pairs: Iterable[Pair],
        title: str = "Interval Tree Contents",
        query: Optional[Interval] = None,
        limit: Optional[int] = None,
    ) -> table.Table:
        """Create a table listing ``(interval, value)`` pairs in the given order"""
        contents_table = table.Table(
            title=title,
            title_style="bold green",
            style="dim",
            box=box.ROUNDED,
        )

        contents_table.add_column("#", justify="right")
        contents_table.add_column("Low", justify="right")
        contents_table.add_column("High", justify="right")
        contents_table.add_column("Interval")
        contents_table.add_column("Value", style="italic")

        shown = 0
        for index, (interval, value) in enumerate(pairs):
            if limit is not None and shown >= limit:
                contents_table.add_section()
                contents_table.add_row("…", "", "", "[dim]truncated[/dim]", "")
                break
            contents_table.add_row(
                str(index),
                str(interval.low),
                str(interval.high),
                style_interval(interval, query),
                style_value(value),
            )
            shown += 1

        return contents_table

    @staticmethod
    def summary_table(tree: IntervalTree) -> table.Table:
        """Create a table summarising size and balance of ``tree``"""
        summary_table = table.Table(
            title="Interval Tree Summary",
            title_style="bold blue",
            style="dim",
            box=box.SIMPLE,
        )
        summary_table.add_column("Metric", style="bold")
        summary_table.add_column("Value", justify="right")

        height = tree.height()
        bound = tree.balance_bound()
        height_style = "green" if height <= bound else "red"
        smallest = tree.min()
        largest = tree.max()

        summary_table.add_row("Entries", str(len(tree)))
        summary_table.add_row("Height", f"[{height_style}]{height}[/{height_style}]")
        summary_table.add_row("Balance bound", f"{bound:.2f}")
        summary_table.add_row("Min key", str(smallest[0]) if smallest else "-")
        summary_table.add_row("Max key", str(largest[0]) if largest else "-")
        return summary_table


__all__ = ["TreeLogger", "style_interval", "style_value"]
