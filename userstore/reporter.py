from __future__ import annotations

import json
from typing import Any, Dict, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from userstore.domain.models import UserResult

# Known fields first, in display order; pass-through attributes follow alphabetically.
_FIELD_ORDER = ("id", "name", "email", "age", "phone", "createdAt", "updatedAt")


def _format_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def print_user(result: UserResult, console: Optional[Console] = None) -> None:
    """
    Render an operation result as a two-column rich table.
    """
    console = console or Console()
    item = result.user

    table = Table(
        title=result.message or "User",
        box=box.ROUNDED,
        caption=f"{len(item)} field(s)",
    )
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    for field in _FIELD_ORDER:
        if field in item:
            table.add_row(field, _format_value(item[field]))
    for field in sorted(set(item) - set(_FIELD_ORDER)):
        table.add_row(f"[dim]{field}[/dim]", _format_value(item[field]))

    console.print(table)


def print_response(response: Dict[str, Any], console: Optional[Console] = None) -> None:
    """
    Render a dispatcher response: status line followed by the decoded body.
    """
    console = console or Console()
    status = response.get("statusCode", 0)
    style = "green" if status < 400 else "red"
    console.print(f"[{style}]HTTP {status}[/{style}]")

    body = response.get("body") or ""
    if body:
        console.print_json(body)
