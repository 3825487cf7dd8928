"""
Local MCP server for the daily sales tracker.

This implements a Model Context Protocol (MCP) server using FastMCP that
exposes the sales ledger as tools: reading today's and this week's totals,
listing transactions, and recording or deleting sales.

The server keeps its own in-memory ledger loaded from the same `data/`
directory as the Flask app and writes it back after every change. Each tool
is a thin wrapper around a plain function taking the ledger, so the same
behaviour can be called without an MCP client.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastmcp import FastMCP

from utils.file_manager import ensure_defaults, read_config
from utils.formatting import format_currency
from models.ledger import Ledger
from models.aggregation import summarize, start_of_today

LOG = logging.getLogger(__name__)

server_instructions = """
This MCP server provides access to a shop's daily sales ledger. It can report
today's and this week's sales totals, list recorded transactions, record new
sales and delete mistaken ones.
"""

def _content(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": json.dumps(payload)}]}

def _parse_arg(arg: Optional[str]) -> Dict[str, Any]:
    data = json.loads(arg) if arg else {}
    if not isinstance(data, dict):
        raise ValueError("argument must be a JSON object")
    return data

def sales_summary(ledger: Ledger, now: Optional[datetime] = None) -> Dict[str, Any]:
    cfg = read_config()
    s = summarize(
        ledger.transactions,
        now=now or datetime.now(),
        weekly_target=float(cfg["weekly_target"]),
        warning_weekday=int(cfg["warning_weekday"]),
    )
    formatted = {
        "total_sales_today": format_currency(s.total_sales_today, cfg["currency"], cfg["locale"]),
        "total_sales_this_week": format_currency(s.total_sales_this_week, cfg["currency"], cfg["locale"]),
    }
    return _content({"summary": s.to_dict(), "formatted": formatted})

def sales_today(ledger: Ledger, now: Optional[datetime] = None) -> Dict[str, Any]:
    s = summarize(ledger.transactions, now=now or datetime.now())
    return _content({"transactions": [t.to_dict() for t in s.transactions_today]})

def sales_history(ledger: Ledger) -> Dict[str, Any]:
    return _content({"transactions": [t.to_dict() for t in ledger.transactions]})

def record_sale(ledger: Ledger, arg: Optional[str]) -> Dict[str, Any]:
    try:
        data = _parse_arg(arg)
    except ValueError:
        return _content({"error": "Invalid JSON argument"})
    tx = ledger.add(data.get("name"), data.get("quantity", 1), data.get("price"))
    if tx is None:
        return _content({"error": "Provide a product name, a positive quantity and a positive price"})
    return _content({"transaction": tx.to_dict()})

def delete_sale(ledger: Ledger, transaction_id: str) -> Dict[str, Any]:
    return _content({"removed": ledger.remove(transaction_id)})

def clear_today_sales(ledger: Ledger, arg: Optional[str], now: Optional[datetime] = None) -> Dict[str, Any]:
    try:
        data = _parse_arg(arg)
    except ValueError:
        data = {}
    if data.get("confirm") is not True:
        return _content({"error": "Clearing today's sales requires {\"confirm\": true}"})
    removed = ledger.clear_up_to(start_of_today(now or datetime.now()))
    return _content({"removed": removed})

def create_server(ledger: Optional[Ledger] = None) -> FastMCP:
    ensure_defaults()
    if ledger is None:
        ledger = Ledger(storage_key=read_config()["storage_key"])
        ledger.load()

    mcp = FastMCP(name="Daily Sales Tracker MCP", instructions=server_instructions)

    @mcp.tool()
    async def summary() -> Dict[str, Any]:
        """
        Return today's and this week's sales totals.

        Totals are recomputed from the full ledger using the local clock. The
        week starts on Saturday. `show_warning` is true only on Thursdays when
        the week's sales are still below the configured weekly target.

        Returns:
            MCP content array with JSON: {"summary": {...}, "formatted": {...}}
        """
        return sales_summary(ledger)

    @mcp.tool()
    async def transactions_today() -> Dict[str, Any]:
        """Return the transactions recorded since local midnight, newest first."""
        return sales_today(ledger)

    @mcp.tool()
    async def transactions_history() -> Dict[str, Any]:
        """
        Return every transaction in the ledger, newest first.

        Edge cases:
            - Large ledgers produce big payloads.
        """
        return sales_history(ledger)

    @mcp.tool()
    async def add_transaction(arg: str) -> Dict[str, Any]:
        """
        Record a sale.

        The `arg` parameter is a JSON object like
        {"name": "Kopi Susu", "quantity": 2, "price": 18000}.
        Quantity defaults to 1.

        Returns:
            MCP content array with {"transaction": {...}} or {"error": "..."}.
        """
        return record_sale(ledger, arg)

    @mcp.tool()
    async def delete_transaction(transaction_id: str) -> Dict[str, Any]:
        """Delete one transaction by id. Deleting an unknown id is not an error."""
        return delete_sale(ledger, transaction_id)

    @mcp.tool()
    async def clear_today(arg: Optional[str] = None) -> Dict[str, Any]:
        """
        Delete all of today's transactions, keeping earlier history.

        This cannot be undone, so `arg` must be the JSON object {"confirm": true}.
        """
        return clear_today_sales(ledger, arg)

    return mcp


def main():
    logging.basicConfig(level=logging.INFO)
    server = create_server()
    LOG.info("Starting local MCP server on 0.0.0.0:8000 (HTTP)")
    server.run(transport="http", host="0.0.0.0", port=8000, path="/mcp")


if __name__ == "__main__":
    main()
