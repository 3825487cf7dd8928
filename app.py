import logging
import math
from datetime import datetime

from flask import Flask, jsonify, request, render_template
from utils.file_manager import ensure_defaults, read_config, write_json
from utils.formatting import format_currency
from models.ledger import Ledger
from models.aggregation import summarize, start_of_today

LOG = logging.getLogger(__name__)

ensure_defaults()
app = Flask(__name__)

ledger = Ledger(storage_key=read_config()["storage_key"])
ledger.load()

def _json_object():
    """Request body as a dict, or None when it is missing, malformed or not a JSON object."""
    data = request.get_json(force=True, silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None

def _bad_body():
    return jsonify({"ok": False, "error": "Request body must be a JSON object."}), 400

def _summary():
    cfg = read_config()
    return summarize(
        ledger.transactions,
        now=datetime.now(),
        weekly_target=float(cfg["weekly_target"]),
        warning_weekday=int(cfg["warning_weekday"]),
    )

# -------- Summary --------
@app.get("/summary")
def summary_get():
    return jsonify({"ok": True, "summary": _summary().to_dict()})

# -------- Transactions --------
@app.get("/transactions")
def transactions_all():
    return jsonify({"ok": True, "transactions": [t.to_dict() for t in ledger.transactions]})

@app.get("/transactions/today")
def transactions_today():
    today = _summary().transactions_today
    return jsonify({"ok": True, "transactions": [t.to_dict() for t in today]})

@app.post("/transactions")
def transactions_add():
    data = _json_object()
    if data is None:
        return _bad_body()
    tx = ledger.add(data.get("name"), data.get("quantity", 1), data.get("price"))
    if tx is None:
        return jsonify({"ok": False, "error": "Provide a product name, a positive quantity and a positive price."}), 400
    return jsonify({"ok": True, "transaction": tx.to_dict()}), 201

@app.delete("/transactions/<transaction_id>")
def transactions_delete(transaction_id):
    removed = ledger.remove(transaction_id)
    return jsonify({"ok": True, "removed": removed})

@app.post("/transactions/clear-today")
def transactions_clear_today():
    data = _json_object()
    if data is None:
        return _bad_body()
    if data.get("confirm") is not True:
        return jsonify({"ok": False, "error": "Clearing today's sales requires {\"confirm\": true}."}), 400
    removed = ledger.clear_up_to(start_of_today(datetime.now()))
    return jsonify({"ok": True, "removed": removed})

# -------- Admin --------
def _config_value(key, value):
    """Coerce a config update; raises ValueError for values the summary cannot use."""
    if isinstance(value, bool):
        raise ValueError(f"{key} must not be a boolean")
    if key == "weekly_target":
        target = float(value)
        if not math.isfinite(target) or target < 0:
            raise ValueError("weekly_target must be a non-negative number")
        return int(target) if target.is_integer() else target
    if key == "warning_weekday":
        weekday = int(value)
        if weekday != value or not 0 <= weekday <= 6:
            raise ValueError("warning_weekday must be a whole number from 0 (Sun) to 6 (Sat)")
        return weekday
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key} must be a non-empty string")
    return value.strip()

@app.post("/config")
def config_update():
    data = _json_object()
    if data is None:
        return _bad_body()
    cfg = read_config()
    # storage_key only takes effect on the next start
    allowed = {"weekly_target", "warning_weekday", "storage_key", "currency", "locale"}
    changed = {}
    try:
        for k, v in data.items():
            if k in allowed:
                changed[k] = _config_value(k, v)
    except (TypeError, ValueError, OverflowError) as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    cfg.update(changed)
    write_json("config.json", cfg)
    return jsonify({"ok": True, "changed": changed, "config": cfg})

@app.get("/")
def index():
    cfg = read_config()
    summary = _summary()

    def money(amount):
        return format_currency(amount, cfg["currency"], cfg["locale"])

    return render_template("index.html", summary=summary, money=money)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(host="0.0.0.0", port=5000, debug=True)
