"""
=============================================================================
ELECTRICITY USAGE VIEWER - FLASK APPLICATION
=============================================================================
Thin web shell around the usage export parser.

It provides REST API endpoints for:
- Uploading a utility usage export (address, blank line, header, entries)
- Picking the date to display
- Fetching the hourly bar chart series for that date
- Reading/clearing the last parse error
- Listing and reloading exports archived in S3 (optional)

How to run:
    python -m backend.app

Then visit: http://127.0.0.1:5000
=============================================================================
"""

# =============================================================================
# IMPORTS
# =============================================================================

# logging - one module logger, configured by application.py / __main__
import logging

# os - read configuration from environment variables
import os

# threading - the dev server is multi-threaded, shell state needs a lock
import threading

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

# dotenv - load settings from a .env file into the environment
from dotenv import load_dotenv

# Flask - web framework; request gives access to uploads and query params,
# jsonify turns dicts into JSON responses
from flask import Flask, jsonify, request

# Must run before any os.getenv below
load_dotenv()

# =============================================================================
# CUSTOM LIBRARY IMPORTS - the parser core and shell helpers
# =============================================================================

# ParseError: base class of every "this export is malformed" error
from backend.lib.usage_core.errors import ParseError

# parse_document: full export text -> UsageData (address + entries)
from backend.lib.usage_core.io import parse_document

# UsageData: one parsed export, never changed after parsing
from backend.lib.usage_core.models import UsageData

# UsageAnalyzer: per-day bar series and daily totals
from backend.lib.usage_core.processor import UsageAnalyzer

# ViewSettings: the last viewed date, saved between runs
from backend.lib.view_state import (
    ViewSettings,
    load_view_settings,
    save_view_settings,
)

logger = logging.getLogger(__name__)

# =============================================================================
# CONFIGURATION
# =============================================================================

# Where the selected date is saved so the viewer reopens on it
VIEW_SETTINGS_FILE = Path(os.getenv('VIEW_SETTINGS_FILE', 'backend/data/view_settings.json'))

# -----------------------------------------------------------------------------
# S3 ARCHIVE - keeps a copy of every accepted export
# -----------------------------------------------------------------------------
# Enable with USE_S3_STORAGE=true; without it nothing leaves the machine

USE_S3 = os.getenv('USE_S3_STORAGE', 'false').lower() == 'true'
s3_service = None  # Will hold our S3 service instance

if USE_S3:
    try:
        from backend.lib.s3_service import S3Service
        s3_service = S3Service()
        # Create the bucket on first run
        s3_service.create_bucket_if_not_exists()
        logger.info("S3 archive enabled")
    except Exception as e:
        # Archive is optional; the viewer works without it
        logger.warning("S3 initialization failed: %s. Archive disabled.", e)
        USE_S3 = False

# =============================================================================
# SHELL STATE
# =============================================================================

@dataclass
class ShellState:
    """
    Everything the viewer displays. A failed load only sets `error`;
    the previous document stays selectable.
    """
    data: Optional[UsageData] = None
    error: Optional[str] = None
    view: ViewSettings = field(default_factory=ViewSettings)


# Start on the date saved by the previous run (or the default date)
state = ShellState(view=load_view_settings(VIEW_SETTINGS_FILE))

# Guards every read-modify-write of `state` and the settings file.
# Held for a whole load, so at most one export is parsed at a time and
# the loaded document and its selected date always change together.
state_lock = threading.Lock()

# Create the Flask application instance
app = Flask(__name__)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def parse_iso_date(value: str) -> Tuple[int, int, int]:
    """'2025-06-21' -> (2025, 6, 21). Raises ValueError on bad input."""
    parsed = datetime.strptime(value, "%Y-%m-%d")
    return (parsed.year, parsed.month, parsed.day)


def json_body() -> dict:
    # Non-object JSON bodies (lists, strings) are treated as empty
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def snapshot() -> Tuple[Optional[UsageData], Optional[str], ViewSettings]:
    """Consistent (data, error, view) triple for read-only routes."""
    with state_lock:
        return state.data, state.error, state.view


def _select_date(date: Tuple[int, int, int]) -> None:
    # Caller must hold state_lock
    state.view = state.view.with_date(date)
    try:
        save_view_settings(state.view, VIEW_SETTINGS_FILE)
    except OSError as e:
        # The selection still applies for this run
        logger.warning("Could not save view settings: %s", e)


def select_date(date: Tuple[int, int, int]) -> ViewSettings:
    with state_lock:
        _select_date(date)
        return state.view


def load_export(content_bytes: bytes):
    """
    Parse an export and make it the displayed document.

    Returns (body, status). On failure the error text is kept for display
    and the currently loaded document is left alone.
    """
    # Exports are plain text; anything else is rejected up front
    try:
        content = content_bytes.decode("utf-8")
    except UnicodeDecodeError:
        with state_lock:
            state.error = "File is not valid UTF-8 text"
        return {"error": "File is not valid UTF-8 text"}, 400

    with state_lock:
        try:
            data = parse_document(content)
        except ParseError as e:
            # str(e) already carries "On line N: " for entry errors
            state.error = str(e)
            logger.info("Rejected usage export: %s", state.error)
            return {"error": state.error, "line": e.line_number}, 400

        # Swap in the new document and jump to its last day
        state.data = data
        last = data.last_entry
        if last is not None:
            _select_date(last.date)

        return {
            "address": data.address,
            "entry_count": len(data.entries),
            "selected_date": state.view.iso_date(),
        }, 202


# =============================================================================
# API ROUTES
# =============================================================================

@app.route("/")
def home():
    """Status of the viewer: what is loaded, the selected date, any error."""
    data, error, view = snapshot()
    return jsonify({
        "loaded": data is not None,
        "address": data.address if data else None,
        "entry_count": len(data.entries) if data else 0,
        "error": error,
        "selected_date": view.iso_date(),
    })


@app.route("/upload", methods=["POST"])
def upload():
    """
    Load a usage export.

    Expected format:
        123 Main St

        TYPE,DATE,START TIME,END TIME,USAGE,UNITS,NOTES
        Electric usage,06/21/2025,1:00 AM,2:00 AM,0.5 ,kWh,

    HTTP Status Codes:
        202: Accepted - export parsed and displayed
        400: Bad Request - no file, or the export failed to parse
    """
    # Check if a file was included in the request
    if "file" not in request.files:
        return jsonify({"error": "No file uploaded"}), 400

    file = request.files["file"]
    content_bytes = file.read()

    body, status = load_export(content_bytes)

    # Only exports that parsed are archived
    if status == 202 and USE_S3 and s3_service:
        s3_key = s3_service.upload_file(content_bytes, file.filename)
        if s3_key:
            body["s3_key"] = s3_key

    return jsonify(body), status


@app.route("/usage", methods=["GET"])
def usage():
    """
    Bar chart series for one day.

    Query Parameters:
        date (optional): YYYY-MM-DD, defaults to the selected date

    Example Response:
        {
            "address": "123 Main St",
            "date": "2025-06-21",
            "bars": [{"hour": 1, "kwh": 0.5, "width": 1.0}]
        }
    """
    data, _, view = snapshot()
    if data is None:
        return jsonify({"error": "No usage data loaded"}), 404

    date_param = request.args.get("date")
    if date_param:
        try:
            date = parse_iso_date(date_param)
        except ValueError:
            return jsonify({"error": f"Invalid date {date_param!r}, expected YYYY-MM-DD"}), 400
    else:
        date = view.date

    year, month, day = date
    return jsonify({
        "address": data.address,
        "date": f"{year:04d}-{month:02d}-{day:02d}",
        "bars": UsageAnalyzer(data).hourly_bars(date),
    })


@app.route("/date", methods=["POST"])
def set_date():
    """Select the displayed date. Body: {"date": "YYYY-MM-DD"}"""
    payload = json_body()
    value = payload.get("date")
    if not value:
        return jsonify({"error": "date required"}), 400
    try:
        date = parse_iso_date(value)
    except ValueError:
        return jsonify({"error": f"Invalid date {value!r}, expected YYYY-MM-DD"}), 400

    view = select_date(date)
    return jsonify({"selected_date": view.iso_date()})


@app.route("/days", methods=["GET"])
def days():
    """Total kWh per day of the loaded document."""
    data, _, _ = snapshot()
    if data is None:
        return jsonify({"error": "No usage data loaded"}), 404

    daily = UsageAnalyzer(data).daily_usage()
    # Sorted oldest first, like the Tracker's /usage listing
    data_list = [{"date": k, "total_kwh": v} for k, v in sorted(daily.items())]
    return jsonify({"address": data.address, "data": data_list})


@app.route("/entries", methods=["GET"])
def entries():
    data, _, _ = snapshot()
    if data is None:
        return jsonify({"error": "No usage data loaded"}), 404
    return jsonify(data.to_dict())


@app.route("/error", methods=["GET"])
def get_error():
    _, error, _ = snapshot()
    return jsonify({"error": error})


@app.route("/error", methods=["DELETE"])
def clear_error():
    with state_lock:
        state.error = None
    return jsonify({"error": None})


# =============================================================================
# S3 ARCHIVE ENDPOINTS
# =============================================================================

@app.route("/archive", methods=["GET"])
def list_archive():
    """Archived exports, newest key last."""
    if not USE_S3 or not s3_service:
        return jsonify({"error": "S3 not enabled"}), 400
    files = s3_service.list_files()
    return jsonify({"files": files, "count": len(files)})


@app.route("/archive/load", methods=["POST"])
def load_archived():
    """Reload an archived export. Body: {"key": "uploads/..."}"""
    if not USE_S3 or not s3_service:
        return jsonify({"error": "S3 not enabled"}), 400

    payload = json_body()
    key = payload.get("key")
    if not key:
        return jsonify({"error": "key required"}), 400

    # download_file returns None for missing keys and AWS errors
    content_bytes = s3_service.download_file(key)
    if content_bytes is None:
        return jsonify({"error": f"Could not fetch {key!r} from S3"}), 404

    body, status = load_export(content_bytes)
    return jsonify(body), status


# =============================================================================
# RUN THE SERVER
# =============================================================================

if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    # debug=True is for local development only
    app.run(debug=True)
