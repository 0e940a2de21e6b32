"""Status file writer and run summary"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from sp2yt.core.models import SyncReport


def format_summary(report: SyncReport) -> str:
    lines = [
        f"Processed: {report.total_tracks}",
        f"Added: {report.added}",
        f"Skipped (dupes): {report.skipped_duplicate}",
        f"Failed to match: {report.failed_to_match}",
        f"Failed to add: {report.failed_to_add}",
    ]
    if report.dry_run:
        lines.append("Mode: DRY RUN (no changes written)")
    return "\n".join(lines)


def write_status(report: SyncReport, status_file: Path) -> bool:
    data = {
        "status": "success",
        "last_sync_time": datetime.now(timezone.utc).isoformat(),
        "dry_run": report.dry_run,
        "playlist_id": report.playlist_id or None,
        "total_tracks": report.total_tracks,
        "added": report.added,
        "skipped_duplicate": report.skipped_duplicate,
        "failed_to_match": report.failed_to_match,
        "failed_to_add": report.failed_to_add,
        "duration": round(report.duration, 2),
        "last_error": report.errors[-1] if report.errors else None,
    }
    return _atomic_write(status_file, data)


def write_failure_status(error: str, status_file: Path) -> bool:
    data = {
        "status": "failed",
        "last_sync_time": datetime.now(timezone.utc).isoformat(),
        "last_error": error,
    }
    return _atomic_write(status_file, data)


def write_running_status(status_file: Path) -> bool:
    data = {
        "status": "running",
        "last_sync_time": datetime.now(timezone.utc).isoformat(),
        "last_error": None,
    }
    return _atomic_write(status_file, data)


def _atomic_write(path: Path, data: dict) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".status_", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            os.replace(temp_path, path)
            return True
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
    except OSError:
        return False
