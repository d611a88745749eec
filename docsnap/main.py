from __future__ import annotations

import json
import os
import queue
import threading
from typing import Any, Dict, Generator, Optional

from flask import Flask, Response, jsonify, request, send_file

from docsnap.capture import config
from docsnap.capture.error_codes import CaptureError, ErrorCode
from docsnap.capture.healthcheck import run_health_checks
from docsnap.capture.logging_utils import _capture_event
from docsnap.capture.orchestrator import IDENTIFIER_MODES, capture
from docsnap.capture.strategies import normalize_strategy
from docsnap.capture.utils import ensure_dirs, log_line

app = Flask(__name__)

# Initialise storage paths on import so WSGI entrypoints also have the
# expected environment ready.
ensure_dirs()

# One capture job at a time per process: the browser and the temp-directory
# namespace are not safe to share between concurrent jobs.
_JOB_LOCK = threading.Lock()

HEARTBEAT_SECONDS = 15


def _sse(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def _capture_worker(
    url: str,
    strategy: str,
    identifier_mode: Optional[str],
    events: "queue.Queue[Optional[Dict[str, Any]]]",
) -> None:
    def _on_progress(message: str) -> None:
        events.put({"type": "progress", "message": message})

    if not _JOB_LOCK.acquire(blocking=False):
        _on_progress("Waiting for the running capture to finish...")
        _JOB_LOCK.acquire()

    try:
        path = capture(
            url,
            strategy,
            output_dir=config.OUTPUT_DIR,
            identifier_mode=identifier_mode,
            on_progress=_on_progress,
        )
        events.put(
            {
                "type": "complete",
                "url": f"/downloads/{path.name}",
                "filename": path.name,
            }
        )
    except CaptureError as exc:
        events.put({"type": "error", "message": str(exc), "error_code": exc.error_code})
    except Exception as exc:  # noqa: BLE001
        log_line(f"[API] Capture thread failed: {type(exc).__name__}: {exc}")
        _capture_event("error", phase="api", url=url, error=str(exc))
        events.put(
            {"type": "error", "message": str(exc) or "Unknown error", "error_code": ErrorCode.INTERNAL}
        )
    finally:
        _JOB_LOCK.release()
        events.put(None)


def _capture_event_stream(
    url: str, strategy: str, identifier_mode: Optional[str]
) -> Generator[str, None, None]:
    """Run one capture job in a worker thread and relay its events as SSE."""

    events: "queue.Queue[Optional[Dict[str, Any]]]" = queue.Queue()
    worker = threading.Thread(
        target=_capture_worker,
        args=(url, strategy, identifier_mode, events),
        daemon=True,
    )
    worker.start()

    while True:
        try:
            event = events.get(timeout=HEARTBEAT_SECONDS)
        except queue.Empty:
            yield ": heartbeat\n\n"
            continue
        if event is None:
            break
        yield _sse(event)


@app.get("/api/capture")
def api_capture() -> Response:
    """Stream a capture job's progress as Server-Sent Events."""

    url = (request.args.get("url") or "").strip()
    if not url:
        return jsonify({"error": "URL is required"}), 400

    try:
        strategy = normalize_strategy(request.args.get("strategy"))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    identifier_mode = (request.args.get("identifier_mode") or "").strip().lower() or None
    if identifier_mode is not None and identifier_mode not in IDENTIFIER_MODES:
        return jsonify({"error": f"identifier_mode must be one of {list(IDENTIFIER_MODES)}"}), 400

    log_line(f"[API] Capturing {url} (strategy={strategy})")

    response = Response(
        _capture_event_stream(url, strategy, identifier_mode),
        mimetype="text/event-stream",
    )
    response.headers["Cache-Control"] = "no-cache"
    response.headers["X-Accel-Buffering"] = "no"
    return response


@app.get("/downloads/<path:filename>")
def download_file(filename: str) -> Response:
    """Serve a finished PDF from the output directory."""

    target = (config.OUTPUT_DIR / filename).resolve()
    output_root = config.OUTPUT_DIR.resolve()
    if target.parent != output_root:
        return Response("Invalid path", status=400)
    if not target.exists() or not target.is_file() or target.suffix.lower() != ".pdf":
        return Response("File not found", status=404)
    return send_file(target, as_attachment=True, download_name=target.name)


@app.get("/api/health")
def api_health() -> Response:
    """Return a JSON health summary for configuration and filesystem."""

    result = run_health_checks(entrypoint="api")
    status = 200 if result.ok else 503
    return jsonify({"ok": result.ok, "checks": result.checks}), status


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, threaded=True)
