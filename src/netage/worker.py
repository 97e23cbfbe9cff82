"""Line-oriented document processing worker.

The builder copies this module next to every bundle as
``netage-worker.py``. It reads one JSON request per line on stdin and
writes one JSON response per line on stdout, so a long-lived process can
serve many documents::

    {"id": 1, "html": "<section>...</section>", "config": {"specStatus": "NETAGE-LD"}}
    {"id": 1, "html": "<html>...", "warnings": [...], "findings": [...], "errors": []}

Optional request keys are ``config``, ``location`` and ``profile``. A
request that cannot be served gets ``{"id": ..., "error": "..."}``; the
worker keeps running.

Run it with the bundle on the import path::

    PYTHONPATH=builds/netage-netage.pyz python builds/netage-worker.py
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, TextIO

from netage.exceptions import NetageError
from netage.pipeline import process_document

logger = logging.getLogger("netage.worker")


def handle_request(request: dict[str, Any]) -> dict[str, Any]:
    """Process one decoded request and build its response."""
    request_id = request.get("id")
    html = request.get("html")
    if not isinstance(html, str):
        return {"id": request_id, "error": "Request is missing 'html'"}
    try:
        result = process_document(
            html,
            request.get("config") or {},
            profile=request.get("profile"),
            location=request.get("location"),
        )
    except NetageError as exc:
        return {"id": request_id, "error": str(exc)}
    return {
        "id": request_id,
        "html": result.html,
        "warnings": result.warnings,
        "findings": [finding.model_dump(mode="json") for finding in result.findings],
        "errors": result.errors,
    }


def serve(stdin: TextIO, stdout: TextIO) -> int:
    """Answer requests from *stdin* until EOF. Returns the number served."""
    served = 0
    for line in stdin:
        line = line.strip()
        if not line:
            continue
        try:
            request = json.loads(line)
        except json.JSONDecodeError as exc:
            response: dict[str, Any] = {"id": None, "error": f"Invalid JSON: {exc}"}
        else:
            if isinstance(request, dict):
                response = handle_request(request)
            else:
                response = {"id": None, "error": "Request must be a JSON object"}
        stdout.write(json.dumps(response, ensure_ascii=False) + "\n")
        stdout.flush()
        served += 1
    logger.debug("Served %d request(s)", served)
    return served


def main() -> int:
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)
    serve(sys.stdin, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
