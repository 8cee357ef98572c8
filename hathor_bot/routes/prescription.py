# hathor_bot/routes/prescription.py
"""
GET /download-prescription

Streams the session's advice as a .docx attachment. A session with no
stored context receives the sample prescription; assembly failures are
reported as 500 JSON.
"""

from __future__ import annotations

import logging
from io import BytesIO

from flask import Blueprint, current_app, jsonify, request, send_file

from ..document_builder import DOCX_FILENAME, DOCX_MIMETYPE
from ..errors import DocumentGenerationError

log = logging.getLogger(__name__)
bp = Blueprint("prescription", __name__)


@bp.get("/download-prescription")
def download_prescription():
    session_id = current_app.extensions["session_key_policy"](request)
    assembler = current_app.extensions["document_assembler"]

    try:
        data = assembler.build_document(session_id)
    except DocumentGenerationError as exc:
        log.error(f"PRESCRIPTION_DOWNLOAD_FAILED | session={session_id} | error={exc}")
        return jsonify({"error": "Failed to generate prescription document", "success": False}), 500

    log.info(f"PRESCRIPTION_DOWNLOAD | session={session_id} | size={len(data)}")
    return send_file(
        BytesIO(data),
        as_attachment=True,
        download_name=DOCX_FILENAME,
        mimetype=DOCX_MIMETYPE,
    )
