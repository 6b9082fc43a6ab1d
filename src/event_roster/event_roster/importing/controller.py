from __future__ import annotations

import logging
import os
import uuid
from typing import Optional

from flask import Flask, abort, jsonify, request, session
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import RequestEntityTooLarge

from ..core.enums import EntityKind
from ..core.exceptions import ImportPipelineError, InvalidTransitionError
from ..container import Container
from .service import ImportService

logger = logging.getLogger(__name__)

_TOKEN_KEY = "import_token"


def upload_size(upload: FileStorage) -> Optional[int]:
    """Size of the uploaded file itself, not of the whole multipart body."""
    if upload.content_length:
        return upload.content_length
    stream = upload.stream
    try:
        start = stream.tell()
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(start)
    except (AttributeError, OSError):
        # Unseekable stream: the ingestor then reports only completion.
        return None
    return size - start


def register(app: Flask, container: Container) -> None:
    def _service(entity: str) -> ImportService:
        try:
            return container.import_services[EntityKind(entity)]
        except (ValueError, KeyError):
            abort(404)

    def _token() -> str:
        token = session.get(_TOKEN_KEY)
        if not token:
            token = uuid.uuid4().hex
            session[_TOKEN_KEY] = token
        return token

    def _ok(state, message: str = ""):
        return jsonify({"success": True, "message": message, "state": state.as_dict()}), 200

    def _fail(service: ImportService, token: str, message: str, status: int):
        return jsonify({"success": False, "message": message, "state": service.state(token).as_dict()}), status

    @app.route("/import/<entity>/state", methods=["GET"], endpoint="import_state")
    def import_state(entity: str):
        service = _service(entity)
        return _ok(service.state(_token()))

    @app.route("/import/<entity>/upload", methods=["POST"], endpoint="import_upload")
    async def import_upload(entity: str):
        service = _service(entity)
        token = _token()
        try:
            upload = request.files.get("file")
        except RequestEntityTooLarge:
            limit = (app.config.get("MAX_CONTENT_LENGTH") or 0) // 1024
            message = f"File is too large; the upload limit is {limit} KiB."
            try:
                state = service.reject_upload(token, message)
            except InvalidTransitionError as e:
                return _fail(service, token, str(e), 409)
            return jsonify({"success": False, "message": message, "state": state.as_dict()}), 413
        if upload is None or not upload.filename:
            return _fail(service, token, "Please select a CSV file to import.", 400)

        try:
            state = await service.upload(
                token,
                upload.stream,
                filename=upload.filename,
                media_type=upload.mimetype,
                total_bytes=upload_size(upload),
            )
        except (ImportPipelineError, InvalidTransitionError) as e:
            return _fail(service, token, str(e), 400)
        except Exception:
            logger.exception("Upload for %s import failed", entity)
            return _fail(service, token, "Error reading file.", 500)

        preview = state.preview
        return _ok(state, f"{preview.total_rows} row(s) ready to import from {preview.filename}.")

    @app.route("/import/<entity>/directive", methods=["POST"], endpoint="import_directive")
    def import_directive(entity: str):
        service = _service(entity)
        token = _token()
        data = request.get_json(silent=True) or {}
        flag = data.get("create_new_taxonomy", request.form.get("create_new_taxonomy", "1"))
        if isinstance(flag, str):
            flag = flag.strip().lower() in {"1", "true", "yes", "on"}
        try:
            return _ok(service.set_directive(token, create_new_taxonomy=bool(flag)))
        except InvalidTransitionError as e:
            return _fail(service, token, str(e), 409)

    @app.route("/import/<entity>/back", methods=["POST"], endpoint="import_back")
    def import_back(entity: str):
        service = _service(entity)
        token = _token()
        try:
            return _ok(service.back(token))
        except InvalidTransitionError as e:
            return _fail(service, token, str(e), 409)

    @app.route("/import/<entity>/reset", methods=["POST"], endpoint="import_reset")
    def import_reset(entity: str):
        service = _service(entity)
        token = _token()
        try:
            return _ok(service.reset(token))
        except InvalidTransitionError as e:
            return _fail(service, token, str(e), 409)

    @app.route("/import/<entity>/confirm", methods=["POST"], endpoint="import_confirm")
    async def import_confirm(entity: str):
        service = _service(entity)
        token = _token()
        try:
            state = await service.confirm(token)
        except InvalidTransitionError as e:
            return _fail(service, token, str(e), 409)
        except ImportPipelineError as e:
            return _fail(service, token, str(e), 400)
        except Exception:
            return _fail(service, token, "Import failed: an unexpected error occurred.", 500)

        return _ok(state, state.summary.message(service.entity.label))

    @app.route("/import/<entity>/template.csv", methods=["GET"], endpoint="import_template")
    def import_template(entity: str):
        service = _service(entity)
        csv_bytes = service.template_csv().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={service.entity.kind.value}_import_template.csv"},
        )
