"""Flask app factory for the API server."""

from __future__ import annotations

from typing import Any, Optional

from flask import Flask
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

from ..config.settings import Settings, get_settings
from ..services.analysis import AnalysisService
from ..utils.logging import setup_logging
from .common import message_response
from .routes import register_routes
from .uploads import DesignUploader


def create_app(
    settings: Optional[Settings] = None,
    *,
    analysis_service: Optional[AnalysisService] = None,
    uploader: Optional[DesignUploader] = None,
) -> Flask:
    setup_logging()
    settings = settings or get_settings()
    app = Flask(__name__)
    # Room for a base64 data URI of a maximum-size design plus form overhead.
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_bytes * 2
    CORS(app, origins=settings.cors_origins())

    @app.errorhandler(RequestEntityTooLarge)
    def request_too_large(exc: RequestEntityTooLarge) -> Any:
        return message_response("Request body too large.", 413)

    register_routes(
        app,
        analysis_service=analysis_service or AnalysisService(settings),
        uploader=uploader or DesignUploader(settings),
    )
    return app
