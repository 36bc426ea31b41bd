"""HTTP routes for the API server."""

from __future__ import annotations

import logging
from typing import Any, Callable

from flask import Flask, jsonify, request

from ..core.exceptions import CriticError
from ..core.models import AnalysisRequest
from ..services.analysis import AnalysisService
from .common import error_response, message_response
from .uploads import DesignUploader, read_design_file

logger = logging.getLogger("uicritic.api")


def register_routes(
    app: Flask,
    *,
    analysis_service: AnalysisService,
    uploader: DesignUploader,
) -> None:
    max_upload_bytes = analysis_service.settings.max_upload_bytes

    @app.before_request
    def log_request() -> None:
        logger.info(
            "HTTP %s %s from %s",
            request.method,
            request.path,
            request.remote_addr,
        )

    @app.get("/api")
    def api_root() -> Any:
        return jsonify({"message": "Welcome to AI UI Critic API!"})

    @app.post("/api/upload")
    def upload_design() -> Any:
        # Parsing the form raises RequestEntityTooLarge, answered 413 by the app.
        design = request.files.get("designImage")
        try:
            raw, mime_type = read_design_file(
                design,
                max_bytes=max_upload_bytes,
            )
            stored = uploader.store(raw, mime_type)
        except CriticError as exc:
            return error_response(exc)
        except Exception:
            logger.exception("Error uploading image")
            return message_response("Server error during upload.", 500)
        return jsonify({"message": "File uploaded successfully!", **stored}), 201

    def run_analysis(
        operation: Callable[[AnalysisRequest], str],
        *,
        result_key: str,
        failure_message: str,
    ) -> Any:
        payload = request.get_json(force=True, silent=True) or {}
        if not isinstance(payload, dict):
            payload = {}
        analysis_request = AnalysisRequest.from_payload(payload)
        try:
            result = operation(analysis_request)
        except CriticError as exc:
            return error_response(exc)
        except Exception:
            logger.exception("%s failed", result_key)
            return message_response(failure_message, 500)
        return jsonify({result_key: result})

    @app.post("/api/analyze/journey")
    def analyze_journey() -> Any:
        return run_analysis(
            analysis_service.journey,
            result_key="journeyAnalysis",
            failure_message="Failed to perform journey analysis.",
        )

    @app.post("/api/generate/abtest")
    def generate_abtest() -> Any:
        return run_analysis(
            analysis_service.abtest,
            result_key="abTestSuggestions",
            failure_message="Failed to generate A/B test suggestions.",
        )

    @app.post("/api/generate/variant-image")
    def generate_variant_image() -> Any:
        return run_analysis(
            analysis_service.variant_image,
            result_key="variantImageUrl",
            failure_message="Failed to generate variant image.",
        )
