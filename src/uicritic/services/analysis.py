"""Analysis orchestration for the three collaborator-backed endpoints.

Each operation is independent: it validates configuration and input, resolves
the image reference, calls the collaborator once and maps the outcome. Nothing
is shared between operations, so one endpoint failing never affects another.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from openai import OpenAI

from ..config.settings import Settings
from ..core.exceptions import InvalidInputError
from ..core.models import AnalysisKind, AnalysisRequest, ImageReference, ResolvedImage
from ..llm.client import describe_image, generate_variant_image
from ..llm.env import ensure_llm_configured, get_openai_client
from ..llm.prompts import build_abtest_prompt, build_journey_prompt, build_variant_prompt
from ..llm.results import unwrap_result
from .image_source import ImageResolver

logger = logging.getLogger("uicritic.services")

ClientFactory = Callable[[Settings], OpenAI]

MISSING_IMAGE_MESSAGES = {
    AnalysisKind.JOURNEY: "Image URL is required for analysis.",
    AnalysisKind.ABTEST: "Image URL is required.",
    AnalysisKind.VARIANT_IMAGE: "Image URL is required.",
}

EMPTY_RESULT_MESSAGES = {
    AnalysisKind.JOURNEY: "No content received from OpenAI.",
    AnalysisKind.ABTEST: "No content received from OpenAI for A/B test.",
    AnalysisKind.VARIANT_IMAGE: "No image received from OpenAI for variant generation.",
}


class AnalysisService:
    """Runs journey, A/B test and variant-image analyses against OpenAI."""

    def __init__(
        self,
        settings: Settings,
        *,
        resolver: Optional[ImageResolver] = None,
        client_factory: ClientFactory = get_openai_client,
    ):
        self.settings = settings
        self.resolver = resolver or ImageResolver(
            timeout=settings.fetch_timeout,
            default_mime_type=settings.default_mime_type,
        )
        self._client_factory = client_factory

    def journey(self, request: AnalysisRequest) -> str:
        image = self._prepare(AnalysisKind.JOURNEY, request)
        result = describe_image(
            self._client_factory(self.settings),
            prompt=build_journey_prompt(request.context),
            image=image,
            model=self.settings.vision_model,
            max_completion_tokens=self.settings.journey_max_tokens,
            detail=self.settings.image_detail,
            request_tag=f"journey:{request.analysis_id or ''}",
        )
        return unwrap_result(result, empty_message=EMPTY_RESULT_MESSAGES[AnalysisKind.JOURNEY])

    def abtest(self, request: AnalysisRequest) -> str:
        image = self._prepare(AnalysisKind.ABTEST, request)
        result = describe_image(
            self._client_factory(self.settings),
            prompt=build_abtest_prompt(
                element_type=request.element_type,
                element_description=request.element_description,
                context=request.context,
            ),
            image=image,
            model=self.settings.vision_model,
            max_completion_tokens=self.settings.abtest_max_tokens,
            detail=self.settings.image_detail,
            request_tag=f"abtest:{request.analysis_id or ''}",
        )
        return unwrap_result(result, empty_message=EMPTY_RESULT_MESSAGES[AnalysisKind.ABTEST])

    def variant_image(self, request: AnalysisRequest) -> str:
        image = self._prepare(AnalysisKind.VARIANT_IMAGE, request)
        result = generate_variant_image(
            self._client_factory(self.settings),
            prompt=build_variant_prompt(request.context),
            image=image,
            model=self.settings.image_model,
            size=self.settings.image_size,
            request_tag=f"variant:{request.analysis_id or ''}",
        )
        return unwrap_result(
            result, empty_message=EMPTY_RESULT_MESSAGES[AnalysisKind.VARIANT_IMAGE]
        )

    def _prepare(self, kind: AnalysisKind, request: AnalysisRequest) -> ResolvedImage:
        # Configuration is checked before input so an unconfigured deployment never does I/O.
        ensure_llm_configured(self.settings)
        reference = self._require_image(kind, request.image)
        logger.info(
            "Running %s analysis id=%s image=%s",
            kind.value,
            request.analysis_id or "-",
            reference.describe(),
        )
        return self.resolver.resolve(reference)

    @staticmethod
    def _require_image(kind: AnalysisKind, image: Optional[ImageReference]) -> ImageReference:
        if image is None or not image.url.strip():
            raise InvalidInputError(MISSING_IMAGE_MESSAGES[kind])
        return image
