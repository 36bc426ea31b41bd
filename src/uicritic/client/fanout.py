"""Concurrent fan-out of the four analyses for one session.

Journey, A/B test and variant image are HTTP calls; contrast runs locally
after a short delay. Every task settles its own slot: failures become a
``SlotFailed`` outcome for that slot only, and an error while delivering an
outcome is logged without cancelling the sibling tasks.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

import anyio

from ..core.models import AnalysisKind, ImageReference
from ..utils.image import decode_data_url
from .api import CriticAPIClient, CriticAPIError
from .contrast import evaluate_contrast
from .session import (
    AnalysisBoard,
    AnalysisSession,
    SlotFailed,
    SlotOutcome,
    SlotResolved,
    Ticket,
)

logger = logging.getLogger("uicritic.client")

DEFAULT_CONTRAST_DELAY = 1.5

DEFAULT_ERRORS = {
    AnalysisKind.JOURNEY: "Failed to get journey analysis.",
    AnalysisKind.ABTEST: "Failed to get A/B suggestions.",
    AnalysisKind.VARIANT_IMAGE: "Failed to generate variant image.",
    AnalysisKind.CONTRAST: "Failed to evaluate contrast.",
}


async def _load_image_bytes(image: ImageReference, api: CriticAPIClient) -> bytes:
    if image.is_data_url:
        raw, _ = decode_data_url(image.url)
        return raw
    return await api.fetch_image(image.url)


async def _settle(
    board: AnalysisBoard,
    ticket: Ticket,
    call: Callable[[], Awaitable[Any]],
) -> None:
    outcome: SlotOutcome
    try:
        outcome = SlotResolved(await call())
    except CriticAPIError as exc:
        outcome = SlotFailed(exc.message or DEFAULT_ERRORS[ticket.kind])
    except Exception as exc:
        logger.exception("%s analysis failed", ticket.kind.value)
        outcome = SlotFailed(str(exc) or DEFAULT_ERRORS[ticket.kind])

    # Delivery failures stay inside this task.
    try:
        board.deliver(ticket, outcome)
    except Exception:
        logger.exception("Delivering %s outcome failed", ticket.kind.value)


async def run_analysis(
    board: AnalysisBoard,
    api: CriticAPIClient,
    *,
    session: Optional[AnalysisSession] = None,
    image_bytes: Optional[bytes] = None,
    context: Optional[str] = None,
    element_type: Optional[str] = None,
    element_description: Optional[str] = None,
    contrast_delay: float = DEFAULT_CONTRAST_DELAY,
) -> AnalysisSession:
    """Issue all analyses for ``session`` (default: the board's current one) and wait for them."""
    session = session or board.current
    if session is None:
        raise ValueError("No active analysis session.")
    if session.image is None:
        board.mark_image_missing(session)
        return session

    image = session.image
    image_url = image.url
    analysis_id = session.analysis_id
    tickets = session.start()
    logger.info(
        "Starting analysis fan-out session=%s id=%s image=%s",
        session.session_id,
        analysis_id,
        image.describe(),
    )

    async def contrast() -> Any:
        await anyio.sleep(contrast_delay)
        raw = image_bytes if image_bytes is not None else await _load_image_bytes(image, api)
        return await anyio.to_thread.run_sync(evaluate_contrast, raw)

    calls = {
        AnalysisKind.JOURNEY: lambda: api.analyze_journey(
            image_url, context=context, analysis_id=analysis_id
        ),
        AnalysisKind.ABTEST: lambda: api.generate_abtest(
            image_url,
            context=context,
            analysis_id=analysis_id,
            element_type=element_type,
            element_description=element_description,
        ),
        AnalysisKind.VARIANT_IMAGE: lambda: api.generate_variant_image(
            image_url, context=context, analysis_id=analysis_id
        ),
        AnalysisKind.CONTRAST: contrast,
    }

    async with anyio.create_task_group() as tg:
        for kind, call in calls.items():
            tg.start_soon(_settle, board, tickets[kind], call)

    logger.info("Analysis fan-out finished session=%s", session.session_id)
    return session
