"""CLI entrypoint for the critic server and the terminal client."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

import anyio

from .client.api import CriticAPIClient
from .client.contrast import ContrastResult
from .client.fanout import run_analysis
from .client.intake import ImageIntake, IntakeError, SelectedFile
from .client.session import AnalysisBoard, AnalysisSession, SlotStatus
from .config.settings import IntakeMode, get_settings
from .core.models import AnalysisKind
from .utils.image import decode_data_url, extension_for_mime
from .utils.logging import setup_logging

PANEL_TITLES = {
    AnalysisKind.JOURNEY: "User Journey Insights",
    AnalysisKind.ABTEST: "A/B Test Suggestions",
    AnalysisKind.VARIANT_IMAGE: "Generated Variant Image",
    AnalysisKind.CONTRAST: "Contrast Check",
}


def serve(port: Optional[int]) -> None:
    from .api.app import create_app

    settings = get_settings()
    app = create_app(settings)
    app.run(host="0.0.0.0", port=port or settings.port)


def _render_panel(kind: AnalysisKind, session: AnalysisSession, variant_out: Optional[Path]) -> str:
    slot = session.slot(kind)
    lines = [f"== {PANEL_TITLES[kind]} =="]
    if slot.status is SlotStatus.FAILED:
        lines.append(f"Error: {slot.error}")
    elif slot.status is not SlotStatus.RESOLVED:
        lines.append(f"({slot.status.value})")
    elif isinstance(slot.result, ContrastResult):
        lines.append(f"Status: {slot.result.status} (ratio {slot.result.ratio}:1)")
        lines.append(slot.result.notes)
    elif kind is AnalysisKind.VARIANT_IMAGE:
        lines.append(_save_variant(slot.result, variant_out))
    else:
        lines.append(str(slot.result))
    return "\n".join(lines)


def _save_variant(data_url: str, variant_out: Optional[Path]) -> str:
    if variant_out is None:
        return f"Variant image received ({len(data_url)} characters); pass --variant-out to save it."
    raw, mime_type = decode_data_url(data_url)
    if not variant_out.suffix:
        variant_out = variant_out.with_suffix(f".{extension_for_mime(mime_type)}")
    variant_out.write_bytes(raw)
    return f"Variant image saved to {variant_out}"


async def critique(
    image_path: Path,
    *,
    context: Optional[str],
    element_type: Optional[str],
    element_description: Optional[str],
    variant_out: Optional[Path],
    mode: Optional[IntakeMode],
) -> int:
    settings = get_settings()
    mode = mode or settings.intake_mode
    board = AnalysisBoard()

    async with CriticAPIClient(settings.api_url, timeout=settings.client_timeout) as api:
        with ImageIntake(mode, max_bytes=settings.max_upload_bytes) as intake:
            try:
                intake.select(SelectedFile.from_path(image_path))
                result = await intake.submit(api)
            except IntakeError as exc:
                print(f"Error: {exc.message}", file=sys.stderr)
                return 1

            session = board.replace_image(result.image, analysis_id=result.analysis_id)
            print(f"Analyzing {image_path.name} (id {session.analysis_id})...")
            await run_analysis(
                board,
                api,
                session=session,
                image_bytes=intake.selected.data if intake.selected else None,
                context=context,
                element_type=element_type,
                element_description=element_description,
                contrast_delay=settings.contrast_delay,
            )

    if session.error:
        print(f"Error: {session.error}", file=sys.stderr)
        return 1
    for kind in AnalysisKind:
        print()
        print(_render_panel(kind, session, variant_out))
    failed = any(slot.status is SlotStatus.FAILED for slot in session.slots.values())
    return 2 if failed else 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="AI UI Critic")
    sub = parser.add_subparsers(dest="command", required=True)

    serve_parser = sub.add_parser("serve", help="Run the HTTP API server")
    serve_parser.add_argument("--port", type=int, help="Port to listen on (default: $PORT or 5001)")

    critique_parser = sub.add_parser("critique", help="Critique a design image")
    critique_parser.add_argument("image", type=Path, help="Path to a JPG, PNG, GIF or WEBP design")
    critique_parser.add_argument("--context", help="Extra context for the analysis")
    critique_parser.add_argument("--element-type", help="Element to target for A/B suggestions")
    critique_parser.add_argument("--element-description", help="Description of the targeted element")
    critique_parser.add_argument("--variant-out", type=Path, help="Where to save the generated variant")
    critique_parser.add_argument(
        "--mode",
        choices=[mode.value for mode in IntakeMode],
        help="Intake mode (default: $CRITIC_INTAKE_MODE or storage)",
    )

    args = parser.parse_args(argv)
    setup_logging()

    if args.command == "serve":
        serve(args.port)
        return 0

    if not args.image.is_file():
        print(f"Error: {args.image} not found", file=sys.stderr)
        return 1
    return anyio.run(
        lambda: critique(
            args.image,
            context=args.context,
            element_type=args.element_type,
            element_description=args.element_description,
            variant_out=args.variant_out,
            mode=IntakeMode(args.mode) if args.mode else None,
        )
    )


if __name__ == "__main__":
    sys.exit(main())
