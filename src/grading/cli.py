"""
Command line front end for grading a drawing against a reference glyph.

Example:
    grade-drawing --drawing attempt.png --reference-char A
    grade-drawing --strokes attempt.json --canvas-size 300 \\
        --reference model.png --store progress.json --problem 漢
"""

import argparse
import json
import logging
from pathlib import Path

from src.grading.image_io import load_raster, save_bitmap
from src.grading.processor import GradingProcessor, normalize_image
from src.grading.types import DecisionStatus
from src.progress.store import ProgressStore
from src.rendering.drawing_surface import load_paths, render_paths
from src.rendering.glyph_renderer import render_reference_glyph
from src.sync.queue import RemoteEndpoint, SyncQueue

logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_INPUT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Grade a handwritten glyph against a reference glyph",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    drawing = parser.add_mutually_exclusive_group(required=True)
    drawing.add_argument("--drawing", type=Path, help="RGBA image of the attempt")
    drawing.add_argument("--strokes", type=Path, help="Stroke history JSON")

    reference = parser.add_mutually_exclusive_group(required=True)
    reference.add_argument("--reference", type=Path, help="RGBA image of the model")
    reference.add_argument("--reference-char", help="Character to render as model")

    parser.add_argument(
        "--canvas-size", type=int, default=300, help="Canvas size for rendering"
    )
    parser.add_argument("--font", type=Path, help="Font for --reference-char")
    parser.add_argument("--config", type=Path, help="Grading config YAML")
    parser.add_argument("--grid-size", type=int, help="Override comparison grid")
    parser.add_argument("--threshold", type=float, help="Override pass threshold (%%)")
    parser.add_argument("--json", action="store_true", help="Print result as JSON")
    parser.add_argument(
        "--dump-dir", type=Path, help="Save normalized silhouettes to this directory"
    )

    parser.add_argument("--store", type=Path, help="Progress store JSON to update")
    parser.add_argument("--problem", help="Problem key recorded in the store")
    parser.add_argument("--remote-url", help="Scoring log endpoint for sync")
    parser.add_argument("--remote-token", default="", help="X-Auth-Token for sync")
    parser.add_argument(
        "--queue", type=Path, help="Sync queue JSON (default: next to --store)"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def _record(args: argparse.Namespace, score_pct: float, passed: bool) -> None:
    sync_queue = None
    if args.remote_url:
        queue_path = args.queue or args.store.with_name(args.store.stem + "-sync.json")
        sync_queue = SyncQueue(
            queue_path, endpoint=RemoteEndpoint(args.remote_url, args.remote_token)
        )

    store = ProgressStore(args.store, sync_queue=sync_queue)
    store.record_result(args.problem, score_pct, passed)


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if args.store and not args.problem:
        parser.error("--store requires --problem")
    if (args.remote_url or args.queue) and not args.store:
        parser.error("--remote-url and --queue require --store")

    try:
        processor = GradingProcessor(config_path=args.config)

        if args.drawing:
            drawing = load_raster(args.drawing)
        else:
            drawing = render_paths(
                load_paths(args.strokes), args.canvas_size, args.canvas_size
            )

        if args.reference:
            reference = load_raster(args.reference)
        else:
            reference = render_reference_glyph(
                args.reference_char, canvas_size=args.canvas_size, font_path=args.font
            )

        result = processor.grade(
            drawing, reference, grid_size=args.grid_size, threshold_pct=args.threshold
        )

        if args.dump_dir:
            for name, image in (("drawing", drawing), ("reference", reference)):
                grid, _ = normalize_image(
                    image, result.grid_size, processor.config.binarization
                )
                save_bitmap(grid, args.dump_dir / f"{name}_grid.png")

        if args.store:
            _record(args, result.score_pct, result.is_pass())

    except (ValueError, OSError) as e:
        logger.error(f"Grading failed: {e}")
        print(f"Grading failed: {e}")
        raise SystemExit(EXIT_INPUT_ERROR) from e

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False))
    else:
        print(result.get_summary())

    return EXIT_PASS if result.decision == DecisionStatus.PASS else EXIT_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
