"""Transcribe a video and optionally build its topic mind map.

Usage:
    python scripts/transcribe_video.py talk.mp4 -o talk.txt
    python scripts/transcribe_video.py talk.mp4 --analyze --mindmap talk.json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import settings  # noqa: E402
from src.errors import VideoTopicsError  # noqa: E402
from src.pipeline.session import VideoSession  # noqa: E402
from src.topics.client import TopicAnalysisClient  # noqa: E402

logger = logging.getLogger(__name__)


async def run(args: argparse.Namespace) -> int:
    session = VideoSession(chunk_timeout=settings.chunk_timeout_s)

    def _load_progress(fraction: float) -> None:
        print(f"Loading model... {fraction:.0%}", file=sys.stderr)

    def _progress(done: int, total: int) -> None:
        print(f"Transcribing... {done}/{total} ({done / total:.0%})", file=sys.stderr)

    try:
        await session.load_model(args.model, _load_progress)
    except Exception as e:
        logger.error("Error loading model %s: %s", args.model, e)
        return 1

    try:
        transcript = await session.transcribe_video(str(args.video), on_progress=_progress)
    except VideoTopicsError as e:
        logger.error("Processing error: %s", e)
        if session.transcript and args.output:
            args.output.write_text(session.transcript, encoding="utf-8")
            print(f"Saved partial transcript -> {args.output}", file=sys.stderr)
        return 1

    if args.output:
        args.output.write_text(transcript, encoding="utf-8")
        print(f"Saved transcript -> {args.output}", file=sys.stderr)
    else:
        print(transcript, end="")

    if args.analyze:
        client = TopicAnalysisClient(args.service_url, timeout=settings.topic_service_timeout)
        try:
            tree = await session.analyze(client)
        except VideoTopicsError as e:
            logger.error("Topic analysis error: %s", e)
            return 1
        print(f"Topic analysis complete: {len(tree.topics)} topics", file=sys.stderr)
        if args.mindmap:
            args.mindmap.write_text(json.dumps(tree.to_dict(), indent=2), encoding="utf-8")
            print(f"Saved mind map -> {args.mindmap}", file=sys.stderr)

    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Transcribe a video and map its topics")
    parser.add_argument("video", type=Path, help="Video or audio file")
    parser.add_argument("-o", "--output", type=Path, help="Transcript output file (default: stdout)")
    parser.add_argument("--model", default=settings.asr_model_id, help="ASR model id")
    parser.add_argument("--analyze", action="store_true", help="Run topic analysis on the transcript")
    parser.add_argument("--service-url", default=settings.topic_service_url, help="Topic service base URL")
    parser.add_argument("--mindmap", type=Path, help="Write the mind-map JSON here (with --analyze)")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not args.video.exists():
        print(f"Video file not found: {args.video}")
        sys.exit(1)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
