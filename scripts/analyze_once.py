# scripts/analyze_once.py
"""
一次性分析（不經過 HTTP）：

    python -m scripts.analyze_once --mode text "Water, Glycerin, Niacinamide, Phenoxyethanol"
    python -m scripts.analyze_once --mode image --mime-type image/png --file label.png
"""
import argparse
import asyncio
import base64
import json
import sys

from app.core.errors import RelayError
from app.core.logging import setup_logging
from app.schemas.analysis import AnalysisMode, AnalysisRequest
from app.services.relay import get_analysis_relay


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run one skincare ingredient analysis")
    parser.add_argument("--mode", choices=[m.value for m in AnalysisMode], default=AnalysisMode.text.value)
    parser.add_argument("--mime-type", dest="mime_type", default=None, help="image media type (image mode only)")
    parser.add_argument("--file", default=None, help="read content from a file (image files are base64-encoded)")
    parser.add_argument("content", nargs="?", default=None, help="text, product name or base64 image")
    args = parser.parse_args(argv)
    if not args.content and not args.file:
        parser.error("either content or --file is required")
    return args


def load_content(args) -> str:
    if not args.file:
        return args.content
    if args.mode == AnalysisMode.image.value:
        with open(args.file, "rb") as f:
            return base64.b64encode(f.read()).decode()
    with open(args.file, "r", encoding="utf-8") as f:
        return f.read()


async def main(argv=None) -> int:
    args = parse_args(argv)
    request = AnalysisRequest(mode=args.mode, content=load_content(args), mime_type=args.mime_type)
    relay = get_analysis_relay()
    try:
        result = await relay.analyze(request)
    except RelayError as e:
        print(json.dumps(e.to_content(), ensure_ascii=False, indent=2), file=sys.stderr)
        return 1
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    setup_logging(level="WARNING")
    sys.exit(asyncio.run(main()))
