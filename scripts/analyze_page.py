"""
Run one page analysis from CLI and print the result JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import replace

from page_analyzer.config import PAGE_LOADER_PLAYWRIGHT, PAGE_LOADER_STATIC, get_analyzer_settings
from page_analyzer.errors import PageAnalyzerError
from page_analyzer.logging_utils import describe_error
from page_analyzer.services.analysis_orchestrator_service import (
    AsyncioTaskExecutor,
    build_analysis_orchestrator_service,
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Extract links, icons and locators from one page.")
    parser.add_argument("url", help="Page URL to analyze.")
    parser.add_argument(
        "--loader",
        dest="loader",
        choices=[PAGE_LOADER_PLAYWRIGHT, PAGE_LOADER_STATIC],
        default=None,
        help="Override the PAGE_LOADER setting.",
    )
    args = parser.parse_args()

    settings = get_analyzer_settings()
    if args.loader:
        settings = replace(settings, page_loader=args.loader)
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    service = build_analysis_orchestrator_service(settings=settings, executor=AsyncioTaskExecutor())
    try:
        result = asyncio.run(service.analyze(args.url))
    except PageAnalyzerError as exc:
        print(json.dumps({"status": "failed", "error": describe_error(exc)}, indent=2))
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
