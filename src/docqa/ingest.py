"""
Ingestion entry point: PDF files -> extractor -> document manager.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from pydantic import BaseModel, Field

from docqa.errors import ExtractionFailure, IngestionFailure
from docqa.extraction.pdf import PDFExtractor
from docqa.rag.manager import DocumentManager, IngestOutcome
from docqa.utils.config import load_config
from docqa.utils.logging import configure_logging

logger = logging.getLogger(__name__)


class IngestSummary(BaseModel):
    """Per-file outcomes of an ingestion run."""
    succeeded: list[IngestOutcome] = Field(default_factory=list)
    failed: list[IngestOutcome] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


async def ingest_files(
    paths: Sequence[str | Path],
    extractor: PDFExtractor,
    manager: DocumentManager,
) -> IngestSummary:
    """
    Extract and ingest each file in turn.

    A file that cannot be extracted or ingested is logged and recorded as
    failed; the remaining files are still processed.

    Args:
        paths: Files to ingest
        extractor: PDF extractor
        manager: Initialized document manager

    Returns:
        IngestSummary
    """
    summary = IngestSummary()
    loop = asyncio.get_event_loop()

    for path in paths:
        try:
            extracted = await loop.run_in_executor(None, extractor.extract, path)
            point_ids = await manager.ingest(extracted.to_source_document())
        except (ExtractionFailure, IngestionFailure) as e:
            logger.warning(f"Skipping '{path}': {e}")
            summary.failed.append(IngestOutcome(source=str(path), error=str(e)))
            continue

        summary.succeeded.append(IngestOutcome(source=str(path), point_ids=point_ids))

    logger.info(
        f"Ingestion finished: {len(summary.succeeded)} succeeded, "
        f"{len(summary.failed)} failed"
    )
    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docqa-ingest",
        description="Ingest PDF files into the docqa knowledge base.",
    )
    parser.add_argument("paths", nargs="+", help="PDF files to ingest")
    parser.add_argument(
        "--config",
        default="docqa.yaml",
        help="Settings file (YAML or JSON); missing files fall back to defaults",
    )
    return parser


async def _run(paths: list[str], config_path: str) -> IngestSummary:
    from docqa.app import Application

    settings = load_config(config_path)
    configure_logging(settings.log_level)

    app = await Application.create(settings)
    return await app.ingest_files(paths)


def main(argv: Sequence[str] | None = None) -> int:
    """Console entry point. Returns 1 when any file failed."""
    args = build_parser().parse_args(argv)
    summary = asyncio.run(_run(args.paths, args.config))

    for outcome in summary.failed:
        print(f"FAILED {outcome.source}: {outcome.error}", file=sys.stderr)
    print(f"{len(summary.succeeded)} ingested, {len(summary.failed)} failed")

    return 0 if summary.ok else 1


if __name__ == "__main__":
    sys.exit(main())
