from __future__ import annotations

from loguru import logger

from tubegrab.application.dto import DeliveryKind, PreparedDownload
from tubegrab.application.merge_executor import MergeExecutor
from tubegrab.application.orchestrator import ExtractionOrchestrator
from tubegrab.domain.errors import ValidationError
from tubegrab.domain.models import FormatCatalog
from tubegrab.domain.normalizer import readable_size


class DownloadService:
    """
    Catalog lookups and download preparation for the HTTP layer.

    Video formats go through the merge executor; audio-only formats
    (including the synthetic mp3 entry) are handed back as direct links.
    """

    def __init__(self, *, orchestrator: ExtractionOrchestrator, merger: MergeExecutor) -> None:
        self._orchestrator = orchestrator
        self._merger = merger

    async def get_catalog(self, url: str) -> FormatCatalog:
        logger.info("Processing download request for URL: {}", url)
        catalog = await self._orchestrator.resolve(url)
        logger.info("Successfully extracted info for: {}", catalog.title)
        return catalog

    async def prepare_download(self, url: str, format_id: str) -> PreparedDownload:
        resolution = await self._orchestrator.run(url)
        catalog = resolution.catalog
        fmt = catalog.find(format_id)
        if fmt is None:
            raise ValidationError(f"Format with ID {format_id} not found", code="FORMAT_NOT_FOUND")

        if not fmt.has_video:
            return PreparedDownload(
                kind=DeliveryKind.DIRECT,
                format_id=fmt.format_id,
                title=catalog.title,
                ext=fmt.ext,
                file_size=fmt.readable_size,
                direct_url=fmt.source_url,
            )

        logger.info("Format {} is being processed for download", format_id)
        path = await self._merger.merge(resolution.url, format_id, catalog)
        return PreparedDownload(
            kind=DeliveryKind.MERGED,
            format_id=fmt.format_id,
            title=catalog.title,
            ext="mp4",
            file_size=readable_size(path.stat().st_size),
            file_path=path,
        )
