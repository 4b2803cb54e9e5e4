"""Best-effort play-count retrieval.

Play counts only need to be as complete as the listen-count service allows:
a failed page stops pagination but keeps everything fetched before it, and
the job carries on with the partial data.
"""

import asyncio

from attrs import define

from underplayed.config import get_logger
from underplayed.domain.entities import PlayCountRecord
from underplayed.domain.repositories import ListenCountSourceProtocol

logger = get_logger(__name__)


@define(slots=True)
class ListenCountFetcher:
    """Pages through a user's top tracks with a fixed delay between requests."""

    source: ListenCountSourceProtocol
    page_size: int = 50
    request_delay: float = 0.2
    max_pages: int | None = None

    async def fetch_all(self) -> list[PlayCountRecord]:
        """Fetch play-count records until the source is exhausted.

        Never raises for source failures; returns whatever was collected.
        """
        records: list[PlayCountRecord] = []
        pages = self.source.iter_top_track_pages(self.page_size)
        page_number = 0

        try:
            while self.max_pages is None or page_number < self.max_pages:
                if page_number and self.request_delay > 0:
                    await asyncio.sleep(self.request_delay)

                try:
                    page = await anext(pages)
                except StopAsyncIteration:
                    break
                except Exception as e:
                    logger.warning(
                        f"Listen-count page {page_number + 1} failed, "
                        f"keeping {len(records)} records from earlier pages: {e}"
                    )
                    break

                records.extend(page)
                page_number += 1
                logger.debug(
                    f"Fetched listen-count page {page_number}: {len(page)} records"
                )
        finally:
            aclose = getattr(pages, "aclose", None)
            if aclose is not None:
                await aclose()

        logger.info(f"Fetched {len(records)} play-count records in {page_number} pages")
        return records
