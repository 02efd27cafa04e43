import logging

from paper_digest.config import DEFAULT_CHUNK_LIMIT
from paper_digest.prompts import SUMMARIZE_SYSTEM, summarize_chunk_payload, summarize_synthesis_payload
from paper_digest.utils import chunk_text

logger = logging.getLogger(__name__)


class MapReduceSummarizer:
    name = "Map-Reduce Summary"

    def __init__(self, model, chunk_limit: int = DEFAULT_CHUNK_LIMIT):
        self.model = model
        self.chunk_limit = chunk_limit

    async def summarize(self, full_text: str) -> str:
        """
        Summarize a document of any length.

        Short documents take a single call. Longer ones are chunked, each
        chunk is summarized in order (one call at a time), and a final call
        merges the partial summaries. A failed call contributes the failure
        sentinel instead of aborting the run.
        """
        if len(full_text) <= self.chunk_limit:
            logger.info("Summarizing %d chars in a single call", len(full_text))
            return (await self.model.invoke(SUMMARIZE_SYSTEM, full_text)).strip()

        chunks = chunk_text(full_text, self.chunk_limit)
        logger.info("Summarizing %d chars as %d chunks", len(full_text), len(chunks))

        # Map phase: strictly sequential so partial i always belongs to chunk i
        partials = []
        for i, chunk in enumerate(chunks):
            logger.debug("Summarizing chunk %d/%d (%d chars)", i + 1, len(chunks), len(chunk))
            payload = summarize_chunk_payload(i + 1, len(chunks), chunk)
            partials.append((await self.model.invoke(SUMMARIZE_SYSTEM, payload)).strip())

        # Reduce phase
        synthesis = summarize_synthesis_payload(partials)
        return (await self.model.invoke(SUMMARIZE_SYSTEM, synthesis)).strip()
