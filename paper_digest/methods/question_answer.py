import logging

from paper_digest.config import DEFAULT_CHUNK_LIMIT
from paper_digest.prompts import (
    EVIDENCE_SEPARATOR,
    NO_EVIDENCE,
    NO_NOTES,
    QUESTION_SYSTEM,
    answer_synthesis_payload,
    evidence_payload,
    question_payload,
)
from paper_digest.utils import chunk_text

logger = logging.getLogger(__name__)


def has_evidence(partial: str) -> bool:
    """A partial carries evidence unless it is empty or opens with NO EVIDENCE (any case)."""
    text = partial.strip()
    return bool(text) and not text.upper().startswith(NO_EVIDENCE)


def evidence_blocks(partials: list[str]) -> str:
    """Join the evidence-bearing partials, or return "(none)" if there are none."""
    kept = [p.strip() for p in partials if has_evidence(p)]
    return EVIDENCE_SEPARATOR.join(kept) if kept else NO_NOTES


class EvidenceQA:
    name = "Evidence QA"

    def __init__(self, model, chunk_limit: int = DEFAULT_CHUNK_LIMIT):
        self.model = model
        self.chunk_limit = chunk_limit

    async def answer(self, full_text: str, question: str) -> str:
        """
        Answer a question about a document of any length.

        Long documents go through a map phase that asks each chunk for
        evidence (or NO EVIDENCE), then a single synthesis call over the
        evidence that survived filtering.
        """
        if len(full_text) <= self.chunk_limit:
            logger.info("Answering over %d chars in a single call", len(full_text))
            payload = question_payload(question, full_text)
            return (await self.model.invoke(QUESTION_SYSTEM, payload)).strip()

        chunks = chunk_text(full_text, self.chunk_limit)
        logger.info("Collecting evidence from %d chunks", len(chunks))

        partials = []
        for i, chunk in enumerate(chunks):
            payload = evidence_payload(question, i + 1, len(chunks), chunk)
            partials.append((await self.model.invoke(QUESTION_SYSTEM, payload)).strip())

        evidence = evidence_blocks(partials)
        if evidence == NO_NOTES:
            logger.info("No chunk produced evidence")
        else:
            logger.debug("%d of %d chunks produced evidence",
                         sum(1 for p in partials if has_evidence(p)), len(partials))

        synthesis = answer_synthesis_payload(question, evidence)
        return (await self.model.invoke(QUESTION_SYSTEM, synthesis)).strip()
