NO_EVIDENCE = "NO EVIDENCE"
NO_NOTES = "(none)"

CHUNK_SEPARATOR = "\n\n---\n\n"
EVIDENCE_SEPARATOR = "\n\n"

SUMMARIZE_SYSTEM = """You summarize scientific articles for a general reader.
Be concise and factual. Keep key findings, methods, and numbers.
If the input is a list of chunk summaries, merge them into one summary without repeating points."""

QUESTION_SYSTEM = """You answer questions about a scientific article using only the text you are given.
Never invent facts that are not in the text."""


def summarize_chunk_payload(index: int, total: int, chunk: str) -> str:
    return f"(Chunk {index}/{total})\n{chunk}"


def summarize_synthesis_payload(partials: list[str]) -> str:
    return CHUNK_SEPARATOR.join(f"Chunk {i + 1}:\n{p}" for i, p in enumerate(partials))


def question_payload(question: str, text: str) -> str:
    return (
        f"Question: {question}\n\n"
        "Answer the question using the article below.\n\n"
        "=== ARTICLE START ===\n"
        f"{text}\n"
        "=== ARTICLE END ==="
    )


def evidence_payload(question: str, index: int, total: int, chunk: str) -> str:
    return (
        f"Question: {question}\n\n"
        f"Below is part {index} of {total} of a longer article. Using ONLY this part, "
        "extract the minimal facts or short direct quotes that help answer the question. "
        f"If this part contains nothing relevant, reply with exactly: {NO_EVIDENCE}\n\n"
        "=== ARTICLE START ===\n"
        f"{chunk}\n"
        "=== ARTICLE END ==="
    )


def answer_synthesis_payload(question: str, evidence: str) -> str:
    return (
        f"Question: {question}\n\n"
        "Notes extracted from different parts of the article:\n"
        f"{evidence}\n\n"
        "Synthesize these notes into one brief answer to the question. "
        "Do not invent anything that is not in the notes, merge duplicate points, "
        "and keep numeric details exactly as written. "
        f"If the notes are {NO_NOTES}, say that the article does not answer the question."
    )
