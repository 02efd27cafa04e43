import re
import time
import warnings
from functools import lru_cache
from urllib.parse import urlparse

import tiktoken


# --- Chunking ---------------------------------------------------------------
def chunk_text(text: str, target: int) -> list[str]:
    """
    Split text into consecutive chunks of at most `target` characters.

    A chunk prefers to end right before a line break, as long as that line
    break lies past 60% of the window; otherwise the window is cut mid-line.
    The line break itself opens the next chunk, so "".join(chunks) == text.
    """
    if target <= 0:
        raise ValueError(f"target must be positive, got {target}")

    chunks = []
    position = 0
    text_len = len(text)
    min_break = int(target * 0.6)

    while position < text_len:
        end = min(position + target, text_len)
        if end < text_len:
            # rfind's end bound is exclusive, so +1 also checks the edge itself
            nl = text.rfind("\n", position, end + 1)
            if nl > position + min_break:
                end = nl
        chunks.append(text[position:end])
        position = end

    return chunks


# --- Titles / URLs ----------------------------------------------------------
# " - PMC", " | Nature Astronomy", " — arXiv": a short capitalized site name ending the line
_SITE_SUFFIX = re.compile(
    r"\s+[-|–—]\s+(?:arXiv|bioRxiv|medRxiv|[A-Z][\w.&']*(?:\s+[A-Z][\w.&']*){0,3})\s*$"
)
_BARE_DOMAIN = re.compile(r"^(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z]{2,}(?:[/?#]\S*)?$", re.IGNORECASE)


def collapse_whitespace(s: str) -> str:
    """Strip and collapse runs of whitespace into single spaces."""
    if s is None:
        return ""
    return re.sub(r"\s+", " ", s).strip()


def first_nonblank_line(text: str) -> str | None:
    for line in (text or "").splitlines():
        if line.strip():
            return line.strip()
    return None


def derive_title(text: str, fallback: str) -> str:
    """
    Title of a document: its first non-blank line without the trailing
    source-site annotation. Falls back to `fallback` (usually the id).
    """
    line = first_nonblank_line(text)
    if line is None:
        return fallback
    title = collapse_whitespace(_SITE_SUFFIX.sub("", line))
    return title or fallback


def make_excerpt(text: str, length: int = 200) -> str:
    """Opening words of the body (title line skipped), cut at a word boundary."""
    lines = (text or "").strip().splitlines()
    body = collapse_whitespace(" ".join(lines[1:])) or collapse_whitespace(" ".join(lines))
    if len(body) <= length:
        return body
    cut = body[:length].rsplit(" ", 1)[0]
    return cut + "…"


def parse_source_url(text: str) -> str | None:
    """Return the first non-blank line as a URL if it looks like one."""
    line = first_nonblank_line(text)
    if line is None:
        return None
    candidate = line.split()[0]

    parsed = urlparse(candidate)
    if parsed.scheme in ("http", "https"):
        return candidate if parsed.netloc else None
    if _BARE_DOMAIN.match(candidate):
        return f"https://{candidate}"
    return None


# --- Token estimate ---------------------------------------------------------
@lru_cache(maxsize=4)
def _encoding(name: str):
    return tiktoken.get_encoding(name)


def count_tokens(text: str, encoding: str = "cl100k_base") -> int:
    """
    Estimated token count for display purposes. Chunking never depends on it.
    Falls back to ~4 chars/token when the encoding cannot be loaded.
    """
    if not text:
        return 0
    try:
        return len(_encoding(encoding).encode(text))
    except Exception as e:
        warnings.warn(f"Using crude character-based token estimate ({e}).")
        return max(1, int(len(text) / 4))


# --- timing / traces --------------------------------------------------------
async def timed_await(fn, *args, **kwargs):
    """Await fn(*args, **kwargs), return (result, latency_ms)."""
    t0 = time.perf_counter()
    res = await fn(*args, **kwargs)
    t1 = time.perf_counter()
    return res, int((t1 - t0) * 1000)


def ensure_trace(
    text: str,
    prompt: str,
    provider: str,
    model: str,
    ok: bool = True,
    latency_ms: int | None = None,
) -> dict:
    """
    Normalize a trace dictionary for a model call. Only sizes and timing are
    kept, never the prompt or response themselves.
    """
    if latency_ms is None:
        latency_ms = -1

    return {
        "provider": provider,
        "model": model or provider,
        "ok": bool(ok),
        "latency_ms": int(latency_ms),
        "input_chars": len(prompt or ""),
        "output_chars": len(text or ""),
    }
