import asyncio
import logging
import re
from dataclasses import dataclass
from urllib.parse import quote, unquote

import httpx

from paper_digest.exceptions import DocumentFetchError
from paper_digest.utils import derive_title, parse_source_url

logger = logging.getLogger(__name__)

_HAS_EXTENSION = re.compile(r"\.[a-z0-9]+$", re.IGNORECASE)


@dataclass(frozen=True)
class Document:
    id: str
    text: str
    title: str
    source_url: str | None = None


def document_filename(identifier: str) -> str:
    """`paper-42` -> `paper-42.txt`; names that already have an extension are kept."""
    base_id = unquote(identifier)
    return base_id if _HAS_EXTENSION.search(base_id) else f"{base_id}.txt"


def companion_filename(filename: str) -> str:
    """Name of the file holding a document's canonical URL: `paper-42.txt` -> `paper-42.url`."""
    stem = filename.rsplit(".", 1)[0]
    return f"{stem}.url"


class DocumentFetcher:
    """
    Retrieves article text files stored under `base_url`.

    Pass `client` to reuse (or mock) an httpx.AsyncClient; otherwise one is
    opened per fetch.
    """

    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None, timeout: float = 60.0):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._client = client
        self._timeout = timeout

    async def _get_text(self, client: httpx.AsyncClient, identifier: str, filename: str) -> str:
        # Encoded path first, then the raw name
        urls = dict.fromkeys([self.base_url + quote(filename), self.base_url + filename])
        response = None
        for url in urls:
            try:
                response = await client.get(url)
            except httpx.HTTPError as e:
                raise DocumentFetchError(identifier, reason=str(e)) from e
            if response.is_success:
                return response.text
        raise DocumentFetchError(identifier, status=response.status_code)

    async def _fetch(self, client: httpx.AsyncClient, identifier: str, with_source_url: bool) -> Document:
        base_id = unquote(identifier)
        filename = document_filename(identifier)

        if with_source_url:
            # Independent requests; a missing URL file must not fail the document
            text, url_text = await asyncio.gather(
                self._get_text(client, base_id, filename),
                self._get_text(client, base_id, companion_filename(filename)),
                return_exceptions=True,
            )
            if isinstance(text, BaseException):
                raise text
            if isinstance(url_text, BaseException):
                logger.info("No source URL for '%s': %s", base_id, url_text)
                url_text = ""
        else:
            text = await self._get_text(client, base_id, filename)
            url_text = ""

        document = Document(
            id=base_id,
            text=text,
            title=derive_title(text, fallback=base_id),
            source_url=parse_source_url(url_text),
        )
        logger.info("Fetched '%s' (%d chars)", base_id, len(text))
        return document

    async def fetch(self, identifier: str, with_source_url: bool = True) -> Document:
        """
        Fetch a document by id. Raises DocumentFetchError when the text
        itself cannot be retrieved.
        """
        if self._client is not None:
            return await self._fetch(self._client, identifier, with_source_url)
        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
            return await self._fetch(client, identifier, with_source_url)
