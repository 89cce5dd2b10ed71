"""
Dimension resolver for grid images.

Reads the natural pixel size of every image in a batch, concurrently.
Remote images are fetched with httpx, local uploads are opened with Pillow
in the default executor. Only the image header is decoded.

A load failure never reaches the caller: the image resolves to the 16:9
fallback size and the failure is logged.
"""

import asyncio
import logging
import os
from io import BytesIO
from functools import partial

import httpx
from PIL import Image

from layout.descriptors import (
    FALLBACK_HEIGHT, FALLBACK_WIDTH, ResolvedImage, normalize_descriptors,
)

DEFAULT_TIMEOUT_SECONDS = 10.0
UPLOADS_URL_PREFIX = '/uploads/'
# Remote bodies are read only up to the image header
FIRST_PARSE_BYTES = 64 * 1024
MAX_PROBE_BYTES = 32 * 1024 * 1024


def _read_size(source):
    """Return (width, height) from a path or file-like object."""
    with Image.open(source) as img:
        return img.size


def local_path_for(url, upload_dir=None):
    """Map an image URL to a path on disk.

    ``/uploads/<name>`` URLs resolve inside ``upload_dir``; anything else is
    treated as a filesystem path (``file://`` prefix stripped).
    """
    if url.startswith('file://'):
        return url[len('file://'):]
    if upload_dir and url.startswith(UPLOADS_URL_PREFIX):
        relative = url[len(UPLOADS_URL_PREFIX):]
        base = os.path.realpath(upload_dir)
        resolved = os.path.realpath(os.path.join(base, relative))
        if not resolved.startswith(base + os.sep):
            raise ValueError(f"Upload path escapes upload directory: {url}")
        return resolved
    return url


async def probe_dimensions(url, client=None, upload_dir=None, timeout=DEFAULT_TIMEOUT_SECONDS):
    """Natural (width, height) of the image at ``url``.

    Returns (FALLBACK_WIDTH, FALLBACK_HEIGHT) if the image cannot be fetched
    or decoded. Use ``probe`` to also learn whether the fallback was used.
    """
    size, _ = await probe(url, client=client, upload_dir=upload_dir, timeout=timeout)
    return size


async def probe(url, client=None, upload_dir=None, timeout=DEFAULT_TIMEOUT_SECONDS):
    """Return ((width, height), is_fallback) for the image at ``url``."""
    try:
        if url.startswith(('http://', 'https://')):
            if client is None:
                async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
                    width, height = await _probe_remote(own_client, url)
            else:
                width, height = await _probe_remote(client, url)
        else:
            path = local_path_for(url, upload_dir)
            loop = asyncio.get_running_loop()
            width, height = await loop.run_in_executor(None, partial(_read_size, path))
        if width <= 0 or height <= 0:
            raise ValueError(f"Degenerate image size {width}x{height}")
        return (width, height), False
    except (httpx.HTTPError, httpx.InvalidURL, OSError, ValueError,
            Image.DecompressionBombError) as e:
        logging.warning(f"Could not read dimensions of {url}, using {FALLBACK_WIDTH}x{FALLBACK_HEIGHT}: {e}")
        return (FALLBACK_WIDTH, FALLBACK_HEIGHT), True


async def _probe_remote(client, url):
    """Stream the body only until Pillow can read the size from its header."""
    async with client.stream('GET', url) as response:
        response.raise_for_status()
        buf = bytearray()
        next_attempt = FIRST_PARSE_BYTES
        async for chunk in response.aiter_bytes():
            buf.extend(chunk)
            if len(buf) >= next_attempt:
                try:
                    return _read_size(BytesIO(bytes(buf)))
                except OSError:
                    # Header not complete yet
                    next_attempt = len(buf) * 2
            if len(buf) > MAX_PROBE_BYTES:
                raise ValueError(f"No readable image header in the first {MAX_PROBE_BYTES} bytes")
    return _read_size(BytesIO(bytes(buf)))


class DimensionResolver:
    """
    Resolves descriptor batches into ResolvedImage lists.

    A batch is committed atomically once every probe in it has settled. When
    a newer batch starts before an older one finishes, the older results are
    discarded (its probes still run to completion).

    Usage:
        resolver = DimensionResolver(max_concurrency=8)
        images = await resolver.resolve(descriptors)
        ...
        await resolver.aclose()
    """

    def __init__(self, client=None, max_concurrency=None, upload_dir=None,
                 timeout=DEFAULT_TIMEOUT_SECONDS, dimension_cache=None):
        self._client = client
        self._owns_client = client is None
        self.max_concurrency = max_concurrency
        self.upload_dir = upload_dir
        self.timeout = timeout

        self._generation = 0
        self._committed_source = None
        self._resolved = []
        # url -> (width, height); only successful probes are kept. May be
        # shared between resolvers.
        self._dimension_cache = dimension_cache if dimension_cache is not None else {}

    @property
    def resolved(self):
        """Last committed batch (empty before the first commit)."""
        return list(self._resolved)

    @property
    def client(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def resolve(self, descriptors):
        """Resolve a descriptor list, in ``order`` sequence.

        Returns the committed ResolvedImage list, or None when this batch was
        superseded by a newer call before it finished.
        """
        descriptors = normalize_descriptors(descriptors)
        source = tuple(descriptors)
        # Every call supersedes any batch still in flight, including a
        # call that returns the committed list unchanged
        self._generation += 1
        generation = self._generation
        if source == self._committed_source:
            return self.resolved

        if descriptors:
            semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
            results = await asyncio.gather(
                *(self._resolve_one(d, semaphore) for d in descriptors)
            )
        else:
            results = []

        if generation != self._generation:
            logging.info(f"Discarding superseded dimension batch {generation} "
                         f"(current {self._generation})")
            return None

        self._committed_source = source
        self._resolved = list(results)
        return self.resolved

    async def _resolve_one(self, descriptor, semaphore):
        cached = self._dimension_cache.get(descriptor.url)
        if cached is not None:
            return ResolvedImage(descriptor, *cached)

        if semaphore is None:
            size, is_fallback = await self._probe(descriptor.url)
        else:
            async with semaphore:
                size, is_fallback = await self._probe(descriptor.url)

        if is_fallback:
            return ResolvedImage.fallback(descriptor)
        self._dimension_cache[descriptor.url] = size
        return ResolvedImage(descriptor, *size)

    async def _probe(self, url):
        client = self.client if url.startswith(('http://', 'https://')) else None
        return await probe(url, client=client, upload_dir=self.upload_dir, timeout=self.timeout)

    def forget(self, url=None):
        """Drop memoized dimensions for ``url`` (or all of them)."""
        if url is None:
            self._dimension_cache.clear()
        else:
            self._dimension_cache.pop(url, None)
        self._committed_source = None

    async def aclose(self):
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
