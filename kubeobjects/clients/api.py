"""
The low-level HTTP requests to the API, with no knowledge of the resources.

The routines here accept the URLs relative to the server's root, and add
the server from the context. The responses are checked for the API errors
(see :mod:`errors`), but are neither parsed nor closed: this is the business
of the callers, which know what to expect in the response bodies.

There are no retries: any failure is escalated to the callers immediately.
"""
import json
import logging
from typing import Any, AsyncIterator, Mapping, Optional

import aiohttp

from kubeobjects.clients import auth, errors
from kubeobjects.helpers import typedefs
from kubeobjects.structs import configuration

logger = logging.getLogger(__name__)


async def request(
        method: str,
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger = logger,
) -> aiohttp.ClientResponse:

    if '://' not in url:
        url = context.server.rstrip('/') + '/' + url.lstrip('/')

    if timeout is None:
        timeout = aiohttp.ClientTimeout(
            total=settings.networking.request_timeout,
            sock_connect=settings.networking.connect_timeout,
        )

    what = f"{method.upper()} {url}"
    logger.debug(f"Request: {what}" + (f" with {dict(params)!r}" if params else ""))
    try:
        response = await context.session.request(
            method=method,
            url=url,
            params=params,
            json=payload,
            headers=headers,
            timeout=timeout,
        )
        await errors.check_response(response)  # but do not parse it!
    except errors.APIError as e:
        logger.debug(f"Request failed: {what} -> HTTP {e.status} {e.message or ''}".rstrip())
        raise

    context.add_response(response)
    return response


async def get(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        logger: typedefs.Logger = logger,
) -> Any:
    response = await request(
        method='get',
        url=url,
        headers=headers,
        params=params,
        context=context,
        settings=settings,
        logger=logger,
    )
    async with response:
        return await response.json(content_type=None)


async def iter_jsonlines(
        content: aiohttp.StreamReader,
        chunk_size: int = 1024 * 1024,
) -> AsyncIterator[bytes]:
    """
    Iterate line by line over the response's content.

    Usage::

        async for line in iter_jsonlines(response.content):
            pass

    This is an equivalent of::

        async for line in response.content:
            pass

    Except that the aiohttp's line iteration fails if the accumulated buffer
    length is above 2**17 bytes, i.e. 128 KB (`aiohttp.streams.DEFAULT_LIMIT`
    for the buffer's low-watermark, multiplied by 2 for the high-watermark).
    The objects (e.g. secrets or configmaps) can be much longer, up to MBs.

    The chunk size of 1MB is an empirical guess for keeping the memory footprint
    reasonably low on huge amount of small lines (limited to 1 MB in total),
    while ensuring the near-instant reads of the huge lines (can be a problem
    with a small chunk size due to too many iterations).
    """

    # Minimize the memory footprint by keeping at most 2 copies of a yielded line in memory
    # (in the buffer and as a yielded value), and at most 1 copy of other lines (in the buffer).
    buffer = b''
    async for data in content.iter_chunked(chunk_size):
        buffer += data
        del data

        start = 0
        index = buffer.find(b'\n', start)
        while index >= 0:
            line = buffer[start:index]
            if line.strip():
                yield line
            del line
            start = index + 1
            index = buffer.find(b'\n', start)

        if start > 0:
            buffer = buffer[start:]

    if buffer.strip():
        yield buffer


def parse_jsonline(line: bytes) -> Any:
    """ Parse one line of a stream, or fail with a stream-specific error. """
    try:
        return json.loads(line.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise errors.StreamDecodeError(line, str(e)) from e
