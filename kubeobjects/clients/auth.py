import base64
import contextlib
import os
import ssl
import tempfile
from typing import Dict, List, Optional, Union

import aiohttp

from kubeobjects.helpers import versions
from kubeobjects.structs import credentials

_PathLike = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]


class APIContext:
    """
    A container for an aiohttp session and the environment info of the API.

    The context is constructed either from the connection info, in which case
    it owns the session and closes it at the end, or from a caller-provided
    session, in which case the session is only borrowed and is not closed.

    We assume that the whole client runs in the same event loop, so there is
    no need to split the sessions for multiple loops.
    """

    # The main contained object used by the API methods.
    session: aiohttp.ClientSession

    # Contextual information for URL building.
    server: str
    default_namespace: Optional[str]

    # List of open responses.
    responses: List[aiohttp.ClientResponse]

    def __init__(
            self,
            info: Optional[credentials.ConnectionInfo] = None,
            *,
            session: Optional[aiohttp.ClientSession] = None,
            server: Optional[str] = None,
            default_namespace: Optional[str] = None,
    ) -> None:
        super().__init__()

        if info is not None and session is None:
            self.session = self.make_aiohttp_session(info)
            self.server = info.server
            self.default_namespace = info.default_namespace
            self._owned = True
        elif info is None and session is not None and server is not None:
            self.session = session
            self.server = server
            self.default_namespace = default_namespace
            self._owned = False
        else:
            raise TypeError("Either the connection info, or a session with a server are required.")

        # It is a good practice to self-identify a bit, even with a user-provided session.
        if self.session.headers.get('User-Agent') is None:
            self.session.headers['User-Agent'] = f'kubeobjects/{versions.version or "unknown"}'

        self.responses = []

    def make_aiohttp_session(self, info: credentials.ConnectionInfo) -> aiohttp.ClientSession:

        # Some SSL data are not accepted directly, so we have to use temp files.
        # Do not even create temporary files if there is no need. It can be a readonly filesystem.
        with contextlib.ExitStack() as stack:

            cert_path: Optional[_PathLike]
            if info.certificate_path:
                cert_path = info.certificate_path
            elif info.certificate_data:
                cert_file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
                cert_file.write(decode_to_pem(info.certificate_data).encode('ascii'))
                cert_path = cert_file.name
            else:
                cert_path = None

            pkey_path: Optional[_PathLike]
            if info.private_key_path:
                pkey_path = info.private_key_path
            elif info.private_key_data:
                pkey_file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
                pkey_file.write(decode_to_pem(info.private_key_data).encode('ascii'))
                pkey_path = pkey_file.name
            else:
                pkey_path = None

            # The SSL part (both client certificate auth and CA verification).
            context = ssl.create_default_context(
                purpose=ssl.Purpose.SERVER_AUTH,
                cafile=info.ca_path,
                cadata=decode_to_pem(info.ca_data) if info.ca_data is not None else None,
            )
            if cert_path and pkey_path:
                context.load_cert_chain(certfile=cert_path, keyfile=pkey_path)

        if info.insecure:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        # The token auth part.
        headers: Dict[str, str] = {}
        if info.scheme and info.token:
            headers['Authorization'] = f'{info.scheme} {info.token}'
        elif info.scheme:
            headers['Authorization'] = f'{info.scheme}'
        elif info.token:
            headers['Authorization'] = f'Bearer {info.token}'

        # The basic auth part.
        auth: Optional[aiohttp.BasicAuth]
        if info.username and info.password:
            auth = aiohttp.BasicAuth(info.username, info.password)
        else:
            auth = None

        return aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=0,
                ssl=context,
            ),
            headers=headers,
            auth=auth,
        )

    def add_response(self, response: aiohttp.ClientResponse) -> None:
        # Keep track of the responses, so that they can be closed together with the session.
        self.responses[:] = [_response for _response in self.responses if not _response.closed]
        if not response.closed:
            self.responses.append(response)

    def close_open_responses(self) -> None:
        for response in self.responses:
            if not response.closed:
                response.close()
        self.responses.clear()

    async def close(self) -> None:
        self.close_open_responses()
        if self._owned:
            await self.session.close()


def decode_to_pem(data: Union[str, bytes]) -> str:
    if isinstance(data, str) and data.startswith('-----BEGIN '):
        return data
    elif isinstance(data, bytes) and data.startswith(b'-----BEGIN '):
        return data.decode('ascii')
    else:
        return base64.b64decode(data).decode('ascii')
