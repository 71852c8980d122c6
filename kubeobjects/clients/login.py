"""
Rudimentary login to the API with the standard configuration sources.

The client is not an authentication library, and avoids bringing too much logic
for proper authentication, especially all the complex auth-providers.
Only the raw credentials are taken from the configs, with no token refreshes.
For anything more sophisticated, construct a :class:`ConnectionInfo` directly.

.. seealso::
    :mod:`kubeobjects.structs.credentials` and :mod:`kubeobjects.clients.auth`.
"""
import logging
import os
from typing import Any, Dict, Optional

import yaml

from kubeobjects.helpers import typedefs
from kubeobjects.structs import credentials

logger = logging.getLogger(__name__)

# Keep as constants to make them patchable in tests.
# As per https://kubernetes.io/docs/tasks/run-application/access-api-from-pod/
SERVICE_ACCOUNT_DIR = '/var/run/secrets/kubernetes.io/serviceaccount'
SERVICE_ACCOUNT_SERVER = 'https://kubernetes.default.svc'
DEFAULT_KUBECONFIG = '~/.kube/config'


def login(
        *,
        context: Optional[str] = None,
        logger: typedefs.Logger = logger,
) -> credentials.ConnectionInfo:
    """
    Login in-cluster with a service account, or with a kubeconfig file otherwise.
    """
    info = None if context is not None else login_with_service_account()
    if info is not None:
        logger.debug("Client is configured in cluster with service account.")
        return info

    info = login_with_kubeconfig(context=context)
    if info is not None:
        logger.debug("Client is configured via kubeconfig file.")
        return info

    raise credentials.LoginError("Cannot authenticate neither in-cluster, nor via kubeconfig.")


def has_service_account() -> bool:
    return os.path.exists(os.path.join(SERVICE_ACCOUNT_DIR, 'token'))


def login_with_service_account(**_: Any) -> Optional[credentials.ConnectionInfo]:
    """
    A minimalistic login that can get raw data from a service account.

    No parsing or sophisticated multi-step token retrieval is performed.
    """
    token_path = os.path.join(SERVICE_ACCOUNT_DIR, 'token')
    ns_path = os.path.join(SERVICE_ACCOUNT_DIR, 'namespace')
    ca_path = os.path.join(SERVICE_ACCOUNT_DIR, 'ca.crt')

    if os.path.exists(token_path):
        with open(token_path, encoding='utf-8') as f:
            token = f.read().strip()

        namespace: Optional[str] = None
        if os.path.exists(ns_path):
            with open(ns_path, encoding='utf-8') as f:
                namespace = f.read().strip()

        return credentials.ConnectionInfo(
            server=SERVICE_ACCOUNT_SERVER,
            ca_path=ca_path if os.path.exists(ca_path) else None,
            token=token or None,
            default_namespace=namespace or None,
        )
    else:
        return None


def has_kubeconfig() -> bool:
    env_var_set = bool(os.environ.get('KUBECONFIG'))
    file_exists = os.path.exists(os.path.expanduser(DEFAULT_KUBECONFIG))
    return env_var_set or file_exists


def login_with_kubeconfig(
        *,
        context: Optional[str] = None,
        **_: Any,
) -> Optional[credentials.ConnectionInfo]:
    """
    A minimalistic login that can get raw data from a kubeconfig file.

    The context is the current one, unless explicitly specified by name.
    Its namespace becomes the default namespace of the client.
    """

    # As per https://kubernetes.io/docs/concepts/configuration/organize-cluster-access-kubeconfig/
    kubeconfig = os.environ.get('KUBECONFIG')
    if not kubeconfig and os.path.exists(os.path.expanduser(DEFAULT_KUBECONFIG)):
        kubeconfig = DEFAULT_KUBECONFIG
    if not kubeconfig:
        return None

    paths = [path.strip() for path in kubeconfig.split(os.pathsep)]
    paths = [os.path.expanduser(path) for path in paths if path]

    # As prescribed: if the file is absent or non-deserialisable, then fail. The first value wins.
    current_context: Optional[str] = None
    contexts: Dict[Any, Any] = {}
    clusters: Dict[Any, Any] = {}
    users: Dict[Any, Any] = {}
    for path in paths:

        with open(path, encoding='utf-8') as f:
            config = yaml.safe_load(f.read()) or {}

        if current_context is None:
            current_context = config.get('current-context')
        for item in config.get('contexts') or []:
            if item['name'] not in contexts:
                contexts[item['name']] = item.get('context') or {}
        for item in config.get('clusters') or []:
            if item['name'] not in clusters:
                clusters[item['name']] = item.get('cluster') or {}
        for item in config.get('users') or []:
            if item['name'] not in users:
                users[item['name']] = item.get('user') or {}

    # Once fully parsed, use the selected context only.
    context = context if context is not None else current_context
    if context is None:
        raise credentials.LoginError('Current context is not set in kubeconfigs.')
    if context not in contexts:
        raise credentials.LoginError(f'Context {context!r} is not found in kubeconfigs.')
    ctx = contexts[context]
    if ctx.get('cluster') not in clusters:
        raise credentials.LoginError(f'Cluster {ctx.get("cluster")!r} is not found in kubeconfigs.')
    cluster = clusters[ctx['cluster']]
    user = users.get(ctx.get('user'), {})

    # We do not make a fake API request to refresh the token: take it as is.
    provider_token = (user.get('auth-provider') or {}).get('config', {}).get('access-token')

    # Map the retrieved fields into the credentials object.
    return credentials.ConnectionInfo(
        server=cluster.get('server'),
        ca_path=cluster.get('certificate-authority'),
        ca_data=cluster.get('certificate-authority-data'),
        insecure=cluster.get('insecure-skip-tls-verify'),
        certificate_path=user.get('client-certificate'),
        certificate_data=user.get('client-certificate-data'),
        private_key_path=user.get('client-key'),
        private_key_data=user.get('client-key-data'),
        username=user.get('username'),
        password=user.get('password'),
        token=user.get('token') or provider_token,
        default_namespace=ctx.get('namespace'),
    )
