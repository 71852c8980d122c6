"""
Detecting the package's own version.

The codebase does not contain the version directly, as it would require
code changes on every release. The version is determined only once
at startup when the code is loaded, and is used for self-identification
in the User-Agent header of the API requests.
"""
from typing import Optional

version: Optional[str] = None

try:
    import importlib.metadata
except ImportError:
    pass
else:
    try:
        name, *_ = __name__.split('.')  # usually "kubeobjects", unless renamed/forked.
        version = importlib.metadata.version(name)
    except Exception:
        pass  # not installed, e.g. used from a source checkout.
