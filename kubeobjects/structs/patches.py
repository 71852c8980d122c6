"""
All the structures needed for Kubernetes patching.

The patch semantics are selected by the request's Content-Type header,
one of the four media types supported by the API:

* JSON-patch (RFC 6902): an ordered list of diff-like operations.
* JSON merge-patch (RFC 7386): a dict with field overrides, ``None`` for deletions.
* Strategic merge-patch: a merge with per-field strategies known to the server
  (e.g. lists of containers are merged by names, not replaced as a whole).
* Server-side apply: a full or partial intended object owned by a field manager.

.. seealso::
    https://kubernetes.io/docs/tasks/manage-kubernetes-objects/update-api-object-kubectl-patch/
"""
import enum
from typing import Any, List, Mapping, Optional, Union

from typing_extensions import Literal, TypedDict

JSONPatchOp = Literal["add", "remove", "replace", "move", "copy", "test"]


# The functional syntax is needed for the "from" key (a keyword), used in "move" & "copy".
JSONPatchItem = TypedDict('JSONPatchItem', {
    'op': JSONPatchOp,
    'path': str,
    'value': Optional[Any],
    'from': str,
}, total=False)


JSONPatch = List[JSONPatchItem]

# Any patch payload: a JSON-patch list for JSON_PATCH, a (partial) body for everything else.
PatchBody = Union[JSONPatch, Mapping[str, Any]]


class PatchStrategy(str, enum.Enum):
    """ The patch media types, as sent in the Content-Type header. """
    JSON_PATCH = 'application/json-patch+json'
    MERGE_PATCH = 'application/merge-patch+json'
    STRATEGIC_MERGE_PATCH = 'application/strategic-merge-patch+json'
    APPLY = 'application/apply-patch+yaml'

    @classmethod
    def from_content_type(cls, content_type: str) -> Optional["PatchStrategy"]:
        """ Recognise the strategy by a header value, ignoring the parameters & case. """
        media_type = content_type.split(';', 1)[0].strip().lower()
        for strategy in cls:
            if strategy.value == media_type:
                return strategy
        return None

    @property
    def supports_force(self) -> bool:
        return self is PatchStrategy.APPLY


DEFAULT_PATCH_STRATEGY = PatchStrategy.STRATEGIC_MERGE_PATCH
