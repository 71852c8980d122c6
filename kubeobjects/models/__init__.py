"""
Typed shapes of the most common API objects.

Only a minimal set of shapes ships with the client: the metadata & statuses
used by the client itself, plus a few core kinds for convenience.
All other resources are handled as generic dicts (the raw bodies),
unless their shapes are registered by the users::

    import dataclasses
    from typing import Any, Dict, Optional
    from kubeobjects.models import V1ObjectMeta, serializer
    from kubeobjects.structs.serialization import attribute

    @serializer.shape(api_version='example.com/v1', kind='Widget')
    @dataclasses.dataclass
    class Widget:
        api_version: Optional[str] = attribute('str')
        kind: Optional[str] = attribute('str')
        metadata: Optional[V1ObjectMeta] = attribute('V1ObjectMeta')
        spec: Optional[Dict[str, Any]] = attribute('object')
"""
from kubeobjects.models.base import serializer
from kubeobjects.models.core_v1 import (
    V1ConfigMap,
    V1ConfigMapList,
    V1Namespace,
    V1NamespaceList,
    V1Secret,
    V1SecretList,
)
from kubeobjects.models.meta_v1 import (
    V1DeleteOptions,
    V1ListMeta,
    V1ObjectMeta,
    V1OwnerReference,
    V1Preconditions,
    V1Status,
    V1StatusCause,
    V1StatusDetails,
)

__all__ = [
    'serializer',
    'V1ObjectMeta',
    'V1OwnerReference',
    'V1ListMeta',
    'V1Status',
    'V1StatusDetails',
    'V1StatusCause',
    'V1DeleteOptions',
    'V1Preconditions',
    'V1ConfigMap',
    'V1ConfigMapList',
    'V1Namespace',
    'V1NamespaceList',
    'V1Secret',
    'V1SecretList',
]
