"""
A few kinds of the core API group, as examples of the typed objects.
"""
import dataclasses
from typing import Any, Dict, List, Optional

from kubeobjects.models.base import serializer
from kubeobjects.models.meta_v1 import V1ListMeta, V1ObjectMeta
from kubeobjects.structs.serialization import attribute


@serializer.shape('V1ConfigMap', api_version='v1', kind='ConfigMap')
@dataclasses.dataclass
class V1ConfigMap:
    api_version: Optional[str] = attribute('str')
    kind: Optional[str] = attribute('str')
    metadata: Optional[V1ObjectMeta] = attribute('V1ObjectMeta')
    data: Optional[Dict[str, str]] = attribute('dict[str]')
    binary_data: Optional[Dict[str, str]] = attribute('dict[str]')
    immutable: Optional[bool] = attribute('bool')


@serializer.shape('V1ConfigMapList', api_version='v1', kind='ConfigMapList')
@dataclasses.dataclass
class V1ConfigMapList:
    api_version: Optional[str] = attribute('str')
    kind: Optional[str] = attribute('str')
    metadata: Optional[V1ListMeta] = attribute('V1ListMeta')
    items: Optional[List[V1ConfigMap]] = attribute('list[V1ConfigMap]')


@serializer.shape('V1Secret', api_version='v1', kind='Secret')
@dataclasses.dataclass
class V1Secret:
    api_version: Optional[str] = attribute('str')
    kind: Optional[str] = attribute('str')
    metadata: Optional[V1ObjectMeta] = attribute('V1ObjectMeta')
    type: Optional[str] = attribute('str')
    data: Optional[Dict[str, str]] = attribute('dict[str]')  # base64-encoded
    string_data: Optional[Dict[str, str]] = attribute('dict[str]')
    immutable: Optional[bool] = attribute('bool')


@serializer.shape('V1SecretList', api_version='v1', kind='SecretList')
@dataclasses.dataclass
class V1SecretList:
    api_version: Optional[str] = attribute('str')
    kind: Optional[str] = attribute('str')
    metadata: Optional[V1ListMeta] = attribute('V1ListMeta')
    items: Optional[List[V1Secret]] = attribute('list[V1Secret]')


@serializer.shape('V1Namespace', api_version='v1', kind='Namespace')
@dataclasses.dataclass
class V1Namespace:
    api_version: Optional[str] = attribute('str')
    kind: Optional[str] = attribute('str')
    metadata: Optional[V1ObjectMeta] = attribute('V1ObjectMeta')
    spec: Optional[Dict[str, Any]] = attribute('object')
    status: Optional[Dict[str, Any]] = attribute('object')


@serializer.shape('V1NamespaceList', api_version='v1', kind='NamespaceList')
@dataclasses.dataclass
class V1NamespaceList:
    api_version: Optional[str] = attribute('str')
    kind: Optional[str] = attribute('str')
    metadata: Optional[V1ListMeta] = attribute('V1ListMeta')
    items: Optional[List[V1Namespace]] = attribute('list[V1Namespace]')
