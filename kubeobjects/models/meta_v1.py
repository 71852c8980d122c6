"""
The object metadata, statuses, and options shared by all resources.

.. seealso::
    https://kubernetes.io/docs/reference/kubernetes-api/common-definitions/
"""
import dataclasses
import datetime
from typing import Any, Dict, List, Optional

from kubeobjects.models.base import serializer
from kubeobjects.structs.serialization import attribute


@serializer.shape('V1OwnerReference')
@dataclasses.dataclass
class V1OwnerReference:
    api_version: Optional[str] = attribute('str')
    kind: Optional[str] = attribute('str')
    name: Optional[str] = attribute('str')
    uid: Optional[str] = attribute('str')
    controller: Optional[bool] = attribute('bool')
    block_owner_deletion: Optional[bool] = attribute('bool')


@serializer.shape('V1ObjectMeta')
@dataclasses.dataclass
class V1ObjectMeta:
    name: Optional[str] = attribute('str')
    generate_name: Optional[str] = attribute('str')
    namespace: Optional[str] = attribute('str')
    uid: Optional[str] = attribute('str')
    resource_version: Optional[str] = attribute('str')
    generation: Optional[int] = attribute('int')
    creation_timestamp: Optional[datetime.datetime] = attribute('datetime')
    deletion_timestamp: Optional[datetime.datetime] = attribute('datetime')
    deletion_grace_period_seconds: Optional[int] = attribute('int')
    labels: Optional[Dict[str, str]] = attribute('dict[str]')
    annotations: Optional[Dict[str, str]] = attribute('dict[str]')
    finalizers: Optional[List[str]] = attribute('list[str]')
    owner_references: Optional[List[V1OwnerReference]] = attribute('list[V1OwnerReference]')
    managed_fields: Optional[List[Any]] = attribute('list[object]')


@serializer.shape('V1ListMeta')
@dataclasses.dataclass
class V1ListMeta:
    resource_version: Optional[str] = attribute('str')
    continue_: Optional[str] = attribute('str', wire='continue')  # a keyword in Python
    remaining_item_count: Optional[int] = attribute('int')
    self_link: Optional[str] = attribute('str')


@serializer.shape('V1StatusCause')
@dataclasses.dataclass
class V1StatusCause:
    reason: Optional[str] = attribute('str')
    message: Optional[str] = attribute('str')
    field: Optional[str] = attribute('str')


@serializer.shape('V1StatusDetails')
@dataclasses.dataclass
class V1StatusDetails:
    name: Optional[str] = attribute('str')
    group: Optional[str] = attribute('str')
    kind: Optional[str] = attribute('str')
    uid: Optional[str] = attribute('str')
    causes: Optional[List[V1StatusCause]] = attribute('list[V1StatusCause]')
    retry_after_seconds: Optional[int] = attribute('int')


@serializer.shape('V1Status', api_version='v1', kind='Status')
@dataclasses.dataclass
class V1Status:
    """
    The outcome of an operation that returns no object, and of all failures.

    In the watch-streams, it is also the payload of the ``ERROR`` events.
    """
    api_version: Optional[str] = attribute('str')
    kind: Optional[str] = attribute('str')
    metadata: Optional[V1ListMeta] = attribute('V1ListMeta')
    status: Optional[str] = attribute('str')  # "Success" or "Failure"
    message: Optional[str] = attribute('str')
    reason: Optional[str] = attribute('str')
    details: Optional[V1StatusDetails] = attribute('V1StatusDetails')
    code: Optional[int] = attribute('int')


@serializer.shape('V1Preconditions')
@dataclasses.dataclass
class V1Preconditions:
    resource_version: Optional[str] = attribute('str')
    uid: Optional[str] = attribute('str')


@serializer.shape('V1DeleteOptions', api_version='v1', kind='DeleteOptions')
@dataclasses.dataclass
class V1DeleteOptions:
    api_version: Optional[str] = attribute('str')
    kind: Optional[str] = attribute('str')
    grace_period_seconds: Optional[int] = attribute('int')
    propagation_policy: Optional[str] = attribute('str')  # Orphan, Background, Foreground
    orphan_dependents: Optional[bool] = attribute('bool')
    dry_run: Optional[List[str]] = attribute('list[str]')
    preconditions: Optional[V1Preconditions] = attribute('V1Preconditions')
