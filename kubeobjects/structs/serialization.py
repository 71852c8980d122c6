"""
Conversion of the API's JSON data to/from typed objects and generic dicts.

The typed objects are dataclasses, which declare their fields with
:func:`attribute`: each field has a Python name, a wire name, and a type.
Such a dataclass is a "shape" once registered in a :class:`Serializer`
under a shape name (e.g. ``"V1ObjectMeta"``), and optionally under
an apiVersion & kind of the API objects (e.g. ``("v1", "ConfigMap")``).

The field types are strings, so that the shapes could refer to each other
regardless of the order of declaration:

* ``"str"``, ``"int"``, ``"float"``, ``"bool"``, ``"object"`` -- passed as is;
* ``"datetime"`` -- RFC 3339 strings on the wire, `datetime.datetime` in Python;
* ``"list[T]"`` -- a list of values of type T;
* ``"dict[T]"`` -- a dict of string keys and values of type T;
* any other name -- a registered shape name.

Everything unknown is passed through unchanged: i.e., unregistered shapes
are represented by the generic JSON-decoded structures (dicts, lists, scalars).
This is the fallback for all the resources that have no typed shapes.
"""
import collections.abc
import dataclasses
import datetime
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

import iso8601

GENERIC = 'object'
PRIMITIVES = frozenset({'str', 'int', 'float', 'bool', GENERIC})

_METADATA_KEY = 'kubeobjects'

_T = TypeVar('_T', bound=type)


def attribute(type: str, *, wire: Optional[str] = None) -> Any:
    """
    Declare a dataclass field with its wire name & type. The field is optional.

    If the wire name is not specified, it is derived from the Python name:
    e.g. ``api_version`` becomes ``apiVersion``.
    """
    return dataclasses.field(default=None, metadata={_METADATA_KEY: (type, wire)})


@dataclasses.dataclass(frozen=True)
class Attribute:
    name: str
    wire: str
    type: str


@dataclasses.dataclass(frozen=True)
class Shape:
    name: str
    cls: type
    attributes: Tuple[Attribute, ...]


@dataclasses.dataclass(frozen=True)
class Codec:
    """ A pair of functions to convert the values of a specific shape. """
    encode: Callable[[Any], Any]
    decode: Callable[[Any], Any]


class Serializer:
    """
    A registry of shapes, which converts the values according to them.
    """

    def __init__(self) -> None:
        super().__init__()
        self._shapes: Dict[str, Shape] = {}
        self._names: Dict[type, str] = {}
        self._kinds: Dict[Tuple[str, str], str] = {}
        self._identities: Dict[str, Tuple[str, str]] = {}

    def register(
            self,
            cls: type,
            *,
            name: Optional[str] = None,
            api_version: Optional[str] = None,
            kind: Optional[str] = None,
    ) -> None:
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"Only dataclasses can be registered as shapes; got {cls!r}.")
        if (api_version is None) != (kind is None):
            raise TypeError("The apiVersion & kind must be both either set or unset.")

        name = name if name is not None else cls.__name__
        attributes = tuple(
            Attribute(name=field.name, wire=wire or _camelize(field.name), type=ftype)
            for field in dataclasses.fields(cls)
            if _METADATA_KEY in field.metadata
            for ftype, wire in [field.metadata[_METADATA_KEY]]
        )
        self._shapes[name] = Shape(name=name, cls=cls, attributes=attributes)
        self._names[cls] = name
        if api_version is not None and kind is not None:
            self._kinds[(api_version, kind)] = name
            self._identities[name] = (api_version, kind)

    def shape(
            self,
            name: Optional[str] = None,
            *,
            api_version: Optional[str] = None,
            kind: Optional[str] = None,
    ) -> Callable[[_T], _T]:
        """ The same as :meth:`register`, but as a class decorator. """
        def decorator(cls: _T) -> _T:
            self.register(cls, name=name, api_version=api_version, kind=kind)
            return cls
        return decorator

    def __contains__(self, name: object) -> bool:
        return name in self._shapes

    def get_shape(self, name: str) -> Optional[Shape]:
        return self._shapes.get(name)

    def shape_name(self, api_version: Optional[str], kind: Optional[str]) -> str:
        """ The registered shape name for an apiVersion & kind, or the generic one. """
        if api_version is None or kind is None:
            return GENERIC
        return self._kinds.get((api_version, kind), GENERIC)

    def codec(self, api_version: Optional[str], kind: Optional[str]) -> Codec:
        name = self.shape_name(api_version, kind)
        return Codec(
            encode=lambda value: self.serialize(value, name),
            decode=lambda value: self.deserialize(value, name),
        )

    def serialize(self, value: Any, type: str) -> Any:
        if value is None:
            return None
        elif type in PRIMITIVES:
            return value
        elif type == 'datetime':
            return _format_datetime(value) if isinstance(value, datetime.datetime) else value
        elif type.startswith('list[') and type.endswith(']'):
            subtype = type[5:-1]
            return [self.serialize(item, subtype) for item in value]
        elif type.startswith('dict[') and type.endswith(']'):
            subtype = type[5:-1]
            return {key: self.serialize(val, subtype) for key, val in value.items()}

        shape = self._shapes.get(type)
        if shape is None or not isinstance(value, shape.cls):
            return value  # unknown shapes, or the pre-serialized dicts.

        result: Dict[str, Any] = {}
        for attr in shape.attributes:
            attr_value = getattr(value, attr.name)
            if attr_value is not None:
                result[attr.wire] = self.serialize(attr_value, attr.type)
        return result

    def deserialize(self, value: Any, type: str) -> Any:
        if value is None:
            return None
        elif type in PRIMITIVES:
            return value
        elif type == 'datetime':
            return iso8601.parse_date(value) if isinstance(value, str) else value
        elif type.startswith('list[') and type.endswith(']'):
            subtype = type[5:-1]
            return [self.deserialize(item, subtype) for item in value]
        elif type.startswith('dict[') and type.endswith(']'):
            subtype = type[5:-1]
            return {key: self.deserialize(val, subtype) for key, val in value.items()}

        shape = self._shapes.get(type)
        if shape is None or not isinstance(value, collections.abc.Mapping):
            return value  # unknown shapes, or already deserialized objects.

        kwargs: Dict[str, Any] = {}
        for attr in shape.attributes:
            if value.get(attr.wire) is not None:
                kwargs[attr.name] = self.deserialize(value[attr.wire], attr.type)
        return shape.cls(**kwargs)

    def encode_object(self, obj: Any) -> Dict[str, Any]:
        """
        Convert an API object to a wire dict, regardless of its representation.

        The typed objects get their apiVersion & kind if the shape is registered
        for them, so that they can be addressed in the API even if not set.
        """
        if isinstance(obj, collections.abc.Mapping):
            return dict(obj)

        name = self._names.get(type(obj))
        if name is None:
            raise TypeError(f"Cannot serialize an object of an unregistered type: {obj!r}")

        body: Dict[str, Any] = self.serialize(obj, name)
        if name in self._identities:
            api_version, kind = self._identities[name]
            body.setdefault('apiVersion', api_version)
            body.setdefault('kind', kind)
        return body

    def decode_object(self, body: Any) -> Any:
        """ Convert a wire object to a typed object according to its own apiVersion & kind. """
        if not isinstance(body, collections.abc.Mapping):
            return body
        return self.deserialize(body, self.shape_name(body.get('apiVersion'), body.get('kind')))

    def decode_as(self, body: Any, cls: type) -> Any:
        """ Convert a wire object to a specific registered class, ignoring its own kind. """
        name = self._names.get(cls)
        if name is None:
            raise TypeError(f"The class is not registered as a shape: {cls!r}")
        return self.deserialize(body, name)


def _camelize(name: str) -> str:
    head, *tail = name.split('_')
    return head + ''.join(part[:1].upper() + part[1:] for part in tail)


def _format_datetime(value: datetime.datetime) -> str:
    text = value.isoformat()
    return text[:-6] + 'Z' if text.endswith('+00:00') else text

