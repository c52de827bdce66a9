import typing

from .defaults import default_type_keys
from .exceptions import UnknownResourceTypeError
from .interfaces import TypeKeyResolver
from .models import ResourceDescriptor


class Registry:
    """
    A :py:class:`Registry` maps domain types to their :py:class:`ResourceDescriptor`.
    It is populated once at startup and only read afterwards.

    :param Optional[TypeKeyResolver] type_keys: yields the keys to try for a native object.
    """

    _descriptors: typing.Dict[typing.Tuple[typing.Optional[str], str], ResourceDescriptor]
    _type_keys: TypeKeyResolver

    def register(
        self,
        key: typing.Union[str, typing.Type],
        descr: ResourceDescriptor,
        namespace: typing.Optional[str] = None,
    ) -> None:
        """
        Registers a descriptor.

        :param Union[str, Type] key: a class, or the name the type-key resolver yields for its instances.
        :param ResourceDescriptor descr: the descriptor.
        :param Optional[str] namespace: an optional qualifier, e.g. an API version.
        """
        if not isinstance(key, str):
            key = key.__name__
        self._descriptors[(namespace, key)] = descr

    def query_by_key(
        self, key: str, namespace: typing.Optional[str] = None
    ) -> typing.Optional[ResourceDescriptor]:
        return self._descriptors.get((namespace, key))

    def lookup(
        self, native: typing.Any, namespace: typing.Optional[str] = None
    ) -> ResourceDescriptor:
        """
        Resolves the descriptor for a native object.

        :param Any native: a native object.
        :param Optional[str] namespace: the namespace to look the descriptor up in.
        :return: the descriptor.
        :raises UnknownResourceTypeError: if no descriptor is registered for the object.
        """
        keys = list(self._type_keys(native))
        for key in keys:
            descr = self.query_by_key(key, namespace)
            if descr is not None:
                return descr
        raise UnknownResourceTypeError(keys, namespace)

    def __init__(self, type_keys: typing.Optional[TypeKeyResolver] = None):
        self._descriptors = {}
        self._type_keys = type_keys if type_keys is not None else default_type_keys
