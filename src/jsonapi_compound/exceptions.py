import abc
import typing

from .utils import english_enumerate


class JSONAPICompoundException(Exception, metaclass=abc.ABCMeta):
    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self):
        return self.message


class DeclarationError(JSONAPICompoundException):
    """
    Raised when a resource descriptor is declared in an invalid way, e.g. when
    ``id`` or ``type`` is declared as an attribute.
    """

    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str):
        super().__init__(message)
        self._message = message


class AmbiguousCollectionError(JSONAPICompoundException):
    """
    Raised when the caller did not tell whether the primary data is a single
    resource or a collection and it cannot be told from the value itself.
    """

    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str):
        super().__init__(message)
        self._message = message


class IncludeError(JSONAPICompoundException):
    """
    The base class of the errors raised for a bad ``include`` request.
    """


class MalformedIncludePathError(IncludeError):
    path: str

    @property
    def message(self) -> str:
        return f"malformed relationship path: {self.path!r}"

    def __init__(self, path: str):
        super().__init__(path)
        self.path = path


class InvalidIncludeError(IncludeError):
    resource_type: str
    name: str
    suggestion: typing.Optional[str]
    available: typing.Sequence[str]

    @property
    def message(self) -> str:
        msg = f'"{self.name}" is not a valid include for resource "{self.resource_type}"'
        if self.suggestion is not None:
            return f'{msg}; did you mean "{self.suggestion}"?'
        elif self.available:
            return f"{msg}; available relationships are {english_enumerate(self.available)}"
        else:
            return f"{msg}; the resource has no relationships"

    def __init__(
        self,
        resource_type: str,
        name: str,
        suggestion: typing.Optional[str] = None,
        available: typing.Sequence[str] = (),
    ):
        super().__init__(resource_type, name)
        self.resource_type = resource_type
        self.name = name
        self.suggestion = suggestion
        self.available = available


class UnknownResourceTypeError(JSONAPICompoundException):
    keys: typing.Sequence[str]
    namespace: typing.Optional[str]

    @property
    def message(self) -> str:
        keys = english_enumerate((f'"{k}"' for k in self.keys), conj=", or ")
        if self.namespace is not None:
            return f'no resource descriptor known as {keys} in namespace "{self.namespace}"'
        else:
            return f"no resource descriptor known as {keys}"

    def __init__(self, keys: typing.Sequence[str], namespace: typing.Optional[str] = None):
        super().__init__(keys, namespace)
        self.keys = keys
        self.namespace = namespace
