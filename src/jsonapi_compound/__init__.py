from .declarative import Attr, Declarative, ToMany, ToOne  # noqa: F401
from .document import SerializeOptions, Serializer  # noqa: F401
from .exceptions import (  # noqa: F401
    AmbiguousCollectionError,
    DeclarationError,
    IncludeError,
    InvalidIncludeError,
    MalformedIncludePathError,
    JSONAPICompoundException,
    UnknownResourceTypeError,
)
from .models import ResourceDescriptor  # noqa: F401
from .registry import Registry  # noqa: F401
