import re
import typing

from .interfaces import NameFormatter

_camel_boundary_re = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class DefaultNameFormatterImpl(NameFormatter):
    """
    Dasherizes internal names (``long_content`` <-> ``long-content``).
    """

    separator: str

    def format(self, name: str) -> str:
        return name.replace("_", self.separator)

    def unformat(self, name: str) -> str:
        return name.replace(self.separator, "_")

    def __init__(self, separator: str = "-"):
        self.separator = separator


class IdentityNameFormatterImpl(NameFormatter):
    def format(self, name: str) -> str:
        return name

    def unformat(self, name: str) -> str:
        return name


def underscore(name: str) -> str:
    return _camel_boundary_re.sub("_", name).lower()


def pluralize(word: str) -> str:
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    elif word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    else:
        return word + "s"


def default_type_name(class_name: str, name_formatter: typing.Optional[NameFormatter] = None) -> str:
    """
    Derives a resource type name from a class name, e.g. ``LongComment`` -> ``long-comments``.
    """
    if name_formatter is None:
        name_formatter = DefaultNameFormatterImpl()
    return name_formatter.format(pluralize(underscore(class_name)))


def default_type_keys(native: typing.Any) -> typing.Iterator[str]:
    """
    Yields the registry keys for a native object. An object can pin its key by
    providing a ``jsonapi_type_key`` attribute or method; otherwise the names of
    the classes along its MRO are tried in order.
    """
    override = getattr(native, "jsonapi_type_key", None)
    if override is not None:
        yield override() if callable(override) else override
        return
    for class_ in type(native).__mro__:
        if class_ is not object:
            yield class_.__name__
