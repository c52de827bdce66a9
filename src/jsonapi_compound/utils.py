import collections.abc
import typing

T = typing.TypeVar("T")


class UnspecifiedType:
    _singleton: typing.ClassVar[typing.Optional["UnspecifiedType"]] = None

    def __bool__(self):
        return False

    def __repr__(self):
        return "UNSPECIFIED"

    def __new__(cls) -> "UnspecifiedType":
        if cls._singleton is None:
            cls._singleton = object.__new__(cls)
        return cls._singleton


UNSPECIFIED = UnspecifiedType()


def assert_not_none(value: typing.Optional[T]) -> T:
    assert value is not None
    return value


def english_enumerate(items: typing.Iterable[str], conj: str = ", and ") -> str:
    buf = []

    i = iter(items)
    try:
        x = next(i)
    except StopIteration:
        return ""
    buf.append(x)

    lx: typing.Optional[str] = None

    for x in i:
        if lx is not None:
            buf.append(", ")
            buf.append(lx)
        lx = x
    if lx is not None:
        buf.append(conj)
        buf.append(lx)
    return "".join(buf)


def split_names(value: typing.Union[None, str, typing.Iterable[str]]) -> typing.List[str]:
    """
    Normalizes a comma-separated string or an iterable of strings into a list of
    stripped, non-empty names without duplicates, keeping the first occurrence order.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items: typing.Iterable[str] = value.split(",")
    else:
        items = value
    retval: typing.List[str] = []
    for item in items:
        item = item.strip()
        if item and item not in retval:
            retval.append(item)
    return retval


def is_collection_like(value: typing.Any) -> bool:
    """
    Tells whether the value iterates like a collection of natives.
    Strings, bytes and mappings are never treated as collections.
    """
    if isinstance(value, (str, bytes, bytearray, collections.abc.Mapping)):
        return False
    return isinstance(value, collections.abc.Iterable)
