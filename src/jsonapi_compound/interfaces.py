import abc
import typing


class NameFormatter(metaclass=abc.ABCMeta):
    """
    Maps internal member names to the names that appear on the wire, and back.
    """

    @abc.abstractmethod
    def format(self, name: str) -> str:
        """
        Converts an internal name (e.g. ``long_content``) to its wire form.

        :param str name: an internal attribute or relationship name.
        :return: the wire name.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def unformat(self, name: str) -> str:
        """
        Converts a wire name back to its internal form.

        :param str name: a wire name, e.g. one appearing in an include path.
        :return: the internal name.
        """
        ...  # pragma: nocover


TypeKeyResolver = typing.Callable[[typing.Any], typing.Iterable[str]]
"""
A callable that yields the registry keys to try, most specific first, for a native object.
"""
