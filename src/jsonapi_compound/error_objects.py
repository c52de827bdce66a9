import collections.abc
import typing

from .interfaces import NameFormatter
from .serde.models import ErrorItem, ErrorRepr, SourceRepr


class ValidationErrors(typing.Protocol):
    """
    The shape of validation error containers translated by :py:func:`adapt_errors`:
    a mapping from attribute names to messages plus a way to spell out a full message.
    """

    messages: typing.Mapping[str, typing.Sequence[str]]

    def full_message(self, attribute: str, message: str) -> str:
        ...  # pragma: nocover


def is_validation_errors(errors: typing.Any) -> bool:
    return isinstance(getattr(errors, "messages", None), collections.abc.Mapping) and callable(
        getattr(errors, "full_message", None)
    )


def adapt_errors(
    errors: typing.Any, name_formatter: NameFormatter
) -> typing.Sequence[ErrorItem]:
    """
    Turns validation errors into JSON:API error objects pointing at the offending attributes.
    Anything else is expected to be a sequence of error objects already and is passed through.

    :param Any errors: a :py:class:`ValidationErrors`-like object, or a sequence of error objects.
    :param NameFormatter name_formatter: formats attribute names in the pointers.
    :return: a sequence of error objects.
    """
    if errors is None:
        return ()
    if not is_validation_errors(errors):
        return list(errors)
    _errors = typing.cast(ValidationErrors, errors)
    retval: typing.List[ErrorItem] = []
    for attribute, messages in _errors.messages.items():
        if isinstance(messages, str):
            messages = [messages]
        for message in messages:
            retval.append(
                ErrorRepr(
                    source=SourceRepr(
                        pointer=f"/data/attributes/{name_formatter.format(attribute)}"
                    ),
                    detail=_errors.full_message(attribute, message),
                )
            )
    return retval
