"""
Parsing of ``include`` requests into an inclusion tree.

``["comments", "comments.author", "tags"]`` becomes::

    (root)
    ├── comments  [include]
    │   └── author  [include]
    └── tags  [include]

A path like ``"comments.author"`` alone creates ``comments`` without marking it
included; it only leads the way to ``author``.
"""

import typing
from collections import OrderedDict

from .exceptions import MalformedIncludePathError
from .utils import split_names

INCLUDE_MARKER = "_include"


class InclusionTreeNode:
    include: bool
    children: "OrderedDict[str, InclusionTreeNode]"

    def child(self, segment: str) -> "InclusionTreeNode":
        node = self.children.get(segment)
        if node is None:
            self.children[segment] = node = InclusionTreeNode()
        return node

    def add_path(self, segments: typing.Sequence[str]) -> None:
        node = self.child(segments[0])
        if len(segments) == 1:
            node.include = True
        else:
            node.add_path(segments[1:])

    def included_children(self) -> typing.FrozenSet[str]:
        """
        The names of the child relationships that are themselves included, i.e. the
        relationships whose linkage must be rendered on a resource at this level.
        """
        return frozenset(name for name, node in self.children.items() if node.include)

    def as_dict(self) -> typing.Dict[str, typing.Any]:
        retval: typing.Dict[str, typing.Any] = {}
        if self.include:
            retval[INCLUDE_MARKER] = True
        for name, node in self.children.items():
            retval[name] = node.as_dict()
        return retval

    def __bool__(self) -> bool:
        return self.include or bool(self.children)

    def __eq__(self, other: typing.Any) -> bool:
        if not isinstance(other, InclusionTreeNode):
            return NotImplemented
        return self.include == other.include and dict(self.children) == dict(other.children)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.as_dict()!r})"

    def __init__(self, include: bool = False):
        self.include = include
        self.children = OrderedDict()


def parse_relationship_paths(
    paths: typing.Union[None, str, typing.Iterable[str]]
) -> InclusionTreeNode:
    """
    Builds an inclusion tree from dot-separated relationship paths.

    :param Union[None, str, Iterable[str]] paths: a list of paths or a comma-separated string of them.
    :return: the root node of the tree. The root itself is never marked as included.
    :raises MalformedIncludePathError: if a path has an empty segment.
    """
    root = InclusionTreeNode()
    for path in split_names(paths):
        segments = [segment.strip() for segment in path.split(".")]
        if not all(segments):
            raise MalformedIncludePathError(path)
        root.add_path(segments)
    return root
