"""Parsed XML documentation-comment files.

A comment file looks like::

    <doc>
      <assembly><name>PetStore</name></assembly>
      <members>
        <member name="M:PetStore.Controllers.PetsController.GetById(System.Int32)">
          <summary>Returns a single pet.</summary>
          <param name="id">The pet id.</param>
          <response code="404">Pet not found.</response>
        </member>
      </members>
    </doc>
"""

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterator, Mapping
from pathlib import Path

logger = logging.getLogger(__name__)


class CommentsLoadError(Exception):
    """Raised when an XML comments file cannot be read or parsed."""


class CommentMember:
    """A single ``<member>`` entry."""

    def __init__(self, name: str, element: ET.Element):
        self.name = name
        self.element = element

    @property
    def summary(self) -> ET.Element | None:
        return self.element.find("summary")

    @property
    def remarks(self) -> ET.Element | None:
        return self.element.find("remarks")

    def param(self, name: str) -> ET.Element | None:
        """Return the ``<param>`` whose name attribute equals *name* exactly."""
        for node in self.element.iterfind("param"):
            if node.get("name") == name:
                return node
        return None

    def responses(self) -> list[tuple[str | None, ET.Element]]:
        """Return ``(code, element)`` for each ``<response>`` in document order."""
        return [(node.get("code"), node) for node in self.element.iterfind("response")]

    def __repr__(self) -> str:
        return f"CommentMember({self.name!r})"


class CommentIndex(Mapping[str, CommentMember]):
    """Read-only lookup of comment members by identifier."""

    def __init__(self, members: Mapping[str, CommentMember] | None = None):
        self._members = dict(members or {})

    @classmethod
    def from_element(cls, root: ET.Element) -> "CommentIndex":
        members: dict[str, CommentMember] = {}
        _collect_members(root, members)
        return cls(members)

    @classmethod
    def from_string(cls, text: str) -> "CommentIndex":
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise CommentsLoadError(f"Malformed XML comments: {e}") from e
        _check_root(root, "<string>")
        return cls.from_element(root)

    def find(self, comment_id: str) -> CommentMember | None:
        return self._members.get(comment_id)

    def __getitem__(self, comment_id: str) -> CommentMember:
        return self._members[comment_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)


def load_comments(*file_paths: Path) -> CommentIndex:
    """Load one or more XML comment files into a single index.

    When several files document the same identifier, the first one loaded
    wins.

    Raises:
        CommentsLoadError: if a file is unreadable, not well-formed XML, or
            not a ``<doc>`` document.
    """
    members: dict[str, CommentMember] = {}
    for file_path in file_paths:
        try:
            tree = ET.parse(file_path)
        except ET.ParseError as e:
            raise CommentsLoadError(f"Malformed XML comments file {file_path}: {e}") from e
        except OSError as e:
            raise CommentsLoadError(f"Cannot read XML comments file {file_path}: {e}") from e

        root = tree.getroot()
        _check_root(root, file_path)
        before = len(members)
        _collect_members(root, members)
        logger.debug("Loaded %d members from %s", len(members) - before, file_path)

    return CommentIndex(members)


def _check_root(root: ET.Element, source) -> None:
    if root.tag != "doc":
        raise CommentsLoadError(f"{source} is not an XML comments file (root element <{root.tag}>)")


def _collect_members(root: ET.Element, members: dict[str, CommentMember]) -> None:
    for node in root.iterfind("members/member"):
        name = node.get("name")
        if not name:
            continue
        if name in members:
            logger.debug("Ignoring duplicate member %s", name)
            continue
        members[name] = CommentMember(name, node)
