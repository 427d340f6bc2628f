# Copyright (C) 2018-'25  Frank Sachsenheim
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
lxml represents elements, comments, processing instructions and entity references as
proxy objects, but text as the ``text`` and ``tail`` strings of these and attributes as
mapping entries. The classes in this module give those the shape of a distinct
underlying node that a wrapper can reference.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, Optional

from lxml import etree

from domproxy.exceptions import InvalidCodePath
from domproxy.names import NodeType

if TYPE_CHECKING:
    from domproxy.typing import CacheKey, Underlying


# positions of text runs; NODE is the slot of element-likes in cache keys
NODE: Final = 0
DATA: Final = 1
TAIL: Final = 2
DETACHED: Final = 3

INTERNAL_SUBSET_KEY: Final = (0, "#internal-subset")


def read_text(anchor: etree._Element, position: int) -> Optional[str]:
    if position == DATA:
        return anchor.text
    elif position == TAIL:
        return anchor.tail
    raise InvalidCodePath


def write_text(anchor: etree._Element, position: int, value: Optional[str]):
    if position == DATA:
        anchor.text = value
    elif position == TAIL:
        anchor.tail = value
    else:
        raise InvalidCodePath


class TextRun:
    """
    A run of character data. It is anchored at an element's ``text`` (``DATA``) or
    at an element-like's ``tail`` (``TAIL``), or holds its content on its own while it
    isn't part of a tree (``DETACHED``).

    Several text wrappers may refer to the same run after the library coalesced
    adjacent text, see :attr:`domproxy.nodes.Text._alias_of`.
    """

    __slots__ = ("anchor", "position", "_content")

    def __init__(
        self,
        anchor: Optional[etree._Element] = None,
        position: int = DETACHED,
        content: Optional[str] = None,
    ):
        self.anchor = anchor
        self.position = position
        self._content = content
        if position == DETACHED:
            assert anchor is None and isinstance(content, str)
        else:
            assert anchor is not None and content is None

    def __repr__(self):
        return (
            f"<{self.__class__.__name__}(position={self.position}, "
            f"content={self.content!r}) [{hex(id(self))}]>"
        )

    @property
    def content(self) -> str:
        if self.position == DETACHED:
            assert self._content is not None
            return self._content
        assert self.anchor is not None
        result = read_text(self.anchor, self.position)
        return "" if result is None else result

    @content.setter
    def content(self, value: str):
        if self.position == DETACHED:
            self._content = value
        else:
            assert self.anchor is not None
            write_text(self.anchor, self.position, value)

    @property
    def key(self) -> Optional[CacheKey]:
        if self.position == DETACHED:
            return None
        return (id(self.anchor), self.position)

    def attach(self, anchor: etree._Element, position: int):
        assert position in (DATA, TAIL)
        self.anchor = anchor
        self.position = position
        self._content = None

    def detach(self):
        content = self.content
        self.anchor = None
        self.position = DETACHED
        self._content = content


class AttributeSlot:
    """An attribute, identified by its owner element and its name in Clark notation."""

    __slots__ = ("owner", "name", "_value")

    def __init__(
        self,
        name: str,
        owner: Optional[etree._Element] = None,
        value: Optional[str] = None,
    ):
        self.name = name
        self.owner = owner
        self._value = value
        assert (owner is None) is not (value is None)

    @property
    def key(self) -> Optional[CacheKey]:
        if self.owner is None:
            return None
        return (id(self.owner), self.name)

    @property
    def value(self) -> str:
        if self.owner is None:
            assert self._value is not None
            return self._value
        result = self.owner.get(self.name)
        assert result is not None
        return result

    @value.setter
    def value(self, value: str):
        if self.owner is None:
            self._value = value
        else:
            self.owner.set(self.name, value)

    def attach(self, owner: etree._Element):
        owner.set(self.name, self.value)
        self.owner = owner
        self._value = None

    def detach(self):
        if self.owner is None:
            return
        self._value = self.value
        del self.owner.attrib[self.name]
        self.owner = None


class Declaration:
    """
    A document type definition or one of its declarations. ``dtd`` is the
    :class:`lxml.etree.DTD` snapshot that contains the declaration ``obj``.
    """

    __slots__ = ("kind", "obj", "dtd")

    def __init__(self, kind: NodeType, obj, dtd: etree.DTD):
        self.kind = kind
        self.obj = obj
        self.dtd = dtd

    @property
    def key(self) -> CacheKey:
        if self.kind == NodeType.DTD:
            return INTERNAL_SUBSET_KEY
        return (id(self.dtd), f"#{self.kind.name.lower()}:{self.obj.name}")

    @property
    def name(self) -> Optional[str]:
        return self.obj.name


def node_type_of(underlying: Underlying) -> NodeType:
    """Returns the type tag of an underlying node."""
    if isinstance(underlying, TextRun):
        return NodeType.TEXT
    if isinstance(underlying, AttributeSlot):
        return NodeType.ATTRIBUTE
    if isinstance(underlying, Declaration):
        return underlying.kind
    if isinstance(underlying, etree._Comment):
        return NodeType.COMMENT
    if isinstance(underlying, etree._ProcessingInstruction):
        return NodeType.PI
    if isinstance(underlying, etree._Entity):
        return NodeType.ENTITY_REF
    if isinstance(underlying, etree._Element):
        return NodeType.ELEMENT
    raise TypeError(f"Can't determine the node type of {underlying!r}.")


def key_of(underlying: Underlying) -> Optional[CacheKey]:
    """
    Returns the key that identifies an underlying node within its document or
    :obj:`None` for text runs and attributes that aren't part of a tree.
    """
    if isinstance(underlying, (TextRun, AttributeSlot, Declaration)):
        return underlying.key
    return (id(underlying), NODE)


__all__ = (
    AttributeSlot.__name__,
    Declaration.__name__,
    TextRun.__name__,
    key_of.__name__,
    node_type_of.__name__,
)
