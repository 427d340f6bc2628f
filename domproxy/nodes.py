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
The node wrappers. Each underlying node of a document is represented by exactly one
wrapper instance, see :class:`domproxy.caches.NodeCache` and :func:`wrap`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from copy import copy, deepcopy
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional, Union

from lxml import etree

from domproxy.exceptions import InvalidOperation, RejectedMutation
from domproxy.handles import (
    DATA,
    DETACHED,
    INTERNAL_SUBSET_KEY,
    TAIL,
    AttributeSlot,
    Declaration,
    TextRun,
    key_of,
    node_type_of,
    read_text,
    write_text,
)
from domproxy.names import FRAGMENT_TAG, XML_NAMESPACE, NodeType
from domproxy.utils import (
    encode_special_chars,
    escape_content,
    namespace_declarations,
    prefix_for,
    qualified_attribute_name,
    resolve_name,
)

if TYPE_CHECKING:
    from domproxy import Document
    from domproxy.typing import CacheKey, Underlying


logger = logging.getLogger(__name__)

Slot = tuple[etree._Element, int]


# wrapping


def wrap(underlying: Underlying, document: Document) -> Node:
    """
    Returns the wrapper for an underlying node. A new one is created, registered in
    the document's identity cache and decorated if the node hasn't been wrapped
    before.
    """
    cache = document._cache
    key = key_of(underlying)
    assert key is not None, underlying
    result = cache.lookup(key)
    if result is None:
        wrapper_class = WRAPPER_CLASSES.get(node_type_of(underlying), Node)
        result = _new_wrapper(wrapper_class, underlying, document)
    return result


def _new_wrapper(wrapper_class: type, underlying: Underlying, document: Document):
    result = wrapper_class(underlying, document)
    document._cache.register(result)
    logger.debug("Created %r.", result)
    result.decorate()
    return result


def _new_fragment(
    container: etree._Element, document: Document
) -> DocumentFragment:
    """
    Wraps an element as container of a document fragment. Fragment containers are
    only recognized by their wrapper in the identity cache, so this must be used
    for every container that is created.
    """
    assert document._cache.lookup(key_of(container)) is None
    result = _new_wrapper(DocumentFragment, container, document)
    assert isinstance(result, DocumentFragment)
    return result


def _is_fragment_container(obj: etree._Element, document: Document) -> bool:
    return isinstance(document._cache.lookup(key_of(obj)), DocumentFragment)


def _new_detached(wrapper_class: type, underlying: Underlying, document: Document):
    result = wrapper_class(underlying, document)
    assert result._cache_key is None
    result.decorate()
    return result


def _wrap_attribute(owner: etree._Element, name: str, document: Document) -> Attr:
    result = document._cache.lookup((id(owner), name))
    if result is None:
        result = wrap(AttributeSlot(name, owner=owner), document)
    assert isinstance(result, Attr)
    return result


def _wrap_run(anchor: etree._Element, position: int, document: Document) -> Text:
    result = document._cache.lookup((id(anchor), position))
    if result is None:
        result = wrap(TextRun(anchor, position), document)
    assert isinstance(result, Text)
    return result


# text run bookkeeping


def _last_run_slot(container: etree._Element) -> Slot:
    if len(container):
        return container[-1], TAIL
    return container, DATA


def _preceding_run_slot(obj: etree._Element) -> Optional[Slot]:
    """
    Returns the slot of the text run that directly precedes an element-like,
    whether it holds text or not. :obj:`None` is returned for nodes on the document
    level.
    """
    parent = obj.getparent()
    if parent is None:
        return None
    previous = obj.getprevious()
    if previous is None:
        return parent, DATA
    return previous, TAIL


def _detach_run(document: Document, anchor: etree._Element, position: int):
    """Removes a run from the tree. Its wrapper, if any, keeps the content."""
    wrapper = document._cache.discard((id(anchor), position))
    if wrapper is not None:
        assert isinstance(wrapper, Text)
        wrapper._run.detach()
    write_text(anchor, position, None)


def _move_text(document: Document, source: Slot, target: Slot):
    """
    Moves the text of a run to another slot that precedes it in document order. If
    the target already holds text, the moved text is appended and the two runs are
    coalesced. The run's wrapper, if any, follows it.
    """
    text = read_text(*source)
    if text is None:
        return

    cache = document._cache
    source_key = (id(source[0]), source[1])
    moved = cache.lookup(source_key)
    assert moved is None or isinstance(moved, Text)
    existing = read_text(*target)

    write_text(*source, None)

    if existing is None:
        write_text(*target, text)
        if moved is not None:
            moved._run.attach(*target)
            cache.rekey(source_key, moved)
        return

    write_text(*target, existing + text)
    if moved is None:
        return
    survivor = cache.lookup((id(target[0]), target[1]))
    if survivor is None:
        moved._run.attach(*target)
        cache.rekey(source_key, moved)
    else:
        cache.discard(source_key)
        moved._alias_of = survivor
        logger.debug("Coalesced %r into %r.", moved, survivor)


def _place_text(node: Text, anchor: etree._Element, position: int, prepend: bool):
    """
    Links a detached text node's content into the run at the given slot. When that
    run already holds text, the content is merged into it and the wrapper of the
    surviving run is returned.
    """
    node = node._primary
    run = node._run
    assert run.position == DETACHED
    document = node._document
    cache = document._cache
    content = run.content
    existing = read_text(anchor, position)

    if existing is None:
        run.attach(anchor, position)
        run.content = content
        cache.register(node)
        return node

    write_text(anchor, position, content + existing if prepend else existing + content)
    survivor = cache.lookup((id(anchor), position))
    if survivor is None:
        run.attach(anchor, position)
        cache.register(node)
        return node

    assert isinstance(survivor, Text)
    node._alias_of = survivor
    logger.debug("Coalesced %r into %r.", node, survivor)
    return survivor


def _insert_at_run(
    document: Document, anchor: etree._Element, position: int, node: Node
) -> Node:
    """
    Links a node at the start of the run at the given slot, the run's text follows
    the node afterwards.
    """
    if isinstance(node, Text):
        return _place_text(node, anchor, position, prepend=True)
    assert isinstance(node, _ElementLike)
    new = node._etree_obj
    if position == TAIL:
        anchor.addnext(new)
    else:
        anchor.insert(0, new)
    _move_text(document, (anchor, position), (new, TAIL))
    return node


def _full_text(element: etree._Element, entities: Callable[[str], str]) -> str:
    result = [element.text or ""]
    for child in element:
        if isinstance(child, etree._Entity):
            result.append(entities(child.name))
        elif not isinstance(child, (etree._Comment, etree._ProcessingInstruction)):
            result.append(_full_text(child, entities))
        result.append(child.tail or "")
    return "".join(result)


def _is_in_subtree(obj: etree._Element, container: etree._Element) -> bool:
    return container is obj or any(x is obj for x in container.iterancestors())


def _check_linkable(node: Any, container: Optional[etree._Element], relative: Node):
    """
    Raises :exc:`RejectedMutation` if ``node`` can't be linked into ``container``,
    which is :obj:`None` for the document level, next to or below ``relative``.
    """
    if not isinstance(node, Node):
        raise TypeError(f"Expected a Node instance, got {node!r}.")
    if node._primary is relative._primary:
        raise RejectedMutation("A node can't be linked relative to itself.")
    if not isinstance(node, (_ElementLike, Text, DocumentFragment)):
        raise RejectedMutation(
            f"{node.__class__.__name__} nodes can't be linked into a tree this way."
        )

    if container is None:
        if not isinstance(node, (Comment, ProcessingInstruction)):
            raise RejectedMutation(
                "Only comments and processing instructions can be siblings of the "
                "root element."
            )
        return

    if isinstance(node, (_ElementLike, DocumentFragment)) and _is_in_subtree(
        node._etree_obj, container
    ):
        raise RejectedMutation("A node can't be linked into its own subtree.")


# wrapper classes


class Node:
    """
    The base class of all node wrappers. Its instances represent node types without
    a dedicated wrapper class, i.e. element and attribute declarations.

    Client code may attach attributes to wrappers, e.g. in :attr:`Document.decorators`
    callbacks, as they're guaranteed to be the same object for the lifetime of the
    document.
    """

    def __init__(self, underlying: Underlying, document: Document):
        self._underlying = underlying
        self._document = document
        self._token = document._cache.issue_token()

    def __contains__(self, item: Union[str, Node]) -> bool:
        """
        Tests whether the node has an attribute with the given name or a given node
        is within its children.
        """
        if isinstance(item, str):
            return self.has_attribute(item)
        elif isinstance(item, Node):
            return any(x is item._primary for x in self.children())
        else:
            raise TypeError

    def __getitem__(self, name: str) -> Optional[str]:
        """Returns an attribute's value or :obj:`None` if it doesn't exist."""
        return self.get(name)

    def __setitem__(self, name: str, value: str):
        self.set(name, value)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.node_name!r}) [{hex(id(self))}]>"

    def __str__(self) -> str:
        return self.to_xml()

    @property
    def _cache_key(self) -> Optional[CacheKey]:
        return key_of(self._underlying)

    @property
    def _primary(self) -> Node:
        return self

    def _move_to_document(self, document: Document):
        """
        Moves the entries of this node and its descendants from the identity cache
        of the current document to the one of the given document.
        """
        source = self._document
        if source is document:
            return

        anchors = self._subtree_ids()
        if anchors:
            source_cache = source._cache
            for key, wrapper in tuple(source_cache.wrappers.items()):
                if key[0] in anchors:
                    document._cache.adopt(wrapper, source_cache)
                    wrapper._document = document

        self._document = document
        logger.debug("Moved %r into %r.", self, document)

    def _subtree_ids(self) -> set[int]:
        return set()

    def _take(self, node: Node):
        """Unlinks a node from wherever it is and moves it into this node's document."""
        node.unlink()
        node._primary._move_to_document(self._document)

    # attributes

    def attribute(self, name: str) -> Optional[Attr]:
        return None

    def attribute_nodes(self) -> list[Attr]:
        return []

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return default

    def has_attribute(self, name: str) -> bool:
        return False

    def set(self, name: str, value: str) -> str:
        raise InvalidOperation(f"{self.__class__.__name__} nodes have no attributes.")

    # naming and content

    @property
    def content(self) -> Optional[str]:
        return None

    @content.setter
    def content(self, value: str):
        raise InvalidOperation(
            f"The content of {self.__class__.__name__} nodes can't be set."
        )

    @property
    def namespace(self) -> Optional[str]:
        """The prefix of the node's namespace, if any."""
        return None

    @property
    def namespaces(self) -> dict[str, str]:
        """The namespace declarations that are made on this node."""
        return {}

    @property
    def node_name(self) -> Optional[str]:
        return getattr(self._underlying, "name", None)

    @node_name.setter
    def node_name(self, value: str):
        logger.debug("The name of %r is fixed, ignoring %r.", self, value)

    @property
    def node_type(self) -> NodeType:
        return node_type_of(self._underlying)

    @property
    def pointer_id(self) -> int:
        """
        An opaque number that identifies the node among all nodes of its document.
        """
        return self._primary._token

    # relatives

    @property
    def child(self) -> Optional[Node]:
        return None

    def children(self) -> Iterator[Node]:
        node = self.child
        while node is not None:
            yield node
            node = node.next_sibling

    @property
    def document(self) -> Document:
        return self._document

    @property
    def last_child(self) -> Optional[Node]:
        result = None
        for result in self.children():
            pass
        return result

    @property
    def next_sibling(self) -> Optional[Node]:
        return None

    @property
    def parent(self) -> Optional[Node]:
        return None

    @property
    def previous_sibling(self) -> Optional[Node]:
        return None

    # mutations

    def add_child(self, child: Node) -> Node:
        raise RejectedMutation(
            f"{self.__class__.__name__} nodes can't have children added."
        )

    def add_next_sibling(self, node: Node) -> Node:
        raise RejectedMutation(f"{self.__class__.__name__} nodes can't have siblings.")

    def add_previous_sibling(self, node: Node) -> Node:
        raise RejectedMutation(f"{self.__class__.__name__} nodes can't have siblings.")

    def duplicate(self, level: int = 1) -> Optional[Node]:
        """
        Returns a detached copy of the node. With a ``level`` of ``0`` only the node
        itself is copied, ``1`` copies it with all its descendants and attributes and
        ``2`` copies it with its attributes, but without descendants. Nodes of a
        document type definition can't be copied, :obj:`None` is returned for them.
        """
        if level not in (0, 1, 2):
            raise ValueError("The level must be one of 0, 1 or 2.")
        return None

    def replace(self, node: Node) -> Node:
        raise RejectedMutation(f"{self.__class__.__name__} nodes can't be replaced.")

    def unlink(self) -> Node:
        return self

    # other

    def decorate(self):
        """Runs the document's decoration hooks on this wrapper."""
        self._document.decorate(self)

    def encode_special_chars(self, string: str) -> str:
        return encode_special_chars(string)

    def internal_subset(self) -> Optional[DTD]:
        return self._document.internal_subset()

    @property
    def is_blank(self) -> bool:
        return False

    @property
    def path(self) -> str:
        # libxml2 denotes steps to nodes that can't be addressed with a question mark
        parent = self.parent
        return ("" if parent is None else parent.path.rstrip("/")) + "/?"

    def to_html(self) -> str:
        if not self._document.is_html:
            return self.to_xml()
        return self._to_html()

    def _to_html(self) -> str:
        return self.to_xml()

    def to_xml(self, format: bool = True) -> str:
        return ""


class _TreeNode(Node, ABC):
    """Common behaviour of nodes that can be siblings of other nodes in a tree."""

    @abstractmethod
    def _insert_after(self, node: Node) -> Node:
        pass

    @abstractmethod
    def _insert_before(self, node: Node) -> Node:
        pass

    @abstractmethod
    def _sibling_container(self) -> Optional[etree._Element]:
        """
        Returns the element that contains this node or :obj:`None` if the node is on
        the document level. :exc:`RejectedMutation` is raised if the node isn't part
        of a tree.
        """

    def _link_after(self, node: Node) -> Node:
        if isinstance(node, DocumentFragment):
            # each child directly after this node keeps their order
            for child in reversed(node._release_children()):
                self._insert_after(child)
            return node
        return self._insert_after(node)

    def _link_before(self, node: Node) -> Node:
        if isinstance(node, DocumentFragment):
            for child in node._release_children():
                self._insert_before(child)
            return node
        return self._insert_before(node)

    def add_next_sibling(self, node: Node) -> Node:
        """
        Links a node directly after this one. The node is unlinked from its previous
        position first. If it's a text node that is merged into adjacent text, the
        given wrapper refers to the merged text afterwards.
        """
        container = self._sibling_container()
        _check_linkable(node, container, self)
        self._take(node)
        try:
            self._link_after(node)
        except (TypeError, ValueError) as e:
            raise RejectedMutation(str(e)) from e
        node.decorate()
        return node

    def add_previous_sibling(self, node: Node) -> Node:
        """The same as :meth:`add_next_sibling`, but links the node before this one."""
        container = self._sibling_container()
        _check_linkable(node, container, self)
        self._take(node)
        try:
            self._link_before(node)
        except (TypeError, ValueError) as e:
            raise RejectedMutation(str(e)) from e
        node.decorate()
        return node

    def replace(self, node: Node) -> Node:
        """
        Links a node at this one's position and unlinks this one, which is returned.
        """
        container = self._sibling_container()
        if container is None and self is self._document.root:
            raise InvalidOperation("A document's root element can't be replaced.")
        _check_linkable(node, container, self)
        self._take(node)
        return self._replace_node(node)

    def _replace_node(self, node: Node) -> Node:
        try:
            self._link_before(node)
        except (TypeError, ValueError) as e:
            raise RejectedMutation(str(e)) from e
        return self.unlink()


class _ElementLike(_TreeNode):
    """
    Nodes that the tree library represents as element-like objects: elements,
    comments, processing instructions and entity references.
    """

    def __init__(self, underlying: etree._Element, document: Document):
        assert isinstance(underlying, etree._Element)
        super().__init__(underlying, document)
        self._etree_obj = underlying

    def _insert_after(self, node: Node) -> Node:
        obj = self._etree_obj
        if isinstance(node, Text):
            return _place_text(node, obj, TAIL, prepend=True)
        assert isinstance(node, _ElementLike)
        new = node._etree_obj
        obj.addnext(new)
        # lxml inserts after the tail, which must be the new sibling's tail now
        _move_text(self._document, (obj, TAIL), (new, TAIL))
        return node

    def _insert_before(self, node: Node) -> Node:
        obj = self._etree_obj
        if isinstance(node, Text):
            slot = _preceding_run_slot(obj)
            assert slot is not None
            return _place_text(node, *slot, prepend=False)
        assert isinstance(node, _ElementLike)
        obj.addprevious(node._etree_obj)
        return node

    def _is_document_level(self) -> bool:
        obj = self._etree_obj
        if obj.getparent() is not None:
            return False
        root = self._document._etree_tree.getroot()
        return obj is root or any(
            x is obj
            for x in (*root.itersiblings(preceding=True), *root.itersiblings())
        )

    def _sibling_container(self) -> Optional[etree._Element]:
        parent = self._etree_obj.getparent()
        if parent is None and not self._is_document_level():
            raise RejectedMutation("A node without a parent can't have siblings.")
        return parent

    def _subtree_ids(self) -> set[int]:
        return {id(x) for x in self._etree_obj.iter()}

    def duplicate(self, level: int = 1) -> Optional[Node]:
        super().duplicate(level)
        clone = deepcopy(self._etree_obj)
        clone.tail = None
        return wrap(clone, self._document)

    @property
    def next_sibling(self) -> Optional[Node]:
        obj = self._etree_obj
        if obj.getparent() is not None and obj.tail is not None:
            return _wrap_run(obj, TAIL, self._document)
        following = obj.getnext()
        return None if following is None else wrap(following, self._document)

    @property
    def parent(self) -> Optional[Node]:
        parent = self._etree_obj.getparent()
        return None if parent is None else wrap(parent, self._document)

    @property
    def path(self) -> str:
        obj = self._etree_obj
        top = obj
        for top in obj.iterancestors():
            pass
        result = etree.ElementTree(top).getpath(obj)
        if top is not obj and _is_fragment_container(top, self._document):
            # the step to the container
            result = result[result.index("/", 1) :]
        return result

    @property
    def previous_sibling(self) -> Optional[Node]:
        obj = self._etree_obj
        parent = obj.getparent()
        preceding = obj.getprevious()
        if preceding is not None:
            if parent is not None and preceding.tail is not None:
                return _wrap_run(preceding, TAIL, self._document)
            return wrap(preceding, self._document)
        if parent is not None and parent.text is not None:
            return _wrap_run(parent, DATA, self._document)
        return None

    def _to_html(self) -> str:
        return etree.tostring(
            self._etree_obj, method="html", encoding="unicode", with_tail=False
        )

    def to_xml(self, format: bool = True) -> str:
        result = etree.tostring(
            self._etree_obj, encoding="unicode", pretty_print=format, with_tail=False
        )
        # lxml terminates pretty printed nodes with a line break
        return result.removesuffix("\n")

    def unlink(self) -> Node:
        """
        Removes the node from its tree, the node and its descendants stay usable.
        This fails with an :exc:`InvalidOperation` for the root element of a
        document as lxml can't leave a document without one, unlinking any other
        node doesn't fail.
        """
        obj = self._etree_obj
        parent = obj.getparent()

        if parent is None:
            if obj is self._document._etree_tree.getroot():
                raise InvalidOperation("A document's root element can't be unlinked.")
            if self._is_document_level():
                # lxml can only remove nodes from an element
                holder = etree.Element(FRAGMENT_TAG)
                holder.append(obj)
                holder.remove(obj)
                obj.tail = None
            return self

        slot = _preceding_run_slot(obj)
        assert slot is not None
        _move_text(self._document, (obj, TAIL), slot)
        parent.remove(obj)
        logger.debug("Unlinked %r.", self)
        return self


class _Container:
    """
    Behaviour of nodes that hold an ordered sequence of children, the mixed in
    classes have an ``_etree_obj`` attribute.
    """

    _document: Document
    _etree_obj: etree._Element

    def _append(self, node: Node) -> Node:
        obj = self._etree_obj
        if isinstance(node, Text):
            return _place_text(node, *_last_run_slot(obj), prepend=False)
        assert isinstance(node, _ElementLike)
        obj.append(node._etree_obj)
        return node

    def add_child(self, child: Node) -> Node:
        """
        Appends a node as last child after it has been unlinked from its previous
        position. When text is merged into adjacent text, the wrapper of the
        merged text is returned. The children of a document fragment are added in
        order and the emptied fragment is returned.
        """
        _check_linkable(child, self._etree_obj, self)  # type: ignore
        self._take(child)  # type: ignore
        try:
            if isinstance(child, DocumentFragment):
                for node in child._release_children():
                    self._append(node)
                return child
            return self._append(child)
        except (TypeError, ValueError) as e:
            raise RejectedMutation(str(e)) from e

    @property
    def child(self) -> Optional[Node]:
        obj = self._etree_obj
        if obj.text is not None:
            return _wrap_run(obj, DATA, self._document)
        if len(obj):
            return wrap(obj[0], self._document)
        return None

    @property
    def content(self) -> str:
        """
        The concatenated text of all descendants, replaces all children with a text
        node when set.
        """
        return _full_text(self._etree_obj, self._document._entity_content)

    @content.setter
    def content(self, value: Optional[str]):
        obj = self._etree_obj
        document = self._document
        for child in tuple(obj):
            _detach_run(document, child, TAIL)
            obj.remove(child)
        _detach_run(document, obj, DATA)
        obj.text = value or None

    @property
    def last_child(self) -> Optional[Node]:
        obj = self._etree_obj
        anchor, position = _last_run_slot(obj)
        if read_text(anchor, position) is not None:
            return _wrap_run(anchor, position, self._document)
        if len(obj):
            return wrap(obj[-1], self._document)
        return None


class Element(_Container, _ElementLike):
    def _add_attribute_node(self, node: Attr) -> Attr:
        obj = self._etree_obj
        self._take(node)
        slot = node._underlying
        existing = self._document._cache.lookup((id(obj), slot.name))
        if existing is not None:
            existing.unlink()
        elif slot.name in obj.attrib:
            del obj.attrib[slot.name]
        slot.attach(obj)
        self._document._cache.register(node)
        return node

    def _attribute_key(self, name: str) -> Optional[str]:
        if self._document.is_html:
            return name
        return resolve_name(self._etree_obj, name)

    def add_child(self, child: Node) -> Node:
        if isinstance(child, Attr):
            return self._add_attribute_node(child)
        return super().add_child(child)

    def attribute(self, name: str) -> Optional[Attr]:
        """
        Returns the attribute node with the given name, that may be given as local
        name, in Clark notation or as ``prefix:local``.
        """
        key = self._attribute_key(name)
        if key is None or key not in self._etree_obj.attrib:
            return None
        return _wrap_attribute(self._etree_obj, key, self._document)

    def attribute_nodes(self) -> list[Attr]:
        obj = self._etree_obj
        return [_wrap_attribute(obj, name, self._document) for name in obj.attrib]

    @property
    def attributes(self) -> dict[str, Attr]:
        """The attribute nodes mapped to their qualified names."""
        return {
            qualified_attribute_name(self._etree_obj, node._underlying.name): node
            for node in self.attribute_nodes()
        }

    def duplicate(self, level: int = 1) -> Optional[Node]:
        if level == 1:
            return super().duplicate(level)
        if level not in (0, 2):
            raise ValueError("The level must be one of 0, 1 or 2.")

        clone = copy(self._etree_obj)
        clone.text = clone.tail = None
        del clone[:]
        if level == 0:
            clone.attrib.clear()
        return wrap(clone, self._document)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        key = self._attribute_key(name)
        if key is None:
            return default
        return self._etree_obj.get(key, default)

    def has_attribute(self, name: str) -> bool:
        key = self._attribute_key(name)
        return key is not None and key in self._etree_obj.attrib

    @property
    def namespace(self) -> Optional[str]:
        return self._etree_obj.prefix

    @property
    def namespaces(self) -> dict[str, str]:
        return namespace_declarations(self._etree_obj)

    @property
    def node_name(self) -> str:
        return etree.QName(self._etree_obj).localname

    @node_name.setter
    def node_name(self, value: str):
        namespace = etree.QName(self._etree_obj).namespace
        if namespace:
            self._etree_obj.tag = etree.QName(namespace, value).text
        else:
            self._etree_obj.tag = value

    @classmethod
    def new(
        cls,
        name: str,
        document: Document,
        customize: Optional[Callable[[Element], Any]] = None,
        *,
        attributes: Optional[dict[str, str]] = None,
        namespace: Optional[str] = None,
    ) -> Element:
        """
        Creates a detached element in a document. The ``name`` can be prefixed with
        a prefix that is declared on the document's root element. ``customize`` is
        called with the new element before it's returned.
        """
        context = document._etree_tree.getroot()

        if namespace:
            tag = etree.QName(namespace, name).text
        else:
            tag = resolve_name(context, name)
            if tag is None:
                raise ValueError(f"The prefix of {name!r} isn't declared.")

        # a default namespace must only be declared for elements that are in it
        tag_namespace = etree.QName(tag).namespace
        nsmap = {
            prefix: uri
            for prefix, uri in context.nsmap.items()
            if prefix is not None or uri == tag_namespace
        }
        element = context.makeelement(tag, attrib=attributes, nsmap=nsmap)
        result = wrap(element, document)
        assert isinstance(result, Element)
        if customize is not None:
            customize(result)
        return result

    def remove_attribute(self, name: str) -> Optional[Attr]:
        """Removes an attribute and returns its node or :obj:`None` if it's absent."""
        node = self.attribute(name)
        if node is None:
            return None
        node.unlink()
        return node

    def set(self, name: str, value: str) -> str:
        """
        Sets an attribute's value. Its name may be given as local name, in Clark
        notation or as ``prefix:local`` with a prefix that is declared in the
        element's scope.
        """
        key = self._attribute_key(name)
        if key is None:
            raise InvalidOperation(f"The prefix of {name!r} isn't declared.")
        self._etree_obj.set(key, value)
        return value


class Comment(_ElementLike):
    @property
    def content(self) -> str:
        return self._etree_obj.text or ""

    @content.setter
    def content(self, value: str):
        self._etree_obj.text = value

    @property
    def node_name(self) -> str:
        return "comment"

    @node_name.setter
    def node_name(self, value: str):
        logger.debug("The name of %r is fixed, ignoring %r.", self, value)


class ProcessingInstruction(_ElementLike):
    @property
    def content(self) -> str:
        return self._etree_obj.text or ""

    @content.setter
    def content(self, value: str):
        self._etree_obj.text = value

    @property
    def node_name(self) -> str:
        return self._etree_obj.target

    @node_name.setter
    def node_name(self, value: str):
        self._etree_obj.target = value


class EntityReference(_ElementLike):
    @property
    def content(self) -> str:
        """The replacement text of the referenced entity if it's declared."""
        return self._document._entity_content(self._etree_obj.name)

    @content.setter
    def content(self, value: str):
        raise InvalidOperation("The content of entity references can't be set.")

    @property
    def node_name(self) -> str:
        return self._etree_obj.name

    @node_name.setter
    def node_name(self, value: str):
        self._etree_obj.name = value


class Text(_TreeNode):
    """
    A run of character data. Adjacent text is always coalesced into one run, a
    wrapper whose text was merged into another run refers to that one from then on.
    """

    def __init__(self, underlying: TextRun, document: Document):
        assert isinstance(underlying, TextRun)
        self._alias_of: Optional[Text] = None
        super().__init__(underlying, document)

    def __repr__(self) -> str:
        run = self._run
        return (
            f"<{self.__class__.__name__}({run.content!r}, position={run.position}) "
            f"[{hex(id(self))}]>"
        )

    @property
    def _cache_key(self) -> Optional[CacheKey]:
        return self._run.key

    @property
    def _document(self) -> Document:
        if self._alias_of is not None:
            return self._alias_of._document
        return self.__document

    @_document.setter
    def _document(self, document: Document):
        self.__document = document

    def _insert_after(self, node: Node) -> Node:
        run = self._run
        assert run.anchor is not None
        if isinstance(node, Text):
            return _place_text(node, run.anchor, run.position, prepend=False)
        assert isinstance(node, _ElementLike)
        if run.position == TAIL:
            run.anchor.addnext(node._etree_obj)
        else:
            run.anchor.insert(0, node._etree_obj)
        return node

    def _insert_before(self, node: Node) -> Node:
        run = self._run
        assert run.anchor is not None
        return _insert_at_run(self._document, run.anchor, run.position, node)

    def _replace_node(self, node: Node) -> Node:
        # inserted text would be merged into this run, so it's vacated first
        run = self._run
        anchor, position = run.anchor, run.position
        assert anchor is not None
        document = self._document
        self.unlink()
        try:
            if isinstance(node, DocumentFragment):
                for child in reversed(node._release_children()):
                    _insert_at_run(document, anchor, position, child)
            else:
                _insert_at_run(document, anchor, position, node)
        except (TypeError, ValueError) as e:
            raise RejectedMutation(str(e)) from e
        return self

    @property
    def _primary(self) -> Text:
        result = self
        while result._alias_of is not None:
            result = result._alias_of
        return result

    @property
    def _run(self) -> TextRun:
        result = self._primary._underlying
        assert isinstance(result, TextRun)
        return result

    def _sibling_container(self) -> Optional[etree._Element]:
        run = self._run
        if run.position == DETACHED:
            raise RejectedMutation("A node without a parent can't have siblings.")
        assert run.anchor is not None
        if run.position == DATA:
            return run.anchor
        return run.anchor.getparent()

    def add_child(self, child: Node) -> Node:
        """Text can only be added to text, the given text is merged into this one."""
        if not isinstance(child, Text):
            raise RejectedMutation("Only text can be added to text nodes.")
        if child._primary is self._primary:
            raise RejectedMutation("A node can't be linked relative to itself.")
        self._take(child)
        run = self._run
        if run.position == DETACHED:
            run.content += child._run.content
            child._primary._alias_of = self._primary
            return self._primary
        assert run.anchor is not None
        return _place_text(child, run.anchor, run.position, prepend=False)

    @property
    def content(self) -> str:
        return self._run.content

    @content.setter
    def content(self, value: str):
        self._run.content = value

    def duplicate(self, level: int = 1) -> Optional[Node]:
        super().duplicate(level)
        return _new_detached(Text, TextRun(content=self.content), self._document)

    @property
    def is_blank(self) -> bool:
        return not self.content.strip(" \t\n\r")

    @property
    def next_sibling(self) -> Optional[Node]:
        run = self._run
        if run.position == DETACHED:
            return None
        assert run.anchor is not None
        if run.position == DATA:
            following = run.anchor[0] if len(run.anchor) else None
        else:
            following = run.anchor.getnext()
        return None if following is None else wrap(following, self._document)

    @property
    def node_name(self) -> str:
        return "text"

    @node_name.setter
    def node_name(self, value: str):
        logger.debug("The name of %r is fixed, ignoring %r.", self, value)

    @property
    def parent(self) -> Optional[Node]:
        run = self._run
        if run.position == DETACHED:
            return None
        assert run.anchor is not None
        parent = run.anchor if run.position == DATA else run.anchor.getparent()
        return None if parent is None else wrap(parent, self._document)

    @property
    def path(self) -> str:
        run = self._run
        parent = self.parent
        if parent is None:
            return "text()"
        assert run.anchor is not None
        container = run.anchor if run.position == DATA else run.anchor.getparent()

        slots = [] if container.text is None else [(container, DATA)]
        slots.extend((x, TAIL) for x in container if x.tail is not None)
        step = "text()"
        if len(slots) > 1:
            index = next(
                i
                for i, (anchor, position) in enumerate(slots, start=1)
                if anchor is run.anchor and position == run.position
            )
            step = f"text()[{index}]"
        return f"{parent.path.rstrip('/')}/{step}"

    @property
    def previous_sibling(self) -> Optional[Node]:
        run = self._run
        if run.position != TAIL:
            return None
        assert run.anchor is not None
        return wrap(run.anchor, self._document)

    def to_xml(self, format: bool = True) -> str:
        return escape_content(self.content)

    def unlink(self) -> Node:
        primary = self._primary
        run = primary._underlying
        if run.position == DETACHED:
            return self
        anchor, position = run.anchor, run.position
        key = run.key
        run.detach()
        write_text(anchor, position, None)
        removed = self._document._cache.discard(key)
        assert removed is primary
        logger.debug("Unlinked %r.", self)
        return self


class Attr(Node):
    """An attribute of an element or a detached one."""

    _underlying: AttributeSlot

    def __init__(self, underlying: AttributeSlot, document: Document):
        assert isinstance(underlying, AttributeSlot)
        super().__init__(underlying, document)

    @property
    def content(self) -> str:
        return self._underlying.value

    @content.setter
    def content(self, value: str):
        self._underlying.value = value

    def duplicate(self, level: int = 1) -> Optional[Node]:
        super().duplicate(level)
        slot = self._underlying
        return _new_detached(
            Attr, AttributeSlot(slot.name, value=slot.value), self._document
        )

    @property
    def namespace(self) -> Optional[str]:
        slot = self._underlying
        namespace = etree.QName(slot.name).namespace
        if slot.owner is None:
            return "xml" if namespace == XML_NAMESPACE else None
        return prefix_for(slot.owner, namespace)

    def _sibling_names(self) -> list[str]:
        owner = self._underlying.owner
        return [] if owner is None else list(owner.attrib)

    @property
    def next_sibling(self) -> Optional[Node]:
        slot = self._underlying
        names = self._sibling_names()
        if not names:
            return None
        index = names.index(slot.name) + 1
        if index == len(names):
            return None
        assert slot.owner is not None
        return _wrap_attribute(slot.owner, names[index], self._document)

    @property
    def node_name(self) -> str:
        return etree.QName(self._underlying.name).localname

    @node_name.setter
    def node_name(self, value: str):
        slot = self._underlying
        namespace = etree.QName(slot.name).namespace
        name = etree.QName(namespace, value).text if namespace else value
        if name == slot.name:
            return

        owner = slot.owner
        if owner is None:
            slot.name = name
            return

        cache = self._document._cache
        old_key = slot.key
        assert old_key is not None
        replaced = cache.lookup((id(owner), name))
        if replaced is not None:
            replaced.unlink()

        attributes = [
            (name if k == slot.name else k, v) for k, v in owner.attrib.items()
        ]
        owner.attrib.clear()
        for key, item in attributes:
            owner.set(key, item)
        slot.name = name
        cache.rekey(old_key, self)

    @property
    def parent(self) -> Optional[Node]:
        owner = self._underlying.owner
        return None if owner is None else wrap(owner, self._document)

    @property
    def path(self) -> str:
        slot = self._underlying
        step = "@" + qualified_attribute_name(slot.owner, slot.name)
        parent = self.parent
        if parent is None:
            return step
        return f"{parent.path.rstrip('/')}/{step}"

    @property
    def previous_sibling(self) -> Optional[Node]:
        slot = self._underlying
        names = self._sibling_names()
        if not names:
            return None
        index = names.index(slot.name)
        if index == 0:
            return None
        assert slot.owner is not None
        return _wrap_attribute(slot.owner, names[index - 1], self._document)

    def to_xml(self, format: bool = True) -> str:
        slot = self._underlying
        name = qualified_attribute_name(slot.owner, slot.name)
        return f' {name}="{encode_special_chars(slot.value)}"'

    def unlink(self) -> Node:
        slot = self._underlying
        key = slot.key
        if key is None:
            return self
        slot.detach()
        self._document._cache.discard(key)
        logger.debug("Unlinked %r.", self)
        return self


class DocumentFragment(_Container, Node):
    """
    A detached container of nodes. When it's linked into a tree, its children are
    moved to that position and the fragment is left empty.
    """

    def __init__(self, underlying: etree._Element, document: Document):
        assert underlying.tag == FRAGMENT_TAG
        super().__init__(underlying, document)
        self._etree_obj = underlying

    def _release_children(self) -> list[Node]:
        result = list(self.children())
        for node in result:
            node.unlink()
        return result

    def _subtree_ids(self) -> set[int]:
        return {id(x) for x in self._etree_obj.iter()}

    def duplicate(self, level: int = 1) -> Optional[Node]:
        super().duplicate(level)
        clone = deepcopy(self._etree_obj)
        if level != 1:
            clone.text = None
            del clone[:]
        return _new_fragment(clone, self._document)

    @property
    def node_name(self) -> str:
        return "#document-fragment"

    @node_name.setter
    def node_name(self, value: str):
        logger.debug("The name of %r is fixed, ignoring %r.", self, value)

    @property
    def node_type(self) -> NodeType:
        return NodeType.DOCUMENT_FRAG

    @property
    def path(self) -> str:
        return ""

    def _to_html(self) -> str:
        return "".join(x.to_html() for x in self.children())

    def to_xml(self, format: bool = True) -> str:
        return "".join(x.to_xml(format) for x in self.children())


class DTD(Node):
    """The internal subset of a document's type definition."""

    _underlying: Declaration

    @property
    def child(self) -> Optional[Node]:
        for result in self.declarations():
            return result
        return None

    def declarations(self) -> list[Node]:
        """The element and entity declarations in the internal subset."""
        return self.elements() + self.entities()

    def elements(self) -> list[Node]:
        dtd = self._underlying.obj
        return [
            wrap(Declaration(NodeType.ELEMENT_DECL, x, dtd), self._document)
            for x in dtd.iterelements()
        ]

    def entities(self) -> list[Node]:
        dtd = self._underlying.obj
        return [
            wrap(Declaration(NodeType.ENTITY_DECL, x, dtd), self._document)
            for x in dtd.iterentities()
        ]

    @property
    def external_id(self) -> Optional[str]:
        return self._underlying.obj.external_id

    @property
    def system_id(self) -> Optional[str]:
        return self._underlying.obj.system_url

    def to_xml(self, format: bool = True) -> str:
        return self._document._etree_tree.docinfo.doctype


class _Declaration(Node):
    """Declarations within a document type definition."""

    _underlying: Declaration

    def _siblings(self) -> list[Node]:
        parent = self.parent
        assert isinstance(parent, DTD)
        return parent.declarations()

    @property
    def next_sibling(self) -> Optional[Node]:
        siblings = self._siblings()
        index = siblings.index(self) + 1
        return siblings[index] if index < len(siblings) else None

    @property
    def parent(self) -> Optional[Node]:
        return self._document._cache.lookup(INTERNAL_SUBSET_KEY)

    @property
    def previous_sibling(self) -> Optional[Node]:
        siblings = self._siblings()
        index = siblings.index(self)
        return siblings[index - 1] if index else None


class EntityDeclaration(_Declaration):
    @property
    def content(self) -> Optional[str]:
        """The replacement text of an internal entity."""
        return self._underlying.obj.content

    @property
    def original_content(self) -> Optional[str]:
        return self._underlying.obj.orig

    @property
    def system_id(self) -> Optional[str]:
        return self._underlying.obj.system_url

    def to_xml(self, format: bool = True) -> str:
        entity = self._underlying.obj
        if entity.system_url:
            return f'<!ENTITY {entity.name} SYSTEM "{entity.system_url}">'
        return f'<!ENTITY {entity.name} "{entity.orig or ""}">'


WRAPPER_CLASSES: dict[NodeType, type] = {
    NodeType.ATTRIBUTE: Attr,
    NodeType.COMMENT: Comment,
    NodeType.DTD: DTD,
    NodeType.ELEMENT: Element,
    NodeType.ELEMENT_DECL: _Declaration,
    NodeType.ENTITY_DECL: EntityDeclaration,
    NodeType.ENTITY_REF: EntityReference,
    NodeType.PI: ProcessingInstruction,
    NodeType.TEXT: Text,
}


__all__ = (
    Attr.__name__,
    Comment.__name__,
    DocumentFragment.__name__,
    DTD.__name__,
    Element.__name__,
    EntityDeclaration.__name__,
    EntityReference.__name__,
    Node.__name__,
    ProcessingInstruction.__name__,
    Text.__name__,
    wrap.__name__,
)
