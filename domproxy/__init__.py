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


from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace
from typing import IO, TYPE_CHECKING, Any, Callable, Iterable, Optional

import lxml.html
from lxml import etree

from domproxy.caches import NodeCache
from domproxy.exceptions import (
    FailedDocumentLoading,
    InvalidOperation,
    RejectedMutation,
)
from domproxy.handles import INTERNAL_SUBSET_KEY, Declaration, TextRun
from domproxy.names import FRAGMENT_TAG, NodeType
from domproxy.nodes import (
    DTD,
    Attr,
    Comment,
    DocumentFragment,
    Element,
    EntityDeclaration,
    EntityReference,
    Node,
    ProcessingInstruction,
    Text,
    _new_detached,
    _new_fragment,
    wrap,
)
from domproxy.plugins import configured_loaders, load_plugins, plugin_manager
from domproxy.utils import encode_special_chars, namespace_declarations

if TYPE_CHECKING:
    from domproxy.typing import Decorator


logger = logging.getLogger(__name__)


# constants

# entity references are kept as nodes, and CDATA sections are merged into text as
# lxml doesn't expose them as nodes anyway
DEFAULT_PARSER = etree.XMLParser(
    remove_blank_text=False, resolve_entities=False, strip_cdata=True
)


# api


class Document:
    """
    This class represents a parsed XML or HTML document and owns the identity cache
    of all node wrappers that belong to it.

    :param source: Anything that one of the configured loaders can turn into a
                   tree, e.g. a string or bytes with markup, a
                   :class:`pathlib.Path`, a file-like object, an lxml tree or an
                   :class:`Element` of another document.
    :param parser: The lxml parser to use, an :class:`lxml.etree.HTMLParser` makes
                   the document an HTML document.
    :param decorators: Callables that are called with every new node wrapper.
    """

    def __init__(
        self,
        source: Any,
        parser: Optional[etree._FeedParser] = None,
        *,
        decorators: Iterable[Decorator] = (),
    ):
        self.config = SimpleNamespace(
            parser=DEFAULT_PARSER if parser is None else parser
        )
        self.decorators: list[Decorator] = list(decorators)
        self._cache = NodeCache()
        self._etree_tree = self.__load_source(source, self.config)
        if self._etree_tree.getroot() is None:
            raise FailedDocumentLoading(source, {})
        self.is_html = isinstance(self.config.parser, etree.HTMLParser) or isinstance(
            self._etree_tree.parser, etree.HTMLParser
        )

    @staticmethod
    def __load_source(source: Any, config: SimpleNamespace) -> etree._ElementTree:
        loader_excuses: dict[Callable, str | Exception] = {}

        for loader in configured_loaders:
            try:
                loader_result = loader(source, config)
            except Exception as e:
                loader_excuses[loader] = e
            else:
                if isinstance(loader_result, str):
                    loader_excuses[loader] = loader_result
                else:
                    logger.debug("Loaded %r with %s.", source, loader.__name__)
                    return loader_result

        raise FailedDocumentLoading(source, loader_excuses)

    def __contains__(self, node: Node) -> bool:
        """Tests whether a node belongs to a document instance."""
        return node.document is self

    def __str__(self) -> str:
        return self.to_xml(format=False)

    @property
    def cache(self) -> NodeCache:
        """The identity cache, exposed for introspection."""
        return self._cache

    def cleanup_namespaces(self, retain_prefixes: Optional[Iterable[str]] = None):
        """Removes namespace declarations that aren't used within the document."""
        etree.cleanup_namespaces(
            self._etree_tree, keep_ns_prefixes=retain_prefixes
        )

    def clone(self) -> Document:
        """Returns a new document with a copy of this one's tree."""
        return self.__class__(
            self._etree_tree, parser=self.config.parser, decorators=self.decorators
        )

    def decorate(self, node: Node):
        """Runs the plugins' and this document's decorators on a node wrapper."""
        plugin_manager.hook.decorate_node(node=node, document=self)
        for decorator in self.decorators:
            decorator(node)

    def encode_special_chars(self, string: str) -> str:
        return encode_special_chars(string)

    def _entity_content(self, name: str) -> str:
        dtd = self._etree_tree.docinfo.internalDTD
        if dtd is not None:
            for entity in dtd.iterentities():
                if entity.name == name:
                    return entity.content or ""
        return ""

    def fragment(self, markup: str = "") -> DocumentFragment:
        """
        Parses markup into a detached document fragment. The namespace declarations
        of the root element are in scope for the markup.
        """
        if self.is_html:
            container = lxml.html.fragment_fromstring(
                markup, create_parent=FRAGMENT_TAG
            )
        else:
            root = self._etree_tree.getroot()
            declarations = "".join(
                f' {name}="{encode_special_chars(namespace)}"'
                for name, namespace in namespace_declarations(root).items()
            )
            container = etree.fromstring(
                f"<{FRAGMENT_TAG}{declarations}>{markup}</{FRAGMENT_TAG}>",
                self.config.parser,
            )
        return _new_fragment(container, self)

    def internal_subset(self) -> Optional[DTD]:
        """
        Returns the document type definition's internal subset or :obj:`None` if
        the document has none.
        """
        result = self._cache.lookup(INTERNAL_SUBSET_KEY)
        if result is None:
            # lxml returns a new copy with each access
            dtd = self._etree_tree.docinfo.internalDTD
            if dtd is None:
                return None
            result = wrap(Declaration(NodeType.DTD, dtd, dtd), self)
        assert isinstance(result, DTD)
        return result

    def new_comment(self, content: str) -> Comment:
        result = wrap(etree.Comment(content), self)
        assert isinstance(result, Comment)
        return result

    def new_element(
        self,
        name: str,
        attributes: Optional[dict[str, str]] = None,
        namespace: Optional[str] = None,
        customize: Optional[Callable[[Element], Any]] = None,
    ) -> Element:
        return Element.new(
            name, self, customize, attributes=attributes, namespace=namespace
        )

    def new_entity_reference(self, name: str) -> EntityReference:
        result = wrap(etree.Entity(name), self)
        assert isinstance(result, EntityReference)
        return result

    def new_processing_instruction(
        self, target: str, content: Optional[str] = None
    ) -> ProcessingInstruction:
        result = wrap(etree.ProcessingInstruction(target, content), self)
        assert isinstance(result, ProcessingInstruction)
        return result

    def new_text(self, content: str) -> Text:
        return _new_detached(Text, TextRun(content=content), self)

    @property
    def root(self) -> Element:
        """The root element of a document instance."""
        result = wrap(self._etree_tree.getroot(), self)
        assert isinstance(result, Element)
        return result

    def save(self, path: Path, pretty: bool = False):
        with path.open("bw") as file:
            self.write(file, pretty=pretty)

    def to_html(self) -> str:
        if not self.is_html:
            return self.to_xml()
        return etree.tostring(self._etree_tree, method="html", encoding="unicode")

    def to_xml(self, format: bool = True) -> str:
        return etree.tostring(
            self._etree_tree, encoding="unicode", pretty_print=format
        )

    def write(self, buffer: IO, pretty: bool = False):
        self._etree_tree.write(
            buffer, encoding="utf-8", pretty_print=pretty, xml_declaration=True
        )


load_plugins()


__all__ = (
    "DEFAULT_PARSER",
    Attr.__name__,
    Comment.__name__,
    Document.__name__,
    DocumentFragment.__name__,
    DTD.__name__,
    Element.__name__,
    EntityDeclaration.__name__,
    EntityReference.__name__,
    FailedDocumentLoading.__name__,
    InvalidOperation.__name__,
    Node.__name__,
    NodeType.__name__,
    ProcessingInstruction.__name__,
    RejectedMutation.__name__,
    Text.__name__,
)
