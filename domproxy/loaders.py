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
The ``loaders`` module provides a set of loaders to retrieve documents from various
data sources. Each loader either returns an :class:`lxml.etree._ElementTree` or a
string that explains why it didn't load the given source.
"""

from __future__ import annotations

from copy import deepcopy
from io import IOBase
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, cast

from lxml import etree

from domproxy.nodes import Element
from domproxy.plugins import hookimpl

if TYPE_CHECKING:
    from types import SimpleNamespace

    from domproxy.typing import Loader, LoaderResult


def node_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader loads, or rather clones, an :class:`domproxy.nodes.Element` instance
    and its descendant nodes.
    """
    if isinstance(data, Element):
        root = deepcopy(data._etree_obj)
        root.tail = None
        return etree.ElementTree(element=root, parser=config.parser)
    return "The input value is not an Element instance."


def etree_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader processes :class:`lxml.etree._Element` and
    :class:`lxml.etree._ElementTree` instances.
    """
    if isinstance(data, etree._ElementTree):
        return deepcopy(data)
    if isinstance(data, etree._Element):
        return etree.ElementTree(element=deepcopy(data), parser=config.parser)
    return "The input value is not an lxml element or tree."


def path_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader loads from a file that is pointed at with a :class:`pathlib.Path`
    instance. That instance will be bound to ``source_path`` on the document's
    :attr:`domproxy.Document.config` attribute.
    """
    if isinstance(data, Path):
        config.source_path = data
        with data.open("rb") as file:
            return buffer_loader(file, config)
    return "The input value is not a pathlib.Path instance."


def buffer_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader loads a document from a :term:`file-like object`.
    """
    if isinstance(data, IOBase):
        return etree.parse(cast(IO, data), parser=config.parser)
    return "The input value is no buffer object."


def text_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    Parses a string containing a full document.
    """
    if isinstance(data, str):
        data = data.encode()
    if isinstance(data, bytes):
        root = etree.fromstring(data, config.parser)
        if root is None:
            return "The input value contains no document."
        return root.getroottree()
    return "The input value is not a byte sequence or a string."


@hookimpl(tryfirst=True)
def configure_loaders(loaders: list[Loader]):
    loaders.extend(
        (node_loader, etree_loader, path_loader, buffer_loader, text_loader)
    )


__all__ = (
    buffer_loader.__name__,
    etree_loader.__name__,
    node_loader.__name__,
    path_loader.__name__,
    text_loader.__name__,
)
