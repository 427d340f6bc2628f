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

import enum
from typing import Final


XML_NAMESPACE: Final = "http://www.w3.org/XML/1998/namespace"
XMLNS_PREFIX: Final = "xmlns"

# the tag of the lxml element that holds the children of a document fragment
FRAGMENT_TAG: Final = "domproxy-fragment"


class NodeType(enum.IntEnum):
    """
    The node type tags, their values are the ones that libxml2 uses.
    """

    ELEMENT = 1
    ATTRIBUTE = 2
    TEXT = 3
    CDATA_SECTION = 4
    ENTITY_REF = 5
    ENTITY = 6
    PI = 7
    COMMENT = 8
    DOCUMENT = 9
    DOCUMENT_TYPE = 10
    DOCUMENT_FRAG = 11
    NOTATION = 12
    HTML_DOCUMENT = 13
    DTD = 14
    ELEMENT_DECL = 15
    ATTRIBUTE_DECL = 16
    ENTITY_DECL = 17
    NAMESPACE_DECL = 18
    XINCLUDE_START = 19
    XINCLUDE_END = 20


__all__ = (
    "FRAGMENT_TAG",
    NodeType.__name__,
    "XML_NAMESPACE",
    "XMLNS_PREFIX",
)
