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

from typing import Final, Optional

from lxml import etree

from domproxy.names import XML_NAMESPACE, XMLNS_PREFIX


_CONTENT_ESCAPES: Final = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", "\r": "&#13;"}
)
_SPECIAL_CHARACTERS_ESCAPES: Final = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "\r": "&#13;"}
)


def encode_special_chars(string: str) -> str:
    """
    Escapes the characters that are significant in XML markup, as libxml2's
    ``xmlEncodeSpecialChars`` does.
    """
    return string.translate(_SPECIAL_CHARACTERS_ESCAPES)


def escape_content(string: str) -> str:
    return string.translate(_CONTENT_ESCAPES)


def namespace_declarations(element: etree._Element) -> dict[str, str]:
    """
    Returns the namespace declarations that are made on the given element, keyed as
    they appear in markup, e.g. ``xmlns`` and ``xmlns:tei``.
    """
    parent = element.getparent()
    inherited = {} if parent is None else parent.nsmap
    result = {}
    for prefix, namespace in element.nsmap.items():
        if prefix in inherited and inherited[prefix] == namespace:
            continue
        if prefix is None:
            result[XMLNS_PREFIX] = namespace
        else:
            result[f"{XMLNS_PREFIX}:{prefix}"] = namespace
    return result


def prefix_for(element: etree._Element, namespace: Optional[str]) -> Optional[str]:
    if not namespace:
        return None
    if namespace == XML_NAMESPACE:
        return "xml"
    for prefix, candidate in element.nsmap.items():
        if candidate == namespace and prefix is not None:
            return prefix
    return None


def qualified_attribute_name(element: Optional[etree._Element], name: str) -> str:
    """Converts an attribute name in Clark notation to its ``prefix:local`` form."""
    qname = etree.QName(name)
    if element is None:
        prefix = "xml" if qname.namespace == XML_NAMESPACE else None
    else:
        prefix = prefix_for(element, qname.namespace)
    if prefix is None:
        return qname.localname
    return f"{prefix}:{qname.localname}"


def resolve_name(element: etree._Element, name: str) -> Optional[str]:
    """
    Returns the Clark notation for a name that is given either as local
    name, in Clark notation or as ``prefix:local``. :obj:`None` is returned if a
    prefix isn't bound within the element's scope.
    """
    if name.startswith("{"):
        return name
    prefix, _, local_name = name.rpartition(":")
    if not prefix:
        return name
    if prefix == "xml":
        namespace = XML_NAMESPACE
    else:
        namespace = element.nsmap.get(prefix)
    if namespace is None:
        return None
    return f"{{{namespace}}}{local_name}"


__all__ = (
    encode_special_chars.__name__,
    escape_content.__name__,
    namespace_declarations.__name__,
    qualified_attribute_name.__name__,
    resolve_name.__name__,
)
