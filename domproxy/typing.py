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

from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, Callable, Tuple, Union

from lxml import etree

if TYPE_CHECKING:
    from domproxy.handles import AttributeSlot, Declaration, TextRun
    from domproxy.nodes import Node  # noqa: F401


CacheKey = Tuple[int, Union[int, str]]
Decorator = Callable[["Node"], None]

# what a wrapper can be backed by
Underlying = Union[etree._Element, "TextRun", "AttributeSlot", "Declaration"]

LoaderResult = Union[etree._ElementTree, str]
Loader = Callable[[Any, SimpleNamespace], LoaderResult]
