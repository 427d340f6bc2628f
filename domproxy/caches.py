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
from itertools import count
from typing import TYPE_CHECKING, Iterator, Optional

if TYPE_CHECKING:
    from domproxy.nodes import Node
    from domproxy.typing import CacheKey


logger = logging.getLogger(__name__)


class NodeCache:
    """
    The identity cache of a document. It maps the keys of underlying nodes to the one
    wrapper that represents each of them, so that repeatedly accessing the same node
    yields the same object.

    Entries are never evicted by client operations. They are moved when the tree
    library relocates a node and dropped when a node ceases to exist at the position
    that its key describes.
    """

    __slots__ = ("_tokens", "wrappers")

    def __init__(self):
        self._tokens = count(1)
        self.wrappers: dict[CacheKey, Node] = {}

    def __contains__(self, key: CacheKey) -> bool:
        return key in self.wrappers

    def __iter__(self) -> Iterator[Node]:
        return iter(self.wrappers.values())

    def __len__(self) -> int:
        return len(self.wrappers)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({len(self)} wrappers) [{hex(id(self))}]>"

    def adopt(self, wrapper: Node, source: NodeCache):
        """Moves a wrapper's entry from another document's cache to this one."""
        key = wrapper._cache_key
        assert key is not None
        assert source.wrappers.pop(key) is wrapper
        assert key not in self.wrappers
        self.wrappers[key] = wrapper
        wrapper._token = next(self._tokens)
        logger.debug("Adopted %r from %r into %r.", wrapper, source, self)

    def issue_token(self) -> int:
        """Returns an identifier that is unique among this cache's wrappers."""
        return next(self._tokens)

    def discard(self, key: CacheKey) -> Optional[Node]:
        return self.wrappers.pop(key, None)

    def lookup(self, key: CacheKey) -> Optional[Node]:
        return self.wrappers.get(key)

    def register(self, wrapper: Node):
        key = wrapper._cache_key
        assert key is not None
        assert key not in self.wrappers, key
        self.wrappers[key] = wrapper

    def rekey(self, old_key: CacheKey, wrapper: Node):
        """
        Moves a wrapper's entry to the key that its relocated underlying node is now
        identified by.
        """
        assert self.wrappers.pop(old_key) is wrapper
        new_key = wrapper._cache_key
        assert new_key is not None
        assert new_key not in self.wrappers, new_key
        self.wrappers[new_key] = wrapper
        logger.debug("Moved %r from %s to %s.", wrapper, old_key, new_key)


__all__ = (NodeCache.__name__,)
