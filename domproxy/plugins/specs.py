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

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from domproxy import Document
    from domproxy.nodes import Node
    from domproxy.typing import Loader


hookspec = pluggy.HookspecMarker("domproxy")


@hookspec
def configure_loaders(loaders: list[Loader]) -> None:
    """
    Configures the document loaders. Implementations are expected to manipulate
    the list that is provided to the hook.

    An example module that is specified as ``domproxy`` plugin for an IPFS loader
    might look like this:

    .. testcode::

        from types import SimpleNamespace
        from typing import Any

        import pluggy
        from domproxy.loaders import text_loader, path_loader
        from domproxy.typing import Loader, LoaderResult


        def ipfs_loader(source: Any, config: SimpleNamespace) -> LoaderResult:
            if isinstance(source, str) and source.startswith("ipfs://"):
                # let's assume the document is loaded as string here:
                data = "<root/>"
                return text_loader(data, config)

            # return an excuse to indicate that this loader is not suited to load
            # the document:
            return "Not an IPFS URL."


        hookimpl = pluggy.HookimplMarker("domproxy")


        @hookimpl
        def configure_loaders(loaders: list[Loader]):
            loaders.insert(loaders.index(path_loader), ipfs_loader)
    """


@hookspec
def decorate_node(node: Node, document: Document) -> None:
    """
    Is called with every newly created node wrapper and whenever a node was linked
    next to another one. Implementations may attach attributes to the wrapper, it's
    guaranteed to be the only object that represents the underlying node.
    """
