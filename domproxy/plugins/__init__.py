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
Plugins are modules that implement the hooks that are declared in
:mod:`domproxy.plugins.specs` and are registered as entrypoint in the ``domproxy``
group.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pluggy

from domproxy.plugins import specs

if TYPE_CHECKING:
    from domproxy.typing import Loader


logger = logging.getLogger(__name__)

hookimpl = pluggy.HookimplMarker("domproxy")

plugin_manager = pluggy.PluginManager("domproxy")
plugin_manager.add_hookspecs(specs)

configured_loaders: list[Loader] = []
"""
The loaders that are tried in order when a new :class:`domproxy.Document` instance is
created.
"""


def load_plugins():
    """
    Loads all modules that are registered as entrypoint in the ``domproxy`` group and
    lets all plugins configure the loaders anew.
    """
    from domproxy import loaders

    if not plugin_manager.is_registered(loaders):
        plugin_manager.register(loaders)
    count = plugin_manager.load_setuptools_entrypoints("domproxy")
    logger.debug("Loaded %s plugin(s) from entrypoints.", count)

    configured_loaders.clear()
    plugin_manager.hook.configure_loaders(loaders=configured_loaders)


__all__ = (
    "configured_loaders",
    "hookimpl",
    load_plugins.__name__,
    "plugin_manager",
)
