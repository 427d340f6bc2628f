import sys

from domproxy.plugins import hookimpl, plugin_manager


@hookimpl
def decorate_node(node, document):
    node.decorated_by_plugin = getattr(node, "decorated_by_plugin", 0) + 1


plugin_manager.register(sys.modules[__name__])
