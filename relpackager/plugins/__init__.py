"""
Release plugins for relpackager.

Modules:

base : module
    ReleasePlugin protocol, plugin loading and resolution.
default : module
    Recipe-driven default implementation of the plugin hooks.

Public API:

ReleasePlugin : Protocol
    Hooks a plugin may implement.
ResolvedPlugin : dataclass
    A plugin with every hook filled in from the default plugin.
DefaultPlugin : class
    Download URL template, archive extraction and executables mapping.
call_hook : function
    Call a plugin hook, awaiting it when it is async.
load_plugin : function
    Import a plugin from "module:attribute" or a .py file.
resolve_plugin : function
    Combine a plugin with the default plugin for a package.

"""

from .base import (
    ReleasePlugin,
    ResolvedPlugin,
    call_hook,
    load_plugin,
    resolve_plugin,
)
from .default import DEFAULT_DOWNLOAD_URL, DefaultPlugin

__all__ = [
    "DEFAULT_DOWNLOAD_URL",
    "DefaultPlugin",
    "ReleasePlugin",
    "ResolvedPlugin",
    "call_hook",
    "load_plugin",
    "resolve_plugin",
]
