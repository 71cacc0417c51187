"""
REPL Bridge - Send code from an editor document to a long-lived REPL.

The bridge extracts a region of the document (a line, a selection, a fenced
code chunk, every chunk above the cursor, or a bracketed block), hands it to
an external interactive process, and keeps that process alive across calls,
respawning it when it has died.

Basic Usage:
    import replbridge
    from replbridge import MemoryEditor, RegionKind

    editor = MemoryEditor.from_file("analysis.Rmd", cursor=(12, 0))
    bridge = replbridge.connect(editor)

    bridge.dispatch(RegionKind.CHUNK)      # send the chunk under the cursor
    bridge.send_command("summary(df)")     # send a literal command
    print(bridge.session_status())

Advanced Usage:
    from replbridge import Bridge, BridgeConfig

    config = BridgeConfig(
        command="python3 -i -q",
        source_template="exec(open('{path}').read())",
        temp_suffix=".py",
    )
    bridge = Bridge(editor, config=config, backend=MyTerminalBackend())
"""

__version__ = "0.1.0"

import dataclasses
from typing import List, Optional

from replbridge.config import BridgeConfig, get_config, set_config
from replbridge.exceptions import (
    BridgeError,
    ConfigurationError,
    ExtractionError,
    SessionError,
    TransmissionError,
)
from replbridge.core.types import (
    Command,
    CursorPosition,
    DispatchOptions,
    Region,
    RegionKind,
    SelectionBounds,
    SessionState,
    SessionStatus,
)
from replbridge.core.host import EditorHost, MemoryEditor
from replbridge.core.process import ProcessBackend, SubprocessBackend
from replbridge.core.session import SessionRegistry
from replbridge.bridge import Bridge


def connect(host: EditorHost, backend: ProcessBackend = None, **overrides) -> Bridge:
    """
    Create a Bridge for an editor host.

    Args:
        host: Editor to bridge
        backend: Process backend (default: SubprocessBackend)
        **overrides: BridgeConfig fields overriding the environment defaults

    Returns:
        Bridge bound to the host

    Example:
        bridge = replbridge.connect(editor, command="R --vanilla", width=120)
        bridge.dispatch(RegionKind.LINE)
    """
    config = get_config()
    if overrides:
        config = dataclasses.replace(config, **overrides)
    return Bridge(host, config=config, backend=backend)


# Sessions shared by the module-level functions below
_registry: Optional[SessionRegistry] = None
_backend: Optional[ProcessBackend] = None


def _default_bridge(host: EditorHost) -> Bridge:
    global _registry, _backend
    if _registry is None:
        _registry = SessionRegistry()
    if _backend is None:
        _backend = SubprocessBackend()
    return Bridge(host, config=get_config(), backend=_backend, registry=_registry)


def ensure_session(host: EditorHost) -> bool:
    """
    Make sure the host's current context has a live REPL.

    Sessions started through the module-level functions are shared between
    calls, so a second call reuses the running process.

    Example:
        import replbridge

        editor = MemoryEditor.from_file("analysis.R")
        if replbridge.ensure_session(editor):
            replbridge.send_command(editor, "sessionInfo()")
    """
    return _default_bridge(host).ensure_session()


def dispatch(host: EditorHost, kind: RegionKind, options: DispatchOptions = None) -> bool:
    """
    Send the region of `kind` at the host's cursor to its REPL.

    Args:
        host: Editor to read the document and cursor from
        kind: Region to extract (line, selection, chunk, previous, block)
        options: Dispatch options (stay on line, description)

    Returns:
        True if the region was handed to the REPL (or was empty)
    """
    return _default_bridge(host).dispatch(kind, options)


def region_for(host: EditorHost, kind: RegionKind) -> List[str]:
    """Lines dispatch(host, kind) would send, without sending them."""
    return _default_bridge(host).region_for(kind)


def session_status(host: EditorHost) -> SessionStatus:
    return _default_bridge(host).session_status()


def send_command(host: EditorHost, text: str, description: str = "") -> bool:
    """Send a literal command to the REPL of the host's current context."""
    return _default_bridge(host).send_command(text, description)


def shutdown() -> None:
    """Close every REPL started through the module-level functions."""
    global _registry
    if _registry is not None and _backend is not None:
        Bridge(MemoryEditor([]), config=get_config(), backend=_backend, registry=_registry).shutdown()
    _registry = None


__all__ = [
    "__version__",
    "connect",
    "ensure_session",
    "dispatch",
    "region_for",
    "session_status",
    "send_command",
    "shutdown",
    # Bridge
    "Bridge",
    "BridgeConfig",
    "get_config",
    "set_config",
    # Types
    "Command",
    "CursorPosition",
    "DispatchOptions",
    "Region",
    "RegionKind",
    "SelectionBounds",
    "SessionState",
    "SessionStatus",
    # Collaborators
    "EditorHost",
    "MemoryEditor",
    "ProcessBackend",
    "SubprocessBackend",
    # Exceptions
    "BridgeError",
    "ConfigurationError",
    "ExtractionError",
    "SessionError",
    "TransmissionError",
]
