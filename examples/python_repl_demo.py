"""
Python REPL Demo - Drive a local `python3 -i` session from a notebook-style file.

Cells are delimited by `# %%` and `# --` lines. The demo sends one line, then
a whole cell, then every cell above the last line.

Run from project root:
  python examples/python_repl_demo.py
"""

import shlex
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import replbridge
from replbridge import BridgeConfig, MemoryEditor, RegionKind


DOCUMENT = [
    "print('hello from the editor')",
    "# %%",
    "def square(n):",
    "    return n * n",
    "",
    "print(square(7))",
    "# --",
    "# %%",
    "print([square(i) for i in range(5)])",
    "# --",
]


def main():
    config = BridgeConfig(
        command=f"{shlex.quote(sys.executable)} -i -q",
        chunk_start=r"^# %%",
        chunk_end=r"^# --",
        source_template="exec(open('{path}').read())",
        temp_suffix=".py",
    )
    editor = MemoryEditor(DOCUMENT, cursor=(1, 0))
    bridge = replbridge.Bridge(editor, config=config)

    try:
        print("=== Line ===")
        bridge.dispatch(RegionKind.LINE)

        print("=== Cell ===")
        editor.set_cursor(3)
        bridge.dispatch(RegionKind.CHUNK)
        print(f"Cursor moved to line {editor.cursor().line}")

        print("=== All cells ===")
        editor.set_cursor(len(DOCUMENT))
        bridge.dispatch(RegionKind.PREVIOUS_CHUNKS)

        print(bridge.session_status())
    finally:
        bridge.shutdown()

    for message, error in editor.messages:
        print(f"{'!' if error else '-'} {message}")


if __name__ == "__main__":
    main()
