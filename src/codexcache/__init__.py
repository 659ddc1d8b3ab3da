from __future__ import annotations

from codexcache.instructions import (
    InstructionsCache,
    get_codex_instructions,
    load_bundled_instructions,
)

__all__ = [
    "InstructionsCache",
    "get_codex_instructions",
    "load_bundled_instructions",
]
