import math
from pathlib import Path


def format_kb(size_bytes: int) -> str:
    """Render a byte count the way build summaries show it (rounded up to whole KB)."""
    return f"{math.ceil(size_bytes / 1024.0)} kB"


def display_path(path: Path, root: Path) -> str:
    """Show ``path`` relative to ``root`` when it lives underneath it."""
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)
