"""Frame output for the board emulator (PNG on disk, served by the HTTP API)."""

from __future__ import annotations

import os
from pathlib import Path
import tempfile

from PIL import Image


def save_frame(image: Image.Image, path: str = "emulator_output/frame.png") -> Path:
    """Write a frame as PNG, replacing the previous one atomically."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=".frame-", suffix=".png", dir=output_path.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            image.save(handle, format="PNG")
        os.replace(tmp_name, output_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return output_path


__all__ = ["save_frame"]
