#!/usr/bin/env python3

"""Map file serialization.

The whole document is serialized before anything touches the destination.
It is then written to a temporary file beside the target and moved over it,
so a failed run never leaves a half-written map behind.
"""

import json
import os
import stat
import tempfile
from pathlib import Path

from ....infrastructure.logging import get_logger, log_timing
from ...errors import OutputIOFailure
from ...models.mapfile import MapEntry

logger = get_logger(__name__)

COMPACT_SEPARATORS = (",", ":")
PRETTY_INDENT = 2


def dumps(entries: list[MapEntry], pretty: bool = False) -> str:
    """Serialize entries as a JSON array."""
    document = [entry.to_dict() for entry in entries]
    if pretty:
        return json.dumps(document, indent=PRETTY_INDENT)
    return json.dumps(document, separators=COMPACT_SEPARATORS)


def loads(text: str) -> list[MapEntry]:
    """Parse a map file document back into entries."""
    document = json.loads(text)
    if not isinstance(document, list):
        raise ValueError(f"Map file must hold a JSON array, got {type(document).__name__}")
    return [MapEntry.from_dict(item) for item in document]


def _target_mode(output_path: Path) -> int:
    """Permission bits for the map file: the existing file's, else 0666 less the umask."""
    try:
        return stat.S_IMODE(output_path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


@log_timing
def write_map_file(entries: list[MapEntry], output_path: Path, pretty: bool = False) -> int:
    """Write the map file atomically.

    Returns:
        Number of bytes written

    Raises:
        OutputIOFailure: if the destination cannot be written
    """
    payload = dumps(entries, pretty=pretty).encode("utf-8")

    temp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb", dir=output_path.parent, prefix=f".{output_path.name}.", suffix=".tmp", delete=False
        ) as handle:
            temp_name = handle.name
            handle.write(payload)
        os.chmod(temp_name, _target_mode(output_path))
        os.replace(temp_name, output_path)
    except OSError as e:
        if temp_name is not None and os.path.exists(temp_name):
            os.unlink(temp_name)
        raise OutputIOFailure(f"Cannot write map file {output_path}: {e}") from e

    logger.info(f"Wrote {len(entries)} entries ({len(payload)} bytes) to {output_path}")
    return len(payload)
