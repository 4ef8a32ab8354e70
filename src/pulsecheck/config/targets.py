"""
Loading of the monitored target list from a JSON file.

The file holds ``{"apis": [{"name": ..., "url": ..., "interval": ...,
"timeout": ..., "method": ...}]}``; a bare list of target objects is accepted
as well.
"""
import json
import logging
from pathlib import Path
from typing import List

from pydantic import TypeAdapter, ValidationError

from pulsecheck.contracts.target import Target
from pulsecheck.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

_targets_adapter = TypeAdapter(List[Target])


def parse_targets(data, path=None) -> List[Target]:
    """
    Validate decoded JSON data into a list of targets.

    Args:
        data: Decoded JSON document.
        path: Optional source path, used in error messages only.

    Returns:
        List[Target]: The validated targets, in file order.

    Raises:
        ConfigError: If the document does not describe a valid target list.
    """
    if isinstance(data, dict):
        if "apis" not in data:
            raise ConfigError("missing top-level 'apis' list", path)
        data = data["apis"]
    if not isinstance(data, list):
        raise ConfigError("expected a list of targets", path)

    try:
        targets = _targets_adapter.validate_python(data)
    except ValidationError as e:
        raise ConfigError(f"invalid target definition: {e}", path) from e

    seen = set()
    for target in targets:
        if target.name in seen:
            raise ConfigError(f"duplicate target name {target.name!r}", path)
        seen.add(target.name)
    return targets


def load_targets(path) -> List[Target]:
    """
    Read and validate the target file at ``path``.

    Raises:
        ConfigError: If the file is unreadable, not JSON, or malformed.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except OSError as e:
        raise ConfigError(f"cannot read configuration: {e}", path) from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON: {e}", path) from e

    targets = parse_targets(data, path)
    logger.info(f"Loaded {len(targets)} targets from {path}")
    return targets
