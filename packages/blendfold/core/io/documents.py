"""Controller document I/O.

Controllers are exchanged as JSON or YAML documents produced from the
pydantic models. Asset loading from engine-native formats is the job of the
exporter that writes these documents.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from blendfold.core.graph.models import Controller

logger = logging.getLogger(__name__)


def detect_format(file_path: Path | str) -> str:
    """Detect document format from extension.

    Args:
        file_path: Path to a config or controller document

    Returns:
        Format string: "json" or "yaml"

    Raises:
        ValueError: If format cannot be determined

    Example:
        >>> detect_format("fx.json")
        'json'
        >>> detect_format("fx.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()

    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def read_document(path: str | Path) -> dict[str, Any]:
    """Read a JSON or YAML document holding a mapping.

    Args:
        path: Path to file (.json, .yaml, or .yml)

    Returns:
        Raw dictionary; empty YAML files give an empty dictionary

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If format is not supported or file content is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)
    text = path.read_text(encoding="utf-8")

    if fmt == "json":
        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    else:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        # safe_load returns None for empty files
        if data is None:
            data = {}

    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping in {path}, got {type(data).__name__}")
    return data


def write_document(path: str | Path, data: dict[str, Any]) -> None:
    """Write a dictionary as JSON or YAML depending on the file extension.

    Parent directories are created as needed.
    """
    path_obj = Path(path)
    fmt = detect_format(path_obj)
    path_obj.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "json":
        text = json.dumps(data, indent=2, ensure_ascii=False)
    else:
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    path_obj.write_text(text, encoding="utf-8")


def load_controller(path: str | Path) -> Controller:
    """Load and validate a controller document.

    Args:
        path: Path to controller document (.json, .yaml, or .yml)

    Returns:
        Validated Controller

    Raises:
        FileNotFoundError: If the document does not exist
        ValueError: If the document cannot be parsed
        ValidationError: If the document does not describe a controller

    Example:
        >>> controller = load_controller("fx.yaml")
        >>> [layer.name for layer in controller.layers]
        ['Base Layer', 'Hat']
    """
    from blendfold.core.graph.models import Controller

    controller = Controller.model_validate(read_document(path))
    logger.debug(
        f"Loaded controller {controller.name!r} with {len(controller.layers)} layers from {path}"
    )
    return controller


def save_controller(controller: Controller, path: str | Path) -> None:
    """Write a controller document as JSON or YAML."""
    write_document(path, controller.model_dump(mode="json"))
    logger.debug(f"Saved controller {controller.name!r} to {path}")
