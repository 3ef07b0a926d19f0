"""YAML configuration loader.

Configuration files live in the `configs/` directory at the project
root.  The loader only deals with reading the file; typed access to
the values is provided by the dataclasses that consume them (see
`src.roadmesh.config.RoadConfig`).
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .logging import get_logger

logger = get_logger(__name__)


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML configuration file into a dictionary.

    Parameters
    ----------
    path : str or Path
        Path to the YAML configuration file.

    Returns
    -------
    dict
        Parsed configuration dictionary.  Returns an empty dict if the
        file does not exist, is empty, or does not contain a mapping.

    Raises
    ------
    yaml.YAMLError
        If the file exists but is not valid YAML.
    """
    cfg_path = Path(path)
    if not cfg_path.is_file():
        logger.warning(f"Config file not found: {cfg_path}, using defaults")
        return {}
    with open(cfg_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        return {}
    return data
