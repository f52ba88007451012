"""Configuration loader.

Reads configuration files in YAML format and returns a dictionary.
Network configuration files hold the typology list, the road marker
templates and the rebuild settings; the default one lives in the
`configs/` directory at the project root.
"""

from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "network.yaml"


def load_config(path: str) -> Dict[str, Any]:
    """Load a YAML configuration file into a dictionary.

    Parameters
    ----------
    path : str
        Path to the YAML configuration file.

    Returns
    -------
    dict
        Parsed configuration dictionary.  Returns an empty dict if the
        file does not exist or is empty.

    Raises
    ------
    ValueError
        If the file exists but its top level is not a mapping.
    yaml.YAMLError
        If the file is not valid YAML.
    """
    cfg_path = Path(path)
    if not cfg_path.is_file():
        return {}
    with open(cfg_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {cfg_path} does not contain a mapping")
    return data
