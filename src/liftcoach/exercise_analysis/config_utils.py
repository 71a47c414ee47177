import json
import os
from typing import Any, Dict


def load_form_config(config_path: str = None) -> Dict[str, Any]:
    """Load the per-exercise form thresholds from JSON."""
    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "form_config.json")
    with open(config_path, "r") as f:
        return json.load(f)
