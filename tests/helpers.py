from pathlib import Path
from typing import Any

import yaml


def write_config(directory: Path, data: dict[str, Any], name: str = "msgmapper.yaml") -> Path:
    file = directory / name
    file.write_text(yaml.dump(data))
    return file
