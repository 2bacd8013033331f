import os
from pathlib import Path

DEFAULT_CONFIGFILE = "msgmapper.yaml"


def get_configfile() -> Path | None:
    # Priority: ENV > default file in current working directory
    raw = os.getenv("MSGMAPPERCONFIG")

    if raw is None:
        file = Path.cwd() / DEFAULT_CONFIGFILE
        return file if file.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Fix the MSGMAPPERCONFIG environment variable\n"
            f"  - Or unset it and place a '{DEFAULT_CONFIGFILE}' file in the current working directory."
        )

    return file
