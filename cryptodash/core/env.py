from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv


def load_local_environment() -> None:
    """Load environment variables from <project_root>/.env, then ~/.cryptodash/.env.

    The first file found wins and overrides already-set variables. The
    resolved path is exposed via CRYPTODASH_ENV_PATH.
    """
    project_root = Path(__file__).resolve().parents[2]
    candidates = (project_root / ".env", Path.home() / ".cryptodash" / ".env")

    for env_path in candidates:
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=True)
            os.environ["CRYPTODASH_ENV_PATH"] = str(env_path)
            return

    os.environ.setdefault("CRYPTODASH_ENV_PATH", str(candidates[0]))
