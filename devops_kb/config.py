"""
Configuration from environment variables.

Values come from the process environment, optionally pre-loaded from
.env.local (local dev, highest priority) or .env at the project root.

    KB_PATTERNS_DIR        patterns corpus root            (./patterns)
    KB_KNOWLEDGE_DIR       knowledge corpus root           (./knowledge)
    KB_EXTRA_SOURCES_DIR   supplementary knowledge corpus  (./.document-sources)
    KB_PATTERNS_INDEX      persisted patterns index        (patterns_index.bm25)
    KB_KNOWLEDGE_INDEX     persisted knowledge index       (knowledge_index.bm25)
    KB_RESULT_LIMIT        max results per query, <= 0 = all (0)
    KB_STRICT_LOAD         fail instead of serving an empty index (false)
    LOG_LEVEL              console log level               (INFO)
    KB_LOG_FILE            base path of the rotating log   (logs/devops-kb.log)
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseModel):
    """Resolved runtime configuration"""
    model_config = ConfigDict(frozen=True)

    patterns_dir: Path = Path("./patterns")
    knowledge_dir: Path = Path("./knowledge")
    extra_sources_dir: Path = Path("./.document-sources")
    patterns_index: Path = Path("patterns_index.bm25")
    knowledge_index: Path = Path("knowledge_index.bm25")
    result_limit: int = 0
    strict_load: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/devops-kb.log"


def load_env_files(project_root: Optional[Path] = None) -> Optional[Path]:
    """
    Load .env.local (preferred) or .env into os.environ.

    Returns:
        Path of the file that was loaded, or None
    """
    root = project_root or PROJECT_ROOT
    for candidate in (root / ".env.local", root / ".env"):
        if candidate.exists():
            load_dotenv(candidate, override=True)
            return candidate
    return None


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """Read settings from the environment (call load_env_files() first if needed)"""
    defaults = Settings()
    return Settings(
        patterns_dir=Path(os.getenv("KB_PATTERNS_DIR", str(defaults.patterns_dir))),
        knowledge_dir=Path(os.getenv("KB_KNOWLEDGE_DIR", str(defaults.knowledge_dir))),
        extra_sources_dir=Path(os.getenv("KB_EXTRA_SOURCES_DIR", str(defaults.extra_sources_dir))),
        patterns_index=Path(os.getenv("KB_PATTERNS_INDEX", str(defaults.patterns_index))),
        knowledge_index=Path(os.getenv("KB_KNOWLEDGE_INDEX", str(defaults.knowledge_index))),
        result_limit=_get_int("KB_RESULT_LIMIT", defaults.result_limit),
        strict_load=_get_bool("KB_STRICT_LOAD", defaults.strict_load),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        log_file=os.getenv("KB_LOG_FILE", defaults.log_file),
    )
