"""Load ``.env`` files before settings are read."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_DIR = Path(__file__).parent.parent.parent


def load_environment_variables(project_dir: Optional[Path] = None) -> Optional[Path]:
    """Load environment variables from a ``.env`` file.

    The project directory's ``.env`` is preferred; a ``.env`` one level up
    (shared between checkouts) is used otherwise. Variables already set in
    the process environment are not overridden.

    Args:
        project_dir: Project root directory; defaults to this checkout

    Returns:
        The file that was loaded, or None when neither exists
    """
    project_dir = project_dir or PROJECT_DIR
    for env_file in (project_dir / ".env", project_dir.parent / ".env"):
        if env_file.exists():
            load_dotenv(env_file)
            return env_file
    return None
