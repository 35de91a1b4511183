import shutil
import uuid
from pathlib import Path

from . import config
from .constant import Language, SOURCE_FILENAME
from .exception import WorkspaceError
from .utils import logger


def stage(
    source_code: str,
    language: Language = Language.JAVA,
    root_dir: Path | None = None,
) -> Path:
    '''
    Create a fresh workspace under `root_dir` and write the source into
    the language's canonical entry file.

    Each workspace gets a random name so concurrent requests never touch
    each other's files.
    '''
    root_dir = Path(root_dir or config.WORKSPACE_ROOT)
    workspace = root_dir / uuid.uuid4().hex
    try:
        root_dir.mkdir(parents=True, exist_ok=True)
        workspace.mkdir()
        source_path = workspace / SOURCE_FILENAME[Language(language)]
        source_path.write_text(source_code, encoding='utf-8')
    except OSError as e:
        # drop the half-staged workspace
        shutil.rmtree(workspace, ignore_errors=True)
        raise WorkspaceError(f'failed to stage source: {e}') from e
    logger().debug(f'staged workspace [path={workspace}]')
    return workspace.resolve()


def release(workspace: Path | None) -> bool:
    if workspace is None:
        return False
    workspace = Path(workspace)
    if not workspace.exists():
        return False
    try:
        shutil.rmtree(workspace)
    except OSError as e:
        logger().warning(f'failed to remove workspace [path={workspace}]: {e}')
        return False
    logger().debug(f'removed workspace [path={workspace}]')
    return True
