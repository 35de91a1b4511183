import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .constant import Language, SOURCE_FILENAME
from .exception import CompilerUnavailableError
from .utils import logger


@dataclass
class CompileResult:
    success: bool
    stdout: str = ''
    stderr: str = ''
    exit_code: int = 0


def compile_command(workspace: Path, language: Language) -> list[str]:
    language = Language(language)
    if language == Language.JAVA:
        return [
            'javac',
            '-encoding',
            'utf-8',
            str(Path(workspace) / SOURCE_FILENAME[language]),
        ]
    raise ValueError(f'unsupported language: {language}')


def compile_source(
    workspace: Path,
    language: Language = Language.JAVA,
    timeout_ms: Optional[int] = None,
) -> CompileResult:
    '''
    Run the toolchain against the staged source.

    A non-zero exit code is a user error, the compiler's stderr is
    handed back verbatim. A missing toolchain is an infrastructure error.
    '''
    command = compile_command(workspace, language)
    logger().debug(f'compile [cmd={command}]')
    try:
        proc = subprocess.run(
            command,
            cwd=str(workspace),
            capture_output=True,
            text=True,
            errors='replace',
            timeout=timeout_ms / 1000 if timeout_ms else None,
        )
    except FileNotFoundError as e:
        raise CompilerUnavailableError(
            f'compiler not found: {command[0]}') from e
    except subprocess.TimeoutExpired:
        return CompileResult(
            success=False,
            stderr=f'Compilation exceeded {timeout_ms} ms',
            exit_code=-1,
        )
    result = CompileResult(
        success=proc.returncode == 0,
        stdout=proc.stdout,
        stderr=proc.stderr,
        exit_code=proc.returncode,
    )
    if not result.success:
        logger().info(f'compile failed [workspace={workspace}, '
                      f'exit_code={proc.returncode}]')
    return result
