__all__ = (
    'SandboxError',
    'WorkspaceError',
    'CompilerUnavailableError',
    'ExecutorError',
)


class SandboxError(Exception):
    '''Base class of every infrastructure-side failure.'''


class WorkspaceError(SandboxError, OSError):
    pass


class CompilerUnavailableError(SandboxError):
    pass


class ExecutorError(SandboxError):
    '''The isolation backend (docker daemon, process spawn) failed.'''
