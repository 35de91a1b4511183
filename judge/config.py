import json
import os
from pathlib import Path

# sandbox token, empty disables the check
SANDBOX_TOKEN = os.getenv(
    'SANDBOX_TOKEN',
    '',
)
WORKSPACE_ROOT = Path(os.getenv(
    'WORKSPACE_ROOT',
    'tmpCode',
))

_DEFAULT_SANDBOX_CONFIG_PATH = Path(
    os.getenv('SANDBOX_CONFIG', '.config/sandbox.json'))

# ============================================================
# Execution Limits
# ============================================================
DEFAULT_TIME_LIMIT_MS = 5000
DEFAULT_CONTAINER_MEM_LIMIT = 100 * 1024 * 1024  # bytes
DEFAULT_CONTAINER_CPUS = 1.0
DEFAULT_HOST_HEAP_LIMIT = '256m'

# ============================================================
# Memory Sampler
# ============================================================
DEFAULT_SAMPLER_INTERVAL = 0.2  # sec.
DEFAULT_SAMPLER_STOP_TIMEOUT = 1.0  # sec.

# ============================================================
# Container Runtime
# ============================================================
DEFAULT_IMAGE = 'openjdk:8-alpine'
DEFAULT_DOCKER_URL = 'unix://var/run/docker.sock'

# config key -> (env name, cast)
_ENV_OVERRIDES = {
    'backend': ('SANDBOX_BACKEND', str),
    'time_limit_ms': ('TIME_LIMIT_MS', int),
    'container_mem_limit': ('CONTAINER_MEM_LIMIT', int),
    'container_cpus': ('CONTAINER_CPUS', float),
    'host_heap_limit': ('HOST_HEAP_LIMIT', str),
    'sampler_interval': ('SAMPLER_INTERVAL', float),
    'sampler_stop_timeout': ('SAMPLER_STOP_TIMEOUT', float),
    'compile_timeout_ms': ('COMPILE_TIMEOUT_MS', int),
    'image': ('SANDBOX_IMAGE', str),
    'docker_url': ('DOCKER_URL', str),
    'workspace_root': ('WORKSPACE_ROOT', str),
}


def _load_sandbox_config(path: Path) -> dict:
    try:
        with path.open() as f:
            return json.load(f)
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError:
        return {}


def get_sandbox_config(config_path: str | Path | None = None) -> dict:
    '''
    Merge sandbox settings: environment variables win over the JSON
    config file, which wins over the built-in defaults.
    '''
    path = Path(config_path) if config_path else _DEFAULT_SANDBOX_CONFIG_PATH
    cfg = _load_sandbox_config(path)
    for key, (env_name, cast) in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw:
            cfg[key] = cast(raw)
    cfg.setdefault('backend', 'container')
    cfg.setdefault('time_limit_ms', DEFAULT_TIME_LIMIT_MS)
    cfg.setdefault('container_mem_limit', DEFAULT_CONTAINER_MEM_LIMIT)
    cfg.setdefault('container_cpus', DEFAULT_CONTAINER_CPUS)
    cfg.setdefault('host_heap_limit', DEFAULT_HOST_HEAP_LIMIT)
    cfg.setdefault('sampler_interval', DEFAULT_SAMPLER_INTERVAL)
    cfg.setdefault('sampler_stop_timeout', DEFAULT_SAMPLER_STOP_TIMEOUT)
    cfg.setdefault('compile_timeout_ms', None)
    cfg.setdefault('image', DEFAULT_IMAGE)
    cfg.setdefault('docker_url', DEFAULT_DOCKER_URL)
    cfg.setdefault('workspace_root', str(WORKSPACE_ROOT))
    return cfg
