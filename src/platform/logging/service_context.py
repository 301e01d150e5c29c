"""
Service context extraction for distributed logging.

Identifies which box office instance emitted a log line.
"""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'box-office')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hosts export HOSTNAME as the short container id; locally fall back to the PID
    instance = os.getenv('HOSTNAME', '')[:8] or str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance}'
