"""Environment provider — hostname, process details and memory snapshot."""

import logging
import os
import platform
import socket
import sys
import tracemalloc
from typing import Optional, Protocol

import psutil

from diagnostics_transport.models import ProcessInfo

logger = logging.getLogger(__name__)


class EnvironmentProvider(Protocol):
    def hostname(self) -> str: ...

    def process_title(self) -> str: ...

    def process_info(self) -> ProcessInfo: ...

    def memory_usage(self) -> Optional[dict]: ...


class SystemEnvironment:
    """Reads ambient state from the running interpreter and the OS."""

    def hostname(self) -> str:
        return socket.gethostname()

    def process_title(self) -> str:
        if sys.argv and sys.argv[0]:
            return os.path.basename(sys.argv[0])
        return os.path.basename(sys.executable) or "python"

    def process_info(self) -> ProcessInfo:
        return ProcessInfo(
            cwd=os.getcwd(),
            exec_path=sys.executable,
            version=platform.python_version(),
            argv=list(sys.argv),
            memory=self.memory_usage(),
        )

    def memory_usage(self) -> Optional[dict]:
        """Return rss/heapTotal/heapUsed in bytes, or None if unavailable.

        heapTotal is the process virtual memory size; heapUsed is only
        reported while tracemalloc is tracing.
        """
        try:
            mem = psutil.Process().memory_info()
        except psutil.Error as exc:
            logger.debug("Memory snapshot unavailable: %s", exc)
            return None

        usage = {"rss": mem.rss, "heapTotal": mem.vms}
        if tracemalloc.is_tracing():
            current, _peak = tracemalloc.get_traced_memory()
            usage["heapUsed"] = current
        return usage
