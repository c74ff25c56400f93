from __future__ import annotations

import subprocess

from rplat.core.errors import RouterError


class NvramError(RouterError):
    pass


class Nvram:
    """Access to the persistent settings store of Broadcom-based firmware."""

    def __init__(self, binary: str = "nvram", timeout: float = 5.0) -> None:
        self._binary = binary
        self._timeout = timeout

    def get(self, key: str) -> str:
        cmd = [self._binary, "get", key]
        try:
            proc = subprocess.run(cmd, check=True, capture_output=True, text=True, timeout=self._timeout)
        except FileNotFoundError as exc:
            raise NvramError(f"nvram: {self._binary} not found") from exc
        except subprocess.CalledProcessError as exc:
            raise NvramError(f"nvram: {' '.join(cmd)} failed: {exc.stderr.strip()}") from exc
        except subprocess.TimeoutExpired as exc:
            raise NvramError(f"nvram: {' '.join(cmd)} timed out") from exc
        return proc.stdout.strip()
