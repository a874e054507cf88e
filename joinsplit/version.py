"""
Version utilities for the join-split verifier.

- __version__: semantic version of this package (PEP 440 core)
- backend_versions(): installed versions of the cryptographic backends
- runtime_banner(): short human-readable banner for logs and `--version`
"""

from __future__ import annotations

import os
from importlib import metadata
from typing import Dict

# It can be overridden at build time with the env var JOINSPLIT_VERSION.
__version__ = os.getenv("JOINSPLIT_VERSION", "0.1.0")

_BACKENDS = ("py_ecc", "pycryptodome")


def backend_versions() -> Dict[str, str]:
    """Distribution name -> installed version ('unknown' when not resolvable)."""
    out: Dict[str, str] = {}
    for dist in _BACKENDS:
        try:
            out[dist] = metadata.version(dist)
        except metadata.PackageNotFoundError:
            out[dist] = "unknown"
    return out


def runtime_banner(prefix: str = "joinsplit") -> str:
    parts = [prefix, __version__]
    parts.extend(f"{k}={v}" for k, v in backend_versions().items())
    return " ".join(parts)


if __name__ == "__main__":
    print(runtime_banner())
