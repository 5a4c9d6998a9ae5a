"""
Endpoint request model - one daemon call before it is turned into a URL.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


Param = Tuple[str, str]


@dataclass(frozen=True)
class EndpointRequest:
    """Immutable description of a daemon endpoint call.

    Parameter keys may repeat and their order is kept: the daemon reads
    repeated `arg` parameters positionally.
    """
    prefix: str
    path: str
    params: Tuple[Param, ...] = ()
    timeout: Optional[str] = None

    @classmethod
    def build(
        cls,
        prefix: str,
        path: str,
        params: Iterable[Param] = (),
        timeout: Optional[str] = None,
    ) -> EndpointRequest:
        return cls(
            prefix=prefix,
            path=path,
            params=tuple((str(k), str(v)) for k, v in params),
            timeout=timeout or None,
        )
