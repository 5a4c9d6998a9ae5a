"""
Result records assembled from multi-line daemon replies.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AddedFile:
    """Accumulated upload progress for one path reported by `add`."""
    path: str
    hash: Optional[str] = None
    size: Optional[int] = None

    def merge(self, line: Dict[str, Any]) -> None:
        """Fold one progress line into this record."""
        if 'Hash' in line:
            self.hash = line['Hash']
        if 'Bytes' in line:
            self.size = line['Bytes']

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {'path': self.path}
        if self.hash is not None:
            out['hash'] = self.hash
        if self.size is not None:
            out['size'] = self.size
        return out
