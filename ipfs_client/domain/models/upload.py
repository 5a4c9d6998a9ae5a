"""
File parts submitted to the daemon as multipart form data.
"""

from __future__ import annotations
import io
import os
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Union


class FilePartKind(Enum):
    """Where the payload of a file part comes from."""
    CONTENTS = "contents"  # literal bytes or text
    PATH = "path"  # read from a local file at upload time


@dataclass(frozen=True)
class FilePart:
    """One named item of a multipart upload."""
    name: str
    kind: FilePartKind
    value: Union[bytes, str, os.PathLike]

    @classmethod
    def from_contents(cls, name: str, data: Union[bytes, str]) -> FilePart:
        """Create a part whose payload is the given literal content."""
        return cls(name=name, kind=FilePartKind.CONTENTS, value=data)

    @classmethod
    def from_path(cls, name: str, path: Union[str, os.PathLike]) -> FilePart:
        """Create a part whose payload is read from `path`."""
        return cls(name=name, kind=FilePartKind.PATH, value=path)

    def open_payload(self) -> BinaryIO:
        """Return a readable binary stream over the payload.

        The caller owns the returned stream and must close it.
        """
        if self.kind is FilePartKind.PATH:
            return open(self.value, 'rb')
        data = self.value
        if isinstance(data, str):
            data = data.encode('utf-8')
        return io.BytesIO(data)
