"""
In-memory build artifacts
Exist only for the duration of one deployment run; never persisted.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

Content = Union[bytes, memoryview]


@dataclass(frozen=True)
class BuildArtifact:
    """A file read from a build directory: POSIX relative path plus raw bytes"""

    relative_path: str
    content: Content


@dataclass(frozen=True)
class FileDigest:
    """Content digest of one artifact, the unit of upload and reconciliation"""

    relative_path: str
    sha1: str
    byte_length: int

    @property
    def manifest_path(self) -> str:
        """Leading-slash form used in provider digest maps"""
        return f"/{self.relative_path}"


@dataclass
class FileBundle:
    """
    Digests for a whole build plus the content needed to upload them.

    Lookups by digest serve providers that answer with the subset of
    digests they still need.
    """

    digests: List[FileDigest] = field(default_factory=list)
    _content: Dict[str, Content] = field(default_factory=dict, repr=False)

    def add(self, digest: FileDigest, content: Content) -> None:
        self.digests.append(digest)
        self._content.setdefault(digest.sha1, content)

    def __len__(self) -> int:
        return len(self.digests)

    def __iter__(self):
        return iter(self.digests)

    def content_for(self, sha1: str) -> bytes:
        content = self._content[sha1]
        if isinstance(content, bytes):
            return content
        return memoryview(content).tobytes()

    def by_sha(self, sha1: str) -> Optional[FileDigest]:
        for digest in self.digests:
            if digest.sha1 == sha1:
                return digest
        return None

    def unique(self) -> List[FileDigest]:
        """One digest per distinct content, first path wins"""
        seen = set()
        result = []
        for digest in self.digests:
            if digest.sha1 in seen:
                continue
            seen.add(digest.sha1)
            result.append(digest)
        return result

    @property
    def total_bytes(self) -> int:
        return sum(digest.byte_length for digest in self.digests)
