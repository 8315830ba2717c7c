"""
Content Hasher
SHA-1 digests used as the provider dedup key and the local lookup key
"""

import hashlib
from typing import Iterable

from src.models.artifacts import BuildArtifact, FileBundle, FileDigest


def hash_artifact(artifact: BuildArtifact) -> FileDigest:
    """
    Compute the digest of one artifact. Pure and deterministic.

    A memoryview slice is hashed over its own range only, never over the
    larger buffer it was cut from.
    """
    view = memoryview(artifact.content).cast("B")
    return FileDigest(
        relative_path=artifact.relative_path,
        sha1=hashlib.sha1(view).hexdigest(),
        byte_length=view.nbytes,
    )


def build_bundle(artifacts: Iterable[BuildArtifact]) -> FileBundle:
    """Hash every artifact and keep its content addressable by digest"""
    bundle = FileBundle()
    for artifact in artifacts:
        bundle.add(hash_artifact(artifact), artifact.content)
    return bundle
