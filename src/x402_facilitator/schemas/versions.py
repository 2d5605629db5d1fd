"""Package, protocol and HTTP API version identifiers reported by /version."""

from enum import Enum
from typing import List

__version__ = "0.1.0"

API_VERSION = "v1"


class ProtocolVersion(Enum):
    """x402 protocol revisions this facilitator speaks."""

    V1 = "1"


class SupportedVersions:
    # Ordered oldest to newest; the last entry is advertised.
    versions_list: List[ProtocolVersion] = [ProtocolVersion.V1]

    @classmethod
    def latest(cls) -> ProtocolVersion:
        return cls.versions_list[-1]
