from .scanner import Scanner
from .protection import ProtectedZoneDetector, ProtectionMap
from .sync_diff import SyncDiffEngine
from .sync_service import SyncService

__all__ = ["Scanner", "ProtectedZoneDetector", "ProtectionMap", "SyncDiffEngine", "SyncService"]
