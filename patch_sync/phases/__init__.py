from .export_sync import ExportSyncPhase
from .import_sync import ImportSyncPhase
from .phase import Phase, PhaseState, SyncResult
from .replay import ReplayPhase
from .verify import VerifyCleanPhase

__all__ = [
    "ExportSyncPhase",
    "ImportSyncPhase",
    "Phase",
    "PhaseState",
    "ReplayPhase",
    "SyncResult",
    "VerifyCleanPhase",
]
