from .change_tracker import ChangeTracker, build_ledger_records
from .orchestrator import Orchestrator, log_report
from .reconciler import ArticleReconciler, Reconciliation
from .scheduler import PeriodicRunner

__all__ = [
    "ArticleReconciler",
    "ChangeTracker",
    "Orchestrator",
    "PeriodicRunner",
    "Reconciliation",
    "build_ledger_records",
    "log_report",
]
