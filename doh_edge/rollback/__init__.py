"""doh-edge rollback: restore managed configuration from backups."""

from doh_edge.rollback.engine import RollbackEngine

__all__ = ["RollbackEngine"]
