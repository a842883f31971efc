"""Per-hall mutual exclusion for check-then-insert sequences."""

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict

from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

# Namespaces the advisory key so it cannot collide with other lock users.
_ADVISORY_NAMESPACE = 0x48414C4C  # "HALL"


class HallLockManager:
    """Serialises availability check, insert and commit for one hall.

    Threads in this process share a ``threading.Lock`` per hall. On PostgreSQL
    a transaction-scoped advisory lock additionally serialises separate
    processes; it is released when the surrounding transaction ends.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = defaultdict(threading.Lock)

    def _lock_for(self, hall_id: int) -> threading.Lock:
        with self._guard:
            return self._locks[hall_id]

    @contextmanager
    def hold(self, db: Session, hall_id: int):
        lock = self._lock_for(hall_id)
        with lock:
            bind = db.get_bind()
            if bind.dialect.name == "postgresql":
                db.execute(
                    text("SELECT pg_advisory_xact_lock(:ns, :hall)"),
                    {"ns": _ADVISORY_NAMESPACE, "hall": hall_id},
                )
            logger.debug("Acquired hall lock %s", hall_id)
            yield
