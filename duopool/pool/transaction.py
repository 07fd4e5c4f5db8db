"""
All-or-nothing execution of a pool operation.

``atomic(...)`` snapshots every participant on entry. If the body raises,
each participant is restored to its snapshot in reverse order and the
exception propagates unchanged; otherwise the snapshots are dropped.

Participants are objects with ``take_snapshot()`` / ``restore_snapshot()``:
the pool state and any asset ledger that supports it. Ledgers that
cannot be snapshotted are external and are not rolled back.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Tuple

from ..logger import get_logger
from ..tokens.ledger import Snapshottable

logger = get_logger(__name__)


@contextmanager
def atomic(*participants: Any, label: str = "operation") -> Iterator[None]:
    saved: List[Tuple[Snapshottable, Any]] = []
    for participant in participants:
        if isinstance(participant, Snapshottable):
            saved.append((participant, participant.take_snapshot()))

    try:
        yield
    except BaseException as exc:
        for participant, snapshot in reversed(saved):
            participant.restore_snapshot(snapshot)
        logger.warning("rollback of %s: %s: %s", label, type(exc).__name__, exc)
        raise
