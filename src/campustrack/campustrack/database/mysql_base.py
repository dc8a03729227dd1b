from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import DuplicateError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, roll back on any error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except IntegrityError as e:
        conn.rollback()
        if e.errno == errorcode.ER_DUP_ENTRY:
            logger.info("Unique constraint collision: %s", e.msg)
            raise DuplicateError("Record already exists") from e
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def placeholders(count: int) -> str:
    """``%s,%s,...`` for an IN (...) clause."""
    return ",".join(["%s"] * count)


def load_id_set(value: Any) -> FrozenSet[str]:
    """Decode a JSON id array column (str, bytes or already decoded)."""
    if value is None:
        return frozenset()
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value) if value.strip() else []
    return frozenset(str(v) for v in value)


def dump_id_set(ids: Iterable[str]) -> str:
    """Encode an id set as a sorted JSON array so equal sets store equal text."""
    return json.dumps(sorted({str(i) for i in ids}))
