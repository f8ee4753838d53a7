"""
Data-access capabilities the resolvers are bound to.

The resolvers only see the DataAccess interface. Two implementations ship:
MemoryDataAccess (in-process rows, used for local runs and tests) and
SqlDataAccess (any DB-API driver with named parameters; Databricks SQL by
default). Driver errors propagate unchanged; nothing here retries.
"""

import abc
import asyncio
import itertools
import logging
import time
from contextlib import closing
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from autogql.config import Settings
from autogql.errors import InvalidArgumentError
from autogql.runtime.filter_compiler import Condition, matches
from autogql.runtime.observability import get_logger, log_event
from autogql.runtime.sql_builder import DIRECTIONS, SQLBuilder

LOG = get_logger("autogql.data_access")

Record = Dict[str, Any]
Order = Sequence[Tuple[str, str]]


class DataAccess(abc.ABC):
    @abc.abstractmethod
    async def find_by_key(self, key: Any) -> Optional[Record]:
        ...

    @abc.abstractmethod
    async def find_and_count(self, conditions: Sequence[Condition], order: Order, offset: int, limit: int) -> Tuple[int, List[Record]]:
        ...

    @abc.abstractmethod
    async def create(self, fields: Mapping[str, Any]) -> Record:
        ...

    @abc.abstractmethod
    async def update_by_key(self, key: Any, fields: Mapping[str, Any]) -> int:
        """Returns the number of affected rows."""


class MemoryDataAccess(DataAccess):
    def __init__(self, primary_key: str = "id", rows: Iterable[Mapping[str, Any]] = (), auto_increment: bool = True):
        self.primary_key = primary_key
        self.auto_increment = auto_increment
        self.rows: List[Record] = [dict(r) for r in rows]
        start = max((r.get(primary_key) or 0 for r in self.rows if isinstance(r.get(primary_key), int)), default=0)
        self._ids = itertools.count(start + 1)

    def _index(self, key: Any) -> Optional[int]:
        for i, row in enumerate(self.rows):
            if row.get(self.primary_key) == key:
                return i
        return None

    async def find_by_key(self, key):
        i = self._index(key)
        return dict(self.rows[i]) if i is not None else None

    async def find_and_count(self, conditions, order, offset, limit):
        hits = [r for r in self.rows if all(matches(c, r) for c in conditions or [])]
        # apply the last clause first so earlier clauses win
        for col, direction in reversed(list(order or [])):
            d = str(direction).upper()
            if d not in DIRECTIONS:
                raise InvalidArgumentError(f"Unsupported sort direction '{direction}'")
            hits.sort(key=lambda r: (r.get(col) is None, r.get(col)), reverse=(d == "DESC"))
        page = hits[offset:offset + limit]
        return len(hits), [dict(r) for r in page]

    async def create(self, fields):
        row = dict(fields)
        if row.get(self.primary_key) is None and self.auto_increment:
            row[self.primary_key] = next(self._ids)
        self.rows.append(row)
        return dict(row)

    async def update_by_key(self, key, fields):
        i = self._index(key)
        if i is None:
            return 0
        self.rows[i].update(fields)
        return 1


def _safe(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="ignore")
    return value


class SqlDataAccess(DataAccess):
    """Table access through a DB-API connection factory.

    ``connect`` is a zero-argument callable returning a new connection whose
    driver accepts ``:name`` placeholders (Databricks SQL, sqlite3).

    Generated keys are read back on the insert's own cursor: through
    ``key_sql`` when given (e.g. ``SELECT MAX(id) FROM users``), otherwise
    through the cursor's ``lastrowid``. A driver offering neither cannot
    create rows with a generated key, and the insert is refused before it runs.
    """

    def __init__(self, table: str, columns: Sequence[str], primary_key: str, connect: Callable[[], Any],
                 key_sql: Optional[str] = None):
        self.builder = SQLBuilder(table, list(columns))
        self.primary_key = primary_key
        self.connect = connect
        self.key_sql = key_sql

    def _execute(self, cur, sql: str, params: Dict[str, Any]) -> None:
        t0 = time.time()
        cur.execute(sql, params)
        log_event(LOG, "sql", level=logging.DEBUG, sql=sql, params=params, ms=int((time.time() - t0) * 1000))

    @staticmethod
    def _rows(cur) -> List[Record]:
        headers = [d[0] for d in cur.description] if cur.description else []
        return [{h: _safe(v) for h, v in zip(headers, tup)} for tup in cur.fetchall()]

    def _find_by_key(self, key) -> Optional[Record]:
        sql = self.builder.select_by_key(self.primary_key)
        with closing(self.connect()) as conn:
            cur = conn.cursor()
            try:
                self._execute(cur, sql, {"key": key})
                rows = self._rows(cur)
            finally:
                cur.close()
        return rows[0] if rows else None

    def _find_and_count(self, conditions, order, offset, limit):
        count_sql, count_params = self.builder.count(conditions)
        select_sql, select_params = self.builder.select(conditions, order, limit, offset)
        with closing(self.connect()) as conn:
            cur = conn.cursor()
            try:
                self._execute(cur, count_sql, count_params)
                total = int(cur.fetchone()[0])
                self._execute(cur, select_sql, select_params)
                rows = self._rows(cur)
            finally:
                cur.close()
        return total, rows

    def _generated_key(self, cur) -> Any:
        if self.key_sql:
            self._execute(cur, self.key_sql, {})
            row = cur.fetchone()
            return row[0] if row else None
        return cur.lastrowid

    def _create(self, fields) -> Any:
        sql, params = self.builder.insert(fields)
        key = fields.get(self.primary_key)
        table = self.builder.table
        with closing(self.connect()) as conn:
            cur = conn.cursor()
            try:
                if key is None and not self.key_sql and not hasattr(cur, "lastrowid"):
                    raise RuntimeError(f"Driver cannot report generated keys for {table}; configure a key query")
                self._execute(cur, sql, params)
                if key is None:
                    key = self._generated_key(cur)
                    if key is None:
                        # leave the insert uncommitted
                        raise RuntimeError(f"No generated key reported for {table}")
            finally:
                cur.close()
            conn.commit()
        return key

    def _update(self, key, fields) -> int:
        sql, params = self.builder.update(self.primary_key, key, fields)
        with closing(self.connect()) as conn:
            cur = conn.cursor()
            try:
                self._execute(cur, sql, params)
                affected = cur.rowcount
            finally:
                cur.close()
            conn.commit()
        return affected if affected is not None and affected >= 0 else 0

    async def find_by_key(self, key):
        return await asyncio.to_thread(self._find_by_key, key)

    async def find_and_count(self, conditions, order, offset, limit):
        return await asyncio.to_thread(self._find_and_count, conditions, order, offset, limit)

    async def create(self, fields):
        key = await asyncio.to_thread(self._create, dict(fields))
        record = await self.find_by_key(key)
        return record if record is not None else {**fields, self.primary_key: key}

    async def update_by_key(self, key, fields):
        if not fields:
            return 0
        return await asyncio.to_thread(self._update, key, dict(fields))


def databricks_connect(settings: Settings) -> Callable[[], Any]:
    """Connection factory for a Databricks SQL warehouse."""
    missing = settings.missing_databricks_env()
    if missing:
        raise RuntimeError(
            "Databricks env not set: " + ", ".join(missing) +
            "\nSet via `.env` or export in shell"
        )

    def _connect():
        from databricks import sql as dbsql
        return dbsql.connect(
            server_hostname=settings.databricks_host,
            http_path=settings.databricks_http_path,
            access_token=settings.databricks_token,
        )
    return _connect
