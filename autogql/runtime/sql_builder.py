from typing import Any, Dict, List, Mapping, Sequence, Tuple

from autogql.errors import InvalidArgumentError
from autogql.runtime.filter_compiler import Condition, where_sql

DIRECTIONS = ("ASC", "DESC")


class SQLBuilder:
    """Renders statements for one table with named (:param) placeholders.

    Identifiers never come from bind parameters, so every column name and sort
    direction is checked against the table's known columns first.
    """

    def __init__(self, table: str, columns: List[str]):
        self.table = table
        self.columns = columns

    def _check_column(self, col: str) -> str:
        if col not in self.columns:
            raise InvalidArgumentError(f"Unknown column '{col}' for {self.table}")
        return col

    def _where(self, conditions: Sequence[Condition]) -> Tuple[str, Dict[str, Any]]:
        for c in conditions or []:
            self._check_column(c.column)
        return where_sql(conditions)

    def order_clause(self, order: Sequence[Tuple[str, str]]) -> str:
        parts = []
        for col, direction in order or []:
            d = str(direction).upper()
            if d not in DIRECTIONS:
                raise InvalidArgumentError(f"Unsupported sort direction '{direction}'")
            parts.append(f"{self._check_column(col)} {d}")
        return ", ".join(parts)

    def select(self, conditions: Sequence[Condition], order: Sequence[Tuple[str, str]], limit: int, offset: int) -> Tuple[str, Dict[str, Any]]:
        cols = ", ".join(self.columns)
        sql = f"SELECT {cols} FROM {self.table}"
        where, params = self._where(conditions)
        if where:
            sql += f" WHERE {where}"
        order_sql = self.order_clause(order)
        if order_sql:
            sql += f" ORDER BY {order_sql}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        if offset:
            sql += f" OFFSET {int(offset)}"
        return sql, params

    def count(self, conditions: Sequence[Condition]) -> Tuple[str, Dict[str, Any]]:
        sql = f"SELECT COUNT(*) FROM {self.table}"
        where, params = self._where(conditions)
        if where:
            sql += f" WHERE {where}"
        return sql, params

    def select_by_key(self, key_col: str) -> str:
        cols = ", ".join(self.columns)
        return f"SELECT {cols} FROM {self.table} WHERE {self._check_column(key_col)} = :key LIMIT 1"

    def insert(self, fields: Mapping[str, Any]) -> Tuple[str, Dict[str, Any]]:
        names = [self._check_column(k) for k in fields]
        params = {f"v_{i}": fields[k] for i, k in enumerate(names)}
        if not names:
            return f"INSERT INTO {self.table} DEFAULT VALUES", {}
        placeholders = ", ".join(f":v_{i}" for i in range(len(names)))
        return f"INSERT INTO {self.table} ({', '.join(names)}) VALUES ({placeholders})", params

    def update(self, key_col: str, key: Any, fields: Mapping[str, Any]) -> Tuple[str, Dict[str, Any]]:
        names = [self._check_column(k) for k in fields]
        if not names:
            raise InvalidArgumentError(f"Nothing to update on {self.table}")
        params: Dict[str, Any] = {f"v_{i}": fields[k] for i, k in enumerate(names)}
        params["key"] = key
        sets = ", ".join(f"{k} = :v_{i}" for i, k in enumerate(names))
        return f"UPDATE {self.table} SET {sets} WHERE {self._check_column(key_col)} = :key", params
