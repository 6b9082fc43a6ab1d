from __future__ import annotations

import logging
from typing import Collection, Dict, List, Mapping, Sequence, Set

import mysql.connector

from ..core.exceptions import TaxonomyCreateError, ValidationServiceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .repository import TaxonomyRepository

logger = logging.getLogger(__name__)


def _insert_values(cur, dimension: str, values: Collection[str]) -> List[str]:
    created: List[str] = []
    for value in values:
        cur.execute(
            "INSERT IGNORE INTO taxonomy_values(dimension, value) VALUES(%s,%s)",
            (dimension, value),
        )
        if cur.rowcount > 0:
            created.append(value)
    return created


class MySQLTaxonomyRepository(TaxonomyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_known_values(self, dimension: str) -> Set[str]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "SELECT value FROM taxonomy_values WHERE dimension=%s ORDER BY value",
                    (dimension,),
                )
                return {str(r["value"]) for r in fetchall(cur)}
        except mysql.connector.Error as exc:
            logger.error("Could not load %s values: %s", dimension, exc)
            raise ValidationServiceError(f"Could not load the list of known {dimension} values.") from exc

    def append_new_values(self, dimension: str, values: Collection[str]) -> Sequence[str]:
        return self.append_all_new_values({dimension: values})[dimension]

    def append_all_new_values(self, values_by_dimension: Mapping[str, Collection[str]]) -> Dict[str, Sequence[str]]:
        created: Dict[str, Sequence[str]] = {}
        dimension = ""
        try:
            # One transaction: a failure on any dimension rolls back the others.
            with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
                for dimension, values in values_by_dimension.items():
                    created[dimension] = _insert_values(cur, dimension, values)
        except mysql.connector.Error as exc:
            logger.error("Could not add new %s values: %s", dimension, exc)
            raise TaxonomyCreateError(f"Failed to add new {dimension} values: {exc.msg}") from exc
        return created
