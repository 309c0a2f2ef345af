# storefront/data/migrations.py
"""
Migracje schematu uruchamiane przy kazdym starcie procesu.

Kazdy krok jest deklaratywny i idempotentny: sprawdza aktualna strukture bazy
(inspector SQLAlchemy, bez zapisanego numeru wersji) i dokłada tylko to, czego
brakuje. Zadna migracja nie usuwa tabel ani kolumn, wiec stary i nowy kod moga
przez chwile dzialac na tej samej bazie.

Kroki sa grupowane per tabela. Kazda tabela migruje w osobnej transakcji;
blad jednej tabeli jest logowany i nie blokuje pozostalych.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Iterable, List

from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Column, Table, column, inspect, or_, table, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateTable
from sqlalchemy.types import Text, TypeEngine

from storefront.data.models import CartLineModel, OrderModel, ProductModel, UserModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _live_columns(conn: Connection, table_name: str) -> set[str]:
    return {c["name"] for c in inspect(conn).get_columns(table_name)}


@dataclass
class EnsureTable:
    """Tworzy tabele w wersji bazowej, jesli jej nie ma."""

    definition: Table

    @property
    def table_name(self) -> str:
        return self.definition.name

    def apply(self, conn: Connection) -> List[str]:
        if inspect(conn).has_table(self.table_name):
            return []
        # IF NOT EXISTS: drugi proces startujacy rownolegle nie dostanie bledu
        conn.execute(CreateTable(self.definition, if_not_exists=True))
        return [f"created table {self.table_name}"]


@dataclass
class EnsureColumn:
    """
    Dodaje kolumne z wartoscia domyslna, jesli jej nie ma.
    Gdy podano legacy_column i ta kolumna istnieje, kopiuje jej niepuste
    wartosci tam, gdzie nowa kolumna jest jeszcze pusta. Stara kolumna zostaje.
    """

    table_name: str
    column_name: str
    type_: TypeEngine = field(default_factory=Text)
    default: str | None = None
    legacy_column: str | None = None

    def apply(self, conn: Connection) -> List[str]:
        changes: List[str] = []
        columns = _live_columns(conn, self.table_name)

        if self.column_name not in columns:
            self._add_column(conn)
            changes.append(f"added column {self.table_name}.{self.column_name}")

        if self.legacy_column and self.legacy_column in columns:
            copied = self._backfill(conn)
            if copied:
                changes.append(
                    f"backfilled {copied} rows {self.table_name}.{self.legacy_column}"
                    f" -> {self.column_name}"
                )
        return changes

    def _add_column(self, conn: Connection) -> None:
        op = Operations(MigrationContext.configure(conn))
        try:
            op.add_column(
                self.table_name,
                Column(self.column_name, self.type_, server_default=self.default),
            )
        except SQLAlchemyError:
            # inny proces mogl dodac kolumne miedzy inspekcja a ALTER
            if self.column_name in _live_columns(conn, self.table_name):
                logger.info(f"Kolumna {self.table_name}.{self.column_name} dodana rownolegle")
                return
            raise

    def _backfill(self, conn: Connection) -> int:
        t = table(self.table_name, column(self.column_name), column(self.legacy_column))
        new_col = t.c[self.column_name]
        legacy_col = t.c[self.legacy_column]
        stmt = (
            update(t)
            .where(or_(new_col.is_(None), new_col == ""))
            .where(legacy_col.is_not(None))
            .where(legacy_col != "")
            .values({self.column_name: legacy_col})
        )
        return conn.execute(stmt).rowcount or 0


MIGRATIONS = [
    EnsureTable(ProductModel.__table__),
    EnsureTable(UserModel.__table__),
    EnsureColumn("users", "country", Text(), default="KR"),
    EnsureTable(CartLineModel.__table__),
    EnsureTable(OrderModel.__table__),
    # starsze bazy trzymaly snapshot w items_json
    EnsureColumn("orders", "items", Text(), legacy_column="items_json"),
]


@dataclass
class MigrationReport:
    applied: List[str] = field(default_factory=list)
    failed: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def is_table_ready(self, table_name: str) -> bool:
        return table_name not in self.failed


def _group_by_table(steps: Iterable) -> "OrderedDict[str, list]":
    groups: "OrderedDict[str, list]" = OrderedDict()
    for step in steps:
        groups.setdefault(step.table_name, []).append(step)
    return groups


def run_migrations(engine: Engine, steps: Iterable = MIGRATIONS) -> MigrationReport:
    report = MigrationReport()

    for table_name, table_steps in _group_by_table(steps).items():
        changes: List[str] = []
        try:
            with engine.begin() as conn:
                for step in table_steps:
                    changes.extend(step.apply(conn))
        except SQLAlchemyError as e:
            logger.exception(f"Migracja tabeli {table_name} nieudana, pomijam ja")
            report.failed[table_name] = str(e)
            continue

        for change in changes:
            logger.info(f"Migracja: {change}")
        report.applied.extend(changes)

    if report.failed:
        logger.warning(f"Tabele bez migracji: {sorted(report.failed)}")
    else:
        logger.info(f"Schemat aktualny, zmian: {len(report.applied)}")
    return report
