from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

import mysql.connector

from ..core.exceptions import RemoteReadFailed, RemoteWriteFailed
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_date
from .model import AttendanceBatch, AttendanceMark, RollCallSummary
from .repository import AttendanceStore

logger = logging.getLogger(__name__)


class MySQLAttendanceRepository(AttendanceStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def write_batch(self, batch: AttendanceBatch) -> None:
        rows = [
            (m.student_id, m.class_id, m.roll_date, int(m.present), int(m.justified))
            for m in batch.marks
        ]
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    DELETE FROM presencas
                    WHERE turma_id=%s AND data_chamada=%s
                    """,
                    (batch.class_id, batch.roll_date),
                )
                cur.executemany(
                    """
                    INSERT INTO presencas(aluno_id, turma_id, data_chamada, presente, justificada)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    rows,
                )
        except mysql.connector.Error as e:
            raise RemoteWriteFailed(f"Falha ao gravar chamada {batch.class_id} {batch.roll_date}: {e}") from e
        logger.info("Roll call %s %s written (%d marks)", batch.class_id, batch.roll_date, len(rows))

    def get_marks(self, class_id: str, roll_date: date) -> Sequence[AttendanceMark]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT aluno_id, turma_id, data_chamada, presente, justificada
                    FROM presencas
                    WHERE turma_id=%s AND data_chamada=%s
                    ORDER BY id
                    """,
                    (class_id, roll_date),
                )
                rows = fetchall(cur)
        except mysql.connector.Error as e:
            raise RemoteReadFailed(str(e)) from e
        return [
            AttendanceMark(
                student_id=str(r["aluno_id"]),
                class_id=str(r["turma_id"]),
                roll_date=normalize_mysql_date(r["data_chamada"]),
                present=bool(r["presente"]),
                justified=bool(r.get("justificada")),
            )
            for r in rows
        ]

    def delete_batch(self, class_id: str, roll_date: date) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "DELETE FROM presencas WHERE turma_id=%s AND data_chamada=%s",
                    (class_id, roll_date),
                )
                return int(cur.rowcount or 0)
        except mysql.connector.Error as e:
            raise RemoteWriteFailed(str(e)) from e

    def get_history(self, class_id: str, *, limit: int) -> Sequence[RollCallSummary]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT data_chamada,
                           SUM(CASE WHEN presente=1 THEN 1 ELSE 0 END) AS presentes,
                           SUM(CASE WHEN presente=0 AND justificada=0 THEN 1 ELSE 0 END) AS faltosos,
                           SUM(CASE WHEN presente=0 AND justificada=1 THEN 1 ELSE 0 END) AS justificadas,
                           COUNT(*) AS total
                    FROM presencas
                    WHERE turma_id=%s
                    GROUP BY data_chamada
                    ORDER BY data_chamada DESC
                    LIMIT %s
                    """,
                    (class_id, int(limit)),
                )
                rows = fetchall(cur)
        except mysql.connector.Error as e:
            raise RemoteReadFailed(str(e)) from e
        return [
            RollCallSummary(
                roll_date=normalize_mysql_date(r["data_chamada"]),
                present=int(r["presentes"] or 0),
                absent=int(r["faltosos"] or 0),
                justified=int(r["justificadas"] or 0),
                total=int(r["total"] or 0),
            )
            for r in rows
        ]
