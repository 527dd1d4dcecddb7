from __future__ import annotations

from typing import Sequence

import mysql.connector

from ..core.exceptions import RemoteReadFailed
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import SchoolClass, Student
from .repository import RosterRepository


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_classes(self, school_id: str) -> Sequence[SchoolClass]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "SELECT id, nome, escola_id FROM turmas WHERE escola_id=%s ORDER BY nome",
                    (school_id,),
                )
                rows = fetchall(cur)
        except mysql.connector.Error as e:
            raise RemoteReadFailed(str(e)) from e
        return [SchoolClass(class_id=str(r["id"]), name=r["nome"], school_id=str(r["escola_id"])) for r in rows]

    def list_students(self, class_id: str) -> Sequence[Student]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT id, nome, matricula, turma_id
                    FROM alunos
                    WHERE turma_id=%s
                    ORDER BY nome
                    """,
                    (class_id,),
                )
                rows = fetchall(cur)
        except mysql.connector.Error as e:
            raise RemoteReadFailed(str(e)) from e
        return [
            Student(
                student_id=str(r["id"]),
                name=r["nome"],
                enrollment=str(r.get("matricula") or ""),
                class_id=str(r["turma_id"]),
            )
            for r in rows
        ]
