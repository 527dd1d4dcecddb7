from __future__ import annotations

from src.roll_call.roll_call.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use


def test_splitter_ignores_semicolons_in_quotes_and_comments():
    sql = """
    -- demo; data
    INSERT INTO turmas (id, nome) VALUES ('C1', 'Turma; A');
    INSERT INTO alunos (id, nome) VALUES ("s1", "Ana");
    """
    statements = list(_iter_sql_statements(sql))
    assert statements == [
        "INSERT INTO turmas (id, nome) VALUES ('C1', 'Turma; A')",
        'INSERT INTO alunos (id, nome) VALUES ("s1", "Ana")',
    ]


def test_create_database_and_use_lines_are_stripped():
    sql = "CREATE DATABASE IF NOT EXISTS chamada_db;\nUSE chamada_db;\nCREATE TABLE t (id INT);\n"
    assert list(_iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (id INT)"]
