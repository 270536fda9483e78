"""Test statement classification and the sqlglot read-shape check."""

import pytest
import sqlglot

from sqlgate.diagnostics import codes
from sqlgate.policy import PolicyConfig
from sqlgate.policy._types import StatementType
from sqlgate.policy.classify import check_read_shape, classify


@pytest.mark.parametrize(
    "sql,expected",
    [
        ("SELECT id FROM sessions", StatementType.READ),
        ("SELECT * FROM events WHERE event_name = 'login'", StatementType.READ),
        ("WITH cte AS (SELECT 1) SELECT * FROM cte", StatementType.READ),
        ("SELECT a FROM t1 UNION SELECT b FROM t2", StatementType.READ),
        ("SELECT id FROM t1 INTERSECT SELECT id FROM t2", StatementType.READ),
        ("SELECT id FROM t1 EXCEPT SELECT id FROM t2", StatementType.READ),
        ("INSERT INTO sessions (id) VALUES ('x')", StatementType.DML),
        ("UPDATE sessions SET user_id = 'x' WHERE id = '1'", StatementType.DML),
        ("DELETE FROM events WHERE id = '1'", StatementType.DML),
        ("CREATE TABLE test (id INT)", StatementType.DDL),
        ("DROP TABLE test", StatementType.DDL),
        ("ALTER TABLE test ADD COLUMN name TEXT", StatementType.DDL),
        ("TRUNCATE TABLE sessions", StatementType.DDL),
        # Writable CTE: DML hidden inside SELECT
        (
            "WITH d AS (DELETE FROM t WHERE id=1 RETURNING *) SELECT * FROM d",
            StatementType.DML,
        ),
        # SELECT INTO creates a table
        ("SELECT * INTO archive FROM sessions", StatementType.DDL),
        ("GRANT SELECT ON sessions TO readonly_role", StatementType.ADMIN),
    ],
)
def test_classify(sql: str, expected: StatementType) -> None:
    stmt = sqlglot.parse_one(sql)
    assert classify(stmt) == expected


def _tags(diags) -> list[str]:
    return [d.tag for d in diags]


class TestReadShape:
    def test_plain_read_passes(self, policy) -> None:
        assert check_read_shape("SELECT id FROM sessions WHERE user_id = 'u1'", policy) == []

    def test_select_into_is_not_a_read(self, policy) -> None:
        diags = check_read_shape("SELECT * INTO archive FROM sessions", policy)
        non_read = [d for d in diags if d.code == codes.NON_READ_STATEMENT]
        assert len(non_read) == 1
        assert non_read[0].subject == "ddl"

    def test_writable_cte_is_not_a_read(self, policy) -> None:
        sql = "WITH d AS (DELETE FROM sessions RETURNING *) SELECT * FROM d"
        assert "non_read_statement" in _tags(check_read_shape(sql, policy))

    def test_table_behind_subquery_comma_join(self, policy) -> None:
        sql = "SELECT * FROM (SELECT * FROM sessions) s, users"
        diags = check_read_shape(sql, policy)
        assert [(d.tag, d.subject) for d in diags] == [("unlisted_table", "users")]

    def test_cte_names_are_not_tables(self, policy) -> None:
        sql = "WITH x AS (SELECT id FROM events) SELECT id FROM x"
        assert check_read_shape(sql, policy) == []

    def test_unterminated_literal(self, policy) -> None:
        diags = check_read_shape("SELECT 'abc FROM sessions", policy)
        assert len(diags) == 1
        assert diags[0].code == codes.UNPARSEABLE_QUERY
        assert diags[0].subject == "unterminated_literal"

    def test_deep_nesting_fails_closed(self, policy) -> None:
        sql = "SELECT * FROM sessions WHERE id IN " + "(" * 3000 + "1" + ")" * 3000
        diags = check_read_shape(sql, policy)
        assert [(d.tag, d.subject) for d in diags] == [("unparseable_query", "nesting_depth")]

    def test_parse_failure_ignored_by_default(self, policy) -> None:
        assert check_read_shape("SELECT (id FROM sessions", policy) == []

    def test_parse_failure_rejected_when_required(self) -> None:
        strict = PolicyConfig(require_parse=True)
        diags = check_read_shape("SELECT (id FROM sessions", strict)
        assert len(diags) == 1
        assert diags[0].code == codes.UNPARSEABLE_QUERY
        assert diags[0].subject == "parse_error"
