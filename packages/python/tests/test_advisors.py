"""Tests for the built-in advisors."""

import pytest

from sqlreview import AdviceStatus, Code, Dialect, RuleLevel, RuleType
from sqlreview.advice import Advice, ok_advice

OK = [ok_advice()]


class TestCheckerProtocol:
    """Behavior shared by every advisor."""

    def test_disabled_rule_returns_nothing(self, run_rule) -> None:
        # An invalid payload is never decoded for a disabled rule.
        advice = run_rule(
            RuleType.INSERT_ROW_LIMIT,
            "INSERT INTO t VALUES (1), (2)",
            level=RuleLevel.DISABLED,
            payload="{not json",
        )
        assert advice == []

    def test_error_level(self, run_rule) -> None:
        advice = run_rule(RuleType.WHERE_REQUIRE, "DELETE FROM t", level=RuleLevel.ERROR)
        assert advice[0].status is AdviceStatus.ERROR

    def test_info_level_keeps_code_but_not_severity(self, run_rule) -> None:
        advice = run_rule(RuleType.WHERE_REQUIRE, "DELETE FROM t", level=RuleLevel.INFO)
        assert advice[0].status is AdviceStatus.SUCCESS
        assert advice[0].code is Code.STATEMENT_NO_WHERE

    def test_syntax_error_gives_single_advice(self, run_rule) -> None:
        advice = run_rule(RuleType.WHERE_REQUIRE, "DELETE FROM t;\nSELECT * FROM t WHERE (a = 1")
        assert len(advice) == 1
        assert advice[0].status is AdviceStatus.ERROR
        assert advice[0].code is Code.SYNTAX_ERROR
        assert advice[0].title == "Syntax error"
        assert advice[0].line == 2

    @pytest.mark.parametrize(
        "rule_type,payload",
        [
            (RuleType.INSERT_ROW_LIMIT, {"number": 1}),
            (RuleType.AFFECTED_ROW_LIMIT, {"number": 1}),
            (RuleType.INSERT_MUST_SPECIFY_COLUMN, None),
            (RuleType.INSERT_DISALLOW_ORDER_BY_RAND, None),
            (RuleType.WHERE_REQUIRE, None),
            (RuleType.NO_SELECT_ALL, None),
            (RuleType.NO_LEADING_WILDCARD_LIKE, None),
            (RuleType.DISALLOW_COMMIT, None),
            (RuleType.INDEX_TYPE_NO_BLOB, None),
            (RuleType.INDEX_KEY_NUMBER_LIMIT, {"number": 1}),
            (RuleType.TABLE_REQUIRE_PK, None),
            (RuleType.TABLE_NO_FOREIGN_KEY, None),
            (RuleType.NAMING_TABLE, {"format": "^[a-z]+$"}),
            (RuleType.COLUMN_TYPE_DISALLOW_LIST, {"list": ["JSON"]}),
            (RuleType.MYSQL_ENGINE, None),
        ],
    )
    def test_every_enabled_rule_produces_advice(self, run_rule, rule_type, payload) -> None:
        sql = "CREATE TABLE t(id INT PRIMARY KEY);\nINSERT INTO t(id) VALUES (1);\nSELECT id FROM t WHERE id = 1"
        first = run_rule(rule_type, sql, payload=payload)
        second = run_rule(rule_type, sql, payload=payload)
        assert len(first) >= 1
        assert first == second


class TestWhereRequire:
    def test_delete_without_where(self, run_rule) -> None:
        advice = run_rule(RuleType.WHERE_REQUIRE, "DELETE FROM t")
        assert advice == [
            Advice(
                status=AdviceStatus.WARNING,
                code=Code.STATEMENT_NO_WHERE,
                title="statement.where.require",
                content='"DELETE FROM t" requires WHERE clause',
                line=1,
            )
        ]

    def test_update_with_where(self, run_rule) -> None:
        assert run_rule(RuleType.WHERE_REQUIRE, "UPDATE t SET a = 1 WHERE id = 1") == OK

    def test_select_without_from_is_fine(self, run_rule) -> None:
        assert run_rule(RuleType.WHERE_REQUIRE, "SELECT 1") == OK

    def test_nested_query_is_checked(self, run_rule) -> None:
        advice = run_rule(
            RuleType.WHERE_REQUIRE, "SELECT a FROM t WHERE id IN (SELECT id FROM s)"
        )
        assert len(advice) == 1
        assert advice[0].code is Code.STATEMENT_NO_WHERE

    def test_lines_per_statement(self, run_rule) -> None:
        advice = run_rule(RuleType.WHERE_REQUIRE, "DELETE FROM a;\nDELETE FROM b WHERE x = 1;\nUPDATE c SET y = 2")
        assert [a.line for a in advice] == [1, 3]


class TestNoSelectAll:
    def test_select_star(self, run_rule) -> None:
        advice = run_rule(RuleType.NO_SELECT_ALL, "SELECT * FROM t")
        assert advice[0].content == '"SELECT * FROM t" uses SELECT all'
        assert advice[0].code is Code.STATEMENT_NO_SELECT_ALL

    def test_nested_star_reported_once(self, run_rule) -> None:
        advice = run_rule(RuleType.NO_SELECT_ALL, "SELECT * FROM (SELECT * FROM t) x")
        assert len(advice) == 1

    def test_star_in_subquery(self, run_rule) -> None:
        advice = run_rule(RuleType.NO_SELECT_ALL, "SELECT a FROM (SELECT * FROM t) x")
        assert len(advice) == 1

    def test_explicit_columns(self, run_rule) -> None:
        assert run_rule(RuleType.NO_SELECT_ALL, "SELECT a, b FROM t") == OK


class TestNoLeadingWildcardLike:
    def test_leading_wildcard(self, run_rule) -> None:
        sql = "SELECT a FROM t WHERE a LIKE '%x' OR b LIKE '%y'"
        advice = run_rule(RuleType.NO_LEADING_WILDCARD_LIKE, sql)
        assert len(advice) == 1
        assert advice[0].content == f'"{sql}" uses leading wildcard LIKE'

    def test_trailing_wildcard(self, run_rule) -> None:
        assert run_rule(RuleType.NO_LEADING_WILDCARD_LIKE, "SELECT a FROM t WHERE a LIKE 'x%'") == OK

    def test_in_update(self, run_rule) -> None:
        advice = run_rule(RuleType.NO_LEADING_WILDCARD_LIKE, "UPDATE t SET a = 1 WHERE b LIKE '%z'")
        assert advice[0].code is Code.STATEMENT_LEADING_WILDCARD_LIKE


class TestDisallowCommit:
    def test_commit(self, run_rule) -> None:
        advice = run_rule(RuleType.DISALLOW_COMMIT, "UPDATE t SET a = 1 WHERE id = 1;\nCOMMIT")
        assert advice[0].content == 'Commit is not allowed, related statement: "COMMIT"'
        assert advice[0].line == 2


class TestInsertRules:
    def test_row_limit_static(self, run_rule) -> None:
        sql = "INSERT INTO t VALUES (1), (2), (3)"
        advice = run_rule(RuleType.INSERT_ROW_LIMIT, sql, payload={"number": 2})
        assert advice == [
            Advice(
                status=AdviceStatus.WARNING,
                code=Code.INSERT_TOO_MANY_ROWS,
                title="statement.insert.row-limit",
                content=f'"{sql}" inserts 3 rows. The count exceeds 2.',
                line=1,
            )
        ]

    def test_row_limit_within(self, run_rule) -> None:
        advice = run_rule(RuleType.INSERT_ROW_LIMIT, "INSERT INTO t VALUES (1), (2)", payload={"number": 2})
        assert advice == OK

    def test_row_limit_disabled_by_zero(self, run_rule) -> None:
        advice = run_rule(RuleType.INSERT_ROW_LIMIT, "INSERT INTO t VALUES (1), (2)", payload={"number": 0})
        assert advice == OK

    def test_row_limit_insert_select_without_connection(self, run_rule) -> None:
        advice = run_rule(
            RuleType.INSERT_ROW_LIMIT, "INSERT INTO t SELECT * FROM other", payload={"number": 1}
        )
        assert advice == OK

    def test_must_specify_column(self, run_rule) -> None:
        advice = run_rule(RuleType.INSERT_MUST_SPECIFY_COLUMN, "INSERT INTO t VALUES (1)")
        assert advice[0].content == (
            'The INSERT statement must specify columns but "INSERT INTO t VALUES (1)" does not'
        )
        assert run_rule(RuleType.INSERT_MUST_SPECIFY_COLUMN, "INSERT INTO t(a) VALUES (1)") == OK

    def test_order_by_rand(self, run_rule) -> None:
        sql = "INSERT INTO t(a) SELECT a FROM s ORDER BY RAND() LIMIT 10"
        advice = run_rule(RuleType.INSERT_DISALLOW_ORDER_BY_RAND, sql)
        assert advice[0].code is Code.INSERT_USE_ORDER_BY_RAND
        assert advice[0].content == f'"{sql}" uses ORDER BY RAND in the INSERT statement'

    def test_order_by_column(self, run_rule) -> None:
        sql = "INSERT INTO t(a) SELECT a FROM s ORDER BY a"
        assert run_rule(RuleType.INSERT_DISALLOW_ORDER_BY_RAND, sql) == OK


class TestIndexRules:
    def test_blob_in_primary_key(self, run_rule) -> None:
        advice = run_rule(RuleType.INDEX_TYPE_NO_BLOB, "CREATE TABLE t(b BLOB, PRIMARY KEY(b(10)))")
        assert advice[0].content == "Columns in index must not be BLOB but `t`.`b` is blob"
        assert advice[0].code is Code.INDEX_TYPE_NO_BLOB

    def test_blob_tracked_across_statements(self, run_rule) -> None:
        sql = "CREATE TABLE t(a int);\nALTER TABLE t ADD COLUMN b BLOB;\nCREATE INDEX idx ON t(b(5))"
        advice = run_rule(RuleType.INDEX_TYPE_NO_BLOB, sql)
        assert [(a.line, a.content) for a in advice] == [
            (3, "Columns in index must not be BLOB but `t`.`b` is blob")
        ]

    def test_modified_column_no_longer_blob(self, run_rule) -> None:
        sql = "CREATE TABLE t(b BLOB);\nALTER TABLE t MODIFY b INT;\nCREATE INDEX idx ON t(b)"
        assert run_rule(RuleType.INDEX_TYPE_NO_BLOB, sql) == OK

    def test_blob_index_added_after_rename(self, run_rule) -> None:
        sql = "CREATE TABLE t(b BLOB);\nALTER TABLE t RENAME TO t2, ADD INDEX idx(b(5))"
        advice = run_rule(RuleType.INDEX_TYPE_NO_BLOB, sql)
        assert [(a.line, a.content) for a in advice] == [
            (2, "Columns in index must not be BLOB but `t2`.`b` is blob")
        ]

    def test_foreign_key_is_not_an_index(self, run_rule) -> None:
        sql = "CREATE TABLE t(b BLOB, FOREIGN KEY (b) REFERENCES p(b))"
        assert run_rule(RuleType.INDEX_TYPE_NO_BLOB, sql) == OK

    def test_key_number_limit(self, run_rule) -> None:
        sql = "CREATE TABLE t(a INT, b INT, c INT, INDEX idx_abc (a, b, c))"
        advice = run_rule(RuleType.INDEX_KEY_NUMBER_LIMIT, sql, payload={"number": 2})
        assert advice[0].content == (
            "The number of index `idx_abc` in table `t` should be not greater than 2"
        )

    def test_key_number_limit_create_index(self, run_rule) -> None:
        sql = "CREATE INDEX idx_ab ON t(a, b)"
        assert run_rule(RuleType.INDEX_KEY_NUMBER_LIMIT, sql, payload={"number": 2}) == OK
        advice = run_rule(RuleType.INDEX_KEY_NUMBER_LIMIT, sql, payload={"number": 1})
        assert advice[0].code is Code.INDEX_KEY_NUMBER_EXCEEDS_LIMIT


class TestTableRequirePK:
    def test_missing_primary_key(self, run_rule) -> None:
        advice = run_rule(RuleType.TABLE_REQUIRE_PK, "CREATE TABLE t(a INT)")
        assert advice[0].content == (
            'Table `t` requires PRIMARY KEY, related statement: "CREATE TABLE t(a INT)"'
        )
        assert advice[0].line == 1

    def test_inline_primary_key(self, run_rule) -> None:
        assert run_rule(RuleType.TABLE_REQUIRE_PK, "CREATE TABLE t(id INT PRIMARY KEY)") == OK

    def test_later_alter_adds_primary_key(self, run_rule) -> None:
        sql = "CREATE TABLE t(a INT);\nALTER TABLE t ADD PRIMARY KEY (a)"
        assert run_rule(RuleType.TABLE_REQUIRE_PK, sql) == OK

    def test_drop_table_clears(self, run_rule) -> None:
        sql = "CREATE TABLE t(a INT);\nDROP TABLE t"
        assert run_rule(RuleType.TABLE_REQUIRE_PK, sql) == OK

    def test_drop_primary_key(self, run_rule) -> None:
        advice = run_rule(RuleType.TABLE_REQUIRE_PK, "SELECT 1;\nALTER TABLE t DROP PRIMARY KEY")
        assert advice[0].line == 2

    def test_deferred_findings_in_script_order(self, run_rule) -> None:
        sql = "CREATE TABLE a(x INT);\nCREATE TABLE b(y INT);\nCREATE TABLE c(id INT PRIMARY KEY)"
        advice = run_rule(RuleType.TABLE_REQUIRE_PK, sql)
        assert [a.line for a in advice] == [1, 2]

    def test_dropped_primary_key_reported_in_script_order(self, run_rule) -> None:
        sql = "CREATE TABLE a(x INT);\nCREATE TABLE b(y INT);\nALTER TABLE a DROP PRIMARY KEY"
        advice = run_rule(RuleType.TABLE_REQUIRE_PK, sql)
        assert [a.line for a in advice] == [2, 3]

    def test_renamed_table_reported_in_script_order(self, run_rule) -> None:
        sql = "CREATE TABLE a(x INT);\nCREATE TABLE b(y INT);\nALTER TABLE a RENAME TO c"
        advice = run_rule(RuleType.TABLE_REQUIRE_PK, sql)
        assert [a.line for a in advice] == [1, 2]
        assert advice[0].content.startswith("Table `c` requires PRIMARY KEY")

    def test_primary_key_added_after_rename(self, run_rule) -> None:
        sql = "CREATE TABLE a(x INT);\nALTER TABLE a RENAME TO b, ADD PRIMARY KEY (x)"
        assert run_rule(RuleType.TABLE_REQUIRE_PK, sql) == OK


class TestTableNoForeignKey:
    def test_table_constraint(self, run_rule) -> None:
        sql = "CREATE TABLE t(a INT, FOREIGN KEY (a) REFERENCES p(id))"
        advice = run_rule(RuleType.TABLE_NO_FOREIGN_KEY, sql)
        assert advice[0].content == (
            f'Foreign key is not allowed in the table `t`, related statement: "{sql}"'
        )

    def test_alter_add_constraint(self, run_rule) -> None:
        sql = "ALTER TABLE t ADD CONSTRAINT fk FOREIGN KEY (a) REFERENCES p(id)"
        advice = run_rule(RuleType.TABLE_NO_FOREIGN_KEY, sql)
        assert advice[0].code is Code.TABLE_HAS_FK

    def test_no_foreign_key(self, run_rule) -> None:
        assert run_rule(RuleType.TABLE_NO_FOREIGN_KEY, "CREATE TABLE t(a INT)") == OK


class TestNamingTable:
    def test_format_mismatch(self, run_rule) -> None:
        advice = run_rule(
            RuleType.NAMING_TABLE,
            "CREATE TABLE TechBook(id INT)",
            payload={"format": "^[a-z]+(_[a-z]+)*$"},
        )
        assert advice[0].content == (
            '`TechBook` mismatches table naming convention, naming format should be "^[a-z]+(_[a-z]+)*$"'
        )

    def test_length(self, run_rule) -> None:
        advice = run_rule(
            RuleType.NAMING_TABLE,
            "CREATE TABLE abcdefg(id INT)",
            payload={"format": "^[a-z]+$", "maxLength": 5},
        )
        assert advice[0].content == (
            "`abcdefg` mismatches table naming convention, its length should be within 5 characters"
        )

    def test_rename(self, run_rule) -> None:
        advice = run_rule(
            RuleType.NAMING_TABLE, "ALTER TABLE t RENAME TO BadName", payload={"format": "^[a-z]+$"}
        )
        assert advice[0].code is Code.NAMING_TABLE_CONVENTION_MISMATCH

    def test_payload_required(self, run_rule) -> None:
        from sqlreview import InvalidConfigError

        with pytest.raises(InvalidConfigError):
            run_rule(RuleType.NAMING_TABLE, "CREATE TABLE t(id INT)")


class TestColumnTypeDisallowList:
    def test_disallowed_type(self, run_rule) -> None:
        advice = run_rule(
            RuleType.COLUMN_TYPE_DISALLOW_LIST,
            "CREATE TABLE t(a JSON, b INT);\nALTER TABLE t ADD COLUMN c json",
            payload={"list": ["JSON"]},
        )
        assert [(a.line, a.content) for a in advice] == [
            (1, "Disallow column type JSON but column `t`.`a` is"),
            (2, "Disallow column type JSON but column `t`.`c` is"),
        ]

    def test_empty_list(self, run_rule) -> None:
        assert run_rule(RuleType.COLUMN_TYPE_DISALLOW_LIST, "CREATE TABLE t(a JSON)") == OK


class TestUseInnoDB:
    def test_create_table_engine(self, run_rule) -> None:
        sql = "CREATE TABLE t(a INT) ENGINE = MyISAM"
        advice = run_rule(RuleType.MYSQL_ENGINE, sql)
        assert advice[0].content == f"\"{sql}\" doesn't use InnoDB engine"

    def test_innodb(self, run_rule) -> None:
        assert run_rule(RuleType.MYSQL_ENGINE, "CREATE TABLE t(a INT) ENGINE=InnoDB") == OK

    def test_alter_engine(self, run_rule) -> None:
        advice = run_rule(RuleType.MYSQL_ENGINE, "ALTER TABLE t ENGINE = MyISAM", dialect=Dialect.TIDB)
        assert advice[0].code is Code.NOT_INNODB_ENGINE
