"""Test SQL command classification and access-level enforcement.

Covers comment stripping, case handling, the nested built-in levels,
custom command sets and the denial summary.
"""
import pytest
from pgmcp.governance.access import (
    ACCESS_LEVELS,
    AccessDecision,
    AccessLevel,
    AccessPolicy,
    decide,
    parse_commands,
)
from pgmcp.governance.commands import Command, classify_command


# ── Fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def readonly_policy():
    return AccessPolicy.for_level(AccessLevel.READONLY)

@pytest.fixture
def modify_policy():
    return AccessPolicy.for_level(AccessLevel.MODIFY)

@pytest.fixture
def ddl_policy():
    return AccessPolicy.for_level(AccessLevel.DDL)


# ── Classification Tests ──────────────────────────────────────────────

class TestCommandClassification:

    @pytest.mark.parametrize("sql,expected", [
        ("SELECT 1", Command.SELECT),
        ("select * from users", Command.SELECT),
        ("  \n\tSelect id FROM t", Command.SELECT),
        ("INSERT INTO t VALUES (1)", Command.INSERT),
        ("UPDATE t SET x = 1", Command.UPDATE),
        ("DELETE FROM t", Command.DELETE),
        ("CREATE TABLE t (id int)", Command.CREATE),
        ("DROP TABLE t", Command.DROP),
        ("ALTER TABLE t ADD COLUMN c text", Command.ALTER),
        ("TRUNCATE t", Command.TRUNCATE),
        ("GRANT SELECT ON t TO bob", Command.GRANT),
        ("REVOKE SELECT ON t FROM bob", Command.REVOKE),
        ("BEGIN", Command.BEGIN),
        ("COMMIT", Command.COMMIT),
        ("ROLLBACK", Command.ROLLBACK),
        ("EXPLAIN ANALYZE SELECT 1", Command.EXPLAIN),
        ("ANALYZE t", Command.ANALYZE),
        ("VACUUM FULL t", Command.VACUUM),
        ("COPY t TO STDOUT", Command.COPY),
    ])
    def test_leading_keyword(self, sql, expected):
        assert classify_command(sql) == expected

    def test_line_comment_ignored(self):
        assert classify_command("-- x\nSELECT 1") == Command.SELECT
        assert classify_command("-- x\nSELECT 1") == classify_command("select 1")

    def test_block_comment_ignored(self):
        assert classify_command("/* header */ DELETE FROM t") == Command.DELETE

    def test_multiline_block_comment_ignored(self):
        sql = "/* line one\n   line two\n*/\n  update t set x = 1"
        assert classify_command(sql) == Command.UPDATE

    def test_block_comments_are_non_greedy(self):
        sql = "/* a */ SELECT /* b */ 1"
        assert classify_command(sql) == Command.SELECT

    def test_comment_hiding_keyword(self):
        assert classify_command("/* SELECT */ DROP TABLE t") == Command.DROP

    @pytest.mark.parametrize("sql", [
        "",
        "   ",
        "\n\t",
        "-- only a comment",
        "/* only a comment */",
    ])
    def test_empty_is_unknown(self, sql):
        assert classify_command(sql) == Command.UNKNOWN

    @pytest.mark.parametrize("sql", [
        "WITH cte AS (SELECT 1) SELECT * FROM cte",
        "SHOW search_path",
        "DO $$ BEGIN END $$",
        "SELECTX 1",
        "'SELECT' 1",
    ])
    def test_unrecognized_is_unknown(self, sql):
        assert classify_command(sql) == Command.UNKNOWN

    def test_deterministic(self):
        sql = "/* c */ -- d\n insert into t values (1)"
        assert {classify_command(sql) for _ in range(5)} == {Command.INSERT}


# ── Access Level Tests ────────────────────────────────────────────────

class TestAccessLevelDefinitions:

    def test_readonly_level(self):
        assert ACCESS_LEVELS[AccessLevel.READONLY] == {Command.SELECT}

    def test_modify_level(self):
        assert ACCESS_LEVELS[AccessLevel.MODIFY] == {
            Command.SELECT, Command.INSERT, Command.UPDATE, Command.DELETE,
        }

    def test_ddl_level(self):
        assert ACCESS_LEVELS[AccessLevel.DDL] == {
            Command.SELECT, Command.INSERT, Command.UPDATE, Command.DELETE,
            Command.CREATE, Command.DROP, Command.ALTER, Command.TRUNCATE,
        }

    def test_level_hierarchy(self):
        """Each built-in level is a strict superset of the previous."""
        assert ACCESS_LEVELS[AccessLevel.READONLY] < ACCESS_LEVELS[AccessLevel.MODIFY]
        assert ACCESS_LEVELS[AccessLevel.MODIFY] < ACCESS_LEVELS[AccessLevel.DDL]

    def test_builtin_levels_never_permit_unknown(self):
        for level in (AccessLevel.READONLY, AccessLevel.MODIFY, AccessLevel.DDL):
            assert Command.UNKNOWN not in ACCESS_LEVELS[level]

    def test_builtin_level_ignores_custom_commands(self):
        policy = AccessPolicy.for_level(AccessLevel.READONLY, ["DROP"])
        assert policy.permitted_commands == {Command.SELECT}

    def test_policy_is_immutable(self, readonly_policy):
        with pytest.raises(AttributeError):
            readonly_policy.level = AccessLevel.DDL


class TestParseCommands:

    def test_case_and_whitespace(self):
        assert parse_commands([" select ", "Explain"]) == {Command.SELECT, Command.EXPLAIN}

    def test_unrecognized_tokens_dropped(self):
        assert parse_commands(["SELECT", "MERGE", ""]) == {Command.SELECT}

    def test_explicit_unknown(self):
        assert parse_commands(["UNKNOWN"]) == {Command.UNKNOWN}


# ── Decision Tests ────────────────────────────────────────────────────

class TestDecide:

    def test_readonly_allows_select(self, readonly_policy):
        decision = decide("SELECT * FROM t", readonly_policy)
        assert decision.allowed is True
        assert decision.command == Command.SELECT
        assert decision.denied_summary is None

    def test_readonly_denies_delete(self, readonly_policy):
        decision = decide("DELETE FROM t", readonly_policy)
        assert decision.allowed is False
        assert decision.command == Command.DELETE

    @pytest.mark.parametrize("sql", [
        "INSERT INTO t VALUES (1)",
        "UPDATE t SET x = 1",
        "DELETE FROM t WHERE id = 1",
    ])
    def test_modify_allows_dml(self, modify_policy, sql):
        assert decide(sql, modify_policy).allowed

    @pytest.mark.parametrize("sql", ["DROP TABLE t", "CREATE TABLE t (id int)"])
    def test_modify_denies_ddl(self, modify_policy, sql):
        assert not decide(sql, modify_policy).allowed

    @pytest.mark.parametrize("sql", ["DROP TABLE t", "TRUNCATE t", "ALTER TABLE t DROP c"])
    def test_ddl_allows_ddl(self, ddl_policy, sql):
        assert decide(sql, ddl_policy).allowed

    @pytest.mark.parametrize("sql", [
        "GRANT ALL ON t TO bob",
        "COPY t FROM '/tmp/x'",
        "VACUUM t",
        "BEGIN",
    ])
    def test_ddl_denies_admin_commands(self, ddl_policy, sql):
        assert not decide(sql, ddl_policy).allowed

    @pytest.mark.parametrize("level", list(AccessLevel))
    def test_empty_sql_denied(self, level):
        policy = AccessPolicy.for_level(level, ["SELECT"])
        decision = decide("   ", policy)
        assert decision.command == Command.UNKNOWN
        assert decision.allowed is False

    def test_custom_level(self):
        policy = AccessPolicy.for_level(AccessLevel.CUSTOM, ["SELECT", "EXPLAIN"])
        assert decide("EXPLAIN ANALYZE t", policy).allowed
        assert not decide("INSERT INTO t VALUES (1)", policy).allowed

    def test_custom_empty_denies_everything(self):
        policy = AccessPolicy.for_level(AccessLevel.CUSTOM, [])
        assert policy.permitted_commands == frozenset()
        for sql in ("SELECT 1", "EXPLAIN SELECT 1", "garbage"):
            assert not decide(sql, policy).allowed

    def test_custom_explicit_unknown_allowed(self):
        policy = AccessPolicy.for_level(AccessLevel.CUSTOM, ["SELECT", "UNKNOWN"])
        decision = decide("WITH x AS (SELECT 1) SELECT * FROM x", policy)
        assert decision.allowed
        assert decision.command == Command.UNKNOWN


class TestDeniedSummary:

    def test_summary_lists_level_and_sorted_commands(self, modify_policy):
        decision = decide("DROP TABLE t", modify_policy)
        assert decision.denied_summary == (
            "Query not allowed. Current level: modify. "
            "Allowed commands: DELETE, INSERT, SELECT, UPDATE"
        )

    def test_summary_for_empty_custom(self):
        policy = AccessPolicy.for_level(AccessLevel.CUSTOM)
        summary = decide("SELECT 1", policy).denied_summary
        assert "Current level: custom" in summary
        assert "Allowed commands: none" in summary

    def test_decision_is_value(self):
        decision = AccessDecision(
            allowed=False, command=Command.DROP, level=AccessLevel.READONLY,
            permitted_commands=("SELECT",),
        )
        assert decision.denied_summary.endswith("Allowed commands: SELECT")
