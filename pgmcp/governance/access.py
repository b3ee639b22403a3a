"""Access levels and allow/deny decisions for SQL statements.

Each access level maps to a fixed set of permitted commands. The three
built-in levels nest (readonly < modify < ddl); the custom level takes its
set from configuration and denies everything when that set is empty.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from pgmcp.governance.commands import Command, classify_command

logger = logging.getLogger(__name__)


class AccessLevel(str, Enum):
    READONLY = "readonly"
    MODIFY = "modify"
    DDL = "ddl"
    CUSTOM = "custom"


_READONLY = frozenset({Command.SELECT})
_MODIFY = _READONLY | {Command.INSERT, Command.UPDATE, Command.DELETE}
_DDL = _MODIFY | {Command.CREATE, Command.DROP, Command.ALTER, Command.TRUNCATE}

ACCESS_LEVELS: dict[AccessLevel, frozenset[Command]] = {
    AccessLevel.READONLY: _READONLY,
    AccessLevel.MODIFY: _MODIFY,
    AccessLevel.DDL: _DDL,
    AccessLevel.CUSTOM: frozenset(),
}


def parse_commands(tokens: Iterable[str]) -> frozenset[Command]:
    """Map configured command tokens onto the command vocabulary.

    Tokens are matched case-insensitively. Unrecognized tokens are logged
    and dropped; UNKNOWN is accepted only when named explicitly.
    """
    commands: set[Command] = set()
    for token in tokens:
        name = token.strip().upper()
        if not name:
            continue
        try:
            commands.add(Command(name))
        except ValueError:
            logger.warning(f"Unknown SQL command in allowed commands: {token}")
    return frozenset(commands)


@dataclass(frozen=True)
class AccessPolicy:
    """Active access level and the commands it permits."""

    level: AccessLevel
    permitted_commands: frozenset[Command]

    @classmethod
    def for_level(
        cls, level: AccessLevel, custom_commands: Iterable[str] = ()
    ) -> "AccessPolicy":
        if level is AccessLevel.CUSTOM:
            permitted = parse_commands(custom_commands)
            if not permitted:
                logger.warning(
                    "Access level 'custom' has no allowed commands configured; "
                    "every statement will be denied"
                )
            return cls(level=level, permitted_commands=permitted)
        return cls(level=level, permitted_commands=ACCESS_LEVELS[level])

    @property
    def sorted_permitted(self) -> list[str]:
        return sorted(c.value for c in self.permitted_commands)


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of checking one statement against an AccessPolicy."""

    allowed: bool
    command: Command
    level: AccessLevel
    permitted_commands: tuple[str, ...] = ()

    @property
    def denied_summary(self) -> Optional[str]:
        """Caller-facing explanation for a denial, None when allowed."""
        if self.allowed:
            return None
        permitted = ", ".join(self.permitted_commands) or "none"
        return (
            f"Query not allowed. Current level: {self.level.value}. "
            f"Allowed commands: {permitted}"
        )


def decide(sql: str, policy: AccessPolicy) -> AccessDecision:
    command = classify_command(sql)
    return AccessDecision(
        allowed=command in policy.permitted_commands,
        command=command,
        level=policy.level,
        permitted_commands=tuple(policy.sorted_permitted),
    )
