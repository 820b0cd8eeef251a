"""
SQL corrector — deterministic rewrites for known generation mistakes.

Rules run in order over the generated SQL. Every rule is idempotent on its
own and never fails; SQL it does not recognise passes through unchanged.
"""
import logging
import re
from dataclasses import dataclass
from typing import Callable, Sequence

from models.table import DateColumnCorrection

logger = logging.getLogger(__name__)

DEFAULT_ALIAS_EXCEPTION = r'\s+AS\s+"?date"?(?![\w"])'

_TABLE_BINDING = re.compile(r'\b(?:FROM|JOIN)\s+"(\w+)"\s+(?:AS\s+)?([A-Za-z_]\w*)', re.IGNORECASE)
_AS_BEFORE = re.compile(r'\bAS\s+$', re.IGNORECASE)
# String literals and line comments; rules never rewrite inside them
_LITERAL_OR_COMMENT = re.compile(r"('(?:[^']|'')*'|--[^\n]*)")

# Words that can follow a table name without being its alias
_NOT_ALIASES = {
    "AS", "ON", "USING", "WHERE", "GROUP", "ORDER", "HAVING", "LIMIT", "OFFSET",
    "JOIN", "INNER", "LEFT", "RIGHT", "FULL", "OUTER", "CROSS", "NATURAL", "LATERAL",
    "UNION", "INTERSECT", "EXCEPT", "WINDOW", "FETCH", "FOR", "AND", "OR", "SELECT",
}


@dataclass(frozen=True)
class CorrectionContext:
    corrections: tuple[DateColumnCorrection, ...]
    aliases: dict[str, str]
    alias_exception: str


@dataclass(frozen=True)
class CorrectionRule:
    name: str
    applies: Callable[[str, CorrectionContext], bool]
    rewrite: Callable[[str, CorrectionContext], str]


def extract_table_aliases(sql: str) -> dict[str, str]:
    """Map each quoted table in FROM/JOIN clauses to the alias bound to it (first binding wins)."""
    aliases: dict[str, str] = {}
    for m in _TABLE_BINDING.finditer(sql):
        table, alias = m.group(1), m.group(2)
        if alias.upper() in _NOT_ALIASES:
            continue
        aliases.setdefault(table, alias)
    return aliases


# ── Rule 1: generic date column on start/end tables ───────────────────────────

def _mentions_generic_column(sql: str, ctx: CorrectionContext) -> bool:
    lowered = sql.lower()
    return any(c.generic_column.lower() in lowered for c in ctx.corrections)


def _disambiguate_date_column(sql: str, ctx: CorrectionContext) -> str:
    for c in ctx.corrections:
        qualifiers = [re.escape(f'"{c.table}"')]
        alias = ctx.aliases.get(c.table)
        if alias:
            qualifiers.insert(0, re.escape(alias))
        generic = re.escape(c.generic_column)
        pattern = re.compile(
            rf'(?<![\w."])({"|".join(qualifiers)})\.(?:"{generic}"|{generic}\b)(?!{ctx.alias_exception})',
            re.IGNORECASE,
        )
        sql = pattern.sub(lambda m, col=c.start_column: f'{m.group(1)}."{col}"', sql)
    return sql


# ── Rule 2: unqualified start/end columns get the bound alias ─────────────────

def _has_aliased_range_table(sql: str, ctx: CorrectionContext) -> bool:
    return any(c.table in ctx.aliases for c in ctx.corrections)


def _qualify_range_columns(sql: str, ctx: CorrectionContext) -> str:
    for c in ctx.corrections:
        alias = ctx.aliases.get(c.table)
        if not alias:
            continue
        canonical = {c.start_column.lower(): c.start_column, c.end_column.lower(): c.end_column}
        names = "|".join(re.escape(n) for n in canonical.values())
        pattern = re.compile(rf'(?<![\w."\'])("?)({names})\1(?![\w"])', re.IGNORECASE)

        def _qualify(m: re.Match, alias=alias, canonical=canonical, text=sql) -> str:
            # Output aliases ("... AS startDate") are names, not references
            if _AS_BEFORE.search(text[max(0, m.start() - 16):m.start()]):
                return m.group(0)
            return f'{alias}."{canonical[m.group(2).lower()]}"'

        sql = pattern.sub(_qualify, sql)
    return sql


RULES: tuple[CorrectionRule, ...] = (
    CorrectionRule("date-column-disambiguation", _mentions_generic_column, _disambiguate_date_column),
    CorrectionRule("alias-consistency", _has_aliased_range_table, _qualify_range_columns),
)


def _rewrite_code(sql: str, rewrite: Callable[[str], str]) -> str:
    # re.split keeps the captured literal/comment spans at odd indexes
    parts = _LITERAL_OR_COMMENT.split(sql)
    return "".join(p if i % 2 else rewrite(p) for i, p in enumerate(parts))


def correct_sql(
    sql: str,
    corrections: Sequence[DateColumnCorrection],
    alias_exception: str = DEFAULT_ALIAS_EXCEPTION,
) -> str:
    """Apply every correction rule in order and return the rewritten SQL."""
    ctx = CorrectionContext(
        corrections=tuple(corrections),
        aliases=extract_table_aliases(_LITERAL_OR_COMMENT.sub(" ", sql)),
        alias_exception=alias_exception,
    )
    for rule in RULES:
        if not rule.applies(sql, ctx):
            continue
        rewritten = _rewrite_code(sql, lambda part, rule=rule: rule.rewrite(part, ctx))
        if rewritten != sql:
            logger.info("SQL correction '%s' applied", rule.name)
            sql = rewritten
    return sql


class SQLCorrector:
    """Binds the correction map and alias exception so the pipeline can call `correct(sql)`."""

    def __init__(self, corrections: Sequence[DateColumnCorrection],
                 alias_exception: str = DEFAULT_ALIAS_EXCEPTION):
        re.compile(alias_exception)  # fail at startup, not per query
        self.corrections = tuple(corrections)
        self.alias_exception = alias_exception

    def correct(self, sql: str) -> str:
        return correct_sql(sql, self.corrections, self.alias_exception)
