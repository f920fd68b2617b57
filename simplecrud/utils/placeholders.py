"""Named placeholders (`:name`) in SQL fragments."""

import re

# `::` casts and `word:word` are not placeholders
PLACEHOLDER_PATTERN = re.compile(r"(?<![:\w]):([A-Za-z_]\w*)")


def find_placeholders(sql: str) -> set[str]:
    """Return the names of every `:name` placeholder in sql."""
    return set(PLACEHOLDER_PATTERN.findall(sql))


def to_pyformat(sql: str) -> str:
    """Rewrite `:name` placeholders as `%(name)s`, escaping literal percent signs."""
    return PLACEHOLDER_PATTERN.sub(r"%(\1)s", sql.replace("%", "%%"))
