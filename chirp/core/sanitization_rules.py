"""
Dangerous-content rule table

One table drives both the rewriting pipeline and the detector:
- rewriting applies every rule, in table order
- detection tests only the rules that carry a probe

A rule whose rewrite form would flag ordinary prose (standalone "set",
";", "&") has no probe. Where the detection form differs from the rewrite
form the rule carries its own probe pattern.

Table order is the pipeline order:
    1. protocol / handler neutralization
    2. script-call removal (keyword + one balanced argument list)
    3. dangerous-block removal (tag and content)
    4. tag strip (content kept, except <button>)
    5. residual tag strip
    6. SQL keyword neutralization
    7. NoSQL operator neutralization
    8. shell metacharacter neutralization
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Pattern, Tuple


class RuleCategory(str, Enum):
    PROTOCOL = "protocol"
    SCRIPT_CALL = "script_call"
    BLOCK = "block"
    TAG = "tag"
    RESIDUAL_TAG = "residual_tag"
    SQL = "sql"
    NOSQL = "nosql"
    SHELL = "shell"


# Categories shared by the field-specific sanitizers
MARKUP_CATEGORIES = frozenset({
    RuleCategory.BLOCK,
    RuleCategory.TAG,
    RuleCategory.RESIDUAL_TAG,
})


@dataclass(frozen=True)
class RuleSpec:
    """
    Uncompiled rule.

    Attributes:
        category: Pipeline stage the rule belongs to
        pattern: Rewrite pattern
        replacement: Substitution text (ignored for SCRIPT_CALL rules)
        detect: Use the rewrite pattern as the detection probe
        probe: Separate detection pattern (implies detect)
        case_sensitive: Match case exactly (default is case-insensitive)
    """
    category: RuleCategory
    pattern: str
    replacement: str = ""
    detect: bool = False
    probe: Optional[str] = None
    case_sensitive: bool = False


@dataclass(frozen=True)
class CompiledRule:
    category: RuleCategory
    regex: Pattern
    replacement: str
    probe: Optional[Pattern]

    def apply(self, text: str) -> str:
        if self.category is RuleCategory.SCRIPT_CALL:
            return strip_call(text, self.regex)
        return self.regex.sub(self.replacement, text)

    def matches(self, text: str) -> bool:
        return self.probe is not None and self.probe.search(text) is not None


def _block(tag: str, detect: bool = False) -> RuleSpec:
    """Whole element, content included, across newlines."""
    return RuleSpec(
        RuleCategory.BLOCK,
        rf"<{tag}\b[^>]*>.*?</{tag}\s*>",
        probe=rf"<\s*{tag}\b" if detect else None,
    )


def _open_close(tag: str) -> Tuple[RuleSpec, RuleSpec]:
    """Opening and closing tag only; content kept."""
    return (
        RuleSpec(RuleCategory.TAG, rf"<{tag}\b[^>]*>"),
        RuleSpec(RuleCategory.TAG, rf"</{tag}\s*>"),
    )


def _single(tag: str) -> RuleSpec:
    return RuleSpec(RuleCategory.TAG, rf"<{tag}\b[^>]*>")


PROTOCOL_RULES = (
    # Before the bare javascript: rule so the url( wrapper goes too
    RuleSpec(RuleCategory.PROTOCOL, r"url\s*\(\s*['\"]?\s*javascript:", detect=True),
    RuleSpec(RuleCategory.PROTOCOL, r"javascript:", detect=True),
    RuleSpec(RuleCategory.PROTOCOL, r"vbscript:", detect=True),
    RuleSpec(RuleCategory.PROTOCOL, r"data:", detect=True),
    RuleSpec(RuleCategory.PROTOCOL, r"\bon\w+\s*=", detect=True),
)

SCRIPT_CALL_RULES = (
    RuleSpec(RuleCategory.SCRIPT_CALL, r"\bexpression\b"),
    RuleSpec(RuleCategory.SCRIPT_CALL, r"\beval\b", probe=r"\beval\s*\("),
    RuleSpec(RuleCategory.SCRIPT_CALL, r"\bsetTimeout\b", probe=r"\bsetTimeout\s*\("),
    RuleSpec(RuleCategory.SCRIPT_CALL, r"\bsetInterval\b", probe=r"\bsetInterval\s*\("),
)

BLOCK_RULES = (
    _block("script", detect=True),
    _block("iframe", detect=True),
    _block("object"),
    _block("embed"),
    # Self-closing or unclosed <embed ...>
    RuleSpec(RuleCategory.BLOCK, r"<embed\b[^>]*>"),
    _block("style"),
    _block("head"),
    _block("title"),
    _block("html"),
)

TAG_RULES = (
    *_open_close("form"),
    *_open_close("textarea"),
    *_open_close("select"),
    *_open_close("body"),
    # Button labels are never meaningful in stored text
    RuleSpec(RuleCategory.TAG, r"<button\b[^>]*>.*?</button\s*>"),
    _single("input"),
    _single("link"),
    _single("meta"),
    _single("base"),
)

RESIDUAL_TAG_RULES = (
    RuleSpec(RuleCategory.RESIDUAL_TAG, r"<[^>]*>"),
)

SQL_RULES = (
    RuleSpec(RuleCategory.SQL, r"union\s+select", detect=True),
    RuleSpec(RuleCategory.SQL, r"drop\s+table", detect=True),
    RuleSpec(RuleCategory.SQL, r"delete\s+from", detect=True),
    RuleSpec(RuleCategory.SQL, r"insert\s+into", detect=True),
    RuleSpec(RuleCategory.SQL, r"alter\s+table", detect=True),
    RuleSpec(RuleCategory.SQL, r"create\s+table", detect=True),
    RuleSpec(RuleCategory.SQL, r"\bupdate\b", probe=r"\bupdate\s.*?\sset\b"),
    RuleSpec(RuleCategory.SQL, r"\bset\b"),
    RuleSpec(RuleCategory.SQL, r"\bexec\b", detect=True),
    RuleSpec(RuleCategory.SQL, r"\bexecute\b", detect=True),
)

NOSQL_RULES = tuple(
    RuleSpec(RuleCategory.NOSQL, rf"\${operator}", detect=True)
    for operator in ("where", "ne", "gt", "lt", "regex", "in", "nin")
)

SHELL_RULES = (
    RuleSpec(RuleCategory.SHELL, r";", replacement=" "),
    RuleSpec(RuleCategory.SHELL, r"\|", replacement=" "),
    RuleSpec(RuleCategory.SHELL, r"&", replacement=" "),
    RuleSpec(RuleCategory.SHELL, r"`", detect=True),
    RuleSpec(RuleCategory.SHELL, r"\$\s*\(", replacement="(", detect=True),
    RuleSpec(RuleCategory.SHELL, r"\$\{[^}]*\}", replacement=" ", probe=r"\$\{"),
)

DANGEROUS_PATTERNS: Tuple[RuleSpec, ...] = (
    PROTOCOL_RULES
    + SCRIPT_CALL_RULES
    + BLOCK_RULES
    + TAG_RULES
    + RESIDUAL_TAG_RULES
    + SQL_RULES
    + NOSQL_RULES
    + SHELL_RULES
)


def compile_rules(specs: Iterable[RuleSpec]) -> Tuple[CompiledRule, ...]:
    """Compile a rule table. Call once per engine, never per input."""
    compiled = []
    for spec in specs:
        flags = re.DOTALL
        if not spec.case_sensitive:
            flags |= re.IGNORECASE

        probe = None
        if spec.probe is not None:
            probe = re.compile(spec.probe, flags)
        elif spec.detect:
            probe = re.compile(spec.pattern, flags)

        compiled.append(CompiledRule(
            category=spec.category,
            regex=re.compile(spec.pattern, flags),
            replacement=spec.replacement,
            probe=probe,
        ))
    return tuple(compiled)


def strip_call(text: str, keyword: Pattern) -> str:
    """
    Remove every keyword match plus one balanced (...) group right after it.

    Whitespace between the keyword and "(" is removed with the group. An
    unclosed group runs to the end of the text. A keyword that is not
    followed by "(" is removed on its own.
    """
    parts = []
    position = 0
    for match in keyword.finditer(text):
        if match.start() < position:
            # Inside an argument list that was already dropped
            continue
        parts.append(text[position:match.start()])
        position = _skip_argument_list(text, match.end())
    parts.append(text[position:])
    return "".join(parts)


def _skip_argument_list(text: str, index: int) -> int:
    cursor = index
    while cursor < len(text) and text[cursor].isspace():
        cursor += 1
    if cursor >= len(text) or text[cursor] != "(":
        return index

    depth = 0
    for i in range(cursor, len(text)):
        char = text[i]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i + 1
    return len(text)
