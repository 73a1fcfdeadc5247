"""
Input Sanitization Service

Every user-supplied string (registration fields, tweet bodies) passes
through here before it reaches a repository.

Two families of transforms:
- sanitize_text / sanitize_text_with_full_encoding: the full rule pipeline
  followed by HTML entity encoding; safe to render without further escaping.
- sanitize_username / sanitize_display_name / sanitize_email /
  sanitize_tweet_content: markup removal plus a per-field character
  allowlist, NO entity encoding. These fields are only rendered through
  contexts that escape on output.

Sanitizers never raise: non-string or empty input yields "".
"""
import html
import logging
import re
from typing import Any, Optional

from chirp.core.config import settings
from chirp.core.sanitization_rules import (
    DANGEROUS_PATTERNS,
    MARKUP_CATEGORIES,
    compile_rules,
)

logger = logging.getLogger(__name__)

# Characters stripped from every field before its allowlist is applied
FORBIDDEN_FIELD_CHARS = r'[<>:"/\\|?*]'

USERNAME_DISALLOWED = r"[^a-zA-Z0-9._-]"
DISPLAY_NAME_DISALLOWED = r"[^\w\s\-_.'(),!?]"
EMAIL_DISALLOWED = r"[^\w@\-_.]"
TWEET_DISALLOWED = r"[^\w\s\-_.'(),!?@#$%^&*+=~`{}\[\]|;:]"


class SanitizationEngine:
    """
    Stateless text sanitizer.

    All patterns are compiled once in __init__ and never mutated, so a
    single instance can be shared across threads and tasks.
    """

    def __init__(
        self,
        username_max_length: int = 20,
        display_name_max_length: int = 50,
        tweet_max_length: int = 280,
    ):
        self.username_max_length = username_max_length
        self.display_name_max_length = display_name_max_length
        self.tweet_max_length = tweet_max_length

        self._rules = compile_rules(DANGEROUS_PATTERNS)
        self._markup_rules = tuple(
            rule for rule in self._rules if rule.category in MARKUP_CATEGORIES
        )
        self._detectors = tuple(rule for rule in self._rules if rule.probe is not None)

        self._forbidden = re.compile(FORBIDDEN_FIELD_CHARS)
        self._username_disallowed = re.compile(USERNAME_DISALLOWED)
        self._display_name_disallowed = re.compile(DISPLAY_NAME_DISALLOWED, re.ASCII)
        self._email_disallowed = re.compile(EMAIL_DISALLOWED, re.ASCII)
        self._tweet_disallowed = re.compile(TWEET_DISALLOWED, re.ASCII)

        self._repeated_separators = (
            (re.compile(r"\.{2,}"), "."),
            (re.compile(r"_{2,}"), "_"),
            (re.compile(r"-{2,}"), "-"),
        )
        self._leading_separators = re.compile(r"^[._-]+")
        self._trailing_separators = re.compile(r"[._-]+$")
        self._whitespace = re.compile(r"\s+")

    # ============================================================
    # Full pipeline (entity encoded)
    # ============================================================

    def sanitize_text(self, text: Any) -> str:
        """
        Sanitize free text and HTML-entity encode the result.

        Encodes & < > " ' (forward slash is left alone).
        """
        value = self._coerce(text, "text")
        if not value:
            return ""

        sanitized = self._apply_rules(value)
        sanitized = html.escape(sanitized, quote=True)
        return self._normalize_whitespace(sanitized)

    def sanitize_text_with_full_encoding(self, text: Any) -> str:
        """Same as sanitize_text, but also encodes "/" as &#x2F;."""
        value = self._coerce(text, "text")
        if not value:
            return ""

        sanitized = self._apply_rules(value)
        sanitized = html.escape(sanitized, quote=True).replace("/", "&#x2F;")
        return self._normalize_whitespace(sanitized)

    # ============================================================
    # Field sanitizers (allowlist, no entity encoding)
    # ============================================================

    def sanitize_username(self, username: Any) -> str:
        """
        Lowercase [a-z0-9._-] handle, at most username_max_length chars.

        Runs of the same separator collapse to one; separators are trimmed
        from both ends, including after truncation.
        """
        value = self._coerce(username, "username")
        if not value:
            return ""

        sanitized = self._strip_markup(value)
        sanitized = self._forbidden.sub("", sanitized)
        sanitized = self._username_disallowed.sub("", sanitized)

        for pattern, replacement in self._repeated_separators:
            sanitized = pattern.sub(replacement, sanitized)

        sanitized = self._leading_separators.sub("", sanitized)
        sanitized = self._trailing_separators.sub("", sanitized)

        sanitized = sanitized[:self.username_max_length]
        sanitized = self._trailing_separators.sub("", sanitized)

        return sanitized.lower()

    def sanitize_display_name(self, display_name: Any) -> str:
        value = self._coerce(display_name, "display_name")
        if not value:
            return ""

        sanitized = self._strip_markup(value)
        sanitized = self._forbidden.sub("", sanitized)
        sanitized = self._display_name_disallowed.sub("", sanitized)
        sanitized = self._normalize_whitespace(sanitized)

        return self._truncate(sanitized, self.display_name_max_length)

    def sanitize_email(self, email: Any) -> str:
        """Lowercased; only word characters and @ - _ . survive."""
        value = self._coerce(email, "email")
        if not value:
            return ""

        sanitized = self._strip_markup(value)
        sanitized = self._forbidden.sub("", sanitized)
        sanitized = self._email_disallowed.sub("", sanitized)

        return sanitized.lower().strip()

    def sanitize_tweet_content(self, content: Any) -> str:
        value = self._coerce(content, "tweet_content")
        if not value:
            return ""

        sanitized = self._strip_markup(value)
        sanitized = self._forbidden.sub("", sanitized)
        sanitized = self._tweet_disallowed.sub("", sanitized)
        sanitized = self._normalize_whitespace(sanitized)

        return self._truncate(sanitized, self.tweet_max_length)

    # ============================================================
    # Detection
    # ============================================================

    def contains_dangerous_content(self, text: Any) -> bool:
        """
        Check raw input against the detection probes of the rule table.

        Does not modify the input. Returns False for non-string or empty
        input.
        """
        if not isinstance(text, str) or not text:
            return False

        for rule in self._detectors:
            if rule.matches(text):
                logger.debug(f"Dangerous content detected (category={rule.category.value})")
                return True
        return False

    # ============================================================
    # Helpers
    # ============================================================

    def _coerce(self, value: Any, field_name: str) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            logger.debug(f"Rejected non-string {field_name}: {type(value).__name__}")
            return ""
        return value

    def _apply_rules(self, text: str) -> str:
        # Removing one match can assemble another ("javajavascript:script:"),
        # so repeat until a full pass changes nothing. Every change shortens
        # the text or replaces a metacharacter, so this terminates.
        while True:
            sanitized = text
            for rule in self._rules:
                sanitized = rule.apply(sanitized)
            if sanitized == text:
                return sanitized
            text = sanitized

    def _strip_markup(self, text: str) -> str:
        for rule in self._markup_rules:
            text = rule.apply(text)
        return text

    def _normalize_whitespace(self, text: str) -> str:
        return self._whitespace.sub(" ", text).strip()

    @staticmethod
    def _truncate(text: str, max_length: int) -> str:
        if len(text) > max_length:
            text = text[:max_length].rstrip()
        return text


_sanitizer: Optional[SanitizationEngine] = None


def get_sanitizer() -> SanitizationEngine:
    """Shared engine configured from settings."""
    global _sanitizer
    if _sanitizer is None:
        _sanitizer = SanitizationEngine(
            username_max_length=settings.USERNAME_MAX_LENGTH,
            display_name_max_length=settings.DISPLAY_NAME_MAX_LENGTH,
            tweet_max_length=settings.TWEET_MAX_LENGTH,
        )
    return _sanitizer
