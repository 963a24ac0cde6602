"""Schema parsers for the chat-bearing keys of a Cursor workspace store.

Cursor has stored AI pane state under different keys and in different shapes
across releases. Each parser turns the value of one key into conversations:

- workbench.panel.aichat.view.aichat.chatdata: tabs with titles and messages/bubbles
- aiService.prompts: a flat list of prompts (or one prompt object)
- aiService.generations: an append-only log of generation records
- composer.composerData: composer session metadata, sometimes with messages

Parsers are pure. A value that matches none of the accepted shapes raises
ParseError; malformed entries inside an otherwise valid value are skipped.
"""

import hashlib
import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

import orjson

from ..errors import ParseError
from .models import (
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ROLE_USER,
    Conversation,
    Message,
    TitleHint,
    ms_to_datetime,
)
from .roles import classify_role

CHATDATA_KEY = "workbench.panel.aichat.view.aichat.chatdata"
PROMPTS_KEY = "aiService.prompts"
GENERATIONS_KEY = "aiService.generations"
COMPOSER_KEY = "composer.composerData"

AI_SERVICE_TITLE = "AI Service Chat"
COMPOSER_TITLE = "Composer Chat"

# Generation record types produced by the AI chat pane
CHAT_GENERATION_TYPES = frozenset({"composer", "chat"})

# Timestamps below this are seconds rather than milliseconds
_SECONDS_THRESHOLD = 1e11

# Latest epoch milliseconds a datetime can represent (9999-12-31 23:59:59.999 UTC)
_MAX_MS = 253402300799999

_ROLE_ALIASES = {
    "user": ROLE_USER,
    "human": ROLE_USER,
    "assistant": ROLE_ASSISTANT,
    "ai": ROLE_ASSISTANT,
    "bot": ROLE_ASSISTANT,
    "model": ROLE_ASSISTANT,
    "system": ROLE_SYSTEM,
    # Cursor bubbles use numeric types
    "1": ROLE_USER,
    "2": ROLE_ASSISTANT,
}


@dataclass
class _PendingMessage:
    id: str
    role: str
    content: str
    timestamp_ms: int | None = None


def _to_ms(value) -> int | None:
    """Convert an epoch (seconds or milliseconds) or ISO-8601 string to milliseconds."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value <= 0:
            return None
        ms = int(value * 1000) if value < _SECONDS_THRESHOLD else int(value)
        # Out-of-range values are treated as missing
        return ms if ms <= _MAX_MS else None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return _to_ms(float(value))
        except ValueError:
            pass
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        ms = int(parsed.timestamp() * 1000)
        return ms if 0 < ms <= _MAX_MS else None
    return None


def _first_ms(data: dict, *keys: str) -> int | None:
    for key in keys:
        ms = _to_ms(data.get(key))
        if ms is not None:
            return ms
    return None


def _first_text(data: dict, *keys: str) -> str:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def _normalize_role(raw) -> str:
    """Map a host role value to user/assistant/system; unknown values pass through."""
    if raw is None or isinstance(raw, bool):
        return ""
    text = str(raw).strip()
    return _ROLE_ALIASES.get(text.lower(), text)


def _message_role(msg: dict) -> str:
    """Explicit role of a message: its `role`, else a recognised bubble `type`."""
    explicit = _normalize_role(msg.get("role"))
    if explicit:
        return explicit
    bubble_type = msg.get("type")
    if bubble_type is None or isinstance(bubble_type, bool):
        return ""
    return _ROLE_ALIASES.get(str(bubble_type).strip().lower(), "")


def _build_messages(pending: list[_PendingMessage], fallback_ms: int = 0) -> list[Message]:
    """Freeze pending messages, filling gaps so timestamps never decrease.

    A missing timestamp inherits its predecessor's; leading gaps take the
    first known timestamp, or fallback_ms when nothing is known.
    """
    known = [p.timestamp_ms for p in pending if p.timestamp_ms is not None]
    current = known[0] if known else fallback_ms
    messages = []
    for p in pending:
        if p.timestamp_ms is not None:
            current = max(current, p.timestamp_ms)
        messages.append(Message(id=p.id, role=p.role, content=p.content, timestamp_ms=current))
    return messages


def _make_conversation(
    conversation_id: str,
    title: str,
    messages: list[Message],
    stored_ms: int | None,
    created_ms: int | None,
    source_key: str,
) -> Conversation:
    timestamp_ms = messages[-1].timestamp_ms if messages else (stored_ms or 0)
    if created_ms is None:
        created_ms = messages[0].timestamp_ms if messages else (stored_ms or 0)
    return Conversation(
        id=conversation_id,
        title=title,
        messages=messages,
        timestamp_ms=timestamp_ms,
        created_at=ms_to_datetime(created_ms),
        source_key=source_key,
    )


class SchemaParser:
    """Turns the raw value of one store key into conversations.

    Subclasses set `key` and implement `parse`. Parsers that can use
    composer title hints set `uses_title_hints`.
    """

    key: str = ""
    uses_title_hints: bool = False

    def parse(self, value: str | bytes, title_hints: Mapping[str, str] | None = None) -> list[Conversation]:
        raise NotImplementedError

    def _load(self, value: str | bytes):
        try:
            return orjson.loads(value)
        except orjson.JSONDecodeError as exc:
            raise ParseError(self.key, "invalid JSON") from exc

    def _shape_error(self, expected: str, data) -> ParseError:
        return ParseError(self.key, f"expected {expected}, got {type(data).__name__}")


class ChatDataParser(SchemaParser):
    """Parse the AI pane chat data: {"tabs": [...]} with titles and messages."""

    key = CHATDATA_KEY

    def parse(self, value, title_hints=None):
        data = self._load(value)
        if not isinstance(data, dict):
            raise self._shape_error("object", data)

        tabs = data.get("tabs") or []
        if not isinstance(tabs, list):
            raise self._shape_error("list of tabs", tabs)

        conversations = []
        for index, tab in enumerate(tabs):
            if not isinstance(tab, dict):
                continue
            conversation = self._parse_tab(tab, index)
            if conversation:
                conversations.append(conversation)
        return conversations

    def _parse_tab(self, tab: dict, index: int) -> Conversation | None:
        tab_id = str(tab.get("id") or tab.get("tabId") or f"chat-tab-{index}")
        title = _first_text(tab, "title", "chatTitle")
        stored_ms = _first_ms(tab, "timestamp", "lastSendTime", "lastUpdatedAt", "createdAt")

        raw_messages = tab.get("messages") or tab.get("bubbles") or []
        pending = []
        for i, msg in enumerate(raw_messages if isinstance(raw_messages, list) else []):
            if not isinstance(msg, dict):
                continue
            content = _first_text(msg, "content", "text", "rawText")
            if not content:
                continue
            explicit = _message_role(msg)
            pending.append(
                _PendingMessage(
                    id=str(msg.get("id") or msg.get("bubbleId") or f"{tab_id}-{i}"),
                    role=classify_role(content, explicit),
                    content=content,
                    timestamp_ms=_first_ms(msg, "timestamp", "createdAt"),
                )
            )

        if not pending and stored_ms is None and not title:
            return None

        messages = _build_messages(pending, stored_ms or 0)
        return _make_conversation(tab_id, title, messages, stored_ms, _first_ms(tab, "createdAt"), self.key)


class PromptListParser(SchemaParser):
    """Parse the legacy flat prompt list into a single conversation."""

    key = PROMPTS_KEY
    uses_title_hints = True

    def parse(self, value, title_hints=None):
        data = self._load(value)
        if isinstance(data, list):
            prompts = data
        elif isinstance(data, dict):
            prompts = [data]
        else:
            raise self._shape_error("list of prompts or a prompt object", data)

        pending = []
        for index, prompt in enumerate(prompts):
            if isinstance(prompt, str):
                prompt = {"text": prompt}
            elif not isinstance(prompt, dict):
                continue
            content = _first_text(prompt, "text", "content")
            if not content:
                continue
            explicit = _normalize_role(prompt.get("role"))
            pending.append(
                _PendingMessage(
                    id=str(prompt.get("id") or f"prompt-{index}"),
                    role=classify_role(content, explicit, position_index=index),
                    content=content,
                    timestamp_ms=_first_ms(prompt, "timestamp", "unixMs", "createdAt"),
                )
            )

        if not pending:
            return []

        digest = hashlib.sha1(value if isinstance(value, bytes) else value.encode("utf-8")).hexdigest()[:12]
        messages = _build_messages(pending)
        title = self._title_from_hints(title_hints)
        return [_make_conversation(f"ai-service-{digest}", title, messages, None, None, self.key)]

    @staticmethod
    def _title_from_hints(title_hints: Mapping[str, str] | None) -> str:
        """Pick a title from composer hints.

        With several hints there is no reliable way to tell which composer the
        prompts belong to, so the first non-empty title is taken as is.
        """
        if not title_hints:
            return AI_SERVICE_TITLE
        for title in title_hints.values():
            if title and title.strip():
                return title.strip()
        return AI_SERVICE_TITLE


class GenerationLogParser(SchemaParser):
    """Parse the aiService.generations log, one conversation per group."""

    key = GENERATIONS_KEY
    uses_title_hints = True

    def parse(self, value, title_hints=None):
        data = self._load(value)
        if not isinstance(data, list):
            raise self._shape_error("list of generation records", data)

        groups: dict[str, list[dict]] = {}
        for index, record in enumerate(data):
            if not isinstance(record, dict) or record.get("type") not in CHAT_GENERATION_TYPES:
                continue
            group_key = str(record.get("conversationId") or record.get("generationUUID") or f"record-{index}")
            groups.setdefault(group_key, []).append(record)

        conversations = []
        for group_key, records in groups.items():
            records.sort(key=lambda r: _to_ms(r.get("unixMs")) or 0)
            pending = []
            for i, record in enumerate(records):
                content = _first_text(record, "textDescription", "text")
                if not content:
                    continue
                pending.append(
                    _PendingMessage(
                        id=str(record.get("generationUUID") or f"{group_key}-{i}"),
                        role=classify_role(content, _normalize_role(record.get("role"))),
                        content=content,
                        timestamp_ms=_to_ms(record.get("unixMs")),
                    )
                )
            if not pending:
                continue
            messages = _build_messages(pending)
            # A group keyed by a composer id takes that composer's title
            title = (title_hints or {}).get(group_key, "").strip() or AI_SERVICE_TITLE
            conversations.append(
                _make_conversation(f"generations-{group_key}", title, messages, None, None, self.key)
            )
        return conversations


def _composer_entries(parser: SchemaParser, data) -> list[dict]:
    if not isinstance(data, dict):
        raise parser._shape_error("object", data)
    composers = data.get("allComposers") or []
    if not isinstance(composers, list):
        raise parser._shape_error("list of composers", composers)
    return [c for c in composers if isinstance(c, dict)]


class ComposerParser(SchemaParser):
    """Parse composer sessions; only head composers become conversations."""

    key = COMPOSER_KEY

    def parse(self, value, title_hints=None):
        conversations = []
        for composer in _composer_entries(self, self._load(value)):
            if composer.get("type") != "head":
                continue
            composer_id = composer.get("composerId")
            if not composer_id:
                continue
            conversations.append(self._parse_composer(composer, str(composer_id)))
        return conversations

    def _parse_composer(self, composer: dict, composer_id: str) -> Conversation:
        mode = _first_text(composer, "unifiedMode", "forceMode")
        title = _first_text(composer, "name")
        if not title:
            title = f"{mode.title()} Chat" if mode else COMPOSER_TITLE

        created_ms = _first_ms(composer, "createdAt")
        stored_ms = _first_ms(composer, "lastUpdatedAt", "createdAt") or 0

        raw_messages = composer.get("messages") or composer.get("conversation") or []
        pending = []
        for i, msg in enumerate(raw_messages if isinstance(raw_messages, list) else []):
            if not isinstance(msg, dict):
                continue
            content = _first_text(msg, "content", "text")
            if not content:
                continue
            pending.append(
                _PendingMessage(
                    id=str(msg.get("id") or msg.get("bubbleId") or f"{composer_id}-{i}"),
                    role=classify_role(content, _message_role(msg)),
                    content=content,
                    timestamp_ms=_first_ms(msg, "timestamp", "createdAt"),
                )
            )

        if pending:
            messages = _build_messages(pending, created_ms or stored_ms)
        else:
            created_text = ms_to_datetime(created_ms or stored_ms).strftime("%Y-%m-%d %H:%M:%S")
            messages = [
                Message(
                    id="composer-info",
                    role=ROLE_SYSTEM,
                    content=f"Composer session: {mode or 'unknown'} mode, created at {created_text}",
                    timestamp_ms=stored_ms,
                )
            ]

        return _make_conversation(composer_id, title, messages, stored_ms, created_ms, self.key)


def extract_title_hints(value: str | bytes) -> list[TitleHint]:
    """Extract user-authored composer titles from composer.composerData.

    Every composer with a non-empty name contributes, in payload order.
    """
    parser = ComposerParser()
    hints = []
    for composer in _composer_entries(parser, parser._load(value)):
        name = composer.get("name")
        composer_id = composer.get("composerId")
        if composer_id and isinstance(name, str) and name.strip():
            hints.append(TitleHint(conversation_key=str(composer_id), title=name.strip()))
    return hints


# Precedence order of the keys; every present key contributes.
SCHEMA_PARSERS: tuple[SchemaParser, ...] = (
    ChatDataParser(),
    PromptListParser(),
    GenerationLogParser(),
    ComposerParser(),
)

KNOWN_KEYS: tuple[str, ...] = tuple(parser.key for parser in SCHEMA_PARSERS)
