"""Title resolution and technical-concept extraction for conversations."""

import re
from collections.abc import Mapping

from .models import Conversation, ms_to_datetime

PLACEHOLDER_TITLES = frozenset({"", "AI Service Chat", "Composer Chat", "Untitled Chat"})
UNTITLED = "Untitled Chat"
MAX_TITLE_LENGTH = 60

# (search term, display name); list order breaks ties between equally frequent concepts
TECHNICAL_CONCEPTS = (
    ("javascript", "JavaScript"),
    ("typescript", "TypeScript"),
    ("python", "Python"),
    ("java", "Java"),
    ("go", "Go"),
    ("rust", "Rust"),
    ("cpp", "C++"),
    ("c++", "C++"),
    ("html", "HTML"),
    ("css", "CSS"),
    ("sql", "SQL"),
    ("bash", "Bash"),
    ("shell", "Shell"),
    ("authentication", "Authentication"),
    ("authorization", "Authorization"),
    ("api", "API"),
    ("database", "Database"),
    ("frontend", "Frontend"),
    ("backend", "Backend"),
    ("microservices", "Microservices"),
    ("docker", "Docker"),
    ("kubernetes", "Kubernetes"),
    ("deployment", "Deployment"),
    ("testing", "Testing"),
    ("debugging", "Debugging"),
    ("performance", "Performance"),
    ("optimization", "Optimization"),
    ("security", "Security"),
    ("encryption", "Encryption"),
    ("validation", "Validation"),
    ("refactoring", "Refactoring"),
    ("react", "React"),
    ("vue", "Vue"),
    ("angular", "Angular"),
    ("nodejs", "Node.js"),
    ("express", "Express"),
    ("fastapi", "FastAPI"),
    ("django", "Django"),
    ("flask", "Flask"),
    ("spring", "Spring"),
    ("laravel", "Laravel"),
    ("rails", "Rails"),
    ("nextjs", "Next.js"),
    ("svelte", "Svelte"),
)

_CONCEPT_PATTERNS = tuple(
    (display, re.compile(rf"(?<![\w+#]){re.escape(term)}(?![\w+#])", re.IGNORECASE)) for term, display in TECHNICAL_CONCEPTS
)

_SENTENCE_END = re.compile(r"[.!?\n]")


def _truncate(text: str, max_length: int = MAX_TITLE_LENGTH) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3].rstrip() + "..."


def _first_sentence(content: str) -> str:
    stripped = content.strip()
    match = _SENTENCE_END.search(stripped)
    if match:
        # Keep a trailing question/exclamation mark, drop a trailing period
        end = match.end() if match.group() in "?!" else match.start()
        stripped = stripped[:end]
    return stripped.strip()


def extract_technical_concepts(conversation: Conversation) -> list[str]:
    """Return technical concepts mentioned in the transcript, most frequent first."""
    text = "\n".join(message.content for message in conversation.messages)
    if not text:
        return []

    counts: dict[str, int] = {}
    for display, pattern in _CONCEPT_PATTERNS:
        hits = len(pattern.findall(text))
        if hits:
            counts[display] = counts.get(display, 0) + hits

    # sorted() is stable, so equal counts keep TECHNICAL_CONCEPTS order
    return sorted(counts, key=lambda name: counts[name], reverse=True)


def _hint_title(conversation: Conversation, title_hints: Mapping[str, str] | None) -> str | None:
    if not title_hints:
        return None
    direct = title_hints.get(conversation.id, "").strip()
    if direct:
        return direct
    if len(title_hints) == 1:
        only = next(iter(title_hints.values())).strip()
        if only:
            return only
    return None


def resolve_title(conversation: Conversation, title_hints: Mapping[str, str] | None = None) -> str:
    """Pick a non-empty display title for a conversation.

    Rules are tried in order and the first that applies wins:

    1. a hint for this conversation id, or the only hint supplied
    2. the conversation's own title unless it is a placeholder
    3. "Untitled Chat" when there are no messages
    4. the first sentence of the first user message (at most 60 characters)
    5. "<Concept> Discussion" for the most mentioned technical concept
    6. "Development Session <date>"

    Args:
        conversation: The parsed conversation.
        title_hints: Mapping of conversation key to user-authored title.

    Returns:
        The resolved title.
    """
    hinted = _hint_title(conversation, title_hints)
    if hinted:
        return hinted

    own = conversation.title.strip()
    if own not in PLACEHOLDER_TITLES:
        return own

    if not conversation.messages:
        return UNTITLED

    first_user = conversation.first_user_message
    if first_user:
        sentence = _first_sentence(first_user.content)
        if sentence:
            return _truncate(sentence)

    concepts = extract_technical_concepts(conversation)
    if concepts:
        return f"{concepts[0]} Discussion"

    if conversation.timestamp_ms > 0:
        date = ms_to_datetime(conversation.timestamp_ms)
    else:
        date = conversation.created_at
    return f"Development Session {date.strftime('%Y-%m-%d')}"
