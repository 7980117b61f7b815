"""
Intent Extractor

Pure, table-driven classification of a single utterance into slot values
(topic, skill level, learning goal) and conversational signals.

Matching is case-insensitive and anchored at word boundaries; a keyword also
matches its plural ("project" matches "projects"). Within a table the
categories are tried in order and the first category with a matching
keyword wins, so table order is the tie-break:

    skill level:  intermediate -> advanced -> beginner
    goal:         quick -> project -> concepts

No state, no I/O.
"""

import re
from functools import lru_cache
from typing import Optional
from pydantic import BaseModel, ConfigDict

from pathfinder.models.learning_path import LearningGoal, SkillLevel


# ─── Keyword tables ───────────────────────────────────────────────────

SKILL_LEVEL_KEYWORDS: tuple[tuple[SkillLevel, tuple[str, ...]], ...] = (
    ("intermediate", (
        "intermediate", "some experience", "know the basics", "know basics", "know some",
        "a bit of experience", "improve", "improving", "get better", "better at",
        "comfortable with", "level up", "brush up",
    )),
    ("advanced", (
        "advanced", "expert", "deep dive", "optimization", "optimize", "mastering",
        "master", "senior", "professional", "in-depth", "in depth", "pro level",
    )),
    ("beginner", (
        "beginner", "new to", "new here", "i'm new", "im new", "newbie", "noob", "never done",
        "never used", "first time", "from scratch", "basics", "basic", "starting out",
        "just starting", "start",
        "no experience", "zero experience", "total newbie", "novice", "intro", "introduction",
    )),
)

GOAL_KEYWORDS: tuple[tuple[LearningGoal, tuple[str, ...]], ...] = (
    ("quick", (
        "quick", "quickly", "crash course", "overview", "in a hurry", "short", "summary",
        "asap", "tl;dr", "speedrun", "fast overview", "rapid",
    )),
    ("project", (
        "project", "build", "building", "make something", "make a", "make an", "create",
        "hands-on", "hands on", "practical", "portfolio", "real world", "real-world",
    )),
    ("concepts", (
        "concept", "understand", "understanding", "theory", "fundamental", "explain",
        "explained", "how does", "how do", "how it works", "why does", "principle",
        "deep understanding",
    )),
)

# (pattern, canonical name). Longer or more specific names come first.
KNOWN_SUBJECTS: tuple[tuple[str, str], ...] = (
    ("react native", "react native"),
    ("machine learning", "machine learning"),
    ("deep learning", "deep learning"),
    ("data science", "data science"),
    ("artificial intelligence", "artificial intelligence"),
    ("video editing", "video editing"),
    ("unreal engine", "unreal engine"),
    ("web development", "web development"),
    ("javascript", "javascript"),
    ("javasript", "javascript"),
    ("javscript", "javascript"),
    ("typescript", "typescript"),
    ("python", "python"),
    ("pyhton", "python"),
    ("pythin", "python"),
    ("java", "java"),
    ("c++", "c++"),
    ("c#", "c#"),
    ("rust", "rust"),
    ("golang", "golang"),
    ("kotlin", "kotlin"),
    ("swift", "swift"),
    ("flutter", "flutter"),
    ("react", "react"),
    ("vue", "vue"),
    ("angular", "angular"),
    ("node.js", "node.js"),
    ("nodejs", "node.js"),
    ("django", "django"),
    ("flask", "flask"),
    ("fastapi", "fastapi"),
    ("html", "html"),
    ("css", "css"),
    ("sql", "sql"),
    ("docker", "docker"),
    ("kubernetes", "kubernetes"),
    ("linux", "linux"),
    ("git", "git"),
    ("aws", "aws"),
    ("excel", "excel"),
    ("photoshop", "photoshop"),
    ("figma", "figma"),
    ("blender", "blender"),
    ("unity", "unity"),
    ("guitar", "guitar"),
    ("piano", "piano"),
    ("drawing", "drawing"),
    ("cooking", "cooking"),
    ("photography", "photography"),
    ("calculus", "calculus"),
    ("statistics", "statistics"),
    ("chess", "chess"),
    ("spanish", "spanish"),
    ("french", "french"),
    ("yoga", "yoga"),
    ("js", "javascript"),
    ("ml", "machine learning"),
    ("ai", "artificial intelligence"),
)

# Leading phrases removed before a free-text topic is accepted.
FILLER_PREFIXES: tuple[str, ...] = (
    "i'm", "im", "i am",
    "i want to learn how to", "i want to learn about", "i want to learn", "i wanna learn",
    "i would like to learn", "i'd like to learn", "i need to learn", "i want to", "i want",
    "i wanna", "i would like to", "i'd like to", "i need help with", "i need",
    "can you teach me about", "can you teach me", "can you help me with", "can you help me",
    "can you show me", "can you find", "can you", "could you", "please", "pls",
    "help me learn", "help me with", "help me", "teach me about", "teach me", "show me",
    "give me", "find me", "how do i", "how to", "learn about", "learn", "tutorials on",
    "tutorials for", "tutorial on", "tutorial for", "videos on", "videos about",
    "what about", "how about", "something about", "about", "now", "so", "ok", "okay", "hey", "hi", "hello",
)

CONNECTOR_WORDS: tuple[str, ...] = ("on", "about", "for", "with", "to", "in", "of", "a", "an", "the", "some", "and")

TRAILING_NOISE: tuple[str, ...] = ("tutorials", "tutorial", "videos", "video", "please", "pls")

# Whole-utterance hedges.
HEDGE_EXACT: frozenset[str] = frozenset({
    "idk", "dunno", "whatever", "any", "anything", "either", "both", "all", "whichever",
    "hmm", "hm", "um", "uh", "meh", "?", "??", "???", "eh", "dk",
})

# Hedges that count anywhere in the utterance.
HEDGE_PHRASES: tuple[str, ...] = (
    "not sure", "no idea", "don't know", "dont know", "i don't know", "doesn't matter",
    "doesnt matter", "no preference", "up to you", "you choose", "you pick", "no clue",
    "whatever you think", "anything is fine",
)

GREETING_PHRASES: frozenset[str] = frozenset({
    "hi", "hello", "hey", "yo", "sup", "hiya", "howdy", "hi there", "hello there",
    "hey there", "good morning", "good afternoon", "good evening",
})

RESET_PHRASES: tuple[str, ...] = ("start over", "something else", "different", "reset", "start again")

FOLLOW_UP_KEYWORDS: tuple[str, ...] = ("more", "similar", "another", "also", "try again", "retry")

MIN_UNCLEAR_LENGTH = 3
MIN_TOPIC_LENGTH = 3


class IntentSignals(BaseModel):
    """Everything the extractor can say about one utterance."""

    model_config = ConfigDict(frozen=True)

    text: str
    topic: Optional[str] = None
    skill_level: Optional[SkillLevel] = None
    goal: Optional[LearningGoal] = None
    unclear: bool = False
    reset: bool = False
    greeting: bool = False
    follow_up: bool = False

    @property
    def has_slot(self) -> bool:
        return self.skill_level is not None or self.goal is not None


# ─── Matching helpers ─────────────────────────────────────────────────

@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern:
    return re.compile(rf"(?<!\w){re.escape(keyword)}(?:s|es)?(?!\w)")


def _contains(text: str, keyword: str) -> bool:
    return _keyword_pattern(keyword).search(text) is not None


def _normalize(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip().lower())


def _classify(text: str, table) -> Optional[str]:
    lowered = _normalize(text)
    for category, keywords in table:
        for keyword in keywords:
            if _contains(lowered, keyword):
                return category
    return None


def _strip_phrases(text: str, phrases) -> str:
    for phrase in sorted(phrases, key=len, reverse=True):
        text = _keyword_pattern(phrase).sub(" ", text)
    return re.sub(r"\s+", " ", text).strip()


def _strip_leading(text: str, prefixes) -> str:
    changed = True
    while changed and text:
        changed = False
        for prefix in prefixes:
            if text == prefix:
                return ""
            if text.startswith(prefix + " "):
                text = text[len(prefix):].strip()
                changed = True
                break
    return text


def _strip_trailing(text: str, suffixes) -> str:
    changed = True
    while changed and text:
        changed = False
        for suffix in suffixes:
            if text == suffix:
                return ""
            if text.endswith(" " + suffix):
                text = text[: -len(suffix)].strip()
                changed = True
                break
    return text


def slot_keywords() -> tuple[str, ...]:
    """All level and goal keywords, for callers that need to ignore them."""
    keywords: list[str] = []
    for _, words in SKILL_LEVEL_KEYWORDS + GOAL_KEYWORDS:
        keywords.extend(words)
    return tuple(keywords)


def clean_free_text(text: str, extra_phrases: tuple[str, ...] = ()) -> str:
    """Reduce an utterance to its subject words: no fillers, slot keywords or connectors."""
    cleaned = _normalize(text)
    cleaned = re.sub(r"[!?,;:\"]+", " ", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip(" .")
    cleaned = _strip_leading(cleaned, FILLER_PREFIXES)
    cleaned = _strip_phrases(cleaned, slot_keywords() + FOLLOW_UP_KEYWORDS + extra_phrases)
    cleaned = _strip_leading(cleaned, FILLER_PREFIXES + CONNECTOR_WORDS)
    cleaned = _strip_trailing(cleaned, TRAILING_NOISE + CONNECTOR_WORDS)
    return cleaned.strip(" .")


# ─── Public contract ──────────────────────────────────────────────────

def extract_skill_level(text: str) -> Optional[SkillLevel]:
    return _classify(text, SKILL_LEVEL_KEYWORDS)


def extract_goal(text: str) -> Optional[LearningGoal]:
    return _classify(text, GOAL_KEYWORDS)


def extract_known_subject(text: str) -> Optional[str]:
    """Canonical name of the first known subject mentioned in the text."""
    lowered = _normalize(text)
    for pattern, canonical in KNOWN_SUBJECTS:
        if _contains(lowered, pattern):
            return canonical
    return None


def extract_topic(text: str) -> Optional[str]:
    """
    Extract the subject the user wants to learn.

    Known subjects win and are returned by their canonical name. Otherwise
    the utterance is stripped of filler phrases and slot keywords and the
    remainder is returned when it is long enough to be a topic.
    """
    known = extract_known_subject(text)
    if known:
        return known

    remainder = clean_free_text(text)
    if len(remainder) > MIN_TOPIC_LENGTH:
        return remainder
    return None


def is_unclear(text: str) -> bool:
    """True for hedges ("not sure", "idk", "?") and very short replies."""
    lowered = _normalize(text)
    if len(lowered) < MIN_UNCLEAR_LENGTH:
        return True

    bare = lowered.strip(" .!")
    if bare in HEDGE_EXACT:
        return True

    return any(_contains(lowered, phrase) for phrase in HEDGE_PHRASES)


def is_reset(text: str) -> bool:
    lowered = _normalize(text)
    return any(_contains(lowered, phrase) for phrase in RESET_PHRASES)


def is_greeting(text: str) -> bool:
    bare = _normalize(text).strip(" .!,")
    return bare in GREETING_PHRASES


def is_follow_up(text: str) -> bool:
    lowered = _normalize(text)
    return any(_contains(lowered, keyword) for keyword in FOLLOW_UP_KEYWORDS)


def extract_intent(text: str) -> IntentSignals:
    """Run every classifier over one utterance."""
    return IntentSignals(
        text=text,
        topic=extract_topic(text),
        skill_level=extract_skill_level(text),
        goal=extract_goal(text),
        unclear=is_unclear(text),
        reset=is_reset(text),
        greeting=is_greeting(text),
        follow_up=is_follow_up(text),
    )


# Words that never make a topic on their own.
STOPWORDS: frozenset[str] = frozenset({
    "what", "about", "with", "that", "this", "those", "these", "some", "want", "wanna",
    "like", "just", "please", "show", "give", "videos", "video", "tutorials", "tutorial",
    "need", "know", "learn", "learning", "teach", "help", "would", "could", "find",
    "there", "then", "thanks", "thank", "really", "maybe", "instead", "stuff", "things",
})


def significant_tokens(text: str, min_length: int) -> set[str]:
    """Lower-cased words of at least min_length, minus stopwords and slot keywords."""
    ignored = STOPWORDS | {word for phrase in slot_keywords() for word in phrase.split()}
    return {
        token for token in re.findall(r"[a-z0-9+#]+", _normalize(text))
        if len(token) >= min_length and token not in ignored
    }
