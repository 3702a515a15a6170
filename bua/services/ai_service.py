import json, logging, re
from typing import Any, Dict, List, Optional

from openai import OpenAI

from bua.core.config import settings
from bua.models.schemas import CATEGORY_VALUES, CaseStub, ReportSummary

logger = logging.getLogger("bua.ai")
logger.setLevel(logging.INFO)

ADVISOR_SYSTEM = (
    "You are Bua, a friendly assistant for school-related questions. "
    "Keep answers short, kind, and redact PII when needed."
)
REDACT_SYSTEM = (
    "You are a privacy expert. Redact PII (Personally Identifiable Information) like names, "
    "specific locations, or dates from the following text, replacing them with placeholders "
    "like [REDACTED_PERSON]. Return only the redacted text."
)
REPORT_SYSTEM = (
    "You are an assistant helping a student report an issue to school staff. "
    "Output ONLY a JSON object (no extra text) with the fields: "
    '"title" (short, human-friendly), '
    '"category" (one of "Academics","Bullying","Facilities","Policy","Other"), '
    '"keyFacts" (3-7 short bullet points), '
    '"description" (a clear, neutral summary of 3-6 sentences).'
)
JOURNAL_SYSTEM = (
    "You summarise these cases for an anonymised school news feed. "
    "Describe the pattern across the cases in one short paragraph, then give 2-3 concrete "
    "recommended next steps as bullet points. Never invent names, places or dates and never "
    "quote placeholders such as [REDACTED_STUDENT]."
)
REDACTION_FAILED_TEXT = "Error redacting text. Please review manually."


# ==============================================================================
# OpenAI client helpers
# ==============================================================================

def oai_ready() -> bool:
    return bool(settings.OPENAI_API_KEY)

def oai_client() -> OpenAI:
    if not oai_ready():
        raise RuntimeError("OpenAI not configured")
    return OpenAI(api_key=settings.OPENAI_API_KEY)

def _chat(messages: List[Dict[str, str]], max_tokens: Optional[int] = None) -> str:
    resp = oai_client().chat.completions.create(
        model=settings.OPENAI_MODEL,
        messages=messages,
        temperature=settings.OPENAI_TEMPERATURE,
        max_tokens=max_tokens or settings.OPENAI_MAX_TOKENS,
    )
    return (resp.choices[0].message.content or "").strip()

def _complete(system: str, user: str, max_tokens: Optional[int] = None) -> str:
    return _chat(
        [{"role": "system", "content": system}, {"role": "user", "content": user}],
        max_tokens=max_tokens,
    )

def handle_openai_error(e: Exception) -> str:
    msg = str(e)
    if "unsupported_value" in msg or "does not support" in msg:
        return "This model doesn't support that parameter; request was rejected."
    if any(k in msg.lower() for k in ["rate", "quota", "limit"]):
        return "I'm hitting a rate limit right now. Please try again in a moment."
    return "I couldn't reach the model just now. Please try again."


# ==============================================================================
# Advisor, redaction, report prefill
# ==============================================================================

def get_advisor_response(prompt: str) -> str:
    return _complete(ADVISOR_SYSTEM, prompt)

def chat_reply(history: List[Dict[str, Any]]) -> str:
    """Next advisor turn for a stored conversation whose last turn is the user's."""
    messages = [{"role": "system", "content": ADVISOR_SYSTEM}]
    for turn in history:
        role = "assistant" if turn.get("role") == "model" else "user"
        messages.append({"role": role, "content": str(turn.get("text") or "")})
    return _chat(messages)

def redact_pii(text: str) -> str:
    """Redacted copy of `text`; a fixed placeholder if redaction is unavailable."""
    try:
        out = _complete(REDACT_SYSTEM, text)
    except Exception as e:
        logger.warning("PII redaction failed (%s); storing placeholder", e)
        return REDACTION_FAILED_TEXT
    return out or REDACTION_FAILED_TEXT

def extract_json_block(text: str) -> Optional[Dict[str, Any]]:
    """First {...} object in an LLM reply, or None."""
    match = re.search(r"\{[\s\S]*\}", text or "")
    if not match:
        return None
    try:
        data = json.loads(match.group(0))
    except ValueError:
        return None
    return data if isinstance(data, dict) else None

def coerce_report_summary(parsed: Dict[str, Any], source_text: str) -> ReportSummary:
    category = parsed.get("category")
    if category not in CATEGORY_VALUES:
        category = "Other"
    facts = parsed.get("keyFacts")
    facts = [str(f) for f in facts] if isinstance(facts, list) else []
    title = parsed.get("title")
    description = parsed.get("description")
    return ReportSummary(
        title=title if isinstance(title, str) and title.strip() else "Issue report",
        category=category,
        key_facts=facts,
        description=description if isinstance(description, str) else source_text,
    )

def summarise_for_report(text: str) -> ReportSummary:
    raw = _complete(REPORT_SYSTEM, f'Student message:\n"""{text}"""')
    parsed = extract_json_block(raw)
    if parsed is None:
        raise ValueError(f"AI did not return valid JSON: {raw[:200]!r}")
    return coerce_report_summary(parsed, text)


# ==============================================================================
# Journal summaries
# ==============================================================================

def summarise_cases_for_journal(cases: List[CaseStub]) -> str:
    payload = [
        {"id": c.id, "category": c.category, "redactedDescription": c.redacted_description}
        for c in cases
    ]
    return _complete(JOURNAL_SYSTEM, "Cases:\n" + json.dumps(payload, ensure_ascii=False))


TREND_OPENERS = [
    "Recent reports indicate",
    "The latest submissions suggest",
    "This period highlights",
    "A fresh review of cases shows",
    "In the most recent incidents, we see",
]
PATTERN_PHRASES = [
    "a recurring theme around",
    "clear signals of pressure in",
    "an emerging pattern focused on",
    "a notable concentration in",
    "heightened concern regarding",
]
REC_OPENERS = [
    "Recommended next steps:",
    "Proposed actions:",
    "Suggested remedies:",
    "Actionable follow-ups:",
    "Immediate considerations:",
]
RECS_BY_CATEGORY = {
    "Facilities": [
        "log issues via a single channel with clear SLAs",
        "conduct a targeted audit of affected blocks",
        "schedule termly preventive maintenance checks",
        "publish repair status boards for transparency",
    ],
    "Bullying": [
        "reinforce anti-bullying reporting and response timelines",
        "increase adult visibility during transitions",
        "run peer-support awareness sessions",
        "monitor hotspots and refine duty rosters",
    ],
    "Policy": [
        "re-state the policy with concrete examples",
        "align enforcement to written rules only",
        "issue a staff circular clarifying scope and limits",
        "collect student feedback before termly updates",
    ],
    "Academics": [
        "enforce rubric-based feedback for all assessments",
        "offer re-mark or moderation pathways when requested",
        "publish marking turn-around times",
        "provide clinics on rubric interpretation",
    ],
    "Other": [
        "triage to the appropriate panel within 48 hours",
        "publish clearer contact points for learners",
        "track resolution outcomes in a shared dashboard",
        "include the issue in the next governance review",
    ],
}

def _fnv1a(s: str) -> int:
    h = 2166136261
    for ch in s:
        h ^= ord(ch)
        h = (h * 16777619) & 0xFFFFFFFF
    return h

def _pick(items: List[str], seed: int, salt: int) -> str:
    return items[(seed + salt) % len(items)]

def _truncate(s: str, max_len: int = 140) -> str:
    t = re.sub(r"\s+", " ", s or "").strip()
    return t if len(t) <= max_len else t[: max_len - 1].strip() + "…"

def template_journal_summary(cases: List[CaseStub]) -> str:
    """
    Offline journal text, deterministic for a given set of case ids.

    Used when no model is configured. Wording varies with the case set so
    consecutive entries about different cases do not read the same.
    """
    seed = _fnv1a("|".join(sorted(c.id for c in cases)))

    counts: Dict[str, int] = {}
    snippets = []
    for c in sorted(cases, key=lambda c: c.id):
        counts[c.category] = counts.get(c.category, 0) + 1
        if c.redacted_description:
            snippets.append(_truncate(c.redacted_description))
    categories = sorted(counts)

    if len(categories) == 1:
        n = counts[categories[0]]
        cat_readable = f"{categories[0]} ({n} case{'s' if n > 1 else ''})"
    else:
        cat_readable = ", ".join(f"{c.lower()} ({counts[c]})" for c in categories)

    recs = []
    salt = 31
    for cat in categories or ["Other"]:
        recs.append(_pick(RECS_BY_CATEGORY.get(cat, RECS_BY_CATEGORY["Other"]), seed, salt))
        salt += 13
    while len(recs) < 2:
        salt += 11
        recs.append(_pick(RECS_BY_CATEGORY["Other"], seed, salt))
    recs = recs[:3]

    sample = f"One anonymised account notes: “{_pick(snippets, seed, 5)}” " if snippets else ""
    para1 = (
        f"{_pick(TREND_OPENERS, seed, 1)} {_pick(PATTERN_PHRASES, seed, 7)} {cat_readable}. "
        f"{sample}Overall, these cases point to operational gaps that can be closed "
        "with clearer ownership and faster follow-through."
    )
    para2 = f"{_pick(REC_OPENERS, seed, 19)} " + "; ".join(f"• {r}" for r in recs) + "."
    return f"{para1}\n\n{para2}"

def get_journal_summarizer():
    if oai_ready():
        return summarise_cases_for_journal
    logger.warning("OPENAI_API_KEY not set; using template journal summaries")
    return template_journal_summary
