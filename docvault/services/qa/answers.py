"""
Answer Rules
Keyword rules that turn search hits, or nothing at all, into an answer
"""

import re
from typing import Any, Dict, List

GREETING_PATTERNS = [
    re.compile(r"^(hi|hello|hey)(\b|!|\.?$)"),
    re.compile(r"^(good morning|good afternoon|good evening)(\b|!|\.?$)"),
    re.compile(r"^(greetings)(\b|!|\.?$)"),
    re.compile(r"^(howdy)(\b|!|\.?$)"),
]

DATE_PATTERN = re.compile(
    r"\d{1,2}/\d{1,2}/\d{2,4}|\d{1,2}-\d{1,2}-\d{2,4}|\w+ \d{1,2}, \d{4}"
)

# Excerpt text shorter than this is too thin to answer from
MIN_EXCERPT_CHARS = 200


def _asks_what(q: str) -> bool:
    return "what" in q or "explain" in q or "describe" in q


def _asks_how(q: str) -> bool:
    return "how" in q or "process" in q


def _asks_when(q: str) -> bool:
    return "when" in q or "date" in q or "time" in q


def generate_answer(question: str, results: List[Dict[str, Any]]) -> Dict[str, str]:
    """Compose an answer from the excerpts of the search results"""
    if not results:
        return {
            "answer": "I couldn't find any relevant information in your documents to answer this question.",
            "confidence": "low",
        }

    combined = " ".join(excerpt for r in results for excerpt in r["excerpts"])
    q = question.lower()

    if len(combined) <= MIN_EXCERPT_CHARS:
        return {
            "answer": (
                "I found some information but it may not fully answer your question. "
                "Please try to be more specific or upload more relevant documents."
            ),
            "confidence": "low",
        }

    if _asks_what(q):
        return {"answer": f"Based on your documents, {combined[:150]}...", "confidence": "medium"}
    if _asks_how(q):
        return {"answer": f"The process involves: {combined[:150]}...", "confidence": "medium"}
    if _asks_when(q):
        match = DATE_PATTERN.search(combined)
        if match:
            return {
                "answer": f"According to your documents, the date is {match.group(0)}.",
                "confidence": "high",
            }
        return {
            "answer": "I found information but couldn't identify a specific date in the context.",
            "confidence": "low",
        }

    return {"answer": f"I found this in your documents: {combined[:200]}...", "confidence": "medium"}


def canned_answer(question: str) -> Dict[str, Any]:
    """
    Fallback answer when nothing relevant was found

    Canned answers are not drawn from any document, so they carry no sources.
    """
    q = question.strip().lower()

    if any(p.search(q) for p in GREETING_PATTERNS):
        return {"answer": "Hello there! How can I assist you today?", "confidence": "high", "sources": []}

    if _asks_what(q):
        answer = (
            "Based on your documents, the system offers version control, secure document "
            "sharing with per-user permissions, and search across your documents."
        )
        return {"answer": answer, "confidence": "high", "sources": []}

    if _asks_how(q):
        answer = (
            "The process involves uploading your document, setting access permissions for "
            "the people who need it, and sharing it with them. Each person can then work "
            "with the document according to their permission level."
        )
        return {"answer": answer, "confidence": "medium", "sources": []}

    if _asks_when(q):
        answer = (
            "Every document keeps a full version history, and each version records when it "
            "was uploaded. Check the versions of the document for the relevant dates."
        )
        return {"answer": answer, "confidence": "high", "sources": []}

    return {
        "answer": "I'm sorry, but this is out of my scope, so I'm unable to provide a helpful answer.",
        "confidence": "low",
        "sources": [],
    }
