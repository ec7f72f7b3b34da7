"""Term index mapping words, bigrams and facets to exported document ids."""

import re
from typing import Any

STOP_WORDS = frozenset(
    """
    a an the and or but is are was were be been being in on at to for with by
    about against between into through during before after above below from up
    down of off over under again further then once here there when where why how
    all any both each few more most other some such no nor not only own same so
    than too very s t can will just don should now
    """.split()
)

_NON_WORD_RE = re.compile(r"[^\w\s]")


def tokenize(text: str) -> list[str]:
    """Lowercased words longer than two characters, stop words removed."""
    words = _NON_WORD_RE.sub(" ", text.lower()).split()
    return [w for w in words if len(w) > 2 and w not in STOP_WORDS]


def _names(values: Any) -> list[str]:
    names = []
    for value in values or []:
        if isinstance(value, dict):
            value = value.get("name")
        if isinstance(value, str):
            names.append(value)
    return names


def build_search_index(records: list[dict[str, Any]]) -> dict[str, list[Any]]:
    """Build the term index over exported document records.

    Indexed text: title, summary, categories, impact areas and university
    impact area names. Facet terms: ``president:<name>``, ``impact:<level>``
    and ``year:<yyyy>``.
    """
    index: dict[str, list[Any]] = {}

    def add(term: str, doc_id: Any) -> None:
        ids = index.setdefault(term, [])
        if doc_id not in ids:
            ids.append(doc_id)

    for record in records:
        doc_id = record.get("id")
        text = " ".join(
            [
                record.get("title") or "",
                record.get("summary") or "",
                " ".join(_names(record.get("categories"))),
                " ".join(_names(record.get("impact_areas"))),
                " ".join(_names(record.get("university_impact_areas"))),
            ]
        )
        words = tokenize(text)

        for word in dict.fromkeys(words):
            add(word, doc_id)
        for first, second in zip(words, words[1:]):
            add(f"{first} {second}", doc_id)

        if record.get("president"):
            add(f"president:{str(record['president']).lower()}", doc_id)
        if record.get("impact_level"):
            add(f"impact:{str(record['impact_level']).lower()}", doc_id)
        signing_date = record.get("signing_date")
        if isinstance(signing_date, str) and len(signing_date) >= 4:
            add(f"year:{signing_date[:4]}", doc_id)

    return index
