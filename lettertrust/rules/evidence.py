from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Pattern

from lettertrust.models.clinical import SourceAnchor
from lettertrust.models.sources import LetterSources


def _flatten_values(data: Any) -> Iterable[str]:
    """Yield every scalar value of a nested extraction payload as text."""
    if data is None:
        return
    if isinstance(data, dict):
        for value in data.values():
            yield from _flatten_values(value)
    elif isinstance(data, (list, tuple, set)):
        for item in data:
            yield from _flatten_values(item)
    else:
        yield str(data)


@dataclass(frozen=True)
class SourceEvidence:
    """
    Everything a rule may consult, precomputed once per scan.

    segments holds each source text lower-cased. Matching is done per segment
    so a phrase can never be "found" across the join of two unrelated sources.
    """
    segments: List[str] = field(default_factory=list)
    anchors: List[SourceAnchor] = field(default_factory=list)

    @classmethod
    def from_sources(
        cls,
        sources: Optional[LetterSources],
        anchors: Optional[List[SourceAnchor]] = None,
    ) -> "SourceEvidence":
        segments: List[str] = []

        if sources is not None:
            transcript = sources.transcript
            if transcript is not None:
                segments.append(transcript.text or "")
                for speaker in transcript.speakers or []:
                    segments.append(speaker.text or "")

            if sources.user_input is not None:
                segments.append(sources.user_input.text or "")

            for doc in sources.documents or []:
                segments.extend(_flatten_values(doc.extracted_data))
                if doc.raw_text:
                    segments.append(doc.raw_text)

        return cls(
            segments=[s.lower() for s in segments if s],
            anchors=list(anchors or []),
        )

    @property
    def corpus(self) -> str:
        return "\n".join(self.segments)

    def contains(self, text: str) -> bool:
        needle = (text or "").strip().lower()
        if not needle:
            return False
        return any(needle in segment for segment in self.segments)

    def matches(self, pattern: Pattern) -> bool:
        return any(pattern.search(segment) for segment in self.segments)

    def anchor_near(self, index: int, window: int) -> bool:
        return any(abs(a.start_index - index) < window for a in self.anchors)

    def anchors_near(self, index: int, window: int) -> List[SourceAnchor]:
        return [a for a in self.anchors if abs(a.start_index - index) < window]

    def anchor_covers(self, start: int, end: int) -> bool:
        return any(a.start_index <= start and end <= a.end_index for a in self.anchors)
