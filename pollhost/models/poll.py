"""Poll domain model."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PollOption:
    """One answer option and the people who picked it."""

    label: str
    text: str
    voters: tuple[str, ...] = ()

    @property
    def vote_count(self) -> int:
        # Length of the voters list, duplicates included.
        return len(self.voters)

    @classmethod
    def from_doc(cls, doc: dict) -> PollOption:
        return cls(
            label=doc.get("label", ""),
            text=doc.get("text", ""),
            voters=tuple(doc.get("voters") or []),
        )


@dataclass(frozen=True)
class PollSnapshot:
    """Point-in-time read of the poll question and its tallies."""

    question: str
    options: dict[str, PollOption] = field(default_factory=dict)
    id: str | None = None

    @property
    def total_votes(self) -> int:
        return sum(opt.vote_count for opt in self.options.values())

    def summary_text(self) -> str:
        """Render a human-readable summary for prompts and the CLI."""
        lines = [f"Question: {self.question}"]
        for opt in self.options.values():
            lines.append(f"{opt.label} - {opt.text}: {opt.vote_count} votes")
        return "\n".join(lines) + "\n"

    @classmethod
    def from_doc(cls, doc: dict) -> PollSnapshot:
        """Deserialize from MongoDB document."""
        options_raw = doc.get("options") or {}
        return cls(
            id=str(doc["_id"]) if "_id" in doc else None,
            question=doc.get("question", ""),
            options={key: PollOption.from_doc(opt) for key, opt in options_raw.items()},
        )
