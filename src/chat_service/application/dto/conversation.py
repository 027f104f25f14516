from __future__ import annotations

from dataclasses import dataclass, field

from chat_service.domain.entities.conversation import Conversation


@dataclass(frozen=True, slots=True)
class ResolvedConversations:
    """Outcome of merging every relationship source for one viewer."""

    conversations: list[Conversation] = field(default_factory=list)
    failed_sources: list[str] = field(default_factory=list)
    attempted_sources: int = 0

    @property
    def complete(self) -> bool:
        return not self.failed_sources

    @property
    def failed(self) -> bool:
        """True when no source could be loaded at all."""
        return self.attempted_sources > 0 and len(self.failed_sources) >= self.attempted_sources

    @property
    def warnings(self) -> list[str]:
        return [f"{name} conversations could not be loaded" for name in self.failed_sources]
