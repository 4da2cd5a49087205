"""Instructions and responses handed back to the dispatch layer."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class TransferMsg:
    """Instruction to send `amount` of `token` to `recipient`."""
    token: str
    recipient: str
    amount: int


@dataclass
class Response:
    """Outcome of an execute operation."""
    messages: List[TransferMsg] = field(default_factory=list)
    attributes: List[Tuple[str, str]] = field(default_factory=list)

    def add_message(self, message: Optional[TransferMsg]) -> 'Response':
        """Append a transfer instruction; None is ignored."""
        if message is not None:
            self.messages.append(message)
        return self

    def add_attribute(self, key: str, value) -> 'Response':
        self.attributes.append((key, str(value)))
        return self

    def attribute(self, key: str):
        """Value of the first attribute named key, or None."""
        for name, value in self.attributes:
            if name == key:
                return value
        return None
