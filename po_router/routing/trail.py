import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class DecisionTrail:
    """Ordered, human-readable record of how a routing decision was reached."""

    entries: list[str] = field(default_factory=list)

    def record(self, message: str) -> None:
        self.entries.append(message)
        logger.debug(message, extra={"event": "routing_trail_entry"})

    def warn(self, message: str) -> None:
        self.record(f"WARNING: {message}")


def format_prefix_evidence(line_number: str, page_number: int, part_number: str, prefix: str) -> str:
    return "\n".join(
        [
            f"Line: {line_number or 'N/A'}",
            f"Page: {page_number}",
            f"Part: {part_number or 'N/A'}",
            f"Prefix: [{prefix}]",
        ]
    )
