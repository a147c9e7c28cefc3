"""modules/observability: structured JSONL performance logging."""

from smart_itinerary.modules.observability.logger import StructuredLogger

__all__ = ["StructuredLogger"]
