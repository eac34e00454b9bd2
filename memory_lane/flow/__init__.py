"""Game flow: the phase sequencer and the answer scoring rule it enforces."""

from .orchestrator import FlowStatus, GameFlow  # noqa: F401
from .scoring import apply_answer, is_correct_answer  # noqa: F401
