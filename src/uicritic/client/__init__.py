"""Client side of the critic: intake, session state and concurrent analysis."""

from .api import CriticAPIClient, CriticAPIError
from .contrast import ContrastResult, evaluate_contrast
from .fanout import run_analysis
from .intake import ImageIntake, IntakeError, IntakeResult, SelectedFile
from .session import (
    AnalysisBoard,
    AnalysisSession,
    AnalysisSlot,
    SlotFailed,
    SlotResolved,
    SlotStatus,
    Ticket,
)

__all__ = [
    "AnalysisBoard",
    "AnalysisSession",
    "AnalysisSlot",
    "ContrastResult",
    "CriticAPIClient",
    "CriticAPIError",
    "ImageIntake",
    "IntakeError",
    "IntakeResult",
    "SelectedFile",
    "SlotFailed",
    "SlotResolved",
    "SlotStatus",
    "Ticket",
    "evaluate_contrast",
    "run_analysis",
]
