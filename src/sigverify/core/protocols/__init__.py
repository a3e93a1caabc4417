"""Protocols decoupling core services from presentation."""

from sigverify.core.protocols.presenter import NullPresenter, Presenter
from sigverify.core.protocols.progress import (
    ProgressCallback,
    ProgressTracker,
    ProgressType,
)

__all__ = [
    "NullPresenter",
    "Presenter",
    "ProgressCallback",
    "ProgressTracker",
    "ProgressType",
]
