"""
Bulk upload wizard stages and transition rules.
"""

from enum import Enum


class WizardStage(str, Enum):
    """Steps of the bulk upload dialog."""
    TEMPLATE = "template"
    UPLOAD = "upload"
    IMAGES = "images"
    PROGRESS = "progress"


class UploadStatus(str, Enum):
    """Status of the product upload loop."""
    IDLE = "idle"
    UPLOADING = "uploading"
    COMPLETE = "complete"


# Allowed moves; PROGRESS is terminal (only close() leaves it)
WIZARD_TRANSITIONS: dict[WizardStage, frozenset[WizardStage]] = {
    WizardStage.TEMPLATE: frozenset({WizardStage.UPLOAD}),
    WizardStage.UPLOAD: frozenset({WizardStage.IMAGES}),
    WizardStage.IMAGES: frozenset({WizardStage.UPLOAD, WizardStage.PROGRESS}),
    WizardStage.PROGRESS: frozenset(),
}


def is_valid_wizard_transition(current: WizardStage, new: WizardStage) -> bool:
    """
    Check if a wizard step change is allowed.

    Rules:
    - template -> upload
    - upload -> images (after a successful CSV parse)
    - images -> upload (back, discards parsed data)
    - images -> progress (confirm)
    - progress is terminal
    """
    return new in WIZARD_TRANSITIONS[current]
