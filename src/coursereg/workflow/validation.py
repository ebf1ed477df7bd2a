"""Per-step validation of a registration draft."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from coursereg.workflow.exceptions import DraftValidationError
from coursereg.workflow.models import CONTACT_FIELDS, PERSONAL_FIELDS, WorkflowStep

if TYPE_CHECKING:
    from coursereg.workflow.models import RegistrationDraft

INCOMPLETE_PERSONAL = "Please fill in all personal information"
INCOMPLETE_CONTACT = "Please fill in all contact information"
INVALID_EMAIL = "Invalid email format"
MISSING_DOCUMENTS = "Please attach the required documents"

# local@domain.tld: no whitespace, exactly one "@", a "." somewhere after it
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    """Check an address against the basic ``local@domain.tld`` shape."""
    return EMAIL_PATTERN.match(email) is not None


def _missing(draft: RegistrationDraft, names: tuple[str, ...]) -> list[str]:
    return [name for name in names if not getattr(draft, name).strip()]


def validate_personal(draft: RegistrationDraft) -> None:
    """Step 1: every personal field is filled in."""
    if _missing(draft, PERSONAL_FIELDS):
        raise DraftValidationError(WorkflowStep.PERSONAL, INCOMPLETE_PERSONAL)


def validate_contact(draft: RegistrationDraft) -> None:
    """Step 2: every contact field is filled in and the e-mail looks valid."""
    if _missing(draft, CONTACT_FIELDS):
        raise DraftValidationError(WorkflowStep.CONTACT, INCOMPLETE_CONTACT)
    if not is_valid_email(draft.email.strip()):
        raise DraftValidationError(WorkflowStep.CONTACT, INVALID_EMAIL)


def validate_documents(draft: RegistrationDraft) -> None:
    """Step 3: at least one attachment was accepted."""
    if not draft.attachments:
        raise DraftValidationError(WorkflowStep.DOCUMENTS, MISSING_DOCUMENTS)


_VALIDATORS = {
    WorkflowStep.PERSONAL: validate_personal,
    WorkflowStep.CONTACT: validate_contact,
    WorkflowStep.DOCUMENTS: validate_documents,
}


def validate_step(step: WorkflowStep, draft: RegistrationDraft) -> None:
    """Validate the draft for one editing step.

    Raises:
        DraftValidationError: If the step's rule is not met.
        ValueError: If ``step`` is not an editing step.
    """
    try:
        validator = _VALIDATORS[step]
    except KeyError:
        raise ValueError(f"Step {step} has no input to validate") from None
    validator(draft)


def validate_draft(draft: RegistrationDraft) -> None:
    """Validate every editing step in order.

    Raises:
        DraftValidationError: For the first step whose rule is not met.
    """
    for validator in _VALIDATORS.values():
        validator(draft)
