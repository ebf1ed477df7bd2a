"""Documents - Confirmation rendering and delivery collaborators."""

from coursereg.documents.exceptions import DeliveryError, DocumentError, RenderError
from coursereg.documents.mailer import EmailDelivery
from coursereg.documents.renderer import ConfirmationRenderer

__all__ = [
    "ConfirmationRenderer",
    "DeliveryError",
    "DocumentError",
    "EmailDelivery",
    "RenderError",
]
