"""Custom exceptions for document rendering and delivery."""


class DocumentError(Exception):
    """Base exception for document errors."""


class RenderError(DocumentError):
    """Error rendering a confirmation document."""


class DeliveryError(DocumentError):
    """Error delivering a document to its recipient."""
