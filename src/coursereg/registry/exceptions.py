"""Custom exceptions for the Registry."""


class RegistryError(Exception):
    """Base exception for Registry errors."""


class CourseNotFoundError(RegistryError):
    """Course with given ID does not exist."""


class CourseExistsError(RegistryError):
    """Course with given ID already exists."""


class RegistrationNotFoundError(RegistryError):
    """Registration with given ID does not exist."""


class InvalidCourseDatesError(RegistryError):
    """A course update would leave a date range ending before it starts."""
