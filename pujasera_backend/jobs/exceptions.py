# jobs/exceptions.py

"""
JOB ERRORS

Failure taxonomy shared by the queue processor and the domain services it
drives. Domain modules subclass these so the processor can map any failure
to a terminal status with a human-readable message.
"""


class JobError(Exception):
    """Base exception for every job failure."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__

    def __str__(self):
        return self.message


class JobValidationError(JobError):
    """Malformed or incomplete payload. Terminal, never retried."""


class NotFound(JobError):
    """A referenced store, tenant, product, customer or table is absent."""


class InsufficientBalance(JobError):
    """A token debit would drive a store balance negative."""


class GatewayError(JobError):
    """The messaging provider returned an error or a non-2xx response."""


class CompensationFailure(JobError):
    """A best-effort rollback failed. Logged only, never re-raised."""


class RegistrationError(JobError):
    """Registration aborted after its identity was compensated."""


def format_serializer_errors(errors) -> str:
    """Flatten DRF serializer errors into one readable line."""
    if isinstance(errors, dict):
        parts = []
        for field, detail in errors.items():
            text = format_serializer_errors(detail)
            parts.append(text if field == "non_field_errors" else f"{field}: {text}")
        return "; ".join(parts)
    if isinstance(errors, (list, tuple)):
        return ", ".join(format_serializer_errors(e) for e in errors if e)
    return str(errors)
