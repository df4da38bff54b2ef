from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class DashboardError(Exception):
    """Base class for every recoverable failure the dashboard core reports.

    Each subclass carries a stable ``code`` and the HTTP status the
    presentation layer should use. The core either raises these (aggregation,
    record store) or hands them back inside an :class:`Outcome` (policy,
    session controller, authenticator).
    """

    code = "error"
    http_status = 400
    default_message = "The request could not be completed."

    def __init__(self, message: Optional[str] = None, **details: Any) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = {k: _plain(v) for k, v in self.details.items()}
        return payload


def _plain(value: Any) -> Any:
    # Enum members serialise as their value
    return getattr(value, "value", value)


# --------------------------
# Authentication
# --------------------------
class AuthError(DashboardError):
    code = "auth_error"
    http_status = 401


class InvalidCredentials(AuthError):
    code = "invalid_credentials"
    default_message = "Incorrect username or password."


class MissingFields(AuthError):
    code = "missing_fields"
    http_status = 400
    default_message = "Please fill in all fields."


class LoginInProgress(AuthError):
    code = "login_pending"
    http_status = 409
    default_message = "A login attempt is already in progress."


class NotAuthenticated(AuthError):
    code = "not_authenticated"
    default_message = "Sign in to continue."


# --------------------------
# Authorization
# --------------------------
class AuthorizationError(DashboardError):
    code = "authorization_error"
    http_status = 403


class Denied(AuthorizationError):
    code = "denied"

    def __init__(self, role, view, action=None, message: Optional[str] = None) -> None:
        self.role = role
        self.view = view
        self.action = action
        if message is None:
            target = f"'{_plain(action)}' on '{_plain(view)}'" if action else f"'{_plain(view)}'"
            message = f"Role '{_plain(role)}' is not allowed to access {target}."
        details = {"role": role, "view": view}
        if action is not None:
            details["action"] = action
        super().__init__(message, **details)


# --------------------------
# Aggregation
# --------------------------
class AggregationError(DashboardError):
    code = "aggregation_error"
    http_status = 422


class NoData(AggregationError):
    code = "no_data"
    default_message = "There is no data to aggregate."


# --------------------------
# Validation
# --------------------------
class ValidationError(DashboardError):
    code = "validation_error"


class MissingRequiredParam(ValidationError):
    code = "missing_required_param"

    def __init__(self, param: str, message: Optional[str] = None) -> None:
        self.param = param
        super().__init__(message or f"Missing required parameter '{param}'.", param=param)


class InvalidValue(ValidationError):
    code = "invalid_value"

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message or f"Invalid value for '{field}'.", field=field)


class RecordNotFound(DashboardError):
    code = "not_found"
    http_status = 404

    def __init__(self, kind: str, record_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"No {kind} with id '{record_id}'.", kind=kind, id=record_id)


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or a typed failure; never both."""

    value: Optional[T] = None
    error: Optional[DashboardError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: DashboardError) -> "Outcome[T]":
        return cls(error=error)

    def unwrap(self) -> Optional[T]:
        if self.error is not None:
            raise self.error
        return self.value
