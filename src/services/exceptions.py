from typing import List, Optional


class PanelError(Exception):
    """Base class for permission layer errors. ``status_code`` is used by the API handlers."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RoleNotFound(PanelError):
    status_code = 404

    def __init__(self, role: str):
        super().__init__(f"Role not found: {role}")
        self.role = role


class PermissionValidationError(PanelError):
    """Malformed permission set on write. The stored value is left untouched."""
    status_code = 400

    def __init__(self, problems: List[str]):
        super().__init__("Invalid permission set: " + "; ".join(problems))
        self.problems = problems


class InvalidArgument(PanelError):
    """A check referenced a module or action that is not registered."""
    status_code = 400


class TransportError(PanelError):
    status_code = 503

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class PermissionStorageError(TransportError):
    pass


class RoleChangeForbidden(PanelError):
    """Delete or rename refused by a safeguard (built-in role, own role, reserved name)."""
    status_code = 409
