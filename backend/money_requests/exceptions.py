"""
Workflow errors raised by the services layer.

Each error carries the HTTP status code the API answers with; the FastAPI app
registers a single handler for WorkflowError (see main.py).
"""


class WorkflowError(Exception):
    """Base class for money request workflow errors"""
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class NoTemplateFound(WorkflowError):
    """No approval template covers this department and amount"""
    status_code = 422


class NotAuthorizedToDecide(WorkflowError):
    """User may not decide this approval step"""
    status_code = 403


class NotAuthorized(WorkflowError):
    """User may not perform this action"""
    status_code = 403


class StepAlreadyDecided(WorkflowError):
    """Approval step has already been decided"""
    status_code = 409


class InvalidTransition(WorkflowError):
    """Request status does not allow this action"""
    status_code = 409


class InvalidAmount(WorkflowError):
    """Amount must be a positive number"""
    status_code = 422


class InvalidPurpose(WorkflowError):
    """Purpose must not be empty"""
    status_code = 422


class InvalidTemplate(WorkflowError):
    """Approval template definition is invalid"""
    status_code = 422


class FundDebitFailed(WorkflowError):
    """Fund balance could not be debited"""
    status_code = 500


class RequestNotFound(WorkflowError):
    """Money request not found"""
    status_code = 404


class StepNotFound(WorkflowError):
    """Approval step not found"""
    status_code = 404


class TemplateNotFound(WorkflowError):
    """Approval template not found"""
    status_code = 404


class ReferenceNotFound(WorkflowError):
    """Referenced department, fund or user not found"""
    status_code = 404


class UnknownUser(WorkflowError):
    """Acting user could not be resolved"""
    status_code = 401
