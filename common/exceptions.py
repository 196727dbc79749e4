from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler


class WorkflowError(APIException):
    """
    Raised when an action is not allowed in the current state of a row,
    e.g. approving a request that is no longer pending.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This action is not allowed in the current state."
    default_code = "workflow_conflict"


class UploadError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Upload failed."
    default_code = "upload_failed"


def custom_exception_handler(exc, context):
    """
    Attach status code and a machine-friendly error field to responses.
    """
    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(response.data, dict):
            response.data.setdefault("status_code", response.status_code)
            if "detail" in response.data:
                response.data["error"] = str(response.data["detail"])
    return response
