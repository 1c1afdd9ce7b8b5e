"""
LaserZone Hub - Service Errors
Exceptions raised by services and turned into JSON responses by the app
"""


class ServiceError(Exception):
    """Business-rule violation; message is shown to the user as-is"""
    status_code = 400

    def __init__(self, message: str, status_code: int = None, payload: dict = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}

    def to_dict(self) -> dict:
        data = dict(self.payload)
        data['error'] = self.message
        return data


class NotFoundError(ServiceError):
    status_code = 404


class ForbiddenError(ServiceError):
    status_code = 403
