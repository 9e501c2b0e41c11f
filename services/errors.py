"""
Domain errors raised by the services and translated to JSON by the routers
"""


class ServiceError(Exception):
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str = None):
        super().__init__(message or self.error)
        self.message = message or self.error


class BadRequestError(ServiceError):
    status_code = 400
    error = "Invalid request"


class NotFoundError(ServiceError):
    status_code = 404
    error = "Not found"
