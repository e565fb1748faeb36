class NewsdeskError(Exception):
    pass


class ValidationError(NewsdeskError):
    pass


class DatabaseError(NewsdeskError):
    pass


class ExternalServiceError(NewsdeskError):
    pass


class NewsSourceError(ExternalServiceError):
    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(message)


class ImageMirrorError(ExternalServiceError):
    pass
