from fastapi import HTTPException, status


class NotFoundException(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ExerciseNotFoundException(NotFoundException):
    def __init__(self, exercise_id: int):
        super().__init__(detail=f"Exercise {exercise_id} not found")


class CircuitNotFoundException(NotFoundException):
    def __init__(self, circuit_id: int):
        super().__init__(detail=f"Circuit {circuit_id} not found")


class TemplateNotFoundException(NotFoundException):
    def __init__(self, template_id: int):
        super().__init__(detail=f"Template {template_id} not found")


class ScheduleNotFoundException(NotFoundException):
    def __init__(self, schedule_id: int):
        super().__init__(detail=f"Schedule item {schedule_id} not found")


class SessionNotFoundException(NotFoundException):
    def __init__(self, session_id: int):
        super().__init__(detail=f"Session {session_id} not found")


class BadRequestException(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class SystemRowReadOnlyException(BadRequestException):
    def __init__(self, kind: str):
        super().__init__(detail=f"System {kind}s are read-only; copy it to customise")


class UnauthorizedException(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ConflictException(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ActiveSessionExistsException(ConflictException):
    def __init__(self, session_id: int):
        super().__init__(detail=f"Session {session_id} is still active; end it first")
