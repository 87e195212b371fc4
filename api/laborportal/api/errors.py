from typing import NoReturn

from fastapi import HTTPException, status

from laborportal.services.outcome import ErrorKind, Outcome

KIND_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.AUTHORIZATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BACKEND: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def raise_for_outcome(outcome: Outcome) -> NoReturn:
    status_code = KIND_STATUS.get(outcome.kind, status.HTTP_400_BAD_REQUEST)
    raise HTTPException(status_code=status_code, detail=outcome.error or "request failed")
