from dataclasses import dataclass

from laborportal.schemas.sessions import Role, Session


@dataclass(slots=True)
class Principal:
    session_id: str
    session: Session

    @property
    def username(self) -> str:
        return self.session.username

    def require_role(self, role: Role) -> None:
        if self.session.role != role:
            raise PermissionError(f"{role} session required")


def parse_session_header(session_header: str | None) -> str | None:
    if not session_header:
        return None
    return session_header.strip() or None
