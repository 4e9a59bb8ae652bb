"""Small FastAPI application used as the system under test.

Routes update and delete users either directly, through a form object or
through a service object, so functional tests can exercise the harness the
way an application's controller-level tests would.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel
from sqlalchemy import Column, Integer, String
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base

from recordcheck.db.base import session_scope

Base = declarative_base()


class User(Base):  # type: ignore[valid-type]
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    kind = Column(String, nullable=False, default="user")
    name = Column(String, nullable=True)
    age = Column(Integer, nullable=True)
    email = Column(String, nullable=True)

    __mapper_args__ = {"polymorphic_on": kind, "polymorphic_identity": "user"}


class Admin(User):
    __mapper_args__ = {"polymorphic_identity": "admin"}


class UserForm:
    def __init__(self, session: Session, user: User, attributes: Dict[str, Any]) -> None:
        self.session = session
        self.user = user
        self.attributes = attributes

    def _apply(self, attributes: Dict[str, Any]) -> User:
        for key, value in attributes.items():
            setattr(self.user, key, value)
        self.session.commit()
        return self.user

    def execute(self) -> User:
        return self._apply(self.attributes)

    def save(self) -> User:
        # Same effect, different entry point name
        return self._apply(self.attributes)

    def update_age(self) -> User:
        return self._apply({k: v for k, v in self.attributes.items() if k == "age"})

    def update_name(self) -> User:
        return self._apply({k: v for k, v in self.attributes.items() if k == "name"})


class UserDestroyer:
    @classmethod
    def call(cls, session: Session, user_id: int) -> bool:
        user = session.get(User, user_id)
        if user is None:
            return False
        session.delete(user)
        session.commit()
        return True


class UserArchiver:
    @staticmethod
    def call(session: Session, user_id: int) -> bool:
        # Looks like a destroy service but keeps the row
        return session.get(User, user_id) is not None


class UserPayload(BaseModel):
    name: Optional[str] = None
    age: Optional[int] = None
    email: Optional[str] = None


def create_app(engine: Engine) -> FastAPI:
    app = FastAPI()

    async def get_session():
        with session_scope(engine) as session:
            yield session

    def _load(session: Session, user_id: int) -> User:
        user = session.get(User, user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="user not found")
        return user

    def _payload(body: UserPayload) -> Dict[str, Any]:
        return body.model_dump(exclude_unset=True)

    @app.post("/users/{user_id}")
    async def update_directly(user_id: int, body: UserPayload, session: Session = Depends(get_session)):
        user = _load(session, user_id)
        for key, value in _payload(body).items():
            setattr(user, key, value)
        session.commit()
        return {"id": user.id}

    @app.post("/users/{user_id}/form")
    async def update_with_form(user_id: int, body: UserPayload, session: Session = Depends(get_session)):
        UserForm(session, _load(session, user_id), _payload(body)).execute()
        return {"id": user_id}

    @app.post("/users/{user_id}/form/save")
    async def save_with_form(user_id: int, body: UserPayload, session: Session = Depends(get_session)):
        UserForm(session, _load(session, user_id), _payload(body)).save()
        return {"id": user_id}

    @app.post("/users/{user_id}/form/steps")
    async def update_with_form_steps(user_id: int, body: UserPayload, session: Session = Depends(get_session)):
        form = UserForm(session, _load(session, user_id), _payload(body))
        form.update_age()
        form.update_name()
        return {"id": user_id}

    @app.post("/users/{user_id}/split")
    async def update_name_with_form_age_directly(
        user_id: int, body: UserPayload, session: Session = Depends(get_session)
    ):
        payload = _payload(body)
        user = _load(session, user_id)
        UserForm(session, user, {k: v for k, v in payload.items() if k == "name"}).execute()
        user.age = payload.get("age")
        session.commit()
        return {"id": user_id}

    @app.delete("/users/{user_id}")
    async def destroy_directly(user_id: int, session: Session = Depends(get_session)):
        session.delete(_load(session, user_id))
        session.commit()
        return {"deleted": user_id}

    @app.delete("/users/{user_id}/service")
    async def destroy_with_service(user_id: int, session: Session = Depends(get_session)):
        return {"deleted": UserDestroyer.call(session, user_id)}

    @app.delete("/users/{user_id}/archive")
    async def archive_with_service(user_id: int, session: Session = Depends(get_session)):
        return {"archived": UserArchiver.call(session, user_id)}

    @app.post("/users/{user_id}/noop")
    async def noop(user_id: int):
        return {"id": user_id}

    return app


__all__ = ["Base", "User", "Admin", "UserForm", "UserDestroyer", "UserArchiver", "create_app"]
