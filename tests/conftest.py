from __future__ import annotations

from typing import Callable, Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient

from app import create_app
from models import db

PASSWORD = "secret-password"


@pytest.fixture()
def app(tmp_path) -> Generator[Flask, None, None]:
    app = create_app("testing", {
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "BCRYPT_LOG_ROUNDS": 4,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture()
def session(app: Flask):
    """Database session bound to an application context."""
    with app.app_context():
        yield db.session


@pytest.fixture()
def register(app: Flask) -> Callable:
    def _register(username: str, password: str = PASSWORD):
        return app.test_client().post("/users", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
        })
    return _register


@pytest.fixture()
def logged_in(app: Flask, register: Callable) -> Callable[[str], FlaskClient]:
    """Register ``username`` and return a test client holding its session cookie."""
    def _logged_in(username: str) -> FlaskClient:
        register(username)
        user_client = app.test_client()
        response = user_client.post("/login", json={"username": username, "password": PASSWORD})
        assert response.status_code == 200
        return user_client
    return _logged_in
