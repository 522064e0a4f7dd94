from decimal import Decimal
from types import SimpleNamespace

import pytest

from tablebook.app import create_app
from tablebook.auth import issue_token
from tablebook.extensions import db
from tablebook.models import User, Restaurant, Table, Meal


class TestingConfig:
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TOKEN_MAX_AGE = 3600
    LOG_LEVEL = "DEBUG"


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth(app):
    def _auth(user_id: int) -> dict:
        return {"Authorization": f"Bearer {issue_token(user_id)}"}
    return _auth


@pytest.fixture
def world(app):
    """
    Two restaurants: the Bistro (owned by `owner`) with two tables and a meal,
    and the Diner (owned by `bob`) with one table and a meal.
    `alice` owns nothing and only books.
    """
    owner = User(name="Olivia Owner", email="owner@example.com")
    alice = User(name="Alice", email="alice@example.com")
    bob = User(name="Bob", email="bob@example.com")
    db.session.add_all([owner, alice, bob])
    db.session.flush()

    bistro = Restaurant(name="Bistro", address="1 Main Street", owned_by=owner.id)
    diner = Restaurant(name="Diner", address="2 Side Street", owned_by=bob.id)
    db.session.add_all([bistro, diner])
    db.session.flush()

    window = Table(restaurant_id=bistro.id, table_number=1, capacity=4)
    corner = Table(restaurant_id=bistro.id, table_number=2, capacity=2)
    booth = Table(restaurant_id=diner.id, table_number=1, capacity=2)
    risotto = Meal(restaurant_id=bistro.id, name="Risotto", price=Decimal("21.50"))
    burger = Meal(restaurant_id=diner.id, name="Burger", price=Decimal("12.00"))
    db.session.add_all([window, corner, booth, risotto, burger])
    db.session.commit()

    return SimpleNamespace(
        owner=owner.id,
        alice=alice.id,
        bob=bob.id,
        bistro=bistro.id,
        diner=diner.id,
        window=window.id,
        corner=corner.id,
        booth=booth.id,
        risotto=risotto.id,
        burger=burger.id,
    )


@pytest.fixture
def book(client, auth, world):
    """Creates a reservation at the Bistro through the API and returns the response."""
    def _book(user_id, table_id=None, date="2024-06-01", time="19:00", **extra):
        body = {
            "tableId": table_id or world.window,
            "restaurantId": world.bistro,
            "date": date,
            "time": time,
        }
        body.update(extra)
        return client.post("/api/reservations/create", json=body, headers=auth(user_id))
    return _book
