import pytest
from flask import Flask

from sketchparty.profiles import ProfileStore, db


@pytest.fixture()
def profile_store():
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    db.init_app(app)
    with app.app_context():
        db.create_all()
    yield ProfileStore(app, starting_coins=100)
    with app.app_context():
        db.drop_all()


def test_find_or_create_gives_starting_coins(profile_store):
    created = profile_store.find_or_create("pi-1", "alice")
    again = profile_store.find_or_create("pi-1", "alice")

    assert created == {"uid": "pi-1", "username": "alice", "coins": 100, "xp": 0}
    assert again == created


def test_find_or_create_updates_username(profile_store):
    profile_store.find_or_create("pi-1", "alice")

    renamed = profile_store.find_or_create("pi-1", "alicia")

    assert renamed["username"] == "alicia"
    assert profile_store.get("pi-1")["username"] == "alicia"


def test_credit_increments_balances(profile_store):
    profile_store.find_or_create("pi-1", "alice")

    profile_store.credit("pi-1", 60, 300)
    updated = profile_store.credit("pi-1", 5, 100)

    assert updated["coins"] == 165
    assert updated["xp"] == 400


def test_credit_unknown_profile(profile_store):
    assert profile_store.credit("nobody", 10, 10) is None
    assert profile_store.get("nobody") is None
