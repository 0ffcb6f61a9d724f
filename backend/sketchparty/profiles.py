from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import StoreUnavailable

logger = logging.getLogger(__name__)

db = SQLAlchemy()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(db.Model):
    __tablename__ = "profile"
    id = db.Column(db.Integer, primary_key=True)
    uid = db.Column(db.String(128), unique=True, nullable=False, index=True)
    username = db.Column(db.String(64), nullable=False)
    coins = db.Column(db.Integer, default=0, nullable=False)
    xp = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            "uid": self.uid,
            "username": self.username,
            "coins": self.coins,
            "xp": self.xp,
        }


class ProfileStore:
    """Persistent coins/xp ledger keyed by external user id.

    Every call opens its own app context so it can run from background tasks.
    Database errors surface as StoreUnavailable.
    """

    def __init__(self, app: Flask, starting_coins: int = 100) -> None:
        self._app = app
        self.starting_coins = starting_coins

    def get(self, uid: str) -> dict | None:
        with self._app.app_context():
            try:
                profile = Profile.query.filter_by(uid=uid).first()
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise StoreUnavailable(str(exc)) from exc
            return profile.to_dict() if profile else None

    def find_or_create(self, uid: str, username: str) -> dict:
        with self._app.app_context():
            try:
                profile = Profile.query.filter_by(uid=uid).first()
                if profile is None:
                    profile = Profile(uid=uid, username=username, coins=self.starting_coins, xp=0)
                    db.session.add(profile)
                    try:
                        db.session.commit()
                    except IntegrityError:
                        # Created concurrently by another connection of the same user.
                        db.session.rollback()
                        profile = Profile.query.filter_by(uid=uid).one()
                    else:
                        logger.info("Created profile for %s (%s)", username, uid)
                elif profile.username != username:
                    profile.username = username
                    db.session.commit()
                return profile.to_dict()
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise StoreUnavailable(str(exc)) from exc

    def credit(self, uid: str, coins_delta: int, xp_delta: int) -> dict | None:
        """Atomically add to a profile's balances. Returns None if the profile does not exist."""
        with self._app.app_context():
            try:
                result = db.session.execute(
                    update(Profile)
                    .where(Profile.uid == uid)
                    .values(
                        coins=Profile.coins + coins_delta,
                        xp=Profile.xp + xp_delta,
                        updated_at=_utcnow(),
                    )
                )
                db.session.commit()
                if result.rowcount == 0:
                    return None
                profile = Profile.query.filter_by(uid=uid).first()
                return profile.to_dict() if profile else None
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise StoreUnavailable(str(exc)) from exc
