# Database models
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.dialects import mysql

db = SQLAlchemy()

# Usernames are case-sensitive keys; MySQL's default collation is not
Username = db.String(50).with_variant(mysql.VARCHAR(50, collation='utf8mb4_bin'), 'mysql')
UTCDateTime = db.DateTime(timezone=True)


def utcnow():
    return datetime.now(timezone.utc)


def isoformat_utc(value):
    """ISO 8601 with an explicit UTC offset, also for naive values read back from SQLite."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class User(db.Model):
    __tablename__ = 'Users'
    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(Username, unique=True, nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False)
    # Opaque credential; verbatim unless HASH_PASSWORDS is enabled
    password = db.Column(db.String(255), nullable=False)
    created_at = db.Column(UTCDateTime, default=utcnow)

    contents = db.relationship('Content', backref='author', lazy='dynamic')
    following_edges = db.relationship(
        'Follow', foreign_keys='Follow.follower_user_id', backref='follower', lazy='dynamic')
    follower_edges = db.relationship(
        'Follow', foreign_keys='Follow.followed_user_id', backref='followed', lazy='dynamic')

    @property
    def following(self):
        """Usernames this user follows."""
        return [edge.followed.username for edge in self.following_edges]

    @property
    def followers(self):
        """Usernames following this user."""
        return [edge.follower.username for edge in self.follower_edges]

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "username": self.username,
            "email": self.email,
            "followers": self.followers,
            "following": self.following
        }


class Content(db.Model):
    __tablename__ = 'Contents'
    content_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('Users.user_id'), nullable=False, index=True)
    # Copy of the author's username at post time
    username = db.Column(Username, nullable=False)
    title = db.Column(db.String(200), nullable=False)
    text = db.Column(db.Text, nullable=False)
    artist_name = db.Column(db.String(200))
    image_path = db.Column(db.String(255))
    timestamp = db.Column(UTCDateTime, default=utcnow, nullable=False, index=True)

    def to_dict(self):
        return {
            "content_id": self.content_id,
            "user_id": self.user_id,
            "username": self.username,
            "title": self.title,
            "text": self.text,
            "artist_name": self.artist_name,
            "image_path": self.image_path,
            "timestamp": isoformat_utc(self.timestamp)
        }


class Follow(db.Model):
    """A directed edge: ``follower`` follows ``followed``."""
    __tablename__ = 'Followers'
    __table_args__ = (
        db.UniqueConstraint('follower_user_id', 'followed_user_id', name='uq_follow_pair'),
        db.CheckConstraint('follower_user_id != followed_user_id', name='ck_follow_not_self'),
    )
    follow_id = db.Column(db.Integer, primary_key=True)
    follower_user_id = db.Column(db.Integer, db.ForeignKey('Users.user_id'), nullable=False)
    followed_user_id = db.Column(db.Integer, db.ForeignKey('Users.user_id'), nullable=False)
    created_at = db.Column(UTCDateTime, default=utcnow)


class RevokedToken(db.Model):
    __tablename__ = 'RevokedTokens'
    token_id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(36), unique=True, nullable=False)
    revoked_at = db.Column(UTCDateTime, default=utcnow)
    # Rows past this point can be pruned; the token is rejected as expired anyway
    expires_at = db.Column(UTCDateTime, nullable=False, index=True)
