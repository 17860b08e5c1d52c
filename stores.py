# User and content persistence, built around an explicit session
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from auth import hash_credential, check_credential
from errors import Conflict
from models import User, Content

logger = logging.getLogger(__name__)


def contains_pattern(term):
    """LIKE pattern matching ``term`` literally anywhere in a column."""
    escaped = term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f'%{escaped}%'


class UserStore:
    def __init__(self, session):
        self.session = session

    def get(self, user_id):
        return self.session.get(User, user_id)

    def by_username(self, username):
        return self.session.query(User).filter_by(username=username).first()

    def exists(self, username, email):
        return self.session.query(User.user_id).filter(
            or_(User.username == username, User.email == email)
        ).first() is not None

    def create(self, username, email, password):
        if self.exists(username, email):
            raise Conflict('Username or email already exists.')

        user = User(username=username, email=email, password=hash_credential(password))
        try:
            self.session.add(user)
            self.session.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            self.session.rollback()
            raise Conflict('Username or email already exists.')
        logger.info("User registered: %s", username)
        return user

    def authenticate(self, username, password):
        user = self.by_username(username)
        if user and check_credential(user.password, password):
            return user
        return None

    def search(self, term):
        return self.session.query(User)\
            .filter(User.username.ilike(contains_pattern(term), escape='\\'))\
            .order_by(User.username)\
            .all()


class ContentStore:
    def __init__(self, session):
        self.session = session

    def create(self, author, title, text, image_path=None, artist_name=None):
        content = Content(
            user_id=author.user_id,
            username=author.username,
            title=title,
            text=text,
            image_path=image_path,
            artist_name=artist_name
        )
        self.session.add(content)
        self.session.commit()
        logger.info("Content posted successfully by: %s", author.username)
        return content

    def by_author(self, user_id):
        return self.session.query(Content)\
            .filter_by(user_id=user_id)\
            .order_by(Content.timestamp.desc(), Content.content_id.desc())\
            .all()

    def search(self, term):
        pattern = contains_pattern(term)
        return self.session.query(Content)\
            .filter(or_(Content.title.ilike(pattern, escape='\\'),
                        Content.text.ilike(pattern, escape='\\')))\
            .order_by(Content.timestamp.desc())\
            .all()
