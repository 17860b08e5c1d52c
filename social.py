# Follow graph and feed composition
import logging

from sqlalchemy.exc import IntegrityError

from errors import Conflict, InvalidOperation, NotFound
from models import User, Content, Follow
from stores import UserStore

logger = logging.getLogger(__name__)


class SocialGraph:
    """Follow relations stored as one directed edge per pair.

    ``following`` and ``followers`` are both derived from the same edge rows,
    so ``B in A.following`` holds exactly when ``A in B.followers``.
    """

    def __init__(self, session):
        self.session = session
        self.users = UserStore(session)

    def _edge(self, actor, target):
        return self.session.query(Follow).filter_by(
            follower_user_id=actor.user_id,
            followed_user_id=target.user_id
        ).first()

    def _target(self, username):
        target = self.users.by_username(username)
        if not target:
            raise NotFound('User not found.')
        return target

    def is_following(self, actor, target):
        return self._edge(actor, target) is not None

    def follow(self, actor, target_username):
        target = self._target(target_username)

        if target.user_id == actor.user_id:
            raise InvalidOperation('You cannot follow yourself.')

        if self.is_following(actor, target):
            raise Conflict('Already following this user.')

        try:
            self.session.add(Follow(follower_user_id=actor.user_id, followed_user_id=target.user_id))
            self.session.commit()
        except IntegrityError:
            # A concurrent follow of the same pair got there first
            self.session.rollback()
            raise Conflict('Already following this user.')

        logger.info("%s is now following %s", actor.username, target.username)
        return target

    def unfollow(self, actor, target_username):
        target = self._target(target_username)

        edge = self._edge(actor, target)
        if edge is None:
            raise InvalidOperation('You are not following this user.')

        self.session.delete(edge)
        self.session.commit()

        logger.info("%s unfollowed %s", actor.username, target.username)
        return target

    def following(self, user):
        return self.session.query(User)\
            .join(Follow, User.user_id == Follow.followed_user_id)\
            .filter(Follow.follower_user_id == user.user_id)\
            .order_by(User.username)\
            .all()

    def followers(self, user):
        return self.session.query(User)\
            .join(Follow, User.user_id == Follow.follower_user_id)\
            .filter(Follow.followed_user_id == user.user_id)\
            .order_by(User.username)\
            .all()


def compose_feed(session, viewer):
    """Content from every user ``viewer`` follows, most recent first.

    Authors are matched by user id rather than the username copied onto each
    content row. Returns an empty list when the viewer follows nobody.
    """
    followed_ids = [user_id for (user_id,) in session.query(Follow.followed_user_id)
                    .filter(Follow.follower_user_id == viewer.user_id)]
    if not followed_ids:
        return []

    return session.query(Content)\
        .filter(Content.user_id.in_(followed_ids))\
        .order_by(Content.timestamp.desc(), Content.content_id.desc())\
        .all()
