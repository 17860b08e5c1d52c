# Routes for handling requests
import logging

from flask import Blueprint, current_app, jsonify, request, send_from_directory
from flask_jwt_extended import (
    create_access_token, get_current_user, get_jwt,
    set_access_cookies, unset_jwt_cookies, verify_jwt_in_request
)
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import SQLAlchemyError

from auth import login_required, revoke_token
from errors import InternalFailure, InvalidInput, NotFound
from forms import ContentForm, LoginForm, RegisterForm, search_term
from models import db
from scraper import fetch_artist_info
from social import SocialGraph, compose_feed
from stores import ContentStore, UserStore
from uploads import save_image

logger = logging.getLogger(__name__)

# Create blueprints for different route categories
main_bp = Blueprint('main', __name__)
auth_bp = Blueprint('auth', __name__)
users_bp = Blueprint('users', __name__)
contents_bp = Blueprint('contents', __name__)
uploads_bp = Blueprint('uploads', __name__)


def internal_failure(message):
    """Roll back and log the active persistence error, hiding its details."""
    db.session.rollback()
    logger.exception(message)
    return InternalFailure(message)


def user_summary(user):
    return {"user_id": user.user_id, "username": user.username}


@main_bp.route('/', methods=['GET'])
def welcome():
    """Health check for the API"""
    return jsonify({"message": "WaveForm server running"}), 200


@main_bp.route('/artist-info', methods=['GET'])
def artist_info():
    artist = (request.args.get('artist') or '').strip()
    if not artist:
        raise InvalidInput('Artist name required')

    info = fetch_artist_info(
        artist,
        current_app.config['ARTIST_INFO_URL'],
        timeout=current_app.config['ARTIST_INFO_TIMEOUT']
    )
    return jsonify(info), 200


@main_bp.route('/upload', methods=['POST'])
@login_required
def upload_image():
    try:
        image_path = save_image(request.files.get('image'), current_app.config['UPLOAD_FOLDER'])
    except OSError:
        logger.exception("Upload error")
        raise InternalFailure('Upload failed.')

    return jsonify({
        "message": "Image uploaded successfully",
        "image_path": image_path
    }), 200


@uploads_bp.route('/uploads/<path:filename>', methods=['GET'])
def uploaded_file(filename):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)


# Authentication Endpoints
@auth_bp.route('/login', methods=['POST'], endpoint='handle_login')
def handle_login():
    """User Login Endpoint"""
    form = LoginForm.from_json(request.get_json(silent=True))

    try:
        user = UserStore(db.session).authenticate(form.username, form.password)
    except SQLAlchemyError:
        raise internal_failure('Internal server error during login.')

    if not user:
        return jsonify({"error": "Invalid credentials"}), 401

    access_token = create_access_token(identity=user)
    response = jsonify({
        "message": "Login successful",
        "access_token": access_token,
        "user_id": user.user_id,
        "username": user.username
    })
    set_access_cookies(response, access_token)
    logger.info("User logged in: %s", user.username)
    return response, 200


@auth_bp.route('/login', methods=['GET'], endpoint='login_status')
def login_status():
    # Stale, revoked or malformed tokens just mean "not logged in" here
    try:
        verify_jwt_in_request(optional=True)
        user = get_current_user()
    except (JWTExtendedException, PyJWTError) as e:
        logger.debug("Ignoring unusable session token: %s", e)
        user = None

    if user is None:
        return jsonify({"logged_in": False}), 200

    return jsonify({
        "logged_in": True,
        "user_id": user.user_id,
        "username": user.username
    }), 200


@auth_bp.route('/login', methods=['DELETE'], endpoint='handle_logout')
@login_required
def handle_logout():
    try:
        revoke_token(get_jwt())
    except SQLAlchemyError:
        raise internal_failure('Could not log out')

    response = jsonify({"message": "Logout successful"})
    unset_jwt_cookies(response)
    return response, 200


@users_bp.route('/users', methods=['POST'])
def handle_register():
    """User Registration Endpoint"""
    form = RegisterForm.from_json(request.get_json(silent=True))

    try:
        UserStore(db.session).create(form.username, form.email, form.password)
    except SQLAlchemyError:
        raise internal_failure('Internal server error during registration.')

    return jsonify({"message": "Registration successful. Please log in."}), 201


@users_bp.route('/users', methods=['GET'])
@login_required
def search_users():
    term = search_term(request.args)

    try:
        users = UserStore(db.session).search(term)
        users_data = [user.to_dict() for user in users]
    except SQLAlchemyError:
        raise internal_failure('Internal server error during search.')

    return jsonify({"users": users_data}), 200


@users_bp.route('/users/<username>/contents', methods=['GET'])
@login_required
def get_user_contents(username):
    try:
        user = UserStore(db.session).by_username(username)
        if not user:
            raise NotFound('User not found.')
        contents = ContentStore(db.session).by_author(user.user_id)
    except SQLAlchemyError:
        raise internal_failure('Failed to fetch user contents.')

    return jsonify({"contents": [content.to_dict() for content in contents]}), 200


@users_bp.route('/follow/<username>', methods=['POST'])
@login_required
def follow_user(username):
    try:
        target = SocialGraph(db.session).follow(get_current_user(), username)
    except SQLAlchemyError:
        raise internal_failure('Internal server error during follow.')

    return jsonify({"message": f"You are now following {target.username}"}), 200


@users_bp.route('/follow/<username>', methods=['DELETE'])
@login_required
def unfollow_user(username):
    try:
        target = SocialGraph(db.session).unfollow(get_current_user(), username)
    except SQLAlchemyError:
        raise internal_failure('Internal server error during unfollow.')

    return jsonify({"message": f"You have unfollowed {target.username}"}), 200


@users_bp.route('/follow/<username>', methods=['GET'])
@login_required
def check_follow_status(username):
    current_user = get_current_user()
    try:
        graph = SocialGraph(db.session)
        target = graph.users.by_username(username)
        if not target:
            raise NotFound('User not found.')
        is_following = graph.is_following(current_user, target)
    except SQLAlchemyError:
        raise internal_failure('Failed to check follow status.')

    return jsonify({"is_following": is_following}), 200


@users_bp.route('/followers', methods=['GET'])
@login_required
def get_followers():
    """Get current user's followers"""
    try:
        followers = SocialGraph(db.session).followers(get_current_user())
    except SQLAlchemyError:
        raise internal_failure('Failed to fetch followers.')

    return jsonify({"followers": [user_summary(user) for user in followers]}), 200


@users_bp.route('/following', methods=['GET'])
@login_required
def get_following():
    """Get users that the current user is following"""
    try:
        following = SocialGraph(db.session).following(get_current_user())
    except SQLAlchemyError:
        raise internal_failure('Failed to fetch following users.')

    return jsonify({"following": [user_summary(user) for user in following]}), 200


@contents_bp.route('/contents', methods=['POST'])
@login_required
def create_content():
    form = ContentForm.from_json(request.get_json(silent=True))

    try:
        content = ContentStore(db.session).create(
            get_current_user(),
            title=form.title,
            text=form.text,
            image_path=form.image_path,
            artist_name=form.artist_name
        )
    except SQLAlchemyError:
        raise internal_failure('Internal server error during content posting.')

    return jsonify({
        "message": "Content posted successfully.",
        "content": content.to_dict()
    }), 201


@contents_bp.route('/contents', methods=['GET'])
@login_required
def search_contents():
    term = search_term(request.args)

    try:
        contents = ContentStore(db.session).search(term)
    except SQLAlchemyError:
        raise internal_failure('Internal server error during search.')

    return jsonify({"contents": [content.to_dict() for content in contents]}), 200


@contents_bp.route('/feed', methods=['GET'])
@login_required
def get_feed():
    current_user = get_current_user()
    try:
        if current_user.following_edges.first() is None:
            return jsonify({"feed": [], "message": "You are not following anyone yet."}), 200
        feed = compose_feed(db.session, current_user)
    except SQLAlchemyError:
        raise internal_failure('Internal server error retrieving feed.')

    return jsonify({"feed": [content.to_dict() for content in feed]}), 200
