import logging

from bson import ObjectId
from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from hubthreads import cards
from hubthreads.actions.community_actions import (
    add_member_to_community,
    create_community,
    delete_community,
    fetch_communities,
    fetch_community_details,
    fetch_community_posts,
    remove_user_from_community,
    update_community_info,
)
from hubthreads.actions.course_actions import create_course, fetch_user_courses
from hubthreads.actions.thread_actions import (
    add_comment_to_thread,
    create_thread,
    delete_thread,
    fetch_posts,
    fetch_thread_by_id,
)
from hubthreads.actions.user_actions import (
    fetch_user,
    fetch_user_posts,
    fetch_users,
    get_activity,
    update_user,
)
from hubthreads.cache import get_request_cache
from hubthreads.errors import ActionError, NotFoundError, ValidationFailure
from hubthreads.models import reference_id

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')

SUGGESTED_COMMUNITIES = 3


def _error(error):
    if isinstance(error, NotFoundError):
        return jsonify({'error': str(error)}), 404
    if isinstance(error, ValidationFailure):
        return jsonify({'error': str(error)}), 400
    return jsonify({'error': str(error)}), 500


def _page_args():
    return {
        'page_number': request.args.get('page', 1, type=int),
        'page_size': request.args.get('page_size', 20, type=int),
    }


def _current_user():
    user = fetch_user(get_jwt_identity(), cache=get_request_cache())
    if not user:
        raise NotFoundError("User not found")
    return user


def _invalid_fields(data, required, optional=()):
    """Required fields must be strings; optional ones strings or null."""
    if not isinstance(data, dict):
        return True
    if not all(isinstance(data.get(k), str) for k in required):
        return True
    return any(data.get(k) is not None and not isinstance(data[k], str) for k in optional)


def _is_creator(community, user):
    return reference_id(community, 'created_by') == user.pk


#Threads
@api.route('/threads', methods=['GET'])
def get_threads():
    try:
        page = fetch_posts(**_page_args())
        return jsonify({
            'posts': [cards.thread_card(post, depth=0) for post in page.records],
            'isNext': page.has_next,
        }), 200

    except ActionError as e:
        return _error(e)


@api.route('/threads', methods=['POST'])
@jwt_required()
def add_thread():
    try:
        data = request.get_json()

        if _invalid_fields(data, ('text',), ('community_id', 'path')):
            return jsonify({'error': 'Missing or invalid fields'}), 400

        user = _current_user()
        thread = create_thread(
            text=data['text'],
            author=user.pk,
            community_id=data.get('community_id'),
            path=data.get('path', '/'),
        )
        return jsonify({'message': 'Thread created successfully', 'thread_id': str(thread.pk)}), 201

    except ActionError as e:
        return _error(e)


@api.route('/threads/<thread_id>', methods=['GET'])
def get_thread(thread_id):
    try:
        if not ObjectId.is_valid(thread_id):
            return jsonify({'error': 'Invalid thread ID format'}), 400

        thread = fetch_thread_by_id(thread_id)
        if not thread:
            return jsonify({'error': 'Thread not found'}), 404

        return jsonify(cards.thread_card(thread, depth=2)), 200

    except ActionError as e:
        return _error(e)


@api.route('/threads/<thread_id>', methods=['DELETE'])
@jwt_required()
def remove_thread(thread_id):
    try:
        if not ObjectId.is_valid(thread_id):
            return jsonify({'error': 'Invalid thread ID format'}), 400

        thread = fetch_thread_by_id(thread_id)
        if not thread:
            return jsonify({'error': 'Thread not found'}), 404

        user = _current_user()
        if reference_id(thread, 'author') != user.pk:
            return jsonify({'error': 'Unauthorized'}), 403

        deleted_ids = delete_thread(thread_id, request.args.get('path', '/'))
        return jsonify({'message': 'Thread deleted successfully', 'deleted': len(deleted_ids)}), 200

    except ActionError as e:
        return _error(e)


@api.route('/threads/<thread_id>/comments', methods=['POST'])
@jwt_required()
def add_comment(thread_id):
    try:
        if not ObjectId.is_valid(thread_id):
            return jsonify({'error': 'Invalid thread ID format'}), 400

        data = request.get_json()
        if _invalid_fields(data, ('text',), ('path',)):
            return jsonify({'error': 'Missing or invalid fields'}), 400

        user = _current_user()
        comment = add_comment_to_thread(
            thread_id,
            data['text'],
            user.pk,
            data.get('path', f'/thread/{thread_id}'),
        )
        return jsonify({'message': 'Comment added successfully', 'comment_id': str(comment.pk)}), 201

    except ActionError as e:
        return _error(e)


#Users
@api.route('/users', methods=['GET'])
@jwt_required()
def get_users():
    try:
        page = fetch_users(
            user_id=get_jwt_identity(),
            search_string=request.args.get('search', ''),
            sort_by=request.args.get('sort', 'desc'),
            cache=get_request_cache(),
            **_page_args(),
        )
        return jsonify({
            'users': [cards.user_card(user) for user in page.records],
            'isNext': page.has_next,
        }), 200

    except ActionError as e:
        return _error(e)


@api.route('/users/me', methods=['PUT'])
@jwt_required()
def save_profile():
    try:
        data = request.get_json()

        if _invalid_fields(data, ('username', 'name'), ('bio', 'image', 'path')):
            return jsonify({'error': 'Missing or invalid fields'}), 400

        update_user(
            user_id=get_jwt_identity(),
            username=data['username'],
            name=data['name'],
            bio=data.get('bio', ''),
            image=data.get('image', ''),
            path=data.get('path', '/'),
        )
        return jsonify({'message': 'Profile saved successfully'}), 200

    except ActionError as e:
        return _error(e)


@api.route('/users/<user_id>', methods=['GET'])
@jwt_required()
def get_user_by_id(user_id):
    try:
        user = fetch_user(user_id, cache=get_request_cache())
        if not user:
            return jsonify({'error': 'User not found'}), 404

        return jsonify(cards.user_profile(user)), 200

    except ActionError as e:
        return _error(e)


@api.route('/users/<user_id>/threads', methods=['GET'])
@jwt_required()
def get_user_threads(user_id):
    try:
        user = fetch_user_posts(user_id, cache=get_request_cache())
        if not user:
            return jsonify({'error': 'User not found'}), 404

        current_user_id = get_jwt_identity()
        threads = [cards.thread_card(thread, current_user_id, depth=0) for thread in cards.resolved(user.threads)]
        return jsonify({'user': cards.user_card(user), 'threads': threads}), 200

    except ActionError as e:
        return _error(e)


@api.route('/users/<user_id>/courses', methods=['GET'])
@jwt_required()
def get_user_courses(user_id):
    try:
        user = fetch_user(user_id, cache=get_request_cache())
        if not user:
            return jsonify({'error': 'User not found'}), 404

        courses = fetch_user_courses(user.pk)
        return jsonify({'courses': [cards.course_card(course) for course in courses]}), 200

    except ActionError as e:
        return _error(e)


@api.route('/activity', methods=['GET'])
@jwt_required()
def get_user_activity():
    try:
        user = _current_user()
        replies = get_activity(user.pk, cache=get_request_cache())
        return jsonify({'activity': [cards.activity_card(reply) for reply in replies]}), 200

    except ActionError as e:
        return _error(e)


#Communities
@api.route('/communities', methods=['GET'])
def get_communities():
    try:
        page = fetch_communities(
            search_string=request.args.get('search', ''),
            sort_by=request.args.get('sort', 'desc'),
            **_page_args(),
        )
        return jsonify({
            'communities': [cards.community_card(community) for community in page.records],
            'isNext': page.has_next,
        }), 200

    except ActionError as e:
        return _error(e)


@api.route('/communities/suggested', methods=['GET'])
def get_suggested_communities():
    try:
        page = fetch_communities(page_size=SUGGESTED_COMMUNITIES)
        return jsonify({'communities': [cards.community_card(community) for community in page.records]}), 200

    except ActionError as e:
        return _error(e)


@api.route('/communities', methods=['POST'])
@jwt_required()
def add_community():
    try:
        data = request.get_json()

        if _invalid_fields(data, ('id', 'name', 'username'), ('image', 'bio')):
            return jsonify({'error': 'Missing or invalid fields'}), 400

        community = create_community(
            id=data['id'],
            name=data['name'],
            username=data['username'],
            image=data.get('image', ''),
            bio=data.get('bio', ''),
            created_by_id=get_jwt_identity(),
        )
        return jsonify({'message': 'Community created successfully', 'community_id': community.external_id}), 201

    except ActionError as e:
        return _error(e)


@api.route('/communities/<community_id>', methods=['GET'])
def get_community(community_id):
    try:
        community = fetch_community_details(community_id)
        if not community:
            return jsonify({'error': 'Community not found'}), 404

        return jsonify(cards.community_details(community)), 200

    except ActionError as e:
        return _error(e)


@api.route('/communities/<community_id>', methods=['PATCH'])
@jwt_required()
def edit_community(community_id):
    try:
        data = request.get_json()

        if _invalid_fields(data, ('name', 'username'), ('image',)):
            return jsonify({'error': 'Missing or invalid fields'}), 400

        community = fetch_community_details(community_id)
        if not community:
            return jsonify({'error': 'Community not found'}), 404

        if not _is_creator(community, _current_user()):
            return jsonify({'error': 'Unauthorized'}), 403

        community = update_community_info(
            community_id,
            name=data['name'],
            username=data['username'],
            image=data.get('image', ''),
        )
        return jsonify(cards.community_card(community)), 200

    except ActionError as e:
        return _error(e)


@api.route('/communities/<community_id>', methods=['DELETE'])
@jwt_required()
def remove_community(community_id):
    try:
        community = fetch_community_details(community_id)
        if not community:
            return jsonify({'error': 'Community not found'}), 404

        user = _current_user()
        if not _is_creator(community, user):
            return jsonify({'error': 'Unauthorized'}), 403

        delete_community(community_id)
        return jsonify({'message': 'Community deleted successfully'}), 200

    except ActionError as e:
        return _error(e)


@api.route('/communities/<community_id>/threads', methods=['GET'])
def get_community_threads(community_id):
    try:
        community = fetch_community_details(community_id)
        if not community:
            return jsonify({'error': 'Community not found'}), 404

        community = fetch_community_posts(community.pk)
        threads = [cards.thread_card(thread, depth=0) for thread in cards.resolved(community.threads)]
        return jsonify({'community': cards.community_card(community), 'threads': threads}), 200

    except ActionError as e:
        return _error(e)


@api.route('/communities/<community_id>/members', methods=['POST'])
@jwt_required()
def add_member(community_id):
    try:
        data = request.get_json()

        if _invalid_fields(data, ('user_id',)):
            return jsonify({'error': 'Missing or invalid fields'}), 400

        community = fetch_community_details(community_id)
        if not community:
            return jsonify({'error': 'Community not found'}), 404

        if not _is_creator(community, _current_user()):
            return jsonify({'error': 'Unauthorized'}), 403

        community = add_member_to_community(community_id, data['user_id'])
        return jsonify(cards.community_card(community)), 200

    except ActionError as e:
        return _error(e)


@api.route('/communities/<community_id>/members/<user_id>', methods=['DELETE'])
@jwt_required()
def remove_member(community_id, user_id):
    try:
        community = fetch_community_details(community_id)
        if not community:
            return jsonify({'error': 'Community not found'}), 404

        # creators remove anyone, members only themselves
        user = _current_user()
        if user.external_id != user_id and not _is_creator(community, user):
            return jsonify({'error': 'Unauthorized'}), 403

        remove_user_from_community(user_id, community_id)
        return jsonify({'message': 'Member removed successfully'}), 200

    except ActionError as e:
        return _error(e)


#Courses
@api.route('/courses', methods=['POST'])
@jwt_required()
def add_course():
    try:
        data = request.get_json()

        if _invalid_fields(data, ('name', 'link_url'), ('author_course', 'description', 'type_course', 'path')):
            return jsonify({'error': 'Missing or invalid fields'}), 400

        user = _current_user()
        course = create_course(
            name=data['name'],
            author=user.pk,
            author_course=data.get('author_course', ''),
            link_url=data['link_url'],
            description=data.get('description', ''),
            type_course=data.get('type_course', ''),
            path=data.get('path', '/courses'),
        )
        return jsonify({'message': 'Course created successfully', 'course_id': str(course.pk)}), 201

    except ActionError as e:
        return _error(e)
