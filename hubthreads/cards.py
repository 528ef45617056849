"""Card payloads rendered by the UI.

Every builder is a pure function of already-fetched documents. References
that no longer resolve are rendered as absent.
"""
from bson import DBRef
from mongoengine.errors import DoesNotExist

from hubthreads.models import reference_id, reference_ids

MEMBER_PREVIEW_THRESHOLD = 3


def _resolve(document, field):
    try:
        return getattr(document, field)
    except DoesNotExist:
        return None


def resolved(items):
    """Drop list references whose documents no longer exist."""
    return [item for item in items or [] if not isinstance(item, DBRef)]


def _resolved_list(document, field):
    return resolved(getattr(document, field, None))


def _str_or_none(value):
    return str(value) if value is not None else None


def _isoformat(value):
    return value.isoformat() if value else None


def author_summary(user):
    if user is None:
        return None
    return {
        'id': user.external_id,
        '_id': str(user.pk),
        'name': user.name,
        'image': user.image,
    }


def community_summary(community):
    if community is None:
        return None
    return {
        'id': community.external_id,
        '_id': str(community.pk),
        'name': community.name,
        'image': community.image,
    }


def thread_card(thread, current_user_id=None, depth=1):
    """A thread with its author, community and comment previews.

    ``depth`` controls how many levels of replies are embedded.
    """
    author = _resolve(thread, 'author')
    children = _resolved_list(thread, 'children')

    card = {
        'id': str(thread.pk),
        'text': thread.text,
        'parent_id': _str_or_none(reference_id(thread, 'parent')),
        'author': author_summary(author),
        'community': community_summary(_resolve(thread, 'community')),
        'created_at': _isoformat(thread.created_at),
        'is_comment': thread.is_comment,
        'is_owner': bool(author and current_user_id and author.external_id == current_user_id),
        'comments': [
            {'author': {'image': child_author.image}}
            for child_author in (_resolve(child, 'author') for child in children)
            if child_author is not None
        ],
        'comment_count': len(children),
    }
    if depth > 0:
        card['children'] = [thread_card(child, current_user_id, depth - 1) for child in children]
    return card


def community_card(community):
    members = _resolved_list(community, 'members')
    return {
        'id': community.external_id,
        'name': community.name,
        'username': community.username,
        'imgUrl': community.image,
        'bio': community.bio,
        'members': [{'image': member.image} for member in members],
        'members_label': (
            f"{len(members)}+ Users" if len(members) > MEMBER_PREVIEW_THRESHOLD else None
        ),
    }


def community_details(community):
    card = community_card(community)
    card['_id'] = str(community.pk)
    card['created_by'] = author_summary(_resolve(community, 'created_by'))
    card['members'] = [
        {'id': member.external_id, 'name': member.name, 'username': member.username, 'image': member.image}
        for member in _resolved_list(community, 'members')
    ]
    return card


def user_card(user):
    return {
        'id': user.external_id,
        '_id': str(user.pk),
        'name': user.name,
        'username': user.username,
        'imgUrl': user.image,
        'bio': user.bio,
        'onboarded': user.onboarded,
    }


def user_profile(user):
    card = user_card(user)
    card['communities'] = [
        community_summary(community) for community in _resolved_list(user, 'communities')
    ]
    card['thread_count'] = len(reference_ids(user, 'threads'))
    return card


def course_card(course):
    return {
        'id': str(course.pk),
        'name': course.name,
        'author': author_summary(_resolve(course, 'author')),
        'author_course': course.author_course,
        'link_url': course.link_url,
        'description': course.description,
        'type_course': course.type_course,
        'created_at': _isoformat(course.created_at),
    }


def activity_card(reply):
    author = _resolve(reply, 'author')
    return {
        'id': str(reply.pk),
        'parent_id': _str_or_none(reference_id(reply, 'parent')),
        'text': reply.text,
        'author': {'name': author.name, 'image': author.image} if author else None,
        'created_at': _isoformat(reply.created_at),
    }
