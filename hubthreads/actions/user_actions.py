import logging
from datetime import datetime

from hubthreads.cache import memoized
from hubthreads.errors import action
from hubthreads.models import Thread, User, object_id, reference_ids
from hubthreads.pagination import paginate, search_filter, sort_order
from hubthreads.signals import revalidate_path

logger = logging.getLogger(__name__)

PROFILE_EDIT_PATH = "/profile/edit"


@action("fetch user")
def fetch_user(user_id, cache=None):
    # communities dereference on access
    return memoized(
        cache,
        ('fetch_user', user_id),
        lambda: User.objects(external_id=user_id).first(),
    )


@action("create/update user")
def update_user(user_id, username, name, bio, image, path):
    User.objects(external_id=user_id).update_one(
        set__username=username.lower(),
        set__name=name,
        set__bio=bio,
        set__image=image,
        set__onboarded=True,
        set_on_insert__created_at=datetime.utcnow(),
        upsert=True,
    )
    logger.info("Saved profile of user %s", user_id)

    if path == PROFILE_EDIT_PATH:
        revalidate_path(path)


@action("fetch users")
def fetch_users(user_id, search_string="", page_number=1, page_size=20, sort_by='desc', cache=None):
    def load():
        query = User.objects(search_filter(search_string), external_id__ne=user_id)
        return paginate(query.order_by(*sort_order(sort_by)), page_number, page_size)

    key = ('fetch_users', user_id, search_string, page_number, page_size, sort_by)
    return memoized(cache, key, load)


@action("fetch user threads")
def fetch_user_posts(user_id, cache=None):
    """The user with their threads; each thread's community and replies
    dereference on access."""
    return memoized(
        cache,
        ('fetch_user_posts', user_id),
        lambda: User.objects(external_id=user_id).first(),
    )


@action("fetch replies")
def get_activity(user_id, cache=None):
    """Replies written by others to the threads of user ``user_id``."""
    author_id = object_id(user_id)

    def load():
        child_thread_ids = []
        for user_thread in Thread.objects(author=author_id).only('children'):
            child_thread_ids.extend(reference_ids(user_thread, 'children'))

        if not child_thread_ids:
            return []

        replies = Thread.objects(pk__in=child_thread_ids, author__ne=author_id)
        return list(replies.order_by('-created_at', '-id'))

    return memoized(cache, ('get_activity', author_id), load)
