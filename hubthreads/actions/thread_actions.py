import logging
from collections import defaultdict

from hubthreads.errors import NotFoundError, action
from hubthreads.models import Community, Thread, User, object_id, reference_id
from hubthreads.pagination import paginate
from hubthreads.signals import revalidate_path

logger = logging.getLogger(__name__)


@action("create thread")
def create_thread(text, author, community_id, path):
    author_user = User.objects(pk=object_id(author)).first()
    if not author_user:
        raise NotFoundError("User not found")

    community = None
    if community_id:
        community = Community.objects(external_id=community_id).only('id').first()

    thread = Thread(text=text, author=author_user, community=community).save()

    User.objects(pk=author_user.pk).update_one(push__threads=thread)

    if community:
        Community.objects(pk=community.pk).update_one(push__threads=thread)

    logger.info("Created thread %s by user %s", thread.pk, author_user.pk)
    revalidate_path(path)
    return thread


@action("fetch thread")
def fetch_thread_by_id(thread_id):
    # author, community and nested children dereference on access
    return Thread.objects(pk=object_id(thread_id)).first()


@action("fetch posts")
def fetch_posts(page_number=1, page_size=20):
    query = Thread.objects(parent=None).order_by('-created_at', '-id')
    return paginate(query, page_number, page_size)


def collect_descendants(root_ids):
    """Raw descendant records of ``root_ids`` in pre-order per branch.

    Issues one query per generation and builds a parent-to-children index.
    Threads reached twice (a parent cycle) are visited once.
    """
    children_of = defaultdict(list)
    seen = set(root_ids)
    frontier = list(root_ids)

    while frontier:
        generation = (
            Thread.objects(parent__in=frontier)
            .order_by('created_at', 'id')
            .only('id', 'parent', 'author', 'community')
            .as_pymongo()
        )
        frontier = []
        for record in generation:
            if record['_id'] in seen:
                continue
            seen.add(record['_id'])
            children_of[record['parent']].append(record)
            frontier.append(record['_id'])

    ordered = []
    stack = [child for root_id in reversed(root_ids) for child in reversed(children_of[root_id])]
    while stack:
        record = stack.pop()
        ordered.append(record)
        stack.extend(reversed(children_of[record['_id']]))
    return ordered


@action("fetch child threads")
def fetch_all_child_threads(thread_id):
    records = collect_descendants([object_id(thread_id)])
    if not records:
        return []

    ids = [record['_id'] for record in records]
    threads = {thread.pk: thread for thread in Thread.objects(pk__in=ids)}
    return [threads[thread_id] for thread_id in ids if thread_id in threads]


@action("delete thread")
def delete_thread(thread_id, path):
    main_thread = Thread.objects(pk=object_id(thread_id)).first()
    if not main_thread:
        raise NotFoundError("Thread not found")

    descendants = collect_descendants([main_thread.pk])

    thread_ids = [main_thread.pk] + [record['_id'] for record in descendants]

    author_ids = {reference_id(main_thread, 'author')}
    author_ids.update(record.get('author') for record in descendants)
    author_ids.discard(None)

    community_ids = {reference_id(main_thread, 'community')}
    community_ids.update(record.get('community') for record in descendants)
    community_ids.discard(None)

    deleted = Thread.objects(pk__in=thread_ids).delete()

    User.objects(pk__in=list(author_ids)).update(pull_all__threads=thread_ids)
    Community.objects(pk__in=list(community_ids)).update(pull_all__threads=thread_ids)

    parent_id = reference_id(main_thread, 'parent')
    if parent_id is not None:
        Thread.objects(pk=parent_id).update_one(pull__children=main_thread.pk)

    logger.info("Deleted thread %s and %d replies", main_thread.pk, deleted - 1)
    revalidate_path(path)
    return thread_ids


@action("add comment")
def add_comment_to_thread(thread_id, comment_text, user_id, path):
    original_thread = Thread.objects(pk=object_id(thread_id)).first()
    if not original_thread:
        raise NotFoundError("Thread not found")

    commenter = User.objects(pk=object_id(user_id)).first()
    if not commenter:
        raise NotFoundError("User not found")

    comment_thread = Thread(
        text=comment_text,
        author=commenter,
        parent=original_thread,
    ).save()

    Thread.objects(pk=original_thread.pk).update_one(push__children=comment_thread)

    logger.info("Added comment %s to thread %s by user %s", comment_thread.pk, original_thread.pk, commenter.pk)
    revalidate_path(path)
    return comment_thread
