import logging

from hubthreads.actions.thread_actions import collect_descendants
from hubthreads.errors import NotFoundError, action
from hubthreads.models import Community, Thread, User, object_id
from hubthreads.pagination import paginate, search_filter, sort_order

logger = logging.getLogger(__name__)


@action("create community")
def create_community(id, name, username, image, bio, created_by_id):
    user = User.objects(external_id=created_by_id).first()
    if not user:
        raise NotFoundError("User not found")

    community = Community(
        external_id=id,
        name=name,
        username=username,
        image=image,
        bio=bio,
        created_by=user,
        members=[user],
    ).save()

    User.objects(pk=user.pk).update_one(push__communities=community)

    logger.info("Created community %s by user %s", id, created_by_id)
    return community


@action("fetch community details")
def fetch_community_details(id):
    # created_by and members dereference on access
    return Community.objects(external_id=id).first()


@action("fetch community posts")
def fetch_community_posts(id):
    return Community.objects(pk=object_id(id)).first()


@action("fetch communities")
def fetch_communities(search_string="", page_number=1, page_size=20, sort_by='desc'):
    query = Community.objects(search_filter(search_string)).order_by(*sort_order(sort_by))
    return paginate(query, page_number, page_size)


@action("add member to community")
def add_member_to_community(community_id, member_id):
    community = Community.objects(external_id=community_id).first()
    if not community:
        raise NotFoundError("Community not found")

    user = User.objects(external_id=member_id).first()
    if not user:
        raise NotFoundError("User not found")

    # add_to_set keeps repeated joins idempotent on both sides
    Community.objects(pk=community.pk).update_one(add_to_set__members=user)
    User.objects(pk=user.pk).update_one(add_to_set__communities=community)

    community.reload()
    return community


@action("remove user from community")
def remove_user_from_community(user_id, community_id):
    user = User.objects(external_id=user_id).only('id').first()
    if not user:
        raise NotFoundError("User not found")

    community = Community.objects(external_id=community_id).only('id').first()
    if not community:
        raise NotFoundError("Community not found")

    Community.objects(pk=community.pk).update_one(pull__members=user.pk)
    User.objects(pk=user.pk).update_one(pull__communities=community.pk)


@action("update community")
def update_community_info(community_id, name, username, image):
    community = Community.objects(external_id=community_id).first()
    if not community:
        raise NotFoundError("Community not found")

    community.update(set__name=name, set__username=username, set__image=image)
    community.reload()
    return community


@action("delete community")
def delete_community(community_id):
    community = Community.objects(external_id=community_id).first()
    if not community:
        raise NotFoundError("Community not found")

    root_threads = list(
        Thread.objects(community=community.pk).only('id', 'author').as_pymongo()
    )
    root_ids = [record['_id'] for record in root_threads]
    records = root_threads + collect_descendants(root_ids)

    thread_ids = [record['_id'] for record in records]
    author_ids = {record.get('author') for record in records}
    author_ids.discard(None)

    Thread.objects(pk__in=thread_ids).delete()
    User.objects(pk__in=list(author_ids)).update(pull_all__threads=thread_ids)
    User.objects(communities=community.pk).update(pull__communities=community.pk)

    community.delete()

    logger.info("Deleted community %s with %d threads", community_id, len(thread_ids))
    return community
