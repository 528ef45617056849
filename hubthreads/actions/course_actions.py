import logging

from hubthreads.errors import NotFoundError, action
from hubthreads.models import Course, User, object_id
from hubthreads.signals import revalidate_path

logger = logging.getLogger(__name__)


@action("create course")
def create_course(name, author, author_course, link_url, description, type_course, path):
    author_user = User.objects(pk=object_id(author)).only('id').first()
    if not author_user:
        raise NotFoundError("User not found")

    course = Course(
        name=name,
        author=author_user,
        author_course=author_course,
        link_url=link_url,
        description=description,
        type_course=type_course,
    ).save()

    User.objects(pk=author_user.pk).update_one(push__courses=course)

    logger.info("Created course %s by user %s", course.pk, author_user.pk)
    revalidate_path(path)
    return course


@action("fetch courses")
def fetch_user_courses(user_id):
    return list(Course.objects(author=object_id(user_id)).order_by('-created_at', '-id'))
