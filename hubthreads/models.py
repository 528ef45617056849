# models.py
from datetime import datetime

from bson import ObjectId
from mongoengine import (
    BooleanField,
    DateTimeField,
    Document,
    ListField,
    ReferenceField,
    StringField,
    URLField,
)


class User(Document):
    external_id = StringField(required=True, unique=True)
    username = StringField(required=True)
    name = StringField(required=True)
    image = StringField()
    bio = StringField()
    onboarded = BooleanField(default=False)
    threads = ListField(ReferenceField('Thread'))
    courses = ListField(ReferenceField('Course'))
    communities = ListField(ReferenceField('Community'))
    created_at = DateTimeField(default=datetime.utcnow)

    meta = {'collection': 'users', 'indexes': ['username', 'communities']}


class Community(Document):
    external_id = StringField(required=True, unique=True)
    username = StringField(required=True)
    name = StringField(required=True)
    image = StringField()
    bio = StringField()
    created_by = ReferenceField(User)
    members = ListField(ReferenceField(User))
    threads = ListField(ReferenceField('Thread'))
    created_at = DateTimeField(default=datetime.utcnow)

    meta = {'collection': 'communities', 'indexes': ['username']}


class Thread(Document):
    text = StringField(required=True)
    author = ReferenceField(User, required=True)
    community = ReferenceField(Community)
    parent = ReferenceField('Thread')
    children = ListField(ReferenceField('Thread'))
    created_at = DateTimeField(default=datetime.utcnow)

    meta = {'collection': 'threads', 'indexes': ['parent', 'author', 'community']}

    @property
    def is_comment(self):
        return reference_id(self, 'parent') is not None


class Course(Document):
    name = StringField(required=True)
    author = ReferenceField(User, required=True)
    author_course = StringField()
    link_url = URLField()
    description = StringField()
    type_course = StringField()
    created_at = DateTimeField(default=datetime.utcnow)

    meta = {'collection': 'courses', 'indexes': ['author']}


def reference_id(document, field):
    """ObjectId stored in a reference field, without dereferencing it."""
    return document.to_mongo().get(field)


def reference_ids(document, field):
    return list(document.to_mongo().get(field) or [])


def object_id(value):
    if isinstance(value, ObjectId):
        return value
    return ObjectId(str(value))
