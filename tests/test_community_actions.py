"""
tests/test_community_actions.py — Community Lifecycle Tests
============================================================
"""

from __future__ import annotations

import pytest

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
from hubthreads.errors import NotFoundError, ValidationFailure
from hubthreads.models import Community, Thread, User, reference_ids


@pytest.fixture
def ann(make_user):
    return make_user("user_ann", username="ann")


@pytest.fixture
def bob(make_user):
    return make_user("user_bob", username="bob")


class TestCreateCommunity:

    def test_links_creator_both_ways(self, ann):
        community = create_community("org_1", "Readers", "readers", "img.png", "We read", "user_ann")

        user = User.objects.get(pk=ann.pk)
        assert reference_ids(user, 'communities') == [community.pk]
        assert reference_ids(community, 'members') == [ann.pk]
        assert community.created_by.pk == ann.pk

    def test_unknown_creator(self, db):
        with pytest.raises(NotFoundError):
            create_community("org_1", "Readers", "readers", "", "", "user_nobody")
        assert Community.objects.count() == 0

    def test_duplicate_external_id(self, ann):
        create_community("org_1", "Readers", "readers", "", "", "user_ann")
        with pytest.raises(ValidationFailure):
            create_community("org_1", "Writers", "writers", "", "", "user_ann")


class TestFetchCommunities:

    def test_details_populates_members(self, ann):
        create_community("org_1", "Readers", "readers", "", "", "user_ann")

        community = fetch_community_details("org_1")

        assert community.created_by.username == "ann"
        assert [member.username for member in community.members] == ["ann"]

    def test_posts_by_internal_id(self, ann, make_community, make_thread):
        community = make_community("org_1", ann)
        make_thread("hello", ann, community=community)

        fetched = fetch_community_posts(str(community.pk))

        assert [thread.text for thread in fetched.threads] == ["hello"]
        assert fetched.threads[0].author.username == "ann"

    def test_search_and_pagination(self, ann, make_community):
        make_community("org_1", ann, name="Chess Club", username="chess")
        make_community("org_2", ann, name="Book Club", username="books")
        make_community("org_3", ann, name="Runners", username="run")

        page = fetch_communities(search_string="club")
        assert {c.external_id for c in page.records} == {"org_1", "org_2"}

        page = fetch_communities(page_number=1, page_size=2)
        assert len(page.records) == 2
        assert page.has_next is True


class TestMembership:

    def test_add_member_updates_both_sides(self, ann, bob):
        create_community("org_1", "Readers", "readers", "", "", "user_ann")

        community = add_member_to_community("org_1", "user_bob")
        add_member_to_community("org_1", "user_bob")

        assert reference_ids(community, 'members') == [ann.pk, bob.pk]
        community = Community.objects.get(external_id="org_1")
        assert reference_ids(community, 'members') == [ann.pk, bob.pk]
        assert reference_ids(User.objects.get(pk=bob.pk), 'communities') == [community.pk]

    def test_remove_member_updates_both_sides(self, ann, bob):
        create_community("org_1", "Readers", "readers", "", "", "user_ann")
        add_member_to_community("org_1", "user_bob")

        remove_user_from_community("user_bob", "org_1")

        community = Community.objects.get(external_id="org_1")
        assert reference_ids(community, 'members') == [ann.pk]
        assert reference_ids(User.objects.get(pk=bob.pk), 'communities') == []

    def test_add_member_unknown_community(self, bob):
        with pytest.raises(NotFoundError):
            add_member_to_community("org_missing", "user_bob")

    def test_update_info(self, ann):
        create_community("org_1", "Readers", "readers", "", "", "user_ann")

        community = update_community_info("org_1", "Writers", "writers", "new.png")

        assert (community.name, community.username, community.image) == ("Writers", "writers", "new.png")


class TestDeleteCommunity:

    def test_removes_threads_replies_and_memberships(self, ann, bob, make_thread):
        create_community("org_1", "Readers", "readers", "", "", "user_ann")
        add_member_to_community("org_1", "user_bob")
        community = Community.objects.get(external_id="org_1")
        post = make_thread("post", ann, community=community)
        reply = make_thread("reply", bob, parent=post)
        make_thread("nested", ann, parent=reply)
        outside = make_thread("outside", bob)

        delete_community("org_1")

        assert Community.objects.count() == 0
        assert [thread.pk for thread in Thread.objects] == [outside.pk]
        assert reference_ids(User.objects.get(pk=ann.pk), 'communities') == []
        assert reference_ids(User.objects.get(pk=bob.pk), 'communities') == []
        assert reference_ids(User.objects.get(pk=ann.pk), 'threads') == []
        assert reference_ids(User.objects.get(pk=bob.pk), 'threads') == [outside.pk]

    def test_missing_community(self, db):
        with pytest.raises(NotFoundError):
            delete_community("org_missing")
