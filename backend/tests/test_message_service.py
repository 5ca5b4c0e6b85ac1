"""
Tests for the append-only message log and title derivation.
"""

import asyncio

import pytest

from branchchat.exceptions import InvalidMessage, NotFound, Unauthenticated
from branchchat.models import DEFAULT_CONVERSATION_TITLE
from branchchat.services.conversation_service import ConversationService
from branchchat.services.message_service import MessageService, derive_title

from conftest import OTHER_USER_ID, USER_ID


class TestTitleDerivation:
    """Tests for the first-user-message title rule."""

    def test_short_content_used_verbatim(self):
        assert derive_title("Explain quicksort") == "Explain quicksort"

    def test_exactly_fifty_characters_not_truncated(self):
        content = "x" * 50
        assert derive_title(content) == content

    def test_long_content_truncated_with_ellipsis(self):
        content = "a" * 60
        assert derive_title(content) == "a" * 50 + "..."

    async def test_first_user_message_sets_title(self, db_session, make_conversation):
        conversation = await make_conversation()
        assert conversation.title == DEFAULT_CONVERSATION_TITLE

        message = await MessageService(db_session).append(
            conversation.id, USER_ID, "Explain quicksort", "user"
        )
        await db_session.refresh(conversation)

        assert conversation.title == "Explain quicksort"
        assert message.message_index == 0

    async def test_sixty_character_message_truncates_title(self, db_session, make_conversation):
        content = "Please describe the history of the Roman Empire in detail"
        content = content + "!" * (60 - len(content))
        assert len(content) == 60
        conversation = await make_conversation([("user", content)])

        assert conversation.title == content[:50] + "..."

    async def test_title_updated_only_once(self, db_session, make_conversation):
        conversation = await make_conversation([("user", "First question")])
        await MessageService(db_session).append(
            conversation.id, USER_ID, "Second question", "user"
        )
        await db_session.refresh(conversation)

        assert conversation.title == "First question"

    async def test_later_user_message_never_renames_default_title(self, db_session, make_conversation):
        # Index 0 is an assistant message, so the title rule never fires
        conversation = await make_conversation([
            ("assistant", "Welcome!"),
            ("user", "Hi there"),
        ])

        assert conversation.title == DEFAULT_CONVERSATION_TITLE

    async def test_explicit_title_is_kept(self, db_session, make_conversation):
        conversation = await make_conversation([("user", "Hello")], title="Trip planning")

        assert conversation.title == "Trip planning"


class TestAppend:
    """Tests for message index assignment and ownership."""

    async def test_indices_are_dense_from_zero(self, db_session, make_conversation):
        conversation = await make_conversation([
            ("user", "one"),
            ("assistant", "two", "openai", "gpt-4o-mini"),
            ("user", "three"),
            ("assistant", "four", "google", "gemini-2.0-flash"),
        ])

        messages = await MessageService(db_session).list(conversation.id)

        assert [m.message_index for m in messages] == [0, 1, 2, 3]
        assert [m.content for m in messages] == ["one", "two", "three", "four"]
        assert messages[1].provider == "openai"
        assert messages[1].model == "gpt-4o-mini"
        assert messages[0].provider is None

    async def test_concurrent_appends_get_distinct_indices(self, session_factory, make_conversation):
        conversation = await make_conversation()

        async def append(i):
            async with session_factory() as session:
                return await MessageService(session).append(
                    conversation.id, USER_ID, f"message {i}", "user"
                )

        appended = await asyncio.gather(*(append(i) for i in range(10)))

        assert sorted(m.message_index for m in appended) == list(range(10))

    async def test_indices_independent_per_conversation(self, db_session, make_conversation):
        first = await make_conversation([("user", "a"), ("assistant", "b")])
        second = await make_conversation([("user", "c")])

        message = await MessageService(db_session).append(first.id, USER_ID, "d", "user")
        other = await MessageService(db_session).append(second.id, USER_ID, "e", "assistant")

        assert message.message_index == 2
        assert other.message_index == 1

    async def test_append_to_missing_conversation_not_found(self, db_session):
        with pytest.raises(NotFound):
            await MessageService(db_session).append(12345, USER_ID, "hello", "user")

    async def test_append_to_other_users_conversation_not_found(self, db_session, make_conversation):
        conversation_id = (await make_conversation(user_id=OTHER_USER_ID)).id

        with pytest.raises(NotFound):
            await MessageService(db_session).append(conversation_id, USER_ID, "hello", "user")

        # The failed append rolled back and expired every object in the session
        assert await MessageService(db_session).list(conversation_id) == []

    async def test_append_rejects_unknown_role(self, db_session, make_conversation):
        conversation = await make_conversation()

        with pytest.raises(InvalidMessage) as exc_info:
            await MessageService(db_session).append(conversation.id, USER_ID, "hi", "system")

        assert exc_info.value.status_code == 400
        assert await MessageService(db_session).list(conversation.id) == []

    async def test_append_requires_user(self, db_session, make_conversation):
        conversation = await make_conversation()

        with pytest.raises(Unauthenticated):
            await MessageService(db_session).append(conversation.id, None, "hi", "user")


class TestConversationLifecycle:
    """Tests for ConversationService reads and renames."""

    async def test_get_with_messages_orders_by_index(self, db_session, make_conversation):
        conversation = await make_conversation([("user", "q"), ("assistant", "a")])

        found, messages = await ConversationService(db_session).get_with_messages(
            USER_ID, conversation.id
        )

        assert found.id == conversation.id
        assert [(m.role, m.message_index) for m in messages] == [("user", 0), ("assistant", 1)]

    async def test_list_for_user_scoped_to_owner(self, db_session, make_conversation):
        mine = await make_conversation()
        await make_conversation(user_id=OTHER_USER_ID)

        conversations = await ConversationService(db_session).list_for_user(USER_ID)

        assert [c.id for c in conversations] == [mine.id]

    async def test_rename(self, db_session, make_conversation):
        conversation = await make_conversation()

        renamed = await ConversationService(db_session).rename(USER_ID, conversation.id, "Renamed")

        assert renamed.title == "Renamed"

    async def test_get_other_users_conversation_not_found(self, db_session, make_conversation):
        conversation = await make_conversation(user_id=OTHER_USER_ID)

        with pytest.raises(NotFound):
            await ConversationService(db_session).get(USER_ID, conversation.id)
