import pytest

from infrastructure.database.models import TelegramUser
from tgbot.config import BroadcastConfig
from tgbot.misc.departments import DEPARTMENTS, IT_DEPARTMENT
from tgbot.misc.errors import AuthorizationError, SessionExpiredError, ValidationError
from tgbot.services.composer import PostComposer
from tgbot.services.publisher import publish_notification
from tgbot.services.sessions import PostStep, SessionStore

ADMIN_ID = 100
SALES = DEPARTMENTS[0]
MARKETING = DEPARTMENTS[3]


def make_admin(telegram_id: int = ADMIN_ID) -> TelegramUser:
    return TelegramUser(telegram_id=telegram_id, department=IT_DEPARTMENT, is_admin=True)


@pytest.fixture
def composer():
    return PostComposer(SessionStore())


@pytest.fixture
def selecting(composer):
    """Composer with an admin session on the department selection step"""
    composer.start(make_admin())
    composer.accept_text(ADMIN_ID, "Плановые работы в субботу")
    return composer


class TestPostComposerStart:
    """Test cases for starting a post"""

    def test_admin_starts_session(self, composer):
        session = composer.start(make_admin())
        assert session.step == PostStep.AWAITING_TEXT
        assert composer.store.get(ADMIN_ID) is session

    def test_non_admin_is_rejected(self, composer):
        """Regular users cannot create posts and get no session"""
        user = TelegramUser(telegram_id=5, department=SALES, is_admin=False)

        with pytest.raises(AuthorizationError) as exc_info:
            composer.start(user)

        assert exc_info.value.alert is True
        assert 5 not in composer.store

    def test_unregistered_user_is_rejected(self, composer):
        with pytest.raises(AuthorizationError):
            composer.start(None)

    def test_restart_discards_previous_session(self, selecting):
        """Starting again begins a fresh session"""
        selecting.toggle_department(ADMIN_ID, 0)
        session = selecting.start(make_admin())

        assert session.step == PostStep.AWAITING_TEXT
        assert session.post_text is None
        assert session.selected_departments == set()


class TestPostComposerText:
    """Test cases for the text step"""

    def test_text_moves_to_department_selection(self, composer):
        composer.start(make_admin())
        session = composer.accept_text(ADMIN_ID, "Привет")

        assert session.step == PostStep.AWAITING_DEPARTMENTS
        assert session.post_text == "Привет"
        assert session.selected_departments == set()

    def test_text_without_session_is_ignored(self, composer):
        assert composer.accept_text(ADMIN_ID, "Привет") is None
        assert ADMIN_ID not in composer.store

    def test_text_on_other_step_is_ignored(self, selecting):
        """Only the first message becomes the post text"""
        assert selecting.accept_text(ADMIN_ID, "Другой текст") is None
        assert selecting.store.get(ADMIN_ID).post_text == "Плановые работы в субботу"


class TestPostComposerSelection:
    """Test cases for the department selection step"""

    def test_toggle_twice_is_identity(self, selecting):
        """Toggling the same department twice restores the selection"""
        session, department, added = selecting.toggle_department(ADMIN_ID, 3)
        assert department == MARKETING
        assert added is True
        assert session.selected_departments == {MARKETING}

        session, _, added = selecting.toggle_department(ADMIN_ID, 3)
        assert added is False
        assert session.selected_departments == set()

    def test_toggle_all_selects_every_department(self, selecting):
        session, all_selected = selecting.toggle_all(ADMIN_ID)
        assert all_selected is True
        assert session.selected_departments == set(DEPARTMENTS)

    def test_toggle_all_twice_clears_selection(self, selecting):
        selecting.toggle_all(ADMIN_ID)
        session, all_selected = selecting.toggle_all(ADMIN_ID)

        assert all_selected is False
        assert session.selected_departments == set()

    def test_toggle_all_with_partial_selection_selects_all(self, selecting):
        selecting.toggle_department(ADMIN_ID, 1)
        session, all_selected = selecting.toggle_all(ADMIN_ID)

        assert all_selected is True
        assert len(session.selected_departments) == len(DEPARTMENTS)

    @pytest.mark.parametrize("index", [-1, 9, 100])
    def test_invalid_index_leaves_selection_unchanged(self, selecting, index):
        selecting.toggle_department(ADMIN_ID, 0)

        with pytest.raises(ValidationError):
            selecting.toggle_department(ADMIN_ID, index)

        session = selecting.store.get(ADMIN_ID)
        assert session.selected_departments == {SALES}
        assert session.step == PostStep.AWAITING_DEPARTMENTS

    def test_toggle_without_session_expired(self, composer):
        """Expired session wins over an invalid index"""
        with pytest.raises(SessionExpiredError):
            composer.toggle_department(ADMIN_ID, 100)

    def test_finish_with_empty_selection_is_rejected(self, selecting):
        with pytest.raises(ValidationError) as exc_info:
            selecting.finish_selection(ADMIN_ID)

        assert exc_info.value.text == "Выберите хотя бы один отдел"
        assert exc_info.value.alert is True
        assert selecting.store.get(ADMIN_ID).step == PostStep.AWAITING_DEPARTMENTS

    def test_finish_moves_to_confirmation(self, selecting):
        selecting.toggle_department(ADMIN_ID, 0)
        session = selecting.finish_selection(ADMIN_ID)

        assert session.step == PostStep.AWAITING_CONFIRMATION

    def test_selection_is_locked_after_finish(self, selecting):
        """Departments cannot be toggled on the confirmation step"""
        selecting.toggle_department(ADMIN_ID, 0)
        selecting.finish_selection(ADMIN_ID)

        with pytest.raises(SessionExpiredError):
            selecting.toggle_department(ADMIN_ID, 1)


class TestPostComposerConfirm:
    """Test cases for confirmation and cancellation"""

    async def test_confirm_without_session_expired(self, composer):
        published = []

        async def publish(text, departments):
            published.append((text, departments))

        with pytest.raises(SessionExpiredError):
            await composer.confirm(ADMIN_ID, publish)

        assert published == []

    async def test_confirm_before_selection_finished_expired(self, selecting):
        async def publish(text, departments):
            raise AssertionError("must not publish")

        selecting.toggle_department(ADMIN_ID, 0)
        with pytest.raises(SessionExpiredError):
            await selecting.confirm(ADMIN_ID, publish)

    async def test_failed_publish_keeps_session(self, selecting):
        """Confirmation can be retried after a failed publish"""

        async def publish(text, departments):
            raise RuntimeError("storage down")

        selecting.toggle_department(ADMIN_ID, 0)
        selecting.finish_selection(ADMIN_ID)

        with pytest.raises(RuntimeError):
            await selecting.confirm(ADMIN_ID, publish)

        assert selecting.store.get(ADMIN_ID).step == PostStep.AWAITING_CONFIRMATION

    async def test_second_confirm_does_not_publish_twice(self, selecting):
        calls = []

        async def publish(text, departments):
            calls.append(departments)
            return len(calls)

        selecting.toggle_department(ADMIN_ID, 0)
        selecting.finish_selection(ADMIN_ID)
        await selecting.confirm(ADMIN_ID, publish)

        with pytest.raises(SessionExpiredError):
            await selecting.confirm(ADMIN_ID, publish)

        assert len(calls) == 1

    def test_cancel_from_any_step(self, selecting):
        assert selecting.cancel(ADMIN_ID) is not None
        assert ADMIN_ID not in selecting.store
        assert selecting.cancel(ADMIN_ID) is None

    async def test_full_flow_publishes_selected_departments(self, composer):
        """Admin composes a post for two departments and publishes it"""
        composer.start(make_admin())
        composer.accept_text(ADMIN_ID, "Hello")
        composer.toggle_department(ADMIN_ID, 3)
        composer.toggle_department(ADMIN_ID, 0)
        composer.finish_selection(ADMIN_ID)

        async def publish(text, departments):
            return text, departments

        session, result = await composer.confirm(ADMIN_ID, publish)

        assert result == ("Hello", [SALES, MARKETING])
        assert session.post_text == "Hello"
        assert ADMIN_ID not in composer.store


class TestPostFlowWithPublisher:
    """Post composition wired to the real publisher and database"""

    async def test_admin_publishes_to_sales_and_marketing(self, bot, repo, add_user):
        admin = await add_user(ADMIN_ID, IT_DEPARTMENT)
        await add_user(1, SALES)
        await add_user(2, SALES)
        await add_user(3, MARKETING)
        await add_user(4, DEPARTMENTS[5])

        composer = PostComposer(SessionStore())
        composer.start(admin)
        composer.accept_text(ADMIN_ID, "Server maintenance 15:00–16:00")
        composer.toggle_department(ADMIN_ID, 0)
        composer.toggle_department(ADMIN_ID, 3)
        composer.finish_selection(ADMIN_ID)

        async def publish(text, departments):
            return await publish_notification(
                bot,
                repo,
                text,
                departments,
                created_by=admin.id,
                settings=BroadcastConfig(concurrency=5, send_timeout=1.0),
            )

        _, (notification, result) = await composer.confirm(ADMIN_ID, publish)

        assert notification.message == "Server maintenance 15:00–16:00"
        assert notification.departments == [SALES, MARKETING]
        assert result.sent == 3
        assert result.failed == 0

    async def test_confirm_without_session_stores_nothing(self, bot, repo):
        composer = PostComposer(SessionStore())

        async def publish(text, departments):
            return await publish_notification(bot, repo, text, departments)

        with pytest.raises(SessionExpiredError):
            await composer.confirm(ADMIN_ID, publish)

        assert await repo.notification.get_notifications() == []
        bot.send_message.assert_not_awaited()
