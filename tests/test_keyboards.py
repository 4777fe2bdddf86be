from tgbot.keyboards.admin.post import PostAction, PostMenu, post_departments_kb
from tgbot.keyboards.user.main import DepartmentMenu, menu_kb
from tgbot.misc.departments import DEPARTMENTS


def button_texts(markup) -> list[str]:
    return [button.text for row in markup.inline_keyboard for button in row]


class TestPostDepartmentsKeyboard:
    """Test cases for the department selection keyboard"""

    def test_nothing_selected(self):
        texts = button_texts(post_departments_kb())

        assert texts[: len(DEPARTMENTS)] == [f"☐ {d}" for d in DEPARTMENTS]
        assert "✅ Выбрать все" in texts
        assert not any(text.startswith("✔️ Готово") for text in texts)
        assert texts[-1] == "❌ Отменить"

    def test_done_button_shows_selection_size(self):
        texts = button_texts(post_departments_kb({DEPARTMENTS[0], DEPARTMENTS[2]}))

        assert f"✅ {DEPARTMENTS[0]}" in texts
        assert f"☐ {DEPARTMENTS[1]}" in texts
        assert "✔️ Готово (2)" in texts

    def test_all_selected_offers_to_clear(self):
        texts = button_texts(post_departments_kb(DEPARTMENTS))

        assert "❌ Снять все" in texts
        assert "✔️ Готово (9)" in texts


class TestCallbackData:
    """Test cases for callback payloads"""

    def test_toggle_payload_keeps_index(self):
        packed = PostMenu(action=PostAction.TOGGLE, index=4).pack()
        data = PostMenu.unpack(packed)

        assert data.action == PostAction.TOGGLE
        assert data.index == 4

    def test_payload_without_index(self):
        data = PostMenu.unpack(PostMenu(action=PostAction.DONE).pack())

        assert data.action == PostAction.DONE
        assert data.index is None

    def test_callback_payloads_fit_telegram_limit(self):
        """Telegram rejects callback data longer than 64 bytes"""
        for index in range(len(DEPARTMENTS)):
            assert len(DepartmentMenu(index=index).pack().encode()) <= 64

        markup = post_departments_kb(DEPARTMENTS)
        for row in markup.inline_keyboard:
            for button in row:
                assert len(button.callback_data.encode()) <= 64

    def test_menu_depends_on_admin_rights(self):
        assert len(button_texts(menu_kb(True))) > len(button_texts(menu_kb(False)))
