from aiogram.filters.callback_data import CallbackData
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from tgbot.misc.departments import DEPARTMENTS


class MainMenu(CallbackData, prefix="menu"):
    menu: str


class DepartmentMenu(CallbackData, prefix="dept"):
    index: int


def department_kb() -> InlineKeyboardMarkup:
    """
    Клавиатура выбора своего департамента.

    :return: Объект встроенной клавиатуры, по одному департаменту в ряд
    """
    buttons = [
        [
            InlineKeyboardButton(
                text=department, callback_data=DepartmentMenu(index=index).pack()
            )
        ]
        for index, department in enumerate(DEPARTMENTS)
    ]

    return InlineKeyboardMarkup(inline_keyboard=buttons)


def admin_kb() -> InlineKeyboardMarkup:
    """
    Клавиатура главного меню администратора.

    :return: Объект встроенной клавиатуры
    """
    buttons = [
        [
            InlineKeyboardButton(
                text="➕ Создать пост",
                callback_data=MainMenu(menu="create_post").pack(),
            ),
        ],
        [
            InlineKeyboardButton(
                text="🔄 Изменить отдел",
                callback_data=MainMenu(menu="change_department").pack(),
            ),
        ],
    ]

    return InlineKeyboardMarkup(inline_keyboard=buttons)


def user_kb() -> InlineKeyboardMarkup:
    """
    Клавиатура главного меню пользователя.

    :return: Объект встроенной клавиатуры
    """
    buttons = [
        [
            InlineKeyboardButton(
                text="🔄 Изменить отдел",
                callback_data=MainMenu(menu="change_department").pack(),
            ),
        ],
    ]

    return InlineKeyboardMarkup(inline_keyboard=buttons)


def menu_kb(is_admin: bool) -> InlineKeyboardMarkup:
    return admin_kb() if is_admin else user_kb()
