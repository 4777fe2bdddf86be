from enum import Enum
from typing import Iterable, Optional

from aiogram.filters.callback_data import CallbackData
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from tgbot.misc.departments import DEPARTMENTS


class PostAction(str, Enum):
    TOGGLE = "toggle"
    TOGGLE_ALL = "toggle_all"
    DONE = "done"
    CONFIRM = "confirm"
    CANCEL = "cancel"


class PostMenu(CallbackData, prefix="post"):
    action: PostAction
    index: Optional[int] = None


def post_departments_kb(selected: Iterable[str] = ()) -> InlineKeyboardMarkup:
    """Клавиатура выбора департаментов для поста

    :param selected: Уже выбранные департаменты
    :return: Объект встроенной клавиатуры
    """
    selected = set(selected)
    buttons = [
        [
            InlineKeyboardButton(
                text=f"{'✅' if department in selected else '☐'} {department}",
                callback_data=PostMenu(action=PostAction.TOGGLE, index=index).pack(),
            )
        ]
        for index, department in enumerate(DEPARTMENTS)
    ]

    all_selected = len(selected) == len(DEPARTMENTS)
    buttons.append(
        [
            InlineKeyboardButton(
                text="❌ Снять все" if all_selected else "✅ Выбрать все",
                callback_data=PostMenu(action=PostAction.TOGGLE_ALL).pack(),
            )
        ]
    )

    # Кнопка готовности только при непустом выборе
    if selected:
        buttons.append(
            [
                InlineKeyboardButton(
                    text=f"✔️ Готово ({len(selected)})",
                    callback_data=PostMenu(action=PostAction.DONE).pack(),
                )
            ]
        )

    buttons.append(
        [
            InlineKeyboardButton(
                text="❌ Отменить",
                callback_data=PostMenu(action=PostAction.CANCEL).pack(),
            )
        ]
    )

    return InlineKeyboardMarkup(inline_keyboard=buttons)


def confirmation_kb() -> InlineKeyboardMarkup:
    """Клавиатура подтверждения публикации

    :return: Объект встроенной клавиатуры
    """
    buttons = [
        [
            InlineKeyboardButton(
                text="✅ Опубликовать",
                callback_data=PostMenu(action=PostAction.CONFIRM).pack(),
            ),
        ],
        [
            InlineKeyboardButton(
                text="❌ Отменить",
                callback_data=PostMenu(action=PostAction.CANCEL).pack(),
            ),
        ],
    ]

    return InlineKeyboardMarkup(inline_keyboard=buttons)
