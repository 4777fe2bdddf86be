"""Регистрация пользователя и выбор департамента."""

import logging
from html import escape
from typing import Optional

from aiogram import F, Router
from aiogram.filters import CommandStart
from aiogram.types import CallbackQuery, Message

from infrastructure.database.models.telegram_user import TelegramUser
from infrastructure.database.repo.requests import RequestsRepo
from tgbot.keyboards.user.main import DepartmentMenu, MainMenu, department_kb, menu_kb
from tgbot.misc.departments import department_by_index
from tgbot.misc.errors import ValidationError

logger = logging.getLogger(__name__)

start_router = Router()
start_router.message.filter(F.chat.type == "private")
start_router.callback_query.filter(F.message.chat.type == "private")

WELCOME_MESSAGE = """👋 Добро пожаловать в систему корпоративных уведомлений!

Этот бот создан для информирования сотрудников компании о важных событиях и технических работах.

Когда происходит что-то важное (например, технические проблемы с сервером), администраторы бота отправляют уведомление всем сотрудникам или определенным отделам.

📌 Чтобы начать, выберите ваш отдел из списка ниже:"""


@start_router.message(CommandStart())
async def start(message: Message, user: Optional[TelegramUser]) -> None:
    """Приветствие и главное меню.

    Незарегистрированный пользователь получает выбор департамента.

    Args:
        message: Сообщение пользователя
        user: Пользователь бота или None
    """
    if user and user.department:
        status = "Статус: Администратор\n\n" if user.is_admin else "\n"
        await message.answer(
            f"Добро пожаловать обратно, {escape(message.from_user.first_name)}!\n\n"
            f"Ваш отдел: {user.department}\n"
            f"{status}"
            "Вы будете получать уведомления, адресованные вашему отделу.",
            reply_markup=menu_kb(user.is_admin),
        )
        return

    await message.answer(WELCOME_MESSAGE, reply_markup=department_kb())


@start_router.callback_query(DepartmentMenu.filter())
async def select_department(
    callback: CallbackQuery, callback_data: DepartmentMenu, repo: RequestsRepo
) -> None:
    """Выбор или смена департамента.

    Права администратора определяются выбранным департаментом.
    """
    department = department_by_index(callback_data.index)
    if department is None:
        raise ValidationError("Ошибка выбора отдела")

    user = await repo.telegram_user.set_department(
        telegram_id=callback.from_user.id,
        department=department,
        username=callback.from_user.username,
        first_name=callback.from_user.first_name,
        last_name=callback.from_user.last_name,
    )

    text = f"✅ Отлично!\n\nВаш отдел: {department}\n"
    if user.is_admin:
        text += (
            "Статус: Администратор\n\n"
            "Вы будете получать уведомления, адресованные вашему отделу."
            "\n\nКак администратор, вы можете создавать уведомления для других отделов."
        )
    else:
        text += "\nВы будете получать уведомления, адресованные вашему отделу."

    await callback.message.edit_text(text, reply_markup=menu_kb(user.is_admin))
    await callback.answer(f"Выбран отдел: {department}")


@start_router.callback_query(MainMenu.filter(F.menu == "change_department"))
async def change_department(callback: CallbackQuery) -> None:
    """Смена департамента"""
    await callback.message.edit_text(
        "Выберите новый отдел:", reply_markup=department_kb()
    )
    await callback.answer()
