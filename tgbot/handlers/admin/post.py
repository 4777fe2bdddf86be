"""Создание поста администратором."""

import logging
from html import escape
from typing import Optional

from aiogram import Bot, F, Router
from aiogram.types import CallbackQuery, Message

from infrastructure.database.models.telegram_user import TelegramUser
from infrastructure.database.repo.requests import RequestsRepo
from tgbot.config import Config
from tgbot.keyboards.admin.post import (
    PostAction,
    PostMenu,
    confirmation_kb,
    post_departments_kb,
)
from tgbot.keyboards.user.main import MainMenu, menu_kb
from tgbot.services.composer import PostComposer
from tgbot.services.publisher import publish_notification
from tgbot.services.sessions import PostSession

logger = logging.getLogger(__name__)

post_router = Router()
post_router.message.filter(F.chat.type == "private")
post_router.callback_query.filter(F.message.chat.type == "private")


def confirmation_text(session: PostSession, recipients: int) -> str:
    departments = session.departments
    departments_list = "\n".join(f"• {department}" for department in departments)
    return (
        "📢 Подтвердите публикацию:\n\n"
        f"📝 Текст:\n{escape(session.post_text)}\n\n"
        f"👥 Отделы ({len(departments)}):\n"
        f"{departments_list}\n\n"
        f"📬 Получателей: {recipients}\n\n"
        "Отправить уведомление?"
    )


@post_router.callback_query(MainMenu.filter(F.menu == "create_post"))
async def create_post(
    callback: CallbackQuery, user: Optional[TelegramUser], composer: PostComposer
) -> None:
    """Начало создания поста, только для администраторов"""
    async with composer.store.transaction(callback.from_user.id):
        composer.start(user)
        await callback.message.answer(
            "📝 Отправьте текст уведомления, которое хотите разместить.\n\n"
            "Можете использовать несколько строк. После отправки вы сможете выбрать отделы."
        )

    await callback.answer()


@post_router.message(F.text, ~F.text.startswith("/"))
async def post_text(message: Message, composer: PostComposer) -> None:
    """Текст поста. Сообщения вне создания поста игнорируются."""
    user_id = message.from_user.id
    if user_id not in composer.store:
        return

    async with composer.store.transaction(user_id):
        session = composer.accept_text(user_id, message.text)
        if session is None:
            return

        await message.answer(
            "📝 Текст поста сохранен!\n\n"
            "Теперь выберите отделы, которым нужно отправить это уведомление:",
            reply_markup=post_departments_kb(),
        )


@post_router.callback_query(PostMenu.filter(F.action == PostAction.TOGGLE))
async def toggle_department(
    callback: CallbackQuery, callback_data: PostMenu, composer: PostComposer
) -> None:
    """Переключение департамента"""
    user_id = callback.from_user.id
    index = callback_data.index if callback_data.index is not None else -1

    async with composer.store.transaction(user_id):
        session, department, added = composer.toggle_department(user_id, index)
        await callback.message.edit_reply_markup(
            reply_markup=post_departments_kb(session.selected_departments)
        )

    await callback.answer(f"Выбран: {department}" if added else f"Убран: {department}")


@post_router.callback_query(PostMenu.filter(F.action == PostAction.TOGGLE_ALL))
async def toggle_all_departments(
    callback: CallbackQuery, composer: PostComposer
) -> None:
    """Выбрать все / снять все"""
    user_id = callback.from_user.id

    async with composer.store.transaction(user_id):
        session, all_selected = composer.toggle_all(user_id)
        await callback.message.edit_reply_markup(
            reply_markup=post_departments_kb(session.selected_departments)
        )

    await callback.answer("Все отделы выбраны" if all_selected else "Все отделы сняты")


@post_router.callback_query(PostMenu.filter(F.action == PostAction.DONE))
async def done_selecting(
    callback: CallbackQuery, repo: RequestsRepo, composer: PostComposer
) -> None:
    """Переход к подтверждению с предпросмотром кол-ва получателей"""
    user_id = callback.from_user.id

    async with composer.store.transaction(user_id):
        session = composer.finish_selection(user_id)

        stats = await repo.telegram_user.get_department_stats()
        recipients = sum(
            row["count"]
            for row in stats
            if row["department"] in session.selected_departments
        )

        await callback.message.edit_text(
            confirmation_text(session, recipients), reply_markup=confirmation_kb()
        )

    await callback.answer()


@post_router.callback_query(PostMenu.filter(F.action == PostAction.CONFIRM))
async def confirm_publish(
    callback: CallbackQuery,
    bot: Bot,
    repo: RequestsRepo,
    user: Optional[TelegramUser],
    composer: PostComposer,
    config: Config,
) -> None:
    """Публикация поста"""
    user_id = callback.from_user.id

    async def publish(text: str, departments: list[str]):
        return await publish_notification(
            bot,
            repo,
            text,
            departments,
            created_by=user.id if user else None,
            settings=config.broadcast,
        )

    async with composer.store.transaction(user_id):
        session, (notification, result) = await composer.confirm(user_id, publish)

    await callback.message.edit_text(
        "✅ Уведомление опубликовано!\n\n"
        "📊 Статистика:\n"
        f"✅ Отправлено: {result.sent}\n"
        f"❌ Ошибок: {result.failed}\n\n"
        f"👥 Отделы: {', '.join(notification.departments)}"
    )
    await callback.message.answer(
        "Выберите действие:", reply_markup=menu_kb(bool(user and user.is_admin))
    )
    await callback.answer("Уведомление опубликовано!")


@post_router.callback_query(PostMenu.filter(F.action == PostAction.CANCEL))
async def cancel_post(
    callback: CallbackQuery, user: Optional[TelegramUser], composer: PostComposer
) -> None:
    """Отмена создания поста с любого шага"""
    async with composer.store.lock(callback.from_user.id):
        composer.cancel(callback.from_user.id)

    await callback.message.edit_text("❌ Создание поста отменено.")
    await callback.message.answer(
        "Выберите действие:", reply_markup=menu_kb(bool(user and user.is_admin))
    )
    await callback.answer("Отменено")
