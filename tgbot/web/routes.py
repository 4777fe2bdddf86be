"""HTTP API веб-панели администратора."""

import json
import logging

from aiohttp import web
from pydantic import ValidationError as SchemaValidationError

from infrastructure.database.repo.requests import RequestsRepo
from tgbot.misc.errors import DependencyError
from tgbot.services.publisher import publish_notification
from tgbot.web.keys import bot_key, broadcast_config_key, session_pool_key
from tgbot.web.schemas import NotificationCreate

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

DEFAULT_LIMIT = 50
MAX_LIMIT = 500


def _invalid(details: list) -> web.Response:
    return web.json_response(
        {"error": "Invalid request data", "details": details}, status=400
    )


@routes.get("/api/departments/stats")
async def department_stats(request: web.Request) -> web.Response:
    """Кол-во зарегистрированных пользователей по департаментам"""
    try:
        async with request.app[session_pool_key]() as session:
            stats = await RequestsRepo(session).telegram_user.get_department_stats()
    except DependencyError:
        return web.json_response(
            {"error": "Failed to fetch department statistics"}, status=500
        )

    return web.json_response(stats)


@routes.post("/api/notifications")
async def create_notification(request: web.Request) -> web.Response:
    """Создание и рассылка уведомления"""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _invalid([{"type": "json_invalid", "msg": "Body must be valid JSON"}])

    try:
        payload = NotificationCreate.model_validate(body)
    except SchemaValidationError as e:
        return _invalid(json.loads(e.json(include_url=False)))

    try:
        async with request.app[session_pool_key]() as session:
            notification, result = await publish_notification(
                request.app[bot_key],
                RequestsRepo(session),
                payload.message,
                payload.departments,
                created_by=payload.created_by,
                settings=request.app[broadcast_config_key],
            )
    except DependencyError:
        return web.json_response(
            {"error": "Failed to create notification"}, status=500
        )

    return web.json_response(
        {
            "notification": notification.to_dict(),
            "sent": result.sent,
            "failed": result.failed,
        }
    )


@routes.get("/api/notifications")
async def list_notifications(request: web.Request) -> web.Response:
    """История уведомлений, сначала новые"""
    raw_limit = request.query.get("limit")
    try:
        limit = int(raw_limit) if raw_limit is not None else DEFAULT_LIMIT
    except ValueError:
        limit = None

    if limit is None or not 1 <= limit <= MAX_LIMIT:
        return _invalid(
            [
                {
                    "type": "limit_invalid",
                    "loc": ["query", "limit"],
                    "msg": f"limit must be an integer between 1 and {MAX_LIMIT}",
                }
            ]
        )

    try:
        async with request.app[session_pool_key]() as session:
            notifications = await RequestsRepo(session).notification.get_notifications(
                limit
            )
    except DependencyError:
        return web.json_response(
            {"error": "Failed to fetch notifications"}, status=500
        )

    return web.json_response([notification.to_dict() for notification in notifications])
