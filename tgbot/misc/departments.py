"""Справочник департаментов компании."""

from typing import Iterable, Optional

DEPARTMENTS: tuple[str, ...] = (
    "Департамент продаж",
    "Департамент продуктовой логистики",
    "Департамент транспортно-складской логистики",
    "Департамент маркетинга",
    "КАД",
    "Кадровый департамент (HR)",
    "Финансовый департамент",
    "Юридический департамент",
    "Департамент информационных технологий",
)

# Сотрудники этого департамента получают права администратора
IT_DEPARTMENT = "Департамент информационных технологий"


def is_valid_department(department: str) -> bool:
    """Проверяет, входит ли департамент в справочник.

    Args:
        department: Название департамента

    Returns:
        True если департамент есть в справочнике
    """
    return department in DEPARTMENTS


def is_admin_department(department: Optional[str]) -> bool:
    """Определяет, дает ли департамент права администратора.

    Args:
        department: Название департамента

    Returns:
        True только для IT департамента
    """
    return department == IT_DEPARTMENT


def department_by_index(index: int) -> Optional[str]:
    """Возвращает департамент по индексу в справочнике.

    Args:
        index: Индекс департамента

    Returns:
        Название департамента или None, если индекс вне справочника
    """
    if 0 <= index < len(DEPARTMENTS):
        return DEPARTMENTS[index]
    return None


def ordered_departments(departments: Iterable[str]) -> list[str]:
    """Сортирует набор департаментов в порядке справочника, убирая дубликаты."""
    selected = set(departments)
    return [department for department in DEPARTMENTS if department in selected]
