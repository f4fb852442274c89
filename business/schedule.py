"""营业时间与展示格式工具

营业时间支持两种结构：
- 员工排班：{"mon": {"enabled", "start", "end"}, ...}
- 商家营业时间：{"monday": {"open", "close", "closed"}, ...}
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

DAY_KEYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
LONG_DAY_KEYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

DAY_LABELS = {
    "mon": "Lunes",
    "tue": "Martes",
    "wed": "Miércoles",
    "thu": "Jueves",
    "fri": "Viernes",
    "sat": "Sábado",
    "sun": "Domingo",
}

CURRENCY_SYMBOLS = {
    "HNL": "L", "USD": "$", "GTQ": "Q", "NIO": "C$", "CRC": "₡",
    "MXN": "$", "COP": "$", "PEN": "S/", "EUR": "€", "BRL": "R$",
}


def time_to_minutes(value: str) -> int:
    """"HH:MM" 转为当天分钟数"""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def get_day_label(key: str) -> str:
    return DAY_LABELS.get(key, key)


def _day_window(schedule: Dict[str, Any], weekday: int):
    """返回某天的 (start, end)，不营业返回 None；weekday 0 为周一"""
    day = schedule.get(DAY_KEYS[weekday]) or schedule.get(LONG_DAY_KEYS[weekday])
    if not day:
        return None
    if "enabled" in day or "start" in day:
        if not day.get("enabled"):
            return None
        return day.get("start"), day.get("end")
    if day.get("closed"):
        return None
    return day.get("open"), day.get("close")


def is_business_open(schedule: Optional[Dict[str, Any]],
                     now: Optional[datetime] = None) -> Dict[str, Any]:
    """判断当前是否营业

    Returns:
        {"is_open", "next_status_time", "next_status_label"}
    """
    if not schedule:
        return {"is_open": False, "next_status_time": None,
                "next_status_label": "Horario no disponible"}

    now = now or datetime.now()
    current = now.hour * 60 + now.minute
    today = now.weekday()

    window = _day_window(schedule, today)
    if window and window[0] and window[1]:
        start, end = window
        if time_to_minutes(start) <= current < time_to_minutes(end):
            return {"is_open": True, "next_status_time": end,
                    "next_status_label": f"Cierra a las {end}"}
        if current < time_to_minutes(start):
            return {"is_open": False, "next_status_time": start,
                    "next_status_label": f"Abre hoy a las {start}"}

    for offset in range(1, 8):
        weekday = (now + timedelta(days=offset)).weekday()
        window = _day_window(schedule, weekday)
        if window and window[0]:
            day_key = DAY_KEYS[weekday]
            label = "mañana" if offset == 1 else get_day_label(day_key)
            return {"is_open": False, "next_status_time": window[0],
                    "next_status_label": f"Abre {label} a las {window[0]}"}

    return {"is_open": False, "next_status_time": None,
            "next_status_label": "Cerrado ahora"}


def format_duration(minutes: int) -> str:
    """45 -> "45 min"；60 -> "1 h"；90 -> "1 h 30 min" """
    minutes = int(minutes or 0)
    if minutes < 60:
        return f"{minutes} min"
    hours, rest = divmod(minutes, 60)
    return f"{hours} h" if rest == 0 else f"{hours} h {rest} min"


def format_price(price: float, currency: str = "HNL",
                 variable: bool = False) -> str:
    """250 -> "L 250.00"；价格可变时加 "Desde" 前缀"""
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    text = f"{symbol} {float(price or 0):,.2f}"
    return f"Desde {text}" if variable else text
