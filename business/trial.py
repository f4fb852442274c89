"""试用期逻辑

- 创建商家资料时开始 7 天免费试用（不需要绑卡）
- 剩余 1 天显示提醒横幅，最后一天显示紧急横幅
- 试用结束后需要选择付费套餐
- CRM 手动覆盖（overridden_by_crm）时跳过全部试用期判断
"""
import math
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from loguru import logger

from business.exceptions import NotFoundError
from config.settings import settings

TRIAL_DAYS = settings.trial_days
DAY_SECONDS = 24 * 60 * 60


@dataclass
class TrialStatus:
    is_in_trial: bool
    is_expired: bool
    days_left: int
    days_used: int
    trial_end_date: Optional[datetime]
    show_reminder_banner: bool
    show_urgent_banner: bool
    overridden_by_crm: bool

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.trial_end_date is not None:
            data["trial_end_date"] = self.trial_end_date.isoformat()
        return data


# 同时兼容 snake_case 与 camelCase 的旧数据
_KEY_ALIASES = {
    "overridden_by_crm": ("overridden_by_crm", "overriddenByCRM"),
    "trial_start_date": ("trial_start_date", "trialStartDate"),
}


def _plan_value(plan_data: Dict[str, Any], key: str) -> Any:
    for alias in _KEY_ALIASES[key]:
        if plan_data.get(alias) is not None:
            return plan_data[alias]
    return None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_aware(value: Union[str, datetime]) -> datetime:
    """ISO 字符串或 datetime 统一为带时区的 UTC 时间（无时区视为 UTC）"""
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def get_trial_status(business: Optional[Dict[str, Any]],
                     now: Optional[datetime] = None) -> TrialStatus:
    """根据商家账户计算试用期状态

    Args:
        business: 含 ``plan_data`` 或 ``planData`` 的字典；缺失视为旧数据
        now: 当前时间（测试时注入）
    """
    business = business or {}
    plan_data = business.get("plan_data") or business.get("planData") or {}

    if _plan_value(plan_data, "overridden_by_crm"):
        return TrialStatus(
            is_in_trial=False, is_expired=False,
            days_left=TRIAL_DAYS, days_used=0, trial_end_date=None,
            show_reminder_banner=False, show_urgent_banner=False,
            overridden_by_crm=True,
        )

    raw_start = _plan_value(plan_data, "trial_start_date")
    if not raw_start:
        # 没有试用数据的旧商家直接视为过期
        return TrialStatus(
            is_in_trial=False, is_expired=True,
            days_left=0, days_used=TRIAL_DAYS, trial_end_date=None,
            show_reminder_banner=False, show_urgent_banner=False,
            overridden_by_crm=False,
        )

    start = _to_aware(raw_start)
    now = _to_aware(now) if now is not None else _utcnow()
    trial_end = start + timedelta(days=TRIAL_DAYS)
    seconds_left = (trial_end - now).total_seconds()
    days_left = max(0, math.ceil(seconds_left / DAY_SECONDS))
    is_expired = seconds_left <= 0

    return TrialStatus(
        is_in_trial=not is_expired,
        is_expired=is_expired,
        days_left=days_left,
        days_used=TRIAL_DAYS - days_left,
        trial_end_date=trial_end,
        show_reminder_banner=days_left == 1,
        show_urgent_banner=days_left == 0 and not is_expired,
        overridden_by_crm=False,
    )


def new_business_plan_data(now: Optional[datetime] = None) -> Dict[str, Any]:
    """新商家的默认套餐数据（Premium 试用 7 天，试用期内团队上限 5 人）"""
    start = _to_aware(now) if now is not None else _utcnow()
    end = start + timedelta(days=TRIAL_DAYS)
    return {
        "plan": "premium",
        "plan_status": "trial",
        "plan_source": "trial",
        "team_member_limit": 5,
        "overridden_by_crm": False,
        "trial_start_date": start.isoformat(),
        "trial_end_date": end.isoformat(),
    }


def format_days_left(days_left: int) -> str:
    if days_left == 0:
        return "Hoy es el último día"
    if days_left == 1:
        return "1 día restante"
    return f"{days_left} días restantes"


class TrialService:
    """试用期服务（读取账户 + 激活付费套餐）"""

    def __init__(self, db_manager):
        self.db = db_manager

    def get_status(self, business_id: str,
                   now: Optional[datetime] = None) -> Optional[TrialStatus]:
        account = self.db.get_account(business_id)
        if account is None:
            return None
        return get_trial_status(account, now=now)

    def activate_plan(self, business_id: str, plan: str,
                      team_member_limit: int) -> Dict[str, Any]:
        """试用结束后用户自助选择套餐"""
        account = self.db.get_account(business_id)
        if account is None:
            raise NotFoundError(f"Negocio no encontrado: {business_id}")

        plan_data = dict(account.get("plan_data") or {})
        plan_data.update({
            "plan": plan,
            "plan_status": "active",
            "plan_source": "self_serve",
            "team_member_limit": team_member_limit,
            "activated_at": _utcnow().isoformat(),
        })
        self.db.profiles.set_plan_data(business_id, plan_data)
        logger.info(f"套餐已激活: {business_id} -> {plan}")
        return plan_data
