"""套餐（Plan）功能开关

套餐等级：free < premium < plus_team < vip
"""
from typing import Any, Dict, Optional

from loguru import logger

from business.exceptions import NotFoundError, ValidationError

PLAN_RANK: Dict[str, int] = {
    "free": 0,
    "premium": 1,
    "plus_team": 2,
    "vip": 3,
}

# 团队成员上限；vip 由后台单独管理，视为不限
TEAM_LIMITS: Dict[str, int] = {
    "free": 0,
    "premium": 0,
    "plus_team": 5,
    "vip": 999,
}

PLAN_LABELS: Dict[str, str] = {
    "free": "Gratis",
    "premium": "Premium",
    "plus_team": "Plus Equipo",
    "vip": "Pro24/7YA Colaboradores",
}

PLAN_PRICES: Dict[str, float] = {
    "free": 0,
    "premium": 9.99,
    "plus_team": 14.99,
    "vip": 0,
}


def _rank(plan: Optional[str]) -> int:
    return PLAN_RANK.get(plan or "free", 0)


def can_create_business(plan: str) -> bool:
    return _rank(plan) >= PLAN_RANK["premium"]


def can_use_team(plan: str) -> bool:
    return _rank(plan) >= PLAN_RANK["plus_team"]


def team_limit(plan: str) -> int:
    return TEAM_LIMITS.get(plan, 0)


def is_premium(plan: str) -> bool:
    return _rank(plan) >= PLAN_RANK["premium"]


def is_plus_team(plan: str) -> bool:
    return _rank(plan) >= PLAN_RANK["plus_team"]


def is_vip(plan: str) -> bool:
    return plan == "vip"


def default_plan_data() -> Dict[str, Any]:
    """后台手动开通时的默认套餐数据"""
    return {
        "plan": "premium",
        "plan_status": "active",
        "plan_source": "crm_override",
        "team_member_limit": 0,
        "overridden_by_crm": True,
    }


def effective_plan(business: Optional[Dict[str, Any]]) -> str:
    """缺少 plan_data 时按 premium 处理"""
    plan_data = (business or {}).get("plan_data") or {}
    return plan_data.get("plan") or "premium"


def effective_team_limit(business: Optional[Dict[str, Any]]) -> int:
    """优先使用账户上的 team_member_limit，否则按套餐默认值"""
    plan_data = (business or {}).get("plan_data") or {}
    limit = plan_data.get("team_member_limit")
    if limit is None:
        return team_limit(effective_plan(business))
    return int(limit)


class PlanService:
    """套餐写入服务（后台使用）"""

    def __init__(self, db_manager, audit=None):
        self.db = db_manager
        self.audit = audit

    def set_plan(self, business_id: str, plan: str,
                 source: str = "crm_override",
                 overrides: Optional[Dict[str, Any]] = None,
                 actor: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """设置商家套餐（覆盖整个 plan_data）

        Args:
            business_id: 商家ID
            plan: free / premium / plus_team / vip
            source: 来源，crm_override 时同时标记 overridden_by_crm
            overrides: 额外覆盖字段
            actor: 操作者 {"uid", "name"}，提供时写入审计日志
        """
        if plan not in PLAN_RANK:
            raise ValidationError(f"Plan inválido: {plan}")
        account = self.db.get_account(business_id)
        if account is None:
            raise NotFoundError(f"Negocio no encontrado: {business_id}")

        plan_data = {
            "plan": plan,
            "plan_status": "active",
            "plan_source": source,
            "team_member_limit": TEAM_LIMITS[plan],
            "overridden_by_crm": source == "crm_override",
        }
        plan_data.update(overrides or {})
        self.db.profiles.set_plan_data(business_id, plan_data)
        logger.info(f"商家套餐已更新: {business_id} -> {plan} ({source})")

        if self.audit is not None and actor:
            self.audit.log({
                "action": "business.plan_changed",
                "actor_uid": actor.get("uid", "system"),
                "actor_name": actor.get("name"),
                "target_id": business_id,
                "target_type": "plan",
                "before": account.get("plan_data"),
                "after": plan_data,
            })
        return plan_data
