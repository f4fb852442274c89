"""商家资料服务

商家资料分为公开部分和私密部分，两者共享同一个 ID（所属用户 ID），
创建和更新都在同一事务中写入。

失败处理：
- 读取类操作出错时记录日志并返回 None / []
- 创建、更新出错时记录日志并继续抛出
"""
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from business.exceptions import (
    NotFoundError, ProfileExistsError, ValidationError,
)
from business.geocoding import Geocoder, has_valid_coordinates
from business.notifications import AdminNotifier
from business.schemas import BusinessProfileInput, BusinessProfileUpdate, parse
from business.trial import new_business_plan_data
from config.locations import get_location_fallback, normalize_country_code
from database.base_crud import BaseCRUD

REQUIRED_FIELDS_MESSAGE = "Faltan datos obligatorios (Nombre, Categoría o Modalidad)."
MODALITIES = ("local", "home", "both")
STATUSES = ("draft", "pending_review", "active", "suspended")

PUBLIC_FIELDS = (
    "business_name", "category", "subcategory", "subcategories",
    "additional_categories", "specialties", "city", "department", "country",
    "modality", "status", "cover_image", "logo_url", "opening_hours",
)
PRIVATE_FIELDS = (
    "description", "email", "phone", "website", "social_media", "address",
    "images", "payment_settings",
)
LOCATION_FIELDS = ("city", "department", "country", "address")


def _listing(public: Dict[str, Any]) -> Dict[str, Any]:
    """公开资料行 → 列表展示结构（坐标无效时使用兜底坐标）"""
    country_code = public.get("country_code") or normalize_country_code(public.get("country"))
    lat, lng = public.get("lat"), public.get("lng")
    if has_valid_coordinates(lat, lng):
        location = {"lat": float(lat), "lng": float(lng)}
    else:
        location = get_location_fallback(public.get("city"), public.get("department"), country_code)

    item = {key: public.get(key) for key in PUBLIC_FIELDS}
    item.update({
        "id": public["id"],
        "country_code": country_code,
        "location": location,
        "rating": public.get("rating") or 0,
        "review_count": public.get("review_count") or 0,
        "subcategories": public.get("subcategories") or [],
        "additional_categories": public.get("additional_categories") or [],
        "specialties": public.get("specialties") or [],
        "created_at": public.get("created_at"),
        "updated_at": public.get("updated_at"),
    })
    return item


class BusinessProfileService:
    """商家资料服务

    Args:
        db_manager: DatabaseManager 实例
        geocoder: 地理编码器，默认按配置创建
        notifier: 管理员通知器，默认按配置创建
        audit: AuditLogService（可选）
    """

    def __init__(self, db_manager, geocoder: Optional[Geocoder] = None,
                 notifier: Optional[AdminNotifier] = None, audit=None):
        self.db = db_manager
        self.geocoder = geocoder or Geocoder()
        self.notifier = notifier or AdminNotifier()
        self.audit = audit

    # ================================================================
    # 创建
    # ================================================================

    def create_profile(self, user_id: str,
                       data: Union[BusinessProfileInput, Dict[str, Any]]) -> Dict[str, Any]:
        """创建商家资料

        一次事务写入：公开资料、私密资料、用户服务商标记、账户（试用期套餐）。

        Raises:
            ValidationError: 缺少用户ID或必填项
            ProfileExistsError: 该用户已有商家资料
        """
        if not user_id:
            raise ValidationError("Se requiere el ID de usuario.")
        data = parse(BusinessProfileInput, data)
        if not data.business_name.strip() or not data.category or not data.modality:
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)
        if data.modality not in MODALITIES:
            raise ValidationError(f"Modalidad inválida: {data.modality}")

        try:
            if self.db.profiles.exists(user_id):
                raise ProfileExistsError()

            location = self._resolve_location(
                data.location.model_dump() if data.location else None,
                data.city, data.department, data.country, data.address,
            )
            dumped = data.model_dump()
            public_fields = {
                "business_name": data.business_name.strip(),
                "category": data.category,
                "subcategory": data.subcategory,
                "subcategories": data.subcategories,
                "additional_categories": data.additional_categories,
                "specialties": data.specialties,
                "city": data.city,
                "department": data.department,
                "country": data.country,
                "country_code": normalize_country_code(data.country),
                "lat": location["lat"],
                "lng": location["lng"],
                "modality": data.modality,
                "status": "active",
                "rating": 0.0,
                "review_count": 0,
                "cover_image": data.images[0] if data.images else None,
                "logo_url": data.logo_url,
                "opening_hours": dumped.get("opening_hours"),
            }
            private_fields = {
                "description": data.description,
                "email": data.email,
                "phone": data.phone,
                "website": data.website,
                "social_media": dumped.get("social_media") or {},
                "address": data.address,
                "images": data.images,
                "payment_settings": dumped.get("payment_settings"),
            }
            plan_data = dumped.get("plan_data") or new_business_plan_data()

            self.db.profiles.create(user_id, public_fields, private_fields,
                                    plan_data, owner_email=data.email)
        except Exception as e:
            logger.error(f"创建商家资料失败 [{user_id}]: {e}")
            raise

        logger.info(f"商家资料已创建: {user_id} ({data.business_name})")
        self.notifier.notify("new_business", {
            "business_name": data.business_name,
            "category": data.category,
            "country": data.country,
            "city": data.city,
            "email": data.email,
            "phone": data.phone,
        })
        if self.audit is not None:
            self.audit.log({
                "action": "business.created",
                "actor_uid": user_id,
                "target_id": user_id,
                "target_name": data.business_name,
                "target_type": "business",
                "country": public_fields["country_code"],
            })
        return {"success": True, "id": user_id}

    def _resolve_location(self, location: Optional[Dict[str, Any]],
                          city: Optional[str], department: Optional[str],
                          country: Optional[str],
                          address: Optional[str]) -> Dict[str, float]:
        """优先使用调用方提供的精确坐标，否则走地理编码链"""
        if location and has_valid_coordinates(location.get("lat"), location.get("lng")):
            return {"lat": float(location["lat"]), "lng": float(location["lng"])}
        resolved = self.geocoder.resolve(city, department, country, address)
        return {"lat": resolved["lat"], "lng": resolved["lng"]}

    # ================================================================
    # 读取
    # ================================================================

    def get_public_businesses(self, country_code: Optional[str] = None) -> List[Dict[str, Any]]:
        """公开商家列表（排除已停用，坐标无效时使用兜底坐标）"""
        try:
            rows = self.db.list_public_businesses(country_code)
        except Exception as e:
            logger.error(f"读取商家列表失败: {e}")
            return []

        results = []
        for row in rows:
            if row.get("status") == "suspended":
                continue
            item = _listing(row)
            if country_code and item["country_code"] != country_code:
                continue
            results.append(item)
        return results

    def get_public_profile(self, business_id: str) -> Optional[Dict[str, Any]]:
        """商家公开详情：公开资料 + 服务 + 员工 + 作品集 + 评价"""
        try:
            public = self.db.get_public_business(business_id)
            if public is None or public.get("status") == "suspended":
                return None
            private = self.db.get_private_business(business_id) or {}

            profile = _listing(public)
            profile["description"] = private.get("description")
            profile["images"] = private.get("images") or []
            profile["services"] = [
                BaseCRUD._to_dict(s)
                for s in self.db.services.get_services(business_id, active_only=True)
            ]
            profile["employees"] = [
                BaseCRUD._to_dict(e)
                for e in self.db.employees.get_employees(business_id, active_only=True)
            ]
            profile["portfolio"] = [
                BaseCRUD._to_dict(p) for p in self.db.portfolio.get_posts(business_id)
            ]
            profile["reviews"] = [
                BaseCRUD._to_dict(r) for r in self.db.reviews.get_reviews(business_id)
            ]
            return profile
        except Exception as e:
            logger.error(f"读取商家详情失败 [{business_id}]: {e}")
            return None

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """合并公开和私密资料，供编辑页面使用"""
        try:
            public = self.db.get_public_business(user_id)
            if public is None:
                return None
            private = self.db.get_private_business(user_id) or {}
            account = self.db.get_account(user_id) or {}

            profile = _listing(public)
            for key in PRIVATE_FIELDS:
                profile[key] = private.get(key)
            profile["images"] = private.get("images") or []
            profile["social_media"] = private.get("social_media") or {}
            profile["plan_data"] = account.get("plan_data")
            return profile
        except Exception as e:
            logger.error(f"读取商家资料失败 [{user_id}]: {e}")
            return None

    # ================================================================
    # 更新
    # ================================================================

    def update_profile(self, user_id: str,
                       partial: Union[BusinessProfileUpdate, Dict[str, Any]]) -> Dict[str, Any]:
        """部分更新商家资料

        - 只写入显式设置的字段，并按公开 / 私密分别路由
        - 更新了图片但未指定封面时，封面取第一张图片
        - 未提供精确坐标且城市 / 省份 / 国家 / 地址有变化时重新地理编码

        Raises:
            NotFoundError: 商家资料不存在
        """
        partial = parse(BusinessProfileUpdate, partial)
        changes = partial.changes()

        try:
            current_public = self.db.get_public_business(user_id)
            if current_public is None:
                raise NotFoundError(f"Perfil de negocio no encontrado: {user_id}")
            current_private = self.db.get_private_business(user_id) or {}

            public_fields = {k: v for k, v in changes.items() if k in PUBLIC_FIELDS}
            private_fields = {k: v for k, v in changes.items() if k in PRIVATE_FIELDS}

            if "images" in changes and "cover_image" not in changes:
                images = changes["images"] or []
                public_fields["cover_image"] = images[0] if images else None

            if "country" in changes:
                public_fields["country_code"] = normalize_country_code(changes["country"])

            location = changes.get("location")
            if location:
                public_fields["lat"] = float(location["lat"])
                public_fields["lng"] = float(location["lng"])
            elif self._location_changed(changes, current_public, current_private):
                merged = {
                    key: changes.get(key, current_public.get(key, current_private.get(key)))
                    for key in ("city", "department", "country")
                }
                merged["address"] = changes.get("address", current_private.get("address"))
                resolved = self._resolve_location(
                    None, merged["city"], merged["department"],
                    merged["country"], merged["address"],
                )
                public_fields["lat"] = resolved["lat"]
                public_fields["lng"] = resolved["lng"]

            if not self.db.profiles.update(user_id, public_fields, private_fields):
                raise NotFoundError(f"Perfil de negocio no encontrado: {user_id}")
        except Exception as e:
            logger.error(f"更新商家资料失败 [{user_id}]: {e}")
            raise

        logger.info(f"商家资料已更新: {user_id} {sorted(changes)}")
        return {"success": True, "id": user_id}

    @staticmethod
    def _location_changed(changes: Dict[str, Any], public: Dict[str, Any],
                          private: Dict[str, Any]) -> bool:
        for key in LOCATION_FIELDS:
            if key not in changes:
                continue
            stored = private.get(key) if key == "address" else public.get(key)
            if (changes[key] or "") != (stored or ""):
                return True
        return False

    # ================================================================
    # 后台管理
    # ================================================================

    def set_status(self, user_id: str, status: str,
                   actor: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """后台停用 / 恢复商家，并写入审计日志"""
        if status not in STATUSES:
            raise ValidationError(f"Estado inválido: {status}")
        current = self.db.get_public_business(user_id)
        if current is None:
            raise NotFoundError(f"Perfil de negocio no encontrado: {user_id}")

        self.db.profiles.set_status(user_id, status)
        logger.info(f"商家状态已变更: {user_id} {current.get('status')} -> {status}")

        if self.audit is not None:
            if status == "suspended":
                action = "business.suspended"
            elif status == "active" and current.get("status") == "suspended":
                action = "business.reactivated"
            else:
                action = "business.status_changed"
            actor = actor or {}
            self.audit.log({
                "action": action,
                "actor_uid": actor.get("uid", "system"),
                "actor_name": actor.get("name"),
                "target_id": user_id,
                "target_name": current.get("business_name"),
                "target_type": "business",
                "before": {"status": current.get("status")},
                "after": {"status": status},
                "country": current.get("country_code"),
            })
        return {"success": True, "id": user_id, "status": status}
