"""收藏与潜在客户

收藏写入失败会抛出；收藏时顺带写入的潜在客户记录失败只记录警告。
"""
from typing import Any, Dict, List, Optional

from loguru import logger

from business.exceptions import ValidationError
from database.base_crud import BaseCRUD


class FavoritesService:

    def __init__(self, db_manager):
        self.db = db_manager

    def toggle_favorite(self, user_id: str, user_info: Optional[Dict[str, Any]],
                        business: Dict[str, Any]) -> bool:
        """切换收藏，返回切换后是否处于收藏状态"""
        if not user_id or not (business or {}).get("id"):
            raise ValidationError("Faltan el usuario o el negocio.")

        favorited = self.db.favorites.toggle(user_id, business)
        if favorited:
            user_info = user_info or {}
            try:
                self.db.leads.add({
                    "business_id": business["id"],
                    "user_id": user_id,
                    "user_name": user_info.get("name"),
                    "user_email": user_info.get("email"),
                })
            except Exception as e:
                logger.warning(f"潜在客户记录写入失败（已忽略）: {e}")
        return favorited

    def is_favorited(self, user_id: str, business_id: str) -> bool:
        try:
            return self.db.favorites.find(user_id, business_id) is not None
        except Exception as e:
            logger.error(f"读取收藏状态失败: {e}")
            return False

    def get_favorites(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            return [BaseCRUD._to_dict(f) for f in self.db.favorites.get_favorites(user_id)]
        except Exception as e:
            logger.error(f"读取收藏列表失败 [{user_id}]: {e}")
            return []

    def get_leads(self, business_id: str) -> List[Dict[str, Any]]:
        try:
            return [BaseCRUD._to_dict(l) for l in self.db.leads.get_leads(business_id)]
        except Exception as e:
            logger.error(f"读取潜在客户失败 [{business_id}]: {e}")
            return []
