"""审计日志服务

审计记录只追加，写入失败不影响主流程（只记录警告）。
支持推送式监听：每次追加后，按各监听器的过滤条件重新查询并回调。
"""
import threading
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from database.base_crud import BaseCRUD

AUDIT_ACTION_LABELS: Dict[str, str] = {
    "business.created": "Negocio creado",
    "business.plan_changed": "Plan cambiado",
    "business.suspended": "Negocio suspendido",
    "business.reactivated": "Negocio reactivado",
    "business.status_changed": "Estado del negocio cambiado",
    "business.deleted": "Negocio eliminado",
    "user.blocked": "Usuario bloqueado",
    "user.unblocked": "Usuario desbloqueado",
    "user.role_changed": "Rol cambiado",
    "dispute.status_changed": "Disputa actualizada",
    "dispute.reply_sent": "Respuesta enviada",
    "dispute.assigned": "Disputa asignada",
    "notification.mark_all_read": "Notificaciones leídas",
    "notification.admin": "Notificación al administrador",
    "admin.login": "Admin inició sesión",
    "admin.settings_changed": "Configuración cambiada",
    "collaborator.activated": "Colaborador VIP activado",
    "collaborator.paused": "Colaborador VIP pausado",
    "collaborator.deactivated": "Colaborador VIP desactivado",
    "collaborator.deleted": "Colaborador VIP eliminado",
}

AuditCallback = Callable[[List[Dict[str, Any]]], None]


class AuditLogService:
    """审计日志服务"""

    def __init__(self, db_manager):
        self.db = db_manager
        self._listeners: Dict[int, tuple] = {}
        self._next_listener_id = 0
        self._lock = threading.Lock()

    def log(self, entry: Dict[str, Any]) -> Optional[int]:
        """追加一条审计记录，失败时返回 None"""
        try:
            entry_id = self.db.audit_log.append(entry)
        except Exception as e:
            logger.warning(f"审计日志写入失败: {e}")
            return None
        self._notify_listeners()
        return entry_id

    def list_entries(self, limit: int = 200,
                     actor_uid: Optional[str] = None,
                     target_type: Optional[str] = None,
                     country: Optional[str] = None) -> List[Dict[str, Any]]:
        """查询审计记录（最新在前）；country 为 "ALL" 时不过滤"""
        if country == "ALL":
            country = None
        try:
            entries = self.db.audit_log.list_entries(
                limit=limit, actor_uid=actor_uid,
                target_type=target_type, country=country,
            )
        except Exception as e:
            logger.error(f"审计日志查询失败: {e}")
            return []
        return [BaseCRUD._to_dict(e) for e in entries]

    def on_entries(self, filters: Optional[Dict[str, Any]],
                   callback: AuditCallback) -> Callable[[], None]:
        """注册监听器，立即回调一次当前结果

        Args:
            filters: limit / actor_uid / target_type / country
            callback: 接收过滤后的记录列表

        Returns:
            取消监听的函数
        """
        filters = dict(filters or {})
        with self._lock:
            listener_id = self._next_listener_id
            self._next_listener_id += 1
            self._listeners[listener_id] = (filters, callback)

        self._dispatch(filters, callback)

        def unsubscribe():
            with self._lock:
                self._listeners.pop(listener_id, None)

        return unsubscribe

    def _notify_listeners(self):
        with self._lock:
            listeners = list(self._listeners.values())
        for filters, callback in listeners:
            self._dispatch(filters, callback)

    def _dispatch(self, filters: Dict[str, Any], callback: AuditCallback):
        entries = self.list_entries(
            limit=filters.get("limit", 200),
            actor_uid=filters.get("actor_uid"),
            target_type=filters.get("target_type"),
            country=filters.get("country"),
        )
        try:
            callback(entries)
        except Exception as e:
            logger.warning(f"审计日志监听回调出错: {e}")

    @staticmethod
    def label_for(action: str) -> str:
        return AUDIT_ACTION_LABELS.get(action, action)
