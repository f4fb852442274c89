"""管理员通知

- AdminNotifier：业务事件发生后向通知接口发送 POST（发出即忘，失败只记 debug 日志）
- render_admin_message：通知接口收到请求后生成纯文本摘要
"""
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import httpx
from loguru import logger

from business.exceptions import ValidationError
from config.settings import settings

NOTIFICATION_TYPES = ("new_collaborator_request", "new_business", "plan_upgrade")


class AdminNotifier:
    """管理员通知发送器

    Args:
        url: 通知接口的绝对地址，为空时不发送
        client: 可注入的 httpx.Client
        background: 是否在后台线程中发送（测试时设为 False）
    """

    def __init__(self, url: Optional[str] = None,
                 client: Optional[httpx.Client] = None,
                 background: bool = True):
        self.url = url if url is not None else settings.notify_admin_url
        self._client = client
        self.background = background

    def notify(self, notification_type: str, data: Dict[str, Any]) -> None:
        if not self.url:
            logger.debug(f"未配置管理员通知地址，跳过通知: {notification_type}")
            return
        payload = {"type": notification_type, "data": data}
        if self.background:
            threading.Thread(target=self._send, args=(payload,), daemon=True).start()
        else:
            self._send(payload)

    def _send(self, payload: Dict[str, Any]) -> None:
        try:
            if self._client is not None:
                self._client.post(self.url, json=payload)
            else:
                with httpx.Client(timeout=10.0) as client:
                    client.post(self.url, json=payload)
        except Exception as e:
            logger.debug(f"管理员通知发送失败（已忽略）: {e}")


def _now_label() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def _lines(pairs) -> str:
    return "\n".join(f"{label}: {value or '-'}" for label, value in pairs)


def render_admin_message(notification_type: str,
                         data: Dict[str, Any]) -> Tuple[str, str]:
    """生成通知的标题和纯文本正文

    Raises:
        ValidationError: 未知的通知类型
    """
    data = data or {}
    if notification_type == "new_business":
        subject = f"Nuevo negocio: {data.get('business_name') or 'Sin nombre'}"
        body = _lines([
            ("Categoría", data.get("category")),
            ("País", data.get("country")),
            ("Ciudad", data.get("city")),
            ("Email", data.get("email")),
            ("Teléfono", data.get("phone")),
            ("Registrado", _now_label()),
        ])
    elif notification_type == "plan_upgrade":
        new_plan = str(data.get("new_plan") or "").upper()
        subject = f"Plan {new_plan} asignado a {data.get('business_name') or 'negocio'}"
        pairs = []
        if data.get("old_plan"):
            pairs.append(("Plan anterior", str(data["old_plan"]).upper()))
        pairs += [
            ("Plan nuevo", new_plan),
            ("Actualizado por", data.get("admin_email")),
            ("Fecha", _now_label()),
        ]
        body = _lines(pairs)
    elif notification_type == "new_collaborator_request":
        subject = f"Nueva solicitud de colaborador: {data.get('name') or 'Sin nombre'}"
        body = _lines([
            ("Email", data.get("email")),
            ("Teléfono", data.get("phone")),
            ("País", data.get("country")),
            ("Mensaje", data.get("message")),
            ("Recibido", _now_label()),
        ])
    else:
        raise ValidationError("Tipo de notificación desconocido.")
    return subject, body
