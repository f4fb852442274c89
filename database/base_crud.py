"""通用 CRUD 基类。

为所有仓库提供按主键读取、条件查询、更新、删除等通用能力。
所有方法都支持传入外部会话（session），用于在同一事务中组合多个操作；
不传时自行创建会话并提交。
"""
from typing import Optional, List, Dict, Any, Type, TypeVar
from datetime import datetime
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from .connection import DatabaseConnection
from .models import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD:
    """仓库基类。

    Attributes:
        conn: 数据库连接管理器。
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        self.conn = conn

    def _get_session(self) -> Session:
        return self.conn.get_session()

    def get_by_id(self, model: Type[ModelT], record_id: Any,
                  session: Optional[Session] = None) -> Optional[ModelT]:
        """按主键获取记录，不存在返回 None。"""
        if session:
            return session.get(model, record_id)

        with self._get_session() as sess:
            return sess.get(model, record_id)

    def get_all(self, model: Type[ModelT],
                filters: Optional[Dict[str, Any]] = None,
                order_by: Optional[Any] = None,
                session: Optional[Session] = None) -> List[ModelT]:
        """按等值条件查询记录列表。

        Args:
            model: ORM 模型类。
            filters: {列名: 值} 等值过滤条件。
            order_by: 排序表达式（如 ``Model.created_at.desc()``）。
            session: 外部会话（可选）。
        """
        def _query(sess):
            query = sess.query(model)
            if filters:
                query = query.filter_by(**filters)
            if order_by is not None:
                query = query.order_by(order_by)
            return query.all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def update_by_id(self, model: Type[ModelT], record_id: Any,
                     session: Optional[Session] = None,
                     **fields: Any) -> Optional[ModelT]:
        """按主键更新字段，记录不存在返回 None。

        模型带 updated_at 列时自动刷新为当前时间。
        """
        def _do(sess):
            obj = sess.get(model, record_id)
            if obj is None:
                return None
            for key, value in fields.items():
                setattr(obj, key, value)
            if hasattr(model, "updated_at") and "updated_at" not in fields:
                obj.updated_at = datetime.utcnow()
            sess.flush()
            return obj

        if session:
            return _do(session)

        with self._get_session() as sess:
            obj = _do(sess)
            sess.commit()
            return obj

    def delete_by_id(self, model: Type[ModelT], record_id: Any,
                     session: Optional[Session] = None) -> bool:
        """按主键删除记录，返回是否删除成功。"""
        def _do(sess):
            obj = sess.get(model, record_id)
            if obj is None:
                return False
            sess.delete(obj)
            sess.flush()
            return True

        if session:
            return _do(session)

        with self._get_session() as sess:
            deleted = _do(sess)
            sess.commit()
            return deleted

    @staticmethod
    def _to_dict(obj: Optional[Base]) -> Optional[Dict[str, Any]]:
        """ORM 对象转为普通字典（仅列属性）。"""
        if obj is None:
            return None
        return {
            attr.key: getattr(obj, attr.key)
            for attr in inspect(obj).mapper.column_attrs
        }
