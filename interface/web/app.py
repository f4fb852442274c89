"""Marketplace HTTP API

基于 FastAPI 提供商家目录、商家资料管理和后台接口。

路由：
- GET    /health                                   → 健康检查
- GET    /api/businesses                           → 商家列表（country / q / status）
- GET    /api/businesses/{id}                      → 商家公开详情
- POST   /api/businesses/{user_id}                 → 创建商家资料
- GET    /api/businesses/{user_id}/profile         → 编辑用的合并资料
- PATCH  /api/businesses/{user_id}/profile         → 部分更新
- POST   /api/businesses/{id}/images               → 上传图片
- GET    /api/businesses/{id}/trial                → 试用期状态
- 服务 / 员工 / 作品集 / 评价 子资源
- 预约（按时间范围 / 员工 / 客户）与客户档案（CRM）子资源
- GET    /api/users/{user_id}/favorites            → 收藏列表
- POST   /api/users/{user_id}/favorites/{id}       → 切换收藏
- GET    /api/taxonomy, /api/countries             → 静态目录
- POST   /api/notify-admin                         → 管理员通知
- GET    /api/admin/audit                          → 审计日志
- PATCH  /api/admin/businesses/{id}/status         → 停用 / 恢复
- PUT    /api/admin/businesses/{id}/plan           → 设置套餐

认证：配置了 web_api_token 时，写操作和后台接口需要
    Authorization: Bearer <web_api_token>

错误统一返回 {"error": "..."}：
    ValidationError → 400, NotFoundError → 404,
    ProfileExistsError / DuplicateCustomerError → 409,
    UploadError → 400, 请求体校验失败 → 400, 其他 → 500
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from business.audit import AuditLogService
from business.booking import AppointmentService, CustomerService
from business.catalog_service import (
    EmployeeService, PortfolioService, ReviewsService, ServicesService,
)
from business.exceptions import (
    DuplicateCustomerError, MarketplaceError, NotFoundError, ProfileExistsError,
    UploadError, ValidationError,
)
from business.favorites import FavoritesService
from business.notifications import NOTIFICATION_TYPES, render_admin_message
from business.plans import PlanService
from business.profile_service import BusinessProfileService
from business.search import filter_businesses, find_suggestion
from business.storage import StorageService
from business.trial import TrialService
from config.locations import COUNTRIES, normalize_country_code
from config.settings import settings
from config.taxonomy import TAXONOMY

API_VERSION = "1.0.0"


def _status_for(exc: MarketplaceError) -> int:
    if isinstance(exc, (ProfileExistsError, DuplicateCustomerError)):
        return 409
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (ValidationError, UploadError)):
        return 400
    return 500


def create_app(db_manager, profile_service: Optional[BusinessProfileService] = None,
               storage: Optional[StorageService] = None,
               audit: Optional[AuditLogService] = None,
               api_token: Optional[str] = None) -> FastAPI:
    """创建 FastAPI 应用

    Args:
        db_manager: DatabaseManager 实例
        profile_service: 商家资料服务，默认按配置创建
        storage: 图片存储服务，默认按配置创建
        audit: 审计日志服务，默认基于 db_manager 创建
        api_token: Bearer token，默认取 settings.web_api_token，为空时不校验
    """
    audit = audit or AuditLogService(db_manager)
    profiles = profile_service or BusinessProfileService(db_manager, audit=audit)
    if profiles.audit is None:
        profiles.audit = audit
    services = ServicesService(db_manager)
    employees = EmployeeService(db_manager)
    portfolio = PortfolioService(db_manager)
    reviews = ReviewsService(db_manager)
    favorites = FavoritesService(db_manager)
    trials = TrialService(db_manager)
    customers = CustomerService(db_manager)
    appointments = AppointmentService(db_manager, customers=customers)
    plans = PlanService(db_manager, audit=audit)
    token = settings.web_api_token if api_token is None else api_token

    app = FastAPI(
        title="Marketplace API",
        description="Directorio de negocios y servicios locales",
        version=API_VERSION,
    )

    def get_current_user(request: Request):
        """从请求头中验证 token"""
        if not token:
            return True
        auth = request.headers.get("Authorization", "")
        if auth.startswith("Bearer ") and auth[7:] == token:
            return True
        raise HTTPException(status_code=401, detail="No autorizado.")

    @app.exception_handler(MarketplaceError)
    async def marketplace_error_handler(request: Request, exc: MarketplaceError):
        status = _status_for(exc)
        if status == 500:
            logger.error(f"请求处理出错 {request.url.path}: {exc}")
        return JSONResponse(status_code=status, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = sorted({
            ".".join(str(part) for part in error["loc"] if part != "body") or "datos"
            for error in exc.errors()
        })
        return JSONResponse(status_code=400,
                            content={"error": f"Datos inválidos: {', '.join(fields)}."})

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"请求处理出错 {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Error interno del servidor."})

    # ==================== 健康检查 ====================

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": API_VERSION}

    # ==================== 静态目录 ====================

    @app.get("/api/taxonomy")
    async def taxonomy():
        return TAXONOMY

    @app.get("/api/countries")
    async def countries():
        return list(COUNTRIES.values())

    # ==================== 商家目录 ====================

    @app.get("/api/businesses")
    def list_businesses(country: Optional[str] = None, q: Optional[str] = None,
                        status: Optional[str] = None):
        country_code = normalize_country_code(country) if country else None
        items = profiles.get_public_businesses(country_code)
        results = filter_businesses(items, term=q, country_code=country_code,
                                    status_filter=status)
        suggestion = find_suggestion(q) if q and not results else None
        return {"businesses": results, "count": len(results), "suggestion": suggestion}

    @app.get("/api/businesses/{business_id}")
    def get_business(business_id: str):
        profile = profiles.get_public_profile(business_id)
        if profile is None:
            raise NotFoundError(f"Negocio no encontrado: {business_id}")
        return profile

    # ==================== 商家资料 ====================

    @app.post("/api/businesses/{user_id}", status_code=201)
    def create_business(user_id: str, data: Dict[str, Any],
                        _=Depends(get_current_user)):
        return profiles.create_profile(user_id, data)

    @app.get("/api/businesses/{user_id}/profile")
    def get_business_profile(user_id: str, _=Depends(get_current_user)):
        profile = profiles.get_profile(user_id)
        if profile is None:
            raise NotFoundError(f"Perfil de negocio no encontrado: {user_id}")
        return profile

    @app.patch("/api/businesses/{user_id}/profile")
    def update_business_profile(user_id: str, data: Dict[str, Any],
                                _=Depends(get_current_user)):
        return profiles.update_profile(user_id, data)

    @app.post("/api/businesses/{business_id}/images")
    def upload_images(business_id: str, subresource: str = "gallery",
                      files: List[UploadFile] = File(...),
                      _=Depends(get_current_user)):
        store = storage or StorageService()
        urls, errors = store.upload_images(
            business_id, subresource, [(f.file, f.filename, f.content_type) for f in files],
        )
        return {
            "urls": urls,
            "errors": [{"filename": e.filename, "reason": e.reason} for e in errors],
        }

    @app.get("/api/businesses/{business_id}/trial")
    def get_trial(business_id: str):
        status = trials.get_status(business_id)
        if status is None:
            raise NotFoundError(f"Negocio no encontrado: {business_id}")
        return status.to_dict()

    # ==================== 服务 ====================

    @app.get("/api/businesses/{business_id}/services")
    def list_services(business_id: str, active_only: bool = False):
        return services.get_services(business_id, active_only=active_only)

    @app.post("/api/businesses/{business_id}/services", status_code=201)
    def add_service(business_id: str, data: Dict[str, Any], _=Depends(get_current_user)):
        return {"id": services.add_service(business_id, data)}

    @app.patch("/api/businesses/{business_id}/services/{service_id}")
    def update_service(business_id: str, service_id: int, data: Dict[str, Any],
                       _=Depends(get_current_user)):
        return services.update_service(business_id, service_id, data)

    @app.delete("/api/businesses/{business_id}/services/{service_id}")
    def delete_service(business_id: str, service_id: int, _=Depends(get_current_user)):
        services.delete_service(business_id, service_id)
        return {"success": True}

    # ==================== 员工 ====================

    @app.get("/api/businesses/{business_id}/employees")
    def list_employees(business_id: str):
        return employees.get_employees(business_id)

    @app.post("/api/businesses/{business_id}/employees", status_code=201)
    def add_employee(business_id: str, data: Dict[str, Any], _=Depends(get_current_user)):
        return {"id": employees.add_employee(business_id, data)}

    @app.patch("/api/businesses/{business_id}/employees/{employee_id}")
    def update_employee(business_id: str, employee_id: int, data: Dict[str, Any],
                        _=Depends(get_current_user)):
        return employees.update_employee(business_id, employee_id, data)

    @app.delete("/api/businesses/{business_id}/employees/{employee_id}")
    def delete_employee(business_id: str, employee_id: int, _=Depends(get_current_user)):
        employees.delete_employee(business_id, employee_id)
        return {"success": True}

    # ==================== 作品集 ====================

    @app.get("/api/businesses/{business_id}/portfolio")
    def list_portfolio(business_id: str):
        return portfolio.get_posts(business_id)

    @app.post("/api/businesses/{business_id}/portfolio", status_code=201)
    def add_portfolio_post(business_id: str, data: Dict[str, Any],
                           _=Depends(get_current_user)):
        return {"id": portfolio.add_post(business_id, data)}

    @app.delete("/api/businesses/{business_id}/portfolio/{post_id}")
    def delete_portfolio_post(business_id: str, post_id: int, _=Depends(get_current_user)):
        portfolio.delete_post(business_id, post_id)
        return {"success": True}

    # ==================== 评价 ====================

    @app.get("/api/businesses/{business_id}/reviews")
    def list_reviews(business_id: str):
        return reviews.get_reviews(business_id)

    @app.post("/api/businesses/{business_id}/reviews", status_code=201)
    def add_review(business_id: str, data: Dict[str, Any], _=Depends(get_current_user)):
        return reviews.add_review(business_id, data)

    # ==================== 预约 ====================

    @app.get("/api/businesses/{business_id}/appointments")
    def list_appointments(business_id: str, start: datetime, end: datetime,
                          _=Depends(get_current_user)):
        return appointments.get_appointments(business_id, start, end)

    @app.post("/api/businesses/{business_id}/appointments", status_code=201)
    def create_appointment(business_id: str, data: Dict[str, Any],
                           _=Depends(get_current_user)):
        return appointments.create_appointment(business_id, data)

    @app.patch("/api/businesses/{business_id}/appointments/{appointment_id}")
    def update_appointment(business_id: str, appointment_id: int, data: Dict[str, Any],
                           _=Depends(get_current_user)):
        return appointments.update_appointment(business_id, appointment_id, data)

    @app.delete("/api/businesses/{business_id}/appointments/{appointment_id}")
    def delete_appointment(business_id: str, appointment_id: int,
                           _=Depends(get_current_user)):
        appointments.delete_appointment(business_id, appointment_id)
        return {"success": True}

    @app.get("/api/businesses/{business_id}/employees/{employee_id}/appointments")
    def list_employee_appointments(business_id: str, employee_id: int,
                                   _=Depends(get_current_user)):
        return appointments.get_appointments_by_employee(business_id, employee_id)

    # ==================== 客户 ====================

    @app.get("/api/businesses/{business_id}/customers")
    def list_customers(business_id: str, include_archived: bool = False,
                       _=Depends(get_current_user)):
        return customers.get_customers(business_id, include_archived=include_archived)

    @app.post("/api/businesses/{business_id}/customers", status_code=201)
    def create_customer(business_id: str, data: Dict[str, Any],
                        _=Depends(get_current_user)):
        return {"id": customers.create_customer(business_id, data)}

    @app.get("/api/businesses/{business_id}/customers/{customer_id}")
    def get_customer(business_id: str, customer_id: int, _=Depends(get_current_user)):
        customer = customers.get_customer(business_id, customer_id)
        if customer is None:
            raise NotFoundError(f"Cliente no encontrado: {customer_id}")
        return customer

    @app.patch("/api/businesses/{business_id}/customers/{customer_id}")
    def update_customer(business_id: str, customer_id: int, data: Dict[str, Any],
                        _=Depends(get_current_user)):
        return customers.update_customer(business_id, customer_id, data)

    @app.post("/api/businesses/{business_id}/customers/{customer_id}/archive")
    def archive_customer(business_id: str, customer_id: int, _=Depends(get_current_user)):
        return customers.archive_customer(business_id, customer_id)

    @app.delete("/api/businesses/{business_id}/customers/{customer_id}")
    def delete_customer(business_id: str, customer_id: int, _=Depends(get_current_user)):
        customers.delete_customer(business_id, customer_id)
        return {"success": True}

    @app.get("/api/businesses/{business_id}/customers/{customer_id}/appointments")
    def list_customer_appointments(business_id: str, customer_id: int,
                                   _=Depends(get_current_user)):
        return appointments.get_appointments_by_customer(business_id, customer_id)

    # ==================== 收藏 ====================

    @app.get("/api/users/{user_id}/favorites")
    def list_favorites(user_id: str, _=Depends(get_current_user)):
        return favorites.get_favorites(user_id)

    @app.post("/api/users/{user_id}/favorites/{business_id}")
    def toggle_favorite(user_id: str, business_id: str,
                        data: Optional[Dict[str, Any]] = None,
                        _=Depends(get_current_user)):
        business = db_manager.get_public_business(business_id)
        if business is None:
            raise NotFoundError(f"Negocio no encontrado: {business_id}")
        favorited = favorites.toggle_favorite(user_id, data or {}, business)
        return {"favorited": favorited}

    # ==================== 管理员通知 ====================

    @app.post("/api/notify-admin")
    def notify_admin(data: Dict[str, Any]):
        notification_type = data.get("type")
        if notification_type not in NOTIFICATION_TYPES:
            raise ValidationError("Tipo de notificación desconocido.")
        subject, body = render_admin_message(notification_type, data.get("data") or {})
        logger.info(f"管理员通知 [{settings.admin_email or '-'}] {subject}\n{body}")
        audit.log({
            "action": "notification.admin",
            "actor_uid": "system",
            "target_type": notification_type,
            "target_name": subject,
            "meta": {"body": body},
        })
        return {"ok": True}

    # ==================== 后台管理 ====================

    @app.get("/api/admin/audit")
    def list_audit(limit: int = Query(200, ge=1, le=1000),
                   actor: Optional[str] = None,
                   target_type: Optional[str] = None,
                   country: Optional[str] = None,
                   _=Depends(get_current_user)):
        return audit.list_entries(limit=limit, actor_uid=actor,
                                  target_type=target_type, country=country)

    @app.patch("/api/admin/businesses/{business_id}/status")
    def set_business_status(business_id: str, data: Dict[str, Any],
                            _=Depends(get_current_user)):
        return profiles.set_status(business_id, data.get("status", ""),
                                   actor=data.get("actor"))

    @app.put("/api/admin/businesses/{business_id}/plan")
    def set_business_plan(business_id: str, data: Dict[str, Any],
                          _=Depends(get_current_user)):
        return plans.set_plan(
            business_id, data.get("plan", ""),
            source=data.get("source", "crm_override"),
            overrides=data.get("overrides"),
            actor=data.get("actor"),
        )

    return app
