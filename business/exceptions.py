"""业务异常定义

异常消息面向最终用户（西班牙语），接口层直接透传给客户端。
"""


class MarketplaceError(Exception):
    """业务异常基类"""


class ValidationError(MarketplaceError, ValueError):
    """输入缺失或不合法"""


class ProfileExistsError(MarketplaceError):
    """商家资料已存在"""

    def __init__(self, message: str = "El perfil de negocio ya existe."):
        super().__init__(message)


class DuplicateCustomerError(MarketplaceError):
    """同一商家下已有相同电话或邮箱的客户"""

    def __init__(self, message: str = "Ya existe un cliente con este teléfono o correo."):
        super().__init__(message)


class NotFoundError(MarketplaceError):
    """记录不存在"""


class UploadError(MarketplaceError):
    """单个文件上传失败"""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Error al subir {filename}: {reason}")
