"""对外接口

- web.app: FastAPI HTTP API
"""
