"""应用配置模块 - 使用 Pydantic Settings 管理环境变量"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Scrawl", description="应用名称")
    app_version: str = Field(default="0.1.0", description="应用版本")
    env: Literal["development", "production", "test"] = Field(
        default="development", description="运行环境"
    )
    debug: bool = Field(default=False, description="调试模式")
    log_level: str = Field(default="INFO", description="日志级别")
    log_format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        description="日志格式",
    )

    # Server
    host: str = Field(default="0.0.0.0", description="服务器地址")
    port: int = Field(default=3001, description="服务器端口")
    reload: bool = Field(default=False, description="热重载")

    # Database
    database_url: str = Field(
        default="sqlite:///./scrawl.db",
        description="数据库连接 URL",
    )

    # Security
    secret_key: str = Field(
        default="your-secret-key-change-this-in-production",
        description="JWT 密钥",
    )
    algorithm: str = Field(default="HS256", description="JWT 算法")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7, description="访问令牌过期时间（分钟）"
    )

    # CORS
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        description="允许的跨域源",
    )

    # Rooms
    room_capacity: int = Field(default=2, description="房间成员上限（持久成员与在线连接）")
    room_code_length: int = Field(default=6, description="房间邀请码长度")
    room_code_max_attempts: int = Field(default=10, description="邀请码冲突最大重试次数")

    # Uploads
    upload_dir: str = Field(default="./uploads", description="图片上传目录")
    upload_base_url: str = Field(default="/uploads", description="上传文件访问 URL 前缀")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, description="单个上传文件大小上限")


# 全局配置实例
settings = Settings()
