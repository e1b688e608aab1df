from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    关系引擎配置（环境变量 / 项目根目录 .env）
    """

    # ======== 数据库 ========
    DB_URL: str = "mysql+pymysql://root:@127.0.0.1:3306/relations_db?charset=utf8mb4"
    DB_ECHO: bool = False

    # ======== 日志 ========
    LOG_LEVEL: str = "INFO"
    LOG_DEBUG: bool = False

    # ======== 业务开关 ========
    # 模块总开关只在接口层检查，引擎本身不关心
    CONNECTIONS_ENABLED: bool = True

    # 并发冲突（唯一约束 / 条件更新失败）时整体重试的次数
    TRANSACTION_RETRIES: int = 3

    # ======== 分页 ========
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
