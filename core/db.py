import os

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from core.config import cfg
from core.errors import StorageError
from core.events import log_event, E
from core.log import get_logger

logger = get_logger(__name__)


class Db:
    """数据库连接管理：engine 懒加载，会话由调用方负责关闭。"""

    def __init__(self, url: str = None):
        self.url = url
        self._engine = None
        self._session_factory = None

    def _resolve_url(self) -> str:
        url = self.url or str(cfg.get("db", "sqlite:///data/foundry.db"))
        if url.startswith("sqlite:///") and ":memory:" not in url:
            db_dir = os.path.dirname(url[len("sqlite:///"):])
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)
        return url

    def _init_engine(self):
        url = self._resolve_url()
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self._engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

    @property
    def engine(self):
        if self._engine is None:
            self._init_engine()
        return self._engine

    def get_session(self):
        if self._session_factory is None:
            self._init_engine()
        return self._session_factory()

    def create_tables(self):
        from core.models import Base
        Base.metadata.create_all(self.engine)
        log_event(logger, E.SYSTEM_DB_INIT, level="debug", url=self.engine.url.render_as_string(hide_password=True))


DB = Db()


def commit_or_raise(session, action: str = "commit"):
    """提交事务；失败时回滚并转换为 StorageError，保证调用方看到的是全有或全无。"""
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        log_event(logger, E.STORAGE_FAIL, level="error", action=action, error=e)
        raise StorageError() from e
