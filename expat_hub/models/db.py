from sqlmodel import SQLModel, Session, create_engine

# ensure models registered
from expat_hub.models import user_account  # noqa: F401


class Database:
    """数据库句柄

    由应用工厂创建并挂在 app.state 上，生命周期与进程一致。
    """

    def __init__(self, url: str, echo: bool = False):
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.url = url
        self.engine = create_engine(url, echo=echo, connect_args=connect_args)

    def init_db(self) -> None:
        """初始化数据库，创建所有表。"""
        SQLModel.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """获取 Session，用于 CRUD 操作"""
        return Session(self.engine, expire_on_commit=False)

    def dispose(self) -> None:
        self.engine.dispose()
