"""データベース接続モジュール

送信済みの登録変更（registration_changes テーブル）を保存するSQLiteデータベースへの
接続をSQLAlchemyで管理する。
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from eventreg.models.base import Base


def get_engine(db_path: str) -> Engine:
    """登録変更DBのエンジンを作成する

    Args:
        db_path: データベースファイルのパス。
                 ":memory:" を指定するとインメモリDBを作成。
                 親ディレクトリがなければ作成する。

    Returns:
        SQLAlchemyのEngineオブジェクト
    """
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(f"sqlite:///{db_path}")


@contextmanager
def get_session(engine: Engine) -> Generator[Session, None, None]:
    """データベースセッションを取得するコンテキストマネージャー

    正常終了時は自動コミット、例外発生時は自動ロールバックを行う。

    Args:
        engine: SQLAlchemyのEngineオブジェクト

    Yields:
        Sessionオブジェクト

    Example:
        with get_session(engine) as session:
            repository = SQLAlchemyRegistrationChangesRepository(session)
            repository.save("reg-001", changes)
            # ブロックを抜けると自動コミットされる
    """
    session = sessionmaker(bind=engine)()

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """登録変更テーブルを作成する

    eventreg.models に定義されたテーブルを作成する。
    既に存在するテーブルには何もしない（冪等）。

    Args:
        engine: SQLAlchemyのEngineオブジェクト
    """
    Base.metadata.create_all(engine)
