"""RegistrationChangeRecordモデル定義"""

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eventreg.models.base import Base


class RegistrationChangeRecord(Base):
    """登録変更の保存レコード（キー・バリュー形式）

    Attributes:
        key: 保存キー（主キー、例: "registration-edit-reg-001"）
        registration_id: 登録ID
        payload: StoredRegistrationChangesのJSON
        submitted_at: 最終送信日時（ISO形式）
        created_at: 作成日時
        updated_at: 更新日時
    """

    __tablename__ = "registration_changes"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    registration_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    submitted_at: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<RegistrationChangeRecord(key={self.key!r})>"
