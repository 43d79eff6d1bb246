"""登録変更リポジトリ

送信済みの登録変更をキー・バリュー形式で保存する。
値は StoredRegistrationChanges のJSONで、形は読み込み時に防御的に検証する。
"""

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone

from eventreg.constants import (
    INVOICE_STATUS_UNPAID,
    INVOICE_STATUS_VOID,
    STORAGE_KEY_PREFIX,
)
from eventreg.models import RegistrationChangeRecord, StoredRegistrationChanges

logger = logging.getLogger(__name__)


def get_storage_key(registration_id: str) -> str:
    return f"{STORAGE_KEY_PREFIX}{registration_id}"


class SQLAlchemyRegistrationChangesRepository:
    """SQLAlchemyを使用した登録変更リポジトリ"""

    def __init__(self, session):
        """初期化

        Args:
            session: SQLAlchemyセッション
        """
        self.session = session

    def _get_record(self, registration_id: str) -> RegistrationChangeRecord | None:
        return self.session.get(RegistrationChangeRecord, get_storage_key(registration_id))

    def load(self, registration_id: str) -> StoredRegistrationChanges | None:
        """保存済みの変更を読み込む

        Args:
            registration_id: 登録ID

        Returns:
            保存済みの変更（未保存、またはJSONとして壊れている場合はNone）
        """
        record = self._get_record(registration_id)
        if record is None:
            return None

        try:
            data = json.loads(record.payload)
        except json.JSONDecodeError as e:
            logger.error("Failed to load registration changes for %s: %s", registration_id, e)
            return None

        return StoredRegistrationChanges.from_dict(data)

    def save(
        self,
        registration_id: str,
        changes: StoredRegistrationChanges,
        now: datetime | None = None,
    ) -> StoredRegistrationChanges:
        """変更を保存する

        直前に保存されていた現行請求書は、発行時点の変更内容とともに過去の請求書へ移す。
        元の請求書がある場合は置き換え済み（void）、ない場合は未払い（unpaid）とする。

        Args:
            registration_id: 登録ID
            changes: 保存する変更
            now: 保存日時（Noneなら現在時刻）

        Returns:
            実際に保存した内容（past_invoicesとsubmitted_atを反映済み）
        """
        now = now or datetime.now(timezone.utc)
        previous = self.load(registration_id)

        past_invoices = []
        if previous is not None:
            past_invoices = list(previous.past_invoices)
            if previous.new_invoice is not None:
                past_invoices.append(
                    replace(
                        previous.new_invoice,
                        status=(
                            INVOICE_STATUS_VOID
                            if changes.original_invoice is not None
                            else INVOICE_STATUS_UNPAID
                        ),
                        added_teams=previous.added_teams,
                        removed_team_ids=previous.removed_team_ids,
                        modified_rosters=previous.modified_rosters,
                    )
                )

        stored = replace(
            changes,
            past_invoices=tuple(past_invoices),
            submitted_at=now.isoformat(),
        )
        payload = json.dumps(stored.to_dict(), ensure_ascii=False)

        record = self._get_record(registration_id)
        if record is None:
            record = RegistrationChangeRecord(
                key=get_storage_key(registration_id),
                registration_id=registration_id,
                payload=payload,
                submitted_at=stored.submitted_at,
            )
            self.session.add(record)
        else:
            record.payload = payload
            record.submitted_at = stored.submitted_at
        self.session.flush()

        logger.info(
            "Saved registration changes for %s (%d past invoices)",
            registration_id,
            len(past_invoices),
        )
        return stored

    def clear(self, registration_id: str) -> bool:
        """保存済みの変更を削除する

        Returns:
            削除したレコードがあればTrue
        """
        record = self._get_record(registration_id)
        if record is None:
            return False
        self.session.delete(record)
        self.session.flush()
        return True

    def has_stored_changes(self, registration_id: str) -> bool:
        stored = self.load(registration_id)
        return stored is not None and stored.has_changes
