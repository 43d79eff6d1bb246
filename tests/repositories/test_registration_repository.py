"""RegistrationChangesRepositoryのテスト"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from eventreg.models import (
    Base,
    RegistrationChangeRecord,
    RosterMember,
    StoredInvoiceInfo,
    StoredRegistrationChanges,
    TeamEntry,
)
from eventreg.repositories.registration_repository import (
    SQLAlchemyRegistrationChangesRepository,
    get_storage_key,
)

NOW = datetime(2025, 3, 10, 9, 30, tzinfo=timezone.utc)


def make_changes(invoice_number: str, with_original: bool = True) -> StoredRegistrationChanges:
    """テスト用の変更スナップショット"""
    original = None
    if with_original:
        original = StoredInvoiceInfo(invoice_number="INV-1042", invoice_date="2025-02-01", total=1495.0)
    return StoredRegistrationChanges(
        added_teams=(
            TeamEntry(
                id="new-1",
                division="Open",
                name="Hawks",
                members=(RosterMember(name="Ann Lee"),),
            ),
        ),
        removed_team_ids=("team-1",),
        modified_rosters={"team-2": (RosterMember(name="Bo", role="Coach"),)},
        new_invoice=StoredInvoiceInfo(
            invoice_number=invoice_number, invoice_date="2025-03-01", total=1196.0
        ),
        original_invoice=original,
    )


class TestSQLAlchemyRegistrationChangesRepository:
    """SQLAlchemyRegistrationChangesRepositoryのテスト"""

    @pytest.fixture
    def db_session(self, tmp_path):
        """テスト用DBセッション"""
        db_path = tmp_path / "test.db"
        engine = create_engine(f"sqlite:///{db_path}")
        Base.metadata.create_all(engine)
        session = Session(engine)
        yield session
        session.close()

    @pytest.fixture
    def repository(self, db_session):
        """テスト用リポジトリ"""
        return SQLAlchemyRegistrationChangesRepository(db_session)

    def test_storage_key(self):
        assert get_storage_key("reg-001") == "registration-edit-reg-001"

    def test_未保存ならNoneを返す(self, repository):
        assert repository.load("reg-001") is None
        assert repository.has_stored_changes("reg-001") is False

    def test_保存して読み込める(self, repository):
        """保存した内容をそのまま読み戻せる"""
        repository.save("reg-001", make_changes("INV-1042-002"), now=NOW)

        loaded = repository.load("reg-001")

        assert loaded.submitted_at == NOW.isoformat()
        assert loaded.added_teams[0].name == "Hawks"
        assert loaded.added_teams[0].members[0].name == "Ann Lee"
        assert loaded.removed_team_ids == ("team-1",)
        assert loaded.modified_rosters["team-2"][0].role == "Coach"
        assert loaded.new_invoice.invoice_number == "INV-1042-002"
        assert loaded.original_invoice.total == pytest.approx(1495.0)
        assert loaded.past_invoices == ()
        assert repository.has_stored_changes("reg-001") is True

    def test_再保存で現行請求書が過去の請求書に移る(self, repository):
        """元の請求書がある場合、置き換えた請求書はvoidになる"""
        repository.save("reg-001", make_changes("INV-1042-002"), now=NOW)
        stored = repository.save("reg-001", make_changes("INV-1042-003"), now=NOW)

        assert len(stored.past_invoices) == 1
        past = stored.past_invoices[0]
        assert past.invoice_number == "INV-1042-002"
        assert past.status == "void"
        assert past.removed_team_ids == ("team-1",)
        assert [team.id for team in past.added_teams] == ["new-1"]

        loaded = repository.load("reg-001")
        assert loaded.new_invoice.invoice_number == "INV-1042-003"
        assert loaded.past_invoices[0].status == "void"

    def test_元の請求書がなければunpaidになる(self, repository):
        repository.save("reg-001", make_changes("INV-002", with_original=False), now=NOW)
        stored = repository.save("reg-001", make_changes("INV-003", with_original=False), now=NOW)

        assert stored.past_invoices[0].status == "unpaid"

    def test_過去の請求書は古い順に蓄積される(self, repository):
        for number in ("INV-002", "INV-003", "INV-004"):
            repository.save("reg-001", make_changes(number), now=NOW)

        loaded = repository.load("reg-001")
        assert [info.invoice_number for info in loaded.past_invoices] == ["INV-002", "INV-003"]

    def test_登録IDごとに独立している(self, repository):
        repository.save("reg-001", make_changes("INV-002"), now=NOW)
        assert repository.load("reg-002") is None

    def test_削除できる(self, repository):
        repository.save("reg-001", make_changes("INV-002"), now=NOW)

        assert repository.clear("reg-001") is True
        assert repository.load("reg-001") is None
        assert repository.clear("reg-001") is False

    def test_壊れたJSONはNoneとして扱う(self, repository, db_session):
        """JSONとして解析できない保存値は未保存として扱う"""
        db_session.add(
            RegistrationChangeRecord(
                key=get_storage_key("reg-001"),
                registration_id="reg-001",
                payload="{not json",
            )
        )
        db_session.flush()

        assert repository.load("reg-001") is None

    def test_形の合わない値は空のデフォルトになる(self, repository, db_session):
        db_session.add(
            RegistrationChangeRecord(
                key=get_storage_key("reg-001"),
                registration_id="reg-001",
                payload='{"addedTeams": "oops", "removedTeamIds": 5, "pastInvoices": {}}',
            )
        )
        db_session.flush()

        loaded = repository.load("reg-001")
        assert loaded.added_teams == ()
        assert loaded.removed_team_ids == ()
        assert loaded.past_invoices == ()
        assert loaded.has_changes is False

    def test_数値の壊れた保存値でも読み込める(self, repository, db_session):
        """合計やチーム人数が数値でなくても例外にせず既定値で読み込む"""
        db_session.add(
            RegistrationChangeRecord(
                key=get_storage_key("reg-001"),
                registration_id="reg-001",
                payload=(
                    '{"originalInvoice": {"invoiceNumber": "INV-1042", "total": "1,495.00"},'
                    ' "newInvoice": {"invoiceNumber": "INV-002", "total": "n/a"},'
                    ' "addedTeams": [{"id": "a", "division": "Open", "teamSize": "big"}]}'
                ),
            )
        )
        db_session.flush()

        loaded = repository.load("reg-001")

        assert loaded.original_invoice.total == 0.0
        assert loaded.new_invoice.total == 0.0
        assert loaded.added_teams[0].team_size is None

        stored = repository.save("reg-001", make_changes("INV-003"), now=NOW)
        assert stored.past_invoices[0].invoice_number == "INV-002"
