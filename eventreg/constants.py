"""Constants for event registration management."""

# ロスター上の役割（先頭のみ大文字に正規化した値）
DEFAULT_ROLE = "Athlete"
ROLE_OPTIONS: tuple[str, ...] = (
    DEFAULT_ROLE,
    "Coach",
    "Reservist",
    "Chaperone",
)

# 価格ティア
TIER_EARLY_BIRD = "earlyBird"
TIER_REGULAR = "regular"

# 請求書ステータス
INVOICE_STATUS_PAID = "paid"
INVOICE_STATUS_UNPAID = "unpaid"
INVOICE_STATUS_VOID = "void"

# 変更履歴の種別
CHANGE_ADDED = "added"
CHANGE_REMOVED = "removed"
CHANGE_MODIFIED = "modified"

# 登録変更を保存するキーの接頭辞
STORAGE_KEY_PREFIX = "registration-edit-"

# 名前が不明なチームの表示名
DEFAULT_NEW_TEAM_NAME = "New Team"
DEFAULT_IMPORTED_TEAM_NAME = "Imported Team"
