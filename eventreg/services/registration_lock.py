"""登録の編集可否判定"""

import logging
import re
from datetime import date, datetime, time, timezone

logger = logging.getLogger(__name__)

_DATE_ONLY = re.compile(r"\d{4}-\d{2}-\d{2}")


def _parse_deadline(value: str) -> datetime | None:
    """締切日時を解析する

    日付のみの値（"2025-03-15"）はUTCの0時、オフセットのない日時はローカル時刻として扱う。
    """
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.warning("Unparseable registration deadline: %r", value)
        return None
    if parsed.tzinfo is None:
        if _DATE_ONLY.fullmatch(value.strip()):
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone()
    return parsed


def _to_aware(value: date | datetime | None) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        return value.astimezone()
    return value


def is_registration_locked(
    paid_at: str | None = None,
    registration_deadline: str | None = None,
    payment_deadline: str | None = None,
    reference_date: date | datetime | None = None,
) -> bool:
    """登録がロックされている（編集できない）かを判定する

    支払い済みなら常にロック。それ以外は登録締切（なければ支払期限）を過ぎていればロック。
    解析できない締切はロックの理由にしない。

    Args:
        paid_at: 支払日時
        registration_deadline: 登録締切
        payment_deadline: 支払期限
        reference_date: 基準日時（Noneなら現在時刻、naiveな値はローカル時刻）

    Returns:
        ロックされていればTrue
    """
    if paid_at:
        return True

    deadline_string = registration_deadline or payment_deadline
    if not deadline_string:
        return False

    deadline = _parse_deadline(deadline_string)
    if deadline is None:
        return False

    return _to_aware(reference_date) > deadline
