"""ディビジョン価格の解決

早割（earlyBird）の締切日と基準日から、現在有効な単価とティアを決める純粋関数群。
"""

import logging
from datetime import date, datetime, time, timedelta

from eventreg.constants import TIER_EARLY_BIRD, TIER_REGULAR
from eventreg.models.pricing import ActiveDivisionRate, DivisionPricing

logger = logging.getLogger(__name__)

# 締切日はその日の終わりまで有効
_END_OF_DAY = time(23, 59, 59, 999000)


def parse_iso_date_to_local(value: str) -> datetime | None:
    """"YYYY-MM-DD" をローカル時刻の一日の終わり（23:59:59.999）として解析する

    年・月・日は個別に解析する。
    月は1-12、日は1-31に丸め、月末を超えた日は翌月に繰り越す。
    3要素に分解できない場合は汎用のISO解析にフォールバックする。

    Args:
        value: 日付文字列

    Returns:
        ローカル時刻（naive）のdatetime。解析できない場合はNone。
    """
    parts = value.split("-")
    if len(parts) == 3:
        try:
            year, month, day = (int(part) for part in parts)
            safe_month = max(1, min(12, month or 1))
            safe_day = max(1, min(31, day or 1))
            first_of_month = datetime.combine(date(year, safe_month, 1), _END_OF_DAY)
            return first_of_month + timedelta(days=safe_day - 1)
        except ValueError:
            pass

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.warning("Unparseable early-bird deadline: %r", value)
        return None
    return to_local_naive(parsed)


def to_local_naive(value: date | datetime | None) -> datetime:
    """基準日をローカル時刻のnaiveなdatetimeに揃える

    Args:
        value: date（その日の0時として扱う）、datetime、またはNone（現在時刻）

    Returns:
        naiveなdatetime
    """
    if value is None:
        return datetime.now()
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


def resolve_division_pricing(
    pricing: DivisionPricing,
    reference_date: date | datetime | None = None,
) -> ActiveDivisionRate:
    """基準日時点で有効な単価を解決する

    早割があり、基準日が締切日（当日の終わりまで含む）以前なら早割価格、
    それ以外は通常価格を返す。

    Args:
        pricing: ディビジョンの価格表
        reference_date: 基準日（請求書の発行日。Noneなら現在時刻）

    Returns:
        ActiveDivisionRate
    """
    early_bird = pricing.early_bird
    if early_bird is not None and early_bird.deadline:
        deadline = parse_iso_date_to_local(early_bird.deadline)
        if deadline is not None and to_local_naive(reference_date) <= deadline:
            return ActiveDivisionRate(price=early_bird.price, tier=TIER_EARLY_BIRD)

    return ActiveDivisionRate(price=pricing.regular.price, tier=TIER_REGULAR)


def format_friendly_date(value: str) -> str:
    """締切日を "Mar 1, 2025" 形式で表示する（解析できなければそのまま返す）"""
    parsed = parse_iso_date_to_local(value)
    if parsed is None:
        return value
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def describe_tier(pricing: DivisionPricing, rate: ActiveDivisionRate) -> str:
    """価格の横に表示するティアのラベルを返す

    Args:
        pricing: ディビジョンの価格表
        rate: 解決済みの単価

    Returns:
        "Early bird · through <date>" / "Regular pricing" / "Standard pricing"
    """
    if rate.tier == TIER_EARLY_BIRD and pricing.early_bird is not None:
        return f"Early bird · through {format_friendly_date(pricing.early_bird.deadline or '')}"
    if pricing.early_bird is not None:
        return "Regular pricing"
    return "Standard pricing"
