"""日付解析ユーティリティ"""

import re
from datetime import date, datetime


def parse_reference_date(date_str: str) -> date:
    """基準日文字列をdateオブジェクトに変換する

    対応形式:
        - "2025-03-01"（ISO形式）
        - "2025-03-01T10:00:00"（ISO日時形式、日付部分のみ使用）
        - "2025/3/1"

    Args:
        date_str: 日付文字列

    Returns:
        dateオブジェクト

    Raises:
        ValueError: 解析できない場合
    """
    slash_match = re.fullmatch(r"(\d{4})/(\d{1,2})/(\d{1,2})", date_str)
    if slash_match:
        year = int(slash_match.group(1))
        month = int(slash_match.group(2))
        day = int(slash_match.group(3))
        return date(year, month, day)

    if re.match(r"\d{4}-\d{2}-\d{2}", date_str):
        try:
            return datetime.fromisoformat(date_str).date()
        except ValueError:
            pass

    raise ValueError(f"Invalid date string: {date_str}")
