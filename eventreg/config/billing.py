"""請求計算の既定値

税率や価格が取得できない場合のフォールバック値を定義する。
"""

# 元の請求書の小計が0で実効税率を導出できない場合の税率
FALLBACK_TAX_RATE = 0.15

# 請求書発行時の既定税率（GST 5% + QST 9.975%）
DEFAULT_GST_RATE = 0.05
DEFAULT_QST_RATE = 0.09975

# 追加チームのディビジョン価格が見つからない場合の1人あたり単価
DEFAULT_UNIT_PRICE = 33.75

# ロスター未読込の追加チームの想定人数
DEFAULT_TEAM_SIZE = 24
