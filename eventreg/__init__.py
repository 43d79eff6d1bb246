"""大会エントリーの価格計算・請求・編集差分ライブラリ"""
