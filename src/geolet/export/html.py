"""
どこで: `src/geolet/export/html.py`。
何を: SVG 文字列をブラウザで確認するための単一 HTML ページへ埋め込む。
"""

from __future__ import annotations

from html import escape

_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <style>
    body {{ display: flex; flex-direction: column; align-items: center; justify-content: center; min-height: 100vh; margin: 0; background: #f0f0f0; font-family: system-ui, sans-serif; }}
    .container {{ background: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); margin: 20px; }}
    h2 {{ margin-top: 0; color: #333; }}
    pre {{ background: #1e1e1e; color: #d4d4d4; padding: 16px; border-radius: 4px; overflow-x: auto; font-size: 12px; }}
  </style>
</head>
<body>
  <div class="container">
    <h2>{title}</h2>
{svg}
  </div>
  <div class="container">
    <h2>SVG Source</h2>
    <pre>{source}</pre>
  </div>
</body>
</html>
"""


def html_page(svg_text: str, *, title: str = "SVG Output") -> str:
    """SVG をインライン表示し、その下にエスケープ済みのソースを並べた HTML を返す。"""
    return _PAGE.format(title=escape(title), svg=svg_text, source=escape(svg_text))


__all__ = ["html_page"]
