"""
HTML pages for the admin analytics dashboard.
"""

import hmac
from typing import Dict, List, Optional

import pandas as pd

PAGE_STYLE = """
body { background-color: #111827; color: #e5e7eb; font-family: sans-serif; }
.card { background: #1f2937; border: 1px solid #374151; border-radius: 12px; padding: 2rem; }
table { width: 100%; border-collapse: collapse; }
th { text-align: left; color: #9ca3af; text-transform: uppercase; font-size: 0.75rem; }
th, td { padding: 0.75rem 1.5rem; border-bottom: 1px solid #374151; }
a { color: #9ca3af; }
"""

LOGIN_PAGE = f"""<!DOCTYPE html>
<html>
<head>
  <title>Admin Login</title>
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <style>{PAGE_STYLE}</style>
</head>
<body>
  <div class="card" style="max-width: 28rem; margin: 10vh auto;">
    <h1>Admin Access</h1>
    <form method="get" action="/admin/stats">
      <label for="key">Enter API Key</label>
      <input type="password" id="key" name="key" placeholder="sk-..." required autofocus>
      <button type="submit">Access Dashboard</button>
    </form>
    <p><a href="/">&larr; Back to App</a></p>
  </div>
</body>
</html>
"""

COLUMNS = {
    "date": "Date",
    "unique": "Unique Visitors",
    "views": "Page Views",
    "reports": "Reports Generated",
}


def is_authorized(provided_key: Optional[str], valid_key: Optional[str]) -> bool:
    """Shared-secret check; an unset secret never authorizes."""
    if not valid_key or provided_key is None:
        return False
    return hmac.compare_digest(provided_key.encode("utf-8"), valid_key.encode("utf-8"))


def render_login_page() -> str:
    return LOGIN_PAGE


def render_dashboard(rows: List[Dict[str, object]]) -> str:
    """Render daily counter rows as the dashboard page."""
    frame = pd.DataFrame(rows, columns=list(COLUMNS.keys())).rename(columns=COLUMNS)
    table = frame.to_html(index=False, border=0, classes="stats", escape=True)
    return f"""<!DOCTYPE html>
<html>
<head>
  <title>Analytics | Show Marketer</title>
  <style>{PAGE_STYLE}</style>
</head>
<body style="max-width: 56rem; margin: 2rem auto;">
  <h1>Analytics Dashboard</h1>
  <p><a href="/">Back to App</a></p>
  <div class="card">
{table}
  </div>
</body>
</html>
"""
