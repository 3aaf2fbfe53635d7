"""
Bulletin site
=============

Run with:
    python main.py

Configuration comes from the environment or a .env file
(SESSION_SECRET, DATABASE_URL, PORT, GOOGLE_GEMINI_API_KEY, ...).
"""

from flask import Flask

from bulletin import Bulletin
from bulletin.core import Config

app = Flask(__name__)
app.config['SESSION_COOKIE_SECURE'] = not app.debug

bulletin = Bulletin(app)


if __name__ == '__main__':
    print(f"[BULLETIN] Starting on http://localhost:{Config.PORT}")
    app.run(host='0.0.0.0', port=Config.PORT)
