"""Development entry point: `python app.py`.

Production: `flask --app qr_attendance.main:create_app run` behind a threaded/async server,
since each SSE observer holds one request open.
"""

import os

from qr_attendance.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "5000")), threaded=True)
