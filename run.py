# Entrypoint for local development: `python run.py` or `flask --app run seed`.
import os

from skillfolio import create_app

app = create_app()

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=app.config.get("DEBUG", False))
