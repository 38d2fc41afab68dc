"""Entry point for ``flask run`` and WSGI servers."""

from src.academix.academix.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config.get("DEBUG", False))
