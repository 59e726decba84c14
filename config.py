import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(os.getcwd(), "instance", "demo.db"),
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # --- ElaineCrud ---
    ELAINE_CRUD_MAX_EXPORT_RECORDS = int(os.environ.get("ELAINE_CRUD_MAX_EXPORT_RECORDS", "10000"))
    ELAINE_CRUD_PER_PAGE = int(os.environ.get("ELAINE_CRUD_PER_PAGE", "25"))
    # --- Migrations ---
    AUTO_ALEMBIC_UPGRADE = os.environ.get("AUTO_ALEMBIC_UPGRADE", "false").lower() in ("1", "true", "yes")
    ALEMBIC_INI = os.environ.get("ALEMBIC_INI", os.path.join(os.path.dirname(os.path.abspath(__file__)), "alembic.ini"))
