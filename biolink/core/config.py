from os import getenv

class Settings:
    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://biolink:biolink@db:5432/biolink")
    JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
    JWT_EXPIRE_MIN = int(getenv("JWT_EXPIRE_MIN", "15"))  # expire au bout de 15 minutes
    JWT_REFRESH_EXPIRE_MIN = int(getenv("JWT_REFRESH_EXPIRE_MIN", "43200"))  # expire au bout d'1 mois

    # Stripe
    STRIPE_SECRET_KEY = getenv("STRIPE_SECRET_KEY", "")
    STRIPE_WEBHOOK_SECRET = getenv("STRIPE_WEBHOOK_SECRET", "")
    STRIPE_PRO_PRICE_ID = getenv("STRIPE_PRO_PRICE_ID", "")
    APP_URL = getenv("APP_URL", "http://localhost:3000")

    # emails séparés par des virgules
    ADMIN_EMAILS = [e.strip().lower() for e in getenv("ADMIN_EMAILS", "").split(",") if e.strip()]

    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")

settings = Settings()
