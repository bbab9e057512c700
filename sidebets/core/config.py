from decimal import Decimal
from dotenv import load_dotenv
import os

load_dotenv()

class Settings:
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    DEBUG = os.getenv("DEBUG", "False") == "True"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 120))

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sidebets.db")

    DEFAULT_CREDITS = Decimal(os.getenv("DEFAULT_CREDITS", "1000"))
    MAX_STAKE = Decimal(os.getenv("MAX_STAKE", "1000000"))

settings = Settings()
