import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: str | None = os.getenv("JWT_SECRET")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    DATABASE_URL: str | None = os.getenv("DATABASE_URL")
    DB_USER: str | None = os.getenv("DB_USER")
    DB_PASS: str | None = os.getenv("DB_PASS")
    DB_HOST: str | None = os.getenv("DB_HOST")
    DB_PORT: str | None = os.getenv("DB_PORT")
    EQUIPMENT_DB_NAME: str | None = os.getenv("EQUIPMENT_DB_NAME")

    # Directory services (user-service, hospital-service)
    USER_SERVICE_URL: str = os.getenv(
        "USER_SERVICE_URL", "http://localhost:8001")
    HOSPITAL_SERVICE_URL: str = os.getenv(
        "HOSPITAL_SERVICE_URL", "http://localhost:8003")
    DIRECTORY_TIMEOUT_SECONDS: float = float(
        os.getenv("DIRECTORY_TIMEOUT_SECONDS", 5))

    SERIAL_CODE_MAX_ATTEMPTS: int = int(
        os.getenv("SERIAL_CODE_MAX_ATTEMPTS", 5))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS", "http://localhost:8080,http://127.0.0.1:8002")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

EQUIPMENT_DATABASE_URL = settings.DATABASE_URL or (
    f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.EQUIPMENT_DB_NAME}"
)
