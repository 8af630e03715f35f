import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./poleplace.db")
SQLALCHEMY_DATABASE_URI = DATABASE_URL

# JWT Settings (tokens are minted by the identity layer, we only verify them)
SECRET_KEY: str = os.getenv("SECRET_KEY", "a_very_secret_key_that_should_be_in_env_file_and_much_stronger")
ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 30))

# Marketplace settings
COMMISSION_RATE: Decimal = Decimal(os.getenv("COMMISSION_RATE", "0.05")) # 5% of each line total
DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "BRL")
DEFAULT_PER_PAGE: int = int(os.getenv("DEFAULT_PER_PAGE", 10))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

if COMMISSION_RATE < 0 or COMMISSION_RATE > 1:
    raise ValueError(f"COMMISSION_RATE must be between 0 and 1, got {COMMISSION_RATE}")
