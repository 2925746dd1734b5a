# marketplace/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./marketplace.db")

# pusty REDIS_URL -> locki w procesie (jeden worker)
REDIS_URL = os.getenv("REDIS_URL", "")
CART_LOCK_TTL_SECONDS = int(os.getenv("CART_LOCK_TTL_SECONDS", 30))
CART_LOCK_WAIT_SECONDS = float(os.getenv("CART_LOCK_WAIT_SECONDS", 5))

CATALOG_BACKEND = os.getenv("CATALOG_BACKEND", "database")
PRODUCT_SERVICE_URL = os.getenv("PRODUCT_SERVICE_URL", "http://product-service:8000")
PRODUCT_SERVICE_TIMEOUT = float(os.getenv("PRODUCT_SERVICE_TIMEOUT", 2))

JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
