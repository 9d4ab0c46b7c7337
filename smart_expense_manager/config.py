import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Default to local SQLite, but allow override for a hosted Postgres
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///smart_expense_manager.db")

# Goals and category budgets live in a key-value store: local folder or S3
DATA_DIR = Path(os.getenv("SEM_DATA_DIR", "smart_expense_manager/data"))
S3_BUCKET = os.getenv("S3_BUCKET")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

CURRENCY = os.getenv("SEM_CURRENCY", "₹")
LOG_LEVEL = os.getenv("SEM_LOG_LEVEL")

MONTHS_BACK = int(os.getenv("SEM_MONTHS_BACK", "6"))
RECENT_LIMIT = int(os.getenv("SEM_RECENT_LIMIT", "10"))
